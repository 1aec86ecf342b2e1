"""Dinic maximum-flow / minimum-cut solver.

``MfGraph`` models a directed network with integer capacities on the edges
and computes a maximum flow together with a corresponding minimum s-t cut.

For each edge ``e`` the graph stores its capacity ``c_e`` and current flow
``f_e``. Let ``g(v, f)`` be the inflow minus the outflow at vertex ``v``.
A call to ``flow(s, t)`` changes the flow so that ``0 <= f_e <= c_e`` still
holds, ``g(v, f)`` is unchanged for every ``v`` other than ``s`` and ``t``,
and the increase of ``g(t, f)`` is maximized.

Example:
    >>> g = MfGraph(3)
    >>> g.add_edge(0, 1, 2)
    0
    >>> g.add_edge(1, 2, 1)
    1
    >>> g.flow(0, 2)
    1
    >>> g.get_edge(0)
    MfEdge(src=0, dst=1, cap=2, flow=1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from flownet.config import FLOW_CONFIG, FlowConfig
from flownet.internal.queue import SimpleQueue
from flownet.logging import get_logger
from flownet.types import (
    Cap,
    MfEdge,
    Vertex,
    require_int,
    require_non_negative,
    require_vertex,
)

logger = get_logger(__name__)


@dataclass(slots=True)
class _Arc:
    """Residual arc. ``rev`` indexes the twin arc inside ``g[to]``."""

    to: int
    rev: int
    cap: Cap


@dataclass
class _FlowContext:
    """Scratch state of one ``flow_with_capacity`` call."""

    s: int
    t: int
    level: List[int]
    cursor: List[int]
    que: SimpleQueue[int]
    phases: int = 0


class MfGraph:
    """Directed multigraph with capacities, solved by Dinic's algorithm.

    Parallel edges and self-loops are allowed. Each edge is stored as a
    forward arc at its tail and a backward arc at its head; the forward arc
    holds the residual capacity and the backward arc holds the flow, so their
    sum is always the original capacity.

    One instance may be solved repeatedly; every solve continues from the
    flow left by the previous one.
    """

    def __init__(self, n: int, config: Optional[FlowConfig] = None) -> None:
        """Create a graph with ``n`` vertices and no edges.

        Args:
            n: Number of vertices, ``0 <= n <= config.max_vertices``.
            config: Solver configuration. Defaults to ``FLOW_CONFIG``.

        Raises:
            ValueError: If ``n`` is not an integer or is out of bounds.
        """
        self._config = config if config is not None else FLOW_CONFIG
        n = require_non_negative(n, "Vertex count")
        if n > self._config.max_vertices:
            raise ValueError(
                f"Vertex count {n} exceeds the limit of {self._config.max_vertices}"
            )
        self._n = n
        self._pos: List[Tuple[int, int]] = []
        self._g: List[List[_Arc]] = [[] for _ in range(n)]

    @property
    def n(self) -> int:
        """Number of vertices."""
        return self._n

    def __len__(self) -> int:
        """Number of edges added so far."""
        return len(self._pos)

    def add_edge(self, src: Vertex, dst: Vertex, cap: Cap) -> int:
        """Add an edge from ``src`` to ``dst`` with capacity ``cap``.

        Args:
            src: Tail vertex.
            dst: Head vertex. May equal ``src``.
            cap: Capacity, ``cap >= 0``.

        Returns:
            The insertion index of the edge, used by ``get_edge`` and
            ``change_edge``.

        Raises:
            IndexError: If a vertex is out of range.
            ValueError: If ``cap`` is negative or not an integer.
            OverflowError: If ``cap`` exceeds the configured integer width.
        """
        src = require_vertex(src, self._n, "src")
        dst = require_vertex(dst, self._n, "dst")
        cap = self._config.check(require_non_negative(cap, "Capacity"), "Capacity")

        m = len(self._pos)
        self._pos.append((src, len(self._g[src])))
        # A self-loop appends both arcs to the same list; the twin lands one
        # slot after the forward arc.
        rev = len(self._g[dst]) + (1 if src == dst else 0)
        self._g[src].append(_Arc(dst, rev, cap))
        self._g[dst].append(_Arc(src, len(self._g[src]) - 1, 0))
        return m

    def get_edge(self, i: int) -> MfEdge:
        """Return the current state of the ``i``-th added edge.

        Raises:
            IndexError: If ``i`` is not a valid edge index.
        """
        frm, idx = self._pos[self._edge_index(i)]
        e = self._g[frm][idx]
        re = self._g[e.to][e.rev]
        return MfEdge(src=frm, dst=e.to, cap=e.cap + re.cap, flow=re.cap)

    def edges(self) -> List[MfEdge]:
        """Return the current state of all edges in insertion order."""
        return [self.get_edge(i) for i in range(len(self._pos))]

    def change_edge(self, i: int, new_cap: Cap, new_flow: Cap) -> None:
        """Overwrite the capacity and flow of the ``i``-th edge.

        Other edges are left untouched, so the caller is responsible for the
        flow staying conserved.

        Raises:
            IndexError: If ``i`` is not a valid edge index.
            ValueError: Unless ``0 <= new_flow <= new_cap``.
        """
        i = self._edge_index(i)
        new_cap = self._config.check(
            require_non_negative(new_cap, "Capacity"), "Capacity"
        )
        new_flow = require_non_negative(new_flow, "Flow")
        if new_flow > new_cap:
            raise ValueError(
                f"Flow {new_flow} exceeds capacity {new_cap} for edge {i}"
            )
        frm, idx = self._pos[i]
        e = self._g[frm][idx]
        e.cap = new_cap - new_flow
        self._g[e.to][e.rev].cap = new_flow

    def flow(self, s: Vertex, t: Vertex) -> Cap:
        """Augment the flow from ``s`` to ``t`` as much as possible.

        Complexity is ``O((n + m) sqrt(m))`` with unit capacities,
        ``O(n^2 m)`` in general and ``O(F (n + m))`` where ``F`` is the
        returned amount.

        Returns:
            The amount of flow augmented.
        """
        s = require_vertex(s, self._n, "s")
        # No augmentation can exceed the residual capacity leaving s.
        limit = sum(e.cap for e in self._g[s])
        return self.flow_with_capacity(s, t, limit)

    def flow_with_capacity(self, s: Vertex, t: Vertex, flow_limit: Cap) -> Cap:
        """Augment the flow from ``s`` to ``t`` until ``flow_limit`` is reached.

        Args:
            s: Source vertex.
            t: Sink vertex, ``t != s``.
            flow_limit: Maximum amount to augment, ``flow_limit >= 0``.

        Returns:
            The amount of flow augmented, at most ``flow_limit``.

        Raises:
            IndexError: If ``s`` or ``t`` is out of range.
            ValueError: If ``s == t`` or ``flow_limit`` is negative.
            OverflowError: If the result exceeds the configured integer width.
        """
        s = require_vertex(s, self._n, "s")
        t = require_vertex(t, self._n, "t")
        if s == t:
            raise ValueError(f"Source and sink must differ, got s == t == {s}")
        flow_limit = require_non_negative(flow_limit, "Flow limit")

        ctx = _FlowContext(
            s=s,
            t=t,
            level=[-1] * self._n,
            cursor=[0] * self._n,
            que=SimpleQueue(),
        )

        result = 0
        while result < flow_limit:
            self._bfs(ctx)
            if ctx.level[t] == -1:
                break
            ctx.phases += 1
            cursor = ctx.cursor
            for v in range(self._n):
                cursor[v] = 0
            while result < flow_limit:
                f = self._augment(ctx, flow_limit - result)
                if f == 0:
                    break
                result = self._config.check(result + f, "Flow")

        logger.debug(
            f"Max flow {s}->{t}: {result} units in {ctx.phases} phases "
            f"({self._n} vertices, {len(self._pos)} edges)"
        )
        return result

    def min_cut(self, s: Vertex) -> List[bool]:
        """Return which vertices are reachable from ``s`` in the residual graph.

        Directly after ``flow(s, t)`` the ``True`` side is the source side of
        a minimum s-t cut.

        Raises:
            IndexError: If ``s`` is out of range.
        """
        s = require_vertex(s, self._n, "s")
        visited = [False] * self._n
        que: SimpleQueue[int] = SimpleQueue(self._n)
        visited[s] = True
        que.push(s)
        while not que.empty():
            p = que.pop()
            for e in self._g[p]:
                if e.cap != 0 and not visited[e.to]:
                    visited[e.to] = True
                    que.push(e.to)
        return visited

    def min_cut_edges(self, s: Vertex) -> List[int]:
        """Return indices of edges leaving the ``min_cut(s)`` side.

        Directly after ``flow(s, t)`` these edges are saturated and their
        capacities add up to the flow value.
        """
        reachable = self.min_cut(s)
        cut = []
        for i, (frm, idx) in enumerate(self._pos):
            if reachable[frm] and not reachable[self._g[frm][idx].to]:
                cut.append(i)
        return cut

    def _edge_index(self, i: object) -> int:
        i = require_int(i, "Edge index")
        if not 0 <= i < len(self._pos):
            raise IndexError(
                f"Edge index {i} out of range for graph with {len(self._pos)} edges"
            )
        return i

    def _bfs(self, ctx: _FlowContext) -> None:
        """Level vertices by residual distance from ``s``, stopping at ``t``."""
        level = ctx.level
        for v in range(self._n):
            level[v] = -1
        level[ctx.s] = 0
        que = ctx.que
        que.clear()
        que.push(ctx.s)
        while not que.empty():
            v = que.pop()
            next_level = level[v] + 1
            for e in self._g[v]:
                if e.cap == 0 or level[e.to] >= 0:
                    continue
                level[e.to] = next_level
                if e.to == ctx.t:
                    return
                que.push(e.to)

    def _augment(self, ctx: _FlowContext, up: Cap) -> Cap:
        """Push one augmenting path of the level graph, walking from ``t`` to ``s``.

        The walk keeps the path on an explicit stack. At each vertex it resumes
        scanning at ``cursor[v]`` and follows the first arc that leads to a
        strictly lower level and whose twin still has residual capacity. A
        vertex with no such arc is a dead end for the rest of the phase: its
        cursor stays at the end of its arc list and the walk backs up one step,
        moving the predecessor's cursor past the arc that led there.

        Returns:
            The bottleneck pushed along the path, or 0 if ``t`` is blocked.
        """
        g = self._g
        s = ctx.s
        level = ctx.level
        cursor = ctx.cursor

        path: List[int] = [ctx.t]
        while True:
            v = path[-1]
            if v == s:
                break
            arcs = g[v]
            level_v = level[v]
            i = cursor[v]
            n_arcs = len(arcs)
            while i < n_arcs:
                e = arcs[i]
                if level[e.to] < level_v and g[e.to][e.rev].cap > 0:
                    break
                i += 1
            cursor[v] = i
            if i < n_arcs:
                path.append(arcs[i].to)
                continue
            path.pop()
            if not path:
                return 0
            cursor[path[-1]] += 1

        # path[k] reaches path[k + 1] through arc cursor[path[k]].
        c = up
        for v in path[:-1]:
            e = g[v][cursor[v]]
            c = min(c, g[e.to][e.rev].cap)
        for v in path[:-1]:
            e = g[v][cursor[v]]
            e.cap += c
            g[e.to][e.rev].cap -= c
        return c

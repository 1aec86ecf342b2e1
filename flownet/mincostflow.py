"""Minimum-cost flow by successive shortest paths with vertex potentials.

``McfGraph`` stores a flat list of edges. A solve lays the residual network
out as a ``Csr`` snapshot and repeatedly augments along a cheapest path found
by Dijkstra over reduced costs ``cost(u, v) - dual[v] + dual[u]``. Costs start
non-negative, and after every phase the potentials are shifted by the
shortest distances, which keeps all reduced costs of the residual graph
non-negative without ever running Bellman-Ford.

The result of a solve is the cost curve: a list of ``(flow, cost)``
breakpoints of the piecewise-linear, convex function mapping a flow amount
to the minimum cost of sending it.

Example:
    >>> g = McfGraph(3)
    >>> g.add_edge(0, 1, 1, 1)
    0
    >>> g.add_edge(1, 2, 1, 0)
    1
    >>> g.add_edge(0, 2, 2, 1)
    2
    >>> g.slope(0, 2)
    [(0, 0), (3, 3)]
"""

from __future__ import annotations

from dataclasses import dataclass
from heapq import heappop, heappush
from typing import List, Optional, Tuple

from flownet.config import FLOW_CONFIG, FlowConfig
from flownet.internal.csr import Csr
from flownet.internal.queue import SimpleQueue
from flownet.logging import get_logger
from flownet.types import (
    Cap,
    Cost,
    McfEdge,
    Vertex,
    require_int,
    require_non_negative,
    require_vertex,
)

logger = get_logger(__name__)

#: One breakpoint of the cost curve: cumulative flow and cumulative cost.
FlowCost = Tuple[Cap, Cost]


@dataclass(slots=True)
class _Arc:
    """Residual arc of the CSR snapshot. ``rev`` indexes the twin in ``elist``."""

    to: int
    rev: int
    cap: Cap
    cost: Cost


@dataclass
class _Edge:
    src: int
    dst: int
    cap: Cap
    flow: Cap
    cost: Cost


@dataclass
class _DualContext:
    """Scratch state of one ``slope_with_capacity`` call."""

    s: int
    t: int
    dual: List[Cost]
    dist: List[Optional[Cost]]
    prev_arc: List[int]
    visited: List[bool]
    que_min: SimpleQueue[int]
    heap: List[Tuple[Cost, int]]
    phases: int = 0


class McfGraph:
    """Directed multigraph with capacities and per-unit costs.

    Self-loops are rejected; parallel edges are allowed. An instance can be
    solved once: the residual snapshot of a solve is built from the edges'
    current flows, and a second solve is refused.
    """

    def __init__(self, n: int, config: Optional[FlowConfig] = None) -> None:
        """Create a graph with ``n`` vertices and no edges.

        Args:
            n: Number of vertices, ``0 <= n <= config.max_vertices``.
            config: Solver configuration. Defaults to ``FLOW_CONFIG``.
        """
        self._config = config if config is not None else FLOW_CONFIG
        n = require_non_negative(n, "Vertex count")
        if n > self._config.max_vertices:
            raise ValueError(
                f"Vertex count {n} exceeds the limit of {self._config.max_vertices}"
            )
        self._n = n
        self._edges: List[_Edge] = []
        self._solved = False

    @property
    def n(self) -> int:
        """Number of vertices."""
        return self._n

    @property
    def solved(self) -> bool:
        """Whether ``flow`` or ``slope`` has already been called."""
        return self._solved

    def __len__(self) -> int:
        """Number of edges added so far."""
        return len(self._edges)

    def add_edge(self, src: Vertex, dst: Vertex, cap: Cap, cost: Cost) -> int:
        """Add an edge from ``src`` to ``dst``.

        Args:
            src: Tail vertex.
            dst: Head vertex, ``dst != src``.
            cap: Capacity, ``cap >= 0``.
            cost: Per-unit cost, ``cost >= 0``.

        Returns:
            The insertion index of the edge.

        Raises:
            IndexError: If a vertex is out of range.
            ValueError: If ``src == dst`` or ``cap``/``cost`` is negative.
            OverflowError: If ``cap`` or ``cost`` exceeds the configured width.
        """
        src = require_vertex(src, self._n, "src")
        dst = require_vertex(dst, self._n, "dst")
        if src == dst:
            raise ValueError(f"Self-loops are not supported (vertex {src})")
        cap = self._config.check(require_non_negative(cap, "Capacity"), "Capacity")
        cost = self._config.check(require_non_negative(cost, "Cost"), "Cost")
        self._edges.append(_Edge(src, dst, cap, 0, cost))
        return len(self._edges) - 1

    def get_edge(self, i: int) -> McfEdge:
        """Return the ``i``-th added edge.

        Raises:
            IndexError: If ``i`` is not a valid edge index.
        """
        i = require_int(i, "Edge index")
        if not 0 <= i < len(self._edges):
            raise IndexError(
                f"Edge index {i} out of range for graph with {len(self._edges)} edges"
            )
        e = self._edges[i]
        return McfEdge(src=e.src, dst=e.dst, cap=e.cap, flow=e.flow, cost=e.cost)

    def edges(self) -> List[McfEdge]:
        """Return all edges in insertion order."""
        return [self.get_edge(i) for i in range(len(self._edges))]

    def flow(self, s: Vertex, t: Vertex) -> FlowCost:
        """Send as much flow as possible from ``s`` to ``t`` at minimum cost.

        Returns:
            ``(flow, cost)`` of the maximum flow.
        """
        return self.slope(s, t)[-1]

    def flow_with_capacity(self, s: Vertex, t: Vertex, flow_limit: Cap) -> FlowCost:
        """Send up to ``flow_limit`` units from ``s`` to ``t`` at minimum cost.

        Returns:
            ``(flow, cost)`` with ``flow <= flow_limit``.
        """
        return self.slope_with_capacity(s, t, flow_limit)[-1]

    def slope(self, s: Vertex, t: Vertex) -> List[FlowCost]:
        """Return the cost curve of the maximum flow from ``s`` to ``t``."""
        s = require_vertex(s, self._n, "s")
        # No augmentation can exceed the residual capacity leaving s.
        limit = 0
        for e in self._edges:
            if e.src == s:
                limit += e.cap - e.flow
            elif e.dst == s:
                limit += e.flow
        return self.slope_with_capacity(s, t, limit)

    def slope_with_capacity(
        self, s: Vertex, t: Vertex, flow_limit: Cap
    ) -> List[FlowCost]:
        """Return the cost curve of a minimum-cost flow of at most ``flow_limit``.

        The first breakpoint is ``(0, 0)`` and the last one is the total
        ``(flow, cost)``. Flow strictly increases along the list, cost never
        decreases and no three consecutive breakpoints are collinear.
        Complexity is ``O(F (n + m) log(n + m))`` where ``F`` is the flow sent.

        Args:
            s: Source vertex.
            t: Sink vertex, ``t != s``.
            flow_limit: Maximum amount to send, ``flow_limit >= 0``.

        Raises:
            IndexError: If ``s`` or ``t`` is out of range.
            ValueError: If ``s == t`` or ``flow_limit`` is negative.
            RuntimeError: If this graph has already been solved.
            OverflowError: If a result exceeds the configured integer width.
        """
        s = require_vertex(s, self._n, "s")
        t = require_vertex(t, self._n, "t")
        if s == t:
            raise ValueError(f"Source and sink must differ, got s == t == {s}")
        flow_limit = require_non_negative(flow_limit, "Flow limit")
        if self._solved:
            raise RuntimeError(
                "McfGraph has already been solved; build a new graph to solve again"
            )
        self._solved = True

        g, edge_idx = self._build_residual()
        ctx = _DualContext(
            s=s,
            t=t,
            dual=[0] * self._n,
            dist=[None] * self._n,
            prev_arc=[-1] * self._n,
            visited=[False] * self._n,
            que_min=SimpleQueue(),
            heap=[],
        )
        result = self._augment_all(g, ctx, flow_limit)

        for e, idx in zip(self._edges, edge_idx):
            e.flow = e.cap - g.elist[idx].cap

        logger.debug(
            f"Min cost flow {s}->{t}: flow={result[-1][0]} cost={result[-1][1]} "
            f"in {ctx.phases} phases, {len(result)} breakpoints"
        )
        return result

    def _build_residual(self) -> Tuple[Csr[_Arc], List[int]]:
        """Lay out the residual graph and link every arc to its twin.

        Returns:
            The CSR snapshot and, per edge, the ``elist`` index of its forward arc.
        """
        n = self._n
        m = len(self._edges)
        degree = [0] * n
        edge_idx = [0] * m
        redge_idx = [0] * m
        elist: List[Tuple[int, _Arc]] = []
        for i, e in enumerate(self._edges):
            edge_idx[i] = degree[e.src]
            degree[e.src] += 1
            redge_idx[i] = degree[e.dst]
            degree[e.dst] += 1
            elist.append((e.src, _Arc(e.dst, -1, e.cap - e.flow, e.cost)))
            elist.append((e.dst, _Arc(e.src, -1, e.flow, -e.cost)))

        g: Csr[_Arc] = Csr(n, elist, _Arc(0, -1, 0, 0))
        for i, e in enumerate(self._edges):
            edge_idx[i] += g.start[e.src]
            redge_idx[i] += g.start[e.dst]
            g.elist[edge_idx[i]].rev = redge_idx[i]
            g.elist[redge_idx[i]].rev = edge_idx[i]
        return g, edge_idx

    def _augment_all(
        self, g: Csr[_Arc], ctx: _DualContext, flow_limit: Cap
    ) -> List[FlowCost]:
        s, t = ctx.s, ctx.t
        elist = g.elist
        prev_arc = ctx.prev_arc
        check = self._config.check

        flow = 0
        cost = 0
        prev_cost_per_flow: Optional[Cost] = None
        result: List[FlowCost] = [(0, 0)]
        while flow < flow_limit:
            if not self._refine_dual(g, ctx):
                break
            ctx.phases += 1

            c = flow_limit - flow
            v = t
            while v != s:
                back = elist[prev_arc[v]]
                c = min(c, elist[back.rev].cap)
                v = back.to
            v = t
            while v != s:
                back = elist[prev_arc[v]]
                back.cap += c
                elist[back.rev].cap -= c
                v = back.to

            d = -ctx.dual[s]
            flow = check(flow + c, "Flow")
            cost = check(cost + c * d, "Cost")
            if prev_cost_per_flow == d:
                result.pop()
            result.append((flow, cost))
            prev_cost_per_flow = d
        return result

    def _refine_dual(self, g: Csr[_Arc], ctx: _DualContext) -> bool:
        """Run Dijkstra over reduced costs and shift the potentials.

        ``prev_arc[v]`` receives the index of the twin of the arc that reached
        ``v``, so ``elist[prev_arc[v]].to`` is the predecessor of ``v``.

        Returns:
            False if ``t`` is unreachable in the residual graph.
        """
        n = self._n
        s, t = ctx.s, ctx.t
        elist = g.elist
        dual = ctx.dual
        dist = ctx.dist
        prev_arc = ctx.prev_arc
        visited = ctx.visited
        que_min = ctx.que_min
        heap = ctx.heap
        fast_path = self._config.zero_distance_fast_path

        for v in range(n):
            dist[v] = None
            visited[v] = False
        que_min.clear()
        heap.clear()

        dist[s] = 0
        que_min.push(s)
        while not que_min.empty() or heap:
            if not que_min.empty():
                v = que_min.pop()
            else:
                v = heappop(heap)[1]
            if visited[v]:
                continue
            visited[v] = True
            if v == t:
                break
            dual_v = dual[v]
            dist_v = dist[v]
            for i in g.arcs(v):
                e = elist[i]
                if not e.cap:
                    continue
                # Reduced cost, non-negative by the potential invariant
                reduced = e.cost - dual[e.to] + dual_v
                dist_to = dist_v + reduced
                old = dist[e.to]
                if old is None or dist_to < old:
                    dist[e.to] = dist_to
                    prev_arc[e.to] = e.rev
                    if fast_path and dist_to == dist_v:
                        que_min.push(e.to)
                    else:
                        heappush(heap, (dist_to, e.to))

        if not visited[t]:
            return False

        # Unvisited vertices are at least dist[t] away and keep their potential.
        dist_t = dist[t]
        for v in range(n):
            if visited[v]:
                dual[v] -= dist_t - dist[v]
        return True

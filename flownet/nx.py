"""NetworkX graph conversion utilities.

This module builds flownet solvers from NetworkX graphs and maps the solved
flows back onto the original nodes and edges.

Example:
    >>> import networkx as nx
    >>> from flownet.nx import max_flow, write_flows, to_mf_graph
    >>>
    >>> G = nx.DiGraph()
    >>> G.add_edge("A", "B", capacity=3)
    >>> G.add_edge("B", "C", capacity=2)
    >>>
    >>> # One-off solve with results keyed by original names
    >>> max_flow(G, "A", "C").value
    2
    >>>
    >>> # Or keep the solver and the mappings around
    >>> graph, node_map, edge_map = to_mf_graph(G)
    >>> graph.flow(node_map.to_index["A"], node_map.to_index["C"])
    2
    >>> write_flows(G, edge_map, graph.edges())
    >>> G.edges["A", "B"]["flow"]
    2
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Hashable,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

import networkx as nx

from flownet.config import FlowConfig
from flownet.logging import get_logger
from flownet.maxflow import MfGraph
from flownet.mincostflow import McfGraph
from flownet.types import MfEdge, McfEdge, require_int

logger = get_logger(__name__)

NxGraph = Union[nx.DiGraph, nx.MultiDiGraph, nx.Graph, nx.MultiGraph]

# Type alias for edge references: (source_node, target_node, edge_key)
EdgeRef = Tuple[Hashable, Hashable, Any]


@dataclass
class NodeMap:
    """Bidirectional mapping between node names and vertex indices.

    Node names (any hashable) are mapped to contiguous indices starting at 0,
    in ``str`` order so the numbering is deterministic.

    Attributes:
        to_index: Maps original node names to vertex indices.
        to_name: Maps vertex indices back to node names.
    """

    to_index: Dict[Hashable, int] = field(default_factory=dict)
    to_name: Dict[int, Hashable] = field(default_factory=dict)

    @classmethod
    def from_names(cls, names: List[Hashable]) -> "NodeMap":
        """Create a NodeMap from a list of node names in index order."""
        to_index = {name: i for i, name in enumerate(names)}
        to_name = {i: name for i, name in enumerate(names)}
        return cls(to_index=to_index, to_name=to_name)

    def __len__(self) -> int:
        return len(self.to_index)


@dataclass
class EdgeMap:
    """Mapping between solver edge indices and original edge references.

    Undirected NetworkX edges become two solver edges, one per direction. The
    reverse one is referenced as ``(v, u, key)`` in ``to_ref`` while both are
    listed under the original ``(u, v, key)`` in ``from_ref``.

    Attributes:
        to_ref: Maps solver edge index to the directed ``(u, v, key)`` it models.
        from_ref: Maps an original ``(u, v, key)`` to its solver edge indices.
        skipped: Original edges left out of the solver (self-loops of a
            cost-flow graph). They never carry flow.
    """

    to_ref: Dict[int, EdgeRef] = field(default_factory=dict)
    from_ref: Dict[EdgeRef, List[int]] = field(default_factory=dict)
    skipped: List[EdgeRef] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.to_ref)


@dataclass(frozen=True)
class FlowResult:
    """Flow solution expressed with the original NetworkX names.

    Attributes:
        value: Total flow sent from source to sink.
        cost: Total cost of the flow, or None for a max-flow solve.
        edge_flow: Flow on each directed edge reference (see ``EdgeMap.to_ref``).
        reachable: Source side of the minimum cut. Only filled by an unlimited
            max-flow solve.
        min_cut: Edge references crossing the minimum cut. Only filled by an
            unlimited max-flow solve.
        slope: Cost curve breakpoints (cost-flow solves only).
    """

    value: int
    cost: Optional[int]
    edge_flow: Dict[EdgeRef, int]
    reachable: Set[Hashable] = field(default_factory=set)
    min_cut: List[EdgeRef] = field(default_factory=list)
    slope: List[Tuple[int, int]] = field(default_factory=list)


def _check_graph(G: Any) -> None:
    if not isinstance(G, (nx.DiGraph, nx.MultiDiGraph, nx.Graph, nx.MultiGraph)):
        raise TypeError(
            f"Expected NetworkX graph (DiGraph, MultiDiGraph, Graph, MultiGraph), "
            f"got {type(G).__name__}"
        )


def _as_int(value: Any, attr: str, ref: EdgeRef) -> int:
    """Coerce an integral attribute value (``3`` or ``3.0``) to ``int``."""
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(
                f"Edge {ref}: '{attr}' must be an integer, got {value!r}"
            )
        return int(value)
    try:
        return require_int(value, attr)
    except ValueError as exc:
        raise ValueError(f"Edge {ref}: {exc}") from exc


def _iter_edges(G: NxGraph) -> Iterator[Tuple[Hashable, Hashable, Any, dict]]:
    if G.is_multigraph():
        yield from G.edges(keys=True, data=True)
    else:
        for u, v, d in G.edges(data=True):
            yield u, v, 0, d


def _node_map(G: NxGraph) -> NodeMap:
    return NodeMap.from_names(sorted(G.nodes(), key=str))


def _read_capacity(
    data: dict, attr: str, default: Optional[int], ref: EdgeRef
) -> int:
    if attr in data:
        return _as_int(data[attr], attr, ref)
    if default is None:
        raise ValueError(f"Edge {ref} has no '{attr}' attribute")
    return default


def _register(
    edge_map: EdgeMap, ext_id: int, ref: EdgeRef, directed_ref: EdgeRef
) -> None:
    edge_map.to_ref[ext_id] = directed_ref
    edge_map.from_ref.setdefault(ref, []).append(ext_id)


def to_mf_graph(
    G: NxGraph,
    *,
    capacity_attr: str = "capacity",
    default_capacity: Optional[int] = None,
    config: Optional[FlowConfig] = None,
) -> Tuple[MfGraph, NodeMap, EdgeMap]:
    """Build a max-flow graph from a NetworkX graph.

    Args:
        G: NetworkX graph (DiGraph, MultiDiGraph, Graph, or MultiGraph).
            Undirected edges are added in both directions.
        capacity_attr: Edge attribute holding the integer capacity.
        default_capacity: Capacity for edges missing ``capacity_attr``.
            None makes a missing attribute an error.
        config: Solver configuration.

    Returns:
        Tuple of (graph, node_map, edge_map).

    Raises:
        TypeError: If G is not a NetworkX graph.
        ValueError: If a capacity is missing, non-integral or negative.
    """
    _check_graph(G)
    node_map = _node_map(G)
    graph = MfGraph(len(node_map), config=config)
    edge_map = EdgeMap()
    directed = G.is_directed()

    for u, v, key, data in _iter_edges(G):
        ref: EdgeRef = (u, v, key)
        cap = _read_capacity(data, capacity_attr, default_capacity, ref)
        su, sv = node_map.to_index[u], node_map.to_index[v]
        _register(edge_map, graph.add_edge(su, sv, cap), ref, ref)
        if not directed and u != v:
            _register(edge_map, graph.add_edge(sv, su, cap), ref, (v, u, key))

    logger.debug(
        f"Built MfGraph from {type(G).__name__}: "
        f"{graph.n} vertices, {len(graph)} edges"
    )
    return graph, node_map, edge_map


def to_mcf_graph(
    G: NxGraph,
    *,
    capacity_attr: str = "capacity",
    cost_attr: str = "cost",
    default_capacity: Optional[int] = None,
    default_cost: int = 0,
    config: Optional[FlowConfig] = None,
) -> Tuple[McfGraph, NodeMap, EdgeMap]:
    """Build a min-cost-flow graph from a NetworkX graph.

    Self-loops cannot carry useful flow with non-negative costs; they are
    recorded in ``EdgeMap.skipped`` instead of being added.

    Args:
        G: NetworkX graph. Undirected edges are added in both directions.
        capacity_attr: Edge attribute holding the integer capacity.
        cost_attr: Edge attribute holding the integer per-unit cost.
        default_capacity: Capacity for edges missing ``capacity_attr``.
        default_cost: Cost for edges missing ``cost_attr``.
        config: Solver configuration.

    Returns:
        Tuple of (graph, node_map, edge_map).
    """
    _check_graph(G)
    node_map = _node_map(G)
    graph = McfGraph(len(node_map), config=config)
    edge_map = EdgeMap()
    directed = G.is_directed()

    for u, v, key, data in _iter_edges(G):
        ref: EdgeRef = (u, v, key)
        if u == v:
            edge_map.skipped.append(ref)
            continue
        cap = _read_capacity(data, capacity_attr, default_capacity, ref)
        cost = _as_int(data.get(cost_attr, default_cost), cost_attr, ref)
        su, sv = node_map.to_index[u], node_map.to_index[v]
        _register(edge_map, graph.add_edge(su, sv, cap, cost), ref, ref)
        if not directed:
            _register(edge_map, graph.add_edge(sv, su, cap, cost), ref, (v, u, key))

    if edge_map.skipped:
        logger.debug(f"Skipped {len(edge_map.skipped)} self-loop edges")
    return graph, node_map, edge_map


def _edge_flow(
    edge_map: EdgeMap, edges: Sequence[Union[MfEdge, McfEdge]]
) -> Dict[EdgeRef, int]:
    edge_flow: Dict[EdgeRef, int] = {ref: 0 for ref in edge_map.to_ref.values()}
    for ref in edge_map.skipped:
        edge_flow[ref] = 0
    for ext_id, edge in enumerate(edges):
        edge_flow[edge_map.to_ref[ext_id]] += edge.flow
    return edge_flow


def max_flow(
    G: NxGraph,
    source: Hashable,
    sink: Hashable,
    *,
    capacity_attr: str = "capacity",
    flow_limit: Optional[int] = None,
    config: Optional[FlowConfig] = None,
) -> FlowResult:
    """Compute a maximum flow and minimum cut between two NetworkX nodes.

    Args:
        G: NetworkX graph.
        source: Source node name.
        sink: Sink node name.
        capacity_attr: Edge attribute holding the integer capacity.
        flow_limit: Optional upper bound on the flow to send. A limited solve
            leaves ``reachable`` and ``min_cut`` empty.
        config: Solver configuration.

    Returns:
        FlowResult with ``value``, ``edge_flow``, ``reachable`` and ``min_cut``.

    Raises:
        KeyError: If source or sink is not in the graph.
    """
    graph, node_map, edge_map = to_mf_graph(
        G, capacity_attr=capacity_attr, config=config
    )
    s, t = _endpoints(node_map, source, sink)

    if flow_limit is not None:
        value = graph.flow_with_capacity(s, t, flow_limit)
        return FlowResult(
            value=value, cost=None, edge_flow=_edge_flow(edge_map, graph.edges())
        )

    value = graph.flow(s, t)
    reachable_flags = graph.min_cut(s)
    return FlowResult(
        value=value,
        cost=None,
        edge_flow=_edge_flow(edge_map, graph.edges()),
        reachable={node_map.to_name[i] for i, r in enumerate(reachable_flags) if r},
        min_cut=[edge_map.to_ref[i] for i in graph.min_cut_edges(s)],
    )


def min_cost_flow(
    G: NxGraph,
    source: Hashable,
    sink: Hashable,
    *,
    capacity_attr: str = "capacity",
    cost_attr: str = "cost",
    flow_limit: Optional[int] = None,
    config: Optional[FlowConfig] = None,
) -> FlowResult:
    """Compute a minimum-cost (maximum) flow between two NetworkX nodes.

    Args:
        G: NetworkX graph.
        source: Source node name.
        sink: Sink node name.
        capacity_attr: Edge attribute holding the integer capacity.
        cost_attr: Edge attribute holding the integer per-unit cost.
        flow_limit: Optional upper bound on the flow to send. None sends the
            maximum flow.
        config: Solver configuration.

    Returns:
        FlowResult with ``value``, ``cost``, ``edge_flow`` and ``slope``.

    Raises:
        KeyError: If source or sink is not in the graph.
    """
    graph, node_map, edge_map = to_mcf_graph(
        G, capacity_attr=capacity_attr, cost_attr=cost_attr, config=config
    )
    s, t = _endpoints(node_map, source, sink)

    if flow_limit is None:
        slope = graph.slope(s, t)
    else:
        slope = graph.slope_with_capacity(s, t, flow_limit)

    value, cost = slope[-1]
    return FlowResult(
        value=value,
        cost=cost,
        edge_flow=_edge_flow(edge_map, graph.edges()),
        slope=slope,
    )


def _endpoints(node_map: NodeMap, source: Hashable, sink: Hashable) -> Tuple[int, int]:
    for name in (source, sink):
        if name not in node_map.to_index:
            raise KeyError(f"Node '{name}' is not in the graph.")
    return node_map.to_index[source], node_map.to_index[sink]


def write_flows(
    G: NxGraph,
    edge_map: EdgeMap,
    edges: Sequence[Union[MfEdge, McfEdge]],
    *,
    flow_attr: str = "flow",
) -> None:
    """Store solved flows on the NetworkX edges they came from.

    For an undirected edge ``(u, v, key)`` the stored value is the net flow in
    the ``u -> v`` direction, negative when more flow runs ``v -> u``.
    Skipped edges get a flow of 0.

    Args:
        G: The graph the solver was built from.
        edge_map: Mapping returned by ``to_mf_graph``/``to_mcf_graph``.
        edges: Solved edges, as returned by the solver's ``edges()``.
        flow_attr: Edge attribute to write.
    """
    multi = G.is_multigraph()

    def attrs(ref: EdgeRef) -> dict:
        u, v, key = ref
        return G.edges[u, v, key] if multi else G.edges[u, v]

    for ref, ext_ids in edge_map.from_ref.items():
        net = 0
        for ext_id in ext_ids:
            if edge_map.to_ref[ext_id] == ref:
                net += edges[ext_id].flow
            else:
                net -= edges[ext_id].flow
        attrs(ref)[flow_attr] = net
    for ref in edge_map.skipped:
        attrs(ref)[flow_attr] = 0

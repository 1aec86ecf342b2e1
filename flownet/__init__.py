"""flownet: integer flow-network solvers.

flownet provides two solvers over directed multigraphs with integer
capacities:

Primary API:
    MfGraph - Maximum flow and minimum s-t cut (Dinic's algorithm)
    McfGraph - Minimum-cost flow and its cost curve (successive shortest paths)
    FlowConfig - Solver configuration (integer width, vertex limit)
    max_flow(), min_cost_flow() - Solve NetworkX graphs directly

Example:
    from flownet import MfGraph, McfGraph

    g = MfGraph(4)
    g.add_edge(0, 1, 2)
    g.add_edge(1, 3, 1)
    g.add_edge(0, 2, 1)
    g.add_edge(2, 3, 2)
    assert g.flow(0, 3) == 2
    side = g.min_cut(0)

    h = McfGraph(3)
    h.add_edge(0, 1, 2, 1)
    h.add_edge(1, 2, 2, 3)
    assert h.flow(0, 2) == (2, 8)
"""

from __future__ import annotations

from flownet import cli, logging
from flownet._version import __version__
from flownet.config import FLOW_CONFIG, FlowConfig
from flownet.maxflow import MfGraph
from flownet.mincostflow import McfGraph
from flownet.nx import (
    EdgeMap,
    FlowResult,
    NodeMap,
    max_flow,
    min_cost_flow,
    to_mcf_graph,
    to_mf_graph,
    write_flows,
)
from flownet.types import McfEdge, MfEdge

__all__ = [
    # Version
    "__version__",
    # Solvers
    "MfGraph",
    "McfGraph",
    "MfEdge",
    "McfEdge",
    # Configuration
    "FlowConfig",
    "FLOW_CONFIG",
    # Library integrations (NetworkX)
    "EdgeMap",
    "NodeMap",
    "FlowResult",
    "max_flow",
    "min_cost_flow",
    "to_mf_graph",
    "to_mcf_graph",
    "write_flows",
    # Utilities
    "cli",
    "logging",
]

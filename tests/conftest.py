"""Global pytest configuration and shared graph fixtures.

Edge lists are plain tuples so each test can build a fresh solver from them.
"""

from __future__ import annotations

import pytest

from flownet.maxflow import MfGraph
from flownet.mincostflow import McfGraph


@pytest.fixture
def wikipedia_edges():
    # From https://commons.wikimedia.org/wiki/File:Min_cut.png
    #
    #        [3]      [3]
    #    ┌──────►1──────►3───┐[2]
    #    │       │       │   ▼
    #    0    [2]▼    [4]▼   5
    #    │       │       │   ▲
    #    └──────►2──────►4───┘[3]
    #        [3]      [2]
    return [
        (0, 1, 3),
        (0, 2, 3),
        (1, 2, 2),
        (1, 3, 3),
        (2, 4, 2),
        (3, 4, 4),
        (3, 5, 2),
        (4, 5, 3),
    ]


@pytest.fixture
def wikipedia(wikipedia_edges):
    g = MfGraph(6)
    for u, v, c in wikipedia_edges:
        g.add_edge(u, v, c)
    return g


@pytest.fixture
def wikipedia_unit(wikipedia_edges):
    # Every edge split into unit-capacity parallels
    g = MfGraph(6)
    for u, v, c in wikipedia_edges:
        for _ in range(c):
            g.add_edge(u, v, 1)
    return g


@pytest.fixture
def cost_diamond_edges():
    # (src, dst, cap, cost)
    #
    #        [2,1]
    #    ┌─────────►1──────────┐[1,3]
    #    │          │          ▼
    #    0     [1,1]▼          3
    #    │          │          ▲
    #    └─────────►2──────────┘[2,1]
    #        [1,2]
    return [
        (0, 1, 2, 1),
        (0, 2, 1, 2),
        (1, 2, 1, 1),
        (1, 3, 1, 3),
        (2, 3, 2, 1),
    ]


@pytest.fixture
def cost_diamond(cost_diamond_edges):
    g = McfGraph(4)
    for u, v, c, w in cost_diamond_edges:
        g.add_edge(u, v, c, w)
    return g


@pytest.fixture
def same_cost_paths():
    # Two routes of per-unit cost 1: 0->1->2 (cap 1) and 0->2 (cap 2)
    g = McfGraph(3)
    g.add_edge(0, 1, 1, 1)
    g.add_edge(1, 2, 1, 0)
    g.add_edge(0, 2, 2, 1)
    return g

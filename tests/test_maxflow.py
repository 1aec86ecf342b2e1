import random

import pytest

from flownet.config import FlowConfig
from flownet.maxflow import MfGraph
from flownet.types import MfEdge


def _net_outflow(edges, n):
    net = [0] * n
    for e in edges:
        net[e.src] += e.flow
        net[e.dst] -= e.flow
    return net


class TestMaxFlowBasic:
    """
    Known max-flow values and edge states on small graphs.
    """

    def test_wikipedia_flow_and_edges(self, wikipedia):
        assert wikipedia.flow(0, 5) == 5
        assert wikipedia.edges() == [
            MfEdge(src=0, dst=1, cap=3, flow=3),
            MfEdge(src=0, dst=2, cap=3, flow=2),
            MfEdge(src=1, dst=2, cap=2, flow=0),
            MfEdge(src=1, dst=3, cap=3, flow=3),
            MfEdge(src=2, dst=4, cap=2, flow=2),
            MfEdge(src=3, dst=4, cap=4, flow=1),
            MfEdge(src=3, dst=5, cap=2, flow=2),
            MfEdge(src=4, dst=5, cap=3, flow=3),
        ]

    def test_wikipedia_min_cut(self, wikipedia):
        wikipedia.flow(0, 5)
        assert wikipedia.min_cut(0) == [True, False, True, False, False, False]
        assert wikipedia.min_cut_edges(0) == [0, 4]

    def test_wikipedia_unit_parallel_edges(self, wikipedia_unit):
        assert wikipedia_unit.flow(0, 5) == 5
        assert wikipedia_unit.min_cut(0) == [True, False, True, False, False, False]

    def test_add_edge_returns_insertion_index(self):
        g = MfGraph(3)
        assert g.add_edge(0, 1, 1) == 0
        assert g.add_edge(1, 2, 1) == 1
        assert g.add_edge(0, 1, 4) == 2
        assert len(g) == 3
        assert g.n == 3

    def test_misawa_graph(self):
        # Originally by @MiSawa
        # https://gist.github.com/MiSawa/47b1d99c372daffb6891662db1a2b686
        n = 100
        g = MfGraph((n + 1) * 2 + 5)
        s, a, b, c, t = 0, 1, 2, 3, 4
        g.add_edge(s, a, 1)
        g.add_edge(s, b, 2)
        g.add_edge(b, a, 2)
        g.add_edge(c, t, 2)
        for index in range(n):
            i = 2 * index + 5
            for j in range(2):
                for k in range(2, 4):
                    g.add_edge(i + j, i + k, 3)
        for j in range(2):
            g.add_edge(a, 5 + j, 3)
            g.add_edge(2 * n + 5 + j, c, 3)

        assert g.flow(s, t) == 2

    def test_dont_repeat_same_phase(self):
        # One wide edge feeding many unit parallels: each parallel must be
        # tried once per phase, not rescanned for every augmenting path.
        n = 100_000
        g = MfGraph(3)
        g.add_edge(0, 1, n)
        for _ in range(n):
            g.add_edge(1, 2, 1)

        assert g.flow(0, 2) == n
        assert g.get_edge(0) == MfEdge(src=0, dst=1, cap=n, flow=n)

    def test_long_path_does_not_recurse(self):
        n = 20_000
        g = MfGraph(n)
        for v in range(n - 1):
            g.add_edge(v, v + 1, 7)

        assert g.flow(0, n - 1) == 7


class TestMaxFlowLimits:
    def test_flow_with_capacity_stops_at_limit(self, wikipedia):
        assert wikipedia.flow_with_capacity(0, 5, 3) == 3
        net = _net_outflow(wikipedia.edges(), 6)
        assert net[0] == 3
        assert net[5] == -3

    def test_flow_with_zero_limit(self, wikipedia):
        assert wikipedia.flow_with_capacity(0, 5, 0) == 0
        assert all(e.flow == 0 for e in wikipedia.edges())

    def test_limit_above_max_flow(self, wikipedia):
        assert wikipedia.flow_with_capacity(0, 5, 1_000) == 5

    def test_second_flow_adds_nothing(self, wikipedia):
        assert wikipedia.flow(0, 5) == 5
        assert wikipedia.flow(0, 5) == 0

    def test_flow_resumes_after_limit(self, wikipedia):
        assert wikipedia.flow_with_capacity(0, 5, 2) == 2
        assert wikipedia.flow(0, 5) == 3

    def test_reverse_flow_cancels(self):
        g = MfGraph(2)
        g.add_edge(0, 1, 4)
        assert g.flow(0, 1) == 4
        assert g.flow(1, 0) == 4
        assert g.get_edge(0).flow == 0

    def test_unreachable_sink(self):
        g = MfGraph(4)
        g.add_edge(0, 1, 5)
        g.add_edge(2, 3, 5)
        assert g.flow(0, 3) == 0
        assert g.min_cut(0) == [True, True, False, False]

    def test_zero_capacity_edge(self):
        g = MfGraph(2)
        g.add_edge(0, 1, 0)
        assert g.flow(0, 1) == 0
        assert g.min_cut(0) == [True, False]

    def test_isolated_source(self):
        g = MfGraph(3)
        g.add_edge(1, 2, 5)
        assert g.flow(0, 2) == 0


class TestMaxFlowEdges:
    def test_self_loops(self):
        g = MfGraph(2)
        g.add_edge(0, 0, 5)
        g.add_edge(0, 1, 3)
        g.add_edge(1, 1, 2)

        assert g.flow(0, 1) == 3
        assert g.get_edge(0) == MfEdge(src=0, dst=0, cap=5, flow=0)
        assert g.get_edge(1) == MfEdge(src=0, dst=1, cap=3, flow=3)
        assert g.get_edge(2) == MfEdge(src=1, dst=1, cap=2, flow=0)

    def test_self_loop_change_edge(self):
        g = MfGraph(1)
        g.add_edge(0, 0, 5)
        g.change_edge(0, 5, 2)
        assert g.get_edge(0) == MfEdge(src=0, dst=0, cap=5, flow=2)

    def test_change_edge_overwrites_state(self, wikipedia):
        wikipedia.flow(0, 5)
        wikipedia.change_edge(2, 7, 4)

        assert wikipedia.get_edge(2) == MfEdge(src=1, dst=2, cap=7, flow=4)
        assert wikipedia.get_edge(1) == MfEdge(src=0, dst=2, cap=3, flow=2)

    def test_change_edge_then_resolve(self):
        g = MfGraph(2)
        e = g.add_edge(0, 1, 1)
        assert g.flow(0, 1) == 1

        g.change_edge(e, 5, 1)
        assert g.flow(0, 1) == 4
        assert g.get_edge(e) == MfEdge(src=0, dst=1, cap=5, flow=5)

    def test_change_edge_reset_flow(self, wikipedia):
        wikipedia.flow(0, 5)
        for i, e in enumerate(wikipedia.edges()):
            wikipedia.change_edge(i, e.cap, 0)

        assert all(e.flow == 0 for e in wikipedia.edges())
        assert wikipedia.flow(0, 5) == 5

    def test_read_back_is_idempotent(self, wikipedia):
        wikipedia.flow(0, 5)
        first = [wikipedia.get_edge(i) for i in range(8)]
        second = [wikipedia.get_edge(i) for i in range(8)]
        assert first == second
        assert wikipedia.edges() == first

    def test_empty_graph(self):
        g = MfGraph(0)
        assert g.edges() == []
        assert len(g) == 0


class TestMaxFlowInvariants:
    @pytest.mark.parametrize("seed", range(25))
    def test_random_graph_invariants(self, seed):
        rng = random.Random(seed)
        n = rng.randint(2, 12)
        m = rng.randint(0, 40)
        edges = []
        g = MfGraph(n)
        for _ in range(m):
            u, v, c = rng.randrange(n), rng.randrange(n), rng.randint(0, 10)
            edges.append((u, v, c))
            g.add_edge(u, v, c)
        s, t = rng.sample(range(n), 2)

        value = g.flow(s, t)
        solved = g.edges()

        # Capacities survive and flows stay within them
        for (u, v, c), e in zip(edges, solved):
            assert (e.src, e.dst, e.cap) == (u, v, c)
            assert 0 <= e.flow <= e.cap

        # Conservation everywhere except s and t
        net = _net_outflow(solved, n)
        for v in range(n):
            if v == s:
                assert net[v] == value
            elif v == t:
                assert net[v] == -value
            else:
                assert net[v] == 0

        # Max-flow / min-cut duality
        cut = g.min_cut(s)
        assert cut[s] and not cut[t]
        crossing = sum(
            e.cap for e in solved if cut[e.src] and not cut[e.dst]
        )
        assert crossing == value
        assert sum(solved[i].cap for i in g.min_cut_edges(s)) == value

    def test_residual_arcs_conserve_capacity(self, wikipedia, wikipedia_edges):
        wikipedia.flow_with_capacity(0, 5, 4)
        for (u, v, c), (frm, idx) in zip(wikipedia_edges, wikipedia._pos):
            arc = wikipedia._g[frm][idx]
            twin = wikipedia._g[arc.to][arc.rev]
            assert arc.cap + twin.cap == c


class TestMaxFlowErrors:
    def test_vertex_out_of_range(self):
        g = MfGraph(2)
        with pytest.raises(IndexError):
            g.add_edge(0, 2, 1)
        with pytest.raises(IndexError):
            g.add_edge(-1, 1, 1)
        with pytest.raises(IndexError):
            g.flow(0, 2)
        with pytest.raises(IndexError):
            g.min_cut(5)

    def test_negative_capacity(self):
        g = MfGraph(2)
        with pytest.raises(ValueError, match="non-negative"):
            g.add_edge(0, 1, -1)

    def test_non_integer_capacity(self):
        g = MfGraph(2)
        with pytest.raises(ValueError, match="integer"):
            g.add_edge(0, 1, 1.5)
        with pytest.raises(ValueError, match="integer"):
            g.add_edge(0, 1, True)

    def test_source_equals_sink(self):
        g = MfGraph(2)
        g.add_edge(0, 1, 1)
        with pytest.raises(ValueError, match="differ"):
            g.flow(1, 1)

    def test_negative_flow_limit(self):
        g = MfGraph(2)
        with pytest.raises(ValueError, match="non-negative"):
            g.flow_with_capacity(0, 1, -1)

    def test_edge_index_out_of_range(self, wikipedia):
        with pytest.raises(IndexError):
            wikipedia.get_edge(8)
        with pytest.raises(IndexError):
            wikipedia.change_edge(-1, 1, 0)

    def test_change_edge_flow_above_capacity(self, wikipedia):
        with pytest.raises(ValueError, match="exceeds capacity"):
            wikipedia.change_edge(0, 1, 2)
        with pytest.raises(ValueError, match="non-negative"):
            wikipedia.change_edge(0, 1, -1)

    def test_vertex_count_bounds(self):
        with pytest.raises(ValueError):
            MfGraph(-1)
        with pytest.raises(ValueError, match="exceeds the limit"):
            MfGraph(6, config=FlowConfig(max_vertices=5))

    def test_int_width_overflow(self):
        config = FlowConfig(int_width=8)
        g = MfGraph(3, config=config)
        with pytest.raises(OverflowError):
            g.add_edge(0, 1, 128)

        g.add_edge(0, 2, 100)
        g.add_edge(1, 2, 100)
        g.add_edge(0, 1, 100)
        with pytest.raises(OverflowError, match="Flow"):
            g.flow(0, 2)

    def test_int_width_within_bounds(self):
        g = MfGraph(2, config=FlowConfig(int_width=8))
        g.add_edge(0, 1, 127)
        assert g.flow(0, 1) == 127

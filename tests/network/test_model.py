"""
Tests for building Network flow models.
"""

import math

import pytest
import polars as pl
from polars.testing import assert_frame_equal

from infoflow.common.context import ExecutionContext
from infoflow.common.exceptions import ValidationError, ConfigurationError, ConvergenceError
from infoflow.network.graph import build_flow_graph, FlowGraph
from infoflow.network.model import Network, build_network

TELEPORT = 0.15


def _records(network):
    return {row["id"]: row for row in network.graph.vertices.collect().iter_rows(named=True)}


class TestBuildNetwork:
    """Test the full graph-to-network pipeline."""

    def setup_method(self):
        self.triangle = build_flow_graph(pl.DataFrame({"src": [1, 2, 3], "dst": [2, 3, 1]}))
        self.chain = build_flow_graph(pl.DataFrame({"src": [1], "dst": [2]}))
        self.isolated = build_flow_graph(
            pl.DataFrame(schema={"src": pl.Int64, "dst": pl.Int64}),
            pl.DataFrame({"id": [1], "name": ["alone"]})
        )

    def test_triangle(self):
        network = build_network(self.triangle, TELEPORT)

        assert isinstance(network, Network)
        assert network.node_count == 3
        assert network.teleport_probability == TELEPORT
        assert network.converged
        for record in _records(network).values():
            assert record["size"] == 1
            assert record["prob"] == pytest.approx(1 / 3)
            assert record["exitw"] == pytest.approx(1 / 3)
            assert record["exitq"] == pytest.approx(1 / 3)
        assert network.prob_sum == pytest.approx(-math.log2(3))
        assert network.codelength == pytest.approx(math.log2(3) + 2)

        flow = network.graph.edges.collect().sort(["src", "dst"])
        assert flow["exitw"].to_list() == pytest.approx([1 / 3] * 3)

    def test_sink(self):
        network = build_network(self.chain, TELEPORT)
        records = _records(network)
        prob_source = 0.075 / 0.21375
        prob_sink = 0.13875 / 0.21375

        assert records[1]["prob"] == pytest.approx(prob_source)
        assert records[1]["exitw"] == pytest.approx(prob_source)
        assert records[1]["exitq"] == pytest.approx(prob_source)
        assert records[2]["prob"] == pytest.approx(prob_sink)
        assert records[2]["exitw"] == 0.0
        assert records[2]["exitq"] == pytest.approx(TELEPORT * prob_sink)
        assert network.iterations == 3

    def test_single_isolated_vertex(self):
        network = build_network(self.isolated, TELEPORT)
        record = _records(network)[1]

        assert network.node_count == 1
        assert record["prob"] == pytest.approx(1.0)
        assert record["exitw"] == 0.0
        assert record["exitq"] == 0.0
        assert network.codelength == pytest.approx(0.0, abs=1e-12)

    def test_isolated_vertex_among_others(self):
        graph = build_flow_graph(
            pl.DataFrame({"src": [1, 2], "dst": [2, 1]}),
            pl.DataFrame({"id": [1, 2, 9]})
        )
        network = build_network(graph, TELEPORT)
        records = _records(network)
        isolated = records[9]

        assert network.node_count == 3
        assert isolated["size"] == 1
        assert isolated["prob"] > 0
        assert isolated["exitw"] == 0.0
        assert isolated["exitq"] == pytest.approx(TELEPORT * isolated["prob"])
        assert sum(r["prob"] for r in records.values()) == pytest.approx(1.0)
        assert network.graph.edges.collect().filter(
            (pl.col("src") == 9) | (pl.col("dst") == 9)
        ).height == 0

    def test_weights_and_parallel_edges(self):
        weighted = build_flow_graph(pl.DataFrame({
            "src": [1, 1, 2, 3], "dst": [2, 2, 3, 1], "weight": [1.0, 1.0, 4.0, 0.5]
        }))
        network = build_network(weighted, TELEPORT)
        assert network.codelength == pytest.approx(math.log2(3) + 2)

    def test_self_loops_are_ignored(self):
        looped = build_flow_graph(pl.DataFrame({"src": [1, 1, 2, 3], "dst": [1, 2, 3, 1]}))
        assert build_network(looped, TELEPORT).codelength == pytest.approx(
            build_network(self.triangle, TELEPORT).codelength
        )

    def test_invariants(self):
        graph = build_flow_graph(pl.DataFrame({
            "src": [1, 1, 2, 3, 4, 5], "dst": [2, 3, 4, 4, 1, 1],
            "weight": [3.0, 1.0, 2.0, 1.0, 1.0, 0.0]
        }))
        network = build_network(graph, 0.2)
        modules = network.graph.vertices.collect()

        assert modules["prob"].sum() == pytest.approx(1.0)
        assert (modules["prob"] >= 0).all()
        assert (modules["exitq"] >= 0).all()
        assert (modules["exitq"] <= modules["prob"] + 1e-12).all()
        assert network.codelength >= 0

    def test_deterministic(self):
        first = build_network(self.chain, TELEPORT)
        second = build_network(self.chain, TELEPORT)

        assert first.codelength == second.codelength
        assert_frame_equal(first.graph.vertices.collect(), second.graph.vertices.collect())
        assert_frame_equal(first.graph.edges.collect(), second.graph.edges.collect())

    def test_explicit_context(self):
        with ExecutionContext(num_threads=1) as ctx:
            network = build_network(self.triangle, TELEPORT, context=ctx)
        assert network.codelength == pytest.approx(math.log2(3) + 2)

    def test_empty_graph(self):
        empty = FlowGraph.from_frames(
            pl.DataFrame(schema={"id": pl.Int64}),
            pl.DataFrame(schema={"src": pl.Int64, "dst": pl.Int64, "exitw": pl.Float64})
        )
        with pytest.raises(ValidationError):
            build_network(empty, TELEPORT)

    def test_invalid_teleport_probability(self):
        with pytest.raises(ConfigurationError):
            build_network(self.triangle, 1.0)

    def test_strict_convergence_propagates(self, monkeypatch):
        from infoflow.network import model, flow

        def one_step(graph, teleport_probability, context=None, strict=False):
            return flow.estimate_flow(graph, teleport_probability, context,
                                      max_iterations=1, strict=strict)

        monkeypatch.setattr(model, "estimate_flow", one_step)
        with pytest.raises(ConvergenceError):
            build_network(self.chain, TELEPORT, strict=True)
        assert not build_network(self.chain, TELEPORT).converged

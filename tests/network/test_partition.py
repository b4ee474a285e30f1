"""
Tests for partition scoring.
"""

import math

import pytest
import polars as pl

from infoflow.common.exceptions import ValidationError
from infoflow.network.graph import build_flow_graph
from infoflow.network.model import build_network
from infoflow.network.partition import apply_partition

TELEPORT = 0.15


def _two_cliques():
    src, dst = [], []
    for block in ([1, 2, 3, 4], [5, 6, 7, 8]):
        for u in block:
            for v in block:
                if u != v:
                    src.append(u)
                    dst.append(v)
    src += [4, 5]
    dst += [5, 4]
    return build_flow_graph(pl.DataFrame({"src": src, "dst": dst}))


class TestApplyPartition:
    """Test coarsening a Network to a vertex-to-module assignment."""

    def setup_method(self):
        self.triangle = build_network(
            build_flow_graph(pl.DataFrame({"src": [1, 2, 3], "dst": [2, 3, 1]})), TELEPORT
        )
        self.chain = build_network(build_flow_graph(pl.DataFrame({"src": [1], "dst": [2]})), TELEPORT)

    def test_identity_partition_keeps_codelength(self):
        for network in (self.triangle, self.chain):
            ids = network.graph.vertices.collect()["id"]
            assignment = pl.DataFrame({"id": ids, "module": ids})
            coarse = apply_partition(network, assignment)

            assert coarse.codelength == pytest.approx(network.codelength)
            original = network.graph.vertices.collect()
            coarsened = coarse.graph.vertices.collect()
            assert coarsened["exitq"].to_list() == pytest.approx(original["exitq"].to_list())

    def test_single_module(self):
        assignment = pl.DataFrame({"id": [1, 2, 3], "module": [0, 0, 0]})
        coarse = apply_partition(self.triangle, assignment)
        module = coarse.graph.vertices.collect().row(0, named=True)

        assert module["size"] == 3
        assert module["prob"] == pytest.approx(1.0)
        assert module["exitw"] == 0.0
        assert module["exitq"] == pytest.approx(0.0)
        assert coarse.graph.edges.collect().height == 0
        assert coarse.codelength == pytest.approx(math.log2(3))
        assert coarse.codelength == pytest.approx(-coarse.prob_sum)

    def test_carried_over_fields(self):
        assignment = pl.DataFrame({"id": [1, 2, 3], "module": [1, 1, 2]})
        coarse = apply_partition(self.triangle, assignment)

        assert coarse.node_count == self.triangle.node_count
        assert coarse.prob_sum == self.triangle.prob_sum
        assert coarse.teleport_probability == self.triangle.teleport_probability
        assert coarse.graph.vertices.collect()["prob"].sum() == pytest.approx(1.0)

    def test_two_module_edges(self):
        assignment = pl.DataFrame({"id": [1, 2, 3], "module": [1, 1, 2]})
        coarse = apply_partition(self.triangle, assignment)
        edges = coarse.graph.edges.collect()
        modules = {row["id"]: row for row in coarse.graph.vertices.collect().iter_rows(named=True)}

        assert edges["src"].to_list() == [1, 2]
        assert edges["dst"].to_list() == [2, 1]
        assert edges["exitw"].to_list() == pytest.approx([1 / 3, 1 / 3])
        assert modules[1]["size"] == 2
        assert modules[1]["exitq"] == pytest.approx(TELEPORT * 0.5 * 2 / 3 + (1 - TELEPORT) / 3)
        assert modules[2]["exitq"] == pytest.approx(1 / 3)

    def test_community_structure_lowers_codelength(self):
        network = build_network(_two_cliques(), TELEPORT)
        ids = list(range(1, 9))
        split = apply_partition(network, pl.DataFrame({"id": ids, "module": [1] * 4 + [2] * 4}))
        merged = apply_partition(network, pl.DataFrame({"id": ids, "module": [1] * 8}))

        assert split.codelength < merged.codelength
        assert split.codelength < network.codelength

    def test_custom_columns(self):
        assignment = pl.DataFrame({"vertex": [1, 2, 3], "community": [7, 7, 7]})
        coarse = apply_partition(self.triangle, assignment, id_col="vertex", module_col="community")
        assert coarse.graph.vertices.collect()["id"].to_list() == [7]

    def test_unassigned_vertex(self):
        with pytest.raises(ValidationError):
            apply_partition(self.triangle, pl.DataFrame({"id": [1, 2], "module": [1, 1]}))

    def test_vertex_assigned_twice(self):
        assignment = pl.DataFrame({"id": [1, 1, 2, 3], "module": [1, 2, 1, 1]})
        with pytest.raises(ValidationError):
            apply_partition(self.triangle, assignment)

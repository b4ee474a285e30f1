"""
Edge normalization for random-walk flow models.

The three steps turn a raw directed multigraph into a transition graph:
self-loops are dropped, parallel edges are merged, and each vertex's
outgoing weights are rescaled to sum to one. All steps are lazy.
"""

import polars as pl

from .graph import FlowGraph, SOURCE, TARGET, WEIGHT

_OUT_WEIGHT = "out_weight"


def trim_self_edges(graph: FlowGraph) -> FlowGraph:
    """Remove edges whose source and target vertices are identical."""
    return FlowGraph(
        vertices=graph.vertices,
        edges=graph.edges.filter(pl.col(SOURCE) != pl.col(TARGET)),
    )


def aggregate_edges(graph: FlowGraph) -> FlowGraph:
    """Merge parallel edges by summing their weights per (src, dst) pair."""
    return FlowGraph(
        vertices=graph.vertices,
        edges=graph.edges.group_by([SOURCE, TARGET]).agg(pl.col(WEIGHT).sum()),
    )


def normalize_edges(graph: FlowGraph) -> FlowGraph:
    """
    Rescale edge weights so each source's outgoing weights sum to one.

    Sources with zero total outgoing weight are not divided: their edges
    carry no flow and are dropped, leaving the vertex a sink. Edges are
    returned sorted by (src, dst).
    """
    out_weight = (
        graph.edges.group_by(SOURCE)
        .agg(pl.col(WEIGHT).sum().alias(_OUT_WEIGHT))
        .filter(pl.col(_OUT_WEIGHT) > 0)
    )
    edges = (
        graph.edges.join(out_weight, on=SOURCE, how="inner")
        .select(
            pl.col(SOURCE),
            pl.col(TARGET),
            (pl.col(WEIGHT) / pl.col(_OUT_WEIGHT)).alias(WEIGHT),
        )
        .sort([SOURCE, TARGET])
    )
    return FlowGraph(vertices=graph.vertices, edges=edges)


def normalize_graph(graph: FlowGraph) -> FlowGraph:
    """Apply self-loop removal, parallel-edge merging and normalization in order."""
    return normalize_edges(aggregate_edges(trim_self_edges(graph)))

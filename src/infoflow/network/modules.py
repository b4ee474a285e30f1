"""
Module records and inter-module flow for singleton partitions.

Before any coarsening every vertex is its own module. Because the outgoing
transition probabilities of a vertex sum to one, the exit probability of a
vertex with outgoing edges equals its visiting probability, with or without
teleportation; a sink can only leave by teleporting.
"""

import polars as pl

from .graph import SOURCE, TARGET, VERTEX_ID, WEIGHT
from .flow import PROB

MODULE_COLUMNS = [VERTEX_ID, "size", PROB, "exitw", "exitq"]


def project_modules(
    probabilities: pl.LazyFrame,
    edges: pl.LazyFrame,
    teleport_probability: float,
    node_count: int
) -> pl.LazyFrame:
    """
    Derive one module record per vertex.

    Parameters
    ----------
    probabilities : pl.LazyFrame
        Columns ``id`` and ``prob`` from flow estimation
    edges : pl.LazyFrame
        Normalized edge list
    teleport_probability : float
        Teleport probability tau
    node_count : int
        Number of vertices

    Returns
    -------
    pl.LazyFrame
        Columns ``id, size, prob, exitw, exitq`` where ``exitw`` is ``prob``
        for vertices with outgoing edges and 0 otherwise, and ``exitq`` is 0
        for a single-vertex graph, ``prob`` for vertices with outgoing edges
        and ``tau * prob`` for sinks.
    """
    sources = (
        edges.select(pl.col(SOURCE).alias(VERTEX_ID))
        .unique()
        .with_columns(pl.lit(True).alias("has_outgoing"))
    )

    has_outgoing = pl.col("has_outgoing").fill_null(False)
    prob = pl.col(PROB)

    if node_count == 1:
        exitq = pl.lit(0.0, dtype=pl.Float64)
    else:
        exitq = pl.when(has_outgoing).then(prob).otherwise(teleport_probability * prob)

    return (
        probabilities.join(sources, on=VERTEX_ID, how="left")
        .select(
            pl.col(VERTEX_ID),
            pl.lit(1, dtype=pl.Int64).alias("size"),
            prob,
            pl.when(has_outgoing).then(prob).otherwise(0.0).alias("exitw"),
            exitq.alias("exitq"),
        )
        .sort(VERTEX_ID)
    )


def aggregate_flow(probabilities: pl.LazyFrame, edges: pl.LazyFrame) -> pl.LazyFrame:
    """
    Compute the probability mass flowing along each edge per walk step.

    Every edge ``(src, dst, w)`` with ``src != dst`` becomes
    ``(src, dst, prob(src) * w)``.
    """
    return (
        edges.filter(pl.col(SOURCE) != pl.col(TARGET))
        .join(probabilities, left_on=SOURCE, right_on=VERTEX_ID, how="inner")
        .select(
            pl.col(SOURCE),
            pl.col(TARGET),
            (pl.col(PROB) * pl.col(WEIGHT)).alias(WEIGHT),
        )
    )

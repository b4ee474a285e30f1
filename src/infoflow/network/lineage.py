"""
Lineage trimming for iterative use of the pipeline.

Each pipeline invocation builds its output frames as lazy queries on top of
its input frames. When a search loop feeds a network's graph back into the
pipeline, the query plans nest one level deeper per iteration. Trimming
evaluates a plan and restarts it from the in-memory result, so the next
iteration starts from a plan of constant depth.
"""

from typing import Optional

import polars as pl

from infoflow.common.context import ExecutionContext
from infoflow.common.logging_config import get_logger, LoggingTimer
from .graph import FlowGraph

logger = get_logger(__name__)


def plan_depth(frame: pl.LazyFrame) -> int:
    """Number of nodes in the unoptimized query plan of a lazy frame."""
    return len([line for line in frame.explain(optimized=False).splitlines() if line.strip()])


def trim_frame(frame: pl.LazyFrame, context: Optional[ExecutionContext] = None) -> pl.LazyFrame:
    """
    Materialize a lazy frame and return a lazy frame rooted at the result.

    Blocks until the query is fully evaluated.

    Raises
    ------
    ComputationError
        If the evaluation fails
    """
    context = context or ExecutionContext()
    materialized = context.collect(frame, "trim_frame").rechunk()
    return materialized.lazy()


def trim_graph(graph: FlowGraph, context: Optional[ExecutionContext] = None) -> FlowGraph:
    """
    Materialize both frames of a graph, discarding their query history.

    Call this between pipeline invocations of an iterative search, before
    the graph is fed into the next invocation.
    """
    context = context or ExecutionContext()
    depth_before = plan_depth(graph.vertices) + plan_depth(graph.edges)

    with context, LoggingTimer("trim_graph", {"plan_depth": depth_before}):
        trimmed = FlowGraph(
            vertices=trim_frame(graph.vertices, context),
            edges=trim_frame(graph.edges, context),
        )

    logger.debug("Trimmed graph lineage: plan depth %d -> %d",
                 depth_before, plan_depth(trimmed.vertices) + plan_depth(trimmed.edges))
    return trimmed

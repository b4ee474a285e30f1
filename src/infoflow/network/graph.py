"""
Flow-graph container and construction.

A FlowGraph is a pair of polars frames: a vertex table keyed by ``id`` and a
directed edge list ``(src, dst, exitw)``. Both frames are kept lazy so that
pipeline stages compose into one deferred query; the weight column is named
``exitw`` at every stage, whether it holds raw weights, normalized
transition probabilities or aggregated flow.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import networkit as nk
import polars as pl

from infoflow.common.context import ExecutionContext
from infoflow.common.exceptions import GraphConstructionError
from infoflow.common.id_mapper import IDMapper
from infoflow.common.validators import validate_edge_frame, validate_vertex_frame
from infoflow.common.logging_config import get_logger, log_function_entry

logger = get_logger(__name__)

VERTEX_ID = "id"
SOURCE = "src"
TARGET = "dst"
WEIGHT = "exitw"

EDGE_SCHEMA = {SOURCE: pl.Int64, TARGET: pl.Int64, WEIGHT: pl.Float64}

Frame = Union[pl.DataFrame, pl.LazyFrame]


@dataclass(frozen=True)
class FlowGraph:
    """
    Directed weighted graph held as two lazy polars frames.

    Attributes
    ----------
    vertices : pl.LazyFrame
        One row per vertex with an Int64 ``id`` column plus role-dependent
        columns (``name`` on input graphs; ``size, prob, exitw, exitq`` on
        module graphs)
    edges : pl.LazyFrame
        Directed edges with columns ``src``, ``dst``, ``exitw``
    """

    vertices: pl.LazyFrame
    edges: pl.LazyFrame

    @classmethod
    def from_frames(cls, vertices: Frame, edges: Frame) -> "FlowGraph":
        """Wrap eager or lazy frames, converting eager ones to lazy."""
        if isinstance(vertices, pl.DataFrame):
            vertices = vertices.lazy()
        if isinstance(edges, pl.DataFrame):
            edges = edges.lazy()
        return cls(vertices=vertices, edges=edges)

    def collect(self, context: Optional[ExecutionContext] = None) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """Materialize both frames and return ``(vertices, edges)``."""
        context = context or ExecutionContext()
        return (
            context.collect(self.vertices, "collect_vertices"),
            context.collect(self.edges, "collect_edges"),
        )


def build_flow_graph(
    edges: pl.DataFrame,
    vertices: Optional[pl.DataFrame] = None,
    source_col: str = "src",
    target_col: str = "dst",
    weight_col: Optional[str] = "weight",
    id_col: str = "id"
) -> FlowGraph:
    """
    Build a validated FlowGraph from in-memory edge and vertex tables.

    Parameters
    ----------
    edges : pl.DataFrame
        Edge list with integer source/target ids. Parallel edges and
        self-loops are kept; the pipeline normalizes them.
    vertices : pl.DataFrame, optional
        Vertex table with an integer id column and any extra attributes
        (e.g. ``name``). Vertices referenced by edges but absent from the
        table are added. Without a table, the vertex set is the set of edge
        endpoints.
    source_col : str, default "src"
        Source column of the edge list
    target_col : str, default "dst"
        Target column of the edge list
    weight_col : str, optional, default "weight"
        Weight column of the edge list. If None, or if the column is absent,
        every edge gets weight 1.0 so parallel edges count occurrences.
    id_col : str, default "id"
        Id column of the vertex table

    Returns
    -------
    FlowGraph
        Graph with Int64 ids and Float64 ``exitw`` weights

    Raises
    ------
    ValidationError
        If the edge list or vertex table is malformed

    Examples
    --------
    >>> edges = pl.DataFrame({"src": [1, 2, 3], "dst": [2, 3, 1], "weight": [1.0, 1.0, 1.0]})
    >>> graph = build_flow_graph(edges)
    """
    log_function_entry("build_flow_graph", edges=len(edges),
                       vertices=None if vertices is None else len(vertices))

    if weight_col is not None and weight_col not in edges.columns:
        logger.debug("Weight column '%s' not present; using unit weights", weight_col)
        weight_col = None

    validate_edge_frame(edges, source_col=source_col, target_col=target_col, weight_col=weight_col)

    weight_expr = pl.col(weight_col).cast(pl.Float64) if weight_col else pl.lit(1.0, dtype=pl.Float64)
    edge_frame = edges.select(
        pl.col(source_col).cast(pl.Int64).alias(SOURCE),
        pl.col(target_col).cast(pl.Int64).alias(TARGET),
        weight_expr.alias(WEIGHT),
    )

    endpoints = pl.concat([edge_frame[SOURCE], edge_frame[TARGET]]).unique().alias(VERTEX_ID)

    if vertices is None:
        vertex_frame = pl.DataFrame({VERTEX_ID: endpoints}).sort(VERTEX_ID)
    else:
        validate_vertex_frame(vertices, id_col=id_col)
        vertex_frame = vertices.rename({id_col: VERTEX_ID}) if id_col != VERTEX_ID else vertices
        vertex_frame = vertex_frame.with_columns(pl.col(VERTEX_ID).cast(pl.Int64))

        known = set(vertex_frame[VERTEX_ID].to_list())
        missing = sorted(v for v in endpoints.to_list() if v not in known)
        if missing:
            logger.info("Adding %d vertices referenced only by edges", len(missing))
            vertex_frame = pl.concat(
                [vertex_frame, pl.DataFrame({VERTEX_ID: missing}, schema={VERTEX_ID: pl.Int64})],
                how="diagonal"
            )
        vertex_frame = vertex_frame.sort(VERTEX_ID)

    logger.info("Flow graph built: %d vertices, %d edges", vertex_frame.height, edge_frame.height)
    return FlowGraph.from_frames(vertex_frame, edge_frame)


def to_networkit(vertices: pl.DataFrame, edges: pl.DataFrame) -> Tuple[nk.Graph, IDMapper]:
    """
    Materialize vertex and edge tables as a directed weighted NetworkIt graph.

    Parameters
    ----------
    vertices : pl.DataFrame
        Vertex table with an ``id`` column
    edges : pl.DataFrame
        Edge list with ``src``, ``dst``, ``exitw`` columns

    Returns
    -------
    graph : nk.Graph
        Directed weighted graph over internal indices 0..n-1
    id_mapper : IDMapper
        Mapping between vertex ids and internal indices

    Raises
    ------
    GraphConstructionError
        If ids are duplicated or an edge references an unknown vertex
    """
    try:
        id_mapper = IDMapper.from_ids(vertices[VERTEX_ID].to_list())
    except ValueError as e:
        raise GraphConstructionError(
            f"Failed to create ID mapping: {e}",
            node_count=vertices.height,
            operation="create_id_mapping",
            cause=e
        )

    graph = nk.Graph(id_mapper.size(), weighted=True, directed=True)

    try:
        for source, target, weight in zip(
            edges[SOURCE].to_list(), edges[TARGET].to_list(), edges[WEIGHT].to_list()
        ):
            graph.addEdge(id_mapper.get_internal(source), id_mapper.get_internal(target), float(weight))
    except KeyError as e:
        raise GraphConstructionError(
            f"Edge references a vertex outside the vertex table: {e}",
            node_count=id_mapper.size(),
            edge_count=edges.height,
            operation="add_edges",
            cause=e
        )

    logger.debug("NetworkIt graph materialized: %d nodes, %d edges",
                 graph.numberOfNodes(), graph.numberOfEdges())
    return graph, id_mapper

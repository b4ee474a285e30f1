"""
Stationary flow estimation with a teleporting random walk.

The walker follows an outgoing edge with probability (1 - tau) and jumps to
a uniformly random vertex with probability tau:

    p(t+1) = (1 - tau) P^T p(t) + tau / n

where P is the row-stochastic transition matrix. Rows of sink vertices are
zero and their mass is not redistributed; the final vector is renormalized
to sum to one instead.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import networkit as nk
import numpy as np
import polars as pl
import scipy.sparse as sp

from infoflow.common.context import ExecutionContext
from infoflow.common.exceptions import (
    ValidationError,
    check_convergence,
    require_open_unit_interval,
    require_positive
)
from infoflow.common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import FlowGraph, VERTEX_ID, to_networkit

logger = get_logger(__name__)

FLOW_TOLERANCE = 1e-9
FLOW_MAX_ITERATIONS = 1000

PROB = "prob"


@dataclass(frozen=True)
class FlowEstimate:
    """
    Result of a flow estimation.

    Attributes
    ----------
    probabilities : pl.DataFrame
        Columns ``id`` and ``prob``; ``prob`` sums to one
    iterations : int
        Number of power-iteration steps performed
    final_change : float
        L-infinity change of the last step
    converged : bool
        Whether the change dropped below the tolerance
    """

    probabilities: pl.DataFrame
    iterations: int
    final_change: float
    converged: bool


def estimate_flow(
    graph: FlowGraph,
    teleport_probability: float,
    context: Optional[ExecutionContext] = None,
    tolerance: float = FLOW_TOLERANCE,
    max_iterations: int = FLOW_MAX_ITERATIONS,
    strict: bool = False
) -> FlowEstimate:
    """
    Estimate the stationary visiting probability of every vertex.

    Parameters
    ----------
    graph : FlowGraph
        Directed weighted graph, normally the output of ``normalize_graph``.
        Parallel edges are summed and rows are rescaled when the transition
        matrix is built, so raw weights give the same result.
    teleport_probability : float
        Probability tau of jumping to a uniformly random vertex, in (0, 1)
    context : ExecutionContext, optional
        Execution handle used to materialize the graph
    tolerance : float, default FLOW_TOLERANCE
        L-infinity change below which the iteration stops
    max_iterations : int, default FLOW_MAX_ITERATIONS
        Iteration cap
    strict : bool, default False
        Raise ConvergenceError instead of warning when the cap is reached

    Returns
    -------
    FlowEstimate
        Per-vertex probabilities summing to one, plus convergence diagnostics

    Raises
    ------
    ValidationError
        If the graph has no vertices
    ConfigurationError
        If a parameter is out of range
    ConvergenceError
        If strict is set and the iteration does not converge

    Examples
    --------
    >>> estimate = estimate_flow(normalize_graph(graph), 0.15)
    >>> estimate.probabilities["prob"].sum()
    1.0
    """
    log_function_entry("estimate_flow", teleport_probability=teleport_probability,
                       tolerance=tolerance, max_iterations=max_iterations)
    require_open_unit_interval(teleport_probability, "teleport_probability")
    require_positive(tolerance, "tolerance")
    require_positive(max_iterations, "max_iterations")

    context = context or ExecutionContext()
    vertices, edges = graph.collect(context)

    if vertices.height == 0:
        raise ValidationError("Cannot estimate flow on a graph without vertices", field="vertices")

    nk_graph, id_mapper = to_networkit(vertices, edges)
    n_nodes = nk_graph.numberOfNodes()

    with context, LoggingTimer("estimate_flow", {"nodes": n_nodes, "edges": nk_graph.numberOfEdges()}):
        P = _create_transition_matrix(nk_graph)
        flow, iterations, change = _power_iteration(P, teleport_probability, tolerance, max_iterations)

    converged = change < tolerance
    if not converged:
        if strict:
            check_convergence(change, tolerance, iterations, max_iterations, algorithm="flow estimation")
        logger.warning(
            "Flow estimation stopped after %d iterations without converging "
            "(change=%.3e, tolerance=%.3e)", iterations, change, tolerance
        )
    else:
        logger.debug("Flow estimation converged after %d iterations", iterations)

    probabilities = pl.DataFrame(
        {VERTEX_ID: id_mapper.original_ids(), "flow": flow},
        schema={VERTEX_ID: pl.Int64, "flow": pl.Float64}
    ).select(
        pl.col(VERTEX_ID),
        (pl.col("flow") / pl.col("flow").sum()).alias(PROB),
    )

    return FlowEstimate(
        probabilities=probabilities,
        iterations=iterations,
        final_change=change,
        converged=converged,
    )


def _create_transition_matrix(graph: nk.Graph) -> sp.csr_matrix:
    """Create row-normalized transition matrix P = D^-1 A summing parallel edges; sink rows stay zero."""
    n_nodes = graph.numberOfNodes()

    row_indices = []
    col_indices = []
    edge_weights = []

    for u, v, w in graph.iterEdgesWeights():
        row_indices.append(u)
        col_indices.append(v)
        edge_weights.append(w)

    adj_matrix = sp.coo_matrix(
        (edge_weights, (row_indices, col_indices)),
        shape=(n_nodes, n_nodes),
        dtype=np.float64
    ).tocsr()

    row_sums = np.asarray(adj_matrix.sum(axis=1)).flatten()
    sinks = row_sums <= 0
    if sinks.any():
        logger.debug("Found %d sink vertices", int(sinks.sum()))

    row_sums_inv = np.zeros(n_nodes, dtype=np.float64)
    row_sums_inv[~sinks] = 1.0 / row_sums[~sinks]

    return sp.diags(row_sums_inv).dot(adj_matrix).tocsr()


def _power_iteration(
    P: sp.csr_matrix,
    teleport_probability: float,
    tolerance: float,
    max_iterations: int
) -> Tuple[np.ndarray, int, float]:
    """Iterate the teleporting walk from the uniform vector; return (p, iterations, change)."""
    n_nodes = P.shape[0]
    teleport = teleport_probability / n_nodes
    PT = P.transpose().tocsr()

    p = np.full(n_nodes, 1.0 / n_nodes, dtype=np.float64)
    change = float("inf")
    iterations = 0

    while iterations < max_iterations:
        p_new = (1.0 - teleport_probability) * PT.dot(p) + teleport
        change = float(np.max(np.abs(p_new - p)))
        p = p_new
        iterations += 1
        if change < tolerance:
            break

    return p, iterations, change

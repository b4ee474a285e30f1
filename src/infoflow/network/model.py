"""
The Network flow model.

build_network() runs the full pipeline on a graph: edge normalization, flow
estimation, module projection, flow aggregation and codelength evaluation.
The resulting Network is immutable; coarsened partitions are scored by
deriving a new Network with ``with_graph`` (see ``apply_partition``).
"""

from dataclasses import dataclass, replace
from typing import Optional

from infoflow.common.context import ExecutionContext
from infoflow.common.exceptions import (
    ComputationError,
    FlowModelError,
    ValidationError,
    require_open_unit_interval
)
from infoflow.common.logging_config import get_logger, log_function_entry, LoggingTimer
from .graph import FlowGraph, VERTEX_ID
from .normalization import normalize_graph
from .flow import estimate_flow
from .modules import project_modules, aggregate_flow
from .codelength import probability_sum, calculate_codelength

logger = get_logger(__name__)


@dataclass(frozen=True)
class Network:
    """
    Flow model of a graph under a given partition.

    Attributes
    ----------
    teleport_probability : float
        Teleport probability tau of the random walk
    node_count : int
        Number of original vertices; unchanged by coarsening
    graph : FlowGraph
        Module records ``(id, size, prob, exitw, exitq)`` and inter-module
        flow edges ``(src, dst, exitw)``
    prob_sum : float
        Sum of plogp(prob) over the original vertices
    codelength : float
        Map-equation codelength of the partition, in bits
    converged : bool
        Whether flow estimation converged within tolerance
    iterations : int
        Number of flow-estimation iterations
    """

    teleport_probability: float
    node_count: int
    graph: FlowGraph
    prob_sum: float
    codelength: float
    converged: bool = True
    iterations: int = 0

    def with_graph(self, graph: FlowGraph, context: Optional[ExecutionContext] = None) -> "Network":
        """
        Derive a Network for a coarsened module graph.

        Teleport probability, node count, the cached prob_sum and the flow
        diagnostics carry over; only the codelength is re-evaluated.
        """
        context = context or ExecutionContext()
        codelength = calculate_codelength(graph.vertices, self.prob_sum, context)
        return replace(self, graph=graph, codelength=codelength)


def build_network(
    graph: FlowGraph,
    teleport_probability: float,
    context: Optional[ExecutionContext] = None,
    strict: bool = False
) -> Network:
    """
    Build the flow model of a graph with one module per vertex.

    Parameters
    ----------
    graph : FlowGraph
        Raw directed weighted graph (e.g. from ``build_flow_graph``), or the
        module graph of a previous Network treated as a new per-node input
    teleport_probability : float
        Teleport probability tau in (0, 1)
    context : ExecutionContext, optional
        Execution handle; a default context is used when omitted
    strict : bool, default False
        Raise ConvergenceError if flow estimation does not converge

    Returns
    -------
    Network
        Module graph, cached prob_sum and codelength

    Raises
    ------
    ValidationError
        If the graph has no vertices
    ConfigurationError
        If teleport_probability is outside (0, 1)
    ComputationError
        If the execution substrate fails

    Examples
    --------
    >>> edges = pl.DataFrame({"src": [1, 2, 3], "dst": [2, 3, 1]})
    >>> network = build_network(build_flow_graph(edges), 0.15)
    >>> network.node_count
    3
    """
    log_function_entry("build_network", teleport_probability=teleport_probability, strict=strict)
    require_open_unit_interval(teleport_probability, "teleport_probability")
    context = context or ExecutionContext()

    with context, LoggingTimer("build_network"):
        try:
            vertices, edges = normalize_graph(graph).collect(context)
            node_count = vertices.height
            if node_count == 0:
                raise ValidationError("Graph has no vertices", field="vertices")

            normalized = FlowGraph.from_frames(vertices.select(VERTEX_ID), edges)
            estimate = estimate_flow(normalized, teleport_probability, context, strict=strict)
            probabilities = estimate.probabilities.lazy()

            modules = context.collect(
                project_modules(probabilities, normalized.edges, teleport_probability, node_count),
                "project_modules"
            ).lazy()
            flow_edges = aggregate_flow(probabilities, normalized.edges)

            prob_sum = probability_sum(modules, context)
            codelength = calculate_codelength(modules, prob_sum, context)

        except FlowModelError:
            raise
        except Exception as e:
            raise ComputationError(
                f"Network construction failed: {e}",
                operation="build_network",
                cause=e
            ) from e

    logger.info(
        "Network built: %d nodes, %d edges, codelength=%.6f, flow iterations=%d%s",
        node_count, edges.height, codelength, estimate.iterations,
        "" if estimate.converged else " (not converged)"
    )

    return Network(
        teleport_probability=teleport_probability,
        node_count=node_count,
        graph=FlowGraph(vertices=modules, edges=flow_edges),
        prob_sum=prob_sum,
        codelength=codelength,
        converged=estimate.converged,
        iterations=estimate.iterations,
    )

"""
infoflow - flow models and map-equation codelengths for community detection.

This package builds, from a directed weighted graph, the random-walk flow
model used by map-equation community detection: stationary visiting
probabilities, module exit probabilities, inter-module flow and the
codelength of a partition.

Modules:
    common: Exceptions, configuration, execution context, validation and logging
    network: Flow-graph pipeline, Network model and partition scoring
"""

__version__ = "0.1.0"

from infoflow.common.config import InfoFlowConfig, load_config
from infoflow.common.context import ExecutionContext
from infoflow.network import (
    FlowGraph,
    Network,
    apply_partition,
    build_flow_graph,
    build_network,
    trim_graph,
)

__all__ = [
    "InfoFlowConfig",
    "load_config",
    "ExecutionContext",
    "FlowGraph",
    "Network",
    "apply_partition",
    "build_flow_graph",
    "build_network",
    "trim_graph",
]

"""
Flow-model construction and scoring.

This module provides the graph-to-flow-model pipeline:
- Flow-graph construction from polars edge and vertex tables
- Edge normalization (self-loop removal, parallel-edge merging, per-source scaling)
- Stationary flow estimation with a teleporting random walk
- Module records and inter-module flow aggregation
- Map-equation codelength evaluation
- Partition scoring and lineage trimming for iterative searches
"""

from .graph import FlowGraph, build_flow_graph, to_networkit

from .normalization import (
    trim_self_edges,
    aggregate_edges,
    normalize_edges,
    normalize_graph
)

from .flow import FlowEstimate, estimate_flow, FLOW_TOLERANCE, FLOW_MAX_ITERATIONS

from .modules import project_modules, aggregate_flow

from .codelength import plogp, plogp_expr, probability_sum, calculate_codelength

from .model import Network, build_network

from .partition import apply_partition

from .lineage import plan_depth, trim_frame, trim_graph

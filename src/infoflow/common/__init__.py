"""
Common utilities for the infoflow library.

This module provides shared functionality used by the network pipeline:
- Exception hierarchy
- Run configuration
- Explicit execution context
- ID mapping between vertex ids and NetworkIt indices
- Input validation for edge, vertex and assignment frames
- Logging configuration
"""

from .exceptions import (
    FlowModelError,
    ValidationError,
    GraphConstructionError,
    ConvergenceError,
    ConfigurationError,
    ComputationError,
    require_positive,
    require_open_unit_interval,
    check_convergence
)

from .config import InfoFlowConfig, parse_config, load_config, configure_logging
from .context import ExecutionContext
from .id_mapper import IDMapper
from .validators import (
    validate_edge_frame,
    validate_vertex_frame,
    validate_assignment_frame
)

from .logging_config import (
    setup_logging,
    get_logger,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter
)

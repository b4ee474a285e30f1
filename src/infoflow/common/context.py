"""
Execution context threaded through the pipeline entry points.

The context owns the worker-thread configuration of the graph engine and is
the single place where deferred polars queries are evaluated, so that engine
failures are reported uniformly as ComputationError.
"""

from typing import List, Optional

import networkit as nk
import polars as pl

from .exceptions import ComputationError, require_positive
from .logging_config import get_logger

logger = get_logger(__name__)


class ExecutionContext:
    """
    Explicit execution handle for one or more pipeline invocations.

    Parameters
    ----------
    num_threads : int, optional
        Number of NetworkIt worker threads to use while the context is
        active. None keeps the current setting.

    Examples
    --------
    >>> with ExecutionContext(num_threads=4) as ctx:
    ...     network = build_network(graph, 0.15, context=ctx)

    Notes
    -----
    Pipeline entry points enter the context they are given, so a context
    passed without a ``with`` block still applies its thread setting for
    the duration of that call. Entering is re-entrant.

    The polars thread pool is sized once per process (POLARS_MAX_THREADS)
    and cannot be changed here; its size is reported for diagnostics.
    """

    def __init__(self, num_threads: Optional[int] = None) -> None:
        if num_threads is not None:
            require_positive(num_threads, "num_threads")
        self.num_threads = num_threads
        self._previous_threads: List[int] = []

    def __enter__(self) -> "ExecutionContext":
        if self.num_threads is not None:
            self._previous_threads.append(nk.getMaxNumberOfThreads())
            nk.setNumberOfThreads(self.num_threads)
        logger.debug(
            "Execution context entered: networkit_threads=%s, polars_threads=%s",
            nk.getMaxNumberOfThreads(), pl.thread_pool_size()
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._previous_threads:
            nk.setNumberOfThreads(self._previous_threads.pop())

    def collect(self, frame: pl.LazyFrame, operation: str) -> pl.DataFrame:
        """
        Evaluate a lazy frame, blocking until it is fully materialized.

        Parameters
        ----------
        frame : pl.LazyFrame
            Deferred query to evaluate
        operation : str
            Name of the pipeline step, used in diagnostics

        Raises
        ------
        ComputationError
            If the engine fails while evaluating the query
        """
        try:
            return frame.collect()
        except pl.exceptions.PolarsError as e:
            raise ComputationError(
                f"Evaluation of '{operation}' failed: {e}",
                operation=operation,
                error_type="engine",
                cause=e
            )
        except MemoryError as e:
            raise ComputationError(
                f"Out of memory while evaluating '{operation}'",
                operation=operation,
                error_type="memory",
                cause=e
            )

    def __repr__(self) -> str:
        return f"ExecutionContext(num_threads={self.num_threads})"

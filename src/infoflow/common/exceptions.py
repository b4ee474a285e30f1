"""
Exception hierarchy for the infoflow library.

Every error raised by the flow-model pipeline derives from FlowModelError,
so callers driving an optimization loop can catch library failures with a
single except clause while still distinguishing bad input (ValidationError,
ConfigurationError) from failures of the execution substrate
(ComputationError).
"""

from typing import Dict, Any, Optional, List, Union
import traceback


class FlowModelError(Exception):
    """
    Base exception for all flow-model errors.

    Parameters
    ----------
    message : str
        Human-readable error message describing what went wrong
    details : Dict[str, Any], optional
        Structured information about the error
    cause : Exception, optional
        The underlying exception that caused this error
    context : Dict[str, Any], optional
        Information about the operation that failed

    Examples
    --------
    >>> raise FlowModelError("Flow estimation failed")
    >>> raise FlowModelError(
    ...     "Invalid network size",
    ...     details={"nodes": 0, "edges": 10}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict)) and len(str(value)) > 100:
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")
            full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **kwargs: Any) -> 'FlowModelError':
        """
        Add context to the exception and return it for chaining.

        Examples
        --------
        >>> error = FlowModelError("Failed")
        >>> error.add_context(operation="build_network", step="normalize")
        """
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """Return every piece of error information as a dictionary."""
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if self.__traceback__ else None
        }


class ValidationError(FlowModelError):
    """
    Exception raised when input frames or assignments are malformed.

    Parameters
    ----------
    message : str
        Descriptive error message explaining the validation failure
    field : str, optional
        Name of the column or argument that failed validation
    value : Any, optional
        The offending value
    expected : str, optional
        Description of what was expected

    Examples
    --------
    >>> raise ValidationError("Column contains null values", field="src")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class GraphConstructionError(FlowModelError):
    """
    Exception raised while materializing a flow graph into NetworkIt.

    Parameters
    ----------
    message : str
        Description of the construction error
    node_count : int, optional
        Number of nodes when the error occurred
    edge_count : int, optional
        Number of edges processed when the error occurred
    operation : str, optional
        Specific operation that failed (e.g. "add_edges")
    """

    def __init__(
        self,
        message: str,
        node_count: Optional[int] = None,
        edge_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.node_count = node_count
        self.edge_count = edge_count
        self.operation = operation

        context = {}
        if node_count is not None:
            context["node_count"] = node_count
        if edge_count is not None:
            context["edge_count"] = edge_count
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class ConvergenceError(FlowModelError):
    """
    Exception raised when the random-walk iteration does not converge.

    Only raised when the caller asks for strict convergence; by default
    non-convergence is reported through diagnostics and a warning.

    Examples
    --------
    >>> raise ConvergenceError(
    ...     "Flow estimation did not converge",
    ...     algorithm="power_iteration",
    ...     iterations=1000,
    ...     max_iterations=1000,
    ...     final_change=1e-4,
    ...     threshold=1e-9
    ... )
    """

    def __init__(
        self,
        message: str,
        algorithm: Optional[str] = None,
        iterations: Optional[int] = None,
        max_iterations: Optional[int] = None,
        final_change: Optional[float] = None,
        threshold: Optional[float] = None,
        **kwargs
    ) -> None:
        self.algorithm = algorithm
        self.iterations = iterations
        self.max_iterations = max_iterations
        self.final_change = final_change
        self.threshold = threshold

        details = kwargs.get('details', {})
        if algorithm:
            details["algorithm"] = algorithm
        if iterations is not None:
            details["iterations_completed"] = iterations
        if max_iterations is not None:
            details["max_iterations"] = max_iterations
        if final_change is not None:
            details["final_change"] = final_change
        if threshold is not None:
            details["convergence_threshold"] = threshold

        kwargs["details"] = details
        super().__init__(message, **kwargs)


class ConfigurationError(FlowModelError):
    """
    Exception raised for invalid configuration or parameter values.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid parameter value
    valid_options : List[Any], optional
        Valid options for the parameter
    function : str, optional
        Name of the function where the error occurred

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Teleport probability must lie in (0, 1)",
    ...     parameter="teleport_probability",
    ...     value=1.5
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.get('details', {})
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if valid_options:
            details["valid_options"] = valid_options
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        kwargs["details"] = details
        super().__init__(enhanced_message, **kwargs)


class ComputationError(FlowModelError):
    """
    Exception raised when the execution substrate fails.

    Covers engine errors during frame evaluation, numerical failures and
    resource exhaustion. These are fatal to the current pipeline invocation
    and are never retried by the library.

    Examples
    --------
    >>> raise ComputationError(
    ...     "Insufficient memory while collecting edges",
    ...     operation="collect",
    ...     error_type="memory"
    ... )
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = kwargs.get('context', {})
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        details = kwargs.get('details', {})
        details.update(self.resource_info)

        kwargs["details"] = details
        kwargs["context"] = context
        super().__init__(message, **kwargs)


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Validate that a numeric parameter is positive.

    Raises
    ------
    ConfigurationError
        If value is not positive (or negative when allow_zero=True)
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )


def require_open_unit_interval(value: float, parameter_name: str) -> None:
    """
    Validate that a probability parameter lies strictly between 0 and 1.

    Raises
    ------
    ConfigurationError
        If value is not a number in (0, 1)
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be a number, got {type(value).__name__}",
            parameter=parameter_name,
            value=value
        )
    if not 0.0 < value < 1.0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must lie in (0, 1), got {value}",
            parameter=parameter_name,
            value=value
        )


def check_convergence(
    change: float,
    threshold: float,
    iteration: int,
    max_iterations: int,
    algorithm: str = "iterative algorithm"
) -> None:
    """
    Raise ConvergenceError if the iteration budget is spent above threshold.

    Raises
    ------
    ConvergenceError
        If iteration >= max_iterations and change >= threshold
    """
    if iteration >= max_iterations and change >= threshold:
        raise ConvergenceError(
            f"{algorithm} failed to converge within {max_iterations} iterations",
            algorithm=algorithm,
            iterations=iteration,
            max_iterations=max_iterations,
            final_change=change,
            threshold=threshold
        )

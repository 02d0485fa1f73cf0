from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Standard error codes for optracer.

    Error codes categorise failures without a deep exception hierarchy.
    Each category has its own prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Input validation errors
        OPERATION_*: Operation lifecycle errors
        SINK_*: Failures raised by telemetry sinks
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"

    # Operation errors
    OPERATION_ERROR = "OPERATION_001"
    OPERATION_ALREADY_STARTED = "OPERATION_002"
    OPERATION_NOT_STARTED = "OPERATION_003"
    OPERATIONS_NOT_SUPPORTED = "OPERATION_004"

    # Sink errors
    SINK_ERROR = "SINK_001"


class TracerError(Exception):
    """Base exception for all optracer errors.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.OPERATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize tracer error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from optracer.logging import get_logger
        get_logger(__name__).debug(
            message,
            extra={"error_code": error_code.value, "details": self.details},
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class OperationAlreadyStartedError(TracerError):
    """Raised when an operation is started while another one is still open."""

    def __init__(self, running_operation: str, requested_operation: str):
        super().__init__(
            message=(
                f"Operation '{requested_operation}' can't start because "
                f"'{running_operation}' already started"
            ),
            error_code=ErrorCode.OPERATION_ALREADY_STARTED,
            details={
                "running_operation": running_operation,
                "requested_operation": requested_operation,
            },
        )
        self.running_operation = running_operation
        self.requested_operation = requested_operation


class OperationNotStartedError(TracerError):
    """Raised when an operation call needs an open operation and there is none."""

    def __init__(self, action: str):
        super().__init__(
            message=f"Operation not started yet. {action}",
            error_code=ErrorCode.OPERATION_NOT_STARTED,
            details={"action": action},
        )


@dataclass(frozen=True)
class SinkFailure:
    """A single sink's failure during a fan-out call."""

    index: int
    sink_name: str
    error: Exception

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "sink": self.sink_name,
            "error_type": type(self.error).__name__,
            "error": str(self.error),
        }


class SinkFailureError(TracerError):
    """One or more sinks failed during a fan-out call.

    Every sink was attempted exactly once before this error was raised.

    Attributes:
        call: Name of the sink method that was fanned out
        failures: Per-sink failures in fan-out order
        succeeded: Names of the sinks that accepted the call
    """

    def __init__(self, call: str, failures: List[SinkFailure], succeeded: List[str]):
        names = ", ".join(f.sink_name for f in failures)
        super().__init__(
            message=f"{len(failures)} sink(s) failed during '{call}': {names}",
            error_code=ErrorCode.SINK_ERROR,
            details={
                "call": call,
                "failures": [f.to_dict() for f in failures],
                "succeeded": list(succeeded),
            },
            cause=failures[0].error if len(failures) == 1 else None,
        )
        self.call = call
        self.failures = list(failures)
        self.succeeded = list(succeeded)

    @property
    def errors(self) -> List[Exception]:
        """The underlying exceptions, in fan-out order."""
        return [f.error for f in self.failures]


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> TracerError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        TracerError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return TracerError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> TracerError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value

    Returns:
        TracerError with VALIDATION_ERROR code
    """
    details = kwargs.get('details', {})
    if field:
        details["field"] = field
    if value is not None:
        details["value"] = str(value)

    return TracerError(
        message=message,
        error_code=ErrorCode.VALIDATION_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def operations_not_supported_error(action: str) -> TracerError:
    """Create an error for operation calls on a tracer without an operation handler."""
    return TracerError(
        message=f"This tracer has no operation handler. Can't {action}",
        error_code=ErrorCode.OPERATIONS_NOT_SUPPORTED,
        details={"action": action},
    )

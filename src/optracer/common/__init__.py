"""Common utilities and exceptions for optracer.

Exception Design:
    The exception system uses error codes for categorization. All exceptions
    inherit from TracerError and carry structured error information. Thin
    subclasses exist only for the failures callers are expected to catch:
    operation sequencing errors and aggregated sink failures.
"""

from optracer.common.exceptions import (
    TracerError,
    ErrorCode,
    OperationAlreadyStartedError,
    OperationNotStartedError,
    SinkFailure,
    SinkFailureError,
    # Helper functions
    configuration_error,
    validation_error,
    operations_not_supported_error,
)

__all__ = [
    # Base Exception and Error Codes
    "TracerError",
    "ErrorCode",
    # Operation and sink errors
    "OperationAlreadyStartedError",
    "OperationNotStartedError",
    "SinkFailure",
    "SinkFailureError",
    # Helper functions
    "configuration_error",
    "validation_error",
    "operations_not_supported_error",
]

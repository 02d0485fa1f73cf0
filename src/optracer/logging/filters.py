"""Logging filters for operation context injection.

This module provides a filter that injects the currently running operation
into log records, so library logs can be correlated with the telemetry
emitted inside that operation.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

from optracer.__version__ import __version__

operation_name_var: ContextVar[Optional[str]] = ContextVar("operation_name", default=None)
operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


class ContextFilter(logging.Filter):
    """Logging filter that adds operation context variables to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "operation_name", operation_name_var.get())
        setattr(record, "operation_id", operation_id_var.get())
        setattr(record, "sdk_name", "optracer")
        setattr(record, "sdk_version", __version__)

        return True


def set_operation_context(
    operation_name: Optional[str] = None,
    operation_id: Optional[str] = None,
) -> None:
    """Set operation context variables."""
    if operation_name is not None:
        operation_name_var.set(operation_name)
    if operation_id is not None:
        operation_id_var.set(operation_id)


def clear_operation_context() -> None:
    """Clear all operation context variables."""
    operation_name_var.set(None)
    operation_id_var.set(None)

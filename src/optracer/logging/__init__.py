"""Logging infrastructure for optracer.

Structured logging with JSON output and operation context tracking.
"""

from optracer.logging.filters import ContextFilter, clear_operation_context, set_operation_context
from optracer.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_operation_context",
    "clear_operation_context",
]

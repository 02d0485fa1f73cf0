"""Sink routing telemetry into the standard logging system."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from optracer.core.merger import merge_properties
from optracer.logging import get_logger
from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
)


class LoggingSink:
    """Sink that turns each telemetry item into a log record.

    Records carry ``telemetry_type`` and ``properties`` in ``extra`` so the
    JSON formatter renders them as structured fields. Properties added with
    ``add_custom_property`` are merged under the per-call ones.
    """

    name = "logging"

    def __init__(self, logger_name: str = "optracer.telemetry"):
        self._logger = get_logger(logger_name)
        self._custom_properties: Dict[str, str] = {}

    def trace_information(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._log(logging.INFO, message, "trace", properties)

    def trace_error(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._log(logging.ERROR, message, "trace", properties)

    def trace_verbose(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._log(logging.DEBUG, message, "trace", properties)

    def trace_warning(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._log(logging.WARNING, message, "trace", properties)

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        options = options or MetricOptions()
        self._log(
            logging.INFO,
            f"Metric {name}={value}",
            "metric",
            options.properties,
            metric_name=name,
            metric_value=value,
            metric_count=options.count,
            metric_max=options.max,
            metric_min=options.min,
        )

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        options = options or EventOptions()
        self._log(
            logging.INFO,
            f"Event {event_name}",
            "event",
            options.properties,
            event_name=event_name,
            event_metrics=dict(options.metrics or {}),
        )

    def report_exception(self, exception: BaseException, properties: Optional[Dict[str, str]] = None) -> None:
        self._log(
            logging.ERROR,
            f"Exception {type(exception).__name__}: {exception}",
            "exception",
            properties,
            exc_info=(type(exception), exception, exception.__traceback__),
        )

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Dict[str, str]] = None) -> None:
        level = logging.INFO if dependency.success else logging.WARNING
        self._log(
            level,
            f"Dependency {dependency.type_name} {dependency.name} -> {dependency.target}",
            "dependency",
            properties,
            dependency=dependency.to_dict(),
        )

    def add_custom_property(self, key: str, value: str) -> None:
        self._custom_properties[key] = value

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        self._custom_properties.update(properties)

    def record_completed_operation(self, operation: CompletedOperation) -> None:
        level = logging.INFO if operation.success else logging.WARNING
        self._log(
            level,
            f"Operation {operation.name} completed",
            "operation",
            operation.properties,
            operation=operation.to_dict(),
        )

    def flush(self) -> None:
        for handler in self._logger.handlers:
            handler.flush()

    def _log(
        self,
        level: int,
        message: str,
        telemetry_type: str,
        properties: Optional[Mapping[str, str]],
        exc_info: Any = None,
        **fields: Any,
    ) -> None:
        extra = {
            "telemetry_type": telemetry_type,
            "properties": merge_properties([self._custom_properties, properties]),
            **fields,
        }
        self._logger.log(level, message, extra=extra, exc_info=exc_info)

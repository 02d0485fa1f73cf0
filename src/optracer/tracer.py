"""User-facing tracer.

``TracerFacade`` owns the global custom properties, optionally an
``OperationHandler``, and a single sink (usually a ``TracerAggregator``).
Every telemetry item is tagged with the merge of, in increasing precedence:

1. global custom properties
2. the open operation's properties
3. the properties passed to the call
"""

from __future__ import annotations

import threading
import traceback
from typing import Dict, Mapping, Optional

from optracer.common.exceptions import operations_not_supported_error, validation_error
from optracer.core.merger import merge_properties
from optracer.logging import get_logger
from optracer.operations.handler import OperationHandler, OperationState, OperationToken
from optracer.protocols.sinks import Sink
from optracer.sinks.flushing import (
    DEFAULT_FLUSH_GRACE_PERIOD_SECONDS,
    DEFAULT_FLUSH_TIMEOUT_SECONDS,
    flush_sink,
)
from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
)

logger = get_logger(__name__)


class TracerFacade:
    """Tracing and operation API over a sink.

    Closing the tracer (``close()`` or leaving a ``with`` block) dispatches
    any open operation and then flushes the sink. The flush runs even when
    the dispatch fails.

    Thread safety:
        Custom property updates and merges are guarded by a lock. Operation
        calls inherit the handler's single-caller precondition.
    """

    def __init__(
        self,
        sink: Sink,
        operation_handler: Optional[OperationHandler] = None,
        flush_timeout_seconds: float = DEFAULT_FLUSH_TIMEOUT_SECONDS,
        flush_grace_period_seconds: float = DEFAULT_FLUSH_GRACE_PERIOD_SECONDS,
    ):
        """Initialize the tracer.

        Args:
            sink: Sink receiving all telemetry
            operation_handler: Handler for operations; None for a tracer that
                only supports simple tracing
            flush_timeout_seconds: Wait for the sink's flush-completion signal
            flush_grace_period_seconds: Fixed pause for asynchronous sinks
                without a completion signal
        """
        self._sink = sink
        self._operation_handler = operation_handler
        self.flush_timeout_seconds = flush_timeout_seconds
        self.flush_grace_period_seconds = flush_grace_period_seconds
        self._custom_properties: Dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def sink(self) -> Sink:
        return self._sink

    @property
    def operation_handler(self) -> Optional[OperationHandler]:
        return self._operation_handler

    @property
    def custom_properties(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._custom_properties)

    @property
    def in_operation(self) -> bool:
        return (
            self._operation_handler is not None
            and self._operation_handler.state is OperationState.STARTED
        )

    # Custom properties

    def add_custom_property(self, key: str, value: str) -> None:
        """Add or replace a property attached to all telemetry from now on."""
        self._validate_key(key)
        with self._lock:
            self._custom_properties[key] = value

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        """Add or replace several custom properties at once."""
        for key in properties:
            self._validate_key(key)
        with self._lock:
            self._custom_properties.update(properties)

    # Tracing

    def trace_information(self, message: str, properties: Optional[Mapping[str, str]] = None) -> None:
        self._sink.trace_information(message, self._merged_properties(properties))

    def trace_error(self, message: str, properties: Optional[Mapping[str, str]] = None) -> None:
        self._sink.trace_error(message, self._merged_properties(properties))

    def trace_verbose(self, message: str, properties: Optional[Mapping[str, str]] = None) -> None:
        self._sink.trace_verbose(message, self._merged_properties(properties))

    def trace_warning(self, message: str, properties: Optional[Mapping[str, str]] = None) -> None:
        self._sink.trace_warning(message, self._merged_properties(properties))

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        """Send a custom metric value.

        Args:
            name: The metric name
            value: The metric value
            options: Call properties and pre-aggregation fields; the
                properties are replaced by the merged set before sending
        """
        options = options or MetricOptions()
        merged = self._merged_properties(options.properties)
        self._sink.track_custom_metric(name, value, options.model_copy(update={"properties": merged}))

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        """Send a custom event with optional properties and metrics."""
        options = options or EventOptions()
        merged = self._merged_properties(options.properties)
        self._sink.track_custom_event(event_name, options.model_copy(update={"properties": merged}))

    def report_exception(self, exception: BaseException, properties: Optional[Mapping[str, str]] = None) -> None:
        """Report an exception as an error trace and a structured exception record.

        Both items carry the same merged properties. The exception record is
        sent even when sending the trace raised; that error is re-raised
        afterwards.
        """
        merged = self._merged_properties(properties)
        formatted = "".join(
            traceback.format_exception(type(exception), exception, exception.__traceback__)
        ).rstrip()
        try:
            self._sink.trace_error(formatted, dict(merged))
        finally:
            self._sink.report_exception(exception, dict(merged))

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Mapping[str, str]] = None) -> None:
        self._sink.track_dependency(dependency, self._merged_properties(properties))

    # Operations

    def start_operation(
        self,
        operation_name: str,
        properties: Optional[Mapping[str, str]] = None,
    ) -> OperationToken:
        """Start an operation grouping all telemetry until it is dispatched.

        The global custom properties are merged with ``properties`` and the
        result becomes the operation's properties.

        Returns:
            Token dispatching the operation when released

        Raises:
            OperationAlreadyStartedError: If an operation is already open
            TracerError: If this tracer has no operation handler
        """
        handler = self._require_handler("start operation")
        with self._lock:
            merged = merge_properties([self._custom_properties, properties])
        return handler.start_operation(operation_name, merged)

    def mark_operation_as_failure(self) -> None:
        self._require_handler("mark operation as failure").mark_operation_as_failure()

    def add_operation_metric(self, key: str, value: float) -> None:
        self._require_handler("add operation metric").add_operation_metric(key, value)

    def dispatch_operation(self) -> CompletedOperation:
        return self._require_handler("dispatch operation").dispatch_operation()

    # Lifecycle

    def flush(self) -> None:
        """Flush the sink and wait for delivery.

        Call this before process exit to make sure telemetry was sent.
        """
        flush_sink(
            self._sink,
            timeout=self.flush_timeout_seconds,
            grace_period=self.flush_grace_period_seconds,
        )

    def close(self) -> None:
        """Dispatch the open operation, if any, then flush.

        The flush runs even when the dispatch failed. In that case the
        dispatch error is re-raised after flushing; a flush error is then
        only logged.
        """
        dispatch_error: Optional[Exception] = None
        try:
            if self.in_operation:
                self._operation_handler.dispatch_operation()
        except Exception as exc:
            logger.error("Dispatching the open operation failed during close", exc_info=True)
            dispatch_error = exc

        try:
            self.flush()
        except Exception:
            if dispatch_error is None:
                raise
            logger.error("Flushing failed during close after a failed dispatch", exc_info=True)

        if dispatch_error is not None:
            raise dispatch_error

    def __enter__(self) -> "TracerFacade":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # Helpers

    def _merged_properties(self, properties: Optional[Mapping[str, str]]) -> Dict[str, str]:
        with self._lock:
            global_properties = dict(self._custom_properties)
        operation_properties = (
            self._operation_handler.operation_properties if self._operation_handler is not None else None
        )
        return merge_properties([global_properties, operation_properties, properties])

    def _require_handler(self, action: str) -> OperationHandler:
        if self._operation_handler is None:
            raise operations_not_supported_error(action)
        return self._operation_handler

    @staticmethod
    def _validate_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise validation_error("Custom property key must be a non-empty string", field="key", value=key)

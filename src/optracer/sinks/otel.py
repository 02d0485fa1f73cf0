"""OpenTelemetry backend sink.

Maps optracer telemetry onto the OpenTelemetry API:

- completed operations and dependency calls become spans with their real
  start and end time (SERVER for requests, CLIENT for dependencies)
- traces, events and exceptions become short spans carrying their attributes
- metrics are recorded on one histogram per metric name

Exporting is left to whatever SDK providers the application configured.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Mapping, Optional

from opentelemetry import metrics, trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from optracer.__version__ import __version__
from optracer.core.merger import merge_properties
from optracer.logging import get_logger
from optracer.telemetry import get_meter, get_tracer
from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
    SeverityLevel,
)

logger = get_logger(__name__)

_OPERATION_SPAN_KINDS = {
    "request": SpanKind.SERVER,
    "dependency": SpanKind.CLIENT,
}


def _to_ns(value: datetime) -> int:
    return int(value.timestamp() * 1_000_000_000)


def _duration_ns(value: timedelta) -> int:
    return int(value.total_seconds() * 1_000_000_000)


class OpenTelemetrySink:
    """Sink backed by an OpenTelemetry tracer and meter.

    Attributes:
        instrumentation_key: Opaque backend identifier, attached to every item
        session_id: Session identifier, attached to every item
    """

    name = "opentelemetry"

    def __init__(
        self,
        instrumentation_key: Optional[str] = None,
        session_id: Optional[str] = None,
        service_name: str = "optracer",
        tracer_provider: Optional[trace.TracerProvider] = None,
        meter_provider: Optional[metrics.MeterProvider] = None,
    ):
        self.instrumentation_key = instrumentation_key
        self.session_id = session_id
        self._tracer_provider = tracer_provider
        self._meter_provider = meter_provider
        self._tracer = get_tracer(service_name, __version__, tracer_provider)
        self._meter = get_meter(service_name, __version__, meter_provider)
        self._histograms: Dict[str, metrics.Histogram] = {}
        self._custom_properties: Dict[str, str] = {}

    def trace_information(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._trace(message, SeverityLevel.INFORMATION, properties)

    def trace_error(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._trace(message, SeverityLevel.ERROR, properties)

    def trace_verbose(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._trace(message, SeverityLevel.VERBOSE, properties)

    def trace_warning(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._trace(message, SeverityLevel.WARNING, properties)

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        """Record ``value`` on the histogram named ``name``.

        Pre-aggregated fields (count, max, min, timestamp) have no histogram
        counterpart; they are attached as attributes when present.
        """
        options = options or MetricOptions()
        attributes = self._attributes(options.properties, telemetry_type="metric")
        for field_name in ("count", "max", "min"):
            field_value = getattr(options, field_name)
            if field_value is not None:
                attributes[f"optracer.metric.{field_name}"] = field_value
        if options.timestamp is not None:
            attributes["optracer.metric.timestamp"] = options.timestamp.isoformat()

        histogram = self._histograms.get(name)
        if histogram is None:
            histogram = self._meter.create_histogram(name, description=f"Custom metric {name}")
            self._histograms[name] = histogram
        histogram.record(value, attributes)

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        options = options or EventOptions()
        attributes = self._attributes(options.properties, telemetry_type="event")
        for key, value in (options.metrics or {}).items():
            attributes[f"optracer.metric.{key}"] = value
        span = self._tracer.start_span(event_name, attributes=attributes)
        span.end()

    def report_exception(self, exception: BaseException, properties: Optional[Dict[str, str]] = None) -> None:
        attributes = self._attributes(properties, telemetry_type="exception")
        span = self._tracer.start_span(f"exception.{type(exception).__name__}", attributes=attributes)
        span.record_exception(exception, attributes=attributes)
        span.set_status(Status(StatusCode.ERROR, str(exception)))
        span.end()

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Dict[str, str]] = None) -> None:
        attributes = self._attributes(properties, telemetry_type="dependency")
        attributes.update({
            "optracer.dependency.type": dependency.type_name,
            "optracer.dependency.target": dependency.target,
        })
        if dependency.data is not None:
            attributes["optracer.dependency.data"] = dependency.data
        if dependency.result_code is not None:
            attributes["optracer.dependency.result_code"] = dependency.result_code

        start_ns = _to_ns(dependency.start_time)
        span = self._tracer.start_span(
            dependency.name,
            kind=SpanKind.CLIENT,
            attributes=attributes,
            start_time=start_ns,
        )
        if not dependency.success:
            span.set_status(Status(StatusCode.ERROR))
        span.end(end_time=start_ns + _duration_ns(dependency.duration))

    def add_custom_property(self, key: str, value: str) -> None:
        self._custom_properties[key] = value

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        self._custom_properties.update(properties)

    def record_completed_operation(self, operation: CompletedOperation) -> None:
        attributes = self._attributes(operation.properties, telemetry_type=operation.kind)
        attributes["optracer.operation.id"] = operation.operation_id
        attributes["optracer.operation.success"] = operation.success
        if operation.response_code is not None:
            attributes["optracer.operation.response_code"] = operation.response_code
        for key, value in operation.metrics.items():
            attributes[f"optracer.metric.{key}"] = value

        start_ns = _to_ns(operation.start_time)
        span = self._tracer.start_span(
            operation.name,
            kind=_OPERATION_SPAN_KINDS.get(operation.kind, SpanKind.INTERNAL),
            attributes=attributes,
            start_time=start_ns,
        )
        if not operation.success:
            span.set_status(Status(StatusCode.ERROR))
        span.end(end_time=start_ns + _duration_ns(operation.duration))

    def flush(self) -> None:
        # Export is driven by the SDK span/metric processors; wait_for_flush forces it.
        pass

    def wait_for_flush(self, timeout: float) -> bool:
        """Force-flush the tracer and meter providers.

        Providers without ``force_flush`` (the API no-op providers) count as
        flushed.
        """
        timeout_millis = max(1, int(timeout * 1000))
        providers = (
            self._tracer_provider or trace.get_tracer_provider(),
            self._meter_provider or metrics.get_meter_provider(),
        )
        completed = True
        for provider in providers:
            force_flush = getattr(provider, "force_flush", None)
            if callable(force_flush):
                result = force_flush(timeout_millis=timeout_millis)
                completed = completed and result is not False
        logger.debug("OpenTelemetry providers flushed", extra={"completed": completed})
        return completed

    def _trace(self, message: str, severity: SeverityLevel, properties: Optional[Dict[str, str]]) -> None:
        attributes = self._attributes(properties, telemetry_type="trace")
        attributes["optracer.trace.message"] = message
        attributes["optracer.trace.severity"] = severity.value
        span = self._tracer.start_span(f"trace.{severity.value}", attributes=attributes)
        if severity is SeverityLevel.ERROR:
            span.set_status(Status(StatusCode.ERROR, message))
        span.end()

    def _attributes(
        self,
        properties: Optional[Mapping[str, str]],
        telemetry_type: Optional[str] = None,
    ) -> Dict[str, object]:
        attributes: Dict[str, object] = dict(merge_properties([self._custom_properties, properties]))
        if telemetry_type:
            attributes["optracer.telemetry_type"] = telemetry_type
        if self.instrumentation_key:
            attributes["optracer.instrumentation_key"] = self.instrumentation_key
        if self.session_id:
            attributes["session.id"] = self.session_id
        return attributes

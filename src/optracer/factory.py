"""Factory functions building ready-to-use tracers from settings."""

from __future__ import annotations

import uuid
from typing import List, Optional, Sequence

from opentelemetry import metrics, trace

from optracer.logging import get_logger
from optracer.operations.handler import OperationHandler
from optracer.operations.strategies import OperationStrategy, RequestOperationStrategy
from optracer.protocols.sinks import Sink
from optracer.settings import TracerSettings, get_settings
from optracer.sinks.aggregated import TracerAggregator
from optracer.sinks.otel import OpenTelemetrySink
from optracer.sinks.text import ConsoleSink
from optracer.tracer import TracerFacade

logger = get_logger(__name__)


def create_backend_sink(
    settings: Optional[TracerSettings] = None,
    session_id: Optional[str] = None,
    tracer_provider: Optional[trace.TracerProvider] = None,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> OpenTelemetrySink:
    """Create the OpenTelemetry sink for the configured backend.

    The session id is taken from ``session_id``, then from settings, and is
    otherwise generated.
    """
    settings = settings or get_settings()
    return OpenTelemetrySink(
        instrumentation_key=settings.instrumentation_key,
        session_id=session_id or settings.session_id or str(uuid.uuid4()),
        service_name=settings.service_name,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )


def create_tracer(
    settings: Optional[TracerSettings] = None,
    session_id: Optional[str] = None,
    operation_strategy: Optional[OperationStrategy] = None,
    tracer_provider: Optional[trace.TracerProvider] = None,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> TracerFacade:
    """Create a tracer over the backend sink.

    Operations are request-shaped unless another ``operation_strategy`` is
    given. A console sink is added when ``console_sink_enabled`` is set.

    Example:
        >>> tracer = create_tracer()
        >>> tracer.add_custom_property("RunMode", "Demo")
        >>> with tracer.start_operation("Demo Operation"):
        ...     tracer.track_custom_event("Demo Custom Event")
        >>> tracer.flush()
    """
    return create_aggregated_tracer(
        additional_sinks=None,
        settings=settings,
        session_id=session_id,
        operation_strategy=operation_strategy,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )


def create_aggregated_tracer(
    additional_sinks: Optional[Sequence[Sink]] = None,
    settings: Optional[TracerSettings] = None,
    session_id: Optional[str] = None,
    operation_strategy: Optional[OperationStrategy] = None,
    tracer_provider: Optional[trace.TracerProvider] = None,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> TracerFacade:
    """Create a tracer fanning out to the backend sink and ``additional_sinks``.

    The backend sink always comes first. Completed operations are delivered
    to every sink.
    """
    settings = settings or get_settings()
    sinks: List[Sink] = [
        create_backend_sink(settings, session_id, tracer_provider, meter_provider)
    ]
    if settings.console_sink_enabled:
        sinks.append(ConsoleSink())
    sinks.extend(additional_sinks or [])

    if len(sinks) == 1:
        sink: Sink = sinks[0]
    else:
        sink = TracerAggregator(
            sinks,
            flush_timeout_seconds=settings.flush_timeout_seconds,
            flush_grace_period_seconds=settings.flush_grace_period_seconds,
        )

    handler = OperationHandler(sink, operation_strategy or RequestOperationStrategy())
    logger.debug(
        "Tracer created",
        extra={"sinks": len(sinks), "operation_kind": handler.strategy.kind},
    )
    return TracerFacade(
        sink,
        operation_handler=handler,
        flush_timeout_seconds=settings.flush_timeout_seconds,
        flush_grace_period_seconds=settings.flush_grace_period_seconds,
    )

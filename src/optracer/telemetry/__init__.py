"""OpenTelemetry helpers for the OpenTelemetry sink."""

from typing import Optional

from opentelemetry import metrics, trace

__all__ = [
    "get_tracer",
    "get_meter",
]


def get_tracer(
    name: str,
    version: Optional[str] = None,
    tracer_provider: Optional[trace.TracerProvider] = None,
) -> trace.Tracer:
    """Return a tracer from ``tracer_provider`` or the active global provider."""
    if tracer_provider is not None:
        return tracer_provider.get_tracer(name, version)
    return trace.get_tracer(name, version)


def get_meter(
    name: str,
    version: Optional[str] = None,
    meter_provider: Optional[metrics.MeterProvider] = None,
) -> metrics.Meter:
    """Return a meter from ``meter_provider`` or the active global provider."""
    if meter_provider is not None:
        return meter_provider.get_meter(name, version)
    return metrics.get_meter(name, version)

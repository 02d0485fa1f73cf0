"""Sink protocol definitions.

A sink is the external collaborator that actually records or transmits
telemetry. optracer never encodes or ships telemetry itself; everything
reaches a backend through the methods below.
"""

from typing import Dict, Mapping, Optional, Protocol, runtime_checkable

from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
)


@runtime_checkable
class Sink(Protocol):
    """Protocol defining the capability every telemetry sink exposes.

    Property arguments passed by the tracer are already fully merged
    (global, operation and call-site layers), so sinks attach them as-is.

    The protocol is marked as runtime_checkable to allow isinstance()
    checks at runtime, which is useful for validation and testing.
    """

    def trace_information(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        """Record ``message`` as an information trace."""
        ...

    def trace_error(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        """Record ``message`` as an error trace."""
        ...

    def trace_verbose(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        """Record ``message`` as a verbose trace."""
        ...

    def trace_warning(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        """Record ``message`` as a warning trace."""
        ...

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        """Record a custom metric value.

        Args:
            name: The metric name
            value: The metric value
            options: Properties and pre-aggregation fields (count, max, min,
                timestamp); see MetricOptions for defaults
        """
        ...

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        """Record a custom event with optional properties and metrics."""
        ...

    def report_exception(self, exception: BaseException, properties: Optional[Dict[str, str]] = None) -> None:
        """Record a structured exception."""
        ...

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Dict[str, str]] = None) -> None:
        """Record a call to an external dependency."""
        ...

    def add_custom_property(self, key: str, value: str) -> None:
        """Attach a property to everything this sink records from now on."""
        ...

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        """Attach several properties at once."""
        ...

    def flush(self) -> None:
        """Push buffered telemetry towards the backend."""
        ...

    def record_completed_operation(self, operation: CompletedOperation) -> None:
        """Record the summary of a dispatched operation."""
        ...


@runtime_checkable
class SupportsFlushCompletion(Protocol):
    """Sinks that deliver asynchronously and can report flush completion."""

    def wait_for_flush(self, timeout: float) -> bool:
        """Block until previously flushed telemetry was delivered.

        Args:
            timeout: Maximum number of seconds to wait

        Returns:
            True if delivery completed, False if the timeout elapsed first
        """
        ...

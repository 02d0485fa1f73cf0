"""Composite sink fanning every call out to an ordered set of sinks."""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from optracer.common.exceptions import SinkFailure, SinkFailureError
from optracer.logging import get_logger
from optracer.protocols.sinks import Sink
from optracer.sinks.flushing import (
    DEFAULT_FLUSH_GRACE_PERIOD_SECONDS,
    DEFAULT_FLUSH_TIMEOUT_SECONDS,
    flush_sink,
    sink_name,
)
from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
)

logger = get_logger(__name__)


class TracerAggregator:
    """Sink that forwards every call to each underlying sink, in order.

    A failing sink never prevents delivery to the sinks after it. Every sink
    is attempted exactly once per call; if any of them raised, a
    ``SinkFailureError`` listing the per-sink failures is raised afterwards.

    The sink sequence is fixed at construction.
    """

    name = "aggregated"

    def __init__(
        self,
        sinks: Sequence[Sink],
        flush_timeout_seconds: float = DEFAULT_FLUSH_TIMEOUT_SECONDS,
        flush_grace_period_seconds: float = DEFAULT_FLUSH_GRACE_PERIOD_SECONDS,
    ):
        """Initialize the aggregator.

        Args:
            sinks: Sinks in fan-out order
            flush_timeout_seconds: Per-sink wait for a flush-completion signal
            flush_grace_period_seconds: Fixed pause for asynchronous sinks
                without a completion signal
        """
        self._sinks: Tuple[Sink, ...] = tuple(sinks)
        self.flush_timeout_seconds = flush_timeout_seconds
        self.flush_grace_period_seconds = flush_grace_period_seconds

    @property
    def sinks(self) -> Tuple[Sink, ...]:
        return self._sinks

    def trace_information(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("trace_information", lambda s: s.trace_information(message, properties))

    def trace_error(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("trace_error", lambda s: s.trace_error(message, properties))

    def trace_verbose(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("trace_verbose", lambda s: s.trace_verbose(message, properties))

    def trace_warning(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("trace_warning", lambda s: s.trace_warning(message, properties))

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        self._fan_out("track_custom_metric", lambda s: s.track_custom_metric(name, value, options))

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        self._fan_out("track_custom_event", lambda s: s.track_custom_event(event_name, options))

    def report_exception(self, exception: BaseException, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("report_exception", lambda s: s.report_exception(exception, properties))

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Dict[str, str]] = None) -> None:
        self._fan_out("track_dependency", lambda s: s.track_dependency(dependency, properties))

    def add_custom_property(self, key: str, value: str) -> None:
        self._fan_out("add_custom_property", lambda s: s.add_custom_property(key, value))

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        self._fan_out("add_custom_properties", lambda s: s.add_custom_properties(properties))

    def record_completed_operation(self, operation: CompletedOperation) -> None:
        self._fan_out("record_completed_operation", lambda s: s.record_completed_operation(operation))

    def flush(self) -> None:
        """Flush every sink, waiting on each one's delivery before moving on."""
        self._fan_out(
            "flush",
            lambda s: flush_sink(
                s,
                timeout=self.flush_timeout_seconds,
                grace_period=self.flush_grace_period_seconds,
            ),
        )

    def _fan_out(self, call: str, invoke: Callable[[Sink], object]) -> None:
        failures: List[SinkFailure] = []
        succeeded: List[str] = []

        for index, sink in enumerate(self._sinks):
            name = sink_name(sink)
            try:
                invoke(sink)
            except Exception as exc:
                logger.error(
                    "Sink call failed",
                    extra={"sink": name, "sink_index": index, "call": call},
                    exc_info=True,
                )
                failures.append(SinkFailure(index=index, sink_name=name, error=exc))
            else:
                succeeded.append(name)

        if failures:
            raise SinkFailureError(call, failures, succeeded)

    def __repr__(self) -> str:
        names = ", ".join(sink_name(s) for s in self._sinks)
        return f"TracerAggregator([{names}])"

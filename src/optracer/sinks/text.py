"""Plain-text sinks."""

from __future__ import annotations

import sys
import threading
from typing import Dict, Mapping, Optional, TextIO

from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
)


class TextWriterSink:
    """Sink writing one human readable line per telemetry item to a stream.

    Writes are serialized with a lock since tracing can happen from several
    threads. Custom properties are not rendered.
    """

    name = "text"

    def __init__(self, stream: TextIO):
        if stream is None:
            raise ValueError("stream must not be None")
        self._stream = stream
        self._lock = threading.Lock()

    def trace_information(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(message)

    def trace_error(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(f"Error: {message}")

    def trace_verbose(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(f"Verbose: {message}")

    def trace_warning(self, message: str, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(f"Warning: {message}")

    def track_custom_metric(self, name: str, value: float, options: Optional[MetricOptions] = None) -> None:
        self._write_line(f"Metric: name-{name}, value-{value}")

    def track_custom_event(self, event_name: str, options: Optional[EventOptions] = None) -> None:
        self._write_line(f"Event: name={event_name}")

    def report_exception(self, exception: BaseException, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(f"Exception: {type(exception).__name__}: {exception}")

    def track_dependency(self, dependency: DependencyCall, properties: Optional[Dict[str, str]] = None) -> None:
        self._write_line(
            f"Dependency: name={dependency.name}, target={dependency.target}, data={dependency.data}, "
            f"duration={dependency.duration}, success={dependency.success}"
        )

    def add_custom_property(self, key: str, value: str) -> None:
        pass

    def add_custom_properties(self, properties: Mapping[str, str]) -> None:
        pass

    def record_completed_operation(self, operation: CompletedOperation) -> None:
        self._write_line(
            f"Operation: name={operation.name}, duration={operation.duration}, success={operation.success}"
        )

    def flush(self) -> None:
        with self._lock:
            self._stream.flush()

    def _write_line(self, line: str) -> None:
        with self._lock:
            self._stream.write(line + "\n")


class ConsoleSink(TextWriterSink):
    """TextWriterSink bound to standard output."""

    name = "console"

    def __init__(self):
        super().__init__(sys.stdout)

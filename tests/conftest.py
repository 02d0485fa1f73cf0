"""Shared test fixtures for optracer tests."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from optracer.logging import clear_operation_context
from optracer.operations import OperationHandler, RequestOperationStrategy
from optracer.tracer import TracerFacade


class RecordingSink:
    """Sink that records every call, optionally into a log shared with other sinks."""

    def __init__(self, name: str, journal: Optional[List[Tuple[str, str]]] = None, fail_on: Tuple[str, ...] = ()):
        self.name = name
        self.journal = journal if journal is not None else []
        self.fail_on = fail_on
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.custom_properties: Dict[str, str] = {}

    def _record(self, method: str, *args: Any) -> None:
        self.journal.append((self.name, method))
        self.calls.append((method, args))
        if method in self.fail_on:
            raise RuntimeError(f"{self.name} failed on {method}")

    def calls_to(self, method: str) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def trace_information(self, message, properties=None):
        self._record("trace_information", message, properties)

    def trace_error(self, message, properties=None):
        self._record("trace_error", message, properties)

    def trace_verbose(self, message, properties=None):
        self._record("trace_verbose", message, properties)

    def trace_warning(self, message, properties=None):
        self._record("trace_warning", message, properties)

    def track_custom_metric(self, name, value, options=None):
        self._record("track_custom_metric", name, value, options)

    def track_custom_event(self, event_name, options=None):
        self._record("track_custom_event", event_name, options)

    def report_exception(self, exception, properties=None):
        self._record("report_exception", exception, properties)

    def track_dependency(self, dependency, properties=None):
        self._record("track_dependency", dependency, properties)

    def add_custom_property(self, key, value):
        self._record("add_custom_property", key, value)
        self.custom_properties[key] = value

    def add_custom_properties(self, properties: Mapping[str, str]):
        self._record("add_custom_properties", dict(properties))
        self.custom_properties.update(properties)

    def flush(self):
        self._record("flush")

    def record_completed_operation(self, operation):
        self._record("record_completed_operation", operation)


class CompletionSignalSink(RecordingSink):
    """Recording sink exposing a flush-completion signal."""

    def __init__(self, name: str, journal: Optional[List[Tuple[str, str]]] = None, completes: bool = True):
        super().__init__(name, journal)
        self.completes = completes
        self.waited_with: List[float] = []

    def wait_for_flush(self, timeout: float) -> bool:
        self.journal.append((self.name, "wait_for_flush"))
        self.waited_with.append(timeout)
        return self.completes


class AsynchronousSink(RecordingSink):
    """Recording sink delivering in the background without a completion signal."""

    asynchronous_delivery = True


@pytest.fixture(autouse=True)
def _reset_operation_context():
    yield
    clear_operation_context()


@pytest.fixture
def journal() -> List[Tuple[str, str]]:
    return []


@pytest.fixture
def make_sink(journal):
    """Factory for recording sinks sharing the same journal."""
    def _make(name: str, fail_on: Tuple[str, ...] = ()) -> RecordingSink:
        return RecordingSink(name, journal, tuple(fail_on))
    return _make


@pytest.fixture
def sink(make_sink) -> RecordingSink:
    return make_sink("recording")


@pytest.fixture
def handler(sink) -> OperationHandler:
    return OperationHandler(sink)


@pytest.fixture
def tracer(sink) -> TracerFacade:
    return TracerFacade(
        sink,
        operation_handler=OperationHandler(sink, RequestOperationStrategy()),
        flush_grace_period_seconds=0,
    )


@pytest.fixture
def make_completion_sink(journal):
    """Factory for sinks that report flush completion."""
    def _make(name: str, completes: bool = True) -> CompletionSignalSink:
        return CompletionSignalSink(name, journal, completes)
    return _make


@pytest.fixture
def make_async_sink(journal):
    """Factory for asynchronous sinks without a completion signal."""
    def _make(name: str) -> AsynchronousSink:
        return AsynchronousSink(name, journal)
    return _make

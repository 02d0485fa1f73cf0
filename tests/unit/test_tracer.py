"""Tests for TracerFacade property merging, operations and teardown."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from optracer.common.exceptions import (
    ErrorCode,
    OperationAlreadyStartedError,
    OperationNotStartedError,
    SinkFailureError,
    TracerError,
)
from optracer.operations import OperationHandler, OperationState
from optracer.sinks import TracerAggregator
from optracer.tracer import TracerFacade
from optracer.types import DependencyCall, EventOptions, MetricOptions


class TestPropertyMerging:
    """Every item carries globals, then operation, then call properties."""

    def test_env_and_run_scenario(self, tracer, sink):
        tracer.add_custom_property("env", "prod")
        tracer.start_operation("op1", {"run": "1"})

        tracer.trace_information("hello")
        completed = tracer.dispatch_operation()

        assert sink.calls_to("trace_information") == [("hello", {"env": "prod", "run": "1"})]
        assert completed.name == "op1"
        assert completed.success is True
        assert completed.properties == {"env": "prod", "run": "1"}
        assert tracer.operation_handler.state is OperationState.IDLE

    def test_event_inside_operation_carries_globals_and_operation_properties(self, tracer, sink):
        tracer.add_custom_property("env", "prod")
        tracer.start_operation("op1", {"run": "1"})

        tracer.track_custom_event("evt")
        completed = tracer.dispatch_operation()

        (event_name, options), = sink.calls_to("track_custom_event")
        assert event_name == "evt"
        assert options.properties == {"env": "prod", "run": "1"}
        assert completed.properties == {"env": "prod", "run": "1"}
        assert completed.success is True

    def test_call_properties_take_precedence(self, tracer, sink):
        tracer.add_custom_properties({"env": "dev", "region": "eu"})
        tracer.start_operation("op1", {"env": "prod"})

        tracer.trace_warning("careful", {"region": "us"})

        assert sink.calls_to("trace_warning") == [("careful", {"env": "prod", "region": "us"})]

    def test_globals_only_when_no_operation(self, tracer, sink):
        tracer.add_custom_property("env", "prod")

        tracer.trace_verbose("detail", {"k": "v"})

        assert sink.calls_to("trace_verbose") == [("detail", {"env": "prod", "k": "v"})]

    def test_operation_properties_gone_after_dispatch(self, tracer, sink):
        tracer.start_operation("op1", {"run": "1"})
        tracer.dispatch_operation()

        tracer.trace_information("after")

        assert sink.calls_to("trace_information") == [("after", {})]

    def test_custom_property_last_write_wins(self, tracer):
        tracer.add_custom_property("env", "dev")
        tracer.add_custom_property("env", "prod")

        assert tracer.custom_properties == {"env": "prod"}

    def test_later_global_changes_do_not_alter_open_operation(self, tracer, sink):
        tracer.add_custom_property("env", "dev")
        tracer.start_operation("op1")
        tracer.add_custom_property("env", "prod")

        tracer.trace_information("msg")

        # The operation captured env=dev at start and outranks the globals.
        assert sink.calls_to("trace_information") == [("msg", {"env": "dev"})]

    def test_call_properties_are_not_mutated(self, tracer):
        tracer.add_custom_property("env", "prod")
        call_properties = {"k": "v"}

        tracer.trace_information("msg", call_properties)

        assert call_properties == {"k": "v"}

    @pytest.mark.parametrize("key", ["", None])
    def test_invalid_key_is_rejected(self, tracer, key):
        with pytest.raises(TracerError) as exc_info:
            tracer.add_custom_property(key, "value")
        assert exc_info.value.error_code is ErrorCode.VALIDATION_ERROR

    def test_invalid_key_in_bulk_add_leaves_properties_unchanged(self, tracer):
        with pytest.raises(TracerError):
            tracer.add_custom_properties({"ok": "1", "": "2"})
        assert tracer.custom_properties == {}


class TestTelemetryItems:
    """Metrics, events, exceptions and dependencies."""

    def test_metric_options_receive_merged_properties(self, tracer, sink):
        tracer.add_custom_property("env", "prod")
        options = MetricOptions(properties={"unit": "ms"}, count=3, max=9.0, min=1.0)

        tracer.track_custom_metric("latency", 4.0, options)

        name, value, sent = sink.calls_to("track_custom_metric")[0]
        assert (name, value) == ("latency", 4.0)
        assert sent.properties == {"env": "prod", "unit": "ms"}
        assert (sent.count, sent.max, sent.min) == (3, 9.0, 1.0)
        assert options.properties == {"unit": "ms"}

    def test_metric_without_options(self, tracer, sink):
        tracer.track_custom_metric("latency", 1.0)

        _, _, sent = sink.calls_to("track_custom_metric")[0]
        assert sent.properties == {}
        assert sent.count is None
        assert sent.timestamp is None

    def test_event_keeps_metrics_and_merges_properties(self, tracer, sink):
        tracer.start_operation("op1", {"run": "1"})

        tracer.track_custom_event("loaded", EventOptions(properties={"k": "v"}, metrics={"rows": 10.0}))

        event_name, sent = sink.calls_to("track_custom_event")[0]
        assert event_name == "loaded"
        assert sent.properties == {"run": "1", "k": "v"}
        assert sent.metrics == {"rows": 10.0}

    def test_report_exception_emits_trace_and_record_with_same_properties(self, tracer, sink):
        tracer.add_custom_property("env", "prod")
        try:
            raise ValueError("bad input")
        except ValueError as exc:
            error = exc
            tracer.report_exception(exc, {"step": "parse"})

        (message, trace_properties), = sink.calls_to("trace_error")
        (reported, exception_properties), = sink.calls_to("report_exception")

        assert "ValueError: bad input" in message
        assert "Traceback" in message
        assert reported is error
        assert trace_properties == exception_properties == {"env": "prod", "step": "parse"}
        assert trace_properties is not exception_properties

    def test_exception_record_reaches_healthy_sinks_when_trace_fails(self, make_sink):
        broken = make_sink("A", fail_on=("trace_error",))
        healthy = make_sink("B")
        tracer = TracerFacade(TracerAggregator([broken, healthy]), flush_grace_period_seconds=0)
        error = ValueError("bad input")

        with pytest.raises(SinkFailureError) as exc_info:
            tracer.report_exception(error)

        assert exc_info.value.call == "trace_error"
        assert len(healthy.calls_to("trace_error")) == 1
        assert [args[0] for args in healthy.calls_to("report_exception")] == [error]
        assert [args[0] for args in broken.calls_to("report_exception")] == [error]

    def test_dependency_forwarded_with_merged_properties(self, tracer, sink):
        tracer.add_custom_property("env", "prod")
        dependency = DependencyCall(
            type_name="sql",
            target="warehouse",
            name="select",
            start_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
            duration=timedelta(milliseconds=120),
            result_code="0",
        )

        tracer.track_dependency(dependency)

        assert sink.calls_to("track_dependency") == [(dependency, {"env": "prod"})]


class TestTracerOperations:
    """Operation calls delegated to the handler."""

    def test_failure_scenario(self, tracer, sink):
        tracer.start_operation("op2")
        tracer.mark_operation_as_failure()

        completed = tracer.dispatch_operation()

        assert completed.name == "op2"
        assert completed.success is False
        assert completed.response_code == "500"
        assert sink.calls_to("record_completed_operation") == [(completed,)]

    def test_start_merges_globals_into_operation_properties(self, tracer):
        tracer.add_custom_property("env", "prod")
        tracer.start_operation("op1", {"env": "test", "run": "1"})

        assert tracer.operation_handler.operation_properties == {"env": "test", "run": "1"}
        assert tracer.in_operation

    def test_double_start_raises(self, tracer):
        tracer.start_operation("op1")
        with pytest.raises(OperationAlreadyStartedError):
            tracer.start_operation("op2")
        assert tracer.operation_handler.operation_name == "op1"

    def test_dispatch_without_operation_raises(self, tracer):
        with pytest.raises(OperationNotStartedError):
            tracer.dispatch_operation()

    def test_operation_metric_delegated(self, tracer):
        tracer.start_operation("op1")
        tracer.add_operation_metric("rows", 3)

        assert tracer.dispatch_operation().metrics == {"rows": 3.0}

    def test_token_dispatches_on_exit(self, tracer, sink):
        with tracer.start_operation("op1", {"run": "1"}):
            tracer.trace_information("inside")

        assert not tracer.in_operation
        assert len(sink.calls_to("record_completed_operation")) == 1

    @pytest.mark.parametrize(
        "call",
        [
            lambda t: t.start_operation("op"),
            lambda t: t.mark_operation_as_failure(),
            lambda t: t.add_operation_metric("rows", 1),
            lambda t: t.dispatch_operation(),
        ],
    )
    def test_tracer_without_handler_rejects_operations(self, sink, call):
        tracer = TracerFacade(sink, flush_grace_period_seconds=0)

        with pytest.raises(TracerError) as exc_info:
            call(tracer)

        assert exc_info.value.error_code is ErrorCode.OPERATIONS_NOT_SUPPORTED

    def test_tracer_without_handler_still_traces(self, sink):
        tracer = TracerFacade(sink, flush_grace_period_seconds=0)
        tracer.add_custom_property("env", "prod")

        tracer.trace_information("simple")

        assert not tracer.in_operation
        assert sink.calls_to("trace_information") == [("simple", {"env": "prod"})]


class TestTracerTeardown:
    """Close dispatches the open operation then flushes."""

    def test_close_dispatches_then_flushes(self, tracer, sink, journal):
        tracer.start_operation("op1")

        tracer.close()

        assert journal[-2:] == [("recording", "record_completed_operation"), ("recording", "flush")]
        assert not tracer.in_operation

    def test_close_without_operation_only_flushes(self, tracer, sink):
        tracer.close()

        assert [name for name, _ in sink.calls] == ["flush"]

    def test_close_twice_is_harmless(self, tracer, sink):
        tracer.start_operation("op1")
        tracer.close()
        tracer.close()

        assert len(sink.calls_to("record_completed_operation")) == 1

    def test_flush_runs_when_dispatch_fails(self, make_sink):
        failing = make_sink("failing", fail_on=("record_completed_operation",))
        tracer = TracerFacade(failing, OperationHandler(failing), flush_grace_period_seconds=0)
        tracer.start_operation("op1")

        with pytest.raises(RuntimeError):
            tracer.close()

        assert failing.calls_to("flush") == [()]
        assert not tracer.in_operation

    def test_dispatch_error_wins_over_flush_error(self, make_sink, caplog):
        failing = make_sink("failing", fail_on=("record_completed_operation", "flush"))
        tracer = TracerFacade(failing, OperationHandler(failing), flush_grace_period_seconds=0)
        tracer.start_operation("op1")

        with caplog.at_level("ERROR", logger="optracer"):
            with pytest.raises(RuntimeError, match="record_completed_operation"):
                tracer.close()

        assert failing.calls_to("flush") == [()]
        assert any("Flushing failed" in record.getMessage() for record in caplog.records)

    def test_flush_error_raised_when_dispatch_succeeds(self, make_sink):
        failing = make_sink("failing", fail_on=("flush",))
        tracer = TracerFacade(failing, OperationHandler(failing), flush_grace_period_seconds=0)
        tracer.start_operation("op1")

        with pytest.raises(RuntimeError, match="flush"):
            tracer.close()

        assert len(failing.calls_to("record_completed_operation")) == 1

    def test_context_manager_closes(self, tracer, sink):
        with tracer:
            tracer.start_operation("op1")

        assert len(sink.calls_to("record_completed_operation")) == 1
        assert len(sink.calls_to("flush")) == 1

    def test_flush_uses_configured_timeouts(self, sink):
        tracer = TracerFacade(sink, flush_timeout_seconds=7.0, flush_grace_period_seconds=0.5)

        with patch("optracer.tracer.flush_sink") as mock_flush:
            tracer.flush()

        mock_flush.assert_called_once_with(sink, timeout=7.0, grace_period=0.5)

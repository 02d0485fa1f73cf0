"""Telemetry sinks - destinations for traces, metrics, events and operations."""

from .aggregated import TracerAggregator
from .flushing import flush_sink, sink_name
from .logging_sink import LoggingSink
from .otel import OpenTelemetrySink
from .text import ConsoleSink, TextWriterSink

__all__ = [
    "TracerAggregator",
    "flush_sink",
    "sink_name",
    "LoggingSink",
    "OpenTelemetrySink",
    "ConsoleSink",
    "TextWriterSink",
]

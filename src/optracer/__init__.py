from optracer.__version__ import __version__

from optracer.common.exceptions import (
    ErrorCode,
    OperationAlreadyStartedError,
    OperationNotStartedError,
    SinkFailure,
    SinkFailureError,
    TracerError,
)
from optracer.core.merger import merge_properties
from optracer.factory import create_aggregated_tracer, create_backend_sink, create_tracer
from optracer.operations import (
    DependencyOperationStrategy,
    GenericOperationStrategy,
    OperationHandler,
    OperationState,
    OperationToken,
    RequestOperationStrategy,
)
from optracer.protocols import Sink, SupportsFlushCompletion
from optracer.sinks import (
    ConsoleSink,
    LoggingSink,
    OpenTelemetrySink,
    TextWriterSink,
    TracerAggregator,
)
from optracer.tracer import TracerFacade
from optracer.types import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
    SeverityLevel,
)
from optracer.utils import tracked_operation


__all__ = [
    "__version__",

    # Tracer
    "TracerFacade",
    "create_tracer",
    "create_aggregated_tracer",
    "create_backend_sink",
    "tracked_operation",
    "merge_properties",

    # Operations
    "OperationHandler",
    "OperationState",
    "OperationToken",
    "GenericOperationStrategy",
    "RequestOperationStrategy",
    "DependencyOperationStrategy",

    # Sinks
    "Sink",
    "SupportsFlushCompletion",
    "TracerAggregator",
    "ConsoleSink",
    "TextWriterSink",
    "LoggingSink",
    "OpenTelemetrySink",

    # Telemetry models
    "CompletedOperation",
    "DependencyCall",
    "EventOptions",
    "MetricOptions",
    "SeverityLevel",

    # Exceptions (public API)
    "TracerError",
    "ErrorCode",
    "OperationAlreadyStartedError",
    "OperationNotStartedError",
    "SinkFailure",
    "SinkFailureError",
]

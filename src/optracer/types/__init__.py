from optracer.types.base import TracerBaseModel
from optracer.types.telemetry import (
    CompletedOperation,
    DependencyCall,
    EventOptions,
    MetricOptions,
    SeverityLevel,
)

__all__ = [
    "TracerBaseModel",
    "CompletedOperation",
    "DependencyCall",
    "EventOptions",
    "MetricOptions",
    "SeverityLevel",
]

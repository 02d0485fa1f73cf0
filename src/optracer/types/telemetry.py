"""Telemetry item models handed to sinks."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional

from pydantic import Field, field_validator

from optracer.types.base import TracerBaseModel


class SeverityLevel(str, Enum):
    """Severity of a trace message."""
    VERBOSE = "verbose"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


class MetricOptions(TracerBaseModel):
    """Optional fields of a custom metric.

    Attributes:
        properties: Named string values used to classify and filter the metric.
            The tracer replaces them with the fully merged property set.
        count: Aggregated sample count; None means a single sample.
        max: Aggregated maximum value; None when not pre-aggregated.
        min: Aggregated minimum value; None when not pre-aggregated.
        timestamp: Timestamp of the aggregated metric; None means "now" as
            decided by the sink.
    """
    properties: Optional[Dict[str, str]] = None
    count: Optional[int] = Field(default=None, ge=0)
    max: Optional[float] = None
    min: Optional[float] = None
    timestamp: Optional[datetime] = None


class EventOptions(TracerBaseModel):
    """Optional fields of a custom event.

    Attributes:
        properties: Named string values attached to the event. The tracer
            replaces them with the fully merged property set.
        metrics: Numeric measurements attached to the event (default none).
    """
    properties: Optional[Dict[str, str]] = None
    metrics: Optional[Dict[str, float]] = None


class DependencyCall(TracerBaseModel):
    """A call made to an external dependency (database, HTTP service, queue)."""
    type_name: str
    target: str
    name: str
    data: Optional[str] = None
    start_time: datetime
    duration: timedelta
    result_code: Optional[str] = None
    success: bool = True


class CompletedOperation(TracerBaseModel):
    """Summary record of a dispatched operation."""
    operation_id: str
    name: str
    kind: str = "operation"
    start_time: datetime
    duration: timedelta
    success: bool = True
    response_code: Optional[str] = None
    properties: Dict[str, str] = Field(default_factory=dict)
    metrics: Dict[str, float] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Operation name must be a non-empty string")
        return v

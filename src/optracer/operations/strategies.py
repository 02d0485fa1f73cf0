"""Operation strategies.

The shape of a completed operation is fixed (name, duration, success,
properties, metrics). A strategy only decides how a failure is additionally
encoded and which extra metrics are attached at dispatch time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional, Protocol, runtime_checkable


@dataclass
class RunningOperation:
    """Mutable record of the operation currently open on a handler."""
    operation_id: str
    name: str
    start_time: datetime
    started_at: float
    properties: Dict[str, str] = field(default_factory=dict)
    metrics: Dict[str, float] = field(default_factory=dict)
    success: bool = True
    response_code: Optional[str] = None


@runtime_checkable
class OperationStrategy(Protocol):
    """Customization point for a kind of operation telemetry."""

    kind: str

    def on_mark_failure(self, operation: RunningOperation) -> None:
        """Encode a failure on the running operation beyond ``success = False``."""
        ...

    def on_dispatch(self, operation: RunningOperation) -> Mapping[str, float]:
        """Return extra metrics to attach to the completed operation."""
        ...


class GenericOperationStrategy:
    """Plain operation: no response code, no extra metrics."""

    kind = "operation"

    def on_mark_failure(self, operation: RunningOperation) -> None:
        pass

    def on_dispatch(self, operation: RunningOperation) -> Mapping[str, float]:
        return {}


class RequestOperationStrategy:
    """Request-shaped operation.

    A failed request carries response code ``"500"``, a successful one
    ``"200"``. The metrics given at construction are attached to every
    operation dispatched through the handler.
    """

    kind = "request"

    def __init__(
        self,
        metrics: Optional[Mapping[str, float]] = None,
        failure_response_code: str = "500",
        success_response_code: str = "200",
    ):
        self._metrics = dict(metrics or {})
        self.failure_response_code = failure_response_code
        self.success_response_code = success_response_code

    def on_mark_failure(self, operation: RunningOperation) -> None:
        operation.response_code = self.failure_response_code

    def on_dispatch(self, operation: RunningOperation) -> Mapping[str, float]:
        if operation.response_code is None:
            operation.response_code = (
                self.success_response_code if operation.success else self.failure_response_code
            )
        return dict(self._metrics)


class DependencyOperationStrategy:
    """Operation that represents an outgoing call; failures carry a result code."""

    kind = "dependency"

    def __init__(self, failure_result_code: str = "failed"):
        self.failure_result_code = failure_result_code

    def on_mark_failure(self, operation: RunningOperation) -> None:
        operation.response_code = self.failure_result_code

    def on_dispatch(self, operation: RunningOperation) -> Mapping[str, float]:
        return {}

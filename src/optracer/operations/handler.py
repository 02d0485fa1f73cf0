"""Operation lifecycle handling.

An ``OperationHandler`` tracks at most one open operation. It is a two-state
machine: ``IDLE`` (no operation) and ``STARTED`` (exactly one running
operation). Starting while ``STARTED`` fails; marking or dispatching while
``IDLE`` fails.

Thread safety:
    A handler holds a single mutable operation slot and is NOT safe for
    concurrent ``start_operation`` calls. Use one handler per thread or unit
    of work, or serialize access externally.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from optracer.common.exceptions import (
    OperationAlreadyStartedError,
    OperationNotStartedError,
    validation_error,
)
from optracer.core.merger import merge_properties
from optracer.logging import clear_operation_context, get_logger, set_operation_context
from optracer.operations.strategies import (
    GenericOperationStrategy,
    OperationStrategy,
    RunningOperation,
)
from optracer.protocols.sinks import Sink
from optracer.types.telemetry import CompletedOperation

logger = get_logger(__name__)


class OperationState(str, Enum):
    """Lifecycle state of an OperationHandler."""
    IDLE = "idle"
    STARTED = "started"


@dataclass(frozen=True)
class _Idle:
    pass


@dataclass(frozen=True)
class _Started:
    operation: RunningOperation


_IDLE = _Idle()


class OperationToken:
    """Scoped handle returned by ``start_operation``.

    Releasing the token (``close()`` or leaving a ``with`` block, including
    on exceptions) dispatches the operation it was issued for if that
    operation is still open. Releasing twice, or after a manual dispatch, is
    a no-op.
    """

    def __init__(self, handler: "OperationHandler", operation_id: str, name: str):
        self._handler = handler
        self._released = False
        self.operation_id = operation_id
        self.name = name

    @property
    def released(self) -> bool:
        return self._released

    def close(self) -> None:
        """Dispatch the operation if it is still open."""
        if self._released:
            return
        self._released = True
        if self._handler.current_operation_id == self.operation_id:
            self._handler.dispatch_operation()

    def __enter__(self) -> "OperationToken":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def __repr__(self) -> str:
        return f"OperationToken(name={self.name!r}, operation_id={self.operation_id!r}, released={self._released})"


class OperationHandler:
    """Single-slot operation state machine.

    Completed operations are handed to ``sink.record_completed_operation``.

    Attributes:
        strategy: Customization of failure encoding and dispatch metrics
    """

    def __init__(self, sink: Sink, strategy: Optional[OperationStrategy] = None):
        """Initialize the handler.

        Args:
            sink: Sink receiving completed operations
            strategy: Operation strategy; defaults to GenericOperationStrategy
        """
        self._sink = sink
        self.strategy = strategy or GenericOperationStrategy()
        self._state: Union[_Idle, _Started] = _IDLE

    @property
    def state(self) -> OperationState:
        if isinstance(self._state, _Started):
            return OperationState.STARTED
        return OperationState.IDLE

    @property
    def operation_name(self) -> Optional[str]:
        if isinstance(self._state, _Started):
            return self._state.operation.name
        return None

    @property
    def current_operation_id(self) -> Optional[str]:
        if isinstance(self._state, _Started):
            return self._state.operation.operation_id
        return None

    @property
    def operation_properties(self) -> Dict[str, str]:
        """Copy of the running operation's properties (empty when idle)."""
        if isinstance(self._state, _Started):
            return dict(self._state.operation.properties)
        return {}

    def start_operation(
        self,
        operation_name: str,
        properties: Optional[Mapping[str, str]] = None,
    ) -> OperationToken:
        """Open a new operation.

        Args:
            operation_name: Name of the operation
            properties: Properties attached to the completed operation

        Returns:
            Token whose release dispatches the operation

        Raises:
            OperationAlreadyStartedError: If an operation is already open
            TracerError: If the operation name is empty
        """
        if not isinstance(operation_name, str) or not operation_name.strip():
            raise validation_error(
                "Operation name must be a non-empty string", field="operation_name", value=operation_name
            )
        if isinstance(self._state, _Started):
            raise OperationAlreadyStartedError(
                running_operation=self._state.operation.name,
                requested_operation=operation_name,
            )

        operation = RunningOperation(
            operation_id=uuid.uuid4().hex,
            name=operation_name,
            start_time=datetime.now(timezone.utc),
            started_at=time.perf_counter(),
            properties=dict(properties or {}),
        )
        self._state = _Started(operation)
        set_operation_context(operation_name=operation.name, operation_id=operation.operation_id)

        logger.debug(
            "Operation started",
            extra={"operation.kind": self.strategy.kind, "operation.name": operation.name},
        )
        return OperationToken(self, operation.operation_id, operation.name)

    def mark_operation_as_failure(self) -> None:
        """Mark the open operation as failed.

        Raises:
            OperationNotStartedError: If no operation is open
        """
        operation = self._require_started("Can't mark operation as failed")
        operation.success = False
        self.strategy.on_mark_failure(operation)

    def add_operation_metric(self, key: str, value: float) -> None:
        """Accumulate a metric on the open operation.

        Raises:
            OperationNotStartedError: If no operation is open
        """
        operation = self._require_started("Can't add operation metric")
        operation.metrics[key] = float(value)

    def dispatch_operation(self) -> CompletedOperation:
        """Complete the open operation and hand it to the sink.

        The handler is idle afterwards even if the strategy, the record
        construction or the sink raised; the error still propagates.

        Returns:
            The completed operation record

        Raises:
            OperationNotStartedError: If no operation is open
        """
        operation = self._require_started("Can't dispatch operation")

        try:
            strategy_metrics = self.strategy.on_dispatch(operation)
            completed = CompletedOperation(
                operation_id=operation.operation_id,
                name=operation.name,
                kind=self.strategy.kind,
                start_time=operation.start_time,
                duration=timedelta(seconds=time.perf_counter() - operation.started_at),
                success=operation.success,
                response_code=operation.response_code,
                properties=merge_properties([operation.properties]),
                metrics=merge_properties([strategy_metrics, operation.metrics]),
            )
            self._sink.record_completed_operation(completed)
        finally:
            self._state = _IDLE
            clear_operation_context()

        logger.debug(
            "Operation dispatched",
            extra={
                "operation.name": completed.name,
                "operation.success": completed.success,
                "operation.duration_seconds": completed.duration.total_seconds(),
            },
        )
        return completed

    def close(self) -> None:
        """Dispatch the open operation, if any."""
        if isinstance(self._state, _Started):
            self.dispatch_operation()

    def __enter__(self) -> "OperationHandler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def _require_started(self, action: str) -> RunningOperation:
        if isinstance(self._state, _Started):
            return self._state.operation
        raise OperationNotStartedError(action)

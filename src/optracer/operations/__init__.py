"""Operation lifecycle: the handler state machine and its strategies."""

from optracer.operations.handler import OperationHandler, OperationState, OperationToken
from optracer.operations.strategies import (
    DependencyOperationStrategy,
    GenericOperationStrategy,
    OperationStrategy,
    RequestOperationStrategy,
    RunningOperation,
)

__all__ = [
    "OperationHandler",
    "OperationState",
    "OperationToken",
    "OperationStrategy",
    "GenericOperationStrategy",
    "RequestOperationStrategy",
    "DependencyOperationStrategy",
    "RunningOperation",
]

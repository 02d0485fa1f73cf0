import functools
import inspect
from typing import Any, Callable, Mapping, Optional, TypeVar, TYPE_CHECKING

if TYPE_CHECKING:
    from optracer.tracer import TracerFacade


F = TypeVar('F', bound=Callable[..., Any])


def tracked_operation(
    tracer: "TracerFacade",
    operation_name: Optional[str] = None,
    *,
    properties: Optional[Mapping[str, str]] = None,
    report_exceptions: bool = True,
) -> Callable[[F], F]:
    """Run each call of the decorated function inside an operation.

    When the function raises, the operation is marked as failed first and,
    unless ``report_exceptions`` is False, the exception is then reported
    before the operation is dispatched. The function's exception is re-raised
    unless reporting itself fails.

    Args:
        tracer: Tracer owning the operation handler
        operation_name: Operation name. Defaults to module-qualified function name.
        properties: Static operation properties
        report_exceptions: Report raised exceptions through the tracer
    """

    def decorator(func: F) -> F:
        name = operation_name or f"{func.__module__}.{func.__qualname__}"

        def _on_failure(exc: BaseException) -> None:
            tracer.mark_operation_as_failure()
            if report_exceptions:
                tracer.report_exception(exc)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with tracer.start_operation(name, properties):
                    try:
                        return await func(*args, **kwargs)
                    except Exception as exc:
                        _on_failure(exc)
                        raise

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_operation(name, properties):
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    _on_failure(exc)
                    raise

        return sync_wrapper  # type: ignore[return-value]

    return decorator

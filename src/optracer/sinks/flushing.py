"""Flush coordination for sinks with asynchronous delivery."""

from __future__ import annotations

import time

from optracer.logging import get_logger
from optracer.protocols.sinks import Sink, SupportsFlushCompletion

logger = get_logger(__name__)

DEFAULT_FLUSH_TIMEOUT_SECONDS = 5.0
DEFAULT_FLUSH_GRACE_PERIOD_SECONDS = 1.0


def sink_name(sink: object) -> str:
    """Human readable name of a sink for logs and errors."""
    name = getattr(sink, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(sink).__name__


def flush_sink(
    sink: Sink,
    timeout: float = DEFAULT_FLUSH_TIMEOUT_SECONDS,
    grace_period: float = DEFAULT_FLUSH_GRACE_PERIOD_SECONDS,
) -> bool:
    """Flush ``sink`` and block until its telemetry is delivered.

    Sinks exposing ``wait_for_flush`` are waited on for at most ``timeout``
    seconds. Sinks that only declare ``asynchronous_delivery = True`` get a
    fixed ``grace_period`` pause instead. That pause is a compatibility shim
    for backends without a completion signal; it guarantees nothing.
    Synchronous sinks return as soon as ``flush()`` does.

    Returns:
        False if a completion signal reported a timeout, True otherwise
    """
    sink.flush()

    if isinstance(sink, SupportsFlushCompletion):
        completed = sink.wait_for_flush(timeout)
        if not completed:
            logger.warning(
                "Sink flush did not complete in time",
                extra={"sink": sink_name(sink), "timeout_seconds": timeout},
            )
        return bool(completed)

    if getattr(sink, "asynchronous_delivery", False) and grace_period > 0:
        time.sleep(grace_period)

    return True

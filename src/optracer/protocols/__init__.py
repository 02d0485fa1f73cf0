"""Protocol definitions for optracer collaborators."""

from optracer.protocols.sinks import Sink, SupportsFlushCompletion

__all__ = [
    "Sink",
    "SupportsFlushCompletion",
]

"""
Relay Events - Errors
=======================
Error types raised by the emitter itself.

Listener failures are NOT represented here: a listener runs as
deferred work and its exceptions belong to the scheduler.
"""

from typing import Any, Tuple


class EventEmitterError(Exception):
    """Base error for emitter operations."""
    pass


class UnhandledErrorEvent(EventEmitterError):
    """
    An error event was emitted with no listener and no default handler,
    and its first argument is not an exception that could be raised as-is.
    """

    def __init__(self, event: str, arguments: Tuple[Any, ...]):
        self.event = event
        self.arguments = arguments
        if arguments:
            detail = ", ".join(repr(arg) for arg in arguments)
        else:
            detail = "no arguments"
        super().__init__(
            f"Unhandled '{event}' event ({detail})."
        )

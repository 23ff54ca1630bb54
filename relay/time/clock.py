"""
Relay Time - Event Stamp Clock
================================
emit_event() stamps each decorated payload with integer epoch
milliseconds. The reading comes from a Clock handed to the
emitter, so tests can pin or step the stamp.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of event timestamps."""

    def epoch_millis(self) -> int:
        """Milliseconds since the Unix epoch."""
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock stamps."""

    def epoch_millis(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock:
    """
    Pinned stamp for tests.

    Usage:
        clock = FixedClock(1_750_000_000_000)
        emitter = EventEmitter(clock=clock)
        clock.advance(250)   # next stamp is 250 ms later
    """

    def __init__(self, millis: int) -> None:
        if isinstance(millis, bool) or not isinstance(millis, int) or millis < 0:
            raise ValueError(f"FixedClock needs a non-negative int of milliseconds, got {millis!r}.")
        self._millis = millis

    def epoch_millis(self) -> int:
        return self._millis

    def advance(self, millis: int) -> None:
        self._millis += millis

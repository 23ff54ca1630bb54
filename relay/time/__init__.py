"""
Relay Time - Public API
=========================
Clocks used to stamp emitted events.
"""

from relay.time.clock import Clock, FixedClock, SystemClock

__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
]

"""
Relay Config - Emitter Settings
=================================
Names the emitter treats specially: the reserved error event
and the keys used when decorating payloads in emit_event().

Settings are immutable once constructed and validated up front,
so a bad configuration fails at wiring time, not mid-dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class EmitterConfig:
    """
    Per-emitter configuration.

    error_event:        Event that escalates when nobody handles it.
    type_field:         Key stamped with the event name by emit_event().
    data_field:         Key used to wrap a payload that is not a mapping.
    timestamp_field:    Key stamped with the event timestamp.
    timestamp_aliases:  Pre-existing payload keys honoured as the
                        timestamp, checked in order.
    """

    error_event: str = "error"
    type_field: str = "type"
    data_field: str = "data"
    timestamp_field: str = "timestamp"
    timestamp_aliases: Tuple[str, ...] = ("timeStamp", "timestamp")

    def __post_init__(self) -> None:
        for name in ("error_event", "type_field", "data_field", "timestamp_field"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} must be a non-empty string, got {value!r}.")

        if isinstance(self.timestamp_aliases, str):
            raise ValueError("timestamp_aliases must be a tuple of strings, not a string.")
        object.__setattr__(self, "timestamp_aliases", tuple(self.timestamp_aliases))

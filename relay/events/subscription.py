"""
Relay Events - Subscription
=============================
One registration of a callback on an event.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True, eq=False)
class Subscription:
    """
    A registered listener.

    owner is an optional grouping key for bulk removal
    (e.g. "everything this widget registered"). It is never
    called and never kept alive for any other purpose.

    Equality is identity: registering the same callback twice
    yields two independent subscriptions.
    """

    callback: Callable[..., Any]
    owner: Optional[object] = None
    once: bool = False

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", repr(self.callback))

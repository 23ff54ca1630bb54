"""
Relay Events - Listener Registry
==================================
Maps event names to the subscriptions waiting on them.

Rules:
- Each event keeps two ordered sequences: ordinary and once
- Registration order is dispatch order
- An event has no entry until its first subscription
- An entry left with no subscriptions is deleted immediately
- Once-subscriptions are drained atomically when taken for dispatch
- Removal matching is defined by RemovalFilter
- In-memory only
- Thread-safe
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, List, Sequence, Tuple

from relay.events.filters import RemovalFilter
from relay.events.subscription import Subscription

logger = logging.getLogger("relay.events")


@dataclass
class _EventEntry:
    ordinary: List[Subscription] = field(default_factory=list)
    once: List[Subscription] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.ordinary and not self.once

    def __len__(self) -> int:
        return len(self.ordinary) + len(self.once)


class ListenerRegistry:
    """
    In-memory registry of event subscriptions.

    The registry does not validate its input; EventEmitter decides
    what may be registered. It only keeps order and pruning right.
    """

    def __init__(self):
        self._events: dict[str, _EventEntry] = {}
        self._lock = Lock()

    def add(self, event: str, subscription: Subscription) -> None:
        """Append a subscription to the ordinary or once sequence of `event`."""
        with self._lock:
            entry = self._events.get(event)
            if entry is None:
                entry = self._events[event] = _EventEntry()

            if subscription.once:
                entry.once.append(subscription)
            else:
                entry.ordinary.append(subscription)

    def remove(self, selector: RemovalFilter) -> int:
        """
        Remove every subscription the filter selects.

        Returns the number of subscriptions removed (0 is not an error).
        """
        with self._lock:
            if selector.is_everything:
                removed = sum(len(entry) for entry in self._events.values())
                self._events.clear()
                return removed

            candidates = [e for e in self._events if selector.matches_event(e)]

            removed = 0
            for event in candidates:
                entry = self._events[event]
                before = len(entry)
                entry.ordinary = [s for s in entry.ordinary if not selector.matches(s)]
                entry.once = [s for s in entry.once if not selector.matches(s)]
                removed += before - len(entry)

                if entry.is_empty():
                    del self._events[event]

            return removed

    def take_for_dispatch(
        self, event: str
    ) -> Tuple[Tuple[Subscription, ...], Tuple[Subscription, ...]]:
        """
        Snapshot `event` for one emission.

        Returns (ordinary, once). The ordinary sequence is copied and
        stays registered; the once sequence is drained and cleared.
        """
        with self._lock:
            entry = self._events.get(event)
            if entry is None:
                return (), ()

            ordinary = tuple(entry.ordinary)
            once = tuple(entry.once)
            entry.once = []

            if entry.is_empty():
                del self._events[event]

            return ordinary, once

    def restore_once(self, event: str, subscriptions: Sequence[Subscription]) -> None:
        """Put drained once-subscriptions back at the front, in their original order."""
        if not subscriptions:
            return
        with self._lock:
            entry = self._events.get(event)
            if entry is None:
                entry = self._events[event] = _EventEntry()
            entry.once = list(subscriptions) + entry.once

    def listeners(self, event: str) -> Tuple[Callable[..., Any], ...]:
        """Callbacks on `event`: ordinary first, then once, each in registration order."""
        with self._lock:
            entry = self._events.get(event)
            if entry is None:
                return ()
            return tuple(s.callback for s in entry.ordinary + entry.once)

    def has_listeners(self, event: str) -> bool:
        with self._lock:
            return event in self._events

    def listener_count(self, event: str) -> int:
        with self._lock:
            entry = self._events.get(event)
            return len(entry) if entry is not None else 0

    def event_names(self) -> Tuple[str, ...]:
        """Events with at least one subscription, in first-registration order."""
        with self._lock:
            return tuple(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

"""
Relay Events - Removal Filters
================================
Describes which subscriptions off() removes.

Matching rules:
- Every criterion a filter names must match (conjunctive)
- Criteria left unset match anything
- Listeners match by ==: identity for plain functions, same instance
  and same function for bound methods (obj.method is a new object
  on every access)
- Owners match by identity, never by equality
- Event names match by string equality
- A filter with no criteria matches everything
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from relay.events.subscription import Subscription


@dataclass(frozen=True)
class RemovalFilter:
    """
    Selection criteria for off().

    Build one with the named constructors rather than directly:

        RemovalFilter.by_event("saved")
        RemovalFilter.by_listener(handler)
        RemovalFilter.by_owner(widget)
        RemovalFilter.by_event_and_listener("saved", handler)
        RemovalFilter.exact("saved", handler, widget)
    """

    event: Optional[str] = None
    listener: Optional[Callable[..., Any]] = None
    owner: Optional[object] = None

    # ── Named constructors ───────────────────────────────────

    @classmethod
    def everything(cls) -> "RemovalFilter":
        return cls()

    @classmethod
    def by_event(cls, event: str) -> "RemovalFilter":
        return cls(event=_require_event(event))

    @classmethod
    def by_listener(cls, listener: Callable[..., Any]) -> "RemovalFilter":
        return cls(listener=_require_listener(listener))

    @classmethod
    def by_owner(cls, owner: object) -> "RemovalFilter":
        return cls(owner=_require_owner(owner))

    @classmethod
    def by_event_and_listener(
        cls, event: str, listener: Callable[..., Any]
    ) -> "RemovalFilter":
        return cls(event=_require_event(event), listener=_require_listener(listener))

    @classmethod
    def by_event_and_owner(cls, event: str, owner: object) -> "RemovalFilter":
        return cls(event=_require_event(event), owner=_require_owner(owner))

    @classmethod
    def by_listener_and_owner(
        cls, listener: Callable[..., Any], owner: object
    ) -> "RemovalFilter":
        return cls(listener=_require_listener(listener), owner=_require_owner(owner))

    @classmethod
    def exact(
        cls, event: str, listener: Callable[..., Any], owner: object
    ) -> "RemovalFilter":
        return cls(
            event=_require_event(event),
            listener=_require_listener(listener),
            owner=_require_owner(owner),
        )

    @classmethod
    def from_args(cls, *args: Any) -> "RemovalFilter":
        """
        Parse the positional off(...) shapes.

        A str (first position only) is the event, the first callable
        is the listener, any other value is the owner. None is not a
        criterion; only a call with no arguments selects everything.

            off()                         -> everything
            off("saved")                  -> by_event
            off(handler)                  -> by_listener
            off(widget)                   -> by_owner
            off("saved", handler, widget) -> exact
        """
        if len(args) > 3:
            raise TypeError(
                f"off() takes at most 3 criteria ({len(args)} given)."
            )

        event = listener = owner = None
        for position, arg in enumerate(args):
            if arg is None:
                raise TypeError(
                    f"None is not a removal criterion (position {position})."
                )
            if isinstance(arg, str):
                if position != 0:
                    raise TypeError(
                        f"Event name must be the first criterion, got {arg!r} "
                        f"at position {position}."
                    )
                event = arg
            elif callable(arg) and listener is None:
                listener = arg
            elif owner is None:
                owner = arg
            else:
                raise TypeError(f"Unexpected extra criterion {arg!r}.")

        return cls(event=event, listener=listener, owner=owner)

    # ── Matching ─────────────────────────────────────────────

    @property
    def is_everything(self) -> bool:
        return self.event is None and self.listener is None and self.owner is None

    def matches_event(self, event: str) -> bool:
        return self.event is None or self.event == event

    def matches(self, subscription: Subscription) -> bool:
        """Check listener/owner criteria. Event is checked by matches_event()."""
        if self.listener is not None and subscription.callback != self.listener:
            return False
        if self.owner is not None and subscription.owner is not self.owner:
            return False
        return True


def _require_event(event: Any) -> str:
    if not isinstance(event, str):
        raise TypeError(f"Event name must be a str, got {type(event).__name__}.")
    return event


def _require_listener(listener: Any) -> Callable[..., Any]:
    if not callable(listener):
        raise TypeError(f"Listener must be callable, got {type(listener).__name__}.")
    return listener


def _require_owner(owner: Any) -> object:
    if owner is None:
        raise ValueError("Owner criterion cannot be None.")
    return owner

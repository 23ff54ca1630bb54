"""
Relay Events - Event Emitter
==============================
Register interest in named events; get told later.

Dispatch behavior for emit(event, *args):
1. Snapshot ordinary listeners, drain once-listeners
2. Escalate an unhandled error event synchronously
3. Schedule the default handler, if one is set
4. Schedule ordinary listeners in registration order
5. Schedule once-listeners in registration order

Nothing is invoked inside emit(). Every call is handed to the
Scheduler, so a listener that raises cannot unwind into emit()
or into another listener. Listeners registered while a dispatch
is running wait for the next emit().

Removing a listener does not retract calls already scheduled.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Dict, Optional, Tuple

from relay.config.settings import EmitterConfig
from relay.events.errors import UnhandledErrorEvent
from relay.events.filters import RemovalFilter
from relay.events.registry import ListenerRegistry
from relay.events.subscription import Subscription
from relay.scheduling.scheduler import Scheduler, get_default_scheduler
from relay.time.clock import Clock, SystemClock

logger = logging.getLogger("relay.events")


class EventEmitter:
    """
    In-process publish/subscribe primitive.

    Usage:
        emitter = EventEmitter(scheduler=QueueScheduler())

        emitter.on("saved", audit, owner=panel).once("saved", notify)
        emitter.emit("saved", record)

        emitter.off(panel)                      # everything panel registered
        emitter.off(RemovalFilter.by_event("saved"))

    Every operation returns the emitter for chaining.
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
        config: Optional[EmitterConfig] = None,
    ) -> None:
        self._registry = ListenerRegistry()
        self._default_handlers: Dict[str, Callable[..., Any]] = {}
        self._scheduler = scheduler
        self._clock = clock if clock is not None else SystemClock()
        self._config = config if config is not None else EmitterConfig()

    @property
    def config(self) -> EmitterConfig:
        return self._config

    @property
    def scheduler(self) -> Scheduler:
        """The scheduler given at construction, else the current default."""
        if self._scheduler is not None:
            return self._scheduler
        return get_default_scheduler()

    # ══════════════════════════════════════════════════════════
    # REGISTRATION
    # ══════════════════════════════════════════════════════════

    def on(
        self,
        event: str,
        listener: Callable[..., Any],
        owner: Optional[object] = None,
    ) -> "EventEmitter":
        """Call `listener` every time `event` is emitted."""
        return self._subscribe(event, listener, owner, once=False)

    def once(
        self,
        event: str,
        listener: Callable[..., Any],
        owner: Optional[object] = None,
    ) -> "EventEmitter":
        """Call `listener` on the next emission of `event` only."""
        return self._subscribe(event, listener, owner, once=True)

    def _subscribe(
        self,
        event: Any,
        listener: Any,
        owner: Optional[object],
        once: bool,
    ) -> "EventEmitter":
        # Malformed registrations are ignored, not raised.
        if not isinstance(event, str) or not callable(listener):
            logger.debug(
                f"Ignored registration: event={event!r}, "
                f"listener={listener!r}"
            )
            return self

        subscription = Subscription(callback=listener, owner=owner, once=once)
        self._registry.add(event, subscription)
        logger.debug(
            f"Listener registered: {subscription.name} → {event}"
            f"{' (once)' if once else ''}"
        )
        return self

    def off(self, *criteria: Any) -> "EventEmitter":
        """
        Remove subscriptions.

        Accepts nothing (remove everything), a single RemovalFilter,
        or the positional shapes understood by RemovalFilter.from_args:

            off()
            off("saved")
            off(handler)
            off(owner)
            off("saved", handler)
            off("saved", owner)
            off(handler, owner)
            off("saved", handler, owner)

        All criteria given must match. Removing something that is not
        registered is a no-op.
        """
        if len(criteria) == 1 and isinstance(criteria[0], RemovalFilter):
            selector = criteria[0]
        else:
            selector = RemovalFilter.from_args(*criteria)

        removed = self._registry.remove(selector)
        if removed:
            logger.debug(f"Removed {removed} subscription(s) matching {selector!r}")
        return self

    def close(self) -> None:
        """Drop every subscription and default handler."""
        self._registry.remove(RemovalFilter.everything())
        self._default_handlers.clear()

    # ══════════════════════════════════════════════════════════
    # DEFAULT HANDLERS
    # ══════════════════════════════════════════════════════════

    def set_default_handler(
        self, event: str, handler: Optional[Callable[..., Any]]
    ) -> "EventEmitter":
        """
        Designate the fallback handler for `event` (None clears it).

        The default handler is scheduled before ordinary listeners on
        every emission. A default handler on the error event counts as
        handling it.
        """
        if not isinstance(event, str):
            raise TypeError(f"Event name must be a str, got {type(event).__name__}.")

        if handler is None:
            self._default_handlers.pop(event, None)
            return self

        if not callable(handler):
            raise TypeError(
                f"Default handler must be callable, got {type(handler).__name__}."
            )
        self._default_handlers[event] = handler
        return self

    def default_handler(self, event: str) -> Optional[Callable[..., Any]]:
        return self._default_handlers.get(event)

    # ══════════════════════════════════════════════════════════
    # EMISSION
    # ══════════════════════════════════════════════════════════

    def emit(self, event: str, *args: Any, **kwargs: Any) -> "EventEmitter":
        """
        Schedule every current listener of `event` with the given arguments.

        Raises:
            The first argument, if `event` is the error event, nobody
            handles it and that argument is an exception.
            UnhandledErrorEvent in the same situation otherwise.
        """
        scheduler = self.scheduler
        ordinary, once = self._registry.take_for_dispatch(event)
        default = self._default_handlers.get(event)

        if (
            event == self._config.error_event
            and not ordinary
            and not once
            and default is None
        ):
            self._raise_unhandled(event, args)

        scheduled = 0
        once_scheduled = 0
        try:
            if default is not None:
                scheduler.schedule(partial(default, *args, **kwargs))
                scheduled += 1

            for subscription in ordinary:
                scheduler.schedule(partial(subscription.callback, *args, **kwargs))
                scheduled += 1

            for subscription in once:
                scheduler.schedule(partial(subscription.callback, *args, **kwargs))
                once_scheduled += 1
        except Exception:
            # Once-listeners that never reached the scheduler stay registered.
            self._registry.restore_once(event, once[once_scheduled:])
            raise
        scheduled += once_scheduled

        if scheduled:
            logger.debug(f"Emitted {event}: {scheduled} invocation(s) scheduled")
        return self

    @staticmethod
    def _raise_unhandled(event: str, args: Tuple[Any, ...]) -> None:
        if args and isinstance(args[0], BaseException):
            raise args[0]
        raise UnhandledErrorEvent(event, args)

    def emit_event(self, event: str, payload: Any = None) -> "EventEmitter":
        """
        Emit `event` with a decorated payload dict.

        A mapping payload is shallow-copied; anything else is wrapped
        as {data_field: payload}. The copy is stamped with the event
        name and a timestamp: the payload's own timestamp if it has
        one, else the clock's current epoch milliseconds. All
        recipients receive the same dict.
        """
        config = self._config

        if isinstance(payload, Mapping):
            decorated = dict(payload)
        else:
            decorated = {config.data_field: payload}

        timestamp = None
        for alias in config.timestamp_aliases:
            if decorated.get(alias) is not None:
                timestamp = decorated[alias]
                break
        if timestamp is None:
            timestamp = self._clock.epoch_millis()

        decorated[config.type_field] = event
        decorated[config.timestamp_field] = timestamp

        return self.emit(event, decorated)

    # ══════════════════════════════════════════════════════════
    # INTROSPECTION
    # ══════════════════════════════════════════════════════════

    def listeners(self, event: str) -> Tuple[Callable[..., Any], ...]:
        """Callbacks registered on `event`, ordinary first, then once."""
        return self._registry.listeners(event)

    def listener_count(self, event: str) -> int:
        return self._registry.listener_count(event)

    def has_listeners(self, event: str) -> bool:
        return self._registry.has_listeners(event)

    def event_names(self) -> Tuple[str, ...]:
        return self._registry.event_names()

"""
Relay Events - Public API
===========================
Register, remove and emit. Listeners always run deferred.
"""

from relay.events.emitter import EventEmitter
from relay.events.errors import EventEmitterError, UnhandledErrorEvent
from relay.events.filters import RemovalFilter
from relay.events.registry import ListenerRegistry
from relay.events.subscription import Subscription

__all__ = [
    "EventEmitter",
    "ListenerRegistry",
    "Subscription",
    "RemovalFilter",
    "EventEmitterError",
    "UnhandledErrorEvent",
]

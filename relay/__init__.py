"""
Relay - In-process event emitter
==================================
Independent parts of a program register interest in named events
and are notified later, asynchronously, when those events occur.
"""

from relay.config import EmitterConfig
from relay.events import (
    EventEmitter,
    EventEmitterError,
    ListenerRegistry,
    RemovalFilter,
    Subscription,
    UnhandledErrorEvent,
)
from relay.scheduling import (
    AsyncioScheduler,
    LoopOrQueueScheduler,
    QueueScheduler,
    Scheduler,
    SchedulerUnavailableError,
)

__all__ = [
    "EventEmitter",
    "ListenerRegistry",
    "Subscription",
    "RemovalFilter",
    "EventEmitterError",
    "UnhandledErrorEvent",
    "Scheduler",
    "AsyncioScheduler",
    "LoopOrQueueScheduler",
    "QueueScheduler",
    "SchedulerUnavailableError",
    "EmitterConfig",
]

"""
Relay Scheduling - Public API
===============================
Deferred invocation of listeners. Emitting never runs a listener
inline; it hands the call to a Scheduler.
"""

from relay.scheduling.scheduler import (
    AsyncioScheduler,
    LoopOrQueueScheduler,
    QueueScheduler,
    Scheduler,
    SchedulerUnavailableError,
    get_default_scheduler,
    set_default_scheduler,
)

__all__ = [
    "Scheduler",
    "AsyncioScheduler",
    "LoopOrQueueScheduler",
    "QueueScheduler",
    "SchedulerUnavailableError",
    "get_default_scheduler",
    "set_default_scheduler",
]

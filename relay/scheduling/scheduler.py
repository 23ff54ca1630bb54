"""
Relay Scheduling - Deferred Invocation
========================================
The emitter never calls a listener itself. It hands each
invocation to a Scheduler, which runs it after the current
synchronous turn.

Contract:
- schedule() returns immediately, never runs the callback inline
- Callbacks scheduled in one turn run in call order
- A failing callback does not affect any other callback
- No cancellation of already-scheduled callbacks
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from threading import Lock
from typing import Any, Callable, Deque, Optional, Protocol

logger = logging.getLogger("relay.scheduling")


# ══════════════════════════════════════════════════════════════
# ERRORS
# ══════════════════════════════════════════════════════════════

class SchedulerUnavailableError(RuntimeError):
    """No event loop is available to accept deferred work."""

    def __init__(self):
        super().__init__(
            "AsyncioScheduler needs a running event loop or an explicit "
            "loop. Emit from inside a coroutine, pass loop=..., or use "
            "QueueScheduler for synchronous hosts."
        )


# ══════════════════════════════════════════════════════════════
# SCHEDULER PROTOCOL
# ══════════════════════════════════════════════════════════════

class Scheduler(Protocol):
    """Host capability: run a callback after the current turn."""

    def schedule(self, callback: Callable[[], Any]) -> None:
        """Queue `callback` for deferred execution."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class AsyncioScheduler:
    """
    Posts callbacks onto an asyncio event loop with call_soon().

    Exceptions raised by a callback go to the loop's exception
    handler, so each invocation is isolated from the others.

    With an explicit loop, callers off the loop's thread are
    routed through call_soon_threadsafe().
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, callback: Callable[[], Any]) -> None:
        running = _running_loop()
        loop = self._loop
        if loop is None:
            if running is None:
                raise SchedulerUnavailableError()
            loop = running

        if loop is running:
            loop.call_soon(callback)
        else:
            loop.call_soon_threadsafe(callback)


class QueueScheduler:
    """
    Explicit FIFO task queue for synchronous hosts and tests.

    Nothing runs until the host calls run_pending(). Each task
    runs in isolation: failures are caught, logged and reported,
    and draining continues with the next task.

    Usage:
        scheduler = QueueScheduler()
        emitter = EventEmitter(scheduler=scheduler)
        emitter.on("saved", handler).emit("saved", record)
        scheduler.run_pending()   # handler(record) runs here
    """

    def __init__(self) -> None:
        self._pending: Deque[Callable[[], Any]] = deque()
        self._lock = Lock()

    def schedule(self, callback: Callable[[], Any]) -> None:
        with self._lock:
            self._pending.append(callback)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _next(self) -> Optional[Callable[[], Any]]:
        with self._lock:
            if not self._pending:
                return None
            return self._pending.popleft()

    def run_pending(self) -> dict:
        """
        Run queued tasks until the queue is empty.

        Tasks queued by running tasks are run in the same drain.

        Returns:
            dict with run results:
            {
                'executed': int,
                'failed': int,
                'failures': list[dict]
            }

        This method NEVER raises task exceptions.
        """
        result = {
            "executed": 0,
            "failed": 0,
            "failures": [],
        }

        while True:
            task = self._next()
            if task is None:
                break

            task_name = _callable_name(task)
            try:
                task()
                result["executed"] += 1
            except Exception as exc:
                result["failed"] += 1
                result["failures"].append({
                    "callback": task_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                })
                logger.error(
                    f"Deferred task failed: {task_name}: {exc}",
                    exc_info=True,
                )

        if result["executed"] or result["failed"]:
            logger.debug(
                f"Queue drained: {result['executed']} executed, "
                f"{result['failed']} failed"
            )
        return result


class LoopOrQueueScheduler:
    """
    Default host: the running asyncio loop if there is one,
    otherwise a backlog queue drained by run_pending().

    Never raises from schedule(). Backlog left from synchronous
    code is flushed onto the loop ahead of the next callback
    scheduled from inside it, so call order is kept.
    """

    def __init__(self) -> None:
        self._backlog = QueueScheduler()

    def schedule(self, callback: Callable[[], Any]) -> None:
        loop = _running_loop()
        if loop is None:
            self._backlog.schedule(callback)
            return

        if self._backlog.pending_count():
            loop.call_soon(self._backlog.run_pending)
        loop.call_soon(callback)

    def pending_count(self) -> int:
        """Callbacks waiting in the backlog (not those already on a loop)."""
        return self._backlog.pending_count()

    def run_pending(self) -> dict:
        """Drain the backlog; same result shape as QueueScheduler.run_pending()."""
        return self._backlog.run_pending()


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _callable_name(task: Callable[..., Any]) -> str:
    target = getattr(task, "func", task)  # unwrap functools.partial
    return getattr(target, "__qualname__", repr(target))


# ══════════════════════════════════════════════════════════════
# DEFAULT SCHEDULER
# ══════════════════════════════════════════════════════════════

_default_scheduler: Scheduler = LoopOrQueueScheduler()


def set_default_scheduler(scheduler: Scheduler) -> None:
    """Override the scheduler used by emitters created without one."""
    global _default_scheduler
    _default_scheduler = scheduler


def get_default_scheduler() -> Scheduler:
    """Get the current default scheduler."""
    return _default_scheduler

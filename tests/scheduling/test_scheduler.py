"""
Tests for relay.scheduling - deferred invocation hosts.
"""

import asyncio
import logging

import pytest

from relay.events.emitter import EventEmitter
from relay.scheduling.scheduler import (
    AsyncioScheduler,
    LoopOrQueueScheduler,
    QueueScheduler,
    SchedulerUnavailableError,
    get_default_scheduler,
    set_default_scheduler,
)


# ── QueueScheduler Tests ─────────────────────────────────────

class TestQueueScheduler:
    def test_nothing_runs_until_drained(self):
        scheduler = QueueScheduler()
        calls = []
        scheduler.schedule(lambda: calls.append(1))
        assert calls == []
        assert scheduler.pending_count() == 1

    def test_runs_in_schedule_order(self):
        scheduler = QueueScheduler()
        calls = []
        for n in range(5):
            scheduler.schedule(lambda n=n: calls.append(n))
        result = scheduler.run_pending()
        assert calls == [0, 1, 2, 3, 4]
        assert result == {"executed": 5, "failed": 0, "failures": []}
        assert scheduler.pending_count() == 0

    def test_tasks_scheduled_while_draining_also_run(self):
        scheduler = QueueScheduler()
        calls = []

        def first():
            calls.append("first")
            scheduler.schedule(lambda: calls.append("second"))

        scheduler.schedule(first)
        scheduler.run_pending()
        assert calls == ["first", "second"]

    def test_failure_is_isolated_and_reported(self, caplog):
        scheduler = QueueScheduler()
        calls = []

        def boom():
            raise KeyError("missing")

        scheduler.schedule(boom)
        scheduler.schedule(lambda: calls.append("after"))

        with caplog.at_level(logging.ERROR, logger="relay.scheduling"):
            result = scheduler.run_pending()

        assert calls == ["after"]
        assert result["executed"] == 1
        assert result["failed"] == 1
        failure = result["failures"][0]
        assert failure["error_type"] == "KeyError"
        assert failure["callback"].endswith("boom")
        assert "Deferred task failed" in caplog.text

    def test_empty_drain(self):
        assert QueueScheduler().run_pending() == {
            "executed": 0,
            "failed": 0,
            "failures": [],
        }


# ── AsyncioScheduler Tests ───────────────────────────────────

class TestAsyncioScheduler:
    def test_requires_running_loop(self):
        with pytest.raises(SchedulerUnavailableError):
            AsyncioScheduler().schedule(lambda: None)

    def test_unavailable_loop_leaves_once_listener_registered(self):
        emitter = EventEmitter(scheduler=AsyncioScheduler())
        listener = lambda: None  # noqa: E731
        emitter.once("x", listener)

        with pytest.raises(SchedulerUnavailableError):
            emitter.emit("x")

        assert emitter.listeners("x") == (listener,)

    def test_schedules_from_another_thread(self):
        async def scenario():
            loop = asyncio.get_running_loop()
            scheduler = AsyncioScheduler(loop=loop)
            ran = asyncio.Event()

            await loop.run_in_executor(None, scheduler.schedule, ran.set)
            await asyncio.wait_for(ran.wait(), timeout=1)
            return ran.is_set()

        assert asyncio.run(scenario())

    def test_delivers_after_current_turn(self):
        async def scenario():
            emitter = EventEmitter(scheduler=AsyncioScheduler())
            calls = []
            emitter.on("x", lambda value: calls.append(value))
            emitter.on("x", lambda value: calls.append(value * 10))

            emitter.emit("x", 1)
            assert calls == []

            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return calls

        assert asyncio.run(scenario()) == [1, 10]

    def test_explicit_loop(self):
        loop = asyncio.new_event_loop()
        try:
            calls = []
            scheduler = AsyncioScheduler(loop=loop)
            scheduler.schedule(lambda: calls.append("ran"))
            assert calls == []
            loop.run_until_complete(asyncio.sleep(0))
            assert calls == ["ran"]
        finally:
            loop.close()

    def test_failing_listener_does_not_affect_others(self):
        async def scenario():
            loop = asyncio.get_running_loop()
            errors = []
            loop.set_exception_handler(lambda _loop, context: errors.append(context))

            emitter = EventEmitter(scheduler=AsyncioScheduler())
            calls = []

            def boom():
                raise RuntimeError("listener failure")

            emitter.on("x", boom).on("x", lambda: calls.append("after"))
            emitter.emit("x")

            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return calls, errors

        calls, errors = asyncio.run(scenario())
        assert calls == ["after"]
        assert len(errors) == 1
        assert isinstance(errors[0]["exception"], RuntimeError)


# ── LoopOrQueueScheduler Tests ───────────────────────────────

class TestLoopOrQueueScheduler:
    def test_queues_without_running_loop(self):
        scheduler = LoopOrQueueScheduler()
        calls = []
        scheduler.schedule(lambda: calls.append(1))
        assert calls == []
        assert scheduler.pending_count() == 1
        assert scheduler.run_pending()["executed"] == 1
        assert calls == [1]

    def test_posts_to_running_loop(self):
        async def scenario():
            scheduler = LoopOrQueueScheduler()
            calls = []
            scheduler.schedule(lambda: calls.append("loop"))
            assert calls == []
            assert scheduler.pending_count() == 0
            await asyncio.sleep(0)
            return calls

        assert asyncio.run(scenario()) == ["loop"]

    def test_backlog_runs_before_later_loop_callbacks(self):
        scheduler = LoopOrQueueScheduler()
        calls = []
        scheduler.schedule(lambda: calls.append("queued"))

        async def scenario():
            scheduler.schedule(lambda: calls.append("loop"))
            await asyncio.sleep(0)
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert calls == ["queued", "loop"]
        assert scheduler.pending_count() == 0


# ── Default Scheduler Tests ──────────────────────────────────

class TestDefaultScheduler:
    def test_default_works_without_loop(self):
        assert isinstance(get_default_scheduler(), LoopOrQueueScheduler)

    def test_default_emitter_emits_outside_loop(self):
        default = get_default_scheduler()
        default.run_pending()
        calls = []

        emitter = EventEmitter()
        emitter.once("x", lambda: calls.append("once"))
        assert emitter.emit("x") is emitter
        assert not emitter.has_listeners("x")

        default.run_pending()
        assert calls == ["once"]

    def test_emitter_resolves_default_at_emit_time(self):
        original = get_default_scheduler()
        emitter = EventEmitter()
        queue = QueueScheduler()
        set_default_scheduler(queue)
        try:
            calls = []
            emitter.on("x", lambda: calls.append(1)).emit("x")
            assert queue.pending_count() == 1
            queue.run_pending()
            assert calls == [1]
        finally:
            set_default_scheduler(original)

"""
Deferred task runner tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from application_tracking.tasks.runner import DeferredTaskRunner, utcnow


async def test_runs_coroutine_and_plain_callbacks(task_runner):
    calls = []

    async def coro_callback():
        calls.append("coro")

    task_runner.schedule(coro_callback)
    task_runner.schedule(lambda: calls.append("plain"))
    await task_runner.wait_idle()

    assert sorted(calls) == ["coro", "plain"]
    assert task_runner.pending == 0


async def test_callback_errors_do_not_propagate(task_runner):
    calls = []

    def broken():
        raise ValueError("boom")

    task = task_runner.schedule(broken)
    task_runner.schedule(lambda: calls.append("after"))
    await task_runner.wait_idle()

    assert task.exception() is None
    assert calls == ["after"]


async def test_tasks_run_in_execution_time_order(task_runner):
    order = []
    now = utcnow()

    task_runner.schedule(lambda: order.append("late"), now + timedelta(milliseconds=50))
    task_runner.schedule(lambda: order.append("early"), now + timedelta(milliseconds=10))
    await task_runner.wait_idle()

    assert order == ["early", "late"]


async def test_past_execution_time_runs_immediately(task_runner):
    calls = []

    task_runner.schedule(lambda: calls.append(1), utcnow() - timedelta(hours=5))
    await asyncio.wait_for(task_runner.wait_idle(), timeout=1)

    assert calls == [1]


async def test_naive_execution_time_is_local_time(task_runner):
    calls = []

    task_runner.schedule(lambda: calls.append(1), datetime.now() - timedelta(minutes=1))
    await asyncio.wait_for(task_runner.wait_idle(), timeout=1)

    assert calls == [1]


async def test_wait_idle_includes_tasks_scheduled_by_tasks(task_runner):
    calls = []

    def first():
        calls.append("first")
        task_runner.schedule(lambda: calls.append("second"))

    task_runner.schedule(first)
    await task_runner.wait_idle()

    assert calls == ["first", "second"]


async def test_shutdown_cancels_pending_tasks():
    runner = DeferredTaskRunner()
    calls = []

    runner.schedule(lambda: calls.append(1), datetime.now(timezone.utc) + timedelta(hours=1))
    assert runner.pending == 1

    await runner.shutdown()

    assert runner.pending == 0
    assert calls == []


async def test_uses_injected_clock():
    shifted_now = utcnow() + timedelta(hours=2)
    runner = DeferredTaskRunner(clock=lambda: shifted_now)
    calls = []

    # Due according to the injected clock, an hour away in real time
    runner.schedule(lambda: calls.append(1), utcnow() + timedelta(hours=1))
    await asyncio.wait_for(runner.wait_idle(), timeout=1)

    assert calls == [1]

# tests/test_alarm_loop.py

from __future__ import annotations

import asyncio
import time

import pytest

from taskshift.storage.kv_store import SqliteKeyValueStore
from taskshift.tasks.alarm_loop import fire_due_alarms, run_alarm_loop
from taskshift.tasks.alarm_names import DAILY_SHIFT_ALARM, HOURLY_ALARM
from taskshift.tasks.alarm_registry import FireSpec
from taskshift.tasks.task_models import Task, TaskBoard
from taskshift.tasks.task_store import TaskStore


def test_fire_due_alarms_dispatches_and_consumes(engine_state, alerts) -> None:
    st = engine_state
    st.task_store.write(TaskBoard(today=[Task("a", "Pay rent", "10:00")]))
    now = time.time()
    st.alarms.upsert("task-a", FireSpec.once(now - 1))
    st.alarms.upsert("task-ghost", FireSpec.once(now - 1))

    fired = fire_due_alarms(st, now_ts=now)

    assert set(fired) == {"task-a", "task-ghost"}
    assert alerts.ids() == ["task-a"]
    assert fire_due_alarms(st, now_ts=now) == []


def test_failing_handler_does_not_block_others(engine_state, alerts, monkeypatch) -> None:
    st = engine_state
    st.task_store.write(TaskBoard(today=[Task("a", "A"), Task("b", "B", "10:00")]))
    now = time.time()
    st.alarms.upsert("dailyShift", FireSpec.once(now - 2))
    st.alarms.upsert("task-b", FireSpec.once(now - 1))

    def broken_write(board, *, on_complete=None):
        raise OSError("disk full")

    # Rollover fails; the task reminder after it must still go out.
    monkeypatch.setattr(st.task_store, "write", broken_write)
    fired = fire_due_alarms(st, now_ts=now)

    assert fired == ["dailyShift", "task-b"]
    assert alerts.ids() == ["task-b"]


@pytest.mark.asyncio
async def test_alarm_loop_runs_watchdog_and_picks_up_external_writes(state, settings, kv) -> None:
    # No bootstrap: the registry starts empty, so the watchdog has work to do.
    from taskshift.tasks.task_scheduler import Scheduler

    Scheduler(state.alarms).attach(state.task_store)
    other_process = TaskStore(SqliteKeyValueStore(settings.store_db_path))

    stop = asyncio.Event()
    runner = asyncio.create_task(
        run_alarm_loop(
            state,
            kv=kv,
            interval_seconds=0.01,
            watchdog_delay_seconds=0.0,
            stop_event=stop,
        )
    )

    other_process.write(TaskBoard(tomorrow=[Task("ext", "External", "09:00")]))
    await asyncio.sleep(0.1)
    stop.set()
    await asyncio.wait_for(runner, timeout=2.0)

    names = {e.name for e in state.alarms.list_all()}
    assert {HOURLY_ALARM, DAILY_SHIFT_ALARM, "task-ext"} <= names


@pytest.mark.asyncio
async def test_alarm_loop_can_be_cancelled(state) -> None:
    runner = asyncio.create_task(run_alarm_loop(state, interval_seconds=0.01))
    await asyncio.sleep(0.03)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

# tests/test_lifecycle.py

from __future__ import annotations

import time

from taskshift.core.state import AppState
from taskshift.storage.kv_store import SqliteKeyValueStore
from taskshift.tasks.alarm_names import DAILY_SHIFT_ALARM, HOURLY_ALARM
from taskshift.tasks.alarm_loop import fire_due_alarms
from taskshift.tasks.alarm_registry import FireSpec, SqliteAlarmRegistry
from taskshift.tasks.lifecycle import bootstrap_engine
from taskshift.tasks.task_models import Task, TaskBoard
from taskshift.tasks.task_store import TaskStore

from .fakes import RecordingAlertSink


def _fresh_state(settings, alerts: RecordingAlertSink) -> AppState:
    """A new process over the same files."""
    return AppState(
        settings=settings,
        task_store=TaskStore(SqliteKeyValueStore(settings.store_db_path)),
        alarms=SqliteAlarmRegistry(settings.alarms_db_path),
        alerts=alerts,
    )


def test_first_run_installs_defaults(state, alerts) -> None:
    bootstrap_engine(state)

    assert state.task_store.is_initialized()
    assert state.task_store.read() == TaskBoard()
    assert {e.name for e in state.alarms.list_all()} == {HOURLY_ALARM, DAILY_SHIFT_ALARM}
    assert alerts.shown == []


def test_restart_rebuilds_lost_task_alarms(settings, state) -> None:
    bootstrap_engine(state)
    state.task_store.write(TaskBoard(today=[Task("u", "Untimed")], tomorrow=[Task("t", "Timed", "09:00")]))

    # Simulate a host that dropped every timer while the process was gone.
    for e in state.alarms.list_all():
        state.alarms.cancel(e.name)

    alerts = RecordingAlertSink()
    restarted = _fresh_state(settings, alerts)
    bootstrap_engine(restarted)

    names = {e.name for e in restarted.alarms.list_all()}
    assert names == {HOURLY_ALARM, DAILY_SHIFT_ALARM, "task-t"}
    assert alerts.ids() == ["startup-reminder"]
    assert alerts.shown[0].body == "Untimed"


def test_restart_rearms_listener(settings, state) -> None:
    bootstrap_engine(state)

    restarted = _fresh_state(settings, RecordingAlertSink())
    bootstrap_engine(restarted)
    restarted.task_store.write(TaskBoard(day_after=[Task("x", "X", "07:00")]))

    assert restarted.alarms.get("task-x") is not None


def test_restart_skips_rollover_missed_while_down(settings, state) -> None:
    bootstrap_engine(state)
    state.task_store.write(TaskBoard(today=[Task("a", "A")], tomorrow=[Task("b", "B")]))
    now = time.time()
    state.alarms.upsert(DAILY_SHIFT_ALARM, FireSpec.once(now - 3600))

    restarted = _fresh_state(settings, RecordingAlertSink())
    bootstrap_engine(restarted)

    assert restarted.alarms.get(DAILY_SHIFT_ALARM).spec.at > now
    assert fire_due_alarms(restarted) == []
    assert [t.id for t in restarted.task_store.read().today] == ["a"]

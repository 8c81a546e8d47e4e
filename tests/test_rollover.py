# tests/test_rollover.py

from __future__ import annotations

import time

import pytest

from taskshift.core.state import AppState
from taskshift.errors import PersistenceIOError
from taskshift.tasks.alarm_names import DAILY_SHIFT_ALARM
from taskshift.tasks.rollover import RolloverJob, RolloverState, shift_board
from taskshift.tasks.task_models import Task, TaskBoard

from .fakes import FailingTaskStore, RecordingAlertSink


def _board() -> TaskBoard:
    return TaskBoard(
        today=[Task("A", "a")],
        tomorrow=[Task("B", "b"), Task("C", "c", "10:00")],
        day_after=[Task("D", "d")],
    )


def test_shift_board_is_order_preserving() -> None:
    shifted = shift_board(_board())
    assert [t.id for t in shifted.today] == ["B", "C"]
    assert [t.id for t in shifted.tomorrow] == ["D"]
    assert shifted.day_after == []


def test_rollover_writes_alerts_and_rearms(state, alerts) -> None:
    state.task_store.write(_board())
    before = time.time()

    job = RolloverJob(state)
    job.run()

    board = state.task_store.read()
    assert [t.id for t in board.today] == ["B", "C"]
    assert [t.id for t in board.tomorrow] == ["D"]
    assert board.day_after == []

    assert alerts.ids() == ["daily-shift"]
    assert job.status is RolloverState.IDLE

    shift = state.alarms.get(DAILY_SHIFT_ALARM)
    assert shift is not None
    assert before < shift.spec.at <= before + 24 * 3600 + 1


def test_rollover_is_a_single_write(state) -> None:
    state.task_store.write(_board())
    seen: list[TaskBoard] = []
    state.task_store.subscribe(seen.append)

    RolloverJob(state).run()

    assert len(seen) == 1
    assert [t.id for t in seen[0].today] == ["B", "C"]


def test_rollover_write_failure_does_not_rearm(state) -> None:
    sink = RecordingAlertSink()
    store = FailingTaskStore(_board())
    broken = AppState(settings=state.settings, task_store=store, alarms=state.alarms, alerts=sink)

    job = RolloverJob(broken)
    with pytest.raises(PersistenceIOError):
        job.run()

    assert store.write_attempts == 1
    assert sink.shown == []
    assert state.alarms.get(DAILY_SHIFT_ALARM) is None
    assert job.status is RolloverState.IDLE

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskshift.core.state import AppState
from taskshift.storage.kv_store import SqliteKeyValueStore
from taskshift.tasks.alarm_registry import SqliteAlarmRegistry
from taskshift.tasks.lifecycle import bootstrap_engine
from taskshift.tasks.task_store import TaskStore

from .fakes import RecordingAlertSink


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the engine.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskshift-test",
        log_level="DEBUG",
        console_enabled=False,
        # Paths (tmp per test run)
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        alarms_db_path=tmp_path / "alarms.sqlite3",
        # Schedule
        rollover_hour=21,
        rollover_minute=0,
        hourly_period_minutes=60,
        alert_list_limit=5,
        # Loop
        poll_interval_seconds=0.01,
        watchdog_delay_seconds=0.0,
    )


@pytest.fixture()
def kv(settings: SimpleNamespace) -> SqliteKeyValueStore:
    return SqliteKeyValueStore(settings.store_db_path)


@pytest.fixture()
def alerts() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest.fixture()
def state(settings: SimpleNamespace, kv: SqliteKeyValueStore, alerts: RecordingAlertSink) -> AppState:
    """
    AppState wired with a recording alert sink.

    NOTE: We keep real SQLite stores here (key/value + alarm registry) because
    their durability is part of what we want to test.
    """
    return AppState(
        settings=settings,
        task_store=TaskStore(kv),
        alarms=SqliteAlarmRegistry(settings.alarms_db_path),
        alerts=alerts,
    )


@pytest.fixture()
def engine_state(state: AppState, alerts: RecordingAlertSink) -> AppState:
    """State after the startup hook: scheduler attached, system alarms armed."""
    bootstrap_engine(state)
    alerts.shown.clear()
    return state

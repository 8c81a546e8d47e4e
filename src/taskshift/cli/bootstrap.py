# src/taskshift/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/alarms/alerts),
- starts the alarm loop in a background thread.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..config import get_settings
from ..connectors.console_alerts import ConsoleAlertSink
from ..core.ports import AlertSink
from ..core.state import AppState
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.alarm_loop import run_alarm_loop
from ..tasks.alarm_registry import SqliteAlarmRegistry
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.alarms_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, alerts: AlertSink | None = None) -> tuple[AppState, SqliteKeyValueStore]:
    """
    Create AppState from the provided settings.

    Returns the key/value store as well: the alarm loop polls it for writes made
    by other processes. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    kv = SqliteKeyValueStore(settings.store_db_path)
    state = AppState(
        settings=settings,
        task_store=TaskStore(kv),
        alarms=SqliteAlarmRegistry(settings.alarms_db_path),
        alerts=alerts if alerts is not None else ConsoleAlertSink(),
    )
    return state, kv


@dataclass
class AlarmLoopRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal alarm loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_alarm_loop_in_background(state: AppState, kv: SqliteKeyValueStore) -> AlarmLoopRunner | None:
    """
    Start the alarm loop in a background thread (so the console REPL can run in parallel).

    The console REPL blocks on input(); the alarm loop is async and wants its own event loop.
    """
    settings = state.settings
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_alarm_loop(
                    state,
                    kv=kv,
                    interval_seconds=float(getattr(settings, "poll_interval_seconds", 15.0)),
                    watchdog_delay_seconds=float(getattr(settings, "watchdog_delay_seconds", 2.0)),
                    stop_event=stop_event,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="alarm-loop", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Alarm loop thread did not start in time.")
        return None

    return AlarmLoopRunner(thread=t, loop=loop, stop_event=stop_event)

# src/taskshift/tasks/alarm_loop.py

from __future__ import annotations

"""
Alarm loop.

A small polling loop standing in for the host timer service:
- picks up board writes made by other processes (store change poll),
- pops due alarms from the durable registry and dispatches each one,
- runs the system-alarm watchdog once, shortly after start.

Each event is handled to completion under state.lock, so alarm handlers never
interleave with console commands. Alarms are rows, not in-memory timers: if
the process is suspended, whatever fell due meanwhile fires on the next tick.
A restart is different: startup re-arms dailyShift for its next 21:00 and
reconcile moves passed task times forward, so fires missed while the process
was down are skipped, not replayed.
"""

import asyncio
import logging
import time

from ..core.state import AppState
from .notifier import dispatch_fire
from .task_scheduler import watchdog_check

logger = logging.getLogger(__name__)


def poll_external_changes(state: AppState, kv) -> int:
    with state.lock:
        try:
            return kv.poll_changes()
        except Exception:
            logger.exception("poll_changes failed")
            return 0


def fire_due_alarms(state: AppState, *, now_ts: float | None = None) -> list[str]:
    """Pop and dispatch every due alarm. A failing handler does not stop the others."""
    if now_ts is None:
        now_ts = time.time()

    with state.lock:
        try:
            names = state.alarms.pop_due(now_ts)
        except Exception:
            logger.exception("pop_due failed")
            return []

    for name in names:
        with state.lock:
            try:
                logger.info("Alarm fired: %s", name)
                dispatch_fire(state, name)
            except Exception:
                logger.exception("Alarm handler failed name=%s", name)
    return names


def run_watchdog(state: AppState) -> list[str]:
    with state.lock:
        try:
            return watchdog_check(state.alarms, state.settings)
        except Exception:
            logger.exception("Watchdog check failed")
            return []


async def run_alarm_loop(
        state: AppState,
        *,
        kv=None,
        interval_seconds: float = 15.0,
        watchdog_delay_seconds: float = 2.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Every interval_seconds:
    - poll kv (if given) for writes from other processes
    - fire due alarms

    The watchdog runs once, watchdog_delay_seconds after the loop starts.
    Stop by setting stop_event or cancelling the coroutine.
    """
    sleep_s = max(0.01, float(interval_seconds))
    started = time.monotonic()
    watchdog_done = False

    logger.info("Alarm loop started (interval=%.2fs)", sleep_s)
    while stop_event is None or not stop_event.is_set():
        if kv is not None:
            poll_external_changes(state, kv)

        fire_due_alarms(state)

        if not watchdog_done and time.monotonic() - started >= watchdog_delay_seconds:
            run_watchdog(state)
            watchdog_done = True

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
            except asyncio.TimeoutError:
                pass
    logger.info("Alarm loop stopped")

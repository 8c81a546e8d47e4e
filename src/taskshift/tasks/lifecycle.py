# tasks/lifecycle.py

from __future__ import annotations

import logging

from ..core.state import AppState
from .notifier import show_startup_reminder
from .task_models import TaskBoard
from .task_scheduler import Scheduler, ensure_system_alarms

logger = logging.getLogger(__name__)


def on_install(state: AppState) -> None:
    """First run: create the default board, arm system alarms, schedule task alarms."""
    if not state.task_store.is_initialized():
        # The write triggers reconciliation through the store listener.
        state.task_store.write(TaskBoard())
    ensure_system_alarms(state.alarms, state.settings)
    Scheduler(state.alarms).reconcile_now(state.task_store)
    logger.info("Install hook done")


def on_startup(state: AppState) -> None:
    """Every later start: greet with today's untimed tasks, re-arm everything."""
    show_startup_reminder(state)
    ensure_system_alarms(state.alarms, state.settings)
    Scheduler(state.alarms).reconcile_now(state.task_store)
    logger.info("Startup hook done")


def bootstrap_engine(state: AppState) -> Scheduler:
    """
    Wire the engine for this process lifetime and run the matching lifecycle hook.

    Must run on every process start: store listeners are in-memory only.
    """
    with state.lock:
        first_run = not state.task_store.is_initialized()
        scheduler = Scheduler(state.alarms)
        scheduler.attach(state.task_store)
        if first_run:
            on_install(state)
        else:
            on_startup(state)
    return scheduler

# tasks/notifier.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.state import AppState
from .alarm_names import DAILY_SHIFT_ALARM, HOURLY_ALARM, is_task_alarm, task_alarm_name, task_id_from_alarm_name
from .rollover import RolloverJob
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 5


def build_short_list_message(tasks: Iterable[Task], limit: int = DEFAULT_LIST_LIMIT) -> str:
    """One line per task ("<time> <text>" or bare text), first `limit` tasks only."""
    lines: list[str] = []
    for t in tasks:
        if len(lines) >= limit:
            break
        lines.append(f"{t.time} {t.text}" if t.time else t.text)
    return "\n".join(lines)


def _unscheduled_today(state: AppState) -> list[Task]:
    return [t for t in state.task_store.read().today if not t.time]


def _show(state: AppState, alert_id: str, title: str, body: str) -> None:
    try:
        state.alerts.show(alert_id, title, body)
    except Exception:
        logger.exception("Alert delivery failed id=%s", alert_id)


def _list_limit(state: AppState) -> int:
    return int(getattr(state.settings, "alert_list_limit", DEFAULT_LIST_LIMIT))


def notify_hourly(state: AppState) -> bool:
    unscheduled = _unscheduled_today(state)
    if not unscheduled:
        return False
    _show(state, "hourly-tasks", "Hourly Task Reminder", build_short_list_message(unscheduled, _list_limit(state)))
    return True


def notify_task(state: AppState, task_id: str) -> bool:
    found = state.task_store.read().find(task_id)
    if found is None:
        # Deleted or rolled off since the alarm was set.
        logger.debug("Stale task alarm ignored id=%s", task_id)
        return False
    _bucket, task = found
    body = f"{task.time} · {task.text}" if task.time else task.text
    _show(state, task_alarm_name(task.id), "Task Reminder", body)
    return True


def show_startup_reminder(state: AppState) -> bool:
    unscheduled = _unscheduled_today(state)
    if not unscheduled:
        return False
    _show(
        state,
        "startup-reminder",
        "Welcome — Today's Tasks",
        build_short_list_message(unscheduled, _list_limit(state)),
    )
    return True


def dispatch_fire(state: AppState, name: str) -> None:
    """Route a fired alarm by name. Unknown names are ignored."""
    if name == HOURLY_ALARM:
        notify_hourly(state)
    elif name == DAILY_SHIFT_ALARM:
        RolloverJob(state).run()
    elif is_task_alarm(name):
        task_id = task_id_from_alarm_name(name)
        if task_id:
            notify_task(state, task_id)
    else:
        logger.debug("Ignoring unknown alarm %r", name)

# src/taskshift/tasks/task_scheduler.py

from __future__ import annotations

"""
Alarm reconciliation.

Keeps the alarm registry in line with the task board:
- task alarms are rebuilt from scratch on every board write (cancel all, recreate),
- the two system alarms (hourly nudge, daily shift) are asserted at startup,
- a one-off watchdog re-creates a system alarm the registry has lost.

A full rebuild rather than a diff: edits, deletions and bucket moves all change
the fire time, and a diff would have to recompute it anyway.
"""

import logging

from ..core.ports import TimerService
from .alarm_names import DAILY_SHIFT_ALARM, HOURLY_ALARM, TASK_ALARM_PREFIX, task_alarm_name
from .alarm_registry import FireSpec
from .task_models import TaskBoard
from .task_store import TaskStore
from .time_utils import next_daily_occurrence, next_occurrence_for_bucket, parse_time_of_day

logger = logging.getLogger(__name__)


def reconcile(board: TaskBoard, alarms: TimerService, *, now: float | None = None) -> int:
    """
    Make the set of task alarms match the board exactly.

    Tasks with an unparseable time are skipped; their siblings are still scheduled.
    Returns the number of task alarms created.
    """
    cancelled = alarms.cancel_prefix(TASK_ALARM_PREFIX)

    scheduled = 0
    for bucket, tasks in board.iter_buckets():
        for task in tasks:
            if not task.time:
                continue
            tod = parse_time_of_day(task.time)
            if tod is None:
                logger.warning("Skipping alarm for task %s: malformed time %r", task.id, task.time)
                continue
            fire_at = next_occurrence_for_bucket(tod.hour, tod.minute, bucket.day_offset, now=now)
            alarms.upsert(task_alarm_name(task.id), FireSpec.once(fire_at))
            scheduled += 1

    logger.debug("Reconciled task alarms: cancelled=%d scheduled=%d", cancelled, scheduled)
    return scheduled


def arm_hourly_reminder(alarms: TimerService, settings, *, now: float | None = None) -> None:
    period = int(getattr(settings, "hourly_period_minutes", 60))
    alarms.upsert(HOURLY_ALARM, FireSpec.periodic(period, now=now))


def arm_daily_shift(alarms: TimerService, settings, *, now: float | None = None) -> float:
    hour = int(getattr(settings, "rollover_hour", 21))
    minute = int(getattr(settings, "rollover_minute", 0))
    fire_at = next_daily_occurrence(hour, minute, now=now)
    alarms.upsert(DAILY_SHIFT_ALARM, FireSpec.once(fire_at))
    logger.info("Daily shift armed at %s", fire_at)
    return fire_at


def ensure_system_alarms(alarms: TimerService, settings, *, now: float | None = None) -> None:
    """(Re-)assert both system alarms unconditionally."""
    arm_hourly_reminder(alarms, settings, now=now)
    arm_daily_shift(alarms, settings, now=now)


def watchdog_check(alarms: TimerService, settings, *, now: float | None = None) -> list[str]:
    """Re-create only the system alarms missing from the registry. Returns their names."""
    present = {e.name for e in alarms.list_all()}
    restored: list[str] = []

    if HOURLY_ALARM not in present:
        arm_hourly_reminder(alarms, settings, now=now)
        restored.append(HOURLY_ALARM)
    if DAILY_SHIFT_ALARM not in present:
        arm_daily_shift(alarms, settings, now=now)
        restored.append(DAILY_SHIFT_ALARM)

    if restored:
        logger.warning("Watchdog restored missing system alarms: %s", ", ".join(restored))
    return restored


class Scheduler:
    """Reconciles task alarms whenever the board is written, by any caller."""

    def __init__(self, alarms: TimerService) -> None:
        self._alarms = alarms

    def attach(self, store: TaskStore) -> None:
        # Listener lives in memory only; bootstrap calls this on every process start.
        store.subscribe(self.on_board_changed)

    def on_board_changed(self, board: TaskBoard) -> None:
        reconcile(board, self._alarms)

    def reconcile_now(self, store: TaskStore) -> int:
        return reconcile(store.read(), self._alarms)

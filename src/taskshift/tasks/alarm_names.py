# tasks/alarm_names.py

"""Alarm name namespace shared by the scheduler and the notification dispatcher."""

from __future__ import annotations

DAILY_SHIFT_ALARM = "dailyShift"
HOURLY_ALARM = "hourlyReminder"
TASK_ALARM_PREFIX = "task-"

SYSTEM_ALARMS = (HOURLY_ALARM, DAILY_SHIFT_ALARM)


def task_alarm_name(task_id: str) -> str:
    return f"{TASK_ALARM_PREFIX}{task_id}"


def is_task_alarm(name: str | None) -> bool:
    return bool(name) and name.startswith(TASK_ALARM_PREFIX)


def task_id_from_alarm_name(name: str | None) -> str | None:
    if not is_task_alarm(name):
        return None
    task_id = name[len(TASK_ALARM_PREFIX):]
    return task_id or None

# tasks/time_utils.py

"""
Wall-clock helpers for turning "HH:MM" + day offset into epoch fire times.

All functions take an optional `now` (epoch seconds) so callers and tests can
pin the clock. Day arithmetic is done on local naive datetimes, so a DST change
moves the epoch delta, not the wall-clock time.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from datetime import time as dtime

from ..errors import MalformedTimeString


@dataclass(slots=True, frozen=True)
class TimeOfDay:
    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def _now(now: float | None) -> float:
    return time.time() if now is None else float(now)


def parse_time_of_day(raw: str | None) -> TimeOfDay | None:
    """
    Strict "HH:MM" parse. Returns None instead of raising on bad input:
    wrong segment count, non-digits (signs and spaces included), or out of range.
    """
    if not isinstance(raw, str):
        return None
    parts = raw.split(":")
    if len(parts) != 2:
        return None
    hh, mm = parts
    if len(hh) != 2 or len(mm) != 2:
        return None
    if not (hh.isascii() and hh.isdigit() and mm.isascii() and mm.isdigit()):
        return None
    hour, minute = int(hh), int(mm)
    if hour > 23 or minute > 59:
        return None
    return TimeOfDay(hour, minute)


def require_time_of_day(raw: str | None) -> TimeOfDay:
    tod = parse_time_of_day(raw)
    if tod is None:
        raise MalformedTimeString(raw)
    return tod


def next_daily_occurrence(hour: int, minute: int, *, now: float | None = None) -> float:
    """Next epoch strictly after now at which the local clock reads hour:minute."""
    now_ts = _now(now)
    target = datetime.fromtimestamp(now_ts).replace(hour=hour, minute=minute, second=0, microsecond=0)
    # Equality counts as passed.
    if target.timestamp() <= now_ts:
        target += timedelta(days=1)
    return target.timestamp()


def next_occurrence_for_bucket(
    hour: int,
    minute: int,
    day_offset: int,
    *,
    now: float | None = None,
) -> float:
    """
    Fire time for a task at hour:minute on (today + day_offset).

    If that instant is already at or before now, push it by exactly one day,
    once. The result is not clamped: a single correction can still land in
    the past, and such an alarm simply fires on the next loop tick.
    """
    now_ts = _now(now)
    day = datetime.fromtimestamp(now_ts).date() + timedelta(days=int(day_offset))
    target = datetime.combine(day, dtime(hour=hour, minute=minute))
    if target.timestamp() <= now_ts:
        target += timedelta(days=1)
    return target.timestamp()

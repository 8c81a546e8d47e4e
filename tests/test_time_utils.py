# tests/test_time_utils.py

from __future__ import annotations

import pytest

from taskshift.errors import MalformedTimeString
from taskshift.tasks.time_utils import (
    TimeOfDay,
    next_daily_occurrence,
    next_occurrence_for_bucket,
    parse_time_of_day,
    require_time_of_day,
)

from .fakes import local_ts


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("00:00", (0, 0)), ("09:05", (9, 5)), ("18:00", (18, 0)), ("23:59", (23, 59))],
)
def test_parse_time_of_day_valid(raw: str, expected: tuple[int, int]) -> None:
    tod = parse_time_of_day(raw)
    assert tod == TimeOfDay(*expected)
    assert str(tod) == raw


@pytest.mark.parametrize(
    "raw",
    [None, "", "9:05", "12:5", "24:00", "12:60", "12:00:00", "1200", "ab:cd", "-1:00", " 12:00", "12:00 ", "+1:00", "１２:００"],
)
def test_parse_time_of_day_rejects_malformed(raw) -> None:
    assert parse_time_of_day(raw) is None


def test_require_time_of_day_raises() -> None:
    with pytest.raises(MalformedTimeString):
        require_time_of_day("25:00")
    assert require_time_of_day("07:30") == TimeOfDay(7, 30)


def test_next_daily_occurrence_later_today() -> None:
    now = local_ts(2026, 6, 10, 9, 0)
    assert next_daily_occurrence(21, 0, now=now) == local_ts(2026, 6, 10, 21, 0)


def test_next_daily_occurrence_equal_counts_as_passed() -> None:
    now = local_ts(2026, 6, 10, 21, 0)
    assert next_daily_occurrence(21, 0, now=now) == local_ts(2026, 6, 11, 21, 0)


def test_next_daily_occurrence_already_passed() -> None:
    now = local_ts(2026, 6, 10, 22, 30)
    assert next_daily_occurrence(21, 0, now=now) == local_ts(2026, 6, 11, 21, 0)


@pytest.mark.parametrize(("hour", "minute"), [(0, 0), (6, 15), (12, 0), (21, 0), (23, 59)])
def test_next_daily_occurrence_is_future_and_within_a_day(hour: int, minute: int) -> None:
    now = local_ts(2026, 6, 10, 12, 0)
    ts = next_daily_occurrence(hour, minute, now=now)
    assert now < ts <= now + 24 * 3600


def test_next_daily_occurrence_defaults_to_wall_clock() -> None:
    import time

    before = time.time()
    assert next_daily_occurrence(3, 0) > before


def test_bucket_occurrence_tomorrow() -> None:
    now = local_ts(2026, 6, 10, 10, 0)
    assert next_occurrence_for_bucket(18, 0, 1, now=now) == local_ts(2026, 6, 11, 18, 0)


def test_bucket_occurrence_today_future_and_past() -> None:
    now = local_ts(2026, 6, 10, 10, 0)
    assert next_occurrence_for_bucket(11, 30, 0, now=now) == local_ts(2026, 6, 10, 11, 30)
    # Already passed today: exactly one day later.
    assert next_occurrence_for_bucket(9, 0, 0, now=now) == local_ts(2026, 6, 11, 9, 0)
    assert next_occurrence_for_bucket(10, 0, 0, now=now) == local_ts(2026, 6, 11, 10, 0)


def test_bucket_occurrence_day_after() -> None:
    now = local_ts(2026, 6, 10, 23, 0)
    assert next_occurrence_for_bucket(7, 0, 2, now=now) == local_ts(2026, 6, 12, 7, 0)


def test_bucket_occurrence_crosses_month_end() -> None:
    now = local_ts(2026, 6, 30, 8, 0)
    assert next_occurrence_for_bucket(8, 0, 2, now=now) == local_ts(2026, 7, 2, 8, 0)

# tasks/rollover.py

from __future__ import annotations

import logging
from enum import StrEnum

from ..core.state import AppState
from .task_models import TaskBoard
from .task_scheduler import arm_daily_shift

logger = logging.getLogger(__name__)

SHIFT_ALERT_ID = "daily-shift"
SHIFT_ALERT_TITLE = "Daily Shift Done"
SHIFT_ALERT_BODY = "Tomorrow -> Today; Day After -> Tomorrow; Today's tasks cleared."


class RolloverState(StrEnum):
    IDLE = "idle"
    SHIFTING = "shifting"


def shift_board(board: TaskBoard) -> TaskBoard:
    """today <- tomorrow, tomorrow <- dayAfter, dayAfter <- []. Bucket order is kept."""
    return TaskBoard(
        today=list(board.tomorrow),
        tomorrow=list(board.day_after),
        day_after=[],
    )


class RolloverJob:
    """
    The daily bucket shift.

    The new board goes out in a single write. The confirmation alert and the
    next dailyShift alarm are issued from the write's completion callback, so a
    failed write leaves the alarm un-armed; the startup watchdog re-creates it.
    """

    def __init__(self, state: AppState) -> None:
        self._state = state
        self.status = RolloverState.IDLE

    def run(self) -> TaskBoard:
        st = self._state
        self.status = RolloverState.SHIFTING
        try:
            old = st.task_store.read()
            new = shift_board(old)
            logger.info(
                "Daily shift: dropping %d today task(s), promoting %d + %d",
                len(old.today),
                len(old.tomorrow),
                len(old.day_after),
            )
            st.task_store.write(new, on_complete=self._on_written)
            return new
        except Exception:
            logger.exception("Daily shift failed; dailyShift alarm not re-armed")
            raise
        finally:
            self.status = RolloverState.IDLE

    def _on_written(self, _board: TaskBoard) -> None:
        st = self._state
        try:
            st.alerts.show(SHIFT_ALERT_ID, SHIFT_ALERT_TITLE, SHIFT_ALERT_BODY)
        except Exception:
            logger.exception("Failed to show daily shift alert")
        arm_daily_shift(st.alarms, st.settings)

# src/taskshift/tasks/task_api.py

"""
UI-facing mutations.

Every call is read -> in-memory change -> one wholesale write. Alarm
reconciliation is not called here: it follows from the store's change
listeners, same as for writes coming from any other process.
"""

from __future__ import annotations

import logging

from ..core.state import AppState
from .task_models import Bucket, Task, TaskBoard, new_task_id
from .time_utils import require_time_of_day

logger = logging.getLogger(__name__)

EDITABLE_BUCKETS = (Bucket.TOMORROW, Bucket.DAY_AFTER)


def _normalize_time(time_str: str | None) -> str | None:
    """Empty means "no time"; anything else must be strict HH:MM."""
    if time_str is None or not time_str.strip():
        return None
    return str(require_time_of_day(time_str.strip()))


def list_board(state: AppState) -> TaskBoard:
    return state.task_store.read()


def add_task(state: AppState, bucket: Bucket, text: str, time_str: str | None = None) -> Task | None:
    """Append a task to bucket. Blank text is ignored (returns None, nothing written)."""
    if not text or not text.strip():
        return None
    task = Task(id=new_task_id(), text=text.strip(), time=_normalize_time(time_str))

    board = state.task_store.read()
    board.bucket(bucket).append(task)
    state.task_store.write(board)
    logger.info("Task added id=%s bucket=%s time=%s", task.id, bucket.value, task.time)
    return task


def remove_task(state: AppState, task_id: str) -> bool:
    board = state.task_store.read()
    removed = False
    for b, tasks in board.iter_buckets():
        kept = [t for t in tasks if t.id != task_id]
        if len(kept) != len(tasks):
            removed = True
            board.set_bucket(b, kept)
    if not removed:
        return False
    state.task_store.write(board)
    logger.info("Task removed id=%s", task_id)
    return True


def edit_task(state: AppState, task_id: str, new_text: str, new_time: str | None) -> bool:
    """
    Change text and time of a tomorrow/dayAfter task.
    Today's tasks are not editable; returns False for them and for unknown ids.
    """
    if not new_text or not new_text.strip():
        raise ValueError("task text must not be empty")
    time_val = _normalize_time(new_time)

    board = state.task_store.read()
    found = board.find(task_id)
    if found is None or found[0] not in EDITABLE_BUCKETS:
        return False

    bucket, _task = found
    board.set_bucket(
        bucket,
        [Task(id=t.id, text=new_text.strip(), time=time_val) if t.id == task_id else t for t in board.bucket(bucket)],
    )
    state.task_store.write(board)
    logger.info("Task edited id=%s bucket=%s time=%s", task_id, bucket.value, time_val)
    return True


def clear_bucket(state: AppState, bucket: Bucket) -> int:
    board = state.task_store.read()
    n = len(board.bucket(bucket))
    board.set_bucket(bucket, [])
    state.task_store.write(board)
    logger.info("Bucket cleared bucket=%s removed=%d", bucket.value, n)
    return n


def reset_all(state: AppState) -> None:
    state.task_store.write(TaskBoard())
    logger.info("Board reset to defaults")

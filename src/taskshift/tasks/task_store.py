# tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.ports import KeyValueStore
from .task_models import TaskBoard

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"

BoardListener = Callable[[TaskBoard], None]


class TaskStore:
    """
    Facade over the key/value store: one document under TASKS_KEY.

    Reads return a fresh TaskBoard each time; writes replace the whole document
    (no field-level updates), so concurrent writers can lose a race but never
    produce a half-merged board.
    """

    def __init__(self, kv: KeyValueStore, *, key: str = TASKS_KEY) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def is_initialized(self) -> bool:
        return self._kv.get(self._key) is not None

    def read(self) -> TaskBoard:
        return TaskBoard.from_dict(self._kv.get(self._key))

    def write(
        self,
        board: TaskBoard,
        *,
        on_complete: Callable[[TaskBoard], None] | None = None,
    ) -> None:
        snapshot = board.copy()

        def _done(_value: Any) -> None:
            if on_complete is not None:
                on_complete(snapshot)

        self._kv.set(self._key, snapshot.to_dict(), on_complete=_done)
        logger.debug(
            "Board written today=%d tomorrow=%d dayAfter=%d",
            len(snapshot.today),
            len(snapshot.tomorrow),
            len(snapshot.day_after),
        )

    def subscribe(self, listener: BoardListener) -> None:
        def _on_change(value: Any) -> None:
            listener(TaskBoard.from_dict(value))

        self._kv.on_change(self._key, _on_change)

# tasks/task_models.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class Bucket(StrEnum):
    """
    Day-relative task lists.

    Values are the keys of the persisted document, so they must not change.
    """

    TODAY = "today"
    TOMORROW = "tomorrow"
    DAY_AFTER = "dayAfter"

    @property
    def day_offset(self) -> int:
        return _DAY_OFFSETS[self]

    @classmethod
    def parse(cls, raw: str) -> Bucket:
        """Accept wire names plus a few console-friendly spellings."""
        key = (raw or "").strip()
        try:
            return cls(key)
        except ValueError:
            pass
        alias = _ALIASES.get(key.lower().replace("-", "").replace("_", ""))
        if alias is None:
            raise ValueError(f"Unknown bucket: {raw!r}")
        return alias


_DAY_OFFSETS = {Bucket.TODAY: 0, Bucket.TOMORROW: 1, Bucket.DAY_AFTER: 2}
_ALIASES = {
    "today": Bucket.TODAY,
    "tomorrow": Bucket.TOMORROW,
    "dayafter": Bucket.DAY_AFTER,
    "after": Bucket.DAY_AFTER,
}


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "time": self.time}

    @classmethod
    def from_dict(cls, raw: Any) -> Task | None:
        """Lenient decode; returns None for entries that cannot be a task."""
        if not isinstance(raw, dict):
            return None
        task_id = raw.get("id")
        text = raw.get("text")
        if not isinstance(task_id, str) or not task_id:
            return None
        if not isinstance(text, str) or not text.strip():
            return None
        time_raw = raw.get("time")
        time_val = time_raw if isinstance(time_raw, str) and time_raw.strip() else None
        return cls(id=task_id, text=text, time=time_val)


@dataclass(slots=True)
class TaskBoard:
    """
    The whole persisted document: three ordered buckets.

    Invariant: a task id appears in at most one bucket.
    """

    today: list[Task] = field(default_factory=list)
    tomorrow: list[Task] = field(default_factory=list)
    day_after: list[Task] = field(default_factory=list)

    def bucket(self, bucket: Bucket) -> list[Task]:
        if bucket is Bucket.TODAY:
            return self.today
        if bucket is Bucket.TOMORROW:
            return self.tomorrow
        return self.day_after

    def set_bucket(self, bucket: Bucket, tasks: list[Task]) -> None:
        if bucket is Bucket.TODAY:
            self.today = tasks
        elif bucket is Bucket.TOMORROW:
            self.tomorrow = tasks
        else:
            self.day_after = tasks

    def iter_buckets(self):
        """Yield (bucket, tasks) in day-offset order."""
        for b in Bucket:
            yield b, self.bucket(b)

    def find(self, task_id: str) -> tuple[Bucket, Task] | None:
        for b, tasks in self.iter_buckets():
            for t in tasks:
                if t.id == task_id:
                    return b, t
        return None

    def copy(self) -> TaskBoard:
        return TaskBoard(
            today=list(self.today),
            tomorrow=list(self.tomorrow),
            day_after=list(self.day_after),
        )

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {b.value: [t.to_dict() for t in tasks] for b, tasks in self.iter_buckets()}

    @classmethod
    def from_dict(cls, raw: Any) -> TaskBoard:
        board = cls()
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Task document is not an object (%s); using empty board", type(raw).__name__)
            return board

        for b in Bucket:
            items = raw.get(b.value) or []
            if not isinstance(items, list):
                logger.warning("Bucket %s is not a list; treating as empty", b.value)
                continue
            tasks: list[Task] = []
            for item in items:
                task = Task.from_dict(item)
                if task is None:
                    logger.warning("Dropping malformed task entry in %s: %r", b.value, item)
                    continue
                tasks.append(task)
            board.set_bucket(b, tasks)
        return board

# src/taskshift/errors.py

from __future__ import annotations


class TaskshiftError(Exception):
    """Base class for errors raised by the reminder engine."""


class MalformedTimeString(TaskshiftError, ValueError):
    """A task time is not a strict "HH:MM" wall-clock string."""

    def __init__(self, raw: object) -> None:
        super().__init__(f"Malformed time string: {raw!r} (expected HH:MM)")
        self.raw = raw


class PersistenceIOError(TaskshiftError, OSError):
    """The underlying store could not be read or written."""

# src/taskshift/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps persistence/timers/alert delivery swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Any, Protocol

ChangeListener = Callable[[Any], None]
# Receives the new value stored under the watched key.

CompletionCallback = Callable[[Any], None]


class KeyValueStore(Protocol):
    """
    Durable document store.

    Ordering: for a single set(), on_complete runs before any change listener
    observes the new value.
    """

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, *, on_complete: CompletionCallback | None = None) -> None: ...

    def on_change(self, key: str, listener: ChangeListener) -> None: ...

    def poll_changes(self) -> int: ...


class TimerService(Protocol):
    """
    Host timer facility, keyed by alarm name.

    upsert replaces any alarm with the same name; cancelling an unknown name is a no-op.
    """

    def upsert(self, name: str, spec: Any) -> None: ...
    def cancel(self, name: str) -> None: ...
    def cancel_prefix(self, prefix: str) -> int: ...
    def get(self, name: str) -> Any | None: ...
    def list_all(self) -> list[Any]: ...
    def pop_due(self, now_ts: float) -> list[str]: ...


class AlertSink(Protocol):
    """Fire-and-forget user-visible alert. Reusing alert_id replaces a pending alert."""

    def show(self, alert_id: str, title: str, body: str) -> None: ...

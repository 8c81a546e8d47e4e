# src/taskshift/core/state.py

from __future__ import annotations

"""
AppState: the process context.

Built once at startup by the composition root (cli/bootstrap.py) and passed
explicitly to the scheduler, rollover job and dispatcher. Holds the
persistence, timer and alert collaborators plus the lock that serialises
event handlers.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_store import TaskStore
from .ports import AlertSink, TimerService


@dataclass
class AppState:
    settings: Any

    task_store: TaskStore
    alarms: TimerService
    alerts: AlertSink

    # One handler at a time: alarm fires, console commands and external-change polls.
    lock: threading.RLock = field(default_factory=threading.RLock)

# src/taskshift/connectors/console_alerts.py

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

logger = logging.getLogger(__name__)

MAX_PENDING_ALERTS = 32


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleAlertSink:
    """
    AlertSink that prints alerts to the terminal and logs them.

    The last body per alert id is remembered, so a re-shown id replaces the
    pending one instead of stacking up. Only the most recent
    MAX_PENDING_ALERTS ids are kept; every task reminder has its own id.
    """

    def __init__(self, stream: TextIO | None = None, max_pending: int = MAX_PENDING_ALERTS) -> None:
        self._stream = stream
        self._max_pending = max(1, int(max_pending))
        self.pending: dict[str, tuple[str, str]] = {}

    def _remember(self, alert_id: str, title: str, body: str) -> None:
        # Re-insert so dict order stays oldest-first.
        self.pending.pop(alert_id, None)
        self.pending[alert_id] = (title, body)
        while len(self.pending) > self._max_pending:
            del self.pending[next(iter(self.pending))]

    def show(self, alert_id: str, title: str, body: str) -> None:
        self._remember(alert_id, title, body)
        logger.debug("Alert id=%s title=%s", alert_id, title)

        out = self._stream or sys.stdout
        try:
            out.write(f"\n[{_ts_local()}] [{title}]\n")
            for line in body.splitlines() or [""]:
                out.write(f"  {line}\n")
            out.flush()
        except Exception:
            logger.debug("Console alert write failed.", exc_info=True)

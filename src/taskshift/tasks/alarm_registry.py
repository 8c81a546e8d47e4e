# tasks/alarm_registry.py

from __future__ import annotations

import contextlib
import logging
import math
import sqlite3
import time
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from ..errors import PersistenceIOError

logger = logging.getLogger(__name__)


class FireKind(StrEnum):
    ONCE = "once"
    PERIODIC = "periodic"


@dataclass(slots=True, frozen=True)
class FireSpec:
    """
    When an alarm fires.

    - ONCE: at `at` (epoch seconds), then the alarm is gone.
    - PERIODIC: first at `at`, then every `period_minutes`.
    """

    kind: FireKind
    at: float
    period_minutes: float | None = None

    @classmethod
    def once(cls, at: float) -> FireSpec:
        return cls(kind=FireKind.ONCE, at=float(at))

    @classmethod
    def periodic(cls, period_minutes: float, *, now: float | None = None) -> FireSpec:
        period = float(period_minutes)
        if period <= 0:
            raise ValueError("period_minutes must be positive")
        start = time.time() if now is None else float(now)
        return cls(kind=FireKind.PERIODIC, at=start + period * 60.0, period_minutes=period)


@dataclass(slots=True, frozen=True)
class AlarmEntry:
    name: str
    spec: FireSpec


class SqliteAlarmRegistry:
    """
    Durable alarm registry.

    Alarms are rows, not in-memory timers, so they survive the process being
    stopped. A polling loop (see alarm_loop.run_alarm_loop) calls pop_due()
    to collect alarms whose time has come.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "alarms.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceIOError(f"Cannot create alarm directory for {self._db_path}: {e}") from e
        self._ensure_schema()
        logger.info("AlarmRegistry ready db=%s alarms=%s", self._db_path, len(self.list_all()))

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceIOError(f"Cannot open alarm registry {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            raise PersistenceIOError(f"Alarm registry I/O failed on {self._db_path}: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS alarms (
                    name TEXT PRIMARY KEY,
                    kind TEXT NOT NULL,
                    at REAL NOT NULL,
                    period_minutes REAL,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_alarms_at ON alarms(at)")
            conn.commit()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> AlarmEntry:
        kind = FireKind(row["kind"])
        period = row["period_minutes"]
        return AlarmEntry(
            name=str(row["name"]),
            spec=FireSpec(
                kind=kind,
                at=float(row["at"]),
                period_minutes=float(period) if period is not None else None,
            ),
        )

    # ---- public API ----

    def upsert(self, name: str, spec: FireSpec) -> None:
        if not name:
            raise ValueError("alarm name is required")
        if spec.kind is FireKind.PERIODIC and not spec.period_minutes:
            raise ValueError("periodic alarm needs period_minutes")

        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO alarms(name, kind, at, period_minutes, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    kind = excluded.kind,
                    at = excluded.at,
                    period_minutes = excluded.period_minutes,
                    created_at = excluded.created_at
                """,
                (name, spec.kind.value, float(spec.at), spec.period_minutes, time.time()),
            )
            conn.commit()
        logger.debug("Alarm upserted name=%s kind=%s at=%s", name, spec.kind.value, spec.at)

    def cancel(self, name: str) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM alarms WHERE name = ?", (name,))
            conn.commit()

    def cancel_prefix(self, prefix: str) -> int:
        """Cancel every alarm whose name starts with prefix. Returns how many were removed."""
        names = [e.name for e in self.list_all() if e.name.startswith(prefix)]
        if not names:
            return 0
        with self._conn() as conn:
            conn.executemany("DELETE FROM alarms WHERE name = ?", [(n,) for n in names])
            conn.commit()
        return len(names)

    def get(self, name: str) -> AlarmEntry | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM alarms WHERE name = ?", (name,)).fetchone()
        return self._row_to_entry(row) if row else None

    def list_all(self) -> list[AlarmEntry]:
        with self._conn() as conn:
            rows = conn.execute("SELECT * FROM alarms ORDER BY at ASC, name ASC").fetchall()
        return [self._row_to_entry(r) for r in rows]

    def pop_due(self, now_ts: float) -> list[str]:
        """
        Collect alarms with at <= now_ts, in fire-time order.

        One-shot alarms are deleted. Periodic alarms move to the first period
        boundary after now_ts, so a long suspension yields a single fire rather
        than a burst of missed ones.
        """
        now_ts = float(now_ts)
        fired: list[str] = []
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM alarms WHERE at <= ? ORDER BY at ASC, name ASC",
                (now_ts,),
            ).fetchall()
            for row in rows:
                entry = self._row_to_entry(row)
                fired.append(entry.name)
                if entry.spec.kind is FireKind.PERIODIC and entry.spec.period_minutes:
                    period_s = entry.spec.period_minutes * 60.0
                    skipped = math.floor((now_ts - entry.spec.at) / period_s) + 1
                    next_at = entry.spec.at + skipped * period_s
                    conn.execute("UPDATE alarms SET at = ? WHERE name = ?", (next_at, entry.name))
                else:
                    conn.execute("DELETE FROM alarms WHERE name = ?", (entry.name,))
            conn.commit()
        if fired:
            logger.debug("Alarms due: %s", fired)
        return fired

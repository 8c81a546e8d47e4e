# storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..core.ports import ChangeListener, CompletionCallback
from ..errors import PersistenceIOError

logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """
    SQLite key/value store holding JSON documents.

    Each key carries a revision counter. Writes from this process notify the
    in-memory listeners directly; writes from other processes are picked up by
    poll_changes(), which compares stored revisions with the last ones seen here.

    Listeners are not persisted: every process start must register them again.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "store.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._listeners: dict[str, list[ChangeListener]] = {}
        self._seen_revisions: dict[str, int] = {}
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceIOError(f"Cannot create store directory for {self._db_path}: {e}") from e
        self._ensure_schema()
        self._seen_revisions = self._read_revisions()
        logger.info("KeyValueStore ready db=%s keys=%s", self._db_path, len(self._seen_revisions))

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
            raise PersistenceIOError(f"Cannot open store {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            raise PersistenceIOError(f"Store I/O failed on {self._db_path}: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    revision INTEGER NOT NULL DEFAULT 1,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()

    def _read_revisions(self) -> dict[str, int]:
        with self._conn() as conn:
            rows = conn.execute("SELECT key, revision FROM kv").fetchall()
        return {str(r["key"]): int(r["revision"]) for r in rows}

    @staticmethod
    def _decode(raw: str | None, key: str) -> Any | None:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored value for key=%s is not valid JSON; treating as absent", key)
            return None

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners.get(key, ())):
            try:
                listener(value)
            except Exception:
                logger.exception("Change listener failed key=%s", key)

    # ---- public API ----

    def has(self, key: str) -> bool:
        with self._conn() as conn:
            row = conn.execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone()
        return row is not None

    def get(self, key: str) -> Any | None:
        with self._conn() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return self._decode(row["value"] if row else None, key)

    def set(self, key: str, value: Any, *, on_complete: CompletionCallback | None = None) -> None:
        """
        Replace the value under key.

        After commit: on_complete(value) runs first, then change listeners.
        Persistence failures raise PersistenceIOError and call neither.
        """
        payload = json.dumps(value, ensure_ascii=False)
        now = time.time()
        with self._conn() as conn:
            # The revision must be the one this write produced, not a later one
            # from another process; read it inside the same transaction.
            row = conn.execute(
                """
                INSERT INTO kv(key, value, revision, updated_at)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    revision = kv.revision + 1,
                    updated_at = excluded.updated_at
                RETURNING revision
                """,
                (key, payload, now),
            ).fetchone()
            conn.commit()

        revision = int(row["revision"])
        self._seen_revisions[key] = revision
        logger.debug("KV set key=%s revision=%s", key, revision)

        # The value is committed; listeners must hear about it even if the callback fails.
        try:
            if on_complete is not None:
                on_complete(value)
        finally:
            self._notify(key, value)

    def on_change(self, key: str, listener: ChangeListener) -> None:
        self._listeners.setdefault(key, []).append(listener)

    def poll_changes(self) -> int:
        """
        Notify listeners about keys written by other processes since the last look.
        Returns the number of keys that changed.
        """
        current = self._read_revisions()
        changed = [k for k, rev in current.items() if self._seen_revisions.get(k) != rev]
        for key in changed:
            self._seen_revisions[key] = current[key]
            logger.info("External change detected key=%s revision=%s", key, current[key])
            self._notify(key, self.get(key))
        return len(changed)

# src/taskflow/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.ports import StorageInfo, TaskRecord

logger = logging.getLogger(__name__)

DEFAULT_KEY = "taskflow_tasks"
_PROBE_KEY = "__storage_test__"


class SqliteKeyValueStore:
    """
    SQLite key-value store holding the whole task list as one JSON value.

    Contract (see core.ports.TaskStorage):
    - no method raises; failures are logged and reported via return values
    - save() writes the complete list in a single transaction
    - quota_bytes > 0 rejects values whose UTF-8 size exceeds it

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        key: str = DEFAULT_KEY,
        quota_bytes: int = 0,
    ) -> None:
        self._db_path = Path(db_path)
        self._key = key
        self._quota_bytes = max(0, int(quota_bytes))
        self._ready = False
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
            self._ready = True
        except (OSError, sqlite3.Error):
            logger.exception("KeyValueStore unusable db=%s", self._db_path)
            return
        logger.info("KeyValueStore ready db=%s key=%s", self._db_path, self._key)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_raw(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def _write_raw(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def _delete_raw(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load(self) -> list[TaskRecord]:
        if not self._ready:
            return []
        try:
            raw = self._read_raw(self._key)
        except sqlite3.Error:
            logger.exception("Failed to read tasks from %s", self._db_path)
            return []
        if not raw:
            return []

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Stored tasks are not valid JSON; starting empty.")
            return []
        if not isinstance(data, list):
            logger.warning("Stored tasks is not a list (%s); starting empty.", type(data).__name__)
            return []
        return data

    def save(self, records: list[TaskRecord]) -> bool:
        if not self._ready:
            return False
        if not isinstance(records, list):
            logger.error("save() requires a list, got %s", type(records).__name__)
            return False

        try:
            payload = json.dumps(records, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode %d task records.", len(records))
            return False

        size = len(payload.encode("utf-8"))
        if self._quota_bytes and size > self._quota_bytes:
            logger.error(
                "Storage quota exceeded: %d bytes > %d bytes; delete some tasks.",
                size,
                self._quota_bytes,
            )
            return False

        try:
            self._write_raw(self._key, payload)
        except sqlite3.Error:
            logger.exception("Failed to save %d tasks to %s", len(records), self._db_path)
            return False
        logger.debug("Saved %d tasks (%d bytes)", len(records), size)
        return True

    def clear(self) -> bool:
        if not self._ready:
            return False
        try:
            self._delete_raw(self._key)
        except sqlite3.Error:
            logger.exception("Failed to clear tasks in %s", self._db_path)
            return False
        return True

    def is_available(self) -> bool:
        """Round-trip a probe key to check that the store can be written."""
        if not self._ready:
            return False
        try:
            self._write_raw(_PROBE_KEY, _PROBE_KEY)
            self._delete_raw(_PROBE_KEY)
        except sqlite3.Error:
            logger.debug("Storage probe failed db=%s", self._db_path, exc_info=True)
            return False
        return True

    def storage_info(self) -> StorageInfo:
        try:
            raw = self._read_raw(self._key) if self._ready else None
        except sqlite3.Error:
            logger.debug("storage_info read failed", exc_info=True)
            return StorageInfo(used_bytes=0, used_kb="0", task_count=0)

        used = len((raw or "").encode("utf-8"))
        return StorageInfo(
            used_bytes=used,
            used_kb=f"{used / 1024:.2f}",
            task_count=len(self.load()),
        )

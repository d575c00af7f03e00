"""SQLite-backed registry of active timers and their history log.

Every process that touches timers opens its own ``RegistryStore`` on the same
database file. Each mutation is one committed transaction, so other processes
see a row either completely or not at all.
"""

from __future__ import annotations

import datetime as dt
import logging
import sqlite3
from pathlib import Path
from typing import Optional

from .errors import RecordNotFound, RegistryError, StoreUnavailable
from .models import (
    ActiveTimerRecord,
    HistoryEntry,
    from_storage_time,
    to_storage_time,
    utc_now,
)

DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS active_timers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    pid INTEGER NOT NULL,
    started TEXT NOT NULL,
    duration TEXT NOT NULL,
    message TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS timer_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    duration TEXT NOT NULL,
    message TEXT NOT NULL,
    fg INTEGER NOT NULL
);
"""


class RegistryStore:
    """Process-safe access to the ``active_timers`` and ``timer_history`` tables."""

    def __init__(
        self,
        path: str | Path,
        *,
        busy_timeout_seconds: float = DEFAULT_BUSY_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path).expanduser()
        self._busy_timeout_seconds = busy_timeout_seconds
        self._logger = logger or logging.getLogger("registry")
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> Path:
        return self._path

    def __enter__(self) -> "RegistryStore":
        self._connection()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def insert(
        self,
        duration_spec: str,
        message: str,
        pid: int,
        *,
        started_at: Optional[dt.datetime] = None,
    ) -> int:
        started = to_storage_time(started_at or utc_now())
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "INSERT INTO active_timers (pid, started, duration, message) "
                    "VALUES (?, ?, ?, ?)",
                    (int(pid), started, duration_spec, message),
                )
        except sqlite3.Error as error:
            self._logger.error("Failed to register timer (pid=%s): %s", pid, error)
            raise RegistryError(f"Failed to register timer: {error}") from error

        record_id = int(cursor.lastrowid)
        self._logger.info(
            "Registered timer %d: pid=%s duration=%s", record_id, pid, duration_spec
        )
        return record_id

    def remove(self, record_id: int) -> bool:
        """Delete the record if it exists; a missing id is not an error."""
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM active_timers WHERE id = ?", (int(record_id),)
                )
        except sqlite3.Error as error:
            self._logger.error("Failed to remove timer %s: %s", record_id, error)
            raise RegistryError(f"Failed to remove timer {record_id}: {error}") from error

        removed = cursor.rowcount > 0
        if removed:
            self._logger.info("Removed timer %s", record_id)
        else:
            self._logger.debug("Timer %s already removed", record_id)
        return removed

    def get(self, record_id: int) -> Optional[ActiveTimerRecord]:
        rows = self._query(
            "SELECT id, pid, started, duration, message FROM active_timers "
            "WHERE id = ?",
            (int(record_id),),
        )
        if not rows:
            return None
        return _record_from_row(rows[0])

    def require(self, record_id: int) -> ActiveTimerRecord:
        record = self.get(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def list_active(self) -> list[ActiveTimerRecord]:
        rows = self._query(
            "SELECT id, pid, started, duration, message FROM active_timers "
            "ORDER BY id ASC"
        )
        return [_record_from_row(row) for row in rows]

    def append_history(
        self,
        duration_spec: str,
        message: str,
        foreground: bool,
        *,
        timestamp: Optional[dt.datetime] = None,
    ) -> HistoryEntry:
        when = timestamp or utc_now()
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "INSERT INTO timer_history (timestamp, duration, message, fg) "
                    "VALUES (?, ?, ?, ?)",
                    (to_storage_time(when), duration_spec, message, int(bool(foreground))),
                )
        except sqlite3.Error as error:
            self._logger.error("Failed to append timer history: %s", error)
            raise RegistryError(f"Failed to append timer history: {error}") from error

        return HistoryEntry(
            id=int(cursor.lastrowid),
            timestamp=from_storage_time(to_storage_time(when)),
            duration_spec=duration_spec,
            message=message,
            foreground=bool(foreground),
        )

    def list_history(self, limit: int) -> list[HistoryEntry]:
        """Return the ``limit`` most recent entries, newest first."""
        if limit <= 0:
            return []
        rows = self._query(
            "SELECT id, timestamp, duration, message, fg FROM timer_history "
            "ORDER BY id DESC LIMIT ?",
            (int(limit),),
        )
        return [
            HistoryEntry(
                id=int(row["id"]),
                timestamp=from_storage_time(row["timestamp"]),
                duration_spec=row["duration"],
                message=row["message"],
                foreground=bool(row["fg"]),
            )
            for row in rows
        ]

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        conn = self._connection()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as error:
            self._logger.error("Registry query failed: %s", error)
            raise RegistryError(f"Registry query failed: {error}") from error

    def _connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(self._path),
                timeout=self._busy_timeout_seconds,
                check_same_thread=False,
            )
        except (OSError, sqlite3.Error) as error:
            raise StoreUnavailable(
                f"Cannot open timer registry at {self._path}: {error}"
            ) from error

        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
            conn.commit()
        except sqlite3.Error as error:
            conn.close()
            raise StoreUnavailable(
                f"Cannot initialize timer registry at {self._path}: {error}"
            ) from error

        self._logger.debug("Opened timer registry: %s", self._path)
        self._conn = conn
        return conn


def _record_from_row(row: sqlite3.Row) -> ActiveTimerRecord:
    return ActiveTimerRecord(
        id=int(row["id"]),
        pid=int(row["pid"]),
        started_at=from_storage_time(row["started"]),
        duration_spec=row["duration"],
        message=row["message"],
    )

"""SQLite activity log adapter.

Implements the core ActivitySinkPort using a simple SQLite database so the
dashboard can browse and export past routing decisions.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.models import ActivityLogEntry


class SQLiteActivityStore:
    """Thin SQLite wrapper that persists activity log entries."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the activity table if it does not exist."""

        with self._connect() as conn:
            # activity is an append-only log of routing decisions.
            # Fields:
            # - id: auto-increment primary key (global append order)
            # - entry_id: in-process sequence id of the ActivityLog entry
            # - kind: incoming / outgoing / info
            # - text: rendered log line
            # - timestamp: when the entry was appended (UTC, ISO-8601)
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS activity (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_id INTEGER NOT NULL,
                    kind TEXT NOT NULL,
                    text TEXT NOT NULL,
                    timestamp TIMESTAMP NOT NULL
                )
                """
            )

    def append(self, entry: ActivityLogEntry) -> None:
        """Persist one entry."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO activity (entry_id, kind, text, timestamp)
                VALUES (?, ?, ?, ?)
                """,
                (entry.id, entry.kind, entry.text, entry.timestamp.isoformat()),
            )

    def list_entries(self, limit: Optional[int] = None) -> list[dict]:
        """Return stored entries, newest first."""

        query = "SELECT id, entry_id, kind, text, timestamp FROM activity ORDER BY id DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def cleanup(self, ttl_days: int) -> int:
        """Delete entries older than ``ttl_days`` and return the number removed."""

        cutoff = datetime.now(timezone.utc) - timedelta(days=ttl_days)
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM activity WHERE timestamp < ?",
                (cutoff.isoformat(),),
            )
            return cur.rowcount

#!/usr/bin/env python3
"""
Durable Breaker Store — SQLite-backed record storage

One row per breaker name, keyed by a PRIMARY KEY so concurrent
find_or_create calls (threads or processes sharing the file) can
never produce two rows for the same breaker.

Implements:
- get(name) -> BreakerRecord | None
- set(name, record) -> BreakerRecord
- destroy(name)
- find_or_create(name, config) -> BreakerRecord
"""

import json
import logging
import os
import sqlite3
import threading
import time
from typing import Optional

from breaker.errors import StoreError
from breaker.models import BreakerConfig, BreakerRecord

logger = logging.getLogger(__name__)

# Default DB location
DEFAULT_DB_DIR = os.path.expanduser("~/.breaker")
DEFAULT_DB_PATH = os.path.join(DEFAULT_DB_DIR, "breakers.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS breaker_records (
    name TEXT PRIMARY KEY,
    consecutive_faults INTEGER NOT NULL DEFAULT 0,
    fault_count INTEGER NOT NULL DEFAULT 0,
    fault_timestamp REAL NOT NULL DEFAULT 0,
    tripped INTEGER NOT NULL DEFAULT 0,   -- 1=open, 0=closed
    trip_timestamp REAL NOT NULL DEFAULT 0,
    config TEXT NOT NULL DEFAULT '{}',    -- JSON BreakerConfig snapshot
    updated_at REAL NOT NULL
);
"""


class SQLiteStore:
    """
    Persistent record store for breakers.

    Survives process restarts, so fault history and trips carry over
    between runs. sqlite3.Error is always re-raised as StoreError.
    """

    def __init__(self, db_path: str = None):
        self.db_path = db_path or os.environ.get("BREAKER_DB_PATH", DEFAULT_DB_PATH)

        db_dir = os.path.dirname(self.db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=10.0)
            self._conn.row_factory = sqlite3.Row
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to open breaker store at {self.db_path}: {e}") from e

        logger.info("SQLiteStore initialized (db=%s)", self.db_path)

    def close(self):
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def get(self, name: str) -> Optional[BreakerRecord]:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT * FROM breaker_records WHERE name = ?", (name,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read breaker {name}: {e}") from e
        return self._row_to_record(row) if row else None

    def set(self, name: str, record: BreakerRecord) -> BreakerRecord:
        try:
            with self._lock:
                self._conn.execute(
                    """INSERT INTO breaker_records
                       (name, consecutive_faults, fault_count, fault_timestamp,
                        tripped, trip_timestamp, config, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(name) DO UPDATE SET
                           consecutive_faults = excluded.consecutive_faults,
                           fault_count = excluded.fault_count,
                           fault_timestamp = excluded.fault_timestamp,
                           tripped = excluded.tripped,
                           trip_timestamp = excluded.trip_timestamp,
                           config = excluded.config,
                           updated_at = excluded.updated_at""",
                    (
                        name,
                        record.consecutive_faults,
                        record.fault_count,
                        record.fault_timestamp,
                        1 if record.tripped else 0,
                        record.trip_timestamp,
                        json.dumps(record.config.to_dict()),
                        time.time(),
                    ),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write breaker {name}: {e}") from e
        return self.get(name)

    def destroy(self, name: str) -> None:
        try:
            with self._lock:
                self._conn.execute("DELETE FROM breaker_records WHERE name = ?", (name,))
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete breaker {name}: {e}") from e

    def find_or_create(self, name: str, config: BreakerConfig) -> BreakerRecord:
        try:
            with self._lock:
                cursor = self._conn.execute(
                    """INSERT INTO breaker_records (name, config, updated_at)
                       VALUES (?, ?, ?)
                       ON CONFLICT(name) DO NOTHING""",
                    (name, json.dumps(config.to_dict()), time.time()),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to provision breaker {name}: {e}") from e

        if cursor.rowcount:
            logger.debug("Created breaker record %s", name)
        return self.get(name)

    def _row_to_record(self, row: sqlite3.Row) -> BreakerRecord:
        return BreakerRecord.from_dict({
            "name": row["name"],
            "consecutive_faults": row["consecutive_faults"],
            "fault_count": row["fault_count"],
            "fault_timestamp": row["fault_timestamp"],
            "tripped": bool(row["tripped"]),
            "trip_timestamp": row["trip_timestamp"],
            "config": json.loads(row["config"] or "{}"),
        })

"""SQLite connection shared by the indexer thread and request handlers."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_PRAGMAS = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("temp_store", "MEMORY"),
    ("busy_timeout", "5000"),
)


class SQLiteDatabase:
    """One lazily opened connection guarded by a re-entrant lock.

    Rows come back as :class:`sqlite3.Row`. ``transaction`` holds the lock
    for the whole unit of work, commits on success and rolls back on any
    exception.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path).expanduser()
        self.lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        with self.lock:
            if self._conn is None:
                self._conn = self._open()
            return self._conn

    def _open(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        for name, value in _PRAGMAS:
            conn.execute(f"PRAGMA {name}={value}")
        return conn

    def close(self) -> None:
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def commit(self) -> None:
        with self.lock:
            if self._conn is not None:
                self._conn.commit()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self.lock:
            return self.connection.execute(sql, params)

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self.lock:
            return self.connection.execute(sql, params).fetchall()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        with self.lock:
            conn = self.connection
            cursor = conn.cursor()
            try:
                yield cursor
            except Exception:
                conn.rollback()
                raise
            else:
                conn.commit()
            finally:
                cursor.close()

    def ensure_schema(self) -> None:
        with self.lock:
            self.connection.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))


__all__ = ["SQLiteDatabase", "SCHEMA_PATH"]

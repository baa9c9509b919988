# src/daily_board/tasks/db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..errors import StorageError

logger = logging.getLogger(__name__)


class SQLiteStore:
    """
    Shared plumbing for the SQLite-backed stores.

    Thread-safety:
    - each method opens its own SQLite connection (no shared cursors)
    - connections run in autocommit mode; writes are grouped explicitly with
      BEGIN IMMEDIATE so concurrent writers serialize on the database lock
      instead of interleaving read-then-write steps
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0, isolation_level=None)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        One atomic write unit: BEGIN IMMEDIATE ... COMMIT.

        Any exception rolls the whole unit back. Raw sqlite3 errors surface
        as StorageError; board errors raised inside the block pass through.
        """
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Database write failed: {e}") from e
        finally:
            conn.close()

    @contextlib.contextmanager
    def writing(self, conn: sqlite3.Connection | None) -> Iterator[sqlite3.Connection]:
        """Join the caller's transaction if one is given, else open a new one."""
        if conn is not None:
            yield conn
            return
        with self.transaction() as own:
            yield own

    @contextlib.contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Database read failed: {e}") from e
        finally:
            conn.close()

    def _ensure_table(self, create_sql: str, *, table: str, columns: dict[str, str]) -> None:
        """
        Create table if missing, then add any missing columns (migration-safe).
        """
        with self.transaction() as conn:
            conn.execute(create_sql)
            cols = {row["name"] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()}
            for name, decl in columns.items():
                if name in cols:
                    continue
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                logger.info("%s migration: added column %s", table, name)

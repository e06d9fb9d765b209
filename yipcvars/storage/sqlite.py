"""SQLite storage backend for the cvars table.

The connection runs in autocommit mode at the driver level so that the
store itself issues ``BEGIN``: deferred for read-only work, immediate for
both write intents so the write lock is taken up front. Lock contention
waits up to ``busy_timeout_ms`` and then fails the invocation.

Path values arrive as UTF-8 bytes and are written with ``CAST(? AS TEXT)``
so that the column holds text, not blobs.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Union

from yipcvars.types import StoreError, StoredValue, TransactionMode

from .base import CommitHook, CvarHandle, CvarStore

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT_MS = 5000

_BEGIN_SQL = {
    TransactionMode.READ: "BEGIN DEFERRED TRANSACTION",
    TransactionMode.READ_WRITE: "BEGIN IMMEDIATE TRANSACTION",
    TransactionMode.WRITE: "BEGIN IMMEDIATE TRANSACTION",
}


class SQLiteCvarHandle(CvarHandle):
    def __init__(self, conn: sqlite3.Connection, mode: TransactionMode):
        super().__init__(mode)
        self._conn = conn

    def get(self, key: str) -> Optional[str]:
        row = self._conn.execute(
            "SELECT cvarsval FROM cvars WHERE cvarskey=?", (key,)
        ).fetchone()
        return None if row is None else row["cvarsval"]

    def keys(self) -> List[str]:
        rows = self._conn.execute("SELECT cvarskey FROM cvars ORDER BY cvarsid").fetchall()
        return [row["cvarskey"] for row in rows]

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM cvars").fetchone()[0]

    def _insert(self, key: str, value: StoredValue) -> None:
        try:
            self._conn.execute(
                "INSERT INTO cvars(cvarskey, cvarsval) VALUES (?, CAST(? AS TEXT))",
                (key, value),
            )
        except sqlite3.IntegrityError as e:
            raise StoreError(f"Failed to insert '{key}': {e}") from e

    def _update(self, key: str, value: StoredValue) -> bool:
        cur = self._conn.execute(
            "UPDATE cvars SET cvarsval=CAST(? AS TEXT) WHERE cvarskey=?", (value, key)
        )
        return cur.rowcount > 0


class SQLiteCvarStore(CvarStore):
    """Store backed by the ``cvars`` table of an existing SQLite database.

    Args:
        db_path: Path to the database file. It must already exist as a
            regular file; use :func:`create_database` to provision one.
        busy_timeout_ms: How long to wait on a locked database.
        commit_hooks: Hooks run before write-intent commits. Defaults to
            the lastmod bump.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        commit_hooks: Optional[Iterable[CommitHook]] = None,
    ):
        super().__init__(commit_hooks)
        self.db_path = Path(db_path)
        if not self.db_path.is_file():
            raise StoreError(f"Database path does not exist: {self.db_path}")
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: Optional[sqlite3.Connection] = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                conn = sqlite3.connect(str(self.db_path), isolation_level=None)
            except sqlite3.Error as e:
                raise StoreError(f"Can't connect to database {self.db_path}: {e}") from e
            conn.row_factory = sqlite3.Row
            conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)}")
            self._conn = conn
        return self._conn

    def _begin(self, mode: TransactionMode) -> None:
        try:
            self._get_conn().execute(_BEGIN_SQL[mode])
        except sqlite3.OperationalError as e:
            raise StoreError(f"Failed to begin {mode.name} transaction: {e}") from e

    def _commit(self) -> None:
        self._get_conn().execute("COMMIT")

    def _rollback(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # SQLite may already have rolled back on its own
            logger.debug(f"Rollback failed: {e}")

    def _make_handle(self, mode: TransactionMode) -> SQLiteCvarHandle:
        return SQLiteCvarHandle(self._get_conn(), mode)

    def close(self) -> None:
        super().close()
        if self._conn is not None:
            self._conn.close()
            self._conn = None

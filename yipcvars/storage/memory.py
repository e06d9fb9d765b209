"""In-memory cvars store.

Implements the same work-block contract as the SQLite store. Rows live in a
dict; each transaction works on a copy that replaces the committed rows only
on commit, so a rollback leaves nothing behind.
"""

from typing import Dict, Iterable, List, Optional

from yipcvars.types import StoreError, StoredValue, TransactionMode

from .base import CommitHook, CvarHandle, CvarStore, _as_text


class MemoryCvarHandle(CvarHandle):
    def __init__(self, rows: Dict[str, str], mode: TransactionMode):
        super().__init__(mode)
        self._rows = rows

    def get(self, key: str) -> Optional[str]:
        return self._rows.get(key)

    def keys(self) -> List[str]:
        return list(self._rows)

    def _insert(self, key: str, value: StoredValue) -> None:
        if key in self._rows:
            raise StoreError(f"UNIQUE constraint failed: cvars.cvarskey ({key})")
        self._rows[key] = _as_text(value)

    def _update(self, key: str, value: StoredValue) -> bool:
        if key not in self._rows:
            return False
        self._rows[key] = _as_text(value)
        return True


class MemoryCvarStore(CvarStore):
    """Dict-backed store, mostly useful for tests and dry runs."""

    def __init__(
        self,
        rows: Optional[Dict[str, str]] = None,
        commit_hooks: Optional[Iterable[CommitHook]] = None,
    ):
        super().__init__(commit_hooks)
        self.rows: Dict[str, str] = dict(rows or {})
        self._working: Optional[Dict[str, str]] = None

    def _begin(self, mode: TransactionMode) -> None:
        self._working = dict(self.rows)

    def _commit(self) -> None:
        self.rows = self._working
        self._working = None

    def _rollback(self) -> None:
        self._working = None

    def _make_handle(self, mode: TransactionMode) -> MemoryCvarHandle:
        if self._working is None:
            raise StoreError("No active transaction")
        return MemoryCvarHandle(self._working, mode)

"""Storage contract for the cvars table.

A store hands out a :class:`CvarHandle` scoped to a declared
:class:`TransactionMode` and manages one transaction per invocation:

    with store.transaction(TransactionMode.WRITE) as handle:
        handle.update("authsecret", secret)

Work blocks nest. Only the outermost block begins and commits the real
transaction; opening a write block while the active transaction is read-only
is refused. If any block in the nest declared a write intent, the store's
commit hooks run just before the commit. The default hook is
:class:`LastmodBumpHook`, which advances ``lastmod`` the usual way, so no verb
has to remember to do it.
"""

import contextlib
import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, List, Optional

from yipcvars.codec import advance_lastmod
from yipcvars.schema import LASTMOD_KEY
from yipcvars.types import StoredValue, StoreError, TransactionMode

logger = logging.getLogger(__name__)

# Only lastmod may be written inside a READ_WRITE block.
_READ_WRITE_KEYS = frozenset({LASTMOD_KEY})

# Limit on nested work blocks.
MAX_NESTING = 1_000_000


class CvarHandle(ABC):
    """Row access inside an open work block.

    Writes are checked against the mode the handle was opened with.
    """

    def __init__(self, mode: TransactionMode):
        self.mode = mode

    def _check_write(self, key: str) -> None:
        if not self.mode.writable:
            raise StoreError(f"Can't write '{key}' in a read-only transaction")
        if self.mode is TransactionMode.READ_WRITE and key not in _READ_WRITE_KEYS:
            raise StoreError(f"Can't write '{key}' in a lastmod-only transaction")

    def insert(self, key: str, value: StoredValue) -> None:
        """Add a new row. The key must not exist yet."""
        self._check_write(key)
        self._insert(key, value)

    def update(self, key: str, value: StoredValue) -> bool:
        """Overwrite an existing row. Returns False if there was no such row."""
        self._check_write(key)
        return self._update(key, value)

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored text for a key, or None if the row does not exist."""
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        """All keys currently present, in row order."""
        ...

    def count(self) -> int:
        return len(self.keys())

    @abstractmethod
    def _insert(self, key: str, value: StoredValue) -> None: ...

    @abstractmethod
    def _update(self, key: str, value: StoredValue) -> bool: ...


CommitHook = Callable[[CvarHandle], None]


class LastmodBumpHook:
    """Commit hook that increases ``lastmod`` by a random amount in [1, 64].

    Runs before the commit of every write-intent transaction.
    """

    def __call__(self, handle: CvarHandle) -> None:
        current = handle.get(LASTMOD_KEY)
        if current is None:
            raise StoreError("lastmod undefined")
        bumped = advance_lastmod(current)
        handle.update(LASTMOD_KEY, bumped)
        logger.debug(f"lastmod advanced from {current} to {bumped}")


def _as_text(value: StoredValue) -> str:
    """Store-side text for a value; byte values are UTF-8."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class CvarStore(ABC):
    """Base class implementing work-block nesting over a backend transaction."""

    def __init__(self, commit_hooks: Optional[Iterable[CommitHook]] = None):
        if commit_hooks is None:
            commit_hooks = [LastmodBumpHook()]
        self.commit_hooks: List[CommitHook] = list(commit_hooks)
        self._nest = 0
        self._read_only = False
        self._hooks_pending = False

    @property
    def in_transaction(self) -> bool:
        return self._nest > 0

    def begin_work(self, mode: TransactionMode) -> CvarHandle:
        """Open a work block and return a handle scoped to ``mode``."""
        mode = TransactionMode(mode)
        if self._nest > 0:
            if self._read_only and mode.writable:
                raise StoreError("Can't write when active transaction is read-only")
            if self._nest >= MAX_NESTING:
                raise StoreError("Nesting overflow")
        else:
            self._begin(mode)
            self._read_only = not mode.writable
            logger.debug(f"Began {mode.name} transaction")
        self._nest += 1
        if mode.writable:
            self._hooks_pending = True
        return self._make_handle(mode)

    def finish_work(self) -> None:
        """Close a work block; the outermost one runs hooks and commits."""
        if self._nest <= 0:
            raise StoreError("No active work block to finish")
        if self._nest == 1:
            if self._hooks_pending and not self._read_only:
                hook_handle = self._make_handle(TransactionMode.WRITE)
                for hook in self.commit_hooks:
                    hook(hook_handle)
            self._commit()
            self._read_only = False
            self._hooks_pending = False
            logger.debug("Committed transaction")
        self._nest -= 1

    def cancel_work(self) -> None:
        """Roll back the active transaction, if any, and reset nesting."""
        if self._nest <= 0:
            return
        self._nest = 0
        self._read_only = False
        self._hooks_pending = False
        self._rollback()
        logger.debug("Rolled back transaction")

    @contextlib.contextmanager
    def transaction(self, mode: TransactionMode) -> Iterator[CvarHandle]:
        """Context manager around one work block.

        Commits on success. Any exception, including one raised by a commit
        hook, rolls back the whole transaction and is re-raised.
        """
        handle = self.begin_work(mode)
        try:
            yield handle
            self.finish_work()
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            self.cancel_work()
            raise

    def close(self) -> None:
        """Roll back anything still open and release backend resources."""
        self.cancel_work()

    @abstractmethod
    def _begin(self, mode: TransactionMode) -> None: ...

    @abstractmethod
    def _commit(self) -> None: ...

    @abstractmethod
    def _rollback(self) -> None: ...

    @abstractmethod
    def _make_handle(self, mode: TransactionMode) -> CvarHandle: ...

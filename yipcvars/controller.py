"""Transaction controller for yipcvars.

Picks the transaction intent for each verb, opens exactly one work block on
the store, runs the verb inside it and lets the store commit (running its
lastmod bump for write intents) or roll back.

The store is passed in explicitly, or built from an explicit
:class:`~yipcvars.config.Settings` value, so nothing here reads ambient
process state.
"""

import logging
from typing import Optional

from yipcvars import verbs
from yipcvars.config import Settings
from yipcvars.storage import CvarStore, SQLiteCvarStore
from yipcvars.types import CvarRequest, QueryResult, TransactionMode, UsageError, Verb

logger = logging.getLogger(__name__)

_MODES = {
    Verb.QUERY: TransactionMode.READ,
    Verb.BUMP: TransactionMode.READ_WRITE,
}


def mode_for_verb(verb: Verb) -> TransactionMode:
    """Read-only for query, lastmod-only for bump, full write otherwise."""
    return _MODES.get(Verb(verb), TransactionMode.WRITE)


class CvarController:
    """Runs validated requests against a cvars store, one transaction each."""

    def __init__(self, store: CvarStore):
        self.store = store

    @classmethod
    def from_settings(cls, settings: Settings) -> "CvarController":
        if settings.db_path is None:
            raise UsageError("No database path configured (set YIP_DB_PATH or pass --db)")
        return cls(SQLiteCvarStore(settings.db_path, busy_timeout_ms=settings.busy_timeout_ms))

    def execute(self, request: CvarRequest) -> Optional[QueryResult]:
        """Run one request in its own transaction.

        Returns:
            The query result for the query verb, None for every other verb.
        """
        mode = mode_for_verb(request.verb)
        logger.debug(f"Running {request.verb.value} in {mode.name} mode")

        with self.store.transaction(mode) as handle:
            if request.verb is Verb.INITIALIZE:
                verbs.initialize(handle, request.param, request.values)
            elif request.verb is Verb.QUERY:
                return verbs.query(handle, request.param)
            elif request.verb is Verb.BUMP:
                verbs.bump(handle, request.param)
            elif request.verb is Verb.BULK_UPDATE:
                verbs.bulk_update(handle, request.values)
            elif request.verb is Verb.INVALIDATE_SESSIONS:
                verbs.invalidate_sessions(handle)
            elif request.verb is Verb.RESET_CREDENTIALS:
                verbs.reset_credentials(handle)
        return None

    def close(self) -> None:
        self.store.close()

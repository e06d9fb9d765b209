"""The six cvars operations, each a short script against an open handle.

Every function here expects to run inside a single work block of the mode
chosen by :func:`yipcvars.controller.mode_for_verb`, with all of its inputs
already validated. A raised error leaves the transaction to be rolled back
by the caller. The lastmod bump on commit is the store's job, not ours.
"""

import logging
from typing import Mapping

from yipcvars.codec import (
    PASSWORD_RESET_SENTINEL,
    decode_hex,
    encode_hex,
    generate_initial_lastmod,
    generate_secret,
    parse_lastmod,
)
from yipcvars.epoch import decode_epoch
from yipcvars.schema import (
    EPOCH_KEY,
    LASTMOD_KEY,
    PASSWORD_KEY,
    PROPERTIES,
    SECRET_KEY,
)
from yipcvars.storage.base import CvarHandle
from yipcvars.types import (
    CompletenessError,
    PreconditionError,
    QueryResult,
    StoredValue,
)

logger = logging.getLogger(__name__)


def _require_initialized(handle: CvarHandle) -> None:
    """Fail unless every recognized key has a row."""
    present = set(handle.keys())
    for key in PROPERTIES:
        if key not in present:
            raise PreconditionError(f"Property '{key}' not currently defined in table")


def initialize(handle: CvarHandle, epoch_seconds: int, values: Mapping[str, StoredValue]) -> None:
    """Populate an empty cvars table with all 19 rows."""
    if handle.count() > 0:
        raise PreconditionError("cvars table must be empty to use initialize")

    generated = {
        EPOCH_KEY: encode_hex(epoch_seconds),
        LASTMOD_KEY: encode_hex(generate_initial_lastmod()),
        SECRET_KEY: generate_secret(),
        PASSWORD_KEY: PASSWORD_RESET_SENTINEL,
    }
    for key, prop in PROPERTIES.items():
        if prop.bulk_writable:
            if key not in values:
                raise CompletenessError(f"Property '{key}' is missing")
            value = values[key]
        else:
            value = generated[key]
        handle.insert(key, value)

    logger.info(f"Initialized cvars table with {len(PROPERTIES)} properties")


def query(handle: CvarHandle, key: str) -> QueryResult:
    """Read one queryable key; epoch is also decoded to a calendar time."""
    value = handle.get(key)
    if value is None:
        raise PreconditionError(f"Failed to find '{key}'")

    result = QueryResult(key=key, value=value)
    if key == EPOCH_KEY:
        result.decoded = decode_epoch(decode_hex(EPOCH_KEY, value))
    return result


def bump(handle: CvarHandle, floor: int) -> bool:
    """Raise lastmod to at least ``floor``.

    The store advances lastmod again when the transaction commits, whether
    or not the floor was applied.

    Returns:
        True if lastmod was below the floor and has been overwritten.
    """
    _require_initialized(handle)
    current = handle.get(LASTMOD_KEY)

    if parse_lastmod(current) < floor:
        handle.update(LASTMOD_KEY, encode_hex(floor))
        logger.info(f"lastmod raised from {current} to {encode_hex(floor)}")
        return True
    return False


def bulk_update(handle: CvarHandle, values: Mapping[str, StoredValue]) -> None:
    """Overwrite exactly the given rows of an initialized table."""
    _require_initialized(handle)
    for key, value in values.items():
        handle.update(key, value)
    logger.info(f"Updated {len(values)} properties")


def invalidate_sessions(handle: CvarHandle) -> None:
    """Replace the cookie secret, logging every administrator out."""
    if not handle.update(SECRET_KEY, generate_secret()):
        raise PreconditionError(f"Property '{SECRET_KEY}' not currently defined in table")
    logger.info("Session secret regenerated")


def reset_credentials(handle: CvarHandle) -> None:
    """Replace the cookie secret and require a password reset."""
    invalidate_sessions(handle)
    if not handle.update(PASSWORD_KEY, PASSWORD_RESET_SENTINEL):
        raise PreconditionError(f"Property '{PASSWORD_KEY}' not currently defined in table")
    logger.info("Password reset required")


"""
Shared types for yipcvars.

The property descriptor, the codec and transaction-mode enums, the floating
timestamp, and the error taxonomy all live here. They are the vocabulary
shared by the schema, the codec, the validator, the storage layer and the CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

# A value as written to the store. Path values are carried as their UTF-8
# byte sequence; everything else is text.
StoredValue = Union[str, bytes]


# === Enums ===


class Codec(str, Enum):
    """How a property's value is checked, produced and stored."""

    HEX_EPOCH = "hex-epoch"  # Seconds from 1970-01-01, lowercase hex
    HEX_COUNTER = "hex-counter"  # Unsigned 32-bit, random-seeded, lowercase hex
    COOKIE_SUFFIX = "cookie-suffix"  # 1-24 alphanumerics/underscores
    DECIMAL = "decimal"  # 1-10 significant digits
    COST = "cost"  # Decimal in [5, 31]
    PATH = "path"  # Slash-prefixed UTF-8 path
    SECRET = "secret"  # 12 random bytes, base64
    SENTINEL = "sentinel"  # Literal "?"


class TransactionMode(str, Enum):
    """Intent declared when opening a work block on the store."""

    READ = "r"
    READ_WRITE = "rw"  # Read-write with lastmod floor raise
    WRITE = "w"

    @property
    def writable(self) -> bool:
        return self is not TransactionMode.READ


class Verb(str, Enum):
    """The top-level operations on the cvars table."""

    INITIALIZE = "initialize"
    QUERY = "query"
    BUMP = "bump"
    BULK_UPDATE = "bulk-update"
    INVALIDATE_SESSIONS = "invalidate-sessions"
    RESET_CREDENTIALS = "reset-credentials"


# === Records ===


@dataclass(frozen=True)
class Property:
    """A named configuration slot in the cvars table."""

    key: str
    queryable: bool
    bulk_writable: bool
    codec: Codec


@dataclass(frozen=True)
class FloatingTime:
    """A wall-clock time with no timezone where every day has 86400 seconds."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    def __str__(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d} "
            f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )

    def isoformat(self) -> str:
        return str(self).replace(" ", "T")


@dataclass
class CvarRequest:
    """A fully validated invocation, ready to run inside a transaction.

    ``param`` depends on the verb: epoch seconds for initialize, the key
    name for query, the floor value for bump, None otherwise. ``values`` is
    the normalised mapping for initialize and bulk-update.
    """

    verb: Verb
    param: Optional[Union[int, str]] = None
    values: Dict[str, StoredValue] = field(default_factory=dict)


@dataclass
class QueryResult:
    """Outcome of a query: the raw stored value and, for epoch, its decoding."""

    key: str
    value: str
    decoded: Optional[FloatingTime] = None


# === Errors ===


class CvarError(Exception):
    """Base class for every failure reported by yipcvars."""


class UsageError(CvarError):
    """Wrong verb, wrong argument count, or malformed object parameter."""


class SchemaError(CvarError):
    """Unknown key, or a key not permitted for the requested operation."""


class CvarValueError(CvarError):
    """A value failed the codec for its key."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Value for '{key}' {reason}")


class PreconditionError(CvarError):
    """The store is not in the state the verb requires."""


class CompletenessError(CvarError):
    """An initialize mapping is missing a required key."""


class StoreError(CvarError):
    """The store could not be opened or a transaction could not be managed."""

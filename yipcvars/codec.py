"""Per-key value checks, normalization and generation.

Every value that reaches the store goes through this module first.
Bulk-writable values are checked and normalized by :func:`normalize_value`;
the remaining keys are only ever produced here (epoch, lastmod, secret,
sentinel).
"""

import base64
import re
import secrets
from typing import Any

from yipcvars.schema import get_property
from yipcvars.types import Codec, CvarValueError, StoredValue

PASSWORD_RESET_SENTINEL = "?"

SECRET_BYTES = 12
LASTMOD_INITIAL_MAX = 4096
LASTMOD_INCREMENT_MAX = 64
LASTMOD_MAX = 0xFFFFFFFF

AUTH_COST_MIN = 5
AUTH_COST_MAX = 31

_COOKIE_SUFFIX_RE = re.compile(r"\A[A-Za-z0-9_]{1,24}\Z")
_DECIMAL_RE = re.compile(r"\A0*[1-9][0-9]{0,9}\Z")
_COST_RE = re.compile(r"\A0*[1-9][0-9]?\Z")
_PATH_CHARS_RE = re.compile("\\A[\u0020-\u007e\u00a0-\ud7ff\ue000-\uffff]+\\Z")
_LASTMOD_RE = re.compile(r"\A[0-9A-Fa-f]{1,8}\Z")


# === Bulk-writable values ===


def normalize_cookie_suffix(key: str, value: str) -> str:
    if not _COOKIE_SUFFIX_RE.match(value):
        raise CvarValueError(key, "must be 1 to 24 alphanumerics or underscores")
    return value


def normalize_decimal(key: str, value: str) -> str:
    """Strip redundant leading zeros from a positive decimal of up to 10 digits."""
    if not _DECIMAL_RE.match(value):
        raise CvarValueError(key, "must be a positive decimal integer of at most 10 digits")
    return str(int(value))


def normalize_cost(key: str, value: str) -> str:
    if not _COST_RE.match(value):
        raise CvarValueError(key, "must be a decimal integer")
    cost = int(value)
    if not AUTH_COST_MIN <= cost <= AUTH_COST_MAX:
        raise CvarValueError(key, f"must be in range [{AUTH_COST_MIN}, {AUTH_COST_MAX}]")
    return str(cost)


def normalize_path(key: str, value: str) -> bytes:
    """Check a server path and return its UTF-8 byte sequence.

    The path must begin with a slash and contain only printable codepoints
    from U+0020-U+007E, U+00A0-U+D7FF and U+E000-U+FFFF, so it can be embedded
    in HTML attribute values without escaping.
    """
    if not value.startswith("/"):
        raise CvarValueError(key, "must begin with slash")
    if not _PATH_CHARS_RE.match(value):
        raise CvarValueError(key, "has invalid codepoints")
    try:
        return value.encode("utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise CvarValueError(key, "can not be encoded as UTF-8") from e


_NORMALIZERS = {
    Codec.COOKIE_SUFFIX: normalize_cookie_suffix,
    Codec.DECIMAL: normalize_decimal,
    Codec.COST: normalize_cost,
    Codec.PATH: normalize_path,
}


def scalar_to_text(key: str, value: Any) -> str:
    """Render a decoded JSON scalar as text, rejecting nested structures."""
    if isinstance(value, (dict, list)):
        raise CvarValueError(key, "must be scalar")
    if value is None or isinstance(value, bool):
        raise CvarValueError(key, "must be a string or number")
    return str(value)


def normalize_value(key: str, value: Any) -> StoredValue:
    """Check one bulk-writable value and return the form to store.

    Raises:
        SchemaError: If the key is unknown.
        CvarValueError: If the value fails the codec for its key, or the key
            has no externally settable codec.
    """
    prop = get_property(key)
    normalizer = _NORMALIZERS.get(prop.codec)
    if normalizer is None:
        raise CvarValueError(prop.key, "can not be set directly")
    return normalizer(prop.key, scalar_to_text(prop.key, value))


# === Generated values ===


def encode_hex(value: int) -> str:
    """Lowercase hex without prefix, as used for epoch and lastmod."""
    if value < 0:
        raise ValueError(f"Can not hex-encode negative value {value}")
    return format(value, "x")


def decode_hex(key: str, text: str) -> int:
    try:
        return int(text, 16)
    except (TypeError, ValueError) as e:
        raise CvarValueError(key, f"is not a hexadecimal integer: {text!r}") from e


def generate_secret() -> str:
    """Twelve random octets as sixteen base64 characters."""
    return base64.b64encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii")


def generate_initial_lastmod() -> int:
    """Uniform random draw in [1, 4096]."""
    return 1 + secrets.randbelow(LASTMOD_INITIAL_MAX)


def generate_lastmod_increment() -> int:
    """Uniform random draw in [1, 64]."""
    return 1 + secrets.randbelow(LASTMOD_INCREMENT_MAX)


def parse_lastmod(text: str) -> int:
    """Decode a stored lastmod, which must be 1 to 8 hex digits."""
    if not isinstance(text, str) or not _LASTMOD_RE.match(text):
        raise CvarValueError("lastmod", f"is invalid: {text!r}")
    return int(text, 16)


def advance_lastmod(text: str) -> str:
    """Apply the usual lastmod increase to a stored value.

    Adds a random amount in [1, 64]. Values that could overflow the 32-bit
    range after the increase are refused.
    """
    current = parse_lastmod(text)
    if current > LASTMOD_MAX - LASTMOD_INCREMENT_MAX:
        raise CvarValueError("lastmod", "would overflow")
    return encode_hex(current + generate_lastmod_increment())

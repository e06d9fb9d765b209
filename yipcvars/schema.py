"""Static table of every recognized cvar key.

One descriptor per key; the insertion order of ``PROPERTIES`` is the order
in which rows are written by initialize.
"""

import re
from typing import Dict, FrozenSet

from yipcvars.types import Codec, Property, SchemaError

_PATH_KEYS = (
    "pathlogin",
    "pathlogout",
    "pathreset",
    "pathadmin",
    "pathlist",
    "pathdrop",
    "pathedit",
    "pathupload",
    "pathimport",
    "pathdownload",
    "pathexport",
    "pathgenuid",
)


def _build_properties() -> Dict[str, Property]:
    props = [
        Property("epoch", queryable=True, bulk_writable=False, codec=Codec.HEX_EPOCH),
        Property("lastmod", queryable=True, bulk_writable=False, codec=Codec.HEX_COUNTER),
        Property("authsuffix", queryable=True, bulk_writable=True, codec=Codec.COOKIE_SUFFIX),
        Property("authsecret", queryable=False, bulk_writable=False, codec=Codec.SECRET),
        Property("authlimit", queryable=True, bulk_writable=True, codec=Codec.DECIMAL),
        Property("authcost", queryable=True, bulk_writable=True, codec=Codec.COST),
        Property("authpswd", queryable=False, bulk_writable=False, codec=Codec.SENTINEL),
    ]
    props.extend(
        Property(key, queryable=True, bulk_writable=True, codec=Codec.PATH) for key in _PATH_KEYS
    )
    return {p.key: p for p in props}


PROPERTIES: Dict[str, Property] = _build_properties()

EPOCH_KEY = "epoch"
LASTMOD_KEY = "lastmod"
SECRET_KEY = "authsecret"
PASSWORD_KEY = "authpswd"

_KEY_NAME_RE = re.compile(r"\A[A-Za-z0-9_-]+\Z")
_PROSE_KEY_RE = re.compile(r"\A(auth|path)-([a-z]+)\Z")


def canonical_key(name: str) -> str:
    """Normalize a key spelling to its stored form.

    The prose spellings ``auth-secret`` or ``path-login`` map to ``authsecret``
    and ``pathlogin``. Any other hyphen is kept, so the name will not match a
    key. The result is not checked against the schema; use
    :func:`get_property` for that.
    """
    if not isinstance(name, str) or not _KEY_NAME_RE.match(name):
        raise SchemaError(f"Invalid property name {name!r}")
    m = _PROSE_KEY_RE.match(name)
    if m:
        return m.group(1) + m.group(2)
    return name


def get_property(key: str) -> Property:
    """Look up the descriptor for a key, raising SchemaError if unknown."""
    prop = PROPERTIES.get(canonical_key(key))
    if prop is None:
        raise SchemaError(f"Property name '{key}' not recognized")
    return prop


def is_queryable(key: str) -> bool:
    return get_property(key).queryable


def is_bulk_writable(key: str) -> bool:
    return get_property(key).bulk_writable


def all_keys() -> FrozenSet[str]:
    return frozenset(PROPERTIES)


def bulk_writable_keys() -> FrozenSet[str]:
    return frozenset(k for k, p in PROPERTIES.items() if p.bulk_writable)


def queryable_keys() -> FrozenSet[str]:
    return frozenset(k for k, p in PROPERTIES.items() if p.queryable)

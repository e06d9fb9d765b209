"""Request validation for yipcvars.

Turns a verb, its positional parameters and (for initialize and bulk-update)
the raw JSON read from standard input into a :class:`CvarRequest`. Everything
is checked here, before any transaction is opened, so that a bad request can
never leave a partial write behind.

Canonical helpers:
- ``parse_verb`` - verb and alias resolution
- ``parse_floor`` - bump object parameter
- ``parse_query_key`` - query object parameter
- ``decode_mapping`` - JSON document to mapping
- ``validate_mapping`` - per-key schema and codec checks
"""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from yipcvars.codec import normalize_value
from yipcvars.epoch import encode_epoch, parse_floating_time
from yipcvars.schema import bulk_writable_keys, get_property
from yipcvars.types import (
    CompletenessError,
    CvarRequest,
    SchemaError,
    StoredValue,
    UsageError,
    Verb,
)

logger = logging.getLogger(__name__)

VERB_ALIASES: Dict[str, Verb] = {
    "init": Verb.INITIALIZE,
    "peek": Verb.QUERY,
    "touch": Verb.BUMP,
    "config": Verb.BULK_UPDATE,
    "logout": Verb.INVALIDATE_SESSIONS,
    "forgot": Verb.RESET_CREDENTIALS,
}

# Verbs that take exactly one object parameter; all others take none.
_OBJECT_VERBS = frozenset({Verb.INITIALIZE, Verb.QUERY, Verb.BUMP})

# Verbs that read a JSON mapping from standard input.
STDIN_VERBS = frozenset({Verb.INITIALIZE, Verb.BULK_UPDATE})

_FLOOR_RE = re.compile(r"\A0*[0-9A-Fa-f]{1,8}\Z")


def parse_verb(name: str) -> Verb:
    """Resolve a verb name or one of its short aliases."""
    if name in VERB_ALIASES:
        return VERB_ALIASES[name]
    try:
        return Verb(name)
    except ValueError:
        raise UsageError(f"Unrecognized verb '{name}'") from None


def parse_floor(text: str) -> int:
    """Decode the bump object: one to eight hex digits, leading zeros allowed."""
    if not isinstance(text, str) or not _FLOOR_RE.match(text):
        raise UsageError(f"Invalid parameter value {text!r}, expected 1 to 8 hex digits")
    return int(text, 16)


def parse_query_key(name: str) -> str:
    """Check that a key exists and may be queried; return its stored name."""
    prop = get_property(name)
    if not prop.queryable:
        raise SchemaError(f"Property '{prop.key}' may not be queried")
    return prop.key


def decode_mapping(raw: Union[str, bytes]) -> Dict[str, Any]:
    """Decode a JSON document whose top-level entity must be an object."""
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError, UnicodeDecodeError and oversized integers
        raise UsageError(f"Failed to parse JSON: {e}") from e
    if not isinstance(data, dict):
        raise UsageError("JSON must encode a JSON object")
    return data


def validate_mapping(
    mapping: Mapping[str, Any], require_all: bool = False
) -> Dict[str, StoredValue]:
    """Validate a whole key -> value mapping against the schema and codecs.

    Args:
        mapping: Decoded JSON object.
        require_all: If True (initialize), the mapping must contain exactly
            the bulk-writable keys; otherwise any subset is accepted.

    Returns:
        Mapping of stored key names to normalized values.

    Raises:
        SchemaError: Unknown or non-writable key.
        CvarValueError: A value failed its codec.
        CompletenessError: ``require_all`` and a key is missing.
    """
    values: Dict[str, StoredValue] = {}
    for name, value in mapping.items():
        prop = get_property(name)
        if not prop.bulk_writable:
            raise SchemaError(f"JSON property '{prop.key}' not allowed")
        if prop.key in values:
            raise SchemaError(f"JSON property '{prop.key}' given more than once")
        values[prop.key] = normalize_value(prop.key, value)

    if require_all:
        missing = sorted(bulk_writable_keys() - values.keys())
        if missing:
            raise CompletenessError(f"Property '{missing[0]}' is missing in JSON")

    logger.debug(f"Validated {len(values)} properties")
    return values


def parse_request(
    verb_name: str,
    params: Sequence[str] = (),
    stdin_data: Optional[Union[str, bytes]] = None,
) -> CvarRequest:
    """Build a validated request from the command line and standard input.

    ``stdin_data`` must hold the complete standard input for initialize and
    bulk-update; it is ignored by the other verbs.
    """
    verb = parse_verb(verb_name)

    expected = 1 if verb in _OBJECT_VERBS else 0
    if len(params) != expected:
        raise UsageError(f"Wrong number of parameters for verb '{verb.value}'")

    request = CvarRequest(verb=verb)
    if verb is Verb.INITIALIZE:
        request.param = encode_epoch(parse_floating_time(params[0]))
    elif verb is Verb.QUERY:
        request.param = parse_query_key(params[0])
    elif verb is Verb.BUMP:
        request.param = parse_floor(params[0])

    if verb in STDIN_VERBS:
        if stdin_data is None:
            raise UsageError(f"Verb '{verb.value}' requires a JSON object on standard input")
        request.values = validate_mapping(
            decode_mapping(stdin_data), require_all=verb is Verb.INITIALIZE
        )

    return request


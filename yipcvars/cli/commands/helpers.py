"""Shared helper functions for CLI commands."""

import json
import sys
from typing import Any, Union


def read_stdin() -> Union[str, bytes]:
    """Read all of standard input, as raw bytes where the stream allows it."""
    stream = getattr(sys.stdin, "buffer", sys.stdin)
    return stream.read()


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    print(json.dumps(data, indent=2, default=str))

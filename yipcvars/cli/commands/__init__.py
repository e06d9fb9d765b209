"""CLI command modules for yipcvars.

Each handler takes the parsed arguments and the controller (or, for
create, the settings) built by ``yipcvars.cli.__main__``.
"""

from yipcvars.cli.commands.cvars import (
    cmd_bulk_update,
    cmd_bump,
    cmd_create,
    cmd_initialize,
    cmd_invalidate_sessions,
    cmd_query,
    cmd_reset_credentials,
)
from yipcvars.cli.commands.helpers import print_json, read_stdin

__all__ = [
    "cmd_bulk_update",
    "cmd_bump",
    "cmd_create",
    "cmd_initialize",
    "cmd_invalidate_sessions",
    "cmd_query",
    "cmd_reset_credentials",
    "print_json",
    "read_stdin",
]

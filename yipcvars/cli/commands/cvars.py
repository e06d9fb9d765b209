"""cvars verb commands for the yipcvars CLI."""

from typing import TYPE_CHECKING

from yipcvars.cli.commands.helpers import print_json, read_stdin
from yipcvars.storage import create_database
from yipcvars.types import UsageError
from yipcvars.validation import parse_request

if TYPE_CHECKING:
    from yipcvars.config import Settings
    from yipcvars.controller import CvarController


def cmd_initialize(args, controller: "CvarController"):
    """Set the epoch and populate an empty cvars table from JSON on stdin."""
    request = parse_request(args.command, [args.datetime], read_stdin())
    controller.execute(request)


def cmd_query(args, controller: "CvarController"):
    """Print the value of one queryable variable."""
    request = parse_request(args.command, [args.key])
    result = controller.execute(request)

    if getattr(args, "json", False):
        print_json(
            {
                "key": result.key,
                "value": result.value,
                "decoded": result.decoded.isoformat() if result.decoded else None,
            }
        )
        return

    print(f"{result.key}={result.value}")
    if result.decoded is not None:
        print(f"({result.decoded})")


def cmd_bump(args, controller: "CvarController"):
    """Raise lastmod to at least the given floor, then advance it."""
    controller.execute(parse_request(args.command, [args.floor]))


def cmd_bulk_update(args, controller: "CvarController"):
    """Change any subset of the freely mutable variables from JSON on stdin."""
    controller.execute(parse_request(args.command, [], read_stdin()))


def cmd_invalidate_sessions(args, controller: "CvarController"):
    """Regenerate the cookie secret."""
    controller.execute(parse_request(args.command))


def cmd_reset_credentials(args, controller: "CvarController"):
    """Regenerate the cookie secret and require a password reset."""
    controller.execute(parse_request(args.command))


def cmd_create(args, settings: "Settings"):
    """Create a new database with an empty cvars table."""
    if settings.db_path is None:
        raise UsageError("No database path configured (set YIP_DB_PATH or pass --db)")
    path = create_database(settings.db_path)
    print(f"Created {path}")

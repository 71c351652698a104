"""
vtiger CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- Logging in before and out after each networked command
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from typing import Any

from vtiger_cli.core.client import ValidationError, VtigerError
from vtiger_cli.core.modules import all_modules
from vtiger_cli.core.types import VtigerModule
from vtiger_cli.sdk import VtigerClient

logger = logging.getLogger(__name__)

MODULE_CHOICES = [m.value for m in VtigerModule]

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (LLM/machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: VtigerError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def read_data(value: str) -> dict[str, Any]:
    """Parse a --data argument: a JSON object, or - for stdin."""
    try:
        data = json.load(sys.stdin) if value == "-" else json.loads(value)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in --data: {e}")
    if not isinstance(data, dict):
        raise ValidationError("--data must be a JSON object")
    return data


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_modules(_client: VtigerClient, _args: argparse.Namespace) -> None:
    """Print the module table."""
    modules = all_modules()
    if is_tty():
        table_output(
            ["Key", "ID", "Name"],
            [[m.key.value, str(m.id), m.name] for m in modules],
            [16, 4, 16],
        )
    else:
        success_output({"data": [m.to_dict() for m in modules]})


def cmd_types(client: VtigerClient, _args: argparse.Namespace) -> None:
    """List modules accessible to the user."""
    try:
        response = client.list_types()
        result = response.get("result") or {}

        if is_tty():
            for name in result.get("types", []):
                print(name)
        else:
            success_output(result)
    except VtigerError as e:
        error_output(e)


def cmd_describe(client: VtigerClient, args: argparse.Namespace) -> None:
    """Describe a module."""
    try:
        response = client.describe(args.module)
        result = response.get("result") or {}

        if is_tty():
            fields = result.get("fields", [])
            table_output(
                ["Field", "Label", "Type", "Mandatory"],
                [
                    [
                        f.get("name", ""),
                        f.get("label", ""),
                        (f.get("type") or {}).get("name", ""),
                        "yes" if f.get("mandatory") else "",
                    ]
                    for f in fields
                ],
                [30, 30, 12, 9],
            )
        else:
            success_output(result)
    except VtigerError as e:
        error_output(e)


def cmd_get(client: VtigerClient, args: argparse.Namespace) -> None:
    """Get a record."""
    try:
        response = client.retrieve(args.module, args.record)
        success_output(response.get("result"))
    except VtigerError as e:
        error_output(e)


def cmd_create(client: VtigerClient, args: argparse.Namespace) -> None:
    """Create a record."""
    try:
        response = client.create(args.module, read_data(args.data))
        result = response.get("result") or {}
        success_output({"id": result.get("id"), "message": "Record created"})
    except VtigerError as e:
        error_output(e)


def cmd_update(client: VtigerClient, args: argparse.Namespace) -> None:
    """Update a record."""
    try:
        response = client.update(args.module, args.record, read_data(args.data))
        success_output(response.get("result"))
    except VtigerError as e:
        error_output(e)


def cmd_delete(client: VtigerClient, args: argparse.Namespace) -> None:
    """Delete a record."""
    try:
        client.delete(args.module, args.record)
        success_output({"success": True, "message": f"Record {args.module} {args.record} deleted"})
    except VtigerError as e:
        error_output(e)


def cmd_query(client: VtigerClient, args: argparse.Namespace) -> None:
    """Run a query."""
    try:
        response = client.query(args.query)
        rows = response.get("result") or []
        success_output({"data": rows, "total_count": len(rows)})
    except VtigerError as e:
        error_output(e)


def cmd_related_types(client: VtigerClient, args: argparse.Namespace) -> None:
    """List relations of a module."""
    try:
        response = client.related_types(args.module)
        success_output(response.get("result"))
    except VtigerError as e:
        error_output(e)


def cmd_related_get(client: VtigerClient, args: argparse.Namespace) -> None:
    """Get records related to a record."""
    try:
        response = client.retrieve_related(args.module, args.record, args.related_module, args.label)
        rows = response.get("result") or []
        success_output({"data": rows, "total_count": len(rows)})
    except VtigerError as e:
        error_output(e)


def cmd_related_query(client: VtigerClient, args: argparse.Namespace) -> None:
    """Query records related to a record."""
    try:
        response = client.query_related(args.module, args.record, args.label)
        rows = response.get("result") or []
        success_output({"data": rows, "total_count": len(rows)})
    except VtigerError as e:
        error_output(e)


def cmd_related_add(client: VtigerClient, args: argparse.Namespace) -> None:
    """Relate two records."""
    try:
        response = client.add_related(
            args.module,
            args.record,
            args.related_module,
            args.related_record,
            args.label,
        )
        success_output(response.get("result"))
    except VtigerError as e:
        error_output(e)


def cmd_related_delete(client: VtigerClient, args: argparse.Namespace) -> None:
    """Break the relationship between two records."""
    try:
        response = client.delete_related(args.module, args.record, args.related_module, args.related_record)
        success_output(response.get("result"))
    except VtigerError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def _add_record_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("module", choices=MODULE_CHOICES, metavar="module", help="Module key (e.g. leads)")
    parser.add_argument("record", help="Record number within the module")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="vtiger",
        description="vtiger CLI - Command-line interface for the vtiger CRM web service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials:
  VTIGER_URL, VTIGER_USERNAME and VTIGER_ACCESS_KEY, or the flags below.

Examples:
  vtiger modules
  vtiger describe leads
  vtiger get contacts 42
  vtiger create leads --data '{"lastname": "Doe", "company": "Acme"}'
  vtiger query "SELECT * FROM Leads LIMIT 10;" | jq '.data[].id'
""",
    )
    parser.add_argument("--url", help="vtiger URL (overrides VTIGER_URL)")
    parser.add_argument("--username", "-u", help="Username (overrides VTIGER_USERNAME)")
    parser.add_argument("--access-key", "-k", help="Access key (overrides VTIGER_ACCESS_KEY)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Metadata ==========
    modules = subparsers.add_parser("modules", help="Show module keys, ids and names")
    modules.set_defaults(func=cmd_modules, needs_session=False)

    types = subparsers.add_parser("types", help="List modules accessible to the user")
    types.set_defaults(func=cmd_types)

    describe = subparsers.add_parser("describe", help="Describe a module's fields")
    describe.add_argument("module", choices=MODULE_CHOICES, metavar="module", help="Module key")
    describe.set_defaults(func=cmd_describe)

    # ========== Records ==========
    get = subparsers.add_parser("get", help="Get a record")
    _add_record_args(get)
    get.set_defaults(func=cmd_get)

    create = subparsers.add_parser("create", help="Create a record")
    create.add_argument("module", choices=MODULE_CHOICES, metavar="module", help="Module key")
    create.add_argument("--data", "-d", required=True, help="JSON object with field values (or - for stdin)")
    create.set_defaults(func=cmd_create)

    update = subparsers.add_parser("update", help="Update a record (restate mandatory fields)")
    _add_record_args(update)
    update.add_argument("--data", "-d", required=True, help="JSON object with field values (or - for stdin)")
    update.set_defaults(func=cmd_update)

    delete = subparsers.add_parser("delete", help="Delete a record")
    _add_record_args(delete)
    delete.set_defaults(func=cmd_delete)

    query = subparsers.add_parser("query", help="Run a query")
    query.add_argument("query", help="Query, e.g. \"SELECT * FROM Leads LIMIT 10;\"")
    query.set_defaults(func=cmd_query)

    # ========== Relations ==========
    related = subparsers.add_parser("related", help="Work with related records")
    related.set_defaults(func=lambda _c, _a: related.print_help(), needs_session=False)
    related_sub = related.add_subparsers(dest="subcommand")

    r_types = related_sub.add_parser("types", help="List relations of a module")
    r_types.add_argument("module", choices=MODULE_CHOICES, metavar="module", help="Module key")
    r_types.set_defaults(func=cmd_related_types, needs_session=True)

    r_get = related_sub.add_parser("get", help="Get records related to a record")
    _add_record_args(r_get)
    r_get.add_argument("related_module", choices=MODULE_CHOICES, metavar="related_module", help="Related module key")
    r_get.add_argument("label", help="Relation label")
    r_get.set_defaults(func=cmd_related_get, needs_session=True)

    r_query = related_sub.add_parser("query", help="Query records related to a record")
    _add_record_args(r_query)
    r_query.add_argument("label", help="Relation label")
    r_query.set_defaults(func=cmd_related_query, needs_session=True)

    r_add = related_sub.add_parser("add", help="Relate two records")
    _add_record_args(r_add)
    r_add.add_argument("related_module", choices=MODULE_CHOICES, metavar="related_module", help="Related module key")
    r_add.add_argument("related_record", help="Related record number")
    r_add.add_argument("label", help="Relation label")
    r_add.set_defaults(func=cmd_related_add, needs_session=True)

    r_delete = related_sub.add_parser("delete", help="Break the relationship between two records")
    _add_record_args(r_delete)
    r_delete.add_argument("related_module", choices=MODULE_CHOICES, metavar="related_module", help="Related module key")
    r_delete.add_argument("related_record", help="Related record number")
    r_delete.set_defaults(func=cmd_related_delete, needs_session=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    client = VtigerClient(url=args.url, username=args.username, access_key=args.access_key)
    needs_session = getattr(args, "needs_session", True)

    if needs_session:
        try:
            client.login()
        except VtigerError as e:
            error_output(e)

    try:
        args.func(client, args)
    except SystemExit:
        # Command already reported its error; close the session but keep its exit status
        if needs_session:
            try:
                client.logout()
            except VtigerError as e:
                logger.warning("Logout failed: %s", e.message)
        raise

    if needs_session:
        try:
            client.logout()
        except VtigerError as e:
            error_output(e)


if __name__ == "__main__":
    main()

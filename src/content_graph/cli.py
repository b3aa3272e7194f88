"""Command-line interface for the content relationship graph.

Every command runs against the content REST backend configured through
the environment (a ``.env`` file is loaded first):

  CONTENT_API_URL     Backend API root (required)
  CONTENT_API_TOKEN   Bearer token (optional)
  CONTENT_ACTOR       Identity written to audit fields (default: admin)

Entities are addressed as TYPE:ID, e.g. ``Word:12`` or ``Image:7``.
"""

import argparse
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import DEFAULT_ACTOR
from .exceptions import ApiConfigError
from .models import EntityRef, RelationshipLabel
from .service import CommandResult, CommandStatus, ContentGraphService
from .store import HttpRecordStore, StoreConfig
from .validation import format_fix_preview

console = Console()

_STATUS_STYLES = {
    CommandStatus.OK: "green",
    CommandStatus.NOOP: "yellow",
    CommandStatus.BLOCKED: "red",
    CommandStatus.ERROR: "red",
}


def _entity_ref(value: str) -> EntityRef:
    try:
        return EntityRef.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _label(value: str) -> str:
    choices = ", ".join(label.value for label in RelationshipLabel)
    try:
        RelationshipLabel(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown relationship type {value!r} (choose from {choices})") from None
    return value


def _create_relationship_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Create the relations, link, unlink, allowed and suggest parsers.

    Args:
        subparsers: Subparsers action to add the commands to.
    """
    relations = subparsers.add_parser("relations", help="List relationships of an entity")
    relations.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")

    link = subparsers.add_parser(
        "link",
        help="Link an entity to one or more targets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Link an entity to one or more targets. Already linked pairs get the new
relationship types added to their existing relationship.

Examples:
  content-graph link Word:12 WordEN:4 -t translation
  content-graph link Word:12 Image:7 Image:9 -t translation -t antonym
        """,
    )
    link.add_argument("ref", type=_entity_ref, help="Acting entity as TYPE:ID")
    link.add_argument("targets", type=_entity_ref, nargs="+", help="Targets as TYPE:ID")
    link.add_argument(
        "-t",
        "--type",
        dest="labels",
        type=_label,
        action="append",
        required=True,
        help="Relationship type (repeatable)",
    )

    unlink = subparsers.add_parser("unlink", help="Delete one relationship")
    unlink.add_argument("edge_id", help="Relationship id")

    allowed = subparsers.add_parser(
        "allowed", help="Show relationship types allowed between content types"
    )
    allowed.add_argument("source_type", help="Content type of the acting entity")
    allowed.add_argument("target_types", nargs="+", help="Content types of the selected targets")

    suggest = subparsers.add_parser("suggest", help="Suggest likely relationship targets")
    suggest.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")


def _create_tag_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Create the tag management parsers.

    Args:
        subparsers: Subparsers action to add the commands to.
    """
    tags = subparsers.add_parser("tags", help="List tags of an entity")
    tags.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")

    tag = subparsers.add_parser("tag", help="Assign a tag (created if missing)")
    tag.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")
    tag.add_argument("name", help="Tag name")

    untag = subparsers.add_parser("untag", help="Remove a tag from an entity")
    untag.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")
    untag.add_argument("name", help="Tag name or id")

    subparsers.add_parser("tag-usage", help="List every tag with its usage count")

    delete_tag = subparsers.add_parser("delete-tag", help="Delete a tag and all its assignments")
    delete_tag.add_argument("name", help="Tag name or id")


def _create_delete_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Create the delete and bulk-delete parsers.

    Args:
        subparsers: Subparsers action to add the commands to.
    """
    delete = subparsers.add_parser(
        "delete", help="Delete an entity with its relationships and tags"
    )
    delete.add_argument("ref", type=_entity_ref, help="Entity as TYPE:ID")

    bulk = subparsers.add_parser(
        "bulk-delete",
        help="Delete several entities of one type",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Delete several entities of one content type. Entities used by games are
skipped; every id is reported as deleted, skipped or failed.

Example:
  content-graph bulk-delete Word 12 13 14
        """,
    )
    bulk.add_argument("content_type", help="Content type")
    bulk.add_argument("ids", nargs="+", help="Entity ids")


def _create_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the validate subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check relationship integrity and optionally merge duplicates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Check the relationship graph and optionally repair it.

Checks performed:
  - Duplicate relationships for the same pair of entities
  - Relationships pointing at deleted entities
  - Relationship types not allowed for their content types

Examples:
  content-graph validate
  content-graph validate -o integrity_report.md
  content-graph validate --fix --dry-run
  content-graph validate --fix
        """,
    )
    validate_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Save the report to this file (markdown format)",
    )
    validate_parser.add_argument(
        "--fix",
        action="store_true",
        help="Merge duplicate relationships into the oldest one",
    )
    validate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what --fix would do without applying it",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every subcommand."""
    parser = argparse.ArgumentParser(
        prog="content-graph",
        description="Manage relationships and tags of game content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Required environment variables:
  CONTENT_API_URL    - Content backend API root
  CONTENT_API_TOKEN  - Bearer token (if the backend requires one)
  CONTENT_ACTOR      - Audit identity for new relationships (default: admin)
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    _create_relationship_parsers(subparsers)
    _create_tag_parsers(subparsers)
    _create_delete_parsers(subparsers)
    _create_validate_parser(subparsers)
    return parser


def _print_result(result: CommandResult) -> None:
    style = _STATUS_STYLES[result.status]
    console.print(f"[{style}]{escape(result.message)}[/]")


def _render(command: str, result: CommandResult) -> None:
    """Print the payload of a command result."""
    if command == "relations" and result.data:
        table = Table("Edge", "Counterpart", "Name", "Types")
        for row in result.data:
            table.add_row(row["edge_id"], row["counterpart"], row["name"], ", ".join(row["labels"]))
        console.print(table)
    elif command == "suggest" and result.data:
        table = Table("Entity", "Type", "Score")
        for suggestion in result.data:
            table.add_row(
                str(suggestion.ref),
                suggestion.label.display_name,
                f"{suggestion.score:.0f}",
            )
        console.print(table)
    elif command == "tag-usage" and result.data:
        table = Table("Id", "Tag", "Uses")
        for tag, count in result.data:
            table.add_row(tag.id, tag.name, str(count))
        console.print(table)
    elif command == "bulk-delete" and result.data:
        for item in result.data.deleted:
            console.print(f"  [green]deleted[/] {item.entity_id} {item.display_name}")
        for item in result.data.skipped:
            console.print(
                f"  [yellow]skipped[/] {item.entity_id} {item.display_name} "
                f"(used by {item.reference_count} game(s))"
            )
        for item in result.data.errors:
            console.print(f"  [red]failed[/] {item.entity_id}: {item.error}")
    elif command == "link" and result.data:
        for failure in result.data.failures:
            console.print(f"  [red]failed[/] {failure.item}: {failure.error}")
    _print_result(result)


async def _run_validate(service: ContentGraphService, args: argparse.Namespace) -> CommandResult:
    console.print("[bold cyan]Content Graph Validation[/]")
    if args.dry_run and args.fix:
        console.print("[yellow]Dry run mode - showing what would be fixed[/]")
    console.print()

    result = await service.validate(fix=args.fix, dry_run=args.dry_run)
    if result.data:
        if result.data["fix"] is not None:
            console.print(format_fix_preview(result.data["fix"]), markup=False)
            console.print()
        report = result.data["report"]
        console.print(report.to_markdown(), markup=False)
        if args.output:
            report.save(args.output)
            console.print()
            console.print(f"[green]Report saved to: {args.output}[/]")
    _print_result(result)
    return result


async def _run_command(args: argparse.Namespace) -> CommandResult:
    """Open the backend store and run one subcommand.

    Args:
        args: Parsed command-line arguments.

    Raises:
        ApiConfigError: If CONTENT_API_URL is not set.
    """
    config = StoreConfig.from_env()
    actor = os.getenv("CONTENT_ACTOR", DEFAULT_ACTOR)

    async with HttpRecordStore(config) as store:
        service = ContentGraphService(store, actor=actor)
        if args.command == "validate":
            return await _run_validate(service, args)
        if args.command == "relations":
            result = await service.relations(args.ref)
        elif args.command == "link":
            result = await service.link(args.ref, args.targets, args.labels)
        elif args.command == "unlink":
            result = await service.unlink(args.edge_id)
        elif args.command == "suggest":
            result = await service.suggest(args.ref)
        elif args.command == "tags":
            result = await service.tags_for(args.ref)
        elif args.command == "tag":
            result = await service.tag(args.ref, args.name)
        elif args.command == "untag":
            result = await service.untag(args.ref, args.name)
        elif args.command == "tag-usage":
            result = await service.tag_usage()
        elif args.command == "delete-tag":
            result = await service.delete_tag(args.name)
        elif args.command == "delete":
            result = await service.delete(args.ref)
        elif args.command == "bulk-delete":
            result = await service.bulk_delete(args.content_type, args.ids)
        else:
            msg = f"Unknown command: {args.command}"
            raise ValueError(msg)
    _render(args.command, result)
    return result


def main(argv: list[str] | None = None) -> None:
    """Run the content graph CLI.

    Exits with status 1 when a command is refused or fails.
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    if args.command == "allowed":
        service_result = ContentGraphService.allowed(args.source_type, args.target_types)
        _print_result(service_result)
        raise SystemExit(0 if service_result.ok else 1)

    try:
        result = asyncio.run(_run_command(args))
    except ApiConfigError:
        console.print("\n[red]Error: Content API configuration missing[/]")
        console.print("Set: [cyan]CONTENT_API_URL[/] (and [cyan]CONTENT_API_TOKEN[/] if required)")
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        raise SystemExit(1) from None
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/]")
        raise SystemExit(1) from None

    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

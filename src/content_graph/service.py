"""Command facade for the console.

Every console command goes through ``ContentGraphService`` and comes back
as a ``CommandResult``. Nothing expected raises across this boundary: the
status tells "done", "nothing to do", "refused by policy" and "broke"
apart, and ``data`` carries the structured payload.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from content_graph.catalog import EntityCatalog, display_name
from content_graph.config import DEFAULT_ACTOR
from content_graph.exceptions import (
    ProtectedReferenceError,
    RelationshipValidationError,
    UnknownContentTypeError,
)
from content_graph.graph import RelationshipGraph, allowed_for_selection
from content_graph.integrity import IntegrityGuard
from content_graph.models import EntityRef, RelationshipLabel, Tag, UpsertOutcome
from content_graph.snapshot import CatalogSnapshot, load_snapshot
from content_graph.suggestions import MatchSuggestionEngine
from content_graph.tags import TagStore
from content_graph.validation import GraphValidator

if TYPE_CHECKING:
    from content_graph.store.base import RecordStore

logger = structlog.get_logger(__name__)


class CommandStatus(str, Enum):
    """Outcome class of a console command."""

    OK = "ok"
    NOOP = "noop"
    BLOCKED = "blocked"
    ERROR = "error"


@dataclass
class CommandResult:
    """Result of one console command.

    Attributes:
        status: ok, noop (nothing to do), blocked (policy) or error.
        message: Human-readable summary.
        data: Structured payload, command specific.
    """

    status: CommandStatus
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status in (CommandStatus.OK, CommandStatus.NOOP)


class ContentGraphService:
    """Composes catalog, graph, tags and guard behind console commands.

    Example:
        async with HttpRecordStore(StoreConfig.from_env()) as store:
            service = ContentGraphService(store, actor="editor@example.com")
            result = await service.link(EntityRef.parse("Word:12"), [EntityRef.parse("Image:7")], ["translation"])
            print(result.status, result.message)
    """

    def __init__(self, store: RecordStore, actor: str = DEFAULT_ACTOR) -> None:
        self.store = store
        self.catalog = EntityCatalog(store)
        self.graph = RelationshipGraph(store, actor=actor)
        self.tags = TagStore(store)
        self.guard = IntegrityGuard(self.catalog, self.graph, self.tags)

    @staticmethod
    def _error(action: str, error: Exception, **context: Any) -> CommandResult:
        logger.exception(f"{action} failed", **context)
        return CommandResult(CommandStatus.ERROR, f"{action} failed: {error}")

    async def relations(self, ref: EntityRef) -> CommandResult:
        """Relationships shown for an entity, with counterpart names."""
        edges = await self.graph.list_edges(ref)
        rows = []
        for edge in edges:
            other = edge.counterpart(ref)
            entity = await self.catalog.get_entity(other)
            rows.append(
                {
                    "edge_id": edge.id,
                    "counterpart": str(other),
                    "name": display_name(entity),
                    "labels": edge.relationship_types,
                }
            )
        if not rows:
            return CommandResult(CommandStatus.NOOP, f"{ref} has no relationships", rows)
        return CommandResult(CommandStatus.OK, f"{len(rows)} relationship(s)", rows)

    @staticmethod
    def allowed(source_type: str, target_types: Iterable[str]) -> CommandResult:
        """Labels selectable for linking one type to every given target type."""
        labels = sorted(allowed_for_selection(source_type, target_types), key=lambda label: label.value)
        if not labels:
            return CommandResult(CommandStatus.BLOCKED, "No relationship type is allowed for this selection", [])
        names = ", ".join(f"{label.value} ({label.display_name})" for label in labels)
        return CommandResult(CommandStatus.OK, names, labels)

    async def link(
        self,
        ref: EntityRef,
        targets: Iterable[EntityRef],
        labels: Iterable[str | RelationshipLabel],
    ) -> CommandResult:
        """Link an entity to one or more targets."""
        try:
            result = await self.graph.bulk_upsert(ref, targets, labels)
        except RelationshipValidationError as e:
            return CommandResult(CommandStatus.BLOCKED, str(e))
        except Exception as e:
            return self._error("Link", e, source=str(ref))

        if result.failed:
            return CommandResult(
                CommandStatus.ERROR,
                f"{result.succeeded} relationship(s) created or updated, {result.failed} failed",
                result,
            )
        if all(outcome.outcome == UpsertOutcome.UNCHANGED for outcome in result.outcomes):
            return CommandResult(CommandStatus.NOOP, "Already linked with these relationship types", result)
        return CommandResult(
            CommandStatus.OK, f"{result.succeeded} relationship(s) created or updated", result
        )

    async def unlink(self, edge_id: str) -> CommandResult:
        """Delete one relationship."""
        try:
            await self.graph.delete_edge(edge_id)
        except Exception as e:
            return self._error("Unlink", e, edge_id=edge_id)
        return CommandResult(CommandStatus.OK, f"Relationship {edge_id} deleted")

    async def suggest(self, ref: EntityRef, snapshot: CatalogSnapshot | None = None) -> CommandResult:
        """Potential matches for an entity.

        Args:
            ref: The entity.
            snapshot: Snapshot to search; a fresh one is loaded when omitted.
        """
        if snapshot is None:
            snapshot = await load_snapshot(self.catalog)
        entity = snapshot.get(ref)
        if entity is None:
            return CommandResult(CommandStatus.NOOP, f"{ref} not found", [])
        suggestions = MatchSuggestionEngine(snapshot).suggest(ref.type, entity)
        if not suggestions:
            return CommandResult(CommandStatus.NOOP, "No suggestions", [])
        return CommandResult(CommandStatus.OK, f"{len(suggestions)} suggestion(s)", suggestions)

    async def tags_for(self, ref: EntityRef) -> CommandResult:
        tags = await self.tags.list_tags_for(ref)
        if not tags:
            return CommandResult(CommandStatus.NOOP, f"{ref} has no tags", [])
        return CommandResult(CommandStatus.OK, ", ".join(tag.name for tag in tags), tags)

    async def _find_tag(self, name_or_id: str) -> Tag | None:
        wanted = name_or_id.strip()
        for tag in await self.tags.list_tags():
            if wanted in (tag.id, tag.name):
                return tag
        return None

    async def tag(self, ref: EntityRef, name: str) -> CommandResult:
        """Assign a tag by name, creating the tag when it does not exist."""
        try:
            tag = await self._find_tag(name)
            if tag is None:
                tag = await self.tags.create_and_assign(ref, name)
                return CommandResult(CommandStatus.OK, f"Created tag '{tag.name}' and assigned it", tag)
            if not await self.tags.assign(ref, tag.id):
                return CommandResult(CommandStatus.NOOP, f"'{tag.name}' is already assigned", tag)
        except ValueError as e:
            return CommandResult(CommandStatus.BLOCKED, str(e))
        except Exception as e:
            return self._error("Tag", e, entity=str(ref))
        return CommandResult(CommandStatus.OK, f"Assigned '{tag.name}'", tag)

    async def untag(self, ref: EntityRef, name: str) -> CommandResult:
        try:
            tag = await self._find_tag(name)
            if tag is None:
                return CommandResult(CommandStatus.NOOP, f"No tag named '{name}'")
            removed = await self.tags.unassign(ref, tag.id)
        except Exception as e:
            return self._error("Untag", e, entity=str(ref))
        if not removed:
            return CommandResult(CommandStatus.NOOP, f"'{tag.name}' was not assigned", 0)
        return CommandResult(CommandStatus.OK, f"Removed '{tag.name}'", removed)

    async def tag_usage(self) -> CommandResult:
        """Every tag with its assignment count."""
        tags = await self.tags.list_tags()
        usage = await self.tags.usage_counts()
        rows = [(tag, usage.get(tag.id, 0)) for tag in tags]
        if not rows:
            return CommandResult(CommandStatus.NOOP, "No tags", rows)
        return CommandResult(CommandStatus.OK, f"{len(rows)} tag(s)", rows)

    async def delete_tag(self, name: str) -> CommandResult:
        """Delete a tag and every assignment of it."""
        try:
            tag = await self._find_tag(name)
            if tag is None:
                return CommandResult(CommandStatus.NOOP, f"No tag named '{name}'")
            removed = await self.tags.delete_tag(tag.id)
        except Exception as e:
            return self._error("Delete tag", e, tag=name)
        return CommandResult(CommandStatus.OK, f"Deleted '{tag.name}' ({removed} assignment(s))", removed)

    async def delete(self, ref: EntityRef) -> CommandResult:
        """Delete one entity after cleaning up its relationships and tags."""
        try:
            result = await self.guard.delete_entity(ref)
        except ProtectedReferenceError as e:
            return CommandResult(CommandStatus.BLOCKED, str(e), e.reference_count)
        except UnknownContentTypeError as e:
            return CommandResult(CommandStatus.ERROR, str(e))
        except Exception as e:
            return self._error("Delete", e, entity=str(ref))
        return CommandResult(
            CommandStatus.OK,
            f"Deleted {ref} ({result.edges_removed} relationship(s), {result.tags_removed} tag(s))",
            result,
        )

    async def bulk_delete(self, content_type: str, ids: Iterable[str]) -> CommandResult:
        """Delete several entities; the payload partitions every id."""
        result = await self.guard.bulk_delete(content_type, ids)
        message = (
            f"{len(result.deleted)} deleted, {len(result.skipped)} skipped, "
            f"{len(result.errors)} failed"
        )
        if result.errors:
            return CommandResult(CommandStatus.ERROR, message, result)
        if result.skipped:
            return CommandResult(CommandStatus.BLOCKED, message, result)
        if not result.deleted:
            return CommandResult(CommandStatus.NOOP, "Nothing to delete", result)
        return CommandResult(CommandStatus.OK, message, result)

    async def validate(self, fix: bool = False, dry_run: bool = False) -> CommandResult:
        """Check graph integrity, optionally merging duplicate relationships first.

        The payload is ``{"report": IntegrityReport, "fix": stats or None}``.
        """
        try:
            validator = GraphValidator(self.store, await load_snapshot(self.catalog))
            fix_stats = await validator.merge_duplicate_edges(dry_run=dry_run) if fix else None
            report = await validator.validate()
        except Exception as e:
            return self._error("Validation", e)
        data = {"report": report, "fix": fix_stats}
        if fix_stats and fix_stats["errors"]:
            return CommandResult(CommandStatus.ERROR, f"{len(fix_stats['errors'])} repair(s) failed", data)
        if report.validation_passed:
            return CommandResult(CommandStatus.OK, "No integrity problems found", data)
        return CommandResult(CommandStatus.OK, "Integrity problems found", data)

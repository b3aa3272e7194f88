"""Integrity guard: safe deletion of content entities.

An entity used inside a game (any edge whose other endpoint is a ``Game``)
cannot be deleted. Otherwise deletion removes every edge and tag assignment
that points at the entity first, one row at a time, and only deletes the
entity itself when that cleanup finished completely, so a failed cleanup
never leaves rows pointing at a missing entity.

Protection checks always read the store; a failed read is an error, never
"not protected".
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from content_graph.catalog import display_name, get_catalog_entry
from content_graph.config import PROTECTED_REFERENCE_TYPE
from content_graph.exceptions import (
    CascadeIncompleteError,
    ProtectedReferenceError,
    UnknownContentTypeError,
)
from content_graph.models import (
    BulkDeleteResult,
    CascadeResult,
    DeletedItem,
    Edge,
    EntityRef,
    ErroredItem,
    SkippedItem,
)

if TYPE_CHECKING:
    from content_graph.catalog import EntityCatalog
    from content_graph.graph.relationships import RelationshipGraph
    from content_graph.tags import TagStore

logger = structlog.get_logger(__name__)


class IntegrityGuard:
    """Coordinates protected-reference checks and cascading deletes.

    Example:
        guard = IntegrityGuard(catalog, graph, tags)
        result = await guard.bulk_delete("Word", ["12", "13", "14"])
        for item in result.skipped:
            print(item.display_name, item.reference_count)
    """

    def __init__(self, catalog: EntityCatalog, graph: RelationshipGraph, tags: TagStore) -> None:
        self._catalog = catalog
        self._graph = graph
        self._tags = tags

    async def protected_references(self, ref: EntityRef) -> list[Edge]:
        """Edges linking the entity to a game, read live.

        Raises:
            StoreError: If the relationships cannot be read.
        """
        edges = await self._graph.edges_touching(ref, include_protected=True, strict=True)
        return [edge for edge in edges if edge.counterpart(ref).type == PROTECTED_REFERENCE_TYPE]

    async def has_protected_references(self, ref: EntityRef) -> bool:
        """Whether a game uses the entity."""
        return bool(await self.protected_references(ref))

    async def cascade_delete(self, ref: EntityRef) -> CascadeResult:
        """Remove every edge and tag assignment referencing an entity.

        Rows are deleted one at a time; failures are logged and collected
        without stopping the remaining rows.

        Raises:
            ProtectedReferenceError: If a game uses the entity. Nothing is removed.
            StoreError: If the protection check cannot read the store.
        """
        protected = await self.protected_references(ref)
        if protected:
            logger.warning(
                "Delete refused, entity is used by games",
                entity_type=ref.type,
                entity_id=ref.id,
                games=len(protected),
            )
            raise ProtectedReferenceError(ref.type, ref.id, len(protected))

        result = CascadeResult()
        try:
            edges = await self._graph.edges_touching(ref, include_protected=True, strict=True)
        except Exception as e:
            logger.exception("Failed to read relationships for cleanup", entity_type=ref.type, entity_id=ref.id)
            result.edge_failures.append(str(e))
            edges = []

        for edge in edges:
            try:
                await self._graph.delete_edge(edge.id)
                result.edges_removed += 1
            except Exception as e:
                logger.exception("Failed to remove relationship", edge_id=edge.id)
                result.edge_failures.append(f"relationship {edge.id}: {e}")

        tally = await self._tags.remove_all_for(ref)
        result.tags_removed = tally.removed
        result.tag_failures = tally.failures

        logger.info(
            "Cascade finished",
            entity_type=ref.type,
            entity_id=ref.id,
            edges_removed=result.edges_removed,
            tags_removed=result.tags_removed,
            failures=len(result.failures),
        )
        return result

    async def delete_entity(self, ref: EntityRef) -> CascadeResult:
        """Cascade, then delete the entity itself.

        Raises:
            UnknownContentTypeError: If the type has no catalog entry.
            ProtectedReferenceError: If a game uses the entity.
            CascadeIncompleteError: If some rows could not be removed; the
                entity is left in place and the error carries the partial counts.
            StoreError: If the protection check or the entity delete fails.
        """
        if get_catalog_entry(ref.type) is None:
            raise UnknownContentTypeError(ref.type)

        result = await self.cascade_delete(ref)
        if not result.complete:
            raise CascadeIncompleteError(
                ref.type, ref.id, result.edges_removed, result.tags_removed, result.failures
            )

        await self._catalog.delete_entity(ref)
        result.entity_deleted = True
        return result

    async def bulk_delete(self, content_type: str, ids: Iterable[str]) -> BulkDeleteResult:
        """Delete several entities of one type, one after the other.

        Every id ends up in exactly one bucket: ``deleted``, ``skipped``
        (used by games, with the blocking count) or ``errors`` (not found,
        incomplete cleanup or store failure, with the detail).
        """
        result = BulkDeleteResult()
        for entity_id in ids:
            ref = EntityRef(type=content_type, id=entity_id)
            name = ref.id
            try:
                if get_catalog_entry(content_type) is None:
                    raise UnknownContentTypeError(content_type)
                entity = await self._catalog.get_entity(ref)
                if entity is None:
                    result.errors.append(ErroredItem(entity_id=ref.id, error="Entity not found"))
                    continue
                name = display_name(entity)
                cascade = await self.delete_entity(ref)
                result.deleted.append(
                    DeletedItem(
                        entity_id=ref.id,
                        display_name=name,
                        edges_removed=cascade.edges_removed,
                        tags_removed=cascade.tags_removed,
                    )
                )
            except ProtectedReferenceError as e:
                result.skipped.append(
                    SkippedItem(entity_id=ref.id, display_name=name, reference_count=e.reference_count)
                )
            except Exception as e:
                logger.exception("Failed to delete entity", entity_type=content_type, entity_id=ref.id)
                result.errors.append(ErroredItem(entity_id=ref.id, error=str(e)))

        logger.info(
            "Bulk delete finished",
            content_type=content_type,
            deleted=len(result.deleted),
            skipped=len(result.skipped),
            errors=len(result.errors),
        )
        return result

"""Relationship graph store.

Edges live in the ``contentrelationship`` collection. Each row has a
direction, but the graph treats a pair of entities as unordered: every
lookup reads both directions and merges the results, and at most one edge
is kept per pair. Linking an already-linked pair extends the label set of
the existing edge instead of creating a second row.

Edges touching a ``Game`` are read for integrity checks but never shown,
created or edited here.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
import structlog

from content_graph.config import DEFAULT_ACTOR, RELATIONSHIP_COLLECTION
from content_graph.exceptions import RelationshipValidationError, StoreError
from content_graph.graph.compatibility import validate_selection
from content_graph.models import (
    BulkUpsertResult,
    Edge,
    EntityRef,
    ItemFailure,
    Provenance,
    RelationshipLabel,
    UpsertOutcome,
    UpsertResult,
)

if TYPE_CHECKING:
    from content_graph.store.base import RecordCollection, RecordStore

logger = structlog.get_logger(__name__)


def _as_source(ref: EntityRef) -> dict[str, str]:
    return {"source_id": ref.id, "source_type": ref.type}


def _as_target(ref: EntityRef) -> dict[str, str]:
    return {"target_id": ref.id, "target_type": ref.type}


class RelationshipGraph:
    """Typed, bidirectional edges between content entities.

    Example:
        graph = RelationshipGraph(store, actor="editor@example.com")
        result = await graph.upsert_edge(word_ref, image_ref, {"translation"})
        edges = await graph.list_edges(word_ref)
    """

    def __init__(self, store: RecordStore, actor: str = DEFAULT_ACTOR) -> None:
        """Initialize the graph.

        Args:
            store: Record store holding the relationship collection.
            actor: Identity written to the audit fields of new edges.
        """
        self._edges: RecordCollection = store.collection(RELATIONSHIP_COLLECTION)
        self.actor = actor or DEFAULT_ACTOR

    async def _read_both_directions(
        self,
        as_source: dict[str, str],
        as_target: dict[str, str],
        strict: bool = False,
    ) -> list[Edge]:
        """Run the two directional reads and merge them, each edge id once.

        Unreadable rows are skipped, or raise StoreError when ``strict`` is set.
        """
        outgoing = await self._edges.find(as_source)
        incoming = await self._edges.find(as_target)
        edges: dict[str, Edge] = {}
        for record in [*outgoing, *incoming]:
            edge = self._parse(record, strict)
            if edge is not None and edge.id not in edges:
                edges[edge.id] = edge
        return list(edges.values())

    @staticmethod
    def _parse(record: dict[str, Any], strict: bool = False) -> Edge | None:
        try:
            return Edge.model_validate(record)
        except ValidationError as e:
            if strict:
                raise StoreError(
                    RELATIONSHIP_COLLECTION, "find", f"unreadable relationship {record.get('id')}: {e}"
                ) from e
            logger.warning("Skipping unreadable edge", edge_id=record.get("id"), errors=e.error_count())
            return None

    async def edges_touching(
        self,
        ref: EntityRef,
        include_protected: bool = True,
        strict: bool = False,
    ) -> list[Edge]:
        """Every edge with ``ref`` as source or target.

        Args:
            ref: The entity.
            include_protected: Keep edges whose other endpoint is a game.
            strict: Propagate read failures and unreadable rows instead of
                returning an empty list or skipping the row.

        Raises:
            StoreError: On read failure or an unreadable row when ``strict`` is set.
        """
        try:
            edges = await self._read_both_directions(_as_source(ref), _as_target(ref), strict)
        except StoreError as e:
            if strict:
                raise
            logger.warning(
                "Failed to read relationships",
                entity_type=ref.type,
                entity_id=ref.id,
                error=str(e),
            )
            return []
        if not include_protected:
            edges = [edge for edge in edges if not edge.is_protected]
        return edges

    async def list_edges(self, ref: EntityRef) -> list[Edge]:
        """Edges shown for an entity: both directions, no game edges, no repeats."""
        return await self.edges_touching(ref, include_protected=False)

    async def find_edge_between(self, a: EntityRef, b: EntityRef) -> Edge | None:
        """The edge linking two entities in either direction, if any.

        Read failures and unreadable rows propagate: this lookup guards writes, and treating a
        failed read as "not linked" would create duplicate edges.
        """
        edges = await self._read_both_directions(
            {**_as_source(a), **_as_target(b)},
            {**_as_source(b), **_as_target(a)},
            strict=True,
        )
        return edges[0] if edges else None

    async def upsert_edge(
        self,
        ref: EntityRef,
        target: EntityRef,
        labels: Iterable[str | RelationshipLabel],
    ) -> UpsertResult:
        """Link two entities, merging into an existing edge when there is one.

        Args:
            ref: The acting entity; becomes the source of a new edge.
            target: The other entity.
            labels: Labels to put on the edge.

        Returns:
            UpsertResult saying whether the edge was created, extended or
            already carried every requested label.

        Raises:
            RelationshipValidationError: If the labels are not allowed for the pair.
            StoreError: If a read or write fails.
        """
        if ref == target:
            raise RelationshipValidationError(ref.type, target.type, "an entity cannot link to itself")
        requested = validate_selection(ref.type, [target.type], labels)
        return await self._upsert_validated(ref, target, self._ordered(requested))

    async def _upsert_validated(
        self,
        ref: EntityRef,
        target: EntityRef,
        requested: list[str],
    ) -> UpsertResult:
        existing = await self.find_edge_between(ref, target)
        if existing is None:
            record = await self._edges.create(
                {
                    **_as_source(ref),
                    **_as_target(target),
                    "relationship_types": requested,
                    "added_by": self.actor,
                    "is_approved": True,
                    "approved_by": self.actor,
                    "source": Provenance.MANUAL.value,
                }
            )
            edge = Edge.model_validate(record)
            logger.info("Created relationship", edge_id=edge.id, source=str(ref), target=str(target))
            return UpsertResult(UpsertOutcome.CREATED, edge, added_labels=list(requested))

        new_labels = [label for label in requested if label not in existing.relationship_types]
        if not new_labels:
            logger.debug("Relationship already has every label", edge_id=existing.id)
            return UpsertResult(UpsertOutcome.UNCHANGED, existing)

        merged = [*existing.relationship_types, *new_labels]
        record = await self._edges.update(existing.id, {"relationship_types": merged})
        edge = Edge.model_validate(record)
        logger.info("Extended relationship", edge_id=edge.id, added=new_labels)
        return UpsertResult(UpsertOutcome.UPDATED, edge, added_labels=new_labels)

    @staticmethod
    def _ordered(labels: Iterable[RelationshipLabel]) -> list[str]:
        """Label values in vocabulary order, so writes are deterministic."""
        chosen = set(labels)
        return [label.value for label in RelationshipLabel if label in chosen]

    async def delete_edge(self, edge_id: str) -> None:
        """Delete one edge by id.

        Raises:
            StoreError: If the delete fails.
        """
        await self._edges.delete(edge_id)
        logger.info("Deleted relationship", edge_id=edge_id)

    async def bulk_upsert(
        self,
        ref: EntityRef,
        targets: Iterable[EntityRef],
        labels: Iterable[str | RelationshipLabel],
    ) -> BulkUpsertResult:
        """Link one entity to several targets with the same labels.

        The whole selection is validated first; a policy violation rejects the
        batch before anything is written. Targets are then processed one at a
        time, and a failed target never stops the rest.

        Raises:
            RelationshipValidationError: If the labels are not allowed for
                every selected target.
        """
        targets = list(targets)
        for target in targets:
            if target == ref:
                raise RelationshipValidationError(ref.type, target.type, "an entity cannot link to itself")
        requested = self._ordered(validate_selection(ref.type, [t.type for t in targets], labels))

        result = BulkUpsertResult()
        for target in targets:
            try:
                result.outcomes.append(await self._upsert_validated(ref, target, requested))
            except Exception as e:
                logger.exception("Failed to link target", source=str(ref), target=str(target))
                result.failures.append(ItemFailure(item=str(target), error=str(e)))

        logger.info(
            "Bulk link finished",
            source=str(ref),
            succeeded=result.succeeded,
            failed=result.failed,
        )
        return result

    async def counterpart_counts(self, ref: EntityRef) -> dict[str, int]:
        """Number of shown edges per counterpart content type."""
        edges = await self.list_edges(ref)
        counts = Counter(edge.counterpart(ref).type for edge in edges)
        return dict(counts)

"""Result structures returned by graph, tag and integrity operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from content_graph.models.content import ContentEntity, EntityRef
from content_graph.models.graph import Edge, RelationshipLabel


class UpsertOutcome(str, Enum):
    """What an edge upsert did."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class UpsertResult:
    """Result of one edge upsert.

    Attributes:
        outcome: Whether the edge was created, extended, or left alone.
        edge: The stored edge after the operation.
        added_labels: Label values that were not on the edge before.
    """

    outcome: UpsertOutcome
    edge: Edge
    added_labels: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether anything was written."""
        return self.outcome != UpsertOutcome.UNCHANGED


@dataclass
class ItemFailure:
    """One failed item inside a batch."""

    item: str
    error: str


@dataclass
class BulkUpsertResult:
    """Tally of a multi-target edge upsert.

    A batch with zero failures is a success even when every target was
    already linked with the requested labels.
    """

    outcomes: list[UpsertResult] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class ItemTally:
    """Removed count plus error messages for rows that could not be removed."""

    removed: int = 0
    failures: list[str] = field(default_factory=list)


@dataclass
class CascadeResult:
    """Outcome of removing everything that references one entity.

    Attributes:
        edges_removed: Relationship rows deleted.
        tags_removed: Tag assignment rows deleted.
        edge_failures: Errors for relationship rows that could not be deleted.
        tag_failures: Errors for tag assignment rows that could not be deleted.
        entity_deleted: Whether the entity row itself was deleted afterwards.
    """

    edges_removed: int = 0
    tags_removed: int = 0
    edge_failures: list[str] = field(default_factory=list)
    tag_failures: list[str] = field(default_factory=list)
    entity_deleted: bool = False

    @property
    def complete(self) -> bool:
        """Whether every referencing row was removed."""
        return not self.edge_failures and not self.tag_failures

    @property
    def failures(self) -> list[str]:
        return [*self.edge_failures, *self.tag_failures]


@dataclass
class DeletedItem:
    """An entity removed by a bulk delete."""

    entity_id: str
    display_name: str
    edges_removed: int = 0
    tags_removed: int = 0


@dataclass
class SkippedItem:
    """An entity a bulk delete refused to remove because games use it."""

    entity_id: str
    display_name: str
    reference_count: int


@dataclass
class ErroredItem:
    """An entity a bulk delete could not remove."""

    entity_id: str
    error: str


@dataclass
class BulkDeleteResult:
    """Three-way partition of a bulk delete.

    Every requested id lands in exactly one of the lists.
    """

    deleted: list[DeletedItem] = field(default_factory=list)
    skipped: list[SkippedItem] = field(default_factory=list)
    errors: list[ErroredItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.deleted) + len(self.skipped) + len(self.errors)


@dataclass(frozen=True)
class MatchSuggestion:
    """A likely relationship target.

    Attributes:
        entity: The candidate record.
        label: Suggested relationship label.
        score: Similarity score used for ordering (0-100).
    """

    entity: ContentEntity
    label: RelationshipLabel
    score: float = 0.0

    @property
    def ref(self) -> EntityRef:
        return self.entity.ref

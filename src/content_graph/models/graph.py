"""Relationship and tag records.

Relationships (``ContentRelationship`` rows) link two entity references and
carry one or more semantic labels. Tags (``GameContentTag`` rows) are
assigned to content items through ``ContentTag`` join rows.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_graph.config import PROTECTED_REFERENCE_TYPE
from content_graph.models.content import EntityRef


class RelationshipLabel(str, Enum):
    """Semantic relationship label."""

    TRANSLATION = "translation"
    ANTONYM = "antonym"
    ATTRIBUTE_OF = "attribute-of"
    LIST_MEMBER = "list-member"

    @property
    def display_name(self) -> str:
        """Hebrew label shown in the console."""
        return LABEL_DISPLAY_NAMES[self]


LABEL_DISPLAY_NAMES: dict[RelationshipLabel, str] = {
    RelationshipLabel.TRANSLATION: "פירוש",
    RelationshipLabel.ANTONYM: "מילים הופכיות",
    RelationshipLabel.ATTRIBUTE_OF: "מאפיין",
    RelationshipLabel.LIST_MEMBER: "פריט ברשימה",
}

# Rows written by the legacy console store the Hebrew display names.
LEGACY_LABELS: dict[str, RelationshipLabel] = {
    display: label for label, display in LABEL_DISPLAY_NAMES.items()
}


def parse_label(value: str | RelationshipLabel) -> RelationshipLabel:
    """Resolve a canonical or legacy label string.

    Args:
        value: Canonical value ('translation'), legacy Hebrew name, or enum member.

    Returns:
        The matching RelationshipLabel.

    Raises:
        ValueError: If the value is not a known label.
    """
    if isinstance(value, RelationshipLabel):
        return value
    cleaned = value.strip()
    if cleaned in LEGACY_LABELS:
        return LEGACY_LABELS[cleaned]
    return RelationshipLabel(cleaned.lower())


def _normalize_label_value(value: str) -> str:
    try:
        return parse_label(value).value
    except ValueError:
        # Keep labels we do not know so merges never drop them
        return value


class Edge(BaseModel):
    """A stored relationship between two entity references.

    Direction is kept as written, but the graph treats the pair as
    unordered: at most one edge should exist per pair of references.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(description="Relationship identifier")
    source_id: str = Field(description="Source record id")
    source_type: str = Field(description="Source content type")
    target_id: str = Field(description="Target record id")
    target_type: str = Field(description="Target content type")
    relationship_types: list[str] = Field(
        default_factory=list, description="Ordered, de-duplicated label values"
    )
    added_by: str | None = None
    # Rows written by other tools may leave the audit fields null or use
    # provenance values outside Provenance.
    is_approved: bool | None = None
    approved_by: str | None = None
    source: str | None = Field(default=None, description="Provenance value, e.g. 'manual' or 'ai'")
    created_date: datetime | None = None

    @field_validator("relationship_types", mode="before")
    @classmethod
    def _coerce_labels(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple, set)):
            value = [value]
        labels: list[str] = []
        for item in value:
            normalized = _normalize_label_value(str(item))
            if normalized not in labels:
                labels.append(normalized)
        return labels

    @property
    def source_ref(self) -> EntityRef:
        """Reference to the source endpoint."""
        return EntityRef(type=self.source_type, id=self.source_id)

    @property
    def target_ref(self) -> EntityRef:
        """Reference to the target endpoint."""
        return EntityRef(type=self.target_type, id=self.target_id)

    @property
    def pair_key(self) -> frozenset[EntityRef]:
        """Unordered endpoint pair."""
        return frozenset({self.source_ref, self.target_ref})

    @property
    def labels(self) -> frozenset[RelationshipLabel]:
        """Known labels carried by this edge."""
        known = set()
        for value in self.relationship_types:
            try:
                known.add(RelationshipLabel(value))
            except ValueError:
                continue
        return frozenset(known)

    @property
    def is_protected(self) -> bool:
        """Whether either endpoint is a game."""
        return PROTECTED_REFERENCE_TYPE in (self.source_type, self.target_type)

    def touches(self, ref: EntityRef) -> bool:
        """Whether ``ref`` is one of the endpoints."""
        return ref in (self.source_ref, self.target_ref)

    def counterpart(self, ref: EntityRef) -> EntityRef:
        """The endpoint on the other side of ``ref``."""
        if self.source_ref == ref:
            return self.target_ref
        return self.source_ref


class Tag(BaseModel):
    """A named content tag."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    created_date: datetime | None = None


class TagAssignment(BaseModel):
    """Join row assigning a tag to one content item."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    content_type: str
    content_id: str
    tag_id: str

    @property
    def ref(self) -> EntityRef:
        """Reference to the tagged content item."""
        return EntityRef(type=self.content_type, id=self.content_id)

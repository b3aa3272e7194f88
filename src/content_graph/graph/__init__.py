"""Relationship graph: compatibility rules and the edge store.

This package contains:
- compatibility: which labels may link two content types
- relationships: RelationshipGraph, the bidirectional edge store
"""

from content_graph.graph.compatibility import (
    allowed_for_selection,
    allowed_relationship_types,
    validate_selection,
)
from content_graph.graph.relationships import RelationshipGraph

__all__ = [
    "allowed_relationship_types",
    "allowed_for_selection",
    "validate_selection",
    "RelationshipGraph",
]

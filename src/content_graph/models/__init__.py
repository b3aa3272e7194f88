"""Pydantic models and result structures for the content graph.

This package contains:
- Content models: the six content variants as a tagged union
- Graph models: relationship edges, labels, tags and tag assignments
- Result structures returned by graph, tag and integrity operations
"""

from content_graph.models.content import (
    QA,
    WORD_LIKE_TYPES,
    Attribute,
    BaseContent,
    ContentEntity,
    ContentList,
    ContentType,
    EntityRef,
    Image,
    Provenance,
    QAAnswer,
    Word,
    WordEN,
    parse_content,
)
from content_graph.models.graph import (
    LABEL_DISPLAY_NAMES,
    LEGACY_LABELS,
    Edge,
    RelationshipLabel,
    Tag,
    TagAssignment,
    parse_label,
)
from content_graph.models.results import (
    BulkDeleteResult,
    BulkUpsertResult,
    CascadeResult,
    DeletedItem,
    ErroredItem,
    ItemFailure,
    ItemTally,
    MatchSuggestion,
    SkippedItem,
    UpsertOutcome,
    UpsertResult,
)

__all__ = [
    # Content
    "ContentType",
    "Provenance",
    "EntityRef",
    "BaseContent",
    "Word",
    "WordEN",
    "Image",
    "QA",
    "QAAnswer",
    "Attribute",
    "ContentList",
    "ContentEntity",
    "WORD_LIKE_TYPES",
    "parse_content",
    # Graph
    "RelationshipLabel",
    "LABEL_DISPLAY_NAMES",
    "LEGACY_LABELS",
    "parse_label",
    "Edge",
    "Tag",
    "TagAssignment",
    # Results
    "UpsertOutcome",
    "UpsertResult",
    "ItemFailure",
    "BulkUpsertResult",
    "ItemTally",
    "CascadeResult",
    "DeletedItem",
    "SkippedItem",
    "ErroredItem",
    "BulkDeleteResult",
    "MatchSuggestion",
]

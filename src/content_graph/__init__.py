"""Content relationship and tagging graph.

Typed, bidirectional relationships between game-content entities (Hebrew
and English words, images, Q&A items, attributes, content lists), tag
assignments, and integrity-preserving deletion that never removes content
used by a game.

Usage:
    from content_graph import ContentGraphService, EntityRef, HttpRecordStore, StoreConfig
    import asyncio

    async def main():
        async with HttpRecordStore(StoreConfig.from_env()) as store:
            service = ContentGraphService(store, actor="editor@example.com")
            await service.link(EntityRef.parse("Word:12"), [EntityRef.parse("WordEN:4")], ["translation"])
            result = await service.bulk_delete("Image", ["7", "9"])
            print(result.message)

    asyncio.run(main())
"""

# =============================================================================
# CATALOG
# =============================================================================
from .catalog import CATALOG, CatalogEntry, EntityCatalog, display_name, get_catalog_entry

# =============================================================================
# EXCEPTIONS
# =============================================================================
from .exceptions import (
    ApiConfigError,
    CascadeIncompleteError,
    ContentGraphError,
    ProtectedReferenceError,
    RelationshipValidationError,
    StoreError,
    UnknownContentTypeError,
)

# =============================================================================
# GRAPH
# =============================================================================
from .graph import (
    RelationshipGraph,
    allowed_for_selection,
    allowed_relationship_types,
    validate_selection,
)
from .integrity import IntegrityGuard
from .models import (
    QA,
    Attribute,
    BulkDeleteResult,
    BulkUpsertResult,
    CascadeResult,
    ContentEntity,
    ContentList,
    ContentType,
    Edge,
    EntityRef,
    Image,
    MatchSuggestion,
    Provenance,
    RelationshipLabel,
    Tag,
    TagAssignment,
    UpsertOutcome,
    UpsertResult,
    Word,
    WordEN,
    parse_content,
)

# =============================================================================
# SERVICE
# =============================================================================
from .service import CommandResult, CommandStatus, ContentGraphService
from .snapshot import CatalogSnapshot, load_snapshot

# =============================================================================
# STORES
# =============================================================================
from .store import HttpRecordStore, InMemoryRecordStore, RecordCollection, RecordStore, StoreConfig
from .suggestions import MatchSuggestionEngine
from .tags import TagStore

# Validation
from .validation import GraphValidator, IntegrityReport, merge_duplicate_edges

__version__ = "0.1.0"

__all__ = [
    # ==========================================================================
    # MODELS
    # ==========================================================================
    "ContentType",
    "Provenance",
    "EntityRef",
    "Word",
    "WordEN",
    "Image",
    "QA",
    "Attribute",
    "ContentList",
    "ContentEntity",
    "parse_content",
    "RelationshipLabel",
    "Edge",
    "Tag",
    "TagAssignment",
    "UpsertOutcome",
    "UpsertResult",
    "BulkUpsertResult",
    "CascadeResult",
    "BulkDeleteResult",
    "MatchSuggestion",
    # ==========================================================================
    # STORES
    # ==========================================================================
    "RecordStore",
    "RecordCollection",
    "InMemoryRecordStore",
    "HttpRecordStore",
    "StoreConfig",
    # ==========================================================================
    # CATALOG
    # ==========================================================================
    "CATALOG",
    "CatalogEntry",
    "EntityCatalog",
    "get_catalog_entry",
    "display_name",
    "CatalogSnapshot",
    "load_snapshot",
    # ==========================================================================
    # GRAPH
    # ==========================================================================
    "allowed_relationship_types",
    "allowed_for_selection",
    "validate_selection",
    "RelationshipGraph",
    "TagStore",
    "IntegrityGuard",
    "MatchSuggestionEngine",
    # Validation
    "GraphValidator",
    "IntegrityReport",
    "merge_duplicate_edges",
    # ==========================================================================
    # SERVICE
    # ==========================================================================
    "ContentGraphService",
    "CommandResult",
    "CommandStatus",
    # ==========================================================================
    # EXCEPTIONS
    # ==========================================================================
    "ContentGraphError",
    "StoreError",
    "RelationshipValidationError",
    "ProtectedReferenceError",
    "CascadeIncompleteError",
    "UnknownContentTypeError",
    "ApiConfigError",
]

"""Read-only snapshot of every catalog entity.

The suggestion engine and the relationship picker search work over a
snapshot taken at a known point in time, so the same snapshot always gives
the same results. Integrity decisions never use a snapshot; they re-read
the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from content_graph.catalog import CATALOG, display_name
from content_graph.config import MAX_SEARCH_RESULTS
from content_graph.models import ContentEntity, ContentType, EntityRef

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from content_graph.catalog import EntityCatalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Every entity per content type, as of ``taken_at``.

    Attributes:
        entities: Entities keyed by content type tag.
        taken_at: When the snapshot was read.
    """

    entities: Mapping[str, tuple[ContentEntity, ...]] = field(default_factory=dict)
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        frozen = {key: tuple(value) for key, value in self.entities.items()}
        object.__setattr__(self, "entities", MappingProxyType(frozen))

    def of_type(self, content_type: ContentType | str) -> tuple[ContentEntity, ...]:
        """Entities of one type; empty for unknown and unimplemented types."""
        key = content_type.value if isinstance(content_type, ContentType) else content_type
        return self.entities.get(key, ())

    def get(self, ref: EntityRef) -> ContentEntity | None:
        for entity in self.of_type(ref.type):
            if entity.id == ref.id:
                return entity
        return None

    def __contains__(self, ref: object) -> bool:
        return isinstance(ref, EntityRef) and self.get(ref) is not None

    def __iter__(self) -> Iterator[ContentEntity]:
        for entities in self.entities.values():
            yield from entities

    def __len__(self) -> int:
        return sum(len(entities) for entities in self.entities.values())

    def search(self, term: str, limit: int = MAX_SEARCH_RESULTS) -> list[ContentEntity]:
        """Cross-type case-insensitive search on display names.

        Args:
            term: Search text. Blank terms match nothing.
            limit: Maximum number of results.

        Returns:
            Matches in catalog order, newest first within a type.
        """
        needle = term.strip().lower()
        if not needle:
            return []
        matches = [entity for entity in self if needle in display_name(entity).lower()]
        return matches[:limit]


async def load_snapshot(catalog: EntityCatalog) -> CatalogSnapshot:
    """Read every catalog type into a new snapshot.

    Types are read one after the other. A failed read leaves that type empty
    (the catalog logs it) instead of failing the whole snapshot.
    """
    entities: dict[str, tuple[ContentEntity, ...]] = {}
    for content_type in CATALOG:
        entities[content_type] = tuple(await catalog.list_entities(content_type))
    snapshot = CatalogSnapshot(entities=entities)
    logger.info(
        "Catalog snapshot loaded",
        total=len(snapshot),
        **{key.lower(): len(value) for key, value in entities.items()},
    )
    return snapshot

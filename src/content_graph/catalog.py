"""Entity catalog: per-content-type lookup table.

Maps a content-type tag to its backend collection, its display function and
its free-text search fields. Unknown tags (and the unimplemented ``Rules``
type) have no entry, so callers see "nothing there" instead of an error.

Example:
    catalog = EntityCatalog(store)
    words = await catalog.list_entities("Word", search="כלב")
    print(catalog.display_name("Word", words[0]))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
import structlog

from content_graph.config import DEFAULT_SORT, UNIMPLEMENTED_CONTENT_TYPES
from content_graph.exceptions import StoreError, UnknownContentTypeError
from content_graph.models import (
    QA,
    Attribute,
    ContentEntity,
    ContentList,
    ContentType,
    EntityRef,
    Image,
    Provenance,
    Word,
    WordEN,
    parse_content,
)
from content_graph.store.base import RecordCollection, RecordStore

logger = structlog.get_logger(__name__)

UNKNOWN_DISPLAY_NAME = "פריט לא מזוהה"


def _word_display(entity: Word) -> str:
    return entity.vocalized or entity.word


def _word_en_display(entity: WordEN) -> str:
    return entity.word


def _image_display(entity: Image) -> str:
    if entity.description:
        return entity.description
    if entity.file_url:
        if entity.is_remote:
            return f"תמונה ({entity.file_url[:30]}...)"
        return f"אימוג׳י ({entity.file_url})"
    return "תמונה"


def _qa_display(entity: QA) -> str:
    return (
        f"{entity.question_text} "
        f"({len(entity.correct_answers)} נכונות, {len(entity.incorrect_answers)} שגויות)"
    )


def _attribute_display(entity: Attribute) -> str:
    return f"{entity.type}: {entity.value}"


def _content_list_display(entity: ContentList) -> str:
    return entity.name


def _word_search(entity: Word) -> list[str]:
    return [entity.vocalized, entity.word, entity.root]


def _word_en_search(entity: WordEN) -> list[str]:
    return [entity.word]


def _image_search(entity: Image) -> list[str]:
    return [entity.description, entity.file_url]


def _qa_search(entity: QA) -> list[str]:
    fields = [entity.question_text]
    fields.extend(answer.answer_text for answer in entity.correct_answers)
    fields.extend(entity.incorrect_answers)
    return fields


def _attribute_search(entity: Attribute) -> list[str]:
    return [entity.type, entity.value]


def _content_list_search(entity: ContentList) -> list[str]:
    return [entity.name, entity.description]


@dataclass(frozen=True)
class CatalogEntry:
    """Lookup row for one content type.

    Attributes:
        content_type: Variant tag.
        collection: Backend collection name.
        label: Hebrew singular name shown in the console.
        plural: Hebrew plural name ("no <plural> yet" messages).
        badge: Short type badge.
        display: Builds the display label of one record.
        search_fields: Returns the strings free-text search matches against.
    """

    content_type: ContentType
    collection: str
    label: str
    plural: str
    badge: str
    display: Callable[[Any], str]
    search_fields: Callable[[Any], list[str]]


CATALOG: dict[str, CatalogEntry] = {
    entry.content_type.value: entry
    for entry in (
        CatalogEntry(
            ContentType.WORD, "word", "מילה בעברית", "מילים בעברית", "HE",
            _word_display, _word_search,
        ),
        CatalogEntry(
            ContentType.WORD_EN, "worden", "מילה באנגלית", "מילים באנגלית", "EN",
            _word_en_display, _word_en_search,
        ),
        CatalogEntry(
            ContentType.IMAGE, "image", "תמונה", "תמונות", "🖼️",
            _image_display, _image_search,
        ),
        CatalogEntry(
            ContentType.QA, "qa", "שאלה ותשובה", "שאלות ותשובות", "❓",
            _qa_display, _qa_search,
        ),
        CatalogEntry(
            ContentType.ATTRIBUTE, "attribute", "תכונה", "תכונות", "🏷️",
            _attribute_display, _attribute_search,
        ),
        CatalogEntry(
            ContentType.CONTENT_LIST, "contentlist", "רשימת תוכן", "רשימות תוכן", "📋",
            _content_list_display, _content_list_search,
        ),
    )
}


def get_catalog_entry(content_type: str) -> CatalogEntry | None:
    """Look up a content type.

    Returns:
        The catalog entry, or None for unknown and unimplemented types.
    """
    if content_type in UNIMPLEMENTED_CONTENT_TYPES:
        return None
    return CATALOG.get(content_type)


def display_name(entity: ContentEntity | None) -> str:
    """Display label of a typed entity."""
    if entity is None:
        return UNKNOWN_DISPLAY_NAME
    entry = CATALOG[entity.content_type.value]
    return entry.display(entity)


def matches_search(entity: ContentEntity, term: str) -> bool:
    """Case-insensitive substring match over the entity's search fields."""
    needle = term.strip().lower()
    if not needle:
        return True
    entry = CATALOG[entity.content_type.value]
    return any(needle in field.lower() for field in entry.search_fields(entity) if field)


class EntityCatalog:
    """Catalog table bound to a record store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def collection(self, content_type: str) -> RecordCollection | None:
        """Record accessor for a content type, None when there is none."""
        entry = get_catalog_entry(content_type)
        if entry is None:
            return None
        return self._store.collection(entry.collection)

    def display_name(self, content_type: str, record: ContentEntity | dict[str, Any]) -> str:
        """Display label for a record of the given type.

        Raw dicts are validated first; anything that cannot be read as the
        type gets the generic "unknown item" label.
        """
        if get_catalog_entry(content_type) is None:
            return UNKNOWN_DISPLAY_NAME
        entity = self._coerce(content_type, record)
        return display_name(entity)

    def search_fields(self, content_type: str, record: ContentEntity | dict[str, Any]) -> list[str]:
        """Strings free-text search matches against, empty for unknown types."""
        entry = get_catalog_entry(content_type)
        if entry is None:
            return []
        entity = self._coerce(content_type, record)
        if entity is None:
            return []
        return [field for field in entry.search_fields(entity) if field]

    async def list_entities(
        self,
        content_type: str,
        provenance: Provenance | str | None = None,
        search: str | None = None,
    ) -> list[ContentEntity]:
        """List records of one type, newest first.

        Args:
            content_type: Variant tag.
            provenance: Keep only records with this source flag.
            search: Case-insensitive substring over the search fields.

        Returns:
            Typed entities. Unknown types and read failures yield an empty list.
        """
        collection = self.collection(content_type)
        if collection is None:
            return []
        try:
            records = await collection.list(DEFAULT_SORT)
        except StoreError as e:
            logger.warning("Failed to list entities", content_type=content_type, error=str(e))
            return []

        entities = self._parse_all(content_type, records)
        if provenance is not None:
            wanted = Provenance(provenance)
            entities = [e for e in entities if e.source == wanted]
        if search:
            entities = [e for e in entities if matches_search(e, search)]
        return entities

    async def get_entity(self, ref: EntityRef) -> ContentEntity | None:
        """Fetch one record, None if missing, unreadable or of an unknown type."""
        collection = self.collection(ref.type)
        if collection is None:
            return None
        try:
            records = await collection.find({"id": ref.id})
        except StoreError as e:
            logger.warning("Failed to fetch entity", entity_type=ref.type, entity_id=ref.id, error=str(e))
            return None
        entities = self._parse_all(ref.type, records)
        return entities[0] if entities else None

    async def delete_entity(self, ref: EntityRef) -> None:
        """Delete one record through its collection.

        Raises:
            UnknownContentTypeError: If the type has no catalog entry.
            StoreError: If the delete fails.
        """
        collection = self.collection(ref.type)
        if collection is None:
            raise UnknownContentTypeError(ref.type)
        await collection.delete(ref.id)
        logger.info("Deleted entity", entity_type=ref.type, entity_id=ref.id)

    @staticmethod
    def _coerce(content_type: str, record: ContentEntity | dict[str, Any]) -> ContentEntity | None:
        if not isinstance(record, dict):
            return record
        try:
            return parse_content(content_type, record)
        except ValidationError:
            return None

    @staticmethod
    def _parse_all(content_type: str, records: list[dict[str, Any]]) -> list[ContentEntity]:
        entities: list[ContentEntity] = []
        for record in records:
            try:
                entities.append(parse_content(content_type, record))
            except ValidationError as e:
                logger.warning(
                    "Skipping unreadable record",
                    content_type=content_type,
                    entity_id=record.get("id"),
                    errors=e.error_count(),
                )
        return entities

"""Tag assignment store.

Tags (``gamecontenttag``) are plain names. Content items get tags through
``contenttag`` join rows holding ``(content_type, content_id, tag_id)``.
Assigning is look-before-write so repeated assigns do not pile up rows;
readers still tolerate duplicates left behind by concurrent sessions, and
unassigning removes every matching row.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
import structlog

from content_graph.config import DEFAULT_SORT, TAG_ASSIGNMENT_COLLECTION, TAG_COLLECTION
from content_graph.exceptions import StoreError
from content_graph.models import EntityRef, ItemTally, Tag, TagAssignment

if TYPE_CHECKING:
    from content_graph.store.base import RecordCollection, RecordStore

logger = structlog.get_logger(__name__)


def _assignment_filter(ref: EntityRef, tag_id: str | None = None) -> dict[str, str]:
    filters = {"content_id": ref.id, "content_type": ref.type}
    if tag_id is not None:
        filters["tag_id"] = str(tag_id)
    return filters


def _parse_rows(
    model: type[Tag] | type[TagAssignment],
    records: list[dict[str, Any]],
) -> tuple[list[Any], list[str]]:
    """Validate raw rows, returning the parsed rows and the ids of unreadable ones."""
    parsed: list[Any] = []
    unreadable: list[str] = []
    for record in records:
        try:
            parsed.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "Skipping unreadable row",
                model=model.__name__,
                record_id=record.get("id"),
                errors=e.error_count(),
            )
            unreadable.append(str(record.get("id")))
    return parsed, unreadable


class TagStore:
    """Tags and their assignments to content items.

    Example:
        tags = TagStore(store)
        tag = await tags.create_and_assign(EntityRef(type="Image", id="7"), "animals")
        names = [t.name for t in await tags.list_tags_for(EntityRef(type="Image", id="7"))]
    """

    def __init__(self, store: RecordStore) -> None:
        self._tags: RecordCollection = store.collection(TAG_COLLECTION)
        self._assignments: RecordCollection = store.collection(TAG_ASSIGNMENT_COLLECTION)

    async def list_tags(self) -> list[Tag]:
        """Every tag, newest first. Read failures yield an empty list."""
        try:
            records = await self._tags.list(DEFAULT_SORT)
        except StoreError as e:
            logger.warning("Failed to list tags", error=str(e))
            return []
        tags, _ = _parse_rows(Tag, records)
        return tags

    async def _assignments_for(self, ref: EntityRef, tag_id: str | None = None) -> list[TagAssignment]:
        records = await self._assignments.find(_assignment_filter(ref, tag_id))
        assignments, _ = _parse_rows(TagAssignment, records)
        return assignments

    async def list_tags_for(self, ref: EntityRef) -> list[Tag]:
        """Tags assigned to one content item, each tag once.

        Assignment rows pointing at deleted tags are skipped.
        """
        try:
            assignments = await self._assignments_for(ref)
        except StoreError as e:
            logger.warning("Failed to read tag assignments", entity_type=ref.type, entity_id=ref.id, error=str(e))
            return []
        if not assignments:
            return []

        tags_by_id = {tag.id: tag for tag in await self.list_tags()}
        result: list[Tag] = []
        seen: set[str] = set()
        for assignment in assignments:
            tag = tags_by_id.get(assignment.tag_id)
            if tag is None or tag.id in seen:
                continue
            seen.add(tag.id)
            result.append(tag)
        return result

    async def assign(self, ref: EntityRef, tag_id: str) -> bool:
        """Assign a tag unless it is already assigned.

        Returns:
            True if a new assignment row was created.

        Raises:
            StoreError: If the lookup or the write fails.
        """
        if await self._assignments_for(ref, tag_id):
            logger.debug("Tag already assigned", entity_type=ref.type, entity_id=ref.id, tag_id=tag_id)
            return False
        await self._assignments.create(_assignment_filter(ref, tag_id))
        logger.info("Assigned tag", entity_type=ref.type, entity_id=ref.id, tag_id=tag_id)
        return True

    async def unassign(self, ref: EntityRef, tag_id: str) -> int:
        """Remove every assignment of a tag to one item.

        Returns:
            Number of rows removed (more than one heals earlier duplicates).

        Raises:
            StoreError: If the lookup or a delete fails.
        """
        assignments = await self._assignments_for(ref, tag_id)
        for assignment in assignments:
            await self._assignments.delete(assignment.id)
        logger.info("Unassigned tag", entity_type=ref.type, entity_id=ref.id, tag_id=tag_id, rows=len(assignments))
        return len(assignments)

    async def create_tag(self, name: str) -> Tag:
        """Create a tag.

        Raises:
            ValueError: If the name is blank.
            StoreError: If the write fails.
        """
        cleaned = name.strip()
        if not cleaned:
            msg = "Tag name cannot be empty"
            raise ValueError(msg)
        tag = Tag.model_validate(await self._tags.create({"name": cleaned}))
        logger.info("Created tag", tag_id=tag.id, name=tag.name)
        return tag

    async def create_and_assign(self, ref: EntityRef, name: str) -> Tag:
        """Create a tag and assign it to the item it was created from."""
        tag = await self.create_tag(name)
        await self.assign(ref, tag.id)
        return tag

    async def usage_counts(self) -> dict[str, int]:
        """Assignment rows per tag id, across all content types.

        Every known tag is present, unused ones with 0. Read failures yield
        an empty dict.
        """
        try:
            records = await self._assignments.list()
        except StoreError as e:
            logger.warning("Failed to read tag assignments", error=str(e))
            return {}
        counts = Counter(str(record.get("tag_id")) for record in records)
        usage = {tag.id: counts.get(tag.id, 0) for tag in await self.list_tags()}
        return usage

    async def delete_tag(self, tag_id: str) -> int:
        """Delete a tag together with every assignment of it.

        Returns:
            Number of assignment rows removed.

        Raises:
            StoreError: If a read or delete fails; the tag row is only
                deleted once every assignment is gone.
        """
        records = await self._assignments.find({"tag_id": str(tag_id)})
        for record in records:
            await self._assignments.delete(str(record["id"]))
        await self._tags.delete(tag_id)
        logger.info("Deleted tag", tag_id=tag_id, assignments_removed=len(records))
        return len(records)

    async def remove_all_for(self, ref: EntityRef) -> ItemTally:
        """Remove every tag assignment of one item, one row at a time.

        Failures are logged and tallied; they never stop the remaining rows.
        A failed lookup or an unreadable assignment row is reported as a
        failure so callers do not mistake it for "no assignments".
        """
        tally = ItemTally()
        try:
            records = await self._assignments.find(_assignment_filter(ref))
        except StoreError as e:
            logger.warning("Failed to read tag assignments", entity_type=ref.type, entity_id=ref.id, error=str(e))
            tally.failures.append(str(e))
            return tally

        assignments, unreadable = _parse_rows(TagAssignment, records)
        tally.failures.extend(f"tag assignment {row_id}: unreadable row" for row_id in unreadable)

        for assignment in assignments:
            try:
                await self._assignments.delete(assignment.id)
                tally.removed += 1
            except Exception as e:
                logger.exception("Failed to remove tag assignment", assignment_id=assignment.id)
                tally.failures.append(f"tag assignment {assignment.id}: {e}")
        return tally

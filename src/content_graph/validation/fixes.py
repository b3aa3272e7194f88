"""Repairs for problems found by the integrity checks.

Supported fixes:
- merge_duplicate_edges(): fold edges that link the same pair into the
  oldest one, keeping the union of their labels
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from content_graph.config import RELATIONSHIP_COLLECTION
from content_graph.validation.queries import find_duplicate_edges, load_all_edges

if TYPE_CHECKING:
    from content_graph.store.base import RecordStore

logger = structlog.get_logger(__name__)


async def merge_duplicate_edges(store: RecordStore, dry_run: bool = False) -> dict[str, Any]:
    """Merge every group of duplicate edges into its oldest edge.

    The kept edge gets the union of the group's labels (its own first, in
    order); the other edges are deleted. A failure in one group is logged
    and recorded, and the remaining groups are still processed.

    Args:
        store: Record store holding the relationship collection.
        dry_run: If True, only report what would change.

    Returns:
        Statistics about the fix operation.

    Raises:
        StoreError: If the relationship collection cannot be read.
    """
    stats: dict[str, Any] = {
        "duplicate_groups": 0,
        "edges_to_delete": 0,
        "edges_deleted": 0,
        "edges_updated": 0,
        "groups": [],
        "errors": [],
        "dry_run": dry_run,
    }

    groups = find_duplicate_edges(await load_all_edges(store))
    stats["duplicate_groups"] = len(groups)
    if not groups:
        logger.info("No duplicate edges found")
        return stats

    collection = store.collection(RELATIONSHIP_COLLECTION)
    for keeper, *extras in groups:
        merged = list(keeper.relationship_types)
        for edge in extras:
            merged.extend(label for label in edge.relationship_types if label not in merged)
        stats["edges_to_delete"] += len(extras)
        stats["groups"].append(
            {
                "keep": keeper.id,
                "delete": [edge.id for edge in extras],
                "labels": merged,
            }
        )
        if dry_run:
            continue

        try:
            if merged != keeper.relationship_types:
                await collection.update(keeper.id, {"relationship_types": merged})
                stats["edges_updated"] += 1
            for edge in extras:
                await collection.delete(edge.id)
                stats["edges_deleted"] += 1
        except Exception as e:
            error_msg = f"Failed to merge duplicates of edge {keeper.id}: {e}"
            stats["errors"].append(error_msg)
            logger.exception(error_msg)

    if dry_run:
        logger.info(
            "Dry run: would merge duplicate edges",
            groups=stats["duplicate_groups"],
            edges=stats["edges_to_delete"],
        )
    else:
        logger.info(
            "Merged duplicate edges",
            groups=stats["duplicate_groups"],
            deleted=stats["edges_deleted"],
            updated=stats["edges_updated"],
        )
    return stats


def format_fix_preview(stats: dict[str, Any]) -> str:
    """Format a merge result for console display.

    Args:
        stats: Result of ``merge_duplicate_edges``.

    Returns:
        Formatted string for display.
    """
    verb = "Would merge" if stats["dry_run"] else "Merged"
    lines = [
        "=" * 60,
        "DUPLICATE EDGE REPAIR",
        "=" * 60,
        f"{verb} {stats['duplicate_groups']} duplicate group(s), "
        f"{stats['edges_to_delete']} extra edge(s)",
    ]
    for group in stats["groups"][:10]:
        lines.append(
            f"  - keep {group['keep']}, delete {', '.join(group['delete'])} "
            f"[{', '.join(group['labels'])}]"
        )
    if len(stats["groups"]) > 10:
        lines.append(f"  ... and {len(stats['groups']) - 10} more")
    if stats["errors"]:
        lines.append(f"Errors: {len(stats['errors'])}")
        lines.extend(f"  ! {error}" for error in stats["errors"])
    return "\n".join(lines)

"""Integrity checks over the relationship collection.

Concurrent console sessions can race past look-before-write and store two
edges for one pair, and entities deleted outside this package can leave
edges pointing at nothing. These checks find both, plus edges carrying
labels the compatibility matrix does not allow for their endpoint types.

Edges touching a game are left out of every check.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
import structlog

from content_graph.catalog import get_catalog_entry
from content_graph.config import RELATIONSHIP_COLLECTION
from content_graph.graph.compatibility import allowed_relationship_types
from content_graph.models import Edge, EntityRef

if TYPE_CHECKING:
    from content_graph.snapshot import CatalogSnapshot
    from content_graph.store.base import RecordStore

logger = structlog.get_logger(__name__)


async def load_all_edges(store: RecordStore) -> list[Edge]:
    """Read every relationship row, oldest first.

    Raises:
        StoreError: If the collection cannot be read.
    """
    records = await store.collection(RELATIONSHIP_COLLECTION).list("created_date")
    edges = []
    for record in records:
        try:
            edges.append(Edge.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping unreadable edge", edge_id=record.get("id"), errors=e.error_count())
    return edges


def _oldest_first(edge: Edge) -> tuple[bool, str, str]:
    created = edge.created_date.isoformat() if edge.created_date else ""
    return (edge.created_date is None, created, edge.id)


def find_duplicate_edges(edges: list[Edge]) -> list[list[Edge]]:
    """Groups of edges linking the same unordered pair.

    Returns:
        One list per pair with more than one edge, oldest edge first.
    """
    by_pair: dict[frozenset[EntityRef], list[Edge]] = defaultdict(list)
    for edge in edges:
        if edge.is_protected:
            continue
        by_pair[edge.pair_key].append(edge)
    return [sorted(group, key=_oldest_first) for group in by_pair.values() if len(group) > 1]


def find_dangling_edges(edges: list[Edge], snapshot: CatalogSnapshot) -> list[Edge]:
    """Edges with an endpoint missing from the snapshot.

    Only endpoints of catalog types are checked; unknown types cannot be
    looked up and are reported by ``find_invalid_labels`` instead.
    """
    dangling = []
    for edge in edges:
        if edge.is_protected:
            continue
        for ref in (edge.source_ref, edge.target_ref):
            if get_catalog_entry(ref.type) is not None and ref not in snapshot:
                dangling.append(edge)
                break
    return dangling


def find_invalid_labels(edges: list[Edge]) -> list[dict[str, Any]]:
    """Edges carrying labels their endpoint types do not allow."""
    invalid = []
    for edge in edges:
        if edge.is_protected:
            continue
        allowed = {label.value for label in allowed_relationship_types(edge.source_type, edge.target_type)}
        rejected = [label for label in edge.relationship_types if label not in allowed]
        if rejected or not edge.relationship_types:
            invalid.append(
                {
                    "edge_id": edge.id,
                    "source": str(edge.source_ref),
                    "target": str(edge.target_ref),
                    "labels": rejected,
                }
            )
    return invalid


async def run_all_validations(store: RecordStore, snapshot: CatalogSnapshot) -> dict[str, Any]:
    """Run every check and return the results.

    Args:
        store: Record store holding the relationship collection.
        snapshot: Catalog snapshot used to decide whether endpoints exist.

    Returns:
        Dictionary of all validation results plus a summary of flags.

    Raises:
        StoreError: If the relationship collection cannot be read.
    """
    edges = await load_all_edges(store)
    duplicates = find_duplicate_edges(edges)
    dangling = find_dangling_edges(edges, snapshot)
    invalid = find_invalid_labels(edges)

    results: dict[str, Any] = {
        "total_edges": len(edges),
        "protected_edges": sum(1 for edge in edges if edge.is_protected),
        "entity_counts": {key: len(value) for key, value in snapshot.entities.items()},
        "duplicate_groups": [
            {
                "pair": " <-> ".join(sorted(str(ref) for ref in group[0].pair_key)),
                "edge_ids": [edge.id for edge in group],
                "labels": sorted({label for edge in group for label in edge.relationship_types}),
            }
            for group in duplicates
        ],
        "dangling_edges": [
            {"edge_id": edge.id, "source": str(edge.source_ref), "target": str(edge.target_ref)}
            for edge in dangling
        ],
        "invalid_labels": invalid,
    }
    results["summary"] = {
        "has_duplicates": bool(duplicates),
        "has_dangling_edges": bool(dangling),
        "has_invalid_labels": bool(invalid),
    }
    results["validation_passed"] = not any(results["summary"].values())

    logger.info(
        "Graph validation finished",
        edges=len(edges),
        duplicate_groups=len(duplicates),
        dangling=len(dangling),
        invalid=len(invalid),
    )
    return results

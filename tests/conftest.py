"""Pytest configuration and shared test fixtures.

This module provides an in-memory record store seeded with a small content
catalog, plus the components built on top of it.
"""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from content_graph.catalog import EntityCatalog
from content_graph.config import RELATIONSHIP_COLLECTION, TAG_ASSIGNMENT_COLLECTION, TAG_COLLECTION
from content_graph.graph import RelationshipGraph
from content_graph.integrity import IntegrityGuard
from content_graph.models import EntityRef
from content_graph.service import ContentGraphService
from content_graph.store import InMemoryRecordStore
from content_graph.tags import TagStore

ACTOR = "editor@example.com"

# =============================================================================
# ENTITY REFERENCES
# =============================================================================

W1 = EntityRef(type="Word", id="w1")
W2 = EntityRef(type="Word", id="w2")
W3 = EntityRef(type="Word", id="w3")
CAT = EntityRef(type="WordEN", id="e1")
WRITE = EntityRef(type="WordEN", id="e2")
EMOJI = EntityRef(type="Image", id="7")
PHOTO = EntityRef(type="Image", id="8")
QUESTION = EntityRef(type="QA", id="q1")
GENDER = EntityRef(type="Attribute", id="a1")
NUMBER = EntityRef(type="Attribute", id="a2")
ANIMALS = EntityRef(type="ContentList", id="l1")
GAME = EntityRef(type="Game", id="g1")


# =============================================================================
# HELPERS
# =============================================================================


async def add_edge(
    store: InMemoryRecordStore,
    source: EntityRef,
    target: EntityRef,
    labels: Iterable[str] | str = ("translation",),
    /,
    **extra: object,
) -> str:
    """Write an edge row directly, bypassing the graph's checks.

    Returns:
        The new edge id.
    """
    record = await store.collection(RELATIONSHIP_COLLECTION).create(
        {
            "source_id": source.id,
            "source_type": source.type,
            "target_id": target.id,
            "target_type": target.type,
            "relationship_types": labels if isinstance(labels, str) else list(labels),
            **extra,
        }
    )
    return record["id"]


async def add_tag(store: InMemoryRecordStore, name: str) -> str:
    """Write a tag row directly and return its id."""
    record = await store.collection(TAG_COLLECTION).create({"name": name})
    return record["id"]


async def add_assignment(store: InMemoryRecordStore, ref: EntityRef, tag_id: str) -> str:
    """Write a tag assignment row directly and return its id."""
    record = await store.collection(TAG_ASSIGNMENT_COLLECTION).create(
        {"content_type": ref.type, "content_id": ref.id, "tag_id": tag_id}
    )
    return record["id"]


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def seed_records() -> dict[str, list[dict]]:
    """Provide a small catalog keyed by backend collection.

    Records are seeded in order, so the last record of each list is the
    newest one.
    """
    return {
        "word": [
            {"id": "w1", "vocalized": "כָּתַב", "word": "כתב", "root": "ktb", "source": "manual"},
            {"id": "w2", "vocalized": "מִכְתָּב", "word": "מכתב", "root": "ktb", "source": "ai"},
            {"id": "w3", "vocalized": "", "word": "כלב", "root": "klb"},
        ],
        "worden": [
            {"id": "e1", "word": "Cat"},
            {"id": "e2", "word": "write"},
        ],
        "image": [
            {"id": "7", "file_url": "🐶", "description": ""},
            {"id": "8", "file_url": "https://cdn.example.com/images/dog-photo.png"},
        ],
        "qa": [
            {
                "id": "q1",
                "question_text": "מה זה?",
                "correct_answers": [{"answer_text": "כלב", "points": 1}],
                "incorrect_answers": ["חתול", "סוס"],
            }
        ],
        "attribute": [
            {"id": "a1", "type": "מין", "value": "זכר"},
            {"id": "a2", "type": "מספר", "value": "יחיד"},
        ],
        "contentlist": [
            {"id": "l1", "name": "חיות", "description": "רשימת חיות"},
        ],
    }


@pytest.fixture
def store(seed_records: dict[str, list[dict]]) -> InMemoryRecordStore:
    """Provide an in-memory store seeded with the sample catalog."""
    return InMemoryRecordStore(seed_records)


@pytest.fixture
def catalog(store: InMemoryRecordStore) -> EntityCatalog:
    return EntityCatalog(store)


@pytest.fixture
def graph(store: InMemoryRecordStore) -> RelationshipGraph:
    return RelationshipGraph(store, actor=ACTOR)


@pytest.fixture
def tags(store: InMemoryRecordStore) -> TagStore:
    return TagStore(store)


@pytest.fixture
def guard(catalog: EntityCatalog, graph: RelationshipGraph, tags: TagStore) -> IntegrityGuard:
    return IntegrityGuard(catalog, graph, tags)


@pytest.fixture
def service(store: InMemoryRecordStore) -> ContentGraphService:
    return ContentGraphService(store, actor=ACTOR)

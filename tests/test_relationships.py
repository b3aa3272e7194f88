"""Tests for the relationship graph."""

from __future__ import annotations

import pytest

from content_graph.config import RELATIONSHIP_COLLECTION
from content_graph.exceptions import RelationshipValidationError, StoreError
from content_graph.graph import RelationshipGraph
from content_graph.models import EntityRef, UpsertOutcome
from content_graph.store import InMemoryRecordStore
from tests.conftest import ACTOR, ANIMALS, CAT, EMOJI, GAME, GENDER, W1, W2, WRITE, add_edge

# =============================================================================
# READ TESTS
# =============================================================================


class TestListEdges:
    """Tests for reading edges in both directions."""

    @pytest.mark.asyncio
    async def test_reads_both_directions(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        outgoing = await add_edge(store, W1, CAT)
        incoming = await add_edge(store, EMOJI, W1)
        await add_edge(store, W2, CAT)

        edges = await graph.list_edges(W1)
        assert {edge.id for edge in edges} == {outgoing, incoming}

    @pytest.mark.asyncio
    async def test_game_edges_are_hidden(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        shown = await add_edge(store, W1, CAT)
        await add_edge(store, GAME, W1, ["list-member"])

        assert [edge.id for edge in await graph.list_edges(W1)] == [shown]
        assert len(await graph.edges_touching(W1)) == 2

    @pytest.mark.asyncio
    async def test_self_loop_is_listed_once(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        await add_edge(store, W1, W1)
        assert len(await graph.list_edges(W1)) == 1

    @pytest.mark.asyncio
    async def test_read_failure(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        await add_edge(store, W1, CAT)
        store.fail_on(RELATIONSHIP_COLLECTION, "find")

        assert await graph.list_edges(W1) == []
        with pytest.raises(StoreError):
            await graph.edges_touching(W1, strict=True)

    @pytest.mark.asyncio
    async def test_legacy_labels_are_normalized(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        await add_edge(store, W1, CAT, "פירוש")
        (edge,) = await graph.list_edges(W1)
        assert edge.relationship_types == ["translation"]

    @pytest.mark.asyncio
    async def test_counterpart_counts(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        await add_edge(store, W1, CAT)
        await add_edge(store, WRITE, W1)
        await add_edge(store, W1, GENDER, ["attribute-of"])
        await add_edge(store, GAME, W1, ["list-member"])

        assert await graph.counterpart_counts(W1) == {"WordEN": 2, "Attribute": 1}

    @pytest.mark.asyncio
    async def test_find_edge_between_either_direction(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        edge_id = await add_edge(store, CAT, W1)
        found = await graph.find_edge_between(W1, CAT)
        assert found is not None and found.id == edge_id
        assert await graph.find_edge_between(W1, WRITE) is None


# =============================================================================
# UPSERT TESTS
# =============================================================================


class TestUpsertEdge:
    """Tests for creating and extending edges."""

    @pytest.mark.asyncio
    async def test_creates_edge(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        result = await graph.upsert_edge(W1, CAT, ["antonym", "translation"])

        assert result.outcome == UpsertOutcome.CREATED
        assert result.edge.source_ref == W1
        assert result.edge.target_ref == CAT
        assert result.edge.relationship_types == ["translation", "antonym"]
        assert result.edge.added_by == ACTOR
        assert result.edge.approved_by == ACTOR
        assert result.edge.is_approved is True
        assert result.edge.source == "manual"

    @pytest.mark.asyncio
    async def test_reverse_link_extends_existing_edge(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        edge_id = await add_edge(store, CAT, W1, ["translation"])

        result = await graph.upsert_edge(W1, CAT, ["antonym"])

        assert result.outcome == UpsertOutcome.UPDATED
        assert result.edge.id == edge_id
        assert result.edge.relationship_types == ["translation", "antonym"]
        assert result.added_labels == ["antonym"]
        assert len(store.collection(RELATIONSHIP_COLLECTION)) == 1

    @pytest.mark.asyncio
    async def test_repeat_link_writes_nothing(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        await graph.upsert_edge(W1, CAT, ["translation"])
        writes_before = len(store.calls_for("create")) + len(store.calls_for("update"))

        result = await graph.upsert_edge(CAT, W1, ["translation"])

        assert result.outcome == UpsertOutcome.UNCHANGED
        assert not result.changed
        assert len(store.calls_for("create")) + len(store.calls_for("update")) == writes_before

    @pytest.mark.asyncio
    async def test_unknown_stored_labels_survive_merge(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        await add_edge(store, W1, CAT, ["synonym"])
        result = await graph.upsert_edge(W1, CAT, ["translation"])
        assert result.edge.relationship_types == ["synonym", "translation"]

    @pytest.mark.asyncio
    async def test_disallowed_label_writes_nothing(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        with pytest.raises(RelationshipValidationError):
            await graph.upsert_edge(W1, GENDER, ["translation"])
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_self_link_is_rejected(self, graph: RelationshipGraph) -> None:
        with pytest.raises(RelationshipValidationError, match="itself"):
            await graph.upsert_edge(W1, W1, ["translation"])

    @pytest.mark.asyncio
    async def test_failed_lookup_does_not_create(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        store.fail_on(RELATIONSHIP_COLLECTION, "find")
        with pytest.raises(StoreError):
            await graph.upsert_edge(W1, CAT, ["translation"])
        assert store.calls_for("create") == []

    @pytest.mark.asyncio
    async def test_delete_edge(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        edge_id = await add_edge(store, W1, CAT)
        await graph.delete_edge(edge_id)
        assert await graph.list_edges(W1) == []
        with pytest.raises(StoreError):
            await graph.delete_edge(edge_id)


class TestBulkUpsert:
    """Tests for multi-target linking."""

    @pytest.mark.asyncio
    async def test_links_every_target(self, graph: RelationshipGraph) -> None:
        result = await graph.bulk_upsert(W1, [CAT, WRITE, EMOJI], ["translation"])

        assert result.ok
        assert result.succeeded == 3
        assert [o.outcome for o in result.outcomes] == [UpsertOutcome.CREATED] * 3

    @pytest.mark.asyncio
    async def test_mixed_outcomes(self, store: InMemoryRecordStore, graph: RelationshipGraph) -> None:
        await add_edge(store, W1, CAT, ["translation"])
        await add_edge(store, WRITE, W1, ["antonym"])

        result = await graph.bulk_upsert(W1, [CAT, WRITE, EMOJI], ["translation"])

        assert [o.outcome for o in result.outcomes] == [
            UpsertOutcome.UNCHANGED,
            UpsertOutcome.UPDATED,
            UpsertOutcome.CREATED,
        ]

    @pytest.mark.asyncio
    async def test_policy_violation_rejects_whole_batch(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        with pytest.raises(RelationshipValidationError) as exc_info:
            await graph.bulk_upsert(W1, [CAT, ANIMALS], ["translation"])
        assert exc_info.value.target_type == "ContentList"
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_failed_target_does_not_stop_the_rest(
        self, store: InMemoryRecordStore, graph: RelationshipGraph
    ) -> None:
        edge_id = await add_edge(store, W1, CAT, ["translation"])
        store.fail_on(RELATIONSHIP_COLLECTION, "update", record_id=edge_id)

        result = await graph.bulk_upsert(W1, [CAT, WRITE], ["antonym"])

        assert result.failed == 1
        assert result.failures[0].item == str(CAT)
        assert result.succeeded == 1
        assert result.outcomes[0].edge.target_ref == WRITE
        assert not result.ok

    @pytest.mark.asyncio
    async def test_self_in_batch_is_rejected(self, graph: RelationshipGraph) -> None:
        with pytest.raises(RelationshipValidationError):
            await graph.bulk_upsert(W1, [CAT, W1], ["translation"])

    @pytest.mark.asyncio
    async def test_default_actor(self, store: InMemoryRecordStore) -> None:
        graph = RelationshipGraph(store, actor="")
        result = await graph.upsert_edge(EntityRef(type="Word", id="w3"), CAT, ["translation"])
        assert result.edge.added_by == "admin"

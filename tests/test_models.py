"""Tests for content, edge and tag models."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from content_graph.models import (
    BulkDeleteResult,
    CascadeResult,
    ContentType,
    DeletedItem,
    Edge,
    EntityRef,
    ErroredItem,
    Image,
    Provenance,
    RelationshipLabel,
    SkippedItem,
    Word,
    parse_content,
    parse_label,
)

# =============================================================================
# ENTITY REFERENCE TESTS
# =============================================================================


class TestEntityRef:
    """Tests for EntityRef."""

    def test_parse(self) -> None:
        ref = EntityRef.parse("Word:12")
        assert ref == EntityRef(type="Word", id="12")
        assert str(ref) == "Word:12"

    @pytest.mark.parametrize("value", ["Word", "Word:", ":12", ""])
    def test_parse_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError, match="TYPE:ID"):
            EntityRef.parse(value)

    def test_numeric_id_is_coerced(self) -> None:
        assert EntityRef(type="Image", id=7).id == "7"

    def test_hashable_and_equal_by_value(self) -> None:
        refs = {EntityRef(type="Word", id="1"), EntityRef(type="Word", id="1")}
        assert len(refs) == 1

    def test_is_protected_type(self) -> None:
        assert EntityRef(type="Game", id="g1").is_protected_type is True
        assert EntityRef(type="Word", id="w1").is_protected_type is False


# =============================================================================
# CONTENT MODEL TESTS
# =============================================================================


class TestParseContent:
    """Tests for the content tagged union."""

    def test_builds_variant_from_collection_type(self) -> None:
        entity = parse_content("Word", {"id": "w1", "word": "כתב", "root": "ktb"})
        assert isinstance(entity, Word)
        assert entity.content_type == ContentType.WORD
        assert entity.ref == EntityRef(type="Word", id="w1")

    def test_defaults(self) -> None:
        entity = parse_content(ContentType.IMAGE, {"id": 7})
        assert isinstance(entity, Image)
        assert entity.id == "7"
        assert entity.source == Provenance.MANUAL
        assert entity.is_approved is False
        assert entity.created_date is None

    def test_tolerates_unknown_backend_fields(self) -> None:
        entity = parse_content("WordEN", {"id": "e1", "word": "cat", "updated_by": "x"})
        assert entity.word == "cat"

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_content("Rules", {"id": "r1"})

    def test_null_fields_use_defaults(self) -> None:
        entity = parse_content(
            "Word",
            {"id": "x1", "word": "כלב", "vocalized": None, "root": None, "source": None, "is_approved": None},
        )
        assert isinstance(entity, Word)
        assert entity.vocalized == ""
        assert entity.root == ""
        assert entity.source == Provenance.MANUAL
        assert entity.is_approved is False

    def test_null_qa_lists_and_answer_text(self) -> None:
        qa = parse_content(
            "QA",
            {
                "id": "q1",
                "question_text": None,
                "correct_answers": [{"answer_text": None, "points": None}],
                "incorrect_answers": None,
            },
        )
        assert qa.question_text == ""
        assert qa.correct_answers[0].answer_text == ""
        assert qa.incorrect_answers == []

    def test_invalid_provenance_raises(self) -> None:
        with pytest.raises(ValidationError):
            parse_content("Word", {"id": "w1", "source": "imported"})

    def test_qa_answers(self) -> None:
        qa = parse_content(
            "QA",
            {
                "id": "q1",
                "question_text": "?",
                "correct_answers": [{"answer_text": "a", "points": 2}],
                "incorrect_answers": ["b"],
            },
        )
        assert qa.correct_answers[0].answer_text == "a"
        assert qa.incorrect_answers == ["b"]


# =============================================================================
# EDGE MODEL TESTS
# =============================================================================


def _edge(**overrides: object) -> Edge:
    data = {
        "id": "r1",
        "source_id": "w1",
        "source_type": "Word",
        "target_id": "7",
        "target_type": "Image",
        "relationship_types": ["translation"],
    }
    data.update(overrides)
    return Edge.model_validate(data)


class TestEdge:
    """Tests for the Edge model."""

    def test_single_string_label_becomes_list(self) -> None:
        assert _edge(relationship_types="antonym").relationship_types == ["antonym"]

    def test_missing_labels_become_empty_list(self) -> None:
        assert _edge(relationship_types=None).relationship_types == []

    def test_loose_audit_fields_are_accepted(self) -> None:
        edge = _edge(is_approved=None, source="importer", added_by=None)
        assert edge.is_approved is None
        assert edge.source == "importer"

    def test_unparseable_row_raises(self) -> None:
        with pytest.raises(ValidationError):
            _edge(created_date="not a date")

    def test_legacy_hebrew_labels_are_normalized(self) -> None:
        edge = _edge(relationship_types=["פירוש", "מילים הופכיות"])
        assert edge.relationship_types == ["translation", "antonym"]
        assert edge.labels == {RelationshipLabel.TRANSLATION, RelationshipLabel.ANTONYM}

    def test_labels_are_deduplicated_in_order(self) -> None:
        edge = _edge(relationship_types=["antonym", "translation", "פירוש", "antonym"])
        assert edge.relationship_types == ["antonym", "translation"]

    def test_unknown_labels_are_kept(self) -> None:
        edge = _edge(relationship_types=["synonym", "translation"])
        assert edge.relationship_types == ["synonym", "translation"]
        assert edge.labels == {RelationshipLabel.TRANSLATION}

    def test_endpoints(self) -> None:
        edge = _edge()
        word = EntityRef(type="Word", id="w1")
        image = EntityRef(type="Image", id="7")
        assert edge.touches(word) and edge.touches(image)
        assert edge.counterpart(word) == image
        assert edge.counterpart(image) == word

    def test_pair_key_ignores_direction(self) -> None:
        forward = _edge()
        backward = _edge(
            id="r2", source_id="7", source_type="Image", target_id="w1", target_type="Word"
        )
        assert forward.pair_key == backward.pair_key

    def test_is_protected(self) -> None:
        assert _edge(source_type="Game", source_id="g1").is_protected is True
        assert _edge().is_protected is False


class TestLabels:
    """Tests for relationship labels."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("translation", RelationshipLabel.TRANSLATION),
            ("  Antonym ", RelationshipLabel.ANTONYM),
            ("מאפיין", RelationshipLabel.ATTRIBUTE_OF),
            ("פריט ברשימה", RelationshipLabel.LIST_MEMBER),
            (RelationshipLabel.LIST_MEMBER, RelationshipLabel.LIST_MEMBER),
        ],
    )
    def test_parse_label(self, value: str, expected: RelationshipLabel) -> None:
        assert parse_label(value) == expected

    def test_parse_unknown_label_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_label("synonym")

    def test_display_name(self) -> None:
        assert RelationshipLabel.TRANSLATION.display_name == "פירוש"
        assert RelationshipLabel.ANTONYM.display_name == "מילים הופכיות"


# =============================================================================
# RESULT TESTS
# =============================================================================


class TestResults:
    """Tests for result structures."""

    def test_cascade_complete(self) -> None:
        assert CascadeResult(edges_removed=2).complete is True
        partial = CascadeResult(edges_removed=1, tag_failures=["boom"])
        assert partial.complete is False
        assert partial.failures == ["boom"]

    def test_bulk_delete_total(self) -> None:
        result = BulkDeleteResult(
            deleted=[DeletedItem("1", "a")],
            skipped=[SkippedItem("2", "b", reference_count=3)],
            errors=[ErroredItem("3", "boom"), ErroredItem("4", "boom")],
        )
        assert result.total == 4

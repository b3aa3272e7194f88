"""Tests for potential-match suggestions."""

from __future__ import annotations

import pytest

from content_graph.catalog import EntityCatalog
from content_graph.models import RelationshipLabel, parse_content
from content_graph.snapshot import CatalogSnapshot, load_snapshot
from content_graph.suggestions import MatchSuggestionEngine
from tests.conftest import W2


def _snapshot(words: list[dict], english: list[dict]) -> CatalogSnapshot:
    return CatalogSnapshot(
        entities={
            "Word": [parse_content("Word", record) for record in words],
            "WordEN": [parse_content("WordEN", record) for record in english],
        }
    )


class TestWordSuggestions:
    """Tests for suggestions on Hebrew words."""

    @pytest.mark.asyncio
    async def test_same_root_is_suggested(self, catalog: EntityCatalog) -> None:
        engine = MatchSuggestionEngine(await load_snapshot(catalog))
        word = (await catalog.list_entities("Word", search="ktb"))[-1]

        suggestions = engine.suggest("Word", word)

        assert [(s.ref, s.label) for s in suggestions] == [(W2, RelationshipLabel.ANTONYM)]

    def test_translations_come_before_same_root(self) -> None:
        snapshot = _snapshot(
            words=[
                {"id": "1", "word": "book", "root": "bk"},
                {"id": "2", "word": "booklet", "root": "bk"},
            ],
            english=[{"id": "10", "word": "Book"}, {"id": "11", "word": "table"}],
        )
        engine = MatchSuggestionEngine(snapshot)

        suggestions = engine.suggest("Word", {"id": "1", "word": "book", "root": "bk"})

        assert [(s.entity.id, s.label) for s in suggestions] == [
            ("10", RelationshipLabel.TRANSLATION),
            ("2", RelationshipLabel.ANTONYM),
        ]

    def test_candidates_ranked_by_similarity(self) -> None:
        snapshot = _snapshot(
            words=[],
            english=[{"id": "1", "word": "catalogue"}, {"id": "2", "word": "cats"}],
        )
        suggestions = MatchSuggestionEngine(snapshot).suggest("Word", {"id": "9", "word": "cat"})
        assert [s.entity.id for s in suggestions] == ["2", "1"]
        assert suggestions[0].score >= suggestions[1].score

    def test_blank_root_has_no_root_matches(self) -> None:
        snapshot = _snapshot(words=[{"id": "1", "word": "a"}, {"id": "2", "word": "b"}], english=[])
        assert MatchSuggestionEngine(snapshot).suggest("Word", {"id": "1", "word": "a"}) == []

    def test_blank_word_gets_no_suggestions(self) -> None:
        snapshot = _snapshot(words=[{"id": "2", "word": "b", "root": "r"}], english=[{"id": "3", "word": "x"}])
        assert MatchSuggestionEngine(snapshot).suggest("Word", {"id": "1", "word": "", "root": "r"}) == []
        assert MatchSuggestionEngine(snapshot).suggest("Word", {"id": "1", "root": "r"}) == []


class TestWordENSuggestions:
    """Tests for suggestions on English words."""

    def test_matches_plain_and_vocalized_forms(self) -> None:
        snapshot = _snapshot(
            words=[
                {"id": "1", "word": "dog", "vocalized": ""},
                {"id": "2", "word": "puppy", "vocalized": "hotdog"},
                {"id": "3", "word": "cat"},
            ],
            english=[],
        )
        suggestions = MatchSuggestionEngine(snapshot).suggest("WordEN", {"id": "e", "word": "DOG"})
        assert {s.entity.id for s in suggestions} == {"1", "2"}
        assert {s.label for s in suggestions} == {RelationshipLabel.TRANSLATION}

    def test_blank_word(self) -> None:
        snapshot = _snapshot(words=[{"id": "1", "word": "dog"}], english=[])
        assert MatchSuggestionEngine(snapshot).suggest("WordEN", {"id": "e", "word": ""}) == []


class TestEngine:
    """Tests for limits and unsupported types."""

    def test_other_types_get_nothing(self) -> None:
        engine = MatchSuggestionEngine(CatalogSnapshot())
        assert engine.suggest("Image", {"id": "7"}) == []
        assert engine.suggest("Rules", {"id": "1"}) == []

    def test_limit(self) -> None:
        snapshot = _snapshot(words=[], english=[{"id": str(i), "word": f"cat{i}"} for i in range(15)])
        engine = MatchSuggestionEngine(snapshot)
        assert len(engine.suggest("Word", {"id": "x", "word": "cat"})) == 10
        assert len(MatchSuggestionEngine(snapshot, limit=3).suggest("Word", {"id": "x", "word": "cat"})) == 3

    def test_negative_limit(self) -> None:
        with pytest.raises(ValueError, match="limit"):
            MatchSuggestionEngine(CatalogSnapshot(), limit=-1)

    def test_deterministic(self) -> None:
        snapshot = _snapshot(
            words=[{"id": "1", "word": "ab", "root": "r"}, {"id": "2", "word": "ac", "root": "r"}],
            english=[{"id": "3", "word": "a"}],
        )
        engine = MatchSuggestionEngine(snapshot)
        record = {"id": "9", "word": "a", "root": "r"}
        assert engine.suggest("Word", record) == engine.suggest("Word", record)

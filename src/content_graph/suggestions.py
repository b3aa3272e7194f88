"""Potential-match suggestions for the relationship picker.

Proposes likely relationship targets for an entity from a catalog snapshot:

- Word: English words overlapping the Hebrew word (translation), then
  other Hebrew words sharing its root (antonym).
- WordEN: Hebrew words whose plain or vocalized form overlaps the English
  word (translation).
- Other content types: nothing.

Overlap means case-insensitive substring in either direction. Candidates
within each heuristic are ordered by rapidfuzz similarity; the score only
orders, it never adds or drops a candidate.
"""

from typing import Any

from rapidfuzz import fuzz
import structlog

from content_graph.config import MAX_SUGGESTIONS
from content_graph.models import (
    ContentEntity,
    ContentType,
    MatchSuggestion,
    RelationshipLabel,
    Word,
    WordEN,
    parse_content,
)
from content_graph.snapshot import CatalogSnapshot

logger = structlog.get_logger(__name__)


def _overlaps(a: str, b: str) -> bool:
    """Case-insensitive substring match in either direction; blanks never match."""
    if not a or not b:
        return False
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _ranked(
    source: str,
    candidates: list[ContentEntity],
    label: RelationshipLabel,
    key: Any,
) -> list[MatchSuggestion]:
    scored = [
        MatchSuggestion(entity=candidate, label=label, score=fuzz.ratio(source, key(candidate)))
        for candidate in candidates
    ]
    # sorted() is stable, so equal scores keep snapshot order
    return sorted(scored, key=lambda s: s.score, reverse=True)


class MatchSuggestionEngine:
    """Suggests relationship targets from a fixed catalog snapshot.

    The same snapshot and entity always give the same suggestions.

    Example:
        engine = MatchSuggestionEngine(await load_snapshot(catalog))
        for suggestion in engine.suggest("Word", word):
            print(suggestion.label.display_name, suggestion.entity.id)
    """

    def __init__(self, snapshot: CatalogSnapshot, limit: int = MAX_SUGGESTIONS) -> None:
        """Initialize the engine.

        Args:
            snapshot: Entities to search.
            limit: Maximum number of suggestions returned.
        """
        if limit < 0:
            msg = f"limit must be >= 0, got {limit}"
            raise ValueError(msg)
        self.snapshot = snapshot
        self.limit = limit

    def suggest(
        self,
        content_type: str,
        record: ContentEntity | dict[str, Any],
    ) -> list[MatchSuggestion]:
        """Suggestions for one entity, capped at ``limit``.

        Args:
            content_type: Content type of the entity.
            record: The entity, typed or as a raw record.

        Returns:
            Translation candidates first, then same-root candidates.
        """
        if content_type == ContentType.WORD.value:
            entity = self._coerce(content_type, record)
            matches = self._for_word(entity) if isinstance(entity, Word) else []
        elif content_type == ContentType.WORD_EN.value:
            entity = self._coerce(content_type, record)
            matches = self._for_word_en(entity) if isinstance(entity, WordEN) else []
        else:
            matches = []
        logger.debug("Suggestions computed", content_type=content_type, count=len(matches))
        return matches[: self.limit]

    @staticmethod
    def _coerce(content_type: str, record: ContentEntity | dict[str, Any]) -> ContentEntity:
        if isinstance(record, dict):
            return parse_content(content_type, record)
        return record

    def _for_word(self, word: Word) -> list[MatchSuggestion]:
        if not word.word:
            return []
        english = [
            candidate
            for candidate in self.snapshot.of_type(ContentType.WORD_EN)
            if _overlaps(candidate.word, word.word)
        ]
        matches = _ranked(word.word, english, RelationshipLabel.TRANSLATION, lambda c: c.word)

        if word.root:
            same_root = [
                candidate
                for candidate in self.snapshot.of_type(ContentType.WORD)
                if candidate.root == word.root and candidate.id != word.id
            ]
            matches.extend(
                _ranked(word.word, same_root, RelationshipLabel.ANTONYM, lambda c: c.word)
            )
        return matches

    def _for_word_en(self, word: WordEN) -> list[MatchSuggestion]:
        if not word.word:
            return []
        hebrew = [
            candidate
            for candidate in self.snapshot.of_type(ContentType.WORD)
            if candidate.word
            and (_overlaps(candidate.word, word.word) or _overlaps(candidate.vocalized, word.word))
        ]
        return _ranked(word.word, hebrew, RelationshipLabel.TRANSLATION, lambda c: c.word)

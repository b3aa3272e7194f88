"""Relationship compatibility matrix.

Which relationship labels may connect two content types. The matrix is
symmetric: ``allowed_relationship_types(a, b) == allowed_relationship_types(b, a)``
for every pair.

- Word-like types (Word, WordEN, Image) link to each other with
  translation and antonym.
- Anything links to Attribute or QA with attribute-of.
- Anything links to ContentList with list-member; ContentList and
  Attribute additionally allow attribute-of.
- Attribute to Attribute and ContentList to ContentList allow nothing.
- Unknown types, Rules and Game allow nothing.
"""

from __future__ import annotations

from collections.abc import Iterable

from content_graph.catalog import get_catalog_entry
from content_graph.exceptions import RelationshipValidationError
from content_graph.models import WORD_LIKE_TYPES, ContentType, RelationshipLabel, parse_label

_WORD_LIKE = frozenset(t.value for t in WORD_LIKE_TYPES)
_SELF_EXCLUSIVE = frozenset({ContentType.ATTRIBUTE.value, ContentType.CONTENT_LIST.value})

_WORD_LABELS = frozenset({RelationshipLabel.TRANSLATION, RelationshipLabel.ANTONYM})
_ATTRIBUTE_LABELS = frozenset({RelationshipLabel.ATTRIBUTE_OF})
_LIST_LABELS = frozenset({RelationshipLabel.LIST_MEMBER})
_NONE: frozenset[RelationshipLabel] = frozenset()


def allowed_relationship_types(source_type: str, target_type: str) -> frozenset[RelationshipLabel]:
    """Labels allowed on an edge between two content types.

    Args:
        source_type: Content type of one endpoint.
        target_type: Content type of the other endpoint.

    Returns:
        The allowed labels; empty when the pair cannot be linked at all.
    """
    if get_catalog_entry(source_type) is None or get_catalog_entry(target_type) is None:
        return _NONE
    if source_type == target_type and source_type in _SELF_EXCLUSIVE:
        return _NONE

    pair = {source_type, target_type}
    if ContentType.CONTENT_LIST.value in pair:
        if ContentType.ATTRIBUTE.value in pair:
            return _LIST_LABELS | _ATTRIBUTE_LABELS
        return _LIST_LABELS
    if pair <= _WORD_LIKE:
        return _WORD_LABELS
    if ContentType.ATTRIBUTE.value in pair or ContentType.QA.value in pair:
        return _ATTRIBUTE_LABELS
    return _NONE


def allowed_for_selection(
    source_type: str, target_types: Iterable[str]
) -> frozenset[RelationshipLabel]:
    """Labels usable for every selected target at once.

    Folds set intersection over the per-pair allowed sets. Selecting no
    targets leaves nothing to choose.
    """
    allowed: frozenset[RelationshipLabel] | None = None
    for target_type in target_types:
        pair_allowed = allowed_relationship_types(source_type, target_type)
        allowed = pair_allowed if allowed is None else allowed & pair_allowed
        if not allowed:
            return _NONE
    return allowed or _NONE


def validate_selection(
    source_type: str,
    target_types: Iterable[str],
    labels: Iterable[str | RelationshipLabel],
) -> frozenset[RelationshipLabel]:
    """Check requested labels against a multi-target selection.

    Args:
        source_type: Content type of the acting entity.
        target_types: Content types of the selected targets, in selection order.
        labels: Requested labels (canonical or legacy names).

    Returns:
        The validated label set.

    Raises:
        RelationshipValidationError: Naming the first pair that makes the
            selection impossible, or the first pair that rejects a requested label.
    """
    targets = list(target_types)
    if not targets:
        raise RelationshipValidationError(source_type, "-", "no targets selected")

    allowed: frozenset[RelationshipLabel] | None = None
    for target_type in targets:
        pair_allowed = allowed_relationship_types(source_type, target_type)
        if not pair_allowed:
            raise RelationshipValidationError(
                source_type, target_type, "these content types cannot be linked"
            )
        allowed = pair_allowed if allowed is None else allowed & pair_allowed
        if not allowed:
            raise RelationshipValidationError(
                source_type,
                target_type,
                "no relationship type is allowed for every selected target",
            )

    try:
        requested = frozenset(parse_label(label) for label in labels)
    except ValueError as e:
        raise RelationshipValidationError(source_type, targets[0], str(e)) from e
    if not requested:
        raise RelationshipValidationError(source_type, targets[0], "no relationship type requested")

    for target_type in targets:
        rejected = requested - allowed_relationship_types(source_type, target_type)
        if rejected:
            names = ", ".join(sorted(label.value for label in rejected))
            raise RelationshipValidationError(source_type, target_type, f"not allowed: {names}")
    return requested

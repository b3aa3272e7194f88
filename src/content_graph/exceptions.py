"""Custom exceptions for the content graph.

Provides a hierarchy of exceptions for different error conditions:
- ContentGraphError: Base exception for all content graph errors
- StoreError: A record store call failed (transport or storage)
- RelationshipValidationError: Requested labels are not allowed for a pair
- ProtectedReferenceError: Entity is still used by a game
- CascadeIncompleteError: Cleanup before deletion did not finish
- UnknownContentTypeError: No catalog entry for a content type
- ApiConfigError: Backend environment variables not set
"""


class ContentGraphError(Exception):
    """Base exception for content graph errors."""


class StoreError(ContentGraphError):
    """Error while talking to the record store.

    Attributes:
        collection: Backend collection name (e.g. 'contentrelationship').
        operation: Store operation that failed (list, find, create, update, delete).
    """

    def __init__(self, collection: str, operation: str, message: str) -> None:
        """Initialize StoreError.

        Args:
            collection: Backend collection name.
            operation: Store operation that failed.
            message: Description of what went wrong.
        """
        self.collection = collection
        self.operation = operation
        super().__init__(f"{operation} on {collection} failed: {message}")


class RelationshipValidationError(ContentGraphError):
    """Relationship labels are not allowed between two content types.

    Raised before any write happens, so a rejected request has no side effects.

    Attributes:
        source_type: Content type of the acting entity.
        target_type: Content type of the conflicting target.
    """

    def __init__(self, source_type: str, target_type: str, message: str) -> None:
        """Initialize RelationshipValidationError.

        Args:
            source_type: Content type of the acting entity.
            target_type: Content type of the conflicting target.
            message: Description of the conflict.
        """
        self.source_type = source_type
        self.target_type = target_type
        super().__init__(f"{source_type} -> {target_type}: {message}")


class ProtectedReferenceError(ContentGraphError):
    """Entity is referenced by a game and cannot be deleted.

    Attributes:
        entity_type: Content type of the entity.
        entity_id: Identifier of the entity.
        reference_count: Number of blocking game relationships.
    """

    def __init__(self, entity_type: str, entity_id: str, reference_count: int) -> None:
        """Initialize ProtectedReferenceError."""
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reference_count = reference_count
        super().__init__(
            f"{entity_type} {entity_id} is linked to {reference_count} game(s). "
            "Remove the game links before deleting it."
        )


class CascadeIncompleteError(ContentGraphError):
    """Some relationships or tag assignments could not be removed.

    The entity itself is left in place so the cleanup can be retried.

    Attributes:
        edges_removed: Relationships removed before giving up.
        tags_removed: Tag assignments removed before giving up.
        failures: Error messages for the rows that could not be removed.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        edges_removed: int,
        tags_removed: int,
        failures: list[str],
    ) -> None:
        """Initialize CascadeIncompleteError."""
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.edges_removed = edges_removed
        self.tags_removed = tags_removed
        self.failures = failures
        super().__init__(
            f"Cleanup of {entity_type} {entity_id} incomplete: "
            f"{edges_removed} relationships and {tags_removed} tags removed, "
            f"{len(failures)} failed"
        )


class UnknownContentTypeError(ContentGraphError):
    """No catalog entry exists for a content type.

    Attributes:
        content_type: The unknown type tag.
    """

    def __init__(self, content_type: str) -> None:
        """Initialize UnknownContentTypeError."""
        self.content_type = content_type
        super().__init__(f"Unknown content type: {content_type}")


class ApiConfigError(ContentGraphError):
    """Backend configuration environment variables not set.

    Raised by the CLI when CONTENT_API_URL is missing.
    """

    def __init__(self) -> None:
        """Initialize ApiConfigError."""
        super().__init__(
            "Content API configuration missing. "
            "Set CONTENT_API_URL (and CONTENT_API_TOKEN if the backend requires it)."
        )

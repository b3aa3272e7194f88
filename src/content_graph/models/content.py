"""Content entity models for the game-content catalog.

This module defines the six content variants as a closed tagged union:
- Word: Hebrew vocabulary word (with vocalization and root)
- WordEN: English vocabulary word
- Image: Image file or emoji
- QA: Question with correct and incorrect answers
- Attribute: Typed attribute value (gender, number, verb type, ...)
- ContentList: Named list of content items

Records arrive from the backend as plain dicts without a type field; the
``content_type`` discriminator is injected by ``parse_content`` from the
collection they were read from.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from content_graph.config import PROTECTED_REFERENCE_TYPE


class ContentType(str, Enum):
    """Content variant tag."""

    WORD = "Word"
    WORD_EN = "WordEN"
    IMAGE = "Image"
    QA = "QA"
    ATTRIBUTE = "Attribute"
    CONTENT_LIST = "ContentList"


class Provenance(str, Enum):
    """Who produced a record."""

    MANUAL = "manual"
    AI = "ai"


class EntityRef(BaseModel):
    """Reference to one record: ``(type, id)``.

    ``type`` is a plain string so that the reserved ``Game`` type and
    unimplemented types can be referenced by relationship rows.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    type: str = Field(description="Content type tag or reserved endpoint type")
    id: str = Field(description="Record identifier")

    @classmethod
    def parse(cls, value: str) -> "EntityRef":
        """Parse a ``Type:id`` string.

        Example:
            >>> EntityRef.parse("Word:12")
            EntityRef(type='Word', id='12')
        """
        content_type, sep, entity_id = value.partition(":")
        if not sep or not content_type or not entity_id:
            msg = f"Expected TYPE:ID, got {value!r}"
            raise ValueError(msg)
        return cls(type=content_type, id=entity_id)

    @property
    def is_protected_type(self) -> bool:
        """Whether this reference points at a game."""
        return self.type == PROTECTED_REFERENCE_TYPE

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


def _drop_nulls(data: Any) -> Any:
    """Remove null fields from a raw row so the field defaults apply."""
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if value is not None}
    return data


class BaseContent(BaseModel):
    """Fields shared by every content variant.

    Attributes:
        id: Stable record identifier.
        created_date: Creation timestamp set by the backend.
        source: Provenance flag.
        is_approved: Approval flag.
        added_by: Email of the user who created the record.
        approved_by: Email of the approving user.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(description="Record identifier")
    created_date: datetime | None = Field(default=None, description="Creation timestamp")
    source: Provenance = Field(default=Provenance.MANUAL, description="Provenance flag")
    is_approved: bool = Field(default=False, description="Approval flag")
    added_by: str | None = Field(default=None, description="Creator email")
    approved_by: str | None = Field(default=None, description="Approver email")

    @model_validator(mode="before")
    @classmethod
    def _null_fields_use_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data)

    @property
    def ref(self) -> EntityRef:
        """Reference to this record."""
        return EntityRef(type=self.content_type.value, id=self.id)  # type: ignore[attr-defined]


class Word(BaseContent):
    """Hebrew vocabulary word."""

    content_type: Literal[ContentType.WORD] = ContentType.WORD
    vocalized: str = Field(default="", description="Word with niqqud")
    word: str = Field(default="", description="Word without niqqud")
    root: str = Field(default="", description="Linguistic root")
    context: str = Field(default="", description="Usage context")
    difficulty: int | None = Field(default=None, description="Difficulty level")


class WordEN(BaseContent):
    """English vocabulary word."""

    content_type: Literal[ContentType.WORD_EN] = ContentType.WORD_EN
    word: str = Field(default="", description="English word")
    difficulty: int | None = Field(default=None, description="Difficulty level")


class Image(BaseContent):
    """Uploaded image or emoji.

    ``file_url`` holds either an http(s) URL or the emoji itself.
    """

    content_type: Literal[ContentType.IMAGE] = ContentType.IMAGE
    file_url: str = Field(default="", description="Image URL or emoji")
    description: str = Field(default="", description="Image description")

    @property
    def is_remote(self) -> bool:
        """Whether ``file_url`` points at an uploaded file rather than an emoji."""
        return self.file_url.startswith("http")


class QAAnswer(BaseModel):
    """One correct answer of a QA item."""

    answer_text: str = ""
    points: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _null_fields_use_defaults(cls, data: Any) -> Any:
        return _drop_nulls(data)


class QA(BaseContent):
    """Question with correct and incorrect answers."""

    content_type: Literal[ContentType.QA] = ContentType.QA
    question_text: str = Field(default="", description="Question text")
    correct_answers: list[QAAnswer] = Field(default_factory=list)
    incorrect_answers: list[str] = Field(default_factory=list)


class Attribute(BaseContent):
    """Typed attribute such as gender or grammatical number."""

    content_type: Literal[ContentType.ATTRIBUTE] = ContentType.ATTRIBUTE
    type: str = Field(default="", description="Attribute kind")
    value: str = Field(default="", description="Attribute value")


class ContentList(BaseContent):
    """Named list of content items."""

    content_type: Literal[ContentType.CONTENT_LIST] = ContentType.CONTENT_LIST
    name: str = Field(default="", description="List name")
    description: str = Field(default="", description="List description")


ContentEntity = Annotated[
    Word | WordEN | Image | QA | Attribute | ContentList,
    Field(discriminator="content_type"),
]

_content_adapter: TypeAdapter[ContentEntity] = TypeAdapter(ContentEntity)

WORD_LIKE_TYPES: frozenset[ContentType] = frozenset(
    {ContentType.WORD, ContentType.WORD_EN, ContentType.IMAGE}
)


def parse_content(content_type: ContentType | str, record: dict[str, Any]) -> ContentEntity:
    """Validate a backend record as the given content variant.

    Args:
        content_type: Variant tag of the collection the record came from.
        record: Raw record dict.

    Returns:
        The typed content entity.

    Raises:
        pydantic.ValidationError: If the record does not fit the variant.
    """
    tag = ContentType(content_type)
    return _content_adapter.validate_python({**record, "content_type": tag})

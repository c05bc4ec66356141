"""Chunk data models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class SourceType(str, Enum):
    """Where a chunk's text came from."""

    RULES_PDF = "rules_pdf"  # extracted from an uploaded rules document
    HOUSE_RULE = "house_rule"  # written by a user as a house rule


class Chunk(BaseModel):
    """A span of normalized rule text, the unit of retrieval."""

    id: int | None = None
    game_id: int
    text: str
    index: int = Field(default=0, ge=0)
    source_type: SourceType = SourceType.RULES_PDF
    source_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk text must not be empty")
        return value


class EmbeddedChunk(BaseModel):
    """A chunk paired with the vector computed for its text."""

    chunk: Chunk
    embedding: list[float]

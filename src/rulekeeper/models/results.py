"""Result data models for Rulekeeper queries."""

from typing import Any

from pydantic import BaseModel

from rulekeeper.models.chunk import Chunk, SourceType


class SimilarityResult(BaseModel):
    """A stored chunk and how similar it is to the query vector."""

    chunk: Chunk
    score: float


class RuleMatch(BaseModel):
    """A retrieved rule passage, shaped for callers that hand it to an LLM."""

    chunk_id: int
    chunk_text: str
    similarity_score: float
    source_type: SourceType
    source_id: int | None = None
    metadata: dict[str, Any] = {}

    @classmethod
    def from_result(cls, result: SimilarityResult) -> "RuleMatch":
        chunk = result.chunk
        return cls(
            chunk_id=chunk.id if chunk.id is not None else -1,
            chunk_text=chunk.text,
            similarity_score=result.score,
            source_type=chunk.source_type,
            source_id=chunk.source_id,
            metadata=dict(chunk.metadata),
        )


class RulesAnswer(BaseModel):
    """Full response to a rules question."""

    query: str
    answer: str | None
    context: list[RuleMatch]

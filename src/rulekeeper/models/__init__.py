"""Data models for Rulekeeper."""

from rulekeeper.models.chunk import Chunk, EmbeddedChunk, SourceType
from rulekeeper.models.results import RuleMatch, RulesAnswer, SimilarityResult

__all__ = [
    "Chunk",
    "EmbeddedChunk",
    "SourceType",
    "SimilarityResult",
    "RuleMatch",
    "RulesAnswer",
]

"""Behavioral settings for Rulekeeper.

These settings apply regardless of which embedding or LLM provider is used.
Settings are passed programmatically - the library itself never reads
environment variables. The config module does that for the CLI.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from rulekeeper.chunker import ChunkerConfig
from rulekeeper.search import (
    CHAT_CONTEXT_THRESHOLD,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SIMILARITY_THRESHOLD,
)

# Chunk size presets, in characters
CHUNKING_PROFILES: dict[str, dict[str, int]] = {
    # Short passages, sharper matches for interactive search
    "compact": {
        "min_chunk_size": 100,
        "target_chunk_size": 600,
        "max_chunk_size": 900,
        "overlap_size": 150,
    },
    # Longer passages, more context per match for chat answers
    "wide": {
        "min_chunk_size": 200,
        "target_chunk_size": 1200,
        "max_chunk_size": 1500,
        "overlap_size": 400,
    },
}


class Settings(BaseModel):
    """Behavioral settings for Rulekeeper.

    Example:
        settings = Settings(similarity_threshold=0.6, enhance_queries=False)

        # Or start from a chunking profile
        settings = Settings.with_profile("compact")
    """

    # Chunking
    min_chunk_size: int = 100
    target_chunk_size: int = 1000
    max_chunk_size: int = 1500
    overlap_size: int = 300
    min_sentence_length: int = 10
    use_pysbd_splitter: bool = False  # True = pySBD, False = rulebook heuristic

    # Retrieval
    default_limit: int = Field(default=DEFAULT_SEARCH_LIMIT, ge=1)
    similarity_threshold: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=-1.0, le=1.0)
    chat_similarity_threshold: float = Field(default=CHAT_CONTEXT_THRESHOLD, ge=-1.0, le=1.0)
    enhance_queries: bool = True

    # Answer synthesis
    synthesis_prompt: str | None = None
    synthesis_temperature: float | None = 0.7

    # Retry configuration (LiteLLM handles exponential backoff for RateLimitError)
    num_retries: int = 3

    @model_validator(mode="after")
    def _check_chunking(self) -> Settings:
        # Surface bad sizes when settings are built, not at first ingestion
        self.chunker_config()
        return self

    def chunker_config(self) -> ChunkerConfig:
        """Build the ChunkerConfig described by these settings."""
        return ChunkerConfig(
            min_chunk_size=self.min_chunk_size,
            target_chunk_size=self.target_chunk_size,
            max_chunk_size=self.max_chunk_size,
            overlap_size=self.overlap_size,
            min_sentence_length=self.min_sentence_length,
        )

    @classmethod
    def with_profile(
        cls,
        profile: Literal["compact", "wide"],
        **overrides: Any,
    ) -> Settings:
        """Create Settings from a chunking profile.

        Args:
            profile: The chunking profile to use.
            **overrides: Additional settings to override profile defaults.

        Example:
            settings = Settings.with_profile("wide", similarity_threshold=0.4)
        """
        if profile not in CHUNKING_PROFILES:
            raise ValueError(
                f"Unknown profile '{profile}'. "
                f"Available profiles: {list(CHUNKING_PROFILES.keys())}"
            )

        profile_settings: dict[str, Any] = CHUNKING_PROFILES[profile].copy()
        profile_settings.update(overrides)
        return cls(**profile_settings)

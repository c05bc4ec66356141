# tests/test_settings.py
"""Tests for behavioral settings."""

import pydantic
import pytest

from rulekeeper.chunker import ChunkerConfig
from rulekeeper.settings import CHUNKING_PROFILES, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.min_chunk_size == 100
        assert settings.target_chunk_size == 1000
        assert settings.max_chunk_size == 1500
        assert settings.overlap_size == 300
        assert settings.default_limit == 10
        assert settings.similarity_threshold == 0.5
        assert settings.chat_similarity_threshold == 0.3
        assert settings.enhance_queries is True
        assert settings.use_pysbd_splitter is False
        assert settings.synthesis_prompt is None
        assert settings.synthesis_temperature == 0.7
        assert settings.num_retries == 3

    def test_chunker_config(self):
        config = Settings(min_chunk_size=50, overlap_size=10).chunker_config()

        assert config == ChunkerConfig(min_chunk_size=50, overlap_size=10)

    def test_invalid_chunk_sizes_rejected_early(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(min_chunk_size=2000)

    def test_threshold_bounds(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(similarity_threshold=1.5)

    def test_limit_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(default_limit=0)


class TestProfiles:
    @pytest.mark.parametrize("profile", sorted(CHUNKING_PROFILES))
    def test_profiles_are_valid(self, profile):
        settings = Settings.with_profile(profile)

        for key, value in CHUNKING_PROFILES[profile].items():
            assert getattr(settings, key) == value

    @pytest.mark.parametrize("profile", sorted(CHUNKING_PROFILES))
    def test_profiles_stay_within_default_chunk_bounds(self, profile):
        defaults = ChunkerConfig()
        sizes = CHUNKING_PROFILES[profile]

        assert sizes["min_chunk_size"] >= defaults.min_chunk_size
        assert sizes["max_chunk_size"] <= defaults.max_chunk_size

    def test_overrides(self):
        settings = Settings.with_profile("wide", similarity_threshold=0.4, overlap_size=100)

        assert settings.similarity_threshold == 0.4
        assert settings.overlap_size == 100
        assert settings.max_chunk_size == CHUNKING_PROFILES["wide"]["max_chunk_size"]

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            Settings.with_profile("huge")  # type: ignore[arg-type]

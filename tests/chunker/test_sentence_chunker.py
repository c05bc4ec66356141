# tests/chunker/test_sentence_chunker.py
"""Tests for the sentence-aware chunker."""

import pydantic
import pytest

from rulekeeper.chunker import Chunker, ChunkerConfig, SentenceChunker, normalize_text


def rule_sentences(count: int) -> list[str]:
    return [f"Rule number {i} says players must follow it carefully." for i in range(1, count + 1)]


@pytest.fixture
def small_chunker():
    return SentenceChunker(
        ChunkerConfig(
            min_chunk_size=10,
            target_chunk_size=15,
            max_chunk_size=25,
            overlap_size=10,
            min_sentence_length=5,
        )
    )


class TestChunkerConfig:
    def test_defaults(self):
        config = ChunkerConfig()
        assert config.min_chunk_size == 100
        assert config.target_chunk_size == 1000
        assert config.max_chunk_size == 1500
        assert config.overlap_size == 300
        assert config.min_sentence_length == 10

    def test_min_must_be_below_max(self):
        with pytest.raises(pydantic.ValidationError, match="min_chunk_size"):
            ChunkerConfig(min_chunk_size=500, target_chunk_size=500, max_chunk_size=500)

    def test_target_must_be_within_bounds(self):
        with pytest.raises(pydantic.ValidationError, match="target_chunk_size"):
            ChunkerConfig(min_chunk_size=100, target_chunk_size=2000, max_chunk_size=1500)

    def test_overlap_must_be_below_max(self):
        with pytest.raises(pydantic.ValidationError, match="overlap_size"):
            ChunkerConfig(max_chunk_size=1500, overlap_size=1500)


class TestNormalizeText:
    def test_collapses_lines_and_spaces(self):
        assert normalize_text("  Line one  \n\n  line two \t  x ") == "Line one line two x"

    def test_blank_text(self):
        assert normalize_text("\n  \n\t") == ""


class TestIsGoodBoundary:
    @pytest.mark.parametrize(
        "sentence",
        [
            "Players draw two cards.",
            "The player with the most points wins.",
            "Therefore, the first player goes again.",
            "The round is complete.",
        ],
    )
    def test_good_boundaries(self, sentence):
        assert SentenceChunker.is_good_boundary(sentence)

    @pytest.mark.parametrize(
        "sentence",
        [
            "Then roll the dice.",
            "Before moving, discard a card.",
            "Each turn has three phases:",
        ],
    )
    def test_bad_boundaries(self, sentence):
        assert not SentenceChunker.is_good_boundary(sentence)


class TestSentenceChunker:
    def test_is_chunker(self):
        assert isinstance(SentenceChunker(), Chunker)

    def test_empty_text(self):
        assert SentenceChunker().chunk("") == []
        assert SentenceChunker().chunk("   \n\n ") == []

    def test_small_text_below_min_is_dropped(self):
        # Shorter than min_chunk_size and nothing to merge into
        assert SentenceChunker().chunk("Roll the dice to start.") == []

    def test_overlapping_chunks(self, small_chunker):
        chunks = small_chunker.chunk("Rule one. Rule two. Rule three.")

        assert chunks == ["Rule one. Rule two.", "Rule two. Rule three."]

    def test_normalizes_before_chunking(self, small_chunker):
        chunks = small_chunker.chunk("Rule one.\n\n   Rule two.\nRule three.")

        assert chunks == ["Rule one. Rule two.", "Rule two. Rule three."]

    def test_chunks_respect_size_bounds(self):
        config = ChunkerConfig(
            min_chunk_size=50, target_chunk_size=200, max_chunk_size=300, overlap_size=60
        )
        chunks = SentenceChunker(config).chunk(" ".join(rule_sentences(29)))

        assert len(chunks) > 1
        for chunk in chunks:
            assert config.min_chunk_size <= len(chunk) <= config.max_chunk_size

    def test_next_chunk_opens_with_previous_sentence(self):
        config = ChunkerConfig(
            min_chunk_size=50, target_chunk_size=200, max_chunk_size=300, overlap_size=60
        )
        chunks = SentenceChunker(config).chunk(" ".join(rule_sentences(29)))

        for previous, current in zip(chunks, chunks[1:], strict=False):
            last_sentence = previous.rsplit(". ", 1)[-1]
            assert current.startswith(last_sentence)

    def test_no_overlap(self):
        config = ChunkerConfig(
            min_chunk_size=50, target_chunk_size=200, max_chunk_size=300, overlap_size=0
        )
        sentences = rule_sentences(20)
        chunks = SentenceChunker(config).chunk(" ".join(sentences))

        assert " ".join(chunks) == " ".join(sentences)

    @pytest.mark.parametrize("overlap_size", [60, 120, 200])
    @pytest.mark.parametrize("count", [7, 29, 50])
    def test_every_sentence_kept_with_overlap(self, overlap_size, count):
        config = ChunkerConfig(
            min_chunk_size=50,
            target_chunk_size=200,
            max_chunk_size=300,
            overlap_size=overlap_size,
        )
        chunker = SentenceChunker(config)
        text = " ".join(
            sentence if i % 3 else f"{sentence} Then trade card {i} with the bank."
            for i, sentence in enumerate(rule_sentences(count))
        )

        chunks = chunker.chunk(text)
        kept = chunker.splitter.split(normalize_text(text))

        for sentence in kept:
            assert any(sentence in chunk for chunk in chunks), sentence
        first_seen = [next(i for i, c in enumerate(chunks) if s in c) for s in kept]
        assert first_seen == sorted(first_seen)

    def test_oversized_sentence_is_split(self):
        config = ChunkerConfig(
            min_chunk_size=10,
            target_chunk_size=50,
            max_chunk_size=60,
            overlap_size=0,
            min_sentence_length=0,
        )
        text = " ".join(["word"] * 40)

        chunks = SentenceChunker(config).chunk(text)

        assert all(len(chunk) <= config.max_chunk_size for chunk in chunks)
        assert " ".join(chunks).split() == ["word"] * 40

    def test_waits_for_good_boundary_past_target(self):
        config = ChunkerConfig(
            min_chunk_size=10,
            target_chunk_size=15,
            max_chunk_size=200,
            overlap_size=0,
            min_sentence_length=0,
        )
        text = "Set up the board. Then roll the dice. Each player draws cards."

        chunks = SentenceChunker(config).chunk(text)

        # "Then roll the dice." is not a good place to stop
        assert chunks == ["Set up the board.", "Then roll the dice. Each player draws cards."]

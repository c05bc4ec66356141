"""Sentence-aware chunker implementation."""

import logging
import re

from pydantic import BaseModel, Field, model_validator

from rulekeeper.chunker.base import Chunker, SentenceSplitter
from rulekeeper.chunker.splitters import HeuristicSentenceSplitter

logger = logging.getLogger(__name__)

CONCLUDING_MARKERS = re.compile(r"\b(therefore|thus|finally|in conclusion)\b", re.IGNORECASE)
SELF_CONTAINED_ENDINGS = ("wins.", "wins!", "complete.", "finished.")
SEQUENCING_WORDS = re.compile(r"\b(first|then|next|after|before)\b", re.IGNORECASE)

_SPACE_RUNS = re.compile(r"\s{2,}")


class ChunkerConfig(BaseModel):
    """Size policy for SentenceChunker (all sizes in characters)."""

    min_chunk_size: int = Field(default=100, ge=1)
    target_chunk_size: int = Field(default=1000, ge=1)
    max_chunk_size: int = Field(default=1500, ge=2)
    overlap_size: int = Field(default=300, ge=0)
    min_sentence_length: int = Field(default=10, ge=0)

    @model_validator(mode="after")
    def _check_sizes(self) -> "ChunkerConfig":
        if self.min_chunk_size >= self.max_chunk_size:
            raise ValueError("min_chunk_size must be smaller than max_chunk_size")
        if not self.min_chunk_size <= self.target_chunk_size <= self.max_chunk_size:
            raise ValueError("target_chunk_size must lie between min and max chunk size")
        if self.overlap_size >= self.max_chunk_size:
            raise ValueError("overlap_size must be smaller than max_chunk_size")
        return self


def normalize_text(text: str) -> str:
    """Trim every line, drop blank lines, and join the rest with single spaces."""
    lines = (line.strip() for line in text.splitlines())
    joined = " ".join(line for line in lines if line)
    return _SPACE_RUNS.sub(" ", joined)


def _joined_length(sentences: list[str]) -> int:
    if not sentences:
        return 0
    return sum(len(s) for s in sentences) + len(sentences) - 1


class SentenceChunker(Chunker):
    """Greedy sentence packer with overlapping chunk boundaries.

    Sentences are appended to the current chunk until either:
    - the next sentence would push it past max_chunk_size (and the chunk
      already holds min_chunk_size characters), or
    - it reached target_chunk_size and the last sentence is a good place
      to stop (see is_good_boundary).

    Each new chunk opens with the trailing sentences of the previous one,
    up to overlap_size characters, so context carries across boundaries.

    Example:
        chunker = SentenceChunker()
        chunks = chunker.chunk(extracted_pdf_text)
    """

    def __init__(
        self,
        config: ChunkerConfig | None = None,
        splitter: SentenceSplitter | None = None,
    ) -> None:
        """Initialize the chunker.

        Args:
            config: Size policy. Defaults to ChunkerConfig().
            splitter: Sentence splitter. Defaults to HeuristicSentenceSplitter
                      using config.min_sentence_length.
        """
        self.config = config or ChunkerConfig()
        self.splitter = splitter or HeuristicSentenceSplitter(
            min_length=self.config.min_sentence_length
        )

    def chunk(self, text: str) -> list[str]:
        normalized = normalize_text(text)
        if not normalized:
            return []

        sentences = self._sentences(normalized)
        chunks = self._pack(sentences)
        logger.debug(
            "Chunked %d characters into %d chunks (%d sentences)",
            len(normalized),
            len(chunks),
            len(sentences),
        )
        return chunks

    @staticmethod
    def is_good_boundary(sentence: str) -> bool:
        """Judge whether a chunk may end after this sentence."""
        lowered = sentence.strip().lower()
        if CONCLUDING_MARKERS.search(lowered) or lowered.endswith(SELF_CONTAINED_ENDINGS):
            return True
        return not SEQUENCING_WORDS.search(lowered) and not lowered.endswith(":")

    def _sentences(self, normalized: str) -> list[str]:
        # Anything longer than this could overflow max_chunk_size even when
        # appended to a chunk that is still below min_chunk_size.
        limit = self.config.max_chunk_size - self.config.min_chunk_size
        sentences: list[str] = []
        for sentence in self.splitter.split(normalized):
            sentences.extend(self._force_split(sentence, limit))
        return sentences

    @staticmethod
    def _force_split(sentence: str, limit: int) -> list[str]:
        pieces: list[str] = []
        remaining = sentence
        while len(remaining) > limit:
            cut = remaining.rfind(" ", 0, limit + 1)
            if cut < limit // 2:
                cut = limit
            pieces.append(remaining[:cut].strip())
            remaining = remaining[cut:].strip()
        if remaining:
            pieces.append(remaining)
        return pieces

    def _overlap(self, sentences: list[str]) -> list[str]:
        carried: list[str] = []
        total = 0
        for sentence in reversed(sentences):
            extra = len(sentence) + (1 if carried else 0)
            if total + extra > self.config.overlap_size:
                break
            carried.insert(0, sentence)
            total += extra
        return carried

    def _pack(self, sentences: list[str]) -> list[str]:
        cfg = self.config
        chunks: list[str] = []
        buffer: list[str] = []
        size = 0
        fresh = 0  # sentences added since the last close, excluding overlap

        for sentence in sentences:
            overflows = size + 1 + len(sentence) > cfg.max_chunk_size
            if buffer and overflows and size >= cfg.min_chunk_size:
                if fresh:
                    chunks.append(" ".join(buffer))
                    buffer = self._overlap(buffer)
                else:
                    buffer = []
                if buffer and _joined_length(buffer) + 1 + len(sentence) > cfg.max_chunk_size:
                    buffer = []
                size = _joined_length(buffer)
                fresh = 0

            size += len(sentence) + (1 if buffer else 0)
            buffer.append(sentence)
            fresh += 1

            if size >= cfg.target_chunk_size and self.is_good_boundary(sentence):
                chunks.append(" ".join(buffer))
                buffer = self._overlap(buffer)
                size = _joined_length(buffer)
                fresh = 0

        if fresh:
            self._close_tail(chunks, buffer, fresh, size)
        return chunks

    def _close_tail(self, chunks: list[str], buffer: list[str], fresh: int, size: int) -> None:
        cfg = self.config
        if size >= cfg.min_chunk_size:
            chunks.append(" ".join(buffer))
            return

        tail = " ".join(buffer[-fresh:])
        if chunks and len(chunks[-1]) + 1 + len(tail) <= cfg.max_chunk_size:
            chunks[-1] = f"{chunks[-1]} {tail}"
        else:
            logger.debug("Dropping %d-character tail below min_chunk_size", len(tail))

"""Document chunking for Rulekeeper.

This module exports:
- Chunker: Abstract base class for chunkers
- SentenceSplitter: Abstract base class for sentence segmentation
- HeuristicSentenceSplitter: Rulebook-tuned splitter (default)
- PySBDSentenceSplitter: pySBD-backed splitter
- SentenceChunker / ChunkerConfig: Overlapping sentence-aware chunker

Example:
    from rulekeeper.chunker import ChunkerConfig, SentenceChunker

    chunker = SentenceChunker(ChunkerConfig(target_chunk_size=800))
    chunks = chunker.chunk(text)
"""

from rulekeeper.chunker.base import Chunker, SentenceSplitter
from rulekeeper.chunker.sentence import ChunkerConfig, SentenceChunker, normalize_text
from rulekeeper.chunker.splitters import HeuristicSentenceSplitter, PySBDSentenceSplitter

__all__ = [
    "Chunker",
    "SentenceSplitter",
    "HeuristicSentenceSplitter",
    "PySBDSentenceSplitter",
    "SentenceChunker",
    "ChunkerConfig",
    "normalize_text",
]

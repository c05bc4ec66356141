"""Chunker and sentence splitter abstract base classes."""

from abc import ABC, abstractmethod


class SentenceSplitter(ABC):
    """Abstract base class for sentence segmentation.

    Sentence detection is a heuristic layer; implementations can be swapped
    without touching the chunking policy built on top of them.
    """

    @abstractmethod
    def split(self, text: str) -> list[str]:
        """Split normalized text into trimmed sentences, in document order."""
        ...


class Chunker(ABC):
    """Abstract base class for document chunking."""

    @abstractmethod
    def chunk(self, text: str) -> list[str]:
        """Split raw document text into chunk strings, in document order."""
        ...

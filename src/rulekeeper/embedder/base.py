"""Embedder abstract base class."""

from abc import ABC, abstractmethod

from rulekeeper.models import Chunk, EmbeddedChunk


class Embedder(ABC):
    """Abstract base class for embedding generation.

    Subclasses must implement embed_one and embed_many. The async variants
    default to the sync ones; override them when the backend has a native
    async path.
    """

    @abstractmethod
    def embed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        ...

    @abstractmethod
    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        ...

    async def aembed_one(self, text: str) -> list[float]:
        return self.embed_one(text)

    async def aembed_many(self, texts: list[str]) -> list[list[float]]:
        return self.embed_many(texts)

    def embed_chunks(self, chunks: list[Chunk]) -> list[EmbeddedChunk]:
        """Embed multiple chunks (batched for efficiency)."""
        if not chunks:
            return []
        embeddings = self.embed_many([c.text for c in chunks])
        return [
            EmbeddedChunk(chunk=c, embedding=emb)
            for c, emb in zip(chunks, embeddings, strict=True)
        ]

    async def aembed_chunks(self, chunks: list[Chunk]) -> list[EmbeddedChunk]:
        """Embed multiple chunks (async, batched)."""
        if not chunks:
            return []
        embeddings = await self.aembed_many([c.text for c in chunks])
        return [
            EmbeddedChunk(chunk=c, embedding=emb)
            for c, emb in zip(chunks, embeddings, strict=True)
        ]

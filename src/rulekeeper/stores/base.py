"""Abstract base classes for storage."""

import asyncio
from abc import ABC, abstractmethod

from rulekeeper.models import Chunk, EmbeddedChunk, SourceType


class VectorIndex(ABC):
    """Abstract base class for an approximate nearest-neighbour index.

    The index only knows chunk ids, the game each chunk belongs to, and the
    vectors. Chunk text and metadata stay in the VectorStore.
    """

    @abstractmethod
    def add(self, entries: list[tuple[int, int, list[float]]]) -> None:
        """Add (chunk_id, game_id, vector) entries, overwriting existing ids."""
        ...

    @abstractmethod
    def query(self, vector: list[float], n: int) -> list[tuple[int, float]]:
        """Return up to n (chunk_id, cosine distance) pairs, nearest first, across all games."""
        ...

    @abstractmethod
    def delete(self, chunk_ids: list[int]) -> None:
        """Remove the given chunk ids. Unknown ids are ignored."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Count the vectors in the index."""
        ...

    def close(self) -> None:
        """Release resources held by the index."""


class VectorStore(ABC):
    """Abstract base class for chunk + vector storage.

    Batch writes are all-or-nothing: when any item fails, nothing from the
    batch is persisted and StorageError is raised.

    Every operation has an ``a``-prefixed coroutine twin. The defaults run
    the sync operation in a worker thread so callers on an event loop never
    block other tasks while waiting for the store.
    """

    @abstractmethod
    def insert(self, item: EmbeddedChunk) -> int:
        """Store one chunk with its vector. Returns the new chunk id."""
        ...

    @abstractmethod
    def insert_batch(self, items: list[EmbeddedChunk]) -> list[int]:
        """Store chunks with their vectors in one transaction. Returns ids in input order."""
        ...

    @abstractmethod
    def replace_batch(
        self,
        game_id: int,
        source_type: SourceType,
        items: list[EmbeddedChunk],
        source_id: int | None = None,
    ) -> list[int]:
        """Delete a game's chunks of one source type (and owner, if given), then insert items.

        Both steps run in the same transaction.
        """
        ...

    @abstractmethod
    def list_by_game(self, game_id: int, source_type: SourceType | None = None) -> list[Chunk]:
        """List a game's chunks ordered by (source_type, chunk_index)."""
        ...

    @abstractmethod
    def list_with_vectors(self, game_id: int) -> list[tuple[Chunk, list[float]]]:
        """List a game's chunks with their vectors, in insertion order."""
        ...

    @abstractmethod
    def get_many(self, chunk_ids: list[int]) -> list[Chunk]:
        """Retrieve chunks by id, in the order given. Skips missing ids."""
        ...

    @abstractmethod
    def delete_by_game(self, game_id: int, source_type: SourceType | None = None) -> int:
        """Delete a game's chunks, optionally only one source type. Returns the count deleted."""
        ...

    @abstractmethod
    def delete_by_owner(self, owner_id: int) -> int:
        """Delete all chunks authored by one house rule. Returns the count deleted."""
        ...

    @abstractmethod
    def get_vector_by_id(self, chunk_id: int) -> list[float]:
        """Return a chunk's vector. Raises NotFoundError for an unknown id."""
        ...

    @abstractmethod
    def count_chunks(self, game_id: int | None = None) -> int:
        """Count stored chunks, optionally for one game."""
        ...

    def close(self) -> None:
        """Release resources held by the store."""

    async def ainsert(self, item: EmbeddedChunk) -> int:
        return await asyncio.to_thread(self.insert, item)

    async def ainsert_batch(self, items: list[EmbeddedChunk]) -> list[int]:
        return await asyncio.to_thread(self.insert_batch, items)

    async def areplace_batch(
        self,
        game_id: int,
        source_type: SourceType,
        items: list[EmbeddedChunk],
        source_id: int | None = None,
    ) -> list[int]:
        return await asyncio.to_thread(self.replace_batch, game_id, source_type, items, source_id)

    async def alist_by_game(
        self, game_id: int, source_type: SourceType | None = None
    ) -> list[Chunk]:
        return await asyncio.to_thread(self.list_by_game, game_id, source_type)

    async def alist_with_vectors(self, game_id: int) -> list[tuple[Chunk, list[float]]]:
        return await asyncio.to_thread(self.list_with_vectors, game_id)

    async def aget_many(self, chunk_ids: list[int]) -> list[Chunk]:
        return await asyncio.to_thread(self.get_many, chunk_ids)

    async def adelete_by_game(self, game_id: int, source_type: SourceType | None = None) -> int:
        return await asyncio.to_thread(self.delete_by_game, game_id, source_type)

    async def adelete_by_owner(self, owner_id: int) -> int:
        return await asyncio.to_thread(self.delete_by_owner, owner_id)

    async def aget_vector_by_id(self, chunk_id: int) -> list[float]:
        return await asyncio.to_thread(self.get_vector_by_id, chunk_id)

    async def acount_chunks(self, game_id: int | None = None) -> int:
        return await asyncio.to_thread(self.count_chunks, game_id)

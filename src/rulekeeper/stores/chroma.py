"""ChromaDB vector index implementation."""

import logging
from pathlib import Path

import chromadb

from rulekeeper.stores.base import VectorIndex

logger = logging.getLogger(__name__)


class ChromaVectorIndex(VectorIndex):
    """ChromaDB-based nearest-neighbour index over chunk vectors.

    Uses a cosine HNSW space, so returned distances are ``1 - cosine``.
    Each entry is keyed by the chunk id and tagged with its game id.
    """

    def __init__(self, persist_dir: str | None = None, collection_name: str = "rulekeeper") -> None:
        """Initialize the ChromaDB index.

        Args:
            persist_dir: Directory for the persistent client. None keeps the
                         index in memory (useful in tests).
            collection_name: Name of the Chroma collection.
        """
        if persist_dir is None:
            self._client = chromadb.EphemeralClient()
        else:
            Path(persist_dir).mkdir(parents=True, exist_ok=True)
            self._client = chromadb.PersistentClient(path=persist_dir)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def close(self) -> None:
        """Close the index and release resources.

        ChromaDB doesn't have an official close method, so we call the internal
        _system.stop() to release file handles.

        See: https://github.com/chroma-core/chroma/issues/5868
        """
        self._collection = None  # type: ignore[assignment]
        client, self._client = self._client, None
        if client is not None and hasattr(client, "_system"):
            try:
                client._system.stop()
            except Exception:
                logger.debug("Chroma client shutdown failed", exc_info=True)

    def add(self, entries: list[tuple[int, int, list[float]]]) -> None:
        """Add (chunk_id, game_id, vector) entries."""
        if not entries:
            return

        self._collection.upsert(
            ids=[str(chunk_id) for chunk_id, _, _ in entries],
            embeddings=[vector for _, _, vector in entries],  # type: ignore[arg-type]
            metadatas=[{"game_id": game_id} for _, game_id, _ in entries],
        )

    def query(self, vector: list[float], n: int) -> list[tuple[int, float]]:
        """Return up to n nearest (chunk_id, distance) pairs across all games."""
        count = self._collection.count()
        if count == 0 or n <= 0:
            return []

        try:
            results = self._collection.query(
                query_embeddings=[vector],  # type: ignore[arg-type]
                n_results=min(n, count),
                include=["distances"],
            )
        except Exception as e:
            # Chroma rejects queries whose dimension differs from the collection
            if "dimension" not in str(e).lower():
                raise
            logger.warning("Vector index query skipped: %s", e)
            return []

        ids = results["ids"][0]
        distances = results["distances"][0]  # type: ignore[index]
        return [(int(cid), float(dist)) for cid, dist in zip(ids, distances, strict=True)]

    def delete(self, chunk_ids: list[int]) -> None:
        """Remove chunk ids from the index."""
        if not chunk_ids:
            return
        self._collection.delete(ids=[str(cid) for cid in chunk_ids])

    def count(self) -> int:
        """Count the vectors in the index."""
        return self._collection.count()

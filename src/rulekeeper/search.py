"""Similarity search over stored rule chunks.

Two backends share one contract:

- ExhaustiveScanBackend loads every vector stored for the game and scores
  it with cosine similarity.
- IndexAssistedBackend asks a VectorIndex for the nearest neighbours across
  all games, then keeps those that belong to the game and pass the threshold.

Either way, results come back best first, never more than ``limit`` of them,
and every score is at least the threshold.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from rulekeeper.models import SimilarityResult
from rulekeeper.stores import VectorIndex, VectorStore
from rulekeeper.vectors import cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10
DEFAULT_SIMILARITY_THRESHOLD = 0.5
# Chat answers favour recall over precision
CHAT_CONTEXT_THRESHOLD = 0.3

# The index is asked for more neighbours than needed because results from
# other games and below-threshold hits are filtered out afterwards.
INDEX_OVERFETCH_FACTOR = 3
INDEX_MIN_CANDIDATES = 50


class SearchBackend(ABC):
    """Strategy that ranks a game's chunks against a query vector."""

    @abstractmethod
    def search(
        self,
        game_id: int,
        query_vector: list[float],
        limit: int,
        threshold: float,
    ) -> list[SimilarityResult]:
        """Return at most ``limit`` results with score >= threshold, best first."""
        ...


class ExhaustiveScanBackend(SearchBackend):
    """Scores every chunk of the game. Exact, linear in the game's chunk count."""

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    def search(
        self,
        game_id: int,
        query_vector: list[float],
        limit: int,
        threshold: float,
    ) -> list[SimilarityResult]:
        scored = [
            SimilarityResult(chunk=chunk, score=cosine_similarity(query_vector, vector))
            for chunk, vector in self.store.list_with_vectors(game_id)
        ]
        # sorted() is stable, and list_with_vectors returns insertion order
        ranked = sorted(
            (r for r in scored if r.score >= threshold),
            key=lambda r: r.score,
            reverse=True,
        )
        return ranked[:limit]


class IndexAssistedBackend(SearchBackend):
    """Uses a nearest-neighbour index, then filters by game and threshold."""

    def __init__(self, store: VectorStore, index: VectorIndex) -> None:
        self.store = store
        self.index = index

    def search(
        self,
        game_id: int,
        query_vector: list[float],
        limit: int,
        threshold: float,
    ) -> list[SimilarityResult]:
        candidates = self.index.query(
            query_vector, max(limit * INDEX_OVERFETCH_FACTOR, INDEX_MIN_CANDIDATES)
        )
        if not candidates:
            return []

        chunks = {c.id: c for c in self.store.get_many([cid for cid, _ in candidates])}
        results: list[SimilarityResult] = []
        for chunk_id, distance in candidates:
            chunk = chunks.get(chunk_id)
            if chunk is None or chunk.game_id != game_id:
                continue
            similarity = 1.0 - distance
            if similarity < threshold:
                continue
            results.append(SimilarityResult(chunk=chunk, score=similarity))
            if len(results) >= limit:
                break
        return results


class SimilaritySearchEngine:
    """Ranks stored chunks of a game against a query vector.

    Picks the index-assisted backend when a VectorIndex is available and
    falls back to an exhaustive scan otherwise.

    Example:
        engine = SimilaritySearchEngine(store)
        results = engine.search(game_id=1, query_vector=embedder.embed_one("How do I win?"))
    """

    def __init__(
        self,
        store: VectorStore,
        index: VectorIndex | None = None,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        default_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        """Initialize the search engine.

        Args:
            store: Store holding the chunks and vectors
            index: Optional nearest-neighbour index over the same vectors
            default_limit: Limit used when a caller passes None
            default_threshold: Threshold used when a caller passes None
        """
        self.store = store
        self.default_limit = default_limit
        self.default_threshold = default_threshold
        self.backend: SearchBackend
        if index is not None:
            self.backend = IndexAssistedBackend(store, index)
        else:
            self.backend = ExhaustiveScanBackend(store)

    def search(
        self,
        game_id: int,
        query_vector: list[float],
        limit: int | None = None,
        similarity_threshold: float | None = None,
    ) -> list[SimilarityResult]:
        """Find the chunks of a game most similar to the query vector.

        Args:
            game_id: Game whose chunks are searched. Unknown games yield [].
            query_vector: Embedding of the query.
            limit: Maximum number of results (default: self.default_limit).
            similarity_threshold: Minimum score (default: self.default_threshold).

        Returns:
            Results ordered by score, highest first. Ties keep insertion order.
        """
        limit = self.default_limit if limit is None else limit
        threshold = self.default_threshold if similarity_threshold is None else similarity_threshold
        if limit <= 0:
            return []

        results = self.backend.search(game_id, query_vector, limit, threshold)
        logger.debug(
            "Search in game %d returned %d results (limit=%d, threshold=%.2f, backend=%s)",
            game_id,
            len(results),
            limit,
            threshold,
            type(self.backend).__name__,
        )
        return results

    async def asearch(
        self,
        game_id: int,
        query_vector: list[float],
        limit: int | None = None,
        similarity_threshold: float | None = None,
    ) -> list[SimilarityResult]:
        """Async variant of search(); the store work runs in a worker thread."""
        return await asyncio.to_thread(
            self.search, game_id, query_vector, limit, similarity_threshold
        )

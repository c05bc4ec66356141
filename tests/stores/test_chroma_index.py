# tests/stores/test_chroma_index.py
"""Tests for the ChromaDB vector index."""

import os

import pytest

pytest.importorskip("chromadb", reason="Tests require chromadb package")

from rulekeeper.models import Chunk, EmbeddedChunk
from rulekeeper.stores import ChromaVectorIndex, SQLiteVectorStore, VectorIndex


@pytest.fixture
def index(temp_dir):
    idx = ChromaVectorIndex(os.path.join(temp_dir, "chroma"))
    yield idx
    idx.close()


class TestChromaVectorIndex:
    def test_is_vector_index(self, index):
        assert isinstance(index, VectorIndex)

    def test_add_and_count(self, index):
        index.add([(1, 10, [1.0, 0.0, 0.0]), (2, 10, [0.0, 1.0, 0.0])])

        assert index.count() == 2

    def test_add_empty(self, index):
        index.add([])
        assert index.count() == 0

    def test_query_returns_cosine_distances(self, index):
        index.add([(1, 10, [1.0, 0.0, 0.0]), (2, 20, [0.0, 1.0, 0.0])])

        results = index.query([1.0, 0.0, 0.0], 5)

        assert [chunk_id for chunk_id, _ in results] == [1, 2]
        assert results[0][1] == pytest.approx(0.0, abs=1e-5)
        assert results[1][1] == pytest.approx(1.0, abs=1e-5)

    def test_query_empty_index(self, index):
        assert index.query([1.0, 0.0], 5) == []

    def test_query_zero_results(self, index):
        index.add([(1, 10, [1.0, 0.0])])
        assert index.query([1.0, 0.0], 0) == []

    def test_query_dimension_mismatch(self, index):
        index.add([(1, 10, [1.0, 0.0, 0.0])])

        assert index.query([1.0, 0.0], 5) == []

    def test_add_is_upsert(self, index):
        index.add([(1, 10, [1.0, 0.0])])
        index.add([(1, 10, [0.0, 1.0])])

        assert index.count() == 1
        assert index.query([0.0, 1.0], 1)[0][0] == 1

    def test_delete(self, index):
        index.add([(1, 10, [1.0, 0.0]), (2, 10, [0.0, 1.0])])

        index.delete([1])
        index.delete([])

        assert index.count() == 1

class TestStoreWithChromaIndex:
    def test_store_keeps_index_in_step(self, temp_dir):
        index = ChromaVectorIndex(os.path.join(temp_dir, "chroma"))
        store = SQLiteVectorStore(os.path.join(temp_dir, "rules.db"), index=index)
        try:
            ids = store.insert_batch(
                [
                    EmbeddedChunk(chunk=Chunk(game_id=1, text="Rule A."), embedding=[1.0, 0.0]),
                    EmbeddedChunk(chunk=Chunk(game_id=2, text="Rule B."), embedding=[0.0, 1.0]),
                ]
            )
            assert index.count() == 2

            store.delete_by_game(1)

            assert index.count() == 1
            assert index.query([0.0, 1.0], 5)[0][0] == ids[1]
        finally:
            store.close()

# tests/test_rulekeeper.py
"""Tests for the Rulekeeper class."""

import os

import pytest
from conftest import MINIMAL_PDF, FakeProvider, RecordingLLMClient, StaticExtractor

from rulekeeper.chunker import PySBDSentenceSplitter
from rulekeeper.configuration import LocalStorage
from rulekeeper.models import SourceType
from rulekeeper.rulekeeper import Rulekeeper
from rulekeeper.search import ExhaustiveScanBackend
from rulekeeper.settings import Settings
from rulekeeper.stores import SQLiteVectorStore

RULES_TEXT = (
    "Each player starts with two settlements and two roads on the board. "
    "The first player to reach 10 victory points wins the game."
)


@pytest.fixture
def keeper(temp_dir, fake_provider):
    instance = Rulekeeper(
        provider=fake_provider,
        storage=LocalStorage(temp_dir),
        settings=Settings(
            min_chunk_size=20,
            target_chunk_size=60,
            max_chunk_size=200,
            overlap_size=0,
            min_sentence_length=5,
        ),
        extractor=StaticExtractor(RULES_TEXT),
    )
    yield instance
    instance.close()


class TestRulekeeperInit:
    def test_init_with_storage_bundle(self, temp_dir, fake_provider):
        keeper = Rulekeeper(provider=fake_provider, storage=LocalStorage(temp_dir))
        try:
            assert isinstance(keeper.store, SQLiteVectorStore)
            assert keeper.index is None
            assert keeper.upload_dir == LocalStorage(temp_dir).upload_dir()
            assert os.path.exists(os.path.join(temp_dir, "rules.db"))
        finally:
            keeper.close()

    def test_from_store(self, temp_dir, fake_provider):
        store = SQLiteVectorStore(":memory:")
        keeper = Rulekeeper.from_store(
            provider=fake_provider, store=store, upload_dir=os.path.join(temp_dir, "up")
        )
        try:
            assert keeper.store is store
            assert keeper.embedder is fake_provider.embedder
        finally:
            keeper.close()

    def test_requires_storage(self, fake_provider):
        with pytest.raises(ValueError, match="Must provide"):
            Rulekeeper(provider=fake_provider)

    def test_store_without_upload_dir(self, fake_provider):
        with pytest.raises(ValueError):
            Rulekeeper(provider=fake_provider, store=SQLiteVectorStore(":memory:"))

    def test_cannot_mix_storage_and_store(self, temp_dir, fake_provider):
        with pytest.raises(ValueError, match="Cannot mix"):
            Rulekeeper(
                provider=fake_provider,
                storage=LocalStorage(temp_dir),
                store=SQLiteVectorStore(":memory:"),
            )

    def test_default_settings(self, temp_dir, fake_provider):
        keeper = Rulekeeper(provider=fake_provider, storage=LocalStorage(temp_dir))
        try:
            assert keeper.settings == Settings()
        finally:
            keeper.close()


class TestFactories:
    def test_search_engine_uses_settings(self, keeper):
        engine = keeper.search_engine()

        assert isinstance(engine.backend, ExhaustiveScanBackend)
        assert engine.default_limit == keeper.settings.default_limit
        assert engine.default_threshold == keeper.settings.similarity_threshold

    def test_retriever_without_synthesis(self, keeper, fake_provider):
        retriever = keeper.retriever()

        assert retriever._llm_client is None
        assert retriever.enhancer is not None

    def test_retriever_with_synthesis(self, keeper, fake_provider):
        assert keeper.retriever(synthesize=True)._llm_client is fake_provider.llm_client

    def test_retriever_without_enhancer(self, temp_dir, fake_provider):
        keeper = Rulekeeper(
            provider=fake_provider,
            storage=LocalStorage(temp_dir),
            settings=Settings(enhance_queries=False),
        )
        try:
            assert keeper.retriever().enhancer is None
        finally:
            keeper.close()

    def test_ingestor_uses_chunk_settings(self, keeper):
        ingestor = keeper.ingestor()

        assert ingestor.chunker.config == keeper.settings.chunker_config()
        assert ingestor.upload_dir == keeper.upload_dir

    def test_ingestor_with_pysbd(self, temp_dir, fake_provider):
        keeper = Rulekeeper(
            provider=fake_provider,
            storage=LocalStorage(temp_dir),
            settings=Settings(use_pysbd_splitter=True),
        )
        try:
            assert isinstance(keeper.ingestor().chunker.splitter, PySBDSentenceSplitter)
        finally:
            keeper.close()


class TestEndToEnd:
    def test_ingest_search_ask_delete(self, keeper, fake_provider):
        stats = keeper.ingest(1, MINIMAL_PDF, "catan.pdf")
        assert stats["chunks_processed"] == 2

        matches = keeper.search_rules(1, "How do I win?")
        assert matches[0].chunk_text.startswith("The first player to reach 10")

        response = keeper.ask(1, "How do I win?")
        assert response.answer == fake_provider.llm_client.reply
        assert response.context

        assert keeper.delete_rules(1) == {"embeddings_deleted": 2}
        assert keeper.search_rules(1, "How do I win?") == []

    def test_ingest_file(self, keeper, temp_dir):
        path = os.path.join(temp_dir, "rules.pdf")
        with open(path, "wb") as f:
            f.write(MINIMAL_PDF)

        stats = keeper.ingest_file(3, path)

        assert stats["chunks_processed"] == 2
        assert os.path.exists(path)

    def test_ingest_file_missing(self, keeper, temp_dir):
        with pytest.raises(FileNotFoundError):
            keeper.ingest_file(3, os.path.join(temp_dir, "missing.pdf"))

    def test_ask_with_explicit_client(self, keeper):
        keeper.ingest(1, MINIMAL_PDF, "catan.pdf")
        client = RecordingLLMClient(reply="Custom answer")

        assert keeper.ask(1, "How do I win?", llm_client=client).answer == "Custom answer"

    def test_house_rules(self, keeper):
        keeper.ingest(1, MINIMAL_PDF, "catan.pdf")
        keeper.index_house_rule(1, 8, "Robber", "The robber never moves.")

        assert len(keeper.store.list_by_game(1, SourceType.HOUSE_RULE)) == 1
        assert keeper.delete_rules(1, SourceType.HOUSE_RULE) == {"embeddings_deleted": 1}
        assert keeper.store.count_chunks(1) == 2

        keeper.index_house_rule(1, 8, "Robber", "The robber never moves.")
        assert keeper.delete_house_rule(8) == 1

    @pytest.mark.asyncio
    async def test_async_flow(self, keeper):
        await keeper.aingest(1, MINIMAL_PDF, "catan.pdf")

        matches = await keeper.asearch_rules(1, "How do I win?")
        assert matches

        response = await keeper.aask(1, "How do I win?")
        assert response.answer is not None

        assert await keeper.adelete_rules(1) == {"embeddings_deleted": 2}

# tests/commands/test_query_cmd.py
"""Tests for the search and ask commands."""

import pytest
from conftest import FakeProvider, KeywordEmbedder, RecordingLLMClient

from rulekeeper.commands import GENERIC_FAILURE_MESSAGE, Outcome, query
from rulekeeper.exceptions import EmbeddingServiceError
from rulekeeper.rulekeeper import Rulekeeper
from rulekeeper.stores import SQLiteVectorStore


class FailingEmbedder(KeywordEmbedder):
    def embed_many(self, texts):
        raise EmbeddingServiceError("connection refused by http://10.0.0.5:11434")


def _keeper(temp_dir, provider):
    return Rulekeeper.from_store(
        provider=provider, store=SQLiteVectorStore(":memory:"), upload_dir=temp_dir
    )


@pytest.fixture
def keeper(temp_dir):
    instance = _keeper(temp_dir, FakeProvider(llm_client=RecordingLLMClient("Roll two dice.")))
    instance.index_house_rule(4, 1, "Dice", "Roll two dice at the start of every turn.")
    instance.index_house_rule(4, 2, "Victory", "The first to 8 victory points will win.")
    yield instance
    instance.close()


class TestSearchCommand:
    def test_search_with_rulekeeper(self, keeper):
        result = query.search_with_rulekeeper(keeper, 4, "How do the dice work?")

        assert result.success
        assert result.query == "How do the dice work?"
        assert result.results
        assert "dice" in result.results[0].content.lower()
        assert result.results[0].source_type == "house_rule"
        assert result.results[0].source_id == 1

    def test_search_unknown_game(self, keeper):
        result = query.search_with_rulekeeper(keeper, 99, "dice")

        assert result.success
        assert result.results == []

    def test_internal_error_is_generic(self, temp_dir):
        keeper = _keeper(temp_dir, FakeProvider(embedder=FailingEmbedder()))
        try:
            result = query.search_with_rulekeeper(keeper, 4, "dice")
        finally:
            keeper.close()

        assert result.outcome is Outcome.INTERNAL_FAILURE
        assert result.error == GENERIC_FAILURE_MESSAGE
        assert "10.0.0.5" not in result.error


class TestAskCommand:
    def test_ask_with_rulekeeper(self, keeper):
        result = query.ask_with_rulekeeper(keeper, 4, "How many dice do I roll?")

        assert result.success
        assert result.answer == "Roll two dice."
        assert result.results

    def test_ask_with_explicit_client(self, keeper):
        client = RecordingLLMClient("Eight points.")

        result = query.ask_with_rulekeeper(keeper, 4, "How do I win?", llm_client=client)

        assert result.answer == "Eight points."
        assert len(client.requests) == 1

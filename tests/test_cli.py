# tests/test_cli.py
"""Tests for the CLI."""

import os
from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("typer", reason="Tests require typer package (pip install rulekeeper-rag[cli])")

from typer.testing import CliRunner

from rulekeeper.cli import app
from rulekeeper.models import Chunk, EmbeddedChunk, SourceType
from rulekeeper.stores import SQLiteVectorStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(temp_dir, monkeypatch):
    for key in list(os.environ):
        if key.startswith("RULEKEEPER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(temp_dir)


@pytest.fixture
def data_dir(temp_dir):
    """Data directory holding two rulebook chunks and a house rule for game 7."""
    path = os.path.join(temp_dir, "data")
    os.makedirs(path)
    store = SQLiteVectorStore(os.path.join(path, "rules.db"))
    try:
        store.insert_batch(
            [
                EmbeddedChunk(
                    chunk=Chunk(game_id=7, text="The first player to 10 points wins.", index=0),
                    embedding=[1.0, 0.0, 0.0],
                ),
                EmbeddedChunk(
                    chunk=Chunk(game_id=7, text="Trade resources with the bank 4:1.", index=1),
                    embedding=[0.0, 1.0, 0.0],
                ),
                EmbeddedChunk(
                    chunk=Chunk(
                        game_id=7,
                        text="Winning requires 8 points at our table.",
                        source_type=SourceType.HOUSE_RULE,
                        source_id=2,
                    ),
                    embedding=[0.9, 0.1, 0.0],
                ),
            ]
        )
    finally:
        store.close()
    return path


def fake_embedding(**kwargs):
    response = MagicMock()
    response.data = [
        {"index": i, "embedding": [1.0, 0.0, 0.0]} for i in range(len(kwargs["input"]))
    ]
    return response


class TestCliBasics:
    def test_help(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "rulekeeper" in result.output.lower()

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestConfigCommand:
    def test_config_shows_settings(self, runner):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "max_chunk_size" in result.output
        assert "default_limit" in result.output

    def test_config_invalid_provider(self, runner, temp_dir):
        with open(os.path.join(temp_dir, "rulekeeper.yaml"), "w") as f:
            f.write("provider: bedrock\n")

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 1
        assert "bedrock" in result.output


class TestIngestCommand:
    def test_ingest_help(self, runner):
        result = runner.invoke(app, ["ingest", "--help"])
        assert result.exit_code == 0
        assert "path" in result.output.lower()

    def test_ingest_nonexistent_file(self, runner, temp_dir):
        result = runner.invoke(app, ["ingest", "1", "/nonexistent/rules.pdf", "-d", temp_dir])
        assert result.exit_code == 1
        assert "not found" in result.output.lower()

    def test_ingest_rejects_non_pdf(self, runner, temp_dir):
        path = os.path.join(temp_dir, "rules.pdf")
        with open(path, "wb") as f:
            f.write(b"plain text, not a pdf")

        result = runner.invoke(app, ["ingest", "1", path, "-d", temp_dir, "--plain"])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestSearchCommand:
    @patch("rulekeeper.providers.litellm.client.litellm.embedding", side_effect=fake_embedding)
    def test_search(self, mock_embedding, runner, data_dir):
        result = runner.invoke(app, ["search", "7", "How do I win?", "-d", data_dir, "--plain"])

        assert result.exit_code == 0
        assert "The first player to 10 points wins." in result.output
        assert "House rule" in result.output
        assert "Trade resources" not in result.output
        mock_embedding.assert_called_once()

    @patch("rulekeeper.providers.litellm.client.litellm.embedding", side_effect=fake_embedding)
    def test_search_other_game(self, mock_embedding, runner, data_dir):
        result = runner.invoke(app, ["search", "8", "How do I win?", "-d", data_dir, "--plain"])

        assert result.exit_code == 0
        assert "No results found." in result.output

    @patch(
        "rulekeeper.providers.litellm.client.litellm.embedding",
        side_effect=ConnectionError("refused"),
    )
    def test_search_service_down(self, mock_embedding, runner, data_dir):
        result = runner.invoke(app, ["search", "7", "How do I win?", "-d", data_dir, "--plain"])

        assert result.exit_code == 1
        assert "Internal error" in result.output


class TestDeleteCommand:
    def test_delete_empty_data_dir(self, runner, temp_dir):
        result = runner.invoke(app, ["delete", "7", "-d", temp_dir, "--force"])
        assert result.exit_code == 1
        assert "No rules stored" in result.output

    def test_delete_cancelled(self, runner, data_dir):
        result = runner.invoke(app, ["delete", "7", "-d", data_dir], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output

    def test_delete_force(self, runner, data_dir):
        result = runner.invoke(app, ["delete", "7", "-d", data_dir, "--force", "--plain"])

        assert result.exit_code == 0
        assert "Deleted 3 chunks for game 7" in result.output

    def test_delete_house_rules_only(self, runner, data_dir):
        result = runner.invoke(
            app, ["delete", "7", "-s", "house_rule", "-d", data_dir, "--force", "--plain"]
        )

        assert result.exit_code == 0
        assert "Deleted 1 chunks for game 7" in result.output

"""Shared pytest fixtures."""

import contextlib
import tempfile
from dataclasses import dataclass, field
from typing import Any

import pytest

from rulekeeper.embedder import Embedder
from rulekeeper.loaders import TextExtractor
from rulekeeper.providers import LLMClient

# Vocabulary for KeywordEmbedder: one dimension per keyword
KEYWORDS = ("win", "victory", "settlement", "dice", "trade", "robber", "card")

MINIMAL_PDF = b"%PDF-1.4\n% test document\n"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for stores and uploads."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir

        # Release ChromaDB's cached systems so their file handles close
        # See: https://github.com/chroma-core/chroma/issues/5868
        try:
            from chromadb.api.shared_system_client import SharedSystemClient

            if hasattr(SharedSystemClient, "_identifier_to_system"):
                identifiers_to_remove = [
                    identifier
                    for identifier in list(SharedSystemClient._identifier_to_system.keys())
                    if tmpdir in str(identifier)
                ]
                for identifier in identifiers_to_remove:
                    if identifier in SharedSystemClient._identifier_to_system:
                        system = SharedSystemClient._identifier_to_system.pop(identifier)
                        with contextlib.suppress(Exception):
                            system.stop()
        except ImportError:
            pass


class KeywordEmbedder(Embedder):
    """Deterministic embedder: dimension i is 1.0 when KEYWORDS[i] occurs in the text."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [1.0 if word in lowered else 0.0 for word in KEYWORDS]

    def embed_one(self, text: str) -> list[float]:
        return self.embed_many([text])[0]

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]


class StaticExtractor(TextExtractor):
    """Extractor returning fixed text, so tests need no real PDF content."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.paths: list[str] = []

    def supports(self, path: str) -> bool:
        return True

    def extract_text(self, path: str) -> str:
        self.paths.append(path)
        return self.text


class RecordingLLMClient(LLMClient):
    """LLM client that records requests and returns a canned reply."""

    def __init__(self, reply: str = "Reach 10 victory points.") -> None:
        self.reply = reply
        self.requests: list[dict[str, Any]] = []

    def complete(self, messages: list[dict], temperature: float | None = None) -> str:
        self.requests.append({"messages": messages, "temperature": temperature})
        return self.reply


@dataclass(frozen=True)
class FakeProvider:
    """Provider satisfying the ProviderConfig protocol with in-process fakes."""

    embedder: Any = field(default_factory=KeywordEmbedder)
    llm_client: Any = field(default_factory=RecordingLLMClient)

    def build_embedder(self, settings: Any) -> Any:
        return self.embedder

    def build_llm_client(self, settings: Any) -> Any:
        return self.llm_client


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def sqlite_store():
    """In-memory SQLite store, closed after the test."""
    from rulekeeper.stores import SQLiteVectorStore

    store = SQLiteVectorStore(":memory:")
    yield store
    store.close()

"""Rulekeeper - rules retrieval for tabletop games.

Turns uploaded rulebook PDFs and user-written house rules into embedded,
searchable chunks, and answers rules questions from the best matches.

Quick Start (LiteLLM + Local Storage):
    from rulekeeper import Rulekeeper, LiteLLMProvider, LocalStorage

    keeper = Rulekeeper(
        provider=LiteLLMProvider(
            embedding="openai/text-embedding-3-small", llm="openai/gpt-5-mini"
        ),
        storage=LocalStorage("./rulekeeper_data"),
    )

    # Ingest a rulebook
    keeper.ingest_file(game_id=1, filepath="catan.pdf")

    # Search and ask
    matches = keeper.search_rules(1, "How do I win?")
    answer = keeper.ask(1, "How many points do I need to win?")

Explicit stores:
    from rulekeeper import Rulekeeper, LiteLLMProvider
    from rulekeeper.stores import ChromaVectorIndex, SQLiteVectorStore

    keeper = Rulekeeper.from_store(
        provider=LiteLLMProvider(),
        store=SQLiteVectorStore("./data/rules.db"),
        index=ChromaVectorIndex("./data/chroma"),
        upload_dir="./data/uploads",
    )
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("rulekeeper-rag")
except PackageNotFoundError:
    # Development / source-tree fallback (e.g. running tests without installing the wheel).
    try:
        import tomllib
        from pathlib import Path

        def _read_version_from_pyproject() -> str | None:
            for parent in Path(__file__).resolve().parents:
                pyproject = parent / "pyproject.toml"
                if pyproject.exists():
                    data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
                    version = data.get("project", {}).get("version")
                    return str(version) if version is not None else None
            return None

        __version__ = _read_version_from_pyproject() or "unknown"
    except (OSError, tomllib.TOMLDecodeError):
        __version__ = "unknown"

# Chunking
from rulekeeper.chunker import Chunker, ChunkerConfig, SentenceChunker

# Configuration objects
from rulekeeper.configuration import (
    LiteLLMProvider,
    LocalStorage,
    ProviderConfig,
    StorageConfig,
)
from rulekeeper.embedder import ClientEmbedder, Embedder
from rulekeeper.exceptions import (
    EmbeddingServiceError,
    ExtractionError,
    NotFoundError,
    RulekeeperError,
    StorageError,
    ValidationError,
)

# Pipelines
from rulekeeper.ingestor import IngestionState, Ingestor

# File loading
from rulekeeper.loaders import PyPDFExtractor, TextExtractor

# Core models
from rulekeeper.models import (
    Chunk,
    EmbeddedChunk,
    RuleMatch,
    RulesAnswer,
    SimilarityResult,
    SourceType,
)

# Provider ABCs
from rulekeeper.providers import EmbeddingClient, LLMClient
from rulekeeper.query_enhancer import QueryEnhancer
from rulekeeper.retriever import RulesRetriever

# Central configuration
from rulekeeper.rulekeeper import Rulekeeper
from rulekeeper.search import SimilaritySearchEngine

# Configuration
from rulekeeper.settings import Settings

# Storage
from rulekeeper.stores import ChromaVectorIndex, SQLiteVectorStore, VectorIndex, VectorStore

__all__ = [
    # Version
    "__version__",
    # Models
    "Chunk",
    "EmbeddedChunk",
    "SourceType",
    "SimilarityResult",
    "RuleMatch",
    "RulesAnswer",
    # Errors
    "RulekeeperError",
    "ValidationError",
    "ExtractionError",
    "EmbeddingServiceError",
    "StorageError",
    "NotFoundError",
    # Config
    "Settings",
    # Configuration objects
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
    # Storage
    "VectorStore",
    "VectorIndex",
    "SQLiteVectorStore",
    "ChromaVectorIndex",
    # Chunking
    "Chunker",
    "ChunkerConfig",
    "SentenceChunker",
    # Embedding
    "Embedder",
    "ClientEmbedder",
    # Provider ABCs
    "LLMClient",
    "EmbeddingClient",
    # Loading
    "TextExtractor",
    "PyPDFExtractor",
    # Pipelines
    "Ingestor",
    "IngestionState",
    "SimilaritySearchEngine",
    "QueryEnhancer",
    "RulesRetriever",
    # Central configuration
    "Rulekeeper",
]

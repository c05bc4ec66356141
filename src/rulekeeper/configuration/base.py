"""Protocol definitions for configuration objects.

Provider and storage configurations are frozen dataclasses that know how to
build their components. Any object with the right methods satisfies the
protocol; stores and providers themselves are ABCs (see stores/base.py and
providers/base.py) because their implementations share behaviour.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rulekeeper.embedder import Embedder
    from rulekeeper.providers import LLMClient
    from rulekeeper.settings import Settings
    from rulekeeper.stores import VectorIndex, VectorStore


@runtime_checkable
class ProviderConfig(Protocol):
    """Protocol for provider configurations.

    Provider configurations build the model-backed components:
    - Embedder: Creates vectors for chunks and queries
    - LLMClient: Synthesizes answers from retrieved passages

    Example implementation:
        @dataclass(frozen=True)
        class LiteLLMProvider:
            embedding: str
            llm: str

            def build_embedder(self, settings: Settings) -> Embedder: ...
            def build_llm_client(self, settings: Settings) -> LLMClient: ...
    """

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build an embedder for chunk and query vectors."""
        ...

    def build_llm_client(self, settings: Settings) -> LLMClient:
        """Build an LLM client for answer synthesis."""
        ...


@runtime_checkable
class StorageConfig(Protocol):
    """Protocol for storage configurations.

    Storage configurations build the persistent pieces:
    - VectorStore: Chunks and their vectors
    - VectorIndex: Optional nearest-neighbour index over the same vectors
    - Upload directory for original rules documents

    Example implementation:
        @dataclass(frozen=True)
        class LocalStorage:
            data_dir: str

            def build_stores(self) -> tuple[VectorStore, VectorIndex | None]: ...
            def upload_dir(self) -> Path: ...
    """

    def build_stores(self) -> tuple[VectorStore, VectorIndex | None]:
        """Build the vector store and, if configured, the vector index it maintains."""
        ...

    def upload_dir(self) -> Path:
        """Directory where uploaded documents are saved."""
        ...

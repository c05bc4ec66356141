"""LiteLLM provider configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rulekeeper.providers.litellm.models import (
    LOCAL_API_BASE,
    LOCAL_API_KEY,
    ChatModels,
    EmbeddingModels,
)

if TYPE_CHECKING:
    from rulekeeper.embedder import Embedder
    from rulekeeper.providers import LLMClient
    from rulekeeper.settings import Settings


@dataclass(frozen=True)
class LiteLLMProvider:
    """Provider configuration using LiteLLM for embedding and LLM calls.

    The defaults point at a local Ollama server. Set api_base/api_key to
    None to let LiteLLM route hosted models with its own defaults.

    Args:
        embedding: LiteLLM model identifier for embeddings.
        llm: LiteLLM model identifier for answer synthesis.
        api_base: OpenAI-compatible endpoint base URL.
        api_key: API key/token for the endpoint.

    Example:
        provider = LiteLLMProvider()  # local nomic-embed-text + mistral-small3.2

        provider = LiteLLMProvider(
            embedding="openai/text-embedding-3-small",
            llm="openai/gpt-5-mini",
            api_base=None,
            api_key=None,
        )
    """

    embedding: str = EmbeddingModels.NOMIC_EMBED_TEXT
    llm: str = ChatModels.MISTRAL_SMALL_32
    api_base: str | None = LOCAL_API_BASE
    api_key: str | None = LOCAL_API_KEY

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build a ClientEmbedder using the LiteLLM embedding client.

        Args:
            settings: Settings containing num_retries for rate limit handling.
        """
        from rulekeeper.embedder import ClientEmbedder
        from rulekeeper.providers.litellm import LiteLLMEmbeddingClient

        embedding_client = LiteLLMEmbeddingClient(
            model=self.embedding,
            api_base=self.api_base,
            api_key=self.api_key,
            num_retries=settings.num_retries,
        )
        return ClientEmbedder(embedding_client=embedding_client)

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build a LiteLLMClient for answer synthesis.

        Args:
            settings: Optional settings containing num_retries. If None,
                     uses default retry value.
        """
        from rulekeeper.providers.litellm import LiteLLMClient

        num_retries = settings.num_retries if settings else 3
        return LiteLLMClient(
            model=self.llm,
            api_base=self.api_base,
            api_key=self.api_key,
            num_retries=num_retries,
        )

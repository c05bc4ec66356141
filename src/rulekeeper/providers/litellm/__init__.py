"""LiteLLM provider clients for Rulekeeper.

This module contains LiteLLM-based client implementations:
- LiteLLMClient: LLM completion using LiteLLM
- LiteLLMEmbeddingClient: Embeddings using LiteLLM
- ChatModels: Chat model constants
- EmbeddingModels: Embedding model constants

Usage:
    from rulekeeper.providers.litellm import LiteLLMEmbeddingClient
    from rulekeeper.embedder import ClientEmbedder

    embedder = ClientEmbedder(embedding_client=LiteLLMEmbeddingClient())
"""

from rulekeeper.providers.litellm.client import LiteLLMClient, LiteLLMEmbeddingClient
from rulekeeper.providers.litellm.models import (
    LOCAL_API_BASE,
    LOCAL_API_KEY,
    ChatModels,
    EmbeddingModels,
)

__all__ = [
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    "LOCAL_API_BASE",
    "LOCAL_API_KEY",
    # Clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]

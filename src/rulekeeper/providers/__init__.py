"""Provider implementations for Rulekeeper.

This module contains LLM and embedding provider abstractions:
- LLMClient: Abstract base class for LLM completion providers
- EmbeddingClient: Abstract base class for embedding providers
- LiteLLM implementations

Usage:
    from rulekeeper.providers import LLMClient, EmbeddingClient
    from rulekeeper.providers.litellm import LiteLLMClient, ChatModels
"""

from rulekeeper.providers.base import EmbeddingClient, LLMClient
from rulekeeper.providers.litellm import (
    ChatModels,
    EmbeddingModels,
    LiteLLMClient,
    LiteLLMEmbeddingClient,
)

__all__ = [
    # ABCs
    "LLMClient",
    "EmbeddingClient",
    # Model constants
    "ChatModels",
    "EmbeddingModels",
    # LiteLLM clients
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
]

"""Model constants for the LiteLLM provider.

Rulekeeper defaults to a local Ollama server speaking the OpenAI protocol,
so the local constants carry the "openai/" prefix LiteLLM needs to route
them through its OpenAI-compatible client. Any LiteLLM model string works.

Example:
    from rulekeeper.providers.litellm import EmbeddingModels, LiteLLMEmbeddingClient

    client = LiteLLMEmbeddingClient(model=EmbeddingModels.TEXT_3_SMALL, api_base=None)
"""

LOCAL_API_BASE = "http://localhost:11434/v1"
LOCAL_API_KEY = "ollama"


class ChatModels:
    """Chat/completion models for answer synthesis (via LiteLLMClient)."""

    # Local (Ollama, OpenAI-compatible endpoint)
    MISTRAL_SMALL_32 = "openai/mistral-small3.2:24b"
    LLAMA_32 = "openai/llama3.2:latest"

    # Hosted
    GPT_5_MINI = "openai/gpt-5-mini"
    CLAUDE_HAIKU_45 = "anthropic/claude-haiku-4-5-20251001"
    GEMINI_3_FLASH = "gemini/gemini-3-flash-preview"


class EmbeddingModels:
    """Embedding models for LiteLLMEmbeddingClient / ClientEmbedder."""

    # Local (Ollama, OpenAI-compatible endpoint)
    NOMIC_EMBED_TEXT = "openai/nomic-embed-text:latest"
    MXBAI_EMBED_LARGE = "openai/mxbai-embed-large:latest"

    # Hosted
    TEXT_3_SMALL = "openai/text-embedding-3-small"
    TEXT_3_LARGE = "openai/text-embedding-3-large"
    GEMINI_004 = "gemini/text-embedding-004"

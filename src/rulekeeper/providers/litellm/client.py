"""LiteLLM client implementations for LLM and embedding APIs."""

import logging
from typing import Any

import litellm

from rulekeeper.exceptions import EmbeddingServiceError
from rulekeeper.providers.base import EmbeddingClient, LLMClient
from rulekeeper.providers.litellm.models import (
    LOCAL_API_BASE,
    LOCAL_API_KEY,
    ChatModels,
    EmbeddingModels,
)

logger = logging.getLogger(__name__)


def _endpoint_kwargs(api_base: str | None, api_key: str | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if api_base:
        kwargs["api_base"] = api_base
    if api_key:
        kwargs["api_key"] = api_key
    return kwargs


class LiteLLMClient(LLMClient):
    """LiteLLM-based LLM client for answer synthesis.

    Example:
        from rulekeeper.providers.litellm import LiteLLMClient, ChatModels

        client = LiteLLMClient()  # local Ollama, mistral-small3.2
        response = client.complete([{"role": "user", "content": "Hello"}])

        client = LiteLLMClient(model=ChatModels.GPT_5_MINI, api_base=None, api_key=None)
    """

    def __init__(
        self,
        model: str = ChatModels.MISTRAL_SMALL_32,
        api_base: str | None = LOCAL_API_BASE,
        api_key: str | None = LOCAL_API_KEY,
        num_retries: int = 3,
    ) -> None:
        """Initialize the LiteLLM client.

        Args:
            model: LiteLLM model identifier.
            api_base: Endpoint base URL. None lets LiteLLM pick the provider default.
            api_key: API key/token. None lets LiteLLM read it from the environment.
            num_retries: Number of retries on rate limit errors. LiteLLM handles
                        exponential backoff automatically. Default: 3.
        """
        self.model = model
        self.api_base = api_base
        self.api_key = api_key
        self.num_retries = num_retries

    def _completion_kwargs(self, messages: list[dict], temperature: float | None) -> dict:
        completion_kwargs = {
            "model": self.model,
            "messages": messages,
            "drop_params": True,
            "num_retries": self.num_retries,
            **_endpoint_kwargs(self.api_base, self.api_key),
        }
        if temperature is not None:
            completion_kwargs["temperature"] = temperature
        return completion_kwargs

    def _content(self, response: Any) -> str:
        if not response.choices:
            raise ValueError(f"LLM returned no choices for model {self.model}")
        content = response.choices[0].message.content
        if content is None:
            raise ValueError(f"LLM returned None content for model {self.model}")
        return str(content)

    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion using LiteLLM."""
        response = litellm.completion(**self._completion_kwargs(messages, temperature))
        return self._content(response)

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Generate a completion using LiteLLM (async)."""
        response = await litellm.acompletion(**self._completion_kwargs(messages, temperature))
        return self._content(response)


class LiteLLMEmbeddingClient(EmbeddingClient):
    """LiteLLM-based embedding client for OpenAI-compatible endpoints.

    The defaults target a local Ollama server running nomic-embed-text.
    Every failure, whether transport, provider or a malformed response,
    surfaces as EmbeddingServiceError.

    Example:
        from rulekeeper.providers.litellm import LiteLLMEmbeddingClient

        client = LiteLLMEmbeddingClient()
        embeddings = client.embed(["Roll two dice", "Draw a card"])

        # Remote endpoint
        client = LiteLLMEmbeddingClient(
            model="openai/nomic-embed-text:latest",
            api_base="http://gpu-box:11434/v1",
        )
    """

    def __init__(
        self,
        model: str = EmbeddingModels.NOMIC_EMBED_TEXT,
        api_base: str | None = LOCAL_API_BASE,
        api_key: str | None = LOCAL_API_KEY,
        num_retries: int = 3,
    ) -> None:
        """Initialize the LiteLLM embedding client.

        Args:
            model: LiteLLM embedding model identifier.
            api_base: Endpoint base URL. None lets LiteLLM pick the provider default.
            api_key: API key/token. None lets LiteLLM read it from the environment.
            num_retries: Number of retries on rate limit errors. Default: 3.
        """
        self.model = model
        self.api_base = api_base
        self.api_key = api_key
        self.num_retries = num_retries

    def _embedding_kwargs(self, texts: list[str]) -> dict[str, Any]:
        return {
            "model": self.model,
            "input": texts,
            "num_retries": self.num_retries,
            **_endpoint_kwargs(self.api_base, self.api_key),
        }

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM."""
        if not texts:
            return []

        try:
            response = litellm.embedding(**self._embedding_kwargs(texts))
        except Exception as e:
            raise EmbeddingServiceError(
                f"Embedding request to {self.model} failed: {e}"
            ) from e
        return self._parse(response, len(texts))

    async def aembed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings using LiteLLM (async)."""
        if not texts:
            return []

        try:
            response = await litellm.aembedding(**self._embedding_kwargs(texts))
        except Exception as e:
            raise EmbeddingServiceError(
                f"Embedding request to {self.model} failed: {e}"
            ) from e
        return self._parse(response, len(texts))

    def _parse(self, response: Any, expected: int) -> list[list[float]]:
        data = getattr(response, "data", None)
        if not data:
            raise EmbeddingServiceError(f"No embeddings returned by {self.model}")
        if len(data) != expected:
            raise EmbeddingServiceError(
                f"Embedding count mismatch: sent {expected} texts, got {len(data)} vectors"
            )

        try:
            # Sort by index to maintain order
            sorted_data = sorted(data, key=lambda x: x["index"])
            vectors = [list(item["embedding"]) for item in sorted_data]
        except (KeyError, TypeError) as e:
            raise EmbeddingServiceError(
                f"Malformed embedding response from {self.model}: {e}"
            ) from e

        logger.debug("Embedded %d texts with %s", expected, self.model)
        return vectors

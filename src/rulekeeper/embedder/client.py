"""Client-based embedder implementation."""

from rulekeeper.embedder.base import Embedder
from rulekeeper.exceptions import EmbeddingServiceError
from rulekeeper.providers.base import EmbeddingClient


class ClientEmbedder(Embedder):
    """Embedder that uses an EmbeddingClient for generating embeddings.

    Guarantees one vector per input text regardless of what the client
    returns, and never calls the client for an empty batch.

    Example:
        from rulekeeper.providers.litellm import LiteLLMEmbeddingClient
        from rulekeeper.embedder import ClientEmbedder

        client = LiteLLMEmbeddingClient(model="openai/nomic-embed-text:latest")
        embedder = ClientEmbedder(embedding_client=client)
    """

    def __init__(self, embedding_client: EmbeddingClient) -> None:
        """Initialize the embedder.

        Args:
            embedding_client: Any EmbeddingClient implementation
        """
        self._client = embedding_client

    @property
    def model_name(self) -> str:
        """Model identifier of the underlying client, if it exposes one."""
        return str(getattr(self._client, "model", type(self._client).__name__))

    def embed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        return self.embed_many([text])[0]

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        if not texts:
            return []
        return self._checked(self._client.embed(texts), len(texts))

    async def aembed_one(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text (async)."""
        return (await self.aembed_many([text]))[0]

    async def aembed_many(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (async, batched)."""
        if not texts:
            return []
        return self._checked(await self._client.aembed(texts), len(texts))

    @staticmethod
    def _checked(vectors: list[list[float]], expected: int) -> list[list[float]]:
        if len(vectors) != expected:
            raise EmbeddingServiceError(
                f"Embedding count mismatch: sent {expected} texts, got {len(vectors)} vectors"
            )
        return vectors

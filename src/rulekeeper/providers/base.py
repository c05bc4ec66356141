"""Provider interfaces: the chat model that writes answers and the embedding service."""

import asyncio
from abc import ABC, abstractmethod


class LLMClient(ABC):
    """Chat model used to write an answer from retrieved rule passages.

    Only complete() is required. RulesRetriever sends a system message that
    carries the passages, any earlier turns, and the player's question.

    Example:
        class EchoClient(LLMClient):
            def complete(self, messages, temperature=None):
                return messages[-1]["content"]
    """

    @abstractmethod
    def complete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Return the model's reply to a chat transcript.

        Args:
            messages: Dicts with 'role' and 'content' keys, oldest first.
            temperature: Sampling temperature, or None for the provider default.

        Returns:
            The reply text.
        """
        ...

    async def acomplete(
        self,
        messages: list[dict],
        temperature: float | None = None,
    ) -> str:
        """Async complete(). Runs the sync call in a worker thread unless overridden."""
        return await asyncio.to_thread(self.complete, messages, temperature)


class EmbeddingClient(ABC):
    """Service that turns texts into vectors.

    One call carries a whole batch. Implementations must answer with one
    vector per text, in the order the texts were given, or raise.
    """

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts.

        Raises:
            EmbeddingServiceError: The service failed or returned a malformed answer.
        """
        ...

    async def aembed(self, texts: list[str]) -> list[list[float]]:
        """Async embed(). Runs the sync call in a worker thread unless overridden."""
        return await asyncio.to_thread(self.embed, texts)

"""Retrieval pipeline for Rulekeeper."""

import logging

from rulekeeper.embedder import Embedder
from rulekeeper.exceptions import ValidationError
from rulekeeper.models import RuleMatch, RulesAnswer, SimilarityResult
from rulekeeper.providers import LLMClient
from rulekeeper.query_enhancer import QueryEnhancer
from rulekeeper.search import (
    CHAT_CONTEXT_THRESHOLD,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SIMILARITY_THRESHOLD,
    SimilaritySearchEngine,
)

logger = logging.getLogger(__name__)

SYNTHESIS_PROMPT = """You are a rules assistant for a tabletop game.
Answer the player's question using only the rules passages below.
If the passages don't contain enough information to answer, say so.
Passages marked as house rules override the printed rules."""

CHAT_ROLES = ("user", "assistant", "system")


class RulesRetriever:
    """Finds the rule passages relevant to a player's question.

    Two entry points share the same pipeline (enhance, embed, search,
    de-duplicate) and differ only in their similarity threshold:

    - search_rules: interactive search, precision first
    - get_chat_context: context for an LLM answer, recall first
    """

    def __init__(
        self,
        engine: SimilaritySearchEngine,
        embedder: Embedder,
        enhancer: QueryEnhancer | None = None,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        search_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        chat_threshold: float = CHAT_CONTEXT_THRESHOLD,
        llm_client: LLMClient | None = None,
        synthesis_prompt: str | None = None,
        synthesis_temperature: float | None = 0.7,
    ) -> None:
        """Initialize the retriever.

        Args:
            engine: Similarity search engine over the game's chunks
            embedder: Embedder for query embedding
            enhancer: Query rewriter applied before embedding. None disables it.
            default_limit: Default number of results to return
            search_threshold: Minimum score for search_rules
            chat_threshold: Minimum score for get_chat_context / answer
            llm_client: LLM client for answer synthesis (optional)
            synthesis_prompt: Custom system prompt for synthesis
            synthesis_temperature: Temperature for synthesis LLM calls
        """
        self.engine = engine
        self.embedder = embedder
        self.enhancer = enhancer
        self.default_limit = default_limit
        self.search_threshold = search_threshold
        self.chat_threshold = chat_threshold
        self._llm_client = llm_client
        self.synthesis_prompt = synthesis_prompt or SYNTHESIS_PROMPT
        self.synthesis_temperature = synthesis_temperature

    def _query_text(self, query: str) -> str:
        if not query.strip():
            raise ValidationError("Query must not be empty")
        return self.enhancer.enhance(query) if self.enhancer else query

    @staticmethod
    def _matches(results: list[SimilarityResult]) -> list[RuleMatch]:
        # The same passage can be stored twice (re-uploaded document, house
        # rule copied from the rulebook); keep the best-scoring copy.
        seen: set[str] = set()
        matches = []
        for result in results:
            key = result.chunk.text.strip()
            if key in seen:
                continue
            seen.add(key)
            matches.append(RuleMatch.from_result(result))
        return matches

    def _retrieve(
        self, game_id: int, query: str, limit: int | None, threshold: float
    ) -> list[RuleMatch]:
        limit = self.default_limit if limit is None else limit
        text = self._query_text(query)
        if limit <= 0:
            return []
        vector = self.embedder.embed_one(text)
        # Duplicates are dropped after ranking, so widen the fetch until enough remain
        fetch = limit
        while True:
            results = self.engine.search(game_id, vector, fetch, threshold)
            matches = self._matches(results)
            if len(matches) >= limit or len(results) < fetch:
                return matches[:limit]
            fetch *= 2

    async def _aretrieve(
        self, game_id: int, query: str, limit: int | None, threshold: float
    ) -> list[RuleMatch]:
        limit = self.default_limit if limit is None else limit
        text = self._query_text(query)
        if limit <= 0:
            return []
        vector = await self.embedder.aembed_one(text)
        fetch = limit
        while True:
            results = await self.engine.asearch(game_id, vector, fetch, threshold)
            matches = self._matches(results)
            if len(matches) >= limit or len(results) < fetch:
                return matches[:limit]
            fetch *= 2

    def search_rules(
        self, game_id: int, query_text: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Rank a game's rule passages against a query.

        Args:
            game_id: Game to search
            query_text: Natural-language query
            limit: Number of results to return (default: self.default_limit)

        Returns:
            Matches ordered by similarity, highest first
        """
        matches = self._retrieve(game_id, query_text, limit, self.search_threshold)
        logger.info("search_rules game=%d results=%d", game_id, len(matches))
        return matches

    async def asearch_rules(
        self, game_id: int, query_text: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Rank a game's rule passages against a query (async)."""
        matches = await self._aretrieve(game_id, query_text, limit, self.search_threshold)
        logger.info("search_rules game=%d results=%d", game_id, len(matches))
        return matches

    def get_chat_context(
        self, game_id: int, question: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Collect passages to hand to an LLM, using the lower chat threshold."""
        return self._retrieve(game_id, question, limit, self.chat_threshold)

    async def aget_chat_context(
        self, game_id: int, question: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Collect passages to hand to an LLM (async)."""
        return await self._aretrieve(game_id, question, limit, self.chat_threshold)

    def answer(
        self, game_id: int, question: str, history: list[dict] | None = None
    ) -> RulesAnswer:
        """Answer a rules question from the retrieved passages.

        If llm_client is configured and any passage was found, synthesizes
        an answer. Otherwise returns RulesAnswer with answer=None.

        Args:
            game_id: Game whose rules are consulted
            question: Player's question
            history: Earlier chat messages ({"role", "content"}), oldest first
        """
        context = self.get_chat_context(game_id, question)
        answer = None
        if context and self._llm_client:
            answer = self._llm_client.complete(
                self._messages(question, context, history),
                temperature=self.synthesis_temperature,
            ).strip()
        return RulesAnswer(query=question, answer=answer, context=context)

    async def aanswer(
        self, game_id: int, question: str, history: list[dict] | None = None
    ) -> RulesAnswer:
        """Answer a rules question from the retrieved passages (async)."""
        context = await self.aget_chat_context(game_id, question)
        answer = None
        if context and self._llm_client:
            answer = (
                await self._llm_client.acomplete(
                    self._messages(question, context, history),
                    temperature=self.synthesis_temperature,
                )
            ).strip()
        return RulesAnswer(query=question, answer=answer, context=context)

    def _messages(
        self, question: str, context: list[RuleMatch], history: list[dict] | None
    ) -> list[dict]:
        """Build the chat request: system prompt with passages, history, question."""
        passages = []
        for i, match in enumerate(context, 1):
            label = "House rule" if match.source_type == "house_rule" else "Rulebook"
            passages.append(f"[{i}] ({label}) {match.chunk_text}")

        messages = [
            {
                "role": "system",
                "content": f"{self.synthesis_prompt}\n\nContext:\n" + "\n\n".join(passages),
            }
        ]
        for message in history or []:
            if message.get("role") not in CHAT_ROLES:
                raise ValidationError(f"Unsupported message role: {message.get('role')}")
            messages.append({"role": message["role"], "content": str(message.get("content", ""))})
        messages.append({"role": "user", "content": question})
        return messages

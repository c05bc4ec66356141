"""Central configuration class for Rulekeeper."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rulekeeper.configuration import ProviderConfig, StorageConfig
    from rulekeeper.ingestor import Ingestor, ProgressCallback
    from rulekeeper.loaders import TextExtractor
    from rulekeeper.models import RuleMatch, RulesAnswer, SourceType
    from rulekeeper.providers import LLMClient
    from rulekeeper.retriever import RulesRetriever
    from rulekeeper.search import SimilaritySearchEngine
    from rulekeeper.stores import VectorIndex, VectorStore

from rulekeeper.settings import Settings


class Rulekeeper:
    """Central object bundling the store, embedder and pipeline components.

    Configure once, then ingest rules documents and answer questions:

    1. With a storage bundle:

        from rulekeeper import LiteLLMProvider, LocalStorage, Rulekeeper

        keeper = Rulekeeper(provider=LiteLLMProvider(), storage=LocalStorage("./data"))
        keeper.ingest(game_id=1, document_bytes=pdf_bytes, filename="catan.pdf")
        matches = keeper.search_rules(1, "How do I win?")

    2. With an explicit store:

        from rulekeeper.stores import SQLiteVectorStore

        keeper = Rulekeeper.from_store(
            provider=LiteLLMProvider(),
            store=SQLiteVectorStore("./data/rules.db"),
            upload_dir="./data/uploads",
        )
    """

    def __init__(
        self,
        *,
        provider: ProviderConfig,
        # EITHER storage bundle...
        storage: StorageConfig | None = None,
        # ...OR explicit store
        store: VectorStore | None = None,
        index: VectorIndex | None = None,
        upload_dir: str | Path | None = None,
        # Common
        settings: Settings | None = None,
        extractor: TextExtractor | None = None,
    ) -> None:
        """Create a Rulekeeper instance.

        Args:
            provider: Provider configuration (builds the embedder and LLM client).
            storage: Storage bundle. Mutually exclusive with store/index/upload_dir.
            store: Explicit vector store.
            index: Vector index maintained by the explicit store, if any.
            upload_dir: Where uploaded documents are saved (explicit store path).
            settings: Behavioral settings (chunk sizes, thresholds, ...).
            extractor: Text extractor for uploads. Defaults to PyPDFExtractor.

        Raises:
            ValueError: If neither a storage bundle nor an explicit store with an
                       upload directory is provided, or if both are.
        """
        self._settings = settings if settings is not None else Settings()
        self._provider = provider

        if storage is not None:
            if any(x is not None for x in (store, index, upload_dir)):
                raise ValueError("Cannot mix 'storage' bundle with an explicit store")
            self.store, self.index = storage.build_stores()
            self.upload_dir = storage.upload_dir()
        elif store is not None and upload_dir is not None:
            self.store = store
            self.index = index
            self.upload_dir = Path(upload_dir)
        else:
            raise ValueError(
                "Must provide either 'storage' bundle or an explicit 'store' and 'upload_dir'"
            )

        self.embedder = provider.build_embedder(self._settings)
        self._embedding_model: str | None = getattr(provider, "embedding", None)

        if extractor is None:
            from rulekeeper.loaders import PyPDFExtractor

            extractor = PyPDFExtractor()
        self._extractor = extractor

    @classmethod
    def from_store(
        cls,
        *,
        provider: ProviderConfig,
        store: VectorStore,
        upload_dir: str | Path,
        index: VectorIndex | None = None,
        settings: Settings | None = None,
        extractor: TextExtractor | None = None,
    ) -> Rulekeeper:
        """Create Rulekeeper with an explicit store (alternative to a StorageConfig)."""
        return cls(
            provider=provider,
            store=store,
            index=index,
            upload_dir=upload_dir,
            settings=settings,
            extractor=extractor,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    def search_engine(self) -> SimilaritySearchEngine:
        """Create a SimilaritySearchEngine over this instance's store."""
        from rulekeeper.search import SimilaritySearchEngine

        return SimilaritySearchEngine(
            self.store,
            index=self.index,
            default_limit=self._settings.default_limit,
            default_threshold=self._settings.similarity_threshold,
        )

    def retriever(
        self,
        *,
        llm_client: LLMClient | None = None,
        synthesize: bool = False,
    ) -> RulesRetriever:
        """Create a RulesRetriever using this instance's store.

        Args:
            llm_client: LLM client for answer synthesis.
            synthesize: Build the provider's LLM client when llm_client is None.

        Returns:
            Configured RulesRetriever instance.
        """
        from rulekeeper.query_enhancer import QueryEnhancer
        from rulekeeper.retriever import RulesRetriever

        if llm_client is None and synthesize:
            llm_client = self._provider.build_llm_client(self._settings)

        return RulesRetriever(
            engine=self.search_engine(),
            embedder=self.embedder,
            enhancer=QueryEnhancer() if self._settings.enhance_queries else None,
            default_limit=self._settings.default_limit,
            search_threshold=self._settings.similarity_threshold,
            chat_threshold=self._settings.chat_similarity_threshold,
            llm_client=llm_client,
            synthesis_prompt=self._settings.synthesis_prompt,
            synthesis_temperature=self._settings.synthesis_temperature,
        )

    def ingestor(self) -> Ingestor:
        """Create an Ingestor using this instance's store and settings."""
        from rulekeeper.chunker import (
            HeuristicSentenceSplitter,
            PySBDSentenceSplitter,
            SentenceChunker,
            SentenceSplitter,
        )
        from rulekeeper.ingestor import Ingestor

        config = self._settings.chunker_config()
        splitter: SentenceSplitter
        if self._settings.use_pysbd_splitter:
            splitter = PySBDSentenceSplitter(min_length=config.min_sentence_length)
        else:
            splitter = HeuristicSentenceSplitter(min_length=config.min_sentence_length)

        return Ingestor(
            store=self.store,
            embedder=self.embedder,
            chunker=SentenceChunker(config, splitter=splitter),
            extractor=self._extractor,
            upload_dir=self.upload_dir,
            embedding_model=self._embedding_model,
        )

    def ingest(
        self,
        game_id: int,
        document_bytes: bytes,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Ingest an uploaded rules PDF for a game.

        Returns:
            {"chunks_processed", "total_text_length", "file_path"}
        """
        return self.ingestor().ingest(game_id, document_bytes, filename, on_progress)

    async def aingest(
        self,
        game_id: int,
        document_bytes: bytes,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Ingest an uploaded rules PDF for a game (async)."""
        return await self.ingestor().aingest(game_id, document_bytes, filename, on_progress)

    def ingest_file(
        self,
        game_id: int,
        filepath: str | Path,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Ingest a rules PDF from disk. The original file is copied, never moved.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {filepath}")
        return self.ingest(game_id, path.read_bytes(), path.name, on_progress)

    def search_rules(
        self, game_id: int, query_text: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Rank a game's rule passages against a natural-language query."""
        return self.retriever().search_rules(game_id, query_text, limit)

    async def asearch_rules(
        self, game_id: int, query_text: str, limit: int | None = None
    ) -> list[RuleMatch]:
        """Rank a game's rule passages against a natural-language query (async)."""
        return await self.retriever().asearch_rules(game_id, query_text, limit)

    def ask(
        self,
        game_id: int,
        question: str,
        history: list[dict] | None = None,
        llm_client: LLMClient | None = None,
    ) -> RulesAnswer:
        """Answer a rules question with the provider's LLM (or the given client)."""
        retriever = self.retriever(llm_client=llm_client, synthesize=True)
        return retriever.answer(game_id, question, history)

    async def aask(
        self,
        game_id: int,
        question: str,
        history: list[dict] | None = None,
        llm_client: LLMClient | None = None,
    ) -> RulesAnswer:
        """Answer a rules question (async)."""
        retriever = self.retriever(llm_client=llm_client, synthesize=True)
        return await retriever.aanswer(game_id, question, history)

    def delete_rules(self, game_id: int, source_type: SourceType | None = None) -> dict[str, int]:
        """Delete a game's stored chunks, optionally only one source type.

        Returns:
            {"embeddings_deleted": N}
        """
        return {"embeddings_deleted": self.store.delete_by_game(game_id, source_type)}

    async def adelete_rules(
        self, game_id: int, source_type: SourceType | None = None
    ) -> dict[str, int]:
        """Delete a game's stored chunks (async)."""
        return {"embeddings_deleted": await self.store.adelete_by_game(game_id, source_type)}

    def index_house_rule(
        self, game_id: int, house_rule_id: int, title: str, description: str
    ) -> int:
        """Make a house rule searchable alongside the game's rules."""
        return self.ingestor().index_house_rule(game_id, house_rule_id, title, description)

    def delete_house_rule(self, house_rule_id: int) -> int:
        """Remove a house rule's chunks. Returns the count deleted."""
        return self.ingestor().delete_house_rule(house_rule_id)

    def close(self) -> None:
        """Close the store (and its index) and release resources.

        After calling close(), the Rulekeeper instance should not be used.
        """
        self.store.close()

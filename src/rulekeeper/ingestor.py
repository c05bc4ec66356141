"""Ingestion pipeline for Rulekeeper."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from rulekeeper.chunker import Chunker
from rulekeeper.embedder import Embedder
from rulekeeper.exceptions import ExtractionError, StorageError, ValidationError
from rulekeeper.loaders import TextExtractor, generate_pdf_filename, validate_pdf_bytes
from rulekeeper.models import Chunk, EmbeddedChunk, SourceType
from rulekeeper.stores import VectorStore

logger = logging.getLogger(__name__)


class IngestionState(str, Enum):
    """Steps of one upload. PERSISTED and FAILED are terminal."""

    RECEIVED = "received"
    VALIDATED = "validated"
    TEXT_EXTRACTED = "text_extracted"
    CHUNKED = "chunked"
    EMBEDDED = "embedded"
    PERSISTED = "persisted"
    FAILED = "failed"


ProgressCallback = Callable[[IngestionState, str], None]
"""Callback for ingestion progress updates.

Args:
    state: The state the upload just entered
    message: Human-readable status message

Example:
    def on_progress(state: IngestionState, message: str) -> None:
        print(f"[{state.value}] {message}")
"""


@dataclass
class IngestionRun:
    """Record of one upload moving through the ingestion states."""

    game_id: int
    filename: str
    state: IngestionState = IngestionState.RECEIVED
    history: list[IngestionState] = field(default_factory=lambda: [IngestionState.RECEIVED])
    failure_reason: str | None = None
    file_path: Path | None = None

    @property
    def finished(self) -> bool:
        return self.state in (IngestionState.PERSISTED, IngestionState.FAILED)

    def advance(self, state: IngestionState) -> None:
        if self.finished:
            raise RuntimeError(f"Ingestion already {self.state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, reason: str) -> None:
        self.failure_reason = reason
        self.advance(IngestionState.FAILED)


class Ingestor:
    """Orchestrates the ingestion pipeline for uploaded rules documents.

    Pipeline:
    1. Validate the upload (non-empty, PDF magic number)
    2. Save it under the upload directory
    3. Extract text
    4. Chunk the text
    5. Embed all chunks in one batch
    6. Replace the game's previous document chunks in one transaction

    A failure at any step after the save removes the saved file before the
    error propagates, and the store transaction guarantees that either all
    chunks of the document are stored or none are.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        chunker: Chunker,
        extractor: TextExtractor,
        upload_dir: str | Path,
        embedding_model: str | None = None,
    ) -> None:
        """Initialize the ingestor with all required components.

        Args:
            store: Store receiving chunks and vectors
            embedder: Component to embed chunk text
            chunker: Component to split extracted text into chunks
            extractor: Component to extract text from the saved document
            upload_dir: Directory where uploaded documents are kept
            embedding_model: Model name recorded in chunk metadata
        """
        self.store = store
        self.embedder = embedder
        self.chunker = chunker
        self.extractor = extractor
        self.upload_dir = Path(upload_dir)
        self.embedding_model = embedding_model or str(
            getattr(embedder, "model_name", type(embedder).__name__)
        )

    def _enter(
        self,
        run: IngestionRun,
        state: IngestionState,
        message: str,
        on_progress: ProgressCallback | None,
    ) -> None:
        run.advance(state)
        logger.debug("Game %d upload %s: %s", run.game_id, state.value, message)
        if on_progress:
            on_progress(state, message)

    def _save(self, run: IngestionRun, data: bytes) -> Path:
        path = self.upload_dir / generate_pdf_filename(run.game_id)
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            with contextlib.suppress(OSError):
                path.unlink(missing_ok=True)
            raise StorageError(f"Failed to save uploaded file {run.filename}") from e
        run.file_path = path
        return path

    def _chunk(self, text: str, filename: str) -> list[str]:
        chunks = self.chunker.chunk(text)
        if not chunks:
            raise ExtractionError(f"No rule text could be extracted from {filename}")
        return chunks

    def _document_items(
        self,
        game_id: int,
        filename: str,
        chunks: list[str],
        vectors: list[list[float]],
    ) -> list[EmbeddedChunk]:
        processed_at = datetime.now(UTC).isoformat()
        return [
            EmbeddedChunk(
                chunk=Chunk(
                    game_id=game_id,
                    text=text,
                    index=i,
                    source_type=SourceType.RULES_PDF,
                    metadata={
                        "file_name": filename,
                        "chunk_size": len(text),
                        "total_chunks": len(chunks),
                        "processing_timestamp": processed_at,
                        "embedding_model": self.embedding_model,
                    },
                ),
                embedding=vector,
            )
            for i, (text, vector) in enumerate(zip(chunks, vectors, strict=True))
        ]

    def _failed(
        self,
        run: IngestionRun,
        error: Exception,
        on_progress: ProgressCallback | None,
    ) -> None:
        run.fail(str(error))
        if on_progress:
            on_progress(IngestionState.FAILED, str(error))
        if run.file_path is not None:
            run.file_path.unlink(missing_ok=True)
            logger.debug("Removed %s after failed ingestion", run.file_path)
        logger.warning(
            "Ingestion of %s for game %d failed: %s", run.filename, run.game_id, error
        )

    def ingest(
        self,
        game_id: int,
        document_bytes: bytes,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Ingest an uploaded rules PDF for a game.

        Args:
            game_id: Game the document belongs to
            document_bytes: Raw uploaded bytes
            filename: Caller-supplied file name (kept as metadata only)
            on_progress: Optional callback for progress updates

        Returns:
            {"chunks_processed", "total_text_length", "file_path"}

        Raises:
            ValidationError: The upload is empty or not a PDF (nothing written)
            ExtractionError: No usable text in the document
            EmbeddingServiceError: The embedding service failed
            StorageError: Saving the file or the chunks failed
        """
        run = IngestionRun(game_id=game_id, filename=filename)
        try:
            validate_pdf_bytes(document_bytes)
            self._enter(run, IngestionState.VALIDATED, f"{len(document_bytes)} bytes", on_progress)

            path = self._save(run, document_bytes)

            text = self.extractor.extract_text(str(path))
            self._enter(run, IngestionState.TEXT_EXTRACTED, f"{len(text)} characters", on_progress)

            chunks = self._chunk(text, filename)
            self._enter(run, IngestionState.CHUNKED, f"{len(chunks)} chunks", on_progress)

            vectors = self.embedder.embed_many(chunks)
            self._enter(run, IngestionState.EMBEDDED, f"{len(vectors)} vectors", on_progress)

            items = self._document_items(game_id, filename, chunks, vectors)
            self.store.replace_batch(game_id, SourceType.RULES_PDF, items)
            self._enter(run, IngestionState.PERSISTED, f"{len(items)} chunks stored", on_progress)
        except Exception as e:
            self._failed(run, e, on_progress)
            raise

        logger.info("Ingested %s for game %d: %d chunks", filename, game_id, len(chunks))
        return {
            "chunks_processed": len(chunks),
            "total_text_length": len(text),
            "file_path": str(path),
        }

    async def aingest(
        self,
        game_id: int,
        document_bytes: bytes,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Any]:
        """Ingest an uploaded rules PDF for a game (async).

        File and CPU work runs in worker threads; the embedding call uses the
        embedder's async path. Same contract as ingest().
        """
        run = IngestionRun(game_id=game_id, filename=filename)
        try:
            validate_pdf_bytes(document_bytes)
            self._enter(run, IngestionState.VALIDATED, f"{len(document_bytes)} bytes", on_progress)

            path = await asyncio.to_thread(self._save, run, document_bytes)

            text = await asyncio.to_thread(self.extractor.extract_text, str(path))
            self._enter(run, IngestionState.TEXT_EXTRACTED, f"{len(text)} characters", on_progress)

            chunks = await asyncio.to_thread(self._chunk, text, filename)
            self._enter(run, IngestionState.CHUNKED, f"{len(chunks)} chunks", on_progress)

            vectors = await self.embedder.aembed_many(chunks)
            self._enter(run, IngestionState.EMBEDDED, f"{len(vectors)} vectors", on_progress)

            items = self._document_items(game_id, filename, chunks, vectors)
            await self.store.areplace_batch(game_id, SourceType.RULES_PDF, items)
            self._enter(run, IngestionState.PERSISTED, f"{len(items)} chunks stored", on_progress)
        except Exception as e:
            self._failed(run, e, on_progress)
            raise

        logger.info("Ingested %s for game %d: %d chunks", filename, game_id, len(chunks))
        return {
            "chunks_processed": len(chunks),
            "total_text_length": len(text),
            "file_path": str(path),
        }

    def _house_rule_texts(self, title: str, description: str) -> list[str]:
        if not description.strip():
            raise ValidationError("House rule description must not be empty")
        text = " ".join(f"{title.strip()}: {description.strip()}".split())
        max_size = getattr(getattr(self.chunker, "config", None), "max_chunk_size", None)
        if max_size is not None and len(text) > max_size:
            chunks = self.chunker.chunk(text)
            if chunks:
                return chunks
        return [text]

    def _house_rule_items(
        self,
        game_id: int,
        house_rule_id: int,
        title: str,
        texts: list[str],
        vectors: list[list[float]],
    ) -> list[EmbeddedChunk]:
        return [
            EmbeddedChunk(
                chunk=Chunk(
                    game_id=game_id,
                    text=text,
                    index=i,
                    source_type=SourceType.HOUSE_RULE,
                    source_id=house_rule_id,
                    metadata={
                        "title": title,
                        "chunk_size": len(text),
                        "total_chunks": len(texts),
                        "processing_timestamp": datetime.now(UTC).isoformat(),
                        "embedding_model": self.embedding_model,
                    },
                ),
                embedding=vector,
            )
            for i, (text, vector) in enumerate(zip(texts, vectors, strict=True))
        ]

    def index_house_rule(
        self, game_id: int, house_rule_id: int, title: str, description: str
    ) -> int:
        """Embed a house rule so it is searchable with the game's rules.

        Replaces chunks from an earlier version of the same house rule.

        Returns:
            Number of chunks stored for the rule.
        """
        texts = self._house_rule_texts(title, description)
        vectors = self.embedder.embed_many(texts)
        items = self._house_rule_items(game_id, house_rule_id, title, texts, vectors)
        self.store.replace_batch(game_id, SourceType.HOUSE_RULE, items, source_id=house_rule_id)
        logger.info("Indexed house rule %d for game %d", house_rule_id, game_id)
        return len(items)

    async def aindex_house_rule(
        self, game_id: int, house_rule_id: int, title: str, description: str
    ) -> int:
        """Embed a house rule so it is searchable (async)."""
        texts = self._house_rule_texts(title, description)
        vectors = await self.embedder.aembed_many(texts)
        items = self._house_rule_items(game_id, house_rule_id, title, texts, vectors)
        await self.store.areplace_batch(
            game_id, SourceType.HOUSE_RULE, items, source_id=house_rule_id
        )
        logger.info("Indexed house rule %d for game %d", house_rule_id, game_id)
        return len(items)

    def delete_house_rule(self, house_rule_id: int) -> int:
        """Remove every chunk of a house rule. Returns the count deleted."""
        return self.store.delete_by_owner(house_rule_id)

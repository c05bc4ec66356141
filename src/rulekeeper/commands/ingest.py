"""Ingest command - index a rules PDF for a game.

This module provides the core ingest logic that the CLI uses.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rulekeeper.commands.base import (
    IngestResult,
    Outcome,
    ProgressCallback,
    ProgressUpdate,
    classify_error,
)
from rulekeeper.config import ConfigError, get_rulekeeper

if TYPE_CHECKING:
    from rulekeeper.ingestor import IngestionState
    from rulekeeper.rulekeeper import Rulekeeper


def ingest(
    game_id: int,
    path: str | Path,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    on_progress: ProgressCallback | None = None,
) -> IngestResult:
    """Ingest a rules PDF for a game.

    Replaces any rules document previously ingested for the game.

    Args:
        game_id: Game the rules belong to
        path: Path to the PDF
        data_dir: Override data directory (uses config if not provided)
        config_path: Override config file path
        on_progress: Callback for progress updates during ingestion

    Returns:
        IngestResult with the ingestion statistics or the failure
    """
    path = Path(path)
    if not path.is_file():
        return IngestResult(
            outcome=Outcome.NOT_FOUND,
            error=f"File not found: {path}",
            game_id=game_id,
            filename=path.name,
        )

    keeper = get_rulekeeper(data_dir, config_path)
    if isinstance(keeper, ConfigError):
        return IngestResult(
            outcome=Outcome.BAD_INPUT,
            error=keeper.message,
            game_id=game_id,
            filename=path.name,
        )

    try:
        return ingest_with_rulekeeper(keeper, game_id, path, on_progress)
    finally:
        keeper.close()


def ingest_with_rulekeeper(
    keeper: Rulekeeper,
    game_id: int,
    path: str | Path,
    on_progress: ProgressCallback | None = None,
) -> IngestResult:
    """Ingest a rules PDF using an existing Rulekeeper instance."""
    path = Path(path)

    def progress_adapter(state: IngestionState, message: str) -> None:
        """Adapt the ingestor's progress callback to our ProgressUpdate format."""
        if on_progress:
            on_progress(ProgressUpdate(stage=state.value, message=message))

    try:
        stats = keeper.ingest_file(
            game_id,
            path,
            on_progress=progress_adapter if on_progress else None,
        )
    except FileNotFoundError as e:
        return IngestResult(
            outcome=Outcome.NOT_FOUND, error=str(e), game_id=game_id, filename=path.name
        )
    except Exception as e:
        outcome, message = classify_error(e)
        return IngestResult(outcome=outcome, error=message, game_id=game_id, filename=path.name)

    return IngestResult(
        game_id=game_id,
        filename=path.name,
        chunks_processed=stats["chunks_processed"],
        total_text_length=stats["total_text_length"],
        file_path=stats.get("file_path"),
    )

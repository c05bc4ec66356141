"""Delete command - remove a game's stored rules.

Confirmation goes through a callback so each UI can ask in its own way.
"""

from __future__ import annotations

from pathlib import Path

from rulekeeper.commands.base import (
    ConfirmCallback,
    ConfirmRequest,
    DeleteResult,
    Outcome,
    classify_error,
)
from rulekeeper.config import ConfigError, get_rulekeeper
from rulekeeper.models import SourceType


def delete(
    game_id: int,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    source_type: SourceType | None = None,
    on_confirm: ConfirmCallback | None = None,
) -> DeleteResult:
    """Delete a game's stored chunks.

    Args:
        game_id: Game whose chunks are removed
        data_dir: Override data directory
        config_path: Override config file path
        source_type: Only delete chunks of this source type
        on_confirm: Optional callback for confirmation. Return True to
            proceed. If None, deletion proceeds without confirmation.

    Returns:
        DeleteResult with the number of chunks deleted
    """
    keeper = get_rulekeeper(data_dir, config_path)
    if isinstance(keeper, ConfigError):
        return DeleteResult(outcome=Outcome.BAD_INPUT, error=keeper.message, game_id=game_id)

    try:
        stored = keeper.store.count_chunks(game_id)
        if stored == 0:
            return DeleteResult(
                outcome=Outcome.NOT_FOUND,
                error=f"No rules stored for game {game_id}",
                game_id=game_id,
            )

        if on_confirm is not None:
            request = ConfirmRequest(
                message=f"Delete rules for game {game_id}?",
                details=f"This will remove up to {stored} chunks from the database.",
            )
            if not on_confirm(request):
                return DeleteResult(outcome=Outcome.BAD_INPUT, error="Cancelled.", game_id=game_id)

        stats = keeper.delete_rules(game_id, source_type)
    except Exception as e:
        outcome, message = classify_error(e)
        return DeleteResult(outcome=outcome, error=message, game_id=game_id)
    finally:
        keeper.close()

    return DeleteResult(game_id=game_id, embeddings_deleted=stats["embeddings_deleted"])

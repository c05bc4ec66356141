"""Base types for the commands layer.

This module defines the data structures used by all commands:
- Outcome, the category a caller can branch on
- Progress and confirmation callbacks
- Result types for each command
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rulekeeper.exceptions import ExtractionError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Internal error. See the log for details."


class Outcome(Enum):
    """What happened, at the granularity a user interface needs."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    BAD_INPUT = "bad_input"
    INTERNAL_FAILURE = "internal_failure"


def classify_error(error: Exception) -> tuple[Outcome, str]:
    """Map an exception to an Outcome and a message safe to show a user.

    Caller mistakes keep their message and are not logged as faults.
    Everything else is logged with its traceback and replaced by a generic
    message, so storage or provider internals never reach the user.
    """
    if isinstance(error, NotFoundError):
        return Outcome.NOT_FOUND, str(error)
    if isinstance(error, ValidationError | ExtractionError):
        return Outcome.BAD_INPUT, str(error)
    logger.error("Command failed", exc_info=error)
    return Outcome.INTERNAL_FAILURE, GENERIC_FAILURE_MESSAGE


@dataclass
class ProgressUpdate:
    """Progress update for long-running operations.

    Attributes:
        stage: Name of the stage just entered (e.g. "chunked")
        message: Status message
    """

    stage: str
    message: str | None = None


# Callback type for progress updates
ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class ConfirmRequest:
    """Request for confirmation before a destructive action."""

    message: str
    details: str | None = None


# Callback type for confirmations - returns True to proceed
ConfirmCallback = Callable[[ConfirmRequest], bool]


@dataclass
class CommandResult:
    """Base result type for commands."""

    outcome: Outcome = Outcome.SUCCESS
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


@dataclass
class IngestResult(CommandResult):
    """Result of the ingest command."""

    game_id: int = 0
    filename: str = ""
    chunks_processed: int = 0
    total_text_length: int = 0
    file_path: str | None = None


@dataclass
class SearchResult:
    """A single retrieved rule passage."""

    chunk_id: int
    content: str
    score: float
    source_type: str
    source_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryResult(CommandResult):
    """Result of the search and ask commands.

    Attributes:
        game_id: Game that was searched
        query: The original query
        answer: Synthesized answer (ask only; None without context)
        results: Retrieved passages, best first
    """

    game_id: int = 0
    query: str = ""
    answer: str | None = None
    results: list[SearchResult] = field(default_factory=list)


@dataclass
class DeleteResult(CommandResult):
    """Result of the delete command."""

    game_id: int = 0
    embeddings_deleted: int = 0


@dataclass
class SettingInfo:
    """Information about a single setting."""

    name: str
    value: str
    source: str  # "env var", "yaml", "default"


@dataclass
class ConfigResult(CommandResult):
    """Result of the config command.

    Attributes:
        provider: Provider type
        embedding_model: Embedding model name
        llm_model: LLM model name
        api_base: Endpoint base URL
        data_dir: Data directory path
        use_vector_index: Whether the Chroma index is used
        settings: Behavioral settings with their sources
        config_path: Path to config file (if found)
        warnings: Unknown keys found in the config file
    """

    provider: str = "litellm"
    embedding_model: str | None = None
    llm_model: str | None = None
    api_base: str | None = None
    data_dir: str = ""
    use_vector_index: bool = False
    settings: list[SettingInfo] = field(default_factory=list)
    config_path: str | None = None
    warnings: list[str] = field(default_factory=list)

"""Search and ask commands - query a game's rules.

This module provides the core query logic that the CLI uses.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rulekeeper.commands.base import Outcome, QueryResult, SearchResult, classify_error
from rulekeeper.config import ConfigError, get_rulekeeper

if TYPE_CHECKING:
    from rulekeeper.models import RuleMatch
    from rulekeeper.providers import LLMClient
    from rulekeeper.rulekeeper import Rulekeeper


def _to_results(matches: list[RuleMatch]) -> list[SearchResult]:
    return [
        SearchResult(
            chunk_id=m.chunk_id,
            content=m.chunk_text,
            score=m.similarity_score,
            source_type=m.source_type.value,
            source_id=m.source_id,
            metadata=dict(m.metadata),
        )
        for m in matches
    ]


def search(
    game_id: int,
    query: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    limit: int | None = None,
) -> QueryResult:
    """Rank a game's rule passages against a query.

    Args:
        game_id: Game to search
        query: Natural-language query
        data_dir: Override data directory
        config_path: Override config file path
        limit: Number of results to return (None for default)

    Returns:
        QueryResult with the matching passages
    """
    keeper = get_rulekeeper(data_dir, config_path)
    if isinstance(keeper, ConfigError):
        return QueryResult(
            outcome=Outcome.BAD_INPUT, error=keeper.message, game_id=game_id, query=query
        )
    try:
        return search_with_rulekeeper(keeper, game_id, query, limit)
    finally:
        keeper.close()


def search_with_rulekeeper(
    keeper: Rulekeeper, game_id: int, query: str, limit: int | None = None
) -> QueryResult:
    """Search using an existing Rulekeeper instance."""
    try:
        matches = keeper.search_rules(game_id, query, limit)
    except Exception as e:
        outcome, message = classify_error(e)
        return QueryResult(outcome=outcome, error=message, game_id=game_id, query=query)
    return QueryResult(game_id=game_id, query=query, results=_to_results(matches))


def ask(
    game_id: int,
    question: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> QueryResult:
    """Answer a rules question with the configured LLM.

    Args:
        game_id: Game whose rules are consulted
        question: The player's question
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        QueryResult with the answer and the passages it was based on
    """
    keeper = get_rulekeeper(data_dir, config_path)
    if isinstance(keeper, ConfigError):
        return QueryResult(
            outcome=Outcome.BAD_INPUT, error=keeper.message, game_id=game_id, query=question
        )
    try:
        return ask_with_rulekeeper(keeper, game_id, question)
    finally:
        keeper.close()


def ask_with_rulekeeper(
    keeper: Rulekeeper,
    game_id: int,
    question: str,
    llm_client: LLMClient | None = None,
) -> QueryResult:
    """Answer a question using an existing Rulekeeper instance."""
    try:
        response = keeper.ask(game_id, question, llm_client=llm_client)
    except Exception as e:
        outcome, message = classify_error(e)
        return QueryResult(outcome=outcome, error=message, game_id=game_id, query=question)
    return QueryResult(
        game_id=game_id,
        query=question,
        answer=response.answer,
        results=_to_results(response.context),
    )

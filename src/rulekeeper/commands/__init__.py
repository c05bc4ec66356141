"""UI-agnostic command layer for Rulekeeper.

Commands return data structures, allowing UIs to render results appropriately.
Every result carries an Outcome the caller can branch on.

Usage:
    from rulekeeper.commands import ingest, query

    result = ingest.ingest(1, "./catan.pdf")
    result = query.search(1, "How do I win?")
"""

from rulekeeper.commands import config_cmd, delete, ingest, query
from rulekeeper.commands.base import (
    GENERIC_FAILURE_MESSAGE,
    CommandResult,
    ConfigResult,
    ConfirmCallback,
    ConfirmRequest,
    DeleteResult,
    IngestResult,
    Outcome,
    ProgressCallback,
    ProgressUpdate,
    QueryResult,
    SearchResult,
    SettingInfo,
    classify_error,
)

__all__ = [
    # Base types
    "Outcome",
    "classify_error",
    "GENERIC_FAILURE_MESSAGE",
    "ProgressUpdate",
    "ProgressCallback",
    "ConfirmRequest",
    "ConfirmCallback",
    "CommandResult",
    # Result types
    "IngestResult",
    "QueryResult",
    "SearchResult",
    "DeleteResult",
    "ConfigResult",
    "SettingInfo",
    # Command modules
    "ingest",
    "query",
    "delete",
    "config_cmd",
]

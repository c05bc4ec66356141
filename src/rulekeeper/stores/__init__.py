"""Storage abstractions for Rulekeeper."""

from rulekeeper.stores.base import VectorIndex, VectorStore
from rulekeeper.stores.sqlite_vector import SQLiteVectorStore

try:
    from rulekeeper.stores.chroma import ChromaVectorIndex
except ImportError:
    from rulekeeper._optional import _create_missing_dependency_class

    ChromaVectorIndex = _create_missing_dependency_class(  # type: ignore[misc,assignment]
        "ChromaVectorIndex", "chroma"
    )

__all__ = [
    "VectorStore",
    "VectorIndex",
    "SQLiteVectorStore",
    "ChromaVectorIndex",
]

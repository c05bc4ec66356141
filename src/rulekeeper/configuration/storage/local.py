"""Local filesystem storage configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulekeeper.stores import VectorIndex, VectorStore


@dataclass(frozen=True)
class LocalStorage:
    """Local filesystem storage using SQLite, with an optional Chroma index.

    All data is persisted to the specified directory:
    - rules.db: Chunks and vectors (SQLite)
    - uploads/: Uploaded rules documents
    - chroma/: Nearest-neighbour index (only with use_vector_index=True)

    The Chroma index requires: pip install rulekeeper-rag[chroma]

    Args:
        data_dir: Base directory for all storage files.
                  Created if it doesn't exist.
        use_vector_index: Maintain a Chroma index and search through it
                          instead of scanning every vector of a game.

    Example:
        storage = LocalStorage("./rulekeeper_data")
        store, index = storage.build_stores()
    """

    data_dir: str
    use_vector_index: bool = False

    def build_stores(self) -> tuple[VectorStore, VectorIndex | None]:
        """Build the SQLite store and the optional Chroma index.

        Creates the data directory if it doesn't exist.
        """
        from rulekeeper.stores import ChromaVectorIndex, SQLiteVectorStore

        base = Path(self.data_dir)
        base.mkdir(parents=True, exist_ok=True)

        index = ChromaVectorIndex(str(base / "chroma")) if self.use_vector_index else None
        store = SQLiteVectorStore(str(base / "rules.db"), index=index)
        return store, index

    def upload_dir(self) -> Path:
        """Directory where uploaded documents are saved."""
        return Path(self.data_dir) / "uploads"

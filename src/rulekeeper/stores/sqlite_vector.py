"""SQLite chunk + vector store implementation."""

import contextlib
import json
import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from rulekeeper.exceptions import NotFoundError, StorageError
from rulekeeper.models import Chunk, EmbeddedChunk, SourceType
from rulekeeper.stores.base import VectorIndex, VectorStore
from rulekeeper.vectors import decode_vector, encode_vector

logger = logging.getLogger(__name__)

_CHUNK_COLUMNS = (
    "c.id, c.game_id, c.chunk_text, c.chunk_index, c.source_type, c.source_id, "
    "c.metadata, c.created_at"
)


class SQLiteVectorStore(VectorStore):
    """SQLite-based chunk and vector store.

    Holds a single connection shared by all callers. A lock serializes every
    read and write on it, so the store is safe to use from worker threads
    (the async twins) and from several request handlers at once.

    Vectors live in their own table as float32 blobs and are removed with
    their chunk through ON DELETE CASCADE.

    When a VectorIndex is attached, it is kept in step with the tables.
    New vectors are added to the index before the SQLite commit, so a
    failing index write rolls the whole transaction back. Deleted ids leave
    the index only after the commit, so a rolled-back delete never strips
    surviving chunks from the index. Chunk ids are never reused (AUTOINCREMENT)
    and search skips index hits whose chunk is gone.
    """

    def __init__(self, db_path: str, index: VectorIndex | None = None) -> None:
        """Initialize the SQLite store.

        Args:
            db_path: Database file path, or ":memory:".
            index: Optional nearest-neighbour index to maintain alongside the tables.
        """
        self.db_path = db_path
        self.index = index
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS chunks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    game_id INTEGER NOT NULL,
                    chunk_text TEXT NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    source_type TEXT NOT NULL CHECK (source_type IN ('rules_pdf', 'house_rule')),
                    source_id INTEGER,
                    metadata TEXT NOT NULL DEFAULT '{}',
                    created_at TEXT NOT NULL
                )
            """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS chunk_vectors (
                    chunk_id INTEGER PRIMARY KEY REFERENCES chunks(id) ON DELETE CASCADE,
                    dimensions INTEGER NOT NULL,
                    vector BLOB NOT NULL
                )
            """)
            self._conn.execute("CREATE INDEX IF NOT EXISTS idx_chunks_game ON chunks(game_id)")
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_chunks_owner ON chunks(source_type, source_id)"
            )

    def close(self) -> None:
        """Close the connection and the attached index."""
        with self._lock:
            self._conn.close()
        if self.index is not None:
            self.index.close()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Run a write under the lock in one transaction, mapping failures to StorageError."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except StorageError:
                raise
            except (sqlite3.Error, TypeError, ValueError) as e:
                logger.error("Rolled back %s: %s", action, e)
                raise StorageError(f"Failed to {action}") from e

    @contextmanager
    def _reading(self, action: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as e:
                raise StorageError(f"Failed to {action}") from e

    def _insert_rows(self, conn: sqlite3.Connection, items: list[EmbeddedChunk]) -> list[int]:
        ids: list[int] = []
        for item in items:
            chunk = item.chunk
            cursor = conn.execute(
                """
                INSERT INTO chunks
                    (game_id, chunk_text, chunk_index, source_type, source_id, metadata, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    chunk.game_id,
                    chunk.text,
                    chunk.index,
                    SourceType(chunk.source_type).value,
                    chunk.source_id,
                    json.dumps(chunk.metadata),
                    chunk.created_at.isoformat(),
                ),
            )
            chunk_id = int(cursor.lastrowid)  # type: ignore[arg-type]
            conn.execute(
                "INSERT INTO chunk_vectors (chunk_id, dimensions, vector) VALUES (?, ?, ?)",
                (chunk_id, len(item.embedding), encode_vector(item.embedding)),
            )
            ids.append(chunk_id)
        return ids

    def _index_add(self, ids: list[int], items: list[EmbeddedChunk]) -> None:
        """Add new vectors to the index. Called inside the transaction, before commit."""
        if self.index is None or not ids:
            return
        entries = [
            (chunk_id, item.chunk.game_id, item.embedding)
            for chunk_id, item in zip(ids, items, strict=True)
        ]
        try:
            self.index.add(entries)
        except Exception as e:
            # Drop whatever part of the batch reached the index before the failure
            with contextlib.suppress(Exception):
                self.index.delete(ids)
            raise StorageError("Failed to update vector index") from e

    def _index_delete(self, chunk_ids: list[int]) -> None:
        """Remove committed deletes from the index. Called after the transaction."""
        if self.index is None or not chunk_ids:
            return
        try:
            self.index.delete(chunk_ids)
        except Exception as e:
            logger.warning(
                "Vector index still holds %d deleted chunks: %s", len(chunk_ids), e
            )

    def _delete_where(self, conn: sqlite3.Connection, where: str, params: tuple) -> list[int]:
        chunk_ids = [row[0] for row in conn.execute(f"SELECT id FROM chunks WHERE {where}", params)]
        if chunk_ids:
            conn.execute(f"DELETE FROM chunks WHERE {where}", params)
        return chunk_ids

    @staticmethod
    def _row_to_chunk(row: tuple) -> Chunk:
        return Chunk(
            id=row[0],
            game_id=row[1],
            text=row[2],
            index=row[3],
            source_type=SourceType(row[4]),
            source_id=row[5],
            metadata=json.loads(row[6]),
            created_at=datetime.fromisoformat(row[7]),
        )

    @staticmethod
    def _decode(chunk_id: int, dimensions: int, blob: bytes) -> list[float]:
        try:
            vector = decode_vector(blob)
        except ValueError as e:
            raise StorageError(f"Corrupt vector for chunk {chunk_id}") from e
        if len(vector) != dimensions:
            raise StorageError(
                f"Corrupt vector for chunk {chunk_id}: "
                f"expected {dimensions} dimensions, found {len(vector)}"
            )
        return vector

    def insert(self, item: EmbeddedChunk) -> int:
        """Store one chunk with its vector."""
        return self.insert_batch([item])[0]

    def insert_batch(self, items: list[EmbeddedChunk]) -> list[int]:
        """Store chunks with their vectors, all or nothing."""
        if not items:
            return []
        with self._transaction("insert chunk batch") as conn:
            ids = self._insert_rows(conn, items)
            self._index_add(ids, items)
        logger.debug("Inserted %d chunks", len(ids))
        return ids

    def replace_batch(
        self,
        game_id: int,
        source_type: SourceType,
        items: list[EmbeddedChunk],
        source_id: int | None = None,
    ) -> list[int]:
        """Swap a game's chunks of one source type (and owner) for new ones atomically."""
        where = "game_id = ? AND source_type = ?"
        params: tuple = (game_id, SourceType(source_type).value)
        if source_id is not None:
            where += " AND source_id = ?"
            params += (source_id,)

        with self._transaction("replace chunk batch") as conn:
            removed = self._delete_where(conn, where, params)
            ids = self._insert_rows(conn, items)
            self._index_add(ids, items)
        self._index_delete(removed)
        logger.debug(
            "Replaced %d %s chunks of game %d with %d new chunks",
            len(removed),
            SourceType(source_type).value,
            game_id,
            len(ids),
        )
        return ids

    def list_by_game(self, game_id: int, source_type: SourceType | None = None) -> list[Chunk]:
        """List a game's chunks ordered by (source_type, chunk_index)."""
        query = f"SELECT {_CHUNK_COLUMNS} FROM chunks c WHERE c.game_id = ?"
        params: tuple = (game_id,)
        if source_type is not None:
            query += " AND c.source_type = ?"
            params += (SourceType(source_type).value,)
        query += " ORDER BY c.source_type, c.chunk_index, c.id"

        with self._reading("list chunks") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_chunk(row) for row in rows]

    def list_with_vectors(self, game_id: int) -> list[tuple[Chunk, list[float]]]:
        """List a game's chunks with their vectors, ordered by id."""
        with self._reading("list chunk vectors") as conn:
            rows = conn.execute(
                f"""
                SELECT {_CHUNK_COLUMNS}, v.dimensions, v.vector
                FROM chunks c JOIN chunk_vectors v ON v.chunk_id = c.id
                WHERE c.game_id = ?
                ORDER BY c.id
                """,
                (game_id,),
            ).fetchall()
        return [(self._row_to_chunk(row), self._decode(row[0], row[8], row[9])) for row in rows]

    def get_many(self, chunk_ids: list[int]) -> list[Chunk]:
        """Retrieve chunks by id, in the order given."""
        if not chunk_ids:
            return []
        placeholders = ",".join("?" * len(chunk_ids))
        with self._reading("get chunks") as conn:
            rows = conn.execute(
                f"SELECT {_CHUNK_COLUMNS} FROM chunks c WHERE c.id IN ({placeholders})",
                list(chunk_ids),
            ).fetchall()
        by_id = {row[0]: self._row_to_chunk(row) for row in rows}
        return [by_id[cid] for cid in chunk_ids if cid in by_id]

    def delete_by_game(self, game_id: int, source_type: SourceType | None = None) -> int:
        """Delete a game's chunks, optionally only one source type."""
        where = "game_id = ?"
        params: tuple = (game_id,)
        if source_type is not None:
            where += " AND source_type = ?"
            params += (SourceType(source_type).value,)

        with self._transaction("delete chunks") as conn:
            deleted = self._delete_where(conn, where, params)
        self._index_delete(deleted)
        logger.debug("Deleted %d chunks of game %d", len(deleted), game_id)
        return len(deleted)

    def delete_by_owner(self, owner_id: int) -> int:
        """Delete all chunks of one house rule."""
        with self._transaction("delete house rule chunks") as conn:
            deleted = self._delete_where(
                conn,
                "source_type = ? AND source_id = ?",
                (SourceType.HOUSE_RULE.value, owner_id),
            )
        self._index_delete(deleted)
        logger.debug("Deleted %d chunks of house rule %d", len(deleted), owner_id)
        return len(deleted)

    def get_vector_by_id(self, chunk_id: int) -> list[float]:
        """Return a chunk's vector."""
        with self._reading("get vector") as conn:
            row = conn.execute(
                "SELECT dimensions, vector FROM chunk_vectors WHERE chunk_id = ?",
                (chunk_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("chunk", chunk_id)
        return self._decode(chunk_id, row[0], row[1])

    def count_chunks(self, game_id: int | None = None) -> int:
        """Count stored chunks, optionally for one game."""
        with self._reading("count chunks") as conn:
            if game_id is None:
                row = conn.execute("SELECT COUNT(id) FROM chunks").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(id) FROM chunks WHERE game_id = ?", (game_id,)
                ).fetchone()
        return row[0] if row else 0

"""Document store access for the enrichment pipeline.

This module defines the narrow store interface the pipeline depends on and
a SQLite implementation of it. The pipeline issues exactly one
find_by_field, at most one get_by_id and at most one create per article.

Database Schema:
    documents table:
        - collection (TEXT): Collection name (articles or enrichment records)
        - id (TEXT): Document identifier, unique within a collection
        - data (TEXT): Document fields as a JSON object
        - created_at (INTEGER): Creation timestamp (Unix epoch)

    Fields are queried with SQLite's JSON functions, so any collection can
    hold any document shape (mirroring a schemaless document store).

Features:
    - WAL mode for concurrent read/write access
    - Async interface matching remote stores (appwrite_store.AppwriteStore)
    - Context manager support for auto-cleanup
"""

import json
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any, Protocol

from config import Config
from errors import DocumentNotFoundError, StoreError

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Interface of the document store collaborator.

    Documents are plain dicts with an `id` key plus their fields.
    Implementations raise StoreError on failure and DocumentNotFoundError
    from get_by_id when the document does not exist.
    """

    async def find_by_field(
        self, collection: str, field: str, value: Any, limit: int = 1
    ) -> list[dict[str, Any]]: ...

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any]: ...

    async def create(
        self, collection: str, fields: dict[str, Any], document_id: str | None = None
    ) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


def new_document_id() -> str:
    """Generate a 20-character document identifier."""
    return uuid.uuid4().hex[:20]


class SQLiteStore:
    """SQLite-backed document store.

    Example:
        >>> with SQLiteStore("enrichment.db") as store:
        ...     doc = await store.create("linklet_ai", {"article_id": "a1"})
        ...     found = await store.find_by_field("linklet_ai", "article_id", "a1")
    """

    SCHEMA = """
    -- One row per document, fields stored as JSON
    CREATE TABLE IF NOT EXISTS documents (
        collection TEXT NOT NULL,
        id TEXT NOT NULL,
        data TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        PRIMARY KEY (collection, id)
    );

    -- Index for ordered listing within a collection
    CREATE INDEX IF NOT EXISTS idx_collection_created ON documents(collection, created_at);
    """

    path: Path
    conn: sqlite3.Connection

    def __init__(self, path: Path | str):
        """Open (and create if needed) the database file.

        Args:
            path: Path to SQLite database file

        Raises:
            StoreError: If the database cannot be opened or initialized
        """
        self.path = Path(path)
        try:
            self.conn = sqlite3.connect(str(self.path))
            self.conn.row_factory = sqlite3.Row
            # WAL mode allows concurrent readers during writes
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.executescript(self.SCHEMA)
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database '{self.path}': {e}") from e
        logger.debug("Database initialized | path=%s", self.path)

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> dict[str, Any]:
        return {"id": row["id"], **json.loads(row["data"])}

    async def find_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: int = 1,
    ) -> list[dict[str, Any]]:
        """Find documents whose field equals value, oldest first.

        Args:
            collection: Collection name
            field: Top-level field name
            value: Value to match exactly
            limit: Maximum documents to return

        Returns:
            Matching documents (possibly empty)
        """
        try:
            cursor = self.conn.execute(
                """
                SELECT id, data FROM documents
                WHERE collection = ? AND json_extract(data, ?) = ?
                ORDER BY created_at, rowid
                LIMIT ?
                """,
                (collection, f'$."{field}"', value, limit),
            )
            return [self._row_to_document(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"Query on '{collection}.{field}' failed: {e}") from e

    async def get_by_id(self, collection: str, document_id: str) -> dict[str, Any]:
        """Get a document by its identifier.

        Raises:
            DocumentNotFoundError: If no such document exists
            StoreError: On database failure
        """
        try:
            cursor = self.conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, document_id),
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Lookup of '{document_id}' in '{collection}' failed: {e}") from e
        if row is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._row_to_document(row)

    async def create(
        self,
        collection: str,
        fields: dict[str, Any],
        document_id: str | None = None,
    ) -> dict[str, Any]:
        """Insert a new document.

        Args:
            collection: Collection name
            fields: Document fields (must be JSON-serializable)
            document_id: Explicit identifier, generated when omitted

        Returns:
            The stored document including its `id`

        Raises:
            StoreError: If the id already exists or the write fails
        """
        doc_id = document_id or new_document_id()
        data = {k: v for k, v in fields.items() if k != "id"}
        try:
            self.conn.execute(
                "INSERT INTO documents (collection, id, data, created_at) VALUES (?, ?, ?, ?)",
                (collection, doc_id, json.dumps(data, ensure_ascii=False), int(time.time())),
            )
            self.conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            self.conn.rollback()
            raise StoreError(f"Create in '{collection}' failed: {e}") from e
        logger.debug("Document created | collection=%s id=%s", collection, doc_id)
        return {"id": doc_id, **data}

    def counts(self) -> dict[str, int]:
        """Get document counts per collection."""
        cursor = self.conn.execute(
            "SELECT collection, COUNT(*) AS total FROM documents GROUP BY collection ORDER BY collection"
        )
        return {row["collection"]: row["total"] for row in cursor.fetchall()}

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    async def aclose(self) -> None:
        self.close()

    def __enter__(self) -> "SQLiteStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def open_store(config: Config) -> DocumentStore:
    """Create the document store selected by config.store_backend.

    Raises:
        StoreError: If the backend is unknown or cannot be opened
    """
    if config.store_backend == "sqlite":
        return SQLiteStore(config.db_path)
    if config.store_backend == "appwrite":
        from appwrite_store import AppwriteStore

        return AppwriteStore(
            endpoint=config.appwrite_endpoint,
            project_id=config.appwrite_project_id,
            api_key=config.appwrite_api_key,
            database_id=config.appwrite_db_id,
        )
    raise StoreError(f"Unknown store backend: {config.store_backend}")

"""Vector store interface and LanceDB implementation."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from docvectors.config import VectorStoreSettings, get_settings
from docvectors.exceptions import DocVectorsError, SchemaError, StorageIOError
from docvectors.logging_config import get_logger
from docvectors.observability.metrics import (
    track_rows_written,
    track_search_results,
    track_vectorstore_operation,
)
from docvectors.vectorstore.encoder import encode_chunks
from docvectors.vectorstore.locks import DocumentLocks
from docvectors.vectorstore.models import ChunkRecord, SearchResult
from docvectors.vectorstore.query import QueryEngine
from docvectors.vectorstore.tables import TableStore, table_name_for

logger = get_logger(__name__)


class VectorStore(ABC):
    """Abstract base class for per-document vector stores.

    Every operation takes the storage root explicitly.
    """

    @abstractmethod
    async def initialize(self, storage_root: str | Path) -> str:
        """Prepare a storage root.

        Args:
            storage_root: Directory holding the document tables.

        Returns:
            Confirmation message.

        Raises:
            StoreConnectionError: If the root is not usable.
        """
        ...

    @abstractmethod
    async def add_chunks(
        self,
        document_id: str,
        chunks: Sequence[ChunkRecord | Mapping[str, Any]],
        storage_root: str | Path,
    ) -> int:
        """Replace a document's chunks.

        Args:
            document_id: Document identifier.
            chunks: Chunk records in insertion order.
            storage_root: Directory holding the document tables.

        Returns:
            Number of rows written.

        Raises:
            SchemaError: If the chunks are malformed.
            StorageIOError: If the table cannot be written.
        """
        ...

    @abstractmethod
    async def search(
        self,
        document_id: str,
        query_vector: Sequence[float],
        top_k: int,
        storage_root: str | Path,
    ) -> list[SearchResult]:
        """Search a document for the chunks closest to a query vector.

        Args:
            document_id: Document identifier.
            query_vector: Query embedding.
            top_k: Maximum results to return.
            storage_root: Directory holding the document tables.

        Returns:
            Results ordered by ascending distance.

        Raises:
            NotFoundError: If the document has no table.
            QueryError: If the query is malformed or fails.
        """
        ...

    @abstractmethod
    async def has_document(self, document_id: str, storage_root: str | Path) -> bool:
        """Check if a document table exists."""
        ...

    @abstractmethod
    async def delete_document(self, document_id: str, storage_root: str | Path) -> str:
        """Drop a document table.

        Raises:
            NotFoundError: If the document has no table.
        """
        ...

    @abstractmethod
    async def clear_all(self, storage_root: str | Path) -> str:
        """Drop every table in a storage root.

        Raises:
            StorageIOError: On the first table that cannot be dropped.
        """
        ...

    @abstractmethod
    async def get_count(self, document_id: str, storage_root: str | Path) -> int:
        """Count the chunks stored for a document.

        Raises:
            NotFoundError: If the document has no table.
        """
        ...


def coerce_chunks(
    document_id: str,
    chunks: Sequence[ChunkRecord | Mapping[str, Any]],
) -> list[ChunkRecord]:
    """Validate plain mappings into ChunkRecord instances."""
    records: list[ChunkRecord] = []
    for position, chunk in enumerate(chunks):
        if isinstance(chunk, ChunkRecord):
            records.append(chunk)
            continue
        try:
            records.append(ChunkRecord.model_validate(chunk))
        except PydanticValidationError as e:
            raise SchemaError(
                f"Invalid chunk at position {position}: {e.error_count()} validation errors",
                details={
                    "document_id": document_id,
                    "position": position,
                    "errors": e.errors(
                        include_url=False,
                        include_input=False,
                        include_context=False,
                    ),
                },
            ) from e
    return records


class LanceVectorStore(VectorStore):
    """LanceDB vector store, one table per document.

    Blocking LanceDB calls run in worker threads. Each call opens its own
    connection against the storage root it is given.
    """

    def __init__(
        self,
        settings: VectorStoreSettings | None = None,
        locks: DocumentLocks | None = None,
    ) -> None:
        """Initialize the LanceDB vector store.

        Args:
            settings: Vector store configuration.
            locks: Lock registry (shared between stores to serialize them
                against each other).
        """
        self._settings = settings or get_settings().vector_store
        self._locks = locks or DocumentLocks(enabled=self._settings.serialize_per_document)

    def _tables(self, storage_root: str | Path) -> TableStore:
        return TableStore(storage_root, page_size=self._settings.table_page_size)

    @asynccontextmanager
    async def _track(self, operation: str, **context: Any) -> AsyncIterator[None]:
        """Time an operation, record its outcome and normalize its errors."""
        start = time.perf_counter()
        logger.debug(f"{operation} started", extra=context)
        try:
            yield
        except DocVectorsError as e:
            track_vectorstore_operation(operation, time.perf_counter() - start, success=False)
            logger.warning(
                f"{operation} failed: {e.message}",
                extra={"error_code": e.code.value, **context},
            )
            raise
        except Exception as e:
            track_vectorstore_operation(operation, time.perf_counter() - start, success=False)
            logger.error(f"{operation} failed: {e}", extra=context)
            raise StorageIOError(
                f"{operation} failed: {e}",
                details={**context, "error": str(e)},
            ) from e
        track_vectorstore_operation(operation, time.perf_counter() - start)

    async def initialize(self, storage_root: str | Path) -> str:
        """Create the storage root if needed and check it can be listed."""
        tables = self._tables(storage_root)
        async with self._track("initialize", storage_root=str(storage_root)):
            await asyncio.to_thread(tables.ensure)
        logger.info(f"Vector store initialized at: {tables.storage_root}")
        return f"Vector store initialized at: {tables.storage_root}"

    async def add_chunks(
        self,
        document_id: str,
        chunks: Sequence[ChunkRecord | Mapping[str, Any]],
        storage_root: str | Path,
    ) -> int:
        """Encode chunks and overwrite the document's table with them."""
        tables = self._tables(storage_root)
        context = {"document_id": document_id, "storage_root": str(storage_root)}

        async with self._track("add_chunks", **context):
            name = table_name_for(document_id)
            records = coerce_chunks(document_id, chunks)
            batch = await asyncio.to_thread(
                encode_chunks,
                document_id,
                records,
                self._settings.default_dimensions,
            )
            async with self._locks.hold(storage_root, name):
                rows = await asyncio.to_thread(tables.write, document_id, batch)

        track_rows_written(rows)
        logger.info(f"Added {rows} chunks to table {name}", extra=context)
        return rows

    async def search(
        self,
        document_id: str,
        query_vector: Sequence[float],
        top_k: int,
        storage_root: str | Path,
    ) -> list[SearchResult]:
        """Run an L2 nearest-neighbor query against the document's table."""
        engine = QueryEngine(self._tables(storage_root))
        context = {"document_id": document_id, "storage_root": str(storage_root), "top_k": top_k}

        async with self._track("search", **context):
            name = table_name_for(document_id)
            async with self._locks.hold(storage_root, name):
                results = await asyncio.to_thread(
                    engine.search, document_id, query_vector, top_k
                )

        track_search_results(len(results), results[0].score if results else 0.0)
        return results

    async def has_document(self, document_id: str, storage_root: str | Path) -> bool:
        """Check the document's table is listed under the storage root."""
        tables = self._tables(storage_root)
        async with self._track(
            "has_document", document_id=document_id, storage_root=str(storage_root)
        ):
            return await asyncio.to_thread(tables.exists, document_id)

    async def delete_document(self, document_id: str, storage_root: str | Path) -> str:
        """Drop the document's table; a missing table is NotFoundError."""
        tables = self._tables(storage_root)

        async with self._track(
            "delete_document", document_id=document_id, storage_root=str(storage_root)
        ):
            name = table_name_for(document_id)
            async with self._locks.hold(storage_root, name):
                dropped = await asyncio.to_thread(tables.delete, document_id)

        return f"Deleted table: {dropped}"

    async def clear_all(self, storage_root: str | Path) -> str:
        """Drop every table, stopping at the first failure."""
        tables = self._tables(storage_root)

        async with self._track("clear_all", storage_root=str(storage_root)):
            names = await asyncio.to_thread(tables.list_tables)
            for name in names:
                async with self._locks.hold(storage_root, name):
                    await asyncio.to_thread(tables.drop_table, name)

        logger.info(f"Cleared {len(names)} tables", extra={"storage_root": str(storage_root)})
        return f"Cleared {len(names)} tables"

    async def get_count(self, document_id: str, storage_root: str | Path) -> int:
        """Count rows in the document's table."""
        tables = self._tables(storage_root)

        async with self._track(
            "get_count", document_id=document_id, storage_root=str(storage_root)
        ):
            name = table_name_for(document_id)
            async with self._locks.hold(storage_root, name):
                return await asyncio.to_thread(tables.count, document_id)

"""On-disk table lifecycle for a LanceDB storage root.

Each document lives in its own table, named after the document identifier.
Every operation opens a fresh connection against the storage root; nothing
is cached between calls.
"""

from pathlib import Path
from typing import Any

import lancedb
import pyarrow as pa
from lancedb.db import DBConnection
from lancedb.table import Table

from docvectors.exceptions import (
    NotFoundError,
    StorageIOError,
    StoreConnectionError,
    ValidationError,
)
from docvectors.logging_config import get_logger

logger = get_logger(__name__)

TABLE_PREFIX = "doc_"

# 255-byte filename limit minus the ".lance" directory suffix.
MAX_TABLE_NAME_LENGTH = 249


def table_name_for(document_id: str) -> str:
    """Derive the table name for a document.

    Every character other than an ASCII letter or digit becomes ``_``. The
    mapping is stable but not injective: ``doc-1`` and ``doc_1`` share
    ``doc_doc_1``.

    Raises:
        ValidationError: If the name would exceed MAX_TABLE_NAME_LENGTH.
    """
    sanitized = "".join(c if c.isascii() and c.isalnum() else "_" for c in document_id)
    name = f"{TABLE_PREFIX}{sanitized}"
    if len(name) > MAX_TABLE_NAME_LENGTH:
        raise ValidationError(
            f"Document id too long: table name would be {len(name)} characters, "
            f"limit is {MAX_TABLE_NAME_LENGTH}",
            details={"document_id_length": len(document_id), "limit": MAX_TABLE_NAME_LENGTH},
        )
    return name


class TableStore:
    """Create, inspect and drop document tables under one storage root."""

    def __init__(self, storage_root: str | Path, page_size: int = 100) -> None:
        """Initialize the table store.

        Args:
            storage_root: Directory holding the LanceDB tables.
            page_size: Number of names requested per table listing page.
        """
        self.storage_root = Path(storage_root).expanduser()
        self._page_size = page_size

    def _context(self, **extra: Any) -> dict[str, Any]:
        return {"storage_root": str(self.storage_root), **extra}

    def connect(self) -> DBConnection:
        """Open a connection against the storage root.

        Raises:
            StoreConnectionError: If the root cannot be opened.
        """
        try:
            return lancedb.connect(str(self.storage_root))
        except Exception as e:
            raise StoreConnectionError(
                f"Failed to connect to {self.storage_root}: {e}",
                details=self._context(error=str(e)),
            ) from e

    def ensure(self) -> None:
        """Create the storage root if needed and check tables can be listed.

        Raises:
            StoreConnectionError: If the root is not usable.
        """
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreConnectionError(
                f"Failed to create storage root {self.storage_root}: {e}",
                details=self._context(error=str(e)),
            ) from e

        db = self.connect()
        try:
            self._table_names(db)
        except StorageIOError as e:
            raise StoreConnectionError(
                f"Storage root {self.storage_root} is not readable: {e.message}",
                details=e.details,
            ) from e

    def _table_names(self, db: DBConnection) -> list[str]:
        names: list[str] = []
        page_token: str | None = None
        try:
            while True:
                response = db.list_tables(page_token=page_token, limit=self._page_size)
                names.extend(response.tables)
                page_token = response.page_token
                if not page_token:
                    return names
        except Exception as e:
            raise StorageIOError(
                f"Failed to list tables: {e}",
                details=self._context(error=str(e)),
            ) from e

    def list_tables(self) -> list[str]:
        """List every table name under the storage root."""
        return self._table_names(self.connect())

    def exists(self, document_id: str) -> bool:
        """Whether a table exists for the document."""
        return table_name_for(document_id) in self.list_tables()

    def write(self, document_id: str, batch: pa.RecordBatch) -> int:
        """Replace the document's table with the contents of a batch.

        Any previous table of the same name is dropped first. A table that
        is not there to drop is not an error.

        Args:
            document_id: Owning document.
            batch: Encoded chunks.

        Returns:
            Number of rows written.

        Raises:
            StorageIOError: If the old table cannot be dropped or the new
                one cannot be created.
        """
        name = table_name_for(document_id)
        db = self.connect()

        try:
            db.drop_table(name)
            logger.debug(f"Dropped previous table {name}", extra=self._context())
        except Exception as e:
            if name in self._table_names(db):
                raise StorageIOError(
                    f"Failed to drop existing table {name}: {e}",
                    details=self._context(
                        document_id=document_id, table=name, error=str(e)
                    ),
                ) from e
            logger.debug(f"No previous table {name} to drop", extra=self._context())

        try:
            if batch.num_rows == 0:
                db.create_table(name, schema=batch.schema, mode="overwrite")
            else:
                db.create_table(
                    name,
                    data=pa.Table.from_batches([batch]),
                    mode="overwrite",
                )
        except Exception as e:
            raise StorageIOError(
                f"Failed to create table {name}: {e}",
                details=self._context(document_id=document_id, table=name, error=str(e)),
            ) from e

        logger.info(
            f"Created table {name} with {batch.num_rows} rows",
            extra=self._context(document_id=document_id),
        )
        return batch.num_rows

    def open(self, document_id: str) -> Table:
        """Open the document's table.

        Raises:
            NotFoundError: If the table does not exist.
            StorageIOError: If it exists but cannot be opened.
        """
        name = table_name_for(document_id)
        db = self.connect()
        try:
            return db.open_table(name)
        except Exception as e:
            details = self._context(document_id=document_id, table=name, error=str(e))
            if name not in self._table_names(db):
                raise NotFoundError(f"Table not found: {name}", details=details) from e
            raise StorageIOError(f"Failed to open table {name}: {e}", details=details) from e

    def count(self, document_id: str) -> int:
        """Number of rows stored for a document.

        Raises:
            NotFoundError: If the table does not exist.
        """
        table = self.open(document_id)
        try:
            return int(table.count_rows())
        except Exception as e:
            raise StorageIOError(
                f"Failed to count rows: {e}",
                details=self._context(
                    document_id=document_id,
                    table=table_name_for(document_id),
                    error=str(e),
                ),
            ) from e

    def delete(self, document_id: str) -> str:
        """Drop the document's table.

        Unlike write, a missing table is an error here.

        Returns:
            The dropped table name.

        Raises:
            NotFoundError: If the table does not exist.
            StorageIOError: If the drop fails.
        """
        name = table_name_for(document_id)
        db = self.connect()
        details = self._context(document_id=document_id, table=name)

        if name not in self._table_names(db):
            raise NotFoundError(f"Table not found: {name}", details=details)

        self._drop(db, name)
        return name

    def drop_table(self, name: str) -> None:
        """Drop a table by its stored name."""
        self._drop(self.connect(), name)

    def _drop(self, db: DBConnection, name: str) -> None:
        try:
            db.drop_table(name)
        except Exception as e:
            raise StorageIOError(
                f"Failed to delete table {name}: {e}",
                details=self._context(table=name, error=str(e)),
            ) from e
        logger.info(f"Deleted table {name}", extra=self._context())

    def clear_all(self) -> list[str]:
        """Drop every table under the storage root.

        Stops at the first table that fails to drop.

        Returns:
            Names of the dropped tables.

        Raises:
            StorageIOError: Naming the table that could not be dropped.
        """
        db = self.connect()
        dropped: list[str] = []
        for name in self._table_names(db):
            self._drop(db, name)
            dropped.append(name)
        return dropped

"""Nearest-neighbor search over a document table."""

from collections.abc import Sequence

import numpy as np
import pyarrow as pa

from docvectors.exceptions import ErrorCode, QueryError, StorageIOError
from docvectors.logging_config import get_logger
from docvectors.vectorstore.models import SearchResult
from docvectors.vectorstore.schema import validate_schema
from docvectors.vectorstore.tables import TableStore, table_name_for

logger = get_logger(__name__)

RESULT_COLUMNS = ("id", "text", "_distance")


def distance_to_score(distance: float) -> float:
    """Map a distance in [0, inf) to a relevance score in (0, 1]."""
    return 1.0 / (1.0 + distance)


def prepare_query(query_vector: Sequence[float], top_k: int) -> np.ndarray:
    """Validate a query vector and result limit.

    Returns:
        The query as a 1-D float64 array.

    Raises:
        QueryError: If top_k is below 1 or the vector is empty,
            not one-dimensional or holds non-finite values.
    """
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
        raise QueryError(
            f"top_k must be a positive integer, got {top_k!r}",
            details={"top_k": top_k},
        )

    try:
        query = np.asarray(query_vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise QueryError(
            f"Query vector is not numeric: {e}",
            details={"error": str(e)},
        ) from e

    if query.ndim != 1 or query.size == 0:
        raise QueryError(
            "Query vector must be a non-empty flat sequence of numbers",
            details={"shape": list(query.shape)},
        )
    if not np.all(np.isfinite(query)):
        raise QueryError("Query vector contains NaN or infinite values")

    return query


def extract_results(result: pa.Table) -> list[SearchResult]:
    """Turn a search result table into SearchResult records.

    Columns are looked up by name. LanceDB reports ``l2`` as the squared
    distance in ``_distance``; its square root is the Euclidean distance.
    Row order is preserved.

    Raises:
        QueryError: If a required column is missing.
    """
    missing = [name for name in RESULT_COLUMNS if name not in result.column_names]
    if missing:
        raise QueryError(
            f"Search result is missing columns: {missing}",
            details={"missing": missing, "columns": result.column_names},
        )

    if result.num_rows == 0:
        return []

    ids = result.column("id").to_pylist()
    texts = result.column("text").to_pylist()
    squared = np.asarray(result.column("_distance").to_pylist(), dtype=np.float64)
    distances = np.sqrt(np.clip(squared, 0.0, None))

    return [
        SearchResult(
            id=chunk_id,
            text=text,
            score=distance_to_score(float(distance)),
            distance=float(distance),
        )
        for chunk_id, text, distance in zip(ids, texts, distances)
    ]


class QueryEngine:
    """Runs L2 nearest-neighbor queries against document tables."""

    def __init__(self, tables: TableStore) -> None:
        self._tables = tables

    def search(
        self,
        document_id: str,
        query_vector: Sequence[float],
        top_k: int,
    ) -> list[SearchResult]:
        """Find the chunks closest to a query vector.

        Args:
            document_id: Document to search.
            query_vector: Query embedding, same length as the stored vectors.
            top_k: Maximum number of results.

        Returns:
            Results ordered by ascending distance. At most top_k, fewer if
            the table is smaller, empty for an empty table.

        Raises:
            NotFoundError: If the document has no table.
            SchemaError: If the table layout is not the expected one.
            QueryError: On a malformed query, a dimensionality mismatch or a
                backend failure.
        """
        query = prepare_query(query_vector, top_k)
        table = self._tables.open(document_id)
        name = table_name_for(document_id)

        try:
            schema = table.schema
            row_count = table.count_rows()
        except Exception as e:
            raise StorageIOError(
                f"Failed to read table {name}: {e}",
                details={"document_id": document_id, "table": name, "error": str(e)},
            ) from e

        dimensions = validate_schema(schema)
        if query.size != dimensions:
            raise QueryError(
                f"Query vector has {query.size} dimensions, table {name} stores {dimensions}",
                code=ErrorCode.DIMENSION_MISMATCH,
                details={
                    "document_id": document_id,
                    "table": name,
                    "expected": dimensions,
                    "actual": int(query.size),
                },
            )

        if row_count == 0:
            return []

        try:
            result = (
                table.search(query.tolist(), vector_column_name="vector")
                .distance_type("l2")
                .select(["id", "text"])
                .limit(top_k)
                .to_arrow()
            )
        except Exception as e:
            raise QueryError(
                f"Search failed: {e}",
                details={"document_id": document_id, "table": name, "error": str(e)},
            ) from e

        results = extract_results(result)
        logger.debug(
            f"Search returned {len(results)} results",
            extra={"document_id": document_id, "top_k": top_k},
        )
        return results

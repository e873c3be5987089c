"""Chunk records to Arrow record batches."""

from collections.abc import Sequence

import numpy as np
import pyarrow as pa

from docvectors.exceptions import ErrorCode, SchemaError
from docvectors.logging_config import get_logger
from docvectors.vectorstore.models import ChunkRecord
from docvectors.vectorstore.schema import DEFAULT_DIMENSIONS, build_schema

logger = get_logger(__name__)


def check_dimensions(document_id: str, chunks: Sequence[ChunkRecord]) -> int:
    """Check every chunk vector has the length of the first one.

    Args:
        document_id: Owning document, for error context.
        chunks: Records about to be encoded (non-empty).

    Returns:
        The shared vector length.

    Raises:
        SchemaError: On the first record whose length differs.
    """
    dimensions = len(chunks[0].vector)
    for position, chunk in enumerate(chunks):
        if len(chunk.vector) != dimensions:
            raise SchemaError(
                f"Chunk {chunk.id!r} at position {position} has "
                f"{len(chunk.vector)} dimensions, expected {dimensions}",
                code=ErrorCode.DIMENSION_MISMATCH,
                details={
                    "document_id": document_id,
                    "chunk_id": chunk.id,
                    "position": position,
                    "expected": dimensions,
                    "actual": len(chunk.vector),
                },
            )
    return dimensions


def encode_chunks(
    document_id: str,
    chunks: Sequence[ChunkRecord],
    default_dimensions: int = DEFAULT_DIMENSIONS,
) -> pa.RecordBatch:
    """Encode chunk records as one columnar batch.

    Vectors are packed into a single flat float32 buffer and exposed as a
    fixed-size list column with a stride of the vector length. Record order
    is kept as given.

    Args:
        document_id: Owning document, used for logging and error context.
        chunks: Records in insertion order. May be empty.
        default_dimensions: Vector length used for an empty batch.

    Returns:
        A RecordBatch conforming to build_schema.

    Raises:
        SchemaError: On mixed or zero vector lengths, or if Arrow rejects
            the columns.
    """
    dimensions = check_dimensions(document_id, chunks) if chunks else default_dimensions
    schema = build_schema(dimensions)

    flat = np.asarray([c.vector for c in chunks], dtype=np.float32).reshape(-1)

    try:
        vectors = pa.FixedSizeListArray.from_arrays(
            pa.array(flat, type=pa.float32()),
            dimensions,
        )
        batch = pa.RecordBatch.from_arrays(
            [
                pa.array([c.id for c in chunks], type=pa.string()),
                pa.array([c.text for c in chunks], type=pa.string()),
                vectors,
                pa.array([c.chunk_index for c in chunks], type=pa.int32()),
                pa.array([c.text_length for c in chunks], type=pa.int32()),
            ],
            schema=schema,
        )
    except (pa.ArrowException, ValueError, TypeError) as e:
        raise SchemaError(
            f"Failed to build record batch: {e}",
            details={"document_id": document_id, "error": str(e)},
        ) from e

    logger.debug(
        f"Encoded {batch.num_rows} chunks",
        extra={"document_id": document_id, "dimensions": dimensions},
    )
    return batch

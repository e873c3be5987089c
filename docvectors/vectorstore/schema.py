"""Arrow layout shared by every document table."""

import pyarrow as pa

from docvectors.exceptions import SchemaError

DEFAULT_DIMENSIONS = 384

COLUMN_NAMES = ("id", "text", "vector", "chunk_index", "text_length")


def build_schema(dimensions: int) -> pa.Schema:
    """Build the five-column layout for a given vector dimensionality.

    Args:
        dimensions: Length of every stored vector.

    Returns:
        Arrow schema with id, text, vector, chunk_index and text_length.

    Raises:
        SchemaError: If dimensions is not a positive integer.
    """
    if dimensions < 1:
        raise SchemaError(
            f"Vector dimensionality must be positive, got {dimensions}",
            details={"dimensions": dimensions},
        )

    return pa.schema(
        [
            pa.field("id", pa.string(), nullable=False),
            pa.field("text", pa.string(), nullable=False),
            pa.field("vector", pa.list_(pa.float32(), dimensions), nullable=False),
            pa.field("chunk_index", pa.int32(), nullable=False),
            pa.field("text_length", pa.int32(), nullable=False),
        ]
    )


def vector_dimensions(schema: pa.Schema) -> int:
    """Read the fixed vector length back from a table schema."""
    if "vector" not in schema.names:
        raise SchemaError(
            "Table has no vector column",
            details={"columns": schema.names},
        )

    vector_type = schema.field("vector").type
    if not pa.types.is_fixed_size_list(vector_type):
        raise SchemaError(
            f"Vector column is not a fixed-size list: {vector_type}",
            details={"type": str(vector_type)},
        )
    return vector_type.list_size


def validate_schema(schema: pa.Schema) -> int:
    """Check a read-back schema matches the layout written by build_schema.

    Field names, order and types must match. Nullability and field metadata
    are left to the storage backend.

    Returns:
        The vector dimensionality of the table.

    Raises:
        SchemaError: On any mismatch.
    """
    if tuple(schema.names) != COLUMN_NAMES:
        raise SchemaError(
            f"Unexpected table columns: {schema.names}",
            details={"expected": list(COLUMN_NAMES), "actual": schema.names},
        )

    dimensions = vector_dimensions(schema)
    expected = build_schema(dimensions)
    for field in expected:
        actual_type = schema.field(field.name).type
        if not _same_type(field.type, actual_type):
            raise SchemaError(
                f"Column {field.name!r} has type {actual_type}, expected {field.type}",
                details={
                    "column": field.name,
                    "expected": str(field.type),
                    "actual": str(actual_type),
                },
            )

    return dimensions


def _same_type(expected: pa.DataType, actual: pa.DataType) -> bool:
    # Storage may widen utf8 offsets on read-back; the values are the same.
    if pa.types.is_string(expected):
        return pa.types.is_string(actual) or pa.types.is_large_string(actual)
    if pa.types.is_fixed_size_list(expected):
        return (
            pa.types.is_fixed_size_list(actual)
            and actual.list_size == expected.list_size
            and pa.types.is_float32(actual.value_type)
        )
    return actual.equals(expected)

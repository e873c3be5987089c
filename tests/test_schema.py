"""Tests for the document table layout."""

import pyarrow as pa
import pytest

from docvectors.exceptions import SchemaError
from docvectors.vectorstore.schema import (
    COLUMN_NAMES,
    DEFAULT_DIMENSIONS,
    build_schema,
    validate_schema,
    vector_dimensions,
)


class TestBuildSchema:
    """Tests for build_schema."""

    def test_column_order(self) -> None:
        """Five columns in fixed order."""
        schema = build_schema(4)
        assert tuple(schema.names) == COLUMN_NAMES

    def test_column_types(self) -> None:
        """Columns carry the documented types."""
        schema = build_schema(8)
        assert schema.field("id").type == pa.string()
        assert schema.field("text").type == pa.string()
        assert schema.field("vector").type == pa.list_(pa.float32(), 8)
        assert schema.field("chunk_index").type == pa.int32()
        assert schema.field("text_length").type == pa.int32()

    def test_fields_not_nullable(self) -> None:
        """No column is nullable."""
        schema = build_schema(4)
        assert all(not field.nullable for field in schema)

    @pytest.mark.parametrize("dimensions", [0, -3])
    def test_rejects_non_positive_dimensions(self, dimensions: int) -> None:
        """Dimensionality must be positive."""
        with pytest.raises(SchemaError):
            build_schema(dimensions)

    def test_default_dimensions(self) -> None:
        """Default dimensionality is 384."""
        assert DEFAULT_DIMENSIONS == 384


class TestVectorDimensions:
    """Tests for reading the vector length back."""

    def test_reads_list_size(self) -> None:
        """List size of the vector column is returned."""
        assert vector_dimensions(build_schema(12)) == 12

    def test_missing_vector_column(self) -> None:
        """A schema without a vector column is rejected."""
        schema = pa.schema([pa.field("id", pa.string())])
        with pytest.raises(SchemaError):
            vector_dimensions(schema)

    def test_variable_length_vector_column(self) -> None:
        """A variable-length list is not a fixed-width vector column."""
        schema = pa.schema([pa.field("vector", pa.list_(pa.float32()))])
        with pytest.raises(SchemaError):
            vector_dimensions(schema)


class TestValidateSchema:
    """Tests for read-back validation."""

    def test_accepts_built_schema(self) -> None:
        """The layout written validates and yields its dimensionality."""
        assert validate_schema(build_schema(6)) == 6

    def test_accepts_large_string_columns(self) -> None:
        """Wide string offsets are the same text column."""
        schema = pa.schema(
            [
                pa.field("id", pa.large_string()),
                pa.field("text", pa.large_string()),
                pa.field("vector", pa.list_(pa.float32(), 3)),
                pa.field("chunk_index", pa.int32()),
                pa.field("text_length", pa.int32()),
            ]
        )
        assert validate_schema(schema) == 3

    def test_rejects_reordered_columns(self) -> None:
        """Column order is part of the layout."""
        schema = build_schema(3)
        reordered = pa.schema([schema.field(name) for name in reversed(schema.names)])
        with pytest.raises(SchemaError):
            validate_schema(reordered)

    def test_rejects_wrong_scalar_type(self) -> None:
        """An int64 chunk index is a mismatch, not a coercion."""
        schema = build_schema(3).set(3, pa.field("chunk_index", pa.int64()))
        with pytest.raises(SchemaError) as exc_info:
            validate_schema(schema)
        assert exc_info.value.details["column"] == "chunk_index"

    def test_rejects_float64_vectors(self) -> None:
        """Vectors must be 32-bit floats."""
        schema = build_schema(3).set(2, pa.field("vector", pa.list_(pa.float64(), 3)))
        with pytest.raises(SchemaError):
            validate_schema(schema)

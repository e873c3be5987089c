"""Tests for chunk batch encoding."""

import pyarrow as pa
import pytest

from docvectors.exceptions import ErrorCode, SchemaError
from docvectors.vectorstore.encoder import check_dimensions, encode_chunks
from docvectors.vectorstore.models import ChunkRecord
from docvectors.vectorstore.schema import build_schema


def _chunk(chunk_id: str, vector: list[float], index: int = 0) -> ChunkRecord:
    return ChunkRecord(
        id=chunk_id,
        text=f"text {chunk_id}",
        vector=vector,
        chunk_index=index,
        text_length=len(f"text {chunk_id}"),
    )


class TestEncodeChunks:
    """Tests for encode_chunks."""

    def test_batch_matches_schema(self, unit_chunks: list[ChunkRecord]) -> None:
        """Encoded batch uses the five-column layout."""
        batch = encode_chunks("doc1", unit_chunks)
        assert batch.schema.equals(build_schema(4))
        assert batch.num_rows == 3

    def test_preserves_order_and_values(self, unit_chunks: list[ChunkRecord]) -> None:
        """Rows come out in insertion order with their scalar fields."""
        batch = encode_chunks("doc1", unit_chunks)
        assert batch.column(0).to_pylist() == ["a", "b", "c"]
        assert batch.column(1).to_pylist() == ["passage a", "passage b", "passage c"]
        assert batch.column(3).to_pylist() == [0, 1, 2]
        assert batch.column(4).to_pylist() == [9, 9, 9]

    def test_vectors_are_fixed_width(self, unit_chunks: list[ChunkRecord]) -> None:
        """Vectors share one flat buffer sliced every d values."""
        vectors = encode_chunks("doc1", unit_chunks).column(2)
        assert isinstance(vectors, pa.FixedSizeListArray)
        assert vectors.type.list_size == 4
        assert len(vectors.values) == 12
        assert vectors[1].as_py() == [0.0, 1.0, 0.0, 0.0]

    def test_no_dedup(self) -> None:
        """Repeated ids are stored as given."""
        chunks = [_chunk("x", [1.0, 2.0]), _chunk("x", [3.0, 4.0])]
        assert encode_chunks("doc1", chunks).num_rows == 2

    def test_empty_uses_default_dimensions(self) -> None:
        """An empty input produces a zero-row batch of the default width."""
        batch = encode_chunks("doc1", [])
        assert batch.num_rows == 0
        assert batch.schema.field("vector").type.list_size == 384

    def test_empty_with_custom_default(self) -> None:
        """The default width can be configured."""
        batch = encode_chunks("doc1", [], default_dimensions=16)
        assert batch.schema.field("vector").type.list_size == 16

    def test_dimensionality_from_first_record(self) -> None:
        """Width comes from the first chunk, not the default."""
        batch = encode_chunks("doc1", [_chunk("a", [0.5] * 7)])
        assert batch.schema.field("vector").type.list_size == 7

    def test_rejects_mixed_dimensions(self) -> None:
        """A record of a different length is named in the error."""
        chunks = [
            _chunk("a", [1.0, 0.0, 0.0]),
            _chunk("b", [0.0, 1.0, 0.0]),
            _chunk("c", [0.0, 1.0]),
        ]
        with pytest.raises(SchemaError) as exc_info:
            encode_chunks("doc1", chunks)

        error = exc_info.value
        assert error.code == ErrorCode.DIMENSION_MISMATCH
        assert error.details["chunk_id"] == "c"
        assert error.details["position"] == 2
        assert error.details["expected"] == 3
        assert error.details["actual"] == 2
        assert "'c'" in error.message

    def test_rejects_empty_vectors(self) -> None:
        """Zero-length vectors cannot define a table."""
        with pytest.raises(SchemaError):
            encode_chunks("doc1", [_chunk("a", [])])


class TestCheckDimensions:
    """Tests for check_dimensions."""

    def test_returns_shared_length(self, unit_chunks: list[ChunkRecord]) -> None:
        """Uniform chunks report their common length."""
        assert check_dimensions("doc1", unit_chunks) == 4


class TestChunkRecord:
    """Tests for ChunkRecord validation."""

    def test_int32_bounds(self) -> None:
        """Chunk index outside the 32-bit range is rejected."""
        with pytest.raises(ValueError):
            ChunkRecord(id="a", text="t", vector=[1.0], chunk_index=2**31, text_length=1)

    def test_negative_index_allowed(self) -> None:
        """Signed values are accepted."""
        record = ChunkRecord(id="a", text="t", vector=[1.0], chunk_index=-1, text_length=1)
        assert record.chunk_index == -1

"""Vector store module."""

from docvectors.vectorstore.encoder import encode_chunks
from docvectors.vectorstore.locks import DocumentLocks
from docvectors.vectorstore.models import ChunkRecord, SearchResult
from docvectors.vectorstore.query import QueryEngine, distance_to_score
from docvectors.vectorstore.schema import DEFAULT_DIMENSIONS, build_schema
from docvectors.vectorstore.service import LanceVectorStore, VectorStore
from docvectors.vectorstore.tables import TableStore, table_name_for

__all__ = [
    "DEFAULT_DIMENSIONS",
    "ChunkRecord",
    "DocumentLocks",
    "LanceVectorStore",
    "QueryEngine",
    "SearchResult",
    "TableStore",
    "VectorStore",
    "build_schema",
    "distance_to_score",
    "encode_chunks",
    "table_name_for",
]

"""Vector store data models."""

from pydantic import BaseModel, Field

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ChunkRecord(BaseModel):
    """One chunk of a document, ready to be stored.

    Attributes:
        id: Caller-assigned identifier, unique within the document.
        text: The stored passage.
        vector: Embedding of the passage.
        chunk_index: Ordinal position within the source document.
        text_length: Caller-reported length of ``text``.
    """

    id: str = Field(description="Chunk identifier, unique within a document")
    text: str = Field(description="Stored passage")
    vector: list[float] = Field(description="Embedding vector")
    chunk_index: int = Field(
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Position of the chunk within its document",
    )
    text_length: int = Field(
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Length of the chunk text",
    )


class SearchResult(BaseModel):
    """Result from a vector similarity search.

    Attributes:
        id: Chunk identifier.
        text: Stored passage.
        score: Relevance in (0, 1], higher is more similar.
        distance: Euclidean distance to the query vector.
    """

    id: str = Field(description="Chunk identifier")
    text: str = Field(description="Stored passage")
    score: float = Field(description="Relevance score, 1 / (1 + distance)")
    distance: float = Field(description="Euclidean distance to the query")

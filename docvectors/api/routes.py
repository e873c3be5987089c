"""API routes for vector store operations."""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from docvectors.config import get_settings
from docvectors.exceptions import ValidationError
from docvectors.logging_config import get_logger
from docvectors.vectorstore.models import ChunkRecord, SearchResult
from docvectors.vectorstore.service import LanceVectorStore, VectorStore

logger = get_logger(__name__)


# Create router
router = APIRouter(prefix="/api/v1", tags=["Vector Store"])

_store: VectorStore | None = None


def get_vector_store() -> VectorStore:
    """Shared store instance so per-document locks apply across requests."""
    global _store
    if _store is None:
        _store = LanceVectorStore()
    return _store


def resolve_storage_root(storage_root: str | None) -> Path:
    """Use the requested storage root, or the configured one.

    An override must resolve to the configured root or a directory below it.

    Raises:
        ValidationError: If the override points outside the configured root.
    """
    configured = get_settings().vector_store.storage_root.expanduser()
    if not storage_root:
        return configured

    requested = Path(storage_root).expanduser().resolve()
    if not requested.is_relative_to(configured.resolve()):
        raise ValidationError(
            "Storage root must be inside the configured storage root",
            details={"storage_root": storage_root, "configured": str(configured)},
        )
    return requested


StoreDep = Annotated[VectorStore, Depends(get_vector_store)]
StorageRootQuery = Annotated[
    str | None,
    Query(description="Storage root override (defaults to configuration)"),
]


class InitializeRequest(BaseModel):
    """Request body for storage root initialization."""

    storage_root: str | None = Field(
        default=None,
        description="Storage root override",
    )


class AddChunksRequest(BaseModel):
    """Request body for chunk ingestion."""

    chunks: list[ChunkRecord] = Field(description="Chunks in insertion order")
    storage_root: str | None = Field(
        default=None,
        description="Storage root override",
    )


class SearchRequest(BaseModel):
    """Request body for similarity search."""

    query_vector: list[float] = Field(min_length=1, description="Query embedding")
    top_k: int = Field(default=5, ge=1, description="Maximum results")
    storage_root: str | None = Field(
        default=None,
        description="Storage root override",
    )


class MessageResponse(BaseModel):
    """Confirmation message."""

    message: str = Field(description="Human-readable confirmation")


class AddChunksResponse(BaseModel):
    """Response from chunk ingestion."""

    document_id: str = Field(description="Document identifier")
    rows_written: int = Field(description="Number of chunks stored")


class SearchResponse(BaseModel):
    """Response from similarity search."""

    document_id: str = Field(description="Document identifier")
    results: list[SearchResult] = Field(description="Results by ascending distance")


class DocumentStatusResponse(BaseModel):
    """Whether a document is stored."""

    document_id: str = Field(description="Document identifier")
    exists: bool = Field(description="Whether the document table exists")


class CountResponse(BaseModel):
    """Row count of a document table."""

    document_id: str = Field(description="Document identifier")
    count: int = Field(description="Number of stored chunks")


@router.post("/store/initialize", response_model=MessageResponse)
async def initialize_endpoint(request: InitializeRequest, store: StoreDep) -> MessageResponse:
    """Create the storage root and check it is usable."""
    message = await store.initialize(resolve_storage_root(request.storage_root))
    return MessageResponse(message=message)


@router.put(
    "/documents/{document_id}/chunks",
    response_model=AddChunksResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_chunks_endpoint(
    document_id: str,
    request: AddChunksRequest,
    store: StoreDep,
) -> AddChunksResponse:
    """Replace a document's chunks."""
    rows = await store.add_chunks(
        document_id,
        request.chunks,
        resolve_storage_root(request.storage_root),
    )
    return AddChunksResponse(document_id=document_id, rows_written=rows)


@router.post("/documents/{document_id}/search", response_model=SearchResponse)
async def search_endpoint(
    document_id: str,
    request: SearchRequest,
    store: StoreDep,
) -> SearchResponse:
    """Find the chunks of a document closest to a query vector."""
    results = await store.search(
        document_id,
        request.query_vector,
        request.top_k,
        resolve_storage_root(request.storage_root),
    )
    return SearchResponse(document_id=document_id, results=results)


@router.get("/documents/{document_id}/count", response_model=CountResponse)
async def count_endpoint(
    document_id: str,
    store: StoreDep,
    storage_root: StorageRootQuery = None,
) -> CountResponse:
    """Count the chunks stored for a document."""
    count = await store.get_count(document_id, resolve_storage_root(storage_root))
    return CountResponse(document_id=document_id, count=count)


@router.get("/documents/{document_id}", response_model=DocumentStatusResponse)
async def has_document_endpoint(
    document_id: str,
    store: StoreDep,
    storage_root: StorageRootQuery = None,
) -> DocumentStatusResponse:
    """Check whether a document is stored."""
    exists = await store.has_document(document_id, resolve_storage_root(storage_root))
    return DocumentStatusResponse(document_id=document_id, exists=exists)


@router.delete("/documents/{document_id}", response_model=MessageResponse)
async def delete_document_endpoint(
    document_id: str,
    store: StoreDep,
    storage_root: StorageRootQuery = None,
) -> MessageResponse:
    """Drop a document's table."""
    message = await store.delete_document(document_id, resolve_storage_root(storage_root))
    return MessageResponse(message=message)


@router.delete("/documents", response_model=MessageResponse)
async def clear_all_endpoint(
    store: StoreDep,
    storage_root: StorageRootQuery = None,
) -> MessageResponse:
    """Drop every document table."""
    message = await store.clear_all(resolve_storage_root(storage_root))
    logger.info(message)
    return MessageResponse(message=message)

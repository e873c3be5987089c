"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from docvectors.api import routes
from docvectors.api.app import app
from docvectors.config import VectorStoreSettings, get_settings
from docvectors.vectorstore.models import ChunkRecord
from docvectors.vectorstore.service import LanceVectorStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the configured storage root at a temporary directory."""
    monkeypatch.setenv("VECTOR_STORE_STORAGE_ROOT", str(tmp_path / "configured"))
    get_settings.cache_clear()
    routes._store = None
    yield
    get_settings.cache_clear()
    routes._store = None


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Fresh storage root for one test."""
    return tmp_path / "vectors"


@pytest.fixture
def store() -> LanceVectorStore:
    """Vector store with default settings."""
    return LanceVectorStore(settings=VectorStoreSettings())


@pytest.fixture
def unit_chunks() -> list[ChunkRecord]:
    """Three chunks on the first three axes of a 4-dimensional space."""
    vectors = {
        "a": [1.0, 0.0, 0.0, 0.0],
        "b": [0.0, 1.0, 0.0, 0.0],
        "c": [0.0, 0.0, 1.0, 0.0],
    }
    return [
        ChunkRecord(
            id=chunk_id,
            text=f"passage {chunk_id}",
            vector=vector,
            chunk_index=index,
            text_length=len(f"passage {chunk_id}"),
        )
        for index, (chunk_id, vector) in enumerate(vectors.items())
    ]


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

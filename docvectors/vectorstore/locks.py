"""Per-table serialization of store operations."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path


class DocumentLocks:
    """Hands out one asyncio.Lock per (storage root, table name).

    Only coordinates callers sharing this registry inside one process.
    When disabled, hold() is a no-op and concurrent writes, deletes and
    searches on the same table may interleave.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    def get(self, storage_root: str | Path, table: str) -> asyncio.Lock:
        key = (str(Path(storage_root).expanduser().resolve()), table)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, storage_root: str | Path, table: str) -> AsyncIterator[None]:
        if not self.enabled:
            yield
            return
        async with self.get(storage_root, table):
            yield

"""In-memory backend implementation."""

from __future__ import annotations

import asyncio

from typing_extensions import override

from .protocol import Backend


class InMemoryAsyncBackend(Backend):
    """Simple in-memory backend for local development and tests."""

    def __init__(self) -> None:
        super().__init__()
        self._store: dict[str, dict[str, str]] = {}
        self._lock = asyncio.Lock()

    @override
    async def get_fields(self, key: str) -> dict[str, str] | None:
        """Return a copy of the fields stored for key, or None when key does not exist."""
        async with self._lock:
            fields = self._store.get(key)
        return dict(fields) if fields is not None else None

    @override
    async def set_fields(self, key: str, fields: dict[str, str]) -> None:
        """Replace all fields stored for key."""
        async with self._lock:
            self._store[key] = dict(fields)

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        async with self._lock:
            _ = self._store.pop(key, None)

    @override
    async def list_keys(self, prefix: str) -> list[str]:
        """List all document keys beginning with prefix in sorted order."""
        async with self._lock:
            matching = [key for key in self._store if key.startswith(prefix)]
        return sorted(matching)

    @override
    async def close(self) -> None:
        """Release backend resources."""
        return

"""Redis-compatible backend storing each document as a hash."""

from __future__ import annotations

from inspect import isawaitable
from typing import Any

from typing_extensions import override

try:
    import redis.asyncio as redis_async
except ImportError:  # pragma: no cover - exercised when dependency is absent
    redis_async = None

from .protocol import Backend


def _normalize_string(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return value


class RedisBackend(Backend):
    """Redis-compatible async backend using one hash per document key."""

    def __init__(self, url: str = "redis://localhost:6379/0", *, client: Any | None = None) -> None:
        """Create a backend from URL or an injected async client.

        Parameters
        ----------
        url
            Redis connection URL used when ``client`` is not provided.
        client
            Optional injected client with ``hgetall/pipeline/delete/scan_iter/aclose`` API.
        """
        super().__init__()
        self._url = url
        if client is not None:
            self._client = client
            return

        if redis_async is None:
            msg = "redis dependency is required for RedisBackend; install with `uv add redis`"
            raise RuntimeError(msg)

        self._client = redis_async.from_url(url, decode_responses=True)

    @override
    async def get_fields(self, key: str) -> dict[str, str] | None:
        """Return the hash stored for key, or None when key does not exist."""
        raw = await self._client.hgetall(key)
        if not raw:
            return None
        return {_normalize_string(field): _normalize_string(value) for field, value in raw.items()}

    @override
    async def set_fields(self, key: str, fields: dict[str, str]) -> None:
        """Replace the hash stored for key; an empty field map removes the key."""
        async with self._client.pipeline(transaction=True) as pipe:
            _ = pipe.delete(key)
            if fields:
                _ = pipe.hset(key, mapping=fields)
            await pipe.execute()

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        await self._client.delete(key)

    @override
    async def list_keys(self, prefix: str) -> list[str]:
        """List all keys beginning with prefix in sorted order."""
        keys: list[str] = []
        async for key in self._client.scan_iter(match=f"{prefix}*"):
            keys.append(_normalize_string(key))
        return sorted(keys)

    @override
    async def close(self) -> None:
        """Release backend resources."""
        close_method = getattr(self._client, "aclose", None)
        if close_method is None:
            close_method = getattr(self._client, "close", None)
        if close_method is None:
            return

        maybe_awaitable = close_method()
        if isawaitable(maybe_awaitable):
            await maybe_awaitable

"""Backend interface definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Backend(ABC):
    """Async backend storing one flat field map per document key."""

    @abstractmethod
    async def get_fields(self, key: str) -> dict[str, str] | None:
        """Return the raw fields stored for key, or None when key does not exist."""

    @abstractmethod
    async def set_fields(self, key: str, fields: dict[str, str]) -> None:
        """Replace all fields stored for key."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete key if present."""

    @abstractmethod
    async def list_keys(self, prefix: str) -> list[str]:
        """List all document keys beginning with prefix."""

    @abstractmethod
    async def close(self) -> None:
        """Close any backend resources."""

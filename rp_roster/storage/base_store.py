from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStore(ABC):
    """Abstract key-value store with per-entry expiration."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Returns the parsed JSON value stored under ``key``, or None if absent or expired."""
        pass

    @abstractmethod
    async def put(self, key: str, value: Any, expiration_ttl: int) -> None:
        """Stores a JSON-serialisable ``value`` under ``key`` for ``expiration_ttl`` seconds."""
        pass

    async def close(self) -> None:
        pass

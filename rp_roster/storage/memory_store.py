import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger

from .base_store import CacheStore


class InMemoryCacheStore(CacheStore):
    """Process-local cache store. Values are kept as JSON text, like a real KV store."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        serialized, expires_at = entry
        if self._clock() >= expires_at:
            logger.debug(f"Cache entry {key} expired")
            del self._entries[key]
            return None
        try:
            return json.loads(serialized)
        except ValueError:
            logger.warning(f"Cache entry {key} is not valid JSON, ignoring it")
            return None

    async def put(self, key: str, value: Any, expiration_ttl: int) -> None:
        self._entries[key] = (json.dumps(value), self._clock() + expiration_ttl)
        logger.debug(f"Stored cache entry {key} for {expiration_ttl}s")

import asyncio
from typing import Any, Awaitable, Callable, Dict

from loguru import logger

from .base_store import CacheStore

ComputeFn = Callable[[], Awaitable[Any]]


class CacheGateway:
    """Cache-aside access to a CacheStore.

    A hit is any stored value that parsed into a JSON object or array; it is
    returned as-is for the rest of its TTL. On a miss the value is computed,
    stored and returned.

    With ``coalesce=True`` concurrent misses for the same key share a single
    computation. Without it every concurrent miss recomputes and the last
    write wins.
    """

    def __init__(self, store: CacheStore, coalesce: bool = False):
        self.store = store
        self.coalesce = coalesce
        self._in_flight: Dict[str, asyncio.Future] = {}

    @staticmethod
    def _is_valid_entry(value: Any) -> bool:
        return isinstance(value, (list, dict))

    async def _compute_and_store(
        self, cache_key: str, ttl_seconds: int, compute_fn: ComputeFn
    ) -> Any:
        value = await compute_fn()
        await self.store.put(cache_key, value, expiration_ttl=ttl_seconds)
        logger.info(f"Cached {cache_key} for {ttl_seconds}s")
        return value

    async def get_or_compute(
        self, cache_key: str, ttl_seconds: int, compute_fn: ComputeFn
    ) -> Any:
        cached = await self.store.get(cache_key)
        if self._is_valid_entry(cached):
            logger.debug(f"Cache hit for {cache_key}")
            return cached
        if cached is not None:
            logger.warning(f"Ignoring malformed cache entry for {cache_key}")

        logger.info(f"Cache miss for {cache_key}, recomputing")
        if not self.coalesce:
            return await self._compute_and_store(cache_key, ttl_seconds, compute_fn)

        pending = self._in_flight.get(cache_key)
        if pending is not None:
            logger.debug(f"Joining in-flight computation for {cache_key}")
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(
            self._compute_and_store(cache_key, ttl_seconds, compute_fn)
        )
        self._in_flight[cache_key] = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._in_flight.get(cache_key) is task:
                del self._in_flight[cache_key]

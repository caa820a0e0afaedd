# rp_roster/storage/supabase_client.py
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client

from rp_roster.config.settings import AppSettings, settings
from .base_store import CacheStore
from .memory_store import InMemoryCacheStore

# Module-level storage for the async client instance
_async_supabase_client: Optional[AsyncClient] = None


async def initialize_supabase(
    url: Optional[str] = None, key: Optional[str] = None
) -> Optional[AsyncClient]:
    """Initializes the global ASYNC Supabase client and returns it."""
    global _async_supabase_client
    if _async_supabase_client:
        logger.debug("Async Supabase client already initialized.")
        return _async_supabase_client

    url = url or settings.supabase_url
    key = key or settings.supabase_key
    if not url or not key:
        logger.warning("Supabase URL or Key not configured in settings.")
        return None

    logger.debug(f"Attempting to initialize Async Supabase client with URL: {url}")
    try:
        client: AsyncClient = await create_async_client(url, key)
        _async_supabase_client = client
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


class SupabaseCacheStore(CacheStore):
    """Cache rows in a Supabase table ``(key text primary key, value jsonb, expires_at timestamptz)``.

    Expired rows are never returned; they are overwritten by the next write
    for the same key.
    """

    def __init__(self, client: AsyncClient, table_name: str = "kv_cache"):
        self.client = client
        self.table_name = table_name

    async def get(self, key: str) -> Optional[Any]:
        now = datetime.now(timezone.utc).isoformat()
        try:
            response: APIResponse = (
                await self.client.table(self.table_name)
                .select("value")
                .eq("key", key)
                .gt("expires_at", now)
                .limit(1)
                .execute()
            )
        except APIError as e:
            logger.error(f"Error reading cache row {key} from {self.table_name}: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise

        if not response.data:
            return None
        return response.data[0].get("value")

    async def put(self, key: str, value: Any, expiration_ttl: int) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expiration_ttl)
        row = {"key": key, "value": value, "expires_at": expires_at.isoformat()}
        try:
            await self.client.table(self.table_name).upsert(row).execute()
        except APIError as e:
            logger.error(f"Error writing cache row {key} to {self.table_name}: {e.message}")
            logger.debug(f"Full APIError details: {e}")
            raise
        logger.debug(f"Upserted cache row {key} into {self.table_name}, expires {expires_at}")


async def build_cache_store(app_settings: AppSettings = settings) -> CacheStore:
    """Returns a Supabase-backed store when configured, otherwise an in-memory one."""
    client = await initialize_supabase(app_settings.supabase_url, app_settings.supabase_key)
    if client is None:
        logger.warning("Using in-memory cache store; cache is not shared between processes.")
        return InMemoryCacheStore()
    return SupabaseCacheStore(client, table_name=app_settings.cache_table)

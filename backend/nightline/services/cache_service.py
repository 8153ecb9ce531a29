"""
Redis cache for the public event listings.

Only anonymous, role-independent views are cached: the paginated public list
and the featured (landing) list. Promoter submissions, the moderation view and
the support inbox are always read from the database.

Keys live under one namespace so a single SCAN clears them:

    {CACHE_KEY_PREFIX}events:list:page=1&size=20&upcoming=True
    {CACHE_KEY_PREFIX}events:featured:limit=2

Any event write can change what the public sees (publishing, featuring,
editing a published event, deleting an event or its organizer), so every such
write commits and then drops the whole namespace. Entries also expire after REDIS_CACHE_TTL seconds.

Redis is optional. Disabled or unreachable, each call behaves as a miss and
the database answers.
"""

import json
from typing import Awaitable, Callable, Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.core.config import get_settings
from nightline.core.logging import get_logger
from nightline.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None

# Keys deleted per round trip during invalidation
_DELETE_BATCH = 100


def _events_namespace() -> str:
    return f"{settings.CACHE_KEY_PREFIX}events:"


def make_event_list_key(page: int, page_size: int, upcoming_only: bool) -> str:
    return f"{_events_namespace()}list:page={page}&size={page_size}&upcoming={upcoming_only}"


def make_featured_key(limit: int) -> str:
    return f"{_events_namespace()}featured:limit={limit}"


async def get_redis() -> Optional[redis.Redis]:
    """Shared client, created lazily. None when caching is off or Redis is down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client

    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        await client.ping()
    except redis.RedisError as e:
        logger.warning("redis_unreachable", url=settings.REDIS_URL, error=str(e))
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


async def get_cached(key: str) -> Optional[dict]:
    client = await get_redis()
    if client is None:
        return None

    try:
        raw = await client.get(key)
    except redis.RedisError as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", "hit" if raw is not None else "miss")
    if raw is None:
        return None
    return json.loads(raw)


async def set_cached(key: str, data: dict) -> None:
    client = await get_redis()
    if client is None:
        return

    try:
        await client.set(key, json.dumps(data, default=str), ex=settings.REDIS_CACHE_TTL)
        record_cache_operation("set", "ok")
    except redis.RedisError as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=key, error=str(e))


async def cached_listing(key: str, load: Callable[[], Awaitable[dict]]) -> tuple[dict, bool]:
    """
    Return (payload, from_cache). On a miss `load` builds the JSON-ready
    payload from the database and the result is stored under `key`.
    """
    cached = await get_cached(key)
    if cached is not None:
        return cached, True

    payload = await load()
    await set_cached(key, payload)
    return payload, False


async def invalidate_event_cache() -> None:
    """Drop every cached public event view."""
    client = await get_redis()
    if client is None:
        return

    deleted = 0
    batch: list[str] = []
    try:
        async for key in client.scan_iter(match=f"{_events_namespace()}*", count=_DELETE_BATCH):
            batch.append(key)
            if len(batch) >= _DELETE_BATCH:
                deleted += await client.unlink(*batch)
                batch.clear()
        if batch:
            deleted += await client.unlink(*batch)
    except redis.RedisError as e:
        record_cache_operation("invalidate", "error")
        logger.error("cache_invalidation_error", error=str(e))
        return

    record_cache_operation("invalidate", "ok")
    logger.info("cache_invalidated", keys_deleted=deleted)


async def commit_and_invalidate(db: AsyncSession) -> None:
    """
    Commit the request's writes, then drop the cached public views. Committing
    first keeps a concurrent read from re-caching the pre-write state.
    """
    await db.commit()
    await invalidate_event_cache()


async def get_cache_stats() -> dict:
    """Hit/miss counters from Redis INFO, for the health endpoint."""
    client = await get_redis()
    if client is None:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }

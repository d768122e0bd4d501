from __future__ import annotations

import json
import logging

import redis.asyncio as redis
from pydantic import ValidationError

from catalog.config import settings
from catalog.repositories.base import close_repository
from catalog.schemas import Service

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    All public methods are safe to call even when Redis is unavailable:
    read operations return None and write operations are silently skipped,
    so the catalog keeps answering from its repository without raising
    exceptions to callers.
    """

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        url = self._url or settings.REDIS_URL
        if not url:
            logger.info("REDIS_URL not set: cache disabled")
            return
        self._redis = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        # Ping to surface mis-configuration early (non-fatal).
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", url)
        except Exception as exc:
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """
        Return the cached value for *key*, or None on a miss / error.

        Increments hit/miss counters for observability.
        """
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
            if data is not None:
                self._hits += 1
                return json.loads(data)
            self._misses += 1
            return None
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """
        Persist *value* under *key* with an optional TTL (seconds).

        Serialisation errors and Redis failures are logged but never
        propagated: a cache write failure must never break a request.
        """
        if not self._redis:
            return
        try:
            serialised = json.dumps(value, default=str)
            await self._redis.set(key, serialised, ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters for metrics endpoints."""
        total = self._hits + self._misses
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()


class CachedRepository:
    """
    Read-through cache in front of another repository.

    Successful results are cached under ``services:list`` and
    ``services:detail:<id>``.  ``Missing`` and ``ServerError`` pass through
    uncached, so a record that appears later in the store is found on the
    next request.  Cached entries may lag the store by up to their TTL.
    """

    LIST_KEY = "services:list"

    def __init__(
        self,
        inner,
        cache_manager: CacheManager = cache,
        ttl_list: int | None = None,
        ttl_detail: int | None = None,
    ) -> None:
        self._inner = inner
        self._cache = cache_manager
        self._ttl_list = ttl_list if ttl_list is not None else settings.CACHE_TTL_LIST
        self._ttl_detail = ttl_detail if ttl_detail is not None else settings.CACHE_TTL_DETAIL

    @staticmethod
    def detail_key(service_id: int) -> str:
        return f"services:detail:{service_id}"

    async def list(self) -> list[Service]:
        cached = await self._cache.get(self.LIST_KEY)
        if cached is not None:
            try:
                return [Service.model_validate(item) for item in cached]
            except (TypeError, ValidationError) as exc:
                logger.warning("Discarding malformed cache entry %r: %s", self.LIST_KEY, exc)

        services = await self._inner.list()
        await self._cache.set(
            self.LIST_KEY, [s.model_dump() for s in services], ttl=self._ttl_list
        )
        return services

    async def get(self, service_id: int) -> Service:
        key = self.detail_key(service_id)
        cached = await self._cache.get(key)
        if cached is not None:
            try:
                return Service.model_validate(cached)
            except ValidationError as exc:
                logger.warning("Discarding malformed cache entry %r: %s", key, exc)

        service = await self._inner.get(service_id)
        await self._cache.set(key, service.model_dump(), ttl=self._ttl_detail)
        return service

    async def close(self) -> None:
        await close_repository(self._inner)
        await self._cache.disconnect()

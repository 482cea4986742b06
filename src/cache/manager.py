"""
Redis Cache Manager for the lead search API
Redis-backed search result cache with the same contract as the in-process cache
"""
import logging
import time
from typing import Any, Dict, Optional

import redis

from .config import CacheConfig
from .search_cache import build_search_cache_key
from ..search.models import SearchOptions, SearchResponse

logger = logging.getLogger(__name__)

class RedisSearchResultCache:
    """Redis-based search result cache with TTL, per-user eviction and invalidation"""

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        ttl: Optional[int] = None,
        max_entries_per_user: Optional[int] = None,
    ):
        """Initialize cache with Redis client"""
        self.redis_client = redis_client
        self.config = CacheConfig()
        self.ttl = ttl if ttl is not None else self.config.SEARCH_RESULT_TTL
        self.max_entries_per_user = max_entries_per_user or self.config.SEARCH_RESULT_MAX_ENTRIES
        self.enabled = redis_client is not None
        self.hits = 0
        self.misses = 0
        self.evictions = 0

        if not self.enabled:
            logger.warning("Search cache initialized without Redis client - caching disabled")

    def _entry_key(self, user_id: int, key: str) -> str:
        """Generate value key with proper prefix"""
        return f"{self.config.get_key_prefix('search')}{user_id}:{key}"

    def _index_key(self, user_id: int) -> str:
        """Sorted set of a user's keys scored by creation time"""
        return f"{self.config.get_key_prefix('search_index')}{user_id}"

    def _prune_index(self, user_id: int, now: float) -> int:
        """Drop index members whose values have already expired"""
        return self.redis_client.zremrangebyscore(self._index_key(user_id), "-inf", now - self.ttl)

    def get(self, user_id: int, query: str, options: Optional[SearchOptions] = None) -> Optional[SearchResponse]:
        """Get cached search response"""
        if not self.enabled:
            return None

        key = build_search_cache_key(query, options)
        try:
            data = self.redis_client.get(self._entry_key(user_id, key))
            if data is None:
                self.misses += 1
                logger.debug(f"Cache MISS: {user_id}:{key}")
                return None

            self.hits += 1
            logger.debug(f"Cache HIT: {user_id}:{key}")
            return SearchResponse.model_validate_json(data)
        except Exception as e:
            self.misses += 1
            logger.error(f"Cache GET error for {user_id}:{key}: {e}")
            return None

    def set(
        self,
        user_id: int,
        query: str,
        options: Optional[SearchOptions],
        result: SearchResponse,
        ttl: Optional[int] = None,
    ) -> Optional[str]:
        """Cache search response with TTL"""
        if not self.enabled:
            return None

        key = build_search_cache_key(query, options)
        ttl = ttl if ttl is not None else self.ttl
        try:
            now = time.time()
            index_key = self._index_key(user_id)
            self._prune_index(user_id, now)

            if (
                self.redis_client.zscore(index_key, key) is None
                and self.redis_client.zcard(index_key) >= self.max_entries_per_user
            ):
                oldest = self.redis_client.zrange(index_key, 0, 0)
                if oldest:
                    self.redis_client.delete(self._entry_key(user_id, oldest[0]))
                    self.redis_client.zrem(index_key, oldest[0])
                    self.evictions += 1
                    logger.debug(f"Cache EVICT: {user_id}:{oldest[0]}")

            self.redis_client.setex(self._entry_key(user_id, key), ttl, result.model_dump_json())
            self.redis_client.zadd(index_key, {key: now})
            index_ttl = max(ttl, self.ttl)
            if self.redis_client.ttl(index_key) < index_ttl:
                self.redis_client.expire(index_key, index_ttl)
            logger.debug(f"Cache SET: {user_id}:{key} (TTL: {ttl}s)")
            return key
        except Exception as e:
            logger.error(f"Cache SET error for {user_id}:{key}: {e}")
            return None

    def invalidate_user(self, user_id: int) -> int:
        """Invalidate all cached results for a user"""
        if not self.enabled:
            return 0

        try:
            index_key = self._index_key(user_id)
            keys = self.redis_client.zrange(index_key, 0, -1)
            if keys:
                self.redis_client.delete(*[self._entry_key(user_id, key) for key in keys])
            self.redis_client.delete(index_key)
            if keys:
                logger.info(f"Cache INVALIDATE: {len(keys)} entries for user {user_id}")
            return len(keys)
        except Exception as e:
            logger.error(f"Cache INVALIDATE error for user {user_id}: {e}")
            return 0

    def invalidate_query(self, user_id: int, query: str, options: Optional[SearchOptions] = None) -> bool:
        """Invalidate a single cached query"""
        if not self.enabled:
            return False

        key = build_search_cache_key(query, options)
        try:
            deleted = self.redis_client.delete(self._entry_key(user_id, key))
            self.redis_client.zrem(self._index_key(user_id), key)
            return bool(deleted)
        except Exception as e:
            logger.error(f"Cache DELETE error for {user_id}:{key}: {e}")
            return False

    def cleanup_expired(self) -> int:
        """Values expire in Redis; this only trims stale index members"""
        if not self.enabled:
            return 0

        try:
            now = time.time()
            removed = 0
            for index_key in self.redis_client.scan_iter(f"{self.config.SEARCH_INDEX_PREFIX}*"):
                removed += self.redis_client.zremrangebyscore(index_key, "-inf", now - self.ttl)
            return removed
        except Exception as e:
            logger.error(f"Cache cleanup error: {e}")
            return 0

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "backend": "redis",
            "enabled": self.enabled,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / total if total else 0.0,
        }

    def health_check(self) -> Dict[str, Any]:
        """Check cache health and return status"""
        if not self.enabled:
            return {"status": "disabled", "redis_available": False}

        try:
            self.redis_client.ping()
            info = self.redis_client.info()
            return {
                "status": "healthy",
                "redis_available": True,
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "unknown"),
            }
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return {"status": "error", "redis_available": False, "error": str(e)}

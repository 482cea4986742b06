"""
In-process search result cache
Per-user, TTL-bounded, size-bounded memo of full search responses
"""
import asyncio
import copy
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .config import CacheConfig
from ..search.config import SearchConfig
from ..search.models import SearchOptions

logger = logging.getLogger(__name__)


def build_search_cache_key(query: str, options: Optional[SearchOptions] = None) -> str:
    """
    Hash the normalized query and options

    Whitespace and case differences in the query, and default-equivalent
    option values, collapse to the same key.
    """
    options = options or SearchOptions()
    normalized = {
        "q": (query or "").strip().lower(),
        "p": options.page or SearchConfig.DEFAULT_PAGE,
        "pp": options.per_page or SearchConfig.DEFAULT_PER_PAGE,
        "icp": options.use_icp_scoring is not False,
    }
    digest = hashlib.sha256(json.dumps(normalized, sort_keys=True).encode()).hexdigest()
    return digest[:CacheConfig.KEY_LENGTH]


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float


class SearchResultCache:
    """Memoizes pipeline output per user; values are deep-copied in and out"""

    def __init__(
        self,
        ttl: Optional[int] = None,
        max_entries_per_user: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl if ttl is not None else CacheConfig.SEARCH_RESULT_TTL
        self.max_entries_per_user = max_entries_per_user or CacheConfig.SEARCH_RESULT_MAX_ENTRIES
        self.clock = clock
        self._entries: Dict[int, Dict[str, CacheEntry]] = {}
        self._sweeper: Optional[asyncio.Task] = None
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, user_id: int, query: str, options: Optional[SearchOptions] = None) -> Optional[Any]:
        """Get a deep copy of a cached result, or None"""
        key = build_search_cache_key(query, options)
        user_entries = self._entries.get(user_id)
        entry = user_entries.get(key) if user_entries else None

        if entry is None:
            self.misses += 1
            logger.debug(f"Cache MISS: {user_id}:{key}")
            return None

        if entry.expires_at <= self.clock():
            del user_entries[key]
            self.misses += 1
            logger.debug(f"Cache EXPIRED: {user_id}:{key}")
            return None

        self.hits += 1
        logger.debug(f"Cache HIT: {user_id}:{key}")
        return copy.deepcopy(entry.value)

    def set(
        self,
        user_id: int,
        query: str,
        options: Optional[SearchOptions],
        result: Any,
        ttl: Optional[int] = None,
    ) -> str:
        """Store a deep copy of a result; evicts the oldest entry when the user is at capacity"""
        key = build_search_cache_key(query, options)
        user_entries = self._entries.setdefault(user_id, {})

        if key not in user_entries and len(user_entries) >= self.max_entries_per_user:
            oldest_key = min(user_entries, key=lambda k: user_entries[k].created_at)
            del user_entries[oldest_key]
            self.evictions += 1
            logger.debug(f"Cache EVICT: {user_id}:{oldest_key}")

        now = self.clock()
        user_entries[key] = CacheEntry(
            value=copy.deepcopy(result),
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self.ttl),
        )
        logger.debug(f"Cache SET: {user_id}:{key} (TTL: {ttl or self.ttl}s)")
        return key

    def invalidate_user(self, user_id: int) -> int:
        """Drop every cached result for a user"""
        removed = len(self._entries.pop(user_id, {}))
        if removed:
            logger.info(f"Cache INVALIDATE: {removed} entries for user {user_id}")
        return removed

    def invalidate_query(self, user_id: int, query: str, options: Optional[SearchOptions] = None) -> bool:
        """Drop a single cached result"""
        key = build_search_cache_key(query, options)
        user_entries = self._entries.get(user_id)
        if not user_entries or key not in user_entries:
            return False
        del user_entries[key]
        if not user_entries:
            del self._entries[user_id]
        return True

    def cleanup_expired(self) -> int:
        """Remove expired entries and empty user maps"""
        now = self.clock()
        removed = 0
        for user_id in list(self._entries):
            user_entries = self._entries[user_id]
            for key in [k for k, entry in user_entries.items() if entry.expires_at <= now]:
                del user_entries[key]
                removed += 1
            if not user_entries:
                del self._entries[user_id]
        if removed:
            logger.info(f"Cache cleanup removed {removed} expired entries")
        return removed

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / total if total else 0.0,
            "users": len(self._entries),
            "entries": sum(len(entries) for entries in self._entries.values()),
        }

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    async def _sweep_forever(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.cleanup_expired()
            except Exception as e:
                logger.error(f"Cache cleanup error: {e}")

    def start_sweeper(self, interval: Optional[int] = None) -> asyncio.Task:
        """Start the periodic expiry sweep on the running event loop"""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(
                self._sweep_forever(interval or CacheConfig.SEARCH_CACHE_SWEEP_INTERVAL)
            )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

"""
Provider result cache
Short-lived memo of people search responses keyed by normalized filters
"""
import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

from .config import CacheConfig
from ..search.filters import FilterSet
from ..search.models import FetchResult

logger = logging.getLogger(__name__)


def build_provider_cache_key(
    filters: FilterSet,
    page: int,
    per_page: int,
    user_id: Optional[int] = None,
) -> str:
    """Hash of the sorted, lowercased filter values plus pagination"""
    normalized = {
        "u": user_id,
        "f": filters.to_cache_dict(),
        "p": page,
        "pp": per_page,
    }
    digest = hashlib.sha256(json.dumps(normalized, sort_keys=True).encode()).hexdigest()
    return digest[:CacheConfig.KEY_LENGTH]


class ProviderResultCache:
    """Bounded TTL cache for provider responses"""

    def __init__(
        self,
        ttl: Optional[int] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl if ttl is not None else CacheConfig.PROVIDER_RESULT_TTL
        self.max_entries = max_entries or CacheConfig.PROVIDER_RESULT_MAX_ENTRIES
        self.clock = clock
        # key -> (created_at, result); insertion order is creation order
        self._entries: "OrderedDict[str, Tuple[float, FetchResult]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[FetchResult]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        created_at, result = entry
        if self.clock() - created_at >= self.ttl:
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        logger.debug(f"Provider cache HIT: {key}")
        return result.model_copy(deep=True)

    def set(self, key: str, result: FetchResult) -> None:
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Provider cache EVICT: {evicted}")
        self._entries[key] = (self.clock(), result.model_copy(deep=True))

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total else 0.0,
            "entries": len(self._entries),
        }

    def clear(self) -> None:
        self._entries.clear()

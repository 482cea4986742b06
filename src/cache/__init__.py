"""
Cache module for the lead search API
Provides in-process and Redis-backed result caching with TTL and invalidation logic
"""

from .config import CacheConfig
from .search_cache import SearchResultCache, build_search_cache_key
from .provider_cache import ProviderResultCache, build_provider_cache_key
from .manager import RedisSearchResultCache
from .decorators import invalidate_search_cache_on_update

__all__ = [
    'CacheConfig',
    'SearchResultCache',
    'build_search_cache_key',
    'ProviderResultCache',
    'build_provider_cache_key',
    'RedisSearchResultCache',
    'invalidate_search_cache_on_update'
]

"""
Cache configuration settings
"""
import os

def get_redis_client():
    """Get Redis client instance, or None when Redis is not configured"""
    from ..database.connection import create_redis_client
    return create_redis_client()

class CacheConfig:
    """Configuration class for cache settings"""

    # Default TTL values (in seconds)
    DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL", "600"))  # 10 minutes
    SEARCH_RESULT_TTL = int(os.getenv("SEARCH_CACHE_TTL", "600"))  # 10 minutes
    LOW_CONFIDENCE_TTL = int(os.getenv("LOW_CONFIDENCE_CACHE_TTL", "300"))  # 5 minutes
    PROVIDER_RESULT_TTL = int(os.getenv("PROVIDER_CACHE_TTL", "900"))  # 15 minutes

    # Size bounds
    SEARCH_RESULT_MAX_ENTRIES = int(os.getenv("SEARCH_CACHE_MAX_ENTRIES", "100"))  # per user
    PROVIDER_RESULT_MAX_ENTRIES = int(os.getenv("PROVIDER_CACHE_MAX_ENTRIES", "100"))

    # Background sweep
    SEARCH_CACHE_SWEEP_INTERVAL = int(os.getenv("SEARCH_CACHE_SWEEP_INTERVAL", "60"))  # 1 minute

    # Cache key settings
    KEY_LENGTH = 24
    SEARCH_PREFIX = "search:"
    SEARCH_INDEX_PREFIX = "search_index:"

    @classmethod
    def get_ttl_for_key_type(cls, key_type: str) -> int:
        """Get TTL based on key type"""
        ttl_map = {
            "search": cls.SEARCH_RESULT_TTL,
            "low_confidence": cls.LOW_CONFIDENCE_TTL,
            "provider": cls.PROVIDER_RESULT_TTL,
        }
        return ttl_map.get(key_type, cls.DEFAULT_TTL)

    @classmethod
    def get_key_prefix(cls, key_type: str) -> str:
        """Get key prefix based on type"""
        prefix_map = {
            "search": cls.SEARCH_PREFIX,
            "search_index": cls.SEARCH_INDEX_PREFIX,
        }
        return prefix_map.get(key_type, "")

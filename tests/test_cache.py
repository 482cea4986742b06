"""
Unit tests for search result and provider caches
"""
import pytest
from unittest.mock import Mock

from src.cache.config import CacheConfig
from src.cache.decorators import invalidate_search_cache_on_update
from src.cache.manager import RedisSearchResultCache
from src.cache.provider_cache import ProviderResultCache, build_provider_cache_key
from src.cache.search_cache import SearchResultCache, build_search_cache_key
from src.search.filters import FilterSet
from src.search.models import SearchOptions, SearchResponse

from helpers import make_candidate, make_fetch_result, make_response

class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

class TestCacheConfig:
    """Test cache configuration"""

    def test_get_ttl_for_key_type(self):
        assert CacheConfig.get_ttl_for_key_type("search") == CacheConfig.SEARCH_RESULT_TTL
        assert CacheConfig.get_ttl_for_key_type("low_confidence") == CacheConfig.LOW_CONFIDENCE_TTL
        assert CacheConfig.get_ttl_for_key_type("unknown") == CacheConfig.DEFAULT_TTL

    def test_get_key_prefix(self):
        assert CacheConfig.get_key_prefix("search") == "search:"
        assert CacheConfig.get_key_prefix("search_index") == "search_index:"
        assert CacheConfig.get_key_prefix("unknown") == ""

class TestSearchCacheKey:
    """Test query normalization for cache keys"""

    def test_case_and_whitespace_collapse(self):
        assert build_search_cache_key("VP of Sales in Austin") == build_search_cache_key("  vp of sales in austin ")

    def test_default_options_are_equivalent(self):
        explicit = SearchOptions(page=1, per_page=25, use_icp_scoring=True)
        assert build_search_cache_key("cfo", explicit) == build_search_cache_key("cfo", None)

    def test_options_change_key(self):
        assert build_search_cache_key("cfo", SearchOptions(page=2)) != build_search_cache_key("cfo")
        assert build_search_cache_key("cfo", SearchOptions(use_icp_scoring=False)) != build_search_cache_key("cfo")

    def test_key_length(self):
        assert len(build_search_cache_key("cfo")) == CacheConfig.KEY_LENGTH

class TestSearchResultCache:
    """Test the in-process search result cache"""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return SearchResultCache(ttl=600, max_entries_per_user=2, clock=clock)

    def test_get_after_set(self, cache):
        response = make_response()
        cache.set(1, "VP of Sales in Austin", None, response)

        cached = cache.get(1, "vp of sales in austin")

        assert cached == response
        assert cache.stats()["hits"] == 1

    def test_users_are_isolated(self, cache):
        cache.set(1, "cfo", None, make_response("cfo"))
        cache.set(2, "cto", None, make_response("cto"))

        assert cache.get(2, "cfo") is None
        assert cache.get(1, "cto") is None
        assert cache.get(1, "cfo").query == "cfo"

    def test_values_are_copied(self, cache):
        response = make_response(leads=[])
        cache.set(1, "cfo", None, response)
        response.query = "changed"

        first = cache.get(1, "cfo")
        first.leads.append(make_candidate(9))

        second = cache.get(1, "cfo")
        assert second.query != "changed"
        assert second.leads == []

    def test_entries_expire(self, cache, clock):
        cache.set(1, "cfo", None, make_response())
        clock.advance(599)
        assert cache.get(1, "cfo") is not None

        clock.advance(1)
        assert cache.get(1, "cfo") is None

    def test_per_entry_ttl(self, cache, clock):
        cache.set(1, "cfo", None, make_response(), ttl=300)
        clock.advance(301)
        assert cache.get(1, "cfo") is None

    def test_oldest_entry_evicted_at_capacity(self, cache, clock):
        cache.set(1, "first", None, make_response("first"))
        clock.advance(1)
        cache.set(1, "second", None, make_response("second"))
        clock.advance(1)
        cache.set(1, "third", None, make_response("third"))

        assert cache.get(1, "first") is None
        assert cache.get(1, "second") is not None
        assert cache.get(1, "third") is not None
        assert cache.stats()["evictions"] == 1

    def test_capacity_is_per_user(self, cache):
        cache.set(1, "a", None, make_response("a"))
        cache.set(1, "b", None, make_response("b"))
        cache.set(2, "a", None, make_response("a"))

        assert cache.stats()["evictions"] == 0
        assert cache.stats()["entries"] == 3

    def test_invalidate_user(self, cache):
        cache.set(1, "a", None, make_response("a"))
        cache.set(1, "b", None, make_response("b"))
        cache.set(2, "a", None, make_response("a"))

        assert cache.invalidate_user(1) == 2
        assert cache.get(1, "a") is None
        assert cache.get(2, "a") is not None
        assert cache.invalidate_user(1) == 0

    def test_invalidate_query(self, cache):
        cache.set(1, "a", None, make_response("a"))

        assert cache.invalidate_query(1, " A ") is True
        assert cache.invalidate_query(1, "a") is False
        assert cache.stats()["users"] == 0

    def test_cleanup_expired(self, cache, clock):
        cache.set(1, "a", None, make_response("a"), ttl=100)
        cache.set(2, "b", None, make_response("b"))
        clock.advance(200)

        assert cache.cleanup_expired() == 1
        assert cache.stats()["users"] == 1

    def test_stats_hit_rate(self, cache):
        cache.set(1, "a", None, make_response("a"))
        cache.get(1, "a")
        cache.get(1, "missing")

        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    def test_clear(self, cache):
        cache.set(1, "a", None, make_response("a"))
        cache.get(1, "a")
        cache.clear()

        assert cache.stats() == {
            "hits": 0, "misses": 0, "evictions": 0, "hit_rate": 0.0, "users": 0, "entries": 0
        }

class TestRedisSearchResultCache:
    """Test the Redis-backed search result cache"""

    @pytest.fixture
    def mock_redis(self):
        """Mock Redis client"""
        mock_client = Mock()
        mock_client.ping.return_value = True
        mock_client.get.return_value = None
        mock_client.setex.return_value = True
        mock_client.delete.return_value = 1
        mock_client.zremrangebyscore.return_value = 0
        mock_client.zscore.return_value = None
        mock_client.zcard.return_value = 0
        mock_client.zrange.return_value = []
        mock_client.ttl.return_value = -2
        mock_client.scan_iter.return_value = []
        mock_client.info.return_value = {"connected_clients": 1, "used_memory_human": "1M"}
        return mock_client

    @pytest.fixture
    def cache(self, mock_redis):
        return RedisSearchResultCache(mock_redis, ttl=600, max_entries_per_user=2)

    def test_disabled_without_client(self):
        cache = RedisSearchResultCache(None)

        assert cache.enabled is False
        assert cache.get(1, "cfo") is None
        assert cache.set(1, "cfo", None, make_response()) is None
        assert cache.invalidate_user(1) == 0
        assert cache.health_check()["status"] == "disabled"

    def test_set_writes_value_and_index(self, cache, mock_redis):
        key = cache.set(1, "cfo", None, make_response("cfo"))

        mock_redis.setex.assert_called_once()
        entry_key, ttl, _ = mock_redis.setex.call_args[0]
        assert entry_key == f"search:1:{key}"
        assert ttl == 600
        mock_redis.zadd.assert_called_once()
        assert mock_redis.zadd.call_args[0][0] == "search_index:1"

    def test_set_uses_custom_ttl(self, cache, mock_redis):
        cache.set(1, "cfo", None, make_response("cfo"), ttl=300)
        assert mock_redis.setex.call_args[0][1] == 300

    def test_short_ttl_entry_does_not_shorten_index(self, cache, mock_redis):
        cache.set(1, "vp of sales", None, make_response("vp of sales"))
        mock_redis.expire.assert_called_once_with("search_index:1", 600)

        mock_redis.ttl.return_value = 600
        cache.set(1, "people at stripe", None, make_response("people at stripe"), ttl=2)

        assert mock_redis.setex.call_args[0][1] == 2
        mock_redis.expire.assert_called_once_with("search_index:1", 600)

    def test_short_ttl_entry_on_new_index_uses_default_ttl(self, cache, mock_redis):
        cache.set(1, "people at stripe", None, make_response("people at stripe"), ttl=300)
        mock_redis.expire.assert_called_once_with("search_index:1", 600)

    def test_set_evicts_oldest_at_capacity(self, cache, mock_redis):
        mock_redis.zcard.return_value = 2
        mock_redis.zrange.return_value = ["oldkey"]

        cache.set(1, "cfo", None, make_response("cfo"))

        mock_redis.delete.assert_any_call("search:1:oldkey")
        mock_redis.zrem.assert_called_once_with("search_index:1", "oldkey")
        assert cache.stats()["evictions"] == 1

    def test_get_hit_decodes_response(self, cache, mock_redis):
        response = make_response("cfo")
        mock_redis.get.return_value = response.model_dump_json()

        cached = cache.get(1, "cfo")

        assert isinstance(cached, SearchResponse)
        assert cached.query == "cfo"
        assert cache.stats()["hits"] == 1

    def test_get_error_counts_as_miss(self, cache, mock_redis):
        mock_redis.get.side_effect = Exception("Redis error")

        assert cache.get(1, "cfo") is None
        assert cache.stats()["misses"] == 1

    def test_invalidate_user_deletes_indexed_entries(self, cache, mock_redis):
        mock_redis.zrange.return_value = ["k1", "k2"]

        assert cache.invalidate_user(7) == 2
        mock_redis.delete.assert_any_call("search:7:k1", "search:7:k2")
        mock_redis.delete.assert_any_call("search_index:7")

    def test_health_check(self, cache):
        health = cache.health_check()
        assert health["status"] == "healthy"
        assert health["connected_clients"] == 1

class TestProviderResultCache:
    """Test the provider response cache"""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    def test_key_ignores_value_order_and_case(self):
        a = FilterSet(job_titles=["CFO", "Controller"], locations=["Texas"])
        b = FilterSet(job_titles=["controller", "cfo"], locations=["texas"])

        assert build_provider_cache_key(a, 1, 25, 1) == build_provider_cache_key(b, 1, 25, 1)
        assert build_provider_cache_key(a, 1, 25, 1) != build_provider_cache_key(a, 2, 25, 1)
        assert build_provider_cache_key(a, 1, 25, 1) != build_provider_cache_key(a, 1, 25, 2)

    def test_get_after_set_and_expiry(self, clock):
        cache = ProviderResultCache(ttl=900, clock=clock)
        cache.set("k", make_fetch_result(3))

        assert len(cache.get("k").candidates) == 3
        clock.advance(900)
        assert cache.get("k") is None
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    def test_bounded_size_evicts_oldest(self, clock):
        cache = ProviderResultCache(ttl=900, max_entries=2, clock=clock)
        cache.set("a", make_fetch_result(1))
        cache.set("b", make_fetch_result(1))
        cache.set("c", make_fetch_result(1))

        assert cache.get("a") is None
        assert cache.get("c") is not None
        assert cache.stats()["entries"] == 2

class TestInvalidationDecorator:
    """Test cache invalidation on profile updates"""

    class ProfileService:
        def __init__(self, search_cache):
            self.search_cache = search_cache

        @invalidate_search_cache_on_update(user_id_arg="user_id")
        def recalculate(self, user_id):
            return f"recalculated {user_id}"

    def test_invalidates_after_call(self):
        cache = SearchResultCache()
        cache.set(5, "cfo", None, make_response("cfo"))
        service = self.ProfileService(cache)

        assert service.recalculate(5) == "recalculated 5"
        assert cache.get(5, "cfo") is None

    def test_keyword_argument(self):
        cache = Mock()
        self.ProfileService(cache).recalculate(user_id=3)
        cache.invalidate_user.assert_called_once_with(3)

    def test_no_cache_configured(self):
        assert self.ProfileService(None).recalculate(1) == "recalculated 1"

    def test_invalidation_error_does_not_fail_call(self):
        cache = Mock()
        cache.invalidate_user.side_effect = Exception("boom")
        assert self.ProfileService(cache).recalculate(1) == "recalculated 1"

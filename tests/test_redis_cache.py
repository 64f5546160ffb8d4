"""
Redis Cache Tests - Thesis Defense Platform
tests/test_redis_cache.py

Tests for Redis caching functionality including cache hits,
misses, invalidation, and graceful degradation.
"""
import pytest
import redis
from unittest.mock import patch, MagicMock
from pydantic import BaseModel

from thesis_app.services.redis_cache import RedisCache
from thesis_app.services.cache import (
    get_cache,
    get_or_load,
    invalidate_rankings,
    invalidate_template,
    rankings_cache_key,
    reset_cache,
    template_cache_key,
    TTL_RANKINGS,
    TTL_RUBRIC_TEMPLATE,
)
from thesis_app.models.ranking import GroupRankingListResponse


class MockModel(BaseModel):
    """Mock Pydantic model for testing."""
    id: str
    name: str


@pytest.fixture
def redis_client():
    with patch("thesis_app.services.redis_cache.redis.Redis") as mock_redis:
        mock_client = MagicMock()
        mock_redis.from_url.return_value = mock_client
        yield mock_client


class TestRedisCache:
    """Tests for the RedisCache class."""

    def test_redis_cache_init(self):
        """Test RedisCache initialization from REDIS_URL."""
        with patch("thesis_app.services.redis_cache.redis.Redis") as mock_redis:
            cache = RedisCache()
            mock_redis.from_url.assert_called_once()
            assert mock_redis.from_url.call_args.kwargs["decode_responses"] is True
            assert cache.client is mock_redis.from_url.return_value

    def test_cache_set_and_get(self, redis_client):
        """Test setting and getting cached values."""
        cache = RedisCache()
        model = MockModel(id="123", name="Test")

        cache.set("test:key", model, 300)
        redis_client.setex.assert_called_once_with("test:key", 300, model.model_dump_json())

        redis_client.get.return_value = model.model_dump_json()
        result = cache.get("test:key", MockModel)
        assert result == model

    def test_cache_get_miss(self, redis_client):
        """Test cache miss returns None."""
        redis_client.get.return_value = None
        assert RedisCache().get("nonexistent:key", MockModel) is None

    def test_cache_delete(self, redis_client):
        RedisCache().delete("test:key")
        redis_client.delete.assert_called_once_with("test:key")

    def test_cache_delete_pattern(self, redis_client):
        """Test deleting cache entries by pattern."""
        redis_client.scan_iter.return_value = ["rankings:group:all", "rankings:student:5"]
        RedisCache().delete_pattern("rankings:*")

        redis_client.scan_iter.assert_called_once_with(match="rankings:*")
        assert redis_client.delete.call_count == 2


class TestCacheSingleton:
    """Tests for get_cache graceful degradation."""

    def setup_method(self):
        reset_cache()

    def teardown_method(self):
        reset_cache()

    def test_get_cache_returns_instance(self):
        with patch("thesis_app.services.cache.RedisCache") as mock_cls:
            first = get_cache()
            second = get_cache()
            assert first is mock_cls.return_value
            assert first is second
            mock_cls.assert_called_once()

    def test_get_cache_unreachable_redis(self):
        with patch("thesis_app.services.cache.RedisCache") as mock_cls:
            mock_cls.return_value.client.ping.side_effect = redis.ConnectionError("refused")
            assert get_cache() is None

    def test_get_cache_retries_after_failure(self):
        with patch("thesis_app.services.cache.RedisCache") as mock_cls:
            mock_cls.return_value.client.ping.side_effect = [redis.ConnectionError("refused"), True]
            assert get_cache() is None
            assert get_cache() is mock_cls.return_value


class TestCacheHelpers:

    def test_ttl_from_settings(self):
        assert TTL_RUBRIC_TEMPLATE == 3600
        assert TTL_RANKINGS == 120

    def test_keys(self):
        assert template_cache_key("ABC-1") == "rubric_template:abc-1"
        assert rankings_cache_key("group", None) == "rankings:group:all"
        assert rankings_cache_key("student", 5) == "rankings:student:5"

    def test_get_or_load_without_redis(self):
        loader = MagicMock(return_value=MockModel(id="1", name="fresh"))
        result = get_or_load("k", MockModel, 60, loader)
        assert result.name == "fresh"
        loader.assert_called_once()

    def test_get_or_load_hit(self):
        cache = MagicMock()
        cache.get.return_value = MockModel(id="1", name="cached")
        loader = MagicMock()
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            result = get_or_load("k", MockModel, 60, loader)
        assert result.name == "cached"
        loader.assert_not_called()

    def test_get_or_load_miss_stores(self):
        cache = MagicMock()
        cache.get.return_value = None
        fresh = MockModel(id="1", name="fresh")
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            get_or_load("k", MockModel, 60, lambda: fresh)
        cache.set.assert_called_once_with("k", fresh, 60)

    def test_get_or_load_none_not_stored(self):
        cache = MagicMock()
        cache.get.return_value = None
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            assert get_or_load("k", MockModel, 60, lambda: None) is None
        cache.set.assert_not_called()

    def test_get_or_load_survives_read_error(self):
        cache = MagicMock()
        cache.get.side_effect = redis.RedisError("boom")
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            result = get_or_load("k", MockModel, 60, lambda: MockModel(id="1", name="fresh"))
        assert result.name == "fresh"

    def test_invalidate_template_drops_rankings(self):
        cache = MagicMock()
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            invalidate_template("T1")
        cache.delete.assert_called_once_with("rubric_template:t1")
        cache.delete_pattern.assert_called_once_with("rankings:*")

    def test_invalidate_rankings_swallows_redis_errors(self):
        cache = MagicMock()
        cache.delete_pattern.side_effect = redis.RedisError("down")
        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            invalidate_rankings()


class TestRankingsCache:

    def test_cached_leaderboard_skips_repositories(self, ranking_service, store):
        cached = GroupRankingListResponse(items=[], total=0)
        cache = MagicMock()
        cache.get.return_value = cached
        store.evaluations.list_by_statuses = MagicMock()

        with patch("thesis_app.services.cache.get_cache", return_value=cache):
            assert ranking_service.group_rankings() is cached

        cache.get.assert_called_once_with("rankings:group:all", GroupRankingListResponse)
        store.evaluations.list_by_statuses.assert_not_called()

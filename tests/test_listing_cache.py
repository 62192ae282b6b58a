"""Tests for ListingCache."""

from unittest.mock import MagicMock

import pytest

from catalog.services.listing_cache import ListingCache


@pytest.fixture
def store():
    """MagicMock Redis wrapper backed by a dict, so generations and pages interact."""
    data = {}
    client = MagicMock()
    client.get_json.side_effect = data.get
    client.set_json.side_effect = lambda key, value, ttl: data.__setitem__(key, value)
    client.get_counter.side_effect = lambda key: data.get(key, 0)

    def incr(key):
        data[key] = data.get(key, 0) + 1
        return data[key]

    def delete_pattern(pattern):
        doomed = [k for k in data if k.startswith(pattern.rstrip("*"))]
        for key in doomed:
            del data[key]
        return len(doomed)

    client.incr.side_effect = incr
    client.delete_pattern.side_effect = delete_pattern
    client.data = data
    return client


class TestListingCache:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get_counter.return_value = 0
        return client

    @pytest.fixture
    def cache(self, client):
        return ListingCache(client=client, ttl=60, enabled=True)

    def test_key_is_stable_for_equal_params(self, cache):
        first = cache.generate_key({"filters": {"a": 1, "b": 2}, "page": 1})
        second = cache.generate_key({"page": 1, "filters": {"b": 2, "a": 1}})

        assert first == second
        assert first.startswith("products:list:")
        assert cache.generate_key({"page": 1}, 1) != cache.generate_key({"page": 1}, 2)

    def test_hit_and_miss_counters(self, cache, client):
        client.get_json.side_effect = [None, {"data": []}]

        assert cache.get({"page": 1})[1] is None
        assert cache.get({"page": 1})[1] == {"data": []}
        assert cache.get_cache_hit_rate() == 0.5

    def test_set_uses_ttl(self, cache, client):
        key, _ = cache.get({"page": 1})
        cache.set(key, [1, 2])

        stored_key, value, ttl = client.set_json.call_args.args
        assert stored_key == key
        assert value == [1, 2]
        assert ttl == 60

    def test_invalidate_bumps_generation_and_drops_pages(self, cache, client):
        cache.invalidate()

        client.incr.assert_called_once_with(ListingCache.generation_key)
        client.delete_pattern.assert_called_once_with("products:*")

    def test_page_read_before_a_write_is_never_served_after_it(self, store):
        cache = ListingCache(client=store, enabled=True)

        # Reader misses and goes to the database...
        key, cached = cache.get({"page": 1})
        assert cached is None
        # ...a writer commits and invalidates meanwhile...
        cache.invalidate()
        # ...then the reader stores its now-stale page
        cache.set(key, ["stale"])

        assert cache.get({"page": 1})[1] is None

    def test_generation_survives_invalidation(self, store):
        cache = ListingCache(client=store, enabled=True)
        cache.invalidate()
        cache.invalidate()

        assert store.data[ListingCache.generation_key] == 2

    def test_redis_errors_are_swallowed(self, cache, client):
        client.get_counter.side_effect = ConnectionError("redis down")
        client.set_json.side_effect = ConnectionError("redis down")
        client.incr.side_effect = ConnectionError("redis down")

        assert cache.get({"page": 1}) == (None, None)
        cache.set("products:list:0:abc", [])
        cache.invalidate()

    def test_disabled_cache_never_touches_redis(self, client):
        cache = ListingCache(client=client, enabled=False)

        assert cache.get({}) == (None, None)
        cache.set("products:list:0:abc", [])
        cache.invalidate()
        client.get_json.assert_not_called()
        client.set_json.assert_not_called()
        client.incr.assert_not_called()

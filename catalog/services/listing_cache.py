"""Redis cache for public product listing pages.

Page keys embed a generation number that every catalog write bumps. A reader
fixes the generation before it queries the database and stores its page under
that generation, so a page computed before a write can never be served after
it: the write has already moved readers on to the next generation.
"""

import hashlib
import json
import logging
from typing import Any

from catalog.config import CACHE_TTL, PRODUCT_CACHE_ENABLED
from catalog.db.redis_client import redis_client

logger = logging.getLogger(__name__)


class ListingCache:
    key_prefix = "products:"
    # Outside key_prefix so invalidation never resets it
    generation_key = "catalog:listing-generation"

    def __init__(self, client=None, ttl: int = CACHE_TTL, enabled: bool = PRODUCT_CACHE_ENABLED):
        self.client = client or redis_client
        self.ttl = ttl
        self.enabled = enabled
        self.cache_hit_count = 0
        self.cache_miss_count = 0

    def generate_key(self, params: dict[str, Any], generation: int = 0) -> str:
        """Generate a cache key for listing parameters."""
        params_str = json.dumps(params, sort_keys=True, default=str)
        return f"{self.key_prefix}list:{generation}:{hashlib.md5(params_str.encode()).hexdigest()}"

    def get_cache_hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total_requests = self.cache_hit_count + self.cache_miss_count
        if total_requests == 0:
            return 0.0
        return self.cache_hit_count / total_requests

    def get(self, params: dict[str, Any]) -> tuple[str | None, Any | None]:
        """
        Look up a listing page.

        Returns:
            ``(key, cached)``. Pass ``key`` to :meth:`set` after a miss; it is
            None when the cache is disabled or unreachable.
        """
        if not self.enabled:
            return None, None
        try:
            key = self.generate_key(params, self.client.get_counter(self.generation_key))
            cached = self.client.get_json(key)
        except Exception as e:
            logger.error(f"Error reading listing cache: {e}")
            return None, None

        if cached is None:
            self.cache_miss_count += 1
        else:
            self.cache_hit_count += 1
        return key, cached

    def set(self, key: str | None, value: Any) -> None:
        if not self.enabled or key is None:
            return
        try:
            self.client.set_json(key, value, self.ttl)
        except Exception as e:
            logger.error(f"Error writing listing cache: {e}")

    def invalidate(self) -> None:
        """Retire every cached listing page. Called after any catalog write."""
        if not self.enabled:
            return
        try:
            self.client.incr(self.generation_key)
            deleted = self.client.delete_pattern(f"{self.key_prefix}*")
            if deleted:
                logger.info(f"Cleared {deleted} listing cache entries")
        except Exception as e:
            logger.error(f"Error clearing listing cache: {e}")


# Singleton instance
listing_cache = ListingCache()

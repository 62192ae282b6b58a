"""Redis connection and utilities."""

import json
from typing import Any

import redis

from catalog.config import CACHE_TTL, REDIS_CONFIG


class RedisClient:
    def __init__(self, config: dict | None = None):
        self.client = redis.Redis(**(config or REDIS_CONFIG))

    def get_json(self, key: str) -> Any | None:
        """Get JSON data from Redis."""
        data = self.client.get(key)
        return json.loads(data.decode("utf-8")) if data else None

    def set_json(self, key: str, value: Any, ttl: int = CACHE_TTL) -> bool:
        """Set JSON data in Redis with TTL."""
        return self.client.setex(key, ttl, json.dumps(value, default=str))

    def get_counter(self, key: str) -> int:
        """Read an integer counter; a missing key counts as 0."""
        value = self.client.get(key)
        return int(value) if value else 0

    def incr(self, key: str) -> int:
        return self.client.incr(key)

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the number deleted."""
        keys = list(self.client.scan_iter(match=pattern))
        if not keys:
            return 0
        return self.client.delete(*keys)

    def ping(self) -> bool:
        return bool(self.client.ping())


# Singleton instance
redis_client = RedisClient()

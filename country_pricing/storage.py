"""Redis-backed key/value store (graceful fallback to in-memory)."""
import logging
from typing import Optional

log = logging.getLogger(__name__)


class KeyValueStore:
    """String key/value store shared by the cache and the applied pricing state."""

    def __init__(self, redis_url: str = "", prefix: str = "country_pricing:"):
        self.prefix = prefix
        self.redis = None
        self._memory: dict[str, str] = {}
        if not redis_url:
            return
        try:
            import redis as redis_lib
            self.redis = redis_lib.from_url(redis_url, decode_responses=True)
            self.redis.ping()
        except Exception as e:
            log.warning("Redis unavailable at %s, using in-memory store: %s", redis_url, e)
            self.redis = None

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        if self.redis:
            return self.redis.get(self._key(key))
        return self._memory.get(self._key(key))

    def set(self, key: str, value: str):
        if self.redis:
            self.redis.set(self._key(key), value)
        else:
            self._memory[self._key(key)] = value

    def delete(self, *keys: str):
        if not keys:
            return
        if self.redis:
            self.redis.delete(*[self._key(k) for k in keys])
        else:
            for k in keys:
                self._memory.pop(self._key(k), None)

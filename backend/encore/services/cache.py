"""Short-lived key/value storage for search results, import drafts and playlists.

Redis in deployment. When no Redis URL is configured (local development,
tests) an in-process backend with the same expiry semantics is used.
"""
import json
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import redis

from encore.config import get_settings

logger = logging.getLogger(__name__)


class CacheBackend:
    """Operations the catalog needs from its cache."""

    def get_json(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def zadd(self, key: str, member: str, score: float) -> bool:
        """Add member if absent. Returns True when it was added."""
        raise NotImplementedError

    def zrem(self, key: str, member: str) -> bool:
        raise NotImplementedError

    def zrange(self, key: str) -> List[Tuple[str, float]]:
        """All members with scores, lowest score first."""
        raise NotImplementedError

    def zcard(self, key: str) -> int:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class RedisCache(CacheBackend):
    """Redis-backed cache."""

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.from_url(url, decode_responses=True))

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        self.client.set(key, json.dumps(value, default=str), ex=ttl)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))

    def zadd(self, key: str, member: str, score: float) -> bool:
        return bool(self.client.zadd(key, {member: score}, nx=True))

    def zrem(self, key: str, member: str) -> bool:
        return bool(self.client.zrem(key, member))

    def zrange(self, key: str) -> List[Tuple[str, float]]:
        return [(m, float(s)) for m, s in self.client.zrange(key, 0, -1, withscores=True)]

    def zcard(self, key: str) -> int:
        return int(self.client.zcard(key))

    def ping(self) -> bool:
        return bool(self.client.ping())


class MemoryCache(CacheBackend):
    """In-process cache with per-key expiry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._values: Dict[str, Tuple[str, Optional[float]]] = {}
        self._sets: Dict[str, Dict[str, float]] = {}

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and time.monotonic() >= expires_at

    def get_json(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if self._expired(expires_at):
                del self._values[key]
                return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires_at = time.monotonic() + ttl if ttl else None
        raw = json.dumps(value, default=str)
        with self._lock:
            self._values[key] = (raw, expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._values.pop(key, None) is not None
            removed = self._sets.pop(key, None) is not None or removed
        return removed

    def zadd(self, key: str, member: str, score: float) -> bool:
        with self._lock:
            members = self._sets.setdefault(key, {})
            if member in members:
                return False
            members[member] = score
            return True

    def zrem(self, key: str, member: str) -> bool:
        with self._lock:
            members = self._sets.get(key, {})
            return members.pop(member, None) is not None

    def zrange(self, key: str) -> List[Tuple[str, float]]:
        with self._lock:
            members = list(self._sets.get(key, {}).items())
        return sorted(members, key=lambda item: item[1])

    def zcard(self, key: str) -> int:
        with self._lock:
            return len(self._sets.get(key, {}))


_cache: Optional[CacheBackend] = None


def get_cache() -> CacheBackend:
    """Get the shared cache backend for the configured Redis URL."""
    global _cache
    if _cache is None:
        redis_url = get_settings().redis_url
        if redis_url:
            _cache = RedisCache.from_url(redis_url)
        else:
            logger.info("REDIS_URL not set, using in-process cache")
            _cache = MemoryCache()
    return _cache


def reset_cache() -> None:
    """Drop the shared backend (used by tests)."""
    global _cache
    _cache = None

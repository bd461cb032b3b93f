# liftlog/cache/store.py
"""
Key/value cache backends.

Every backend failure surfaces as `CacheError`; callers decide whether to
swallow it. Deleting absent keys is a no-op in every backend.
"""
from __future__ import annotations

import fnmatch
import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

import redis

from liftlog.errors import CacheError

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Interface the services depend on."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]: ...

    @abstractmethod
    def set(self, key: str, value: bytes | str, ttl: timedelta) -> None: ...

    @abstractmethod
    def delete(self, *keys: str) -> None: ...

    @abstractmethod
    def delete_pattern(self, pattern: str) -> None: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def ping(self) -> bool: ...


class RedisCacheStore(CacheStore):
    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheStore":
        # bytes in, bytes out: payloads are JSON documents we decode ourselves
        return cls(redis.from_url(url, decode_responses=False))

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"get {key}: {e}") from e

    def set(self, key: str, value: bytes | str, ttl: timedelta) -> None:
        try:
            self.client.set(key, value, ex=ttl)
        except redis.RedisError as e:
            raise CacheError(f"set {key}: {e}") from e

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            self.client.delete(*keys)
        except redis.RedisError as e:
            raise CacheError(f"delete {keys}: {e}") from e

    def delete_pattern(self, pattern: str) -> None:
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as e:
            raise CacheError(f"delete_pattern {pattern}: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return self.client.exists(key) > 0
        except redis.RedisError as e:
            raise CacheError(f"exists {key}: {e}") from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            raise CacheError(f"ping: {e}") from e


class MemoryCacheStore(CacheStore):
    """In-process backend for local runs and tests. Expiry is checked lazily on access."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> Optional[bytes]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._live(key)

    def set(self, key: str, value: bytes | str, ttl: timedelta) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        with self._lock:
            self._data[key] = (value, self._clock() + ttl.total_seconds())

    def delete(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def delete_pattern(self, pattern: str) -> None:
        with self._lock:
            for key in [k for k in self._data if fnmatch.fnmatchcase(k, pattern)]:
                del self._data[key]

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left for `key`, None when absent."""
        with self._lock:
            if self._live(key) is None:
                return None
            return self._data[key][1] - self._clock()

    def ping(self) -> bool:
        return True


def build_cache_store(settings) -> CacheStore:
    if settings.CACHE_BACKEND == "memory":
        logger.info("Using in-memory cache backend")
        return MemoryCacheStore()
    logger.info("Using redis cache backend")
    return RedisCacheStore.from_url(settings.REDIS_URL)

# liftlog/services/cache_aside.py
"""
Best-effort cache access shared by the services.

Cache failures never reach the caller: a failed read is a miss, a failed
write or delete is logged and dropped. The store is always written after the
persistence write it mirrors has committed.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from liftlog.cache.store import CacheStore
from liftlog.errors import CacheError

logger = logging.getLogger(__name__)


class CacheAside:
    def __init__(self, cache: CacheStore):
        self.cache = cache

    def cache_load(self, key: str, adapter: TypeAdapter) -> Optional[Any]:
        try:
            raw = self.cache.get(key)
        except CacheError as e:
            logger.warning("cache read failed, falling back to store: %s", e)
            return None
        if raw is None:
            logger.debug("Cache MISS: %s", key)
            return None
        try:
            value = adapter.validate_json(raw)
        except ValidationError:
            logger.warning("undecodable cache entry %s, treating as miss", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return value

    def cache_store(self, key: str, adapter: TypeAdapter, value: Any, ttl: timedelta) -> None:
        try:
            self.cache.set(key, adapter.dump_json(value), ttl)
        except CacheError as e:
            logger.warning("cache write failed for %s: %s", key, e)

    def cache_invalidate(self, *keys: str) -> None:
        try:
            self.cache.delete(*keys)
        except CacheError as e:
            logger.warning("cache invalidation failed for %s: %s", keys, e)

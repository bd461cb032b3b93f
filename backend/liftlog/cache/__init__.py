from liftlog.cache.store import CacheStore, MemoryCacheStore, RedisCacheStore, build_cache_store

__all__ = ["CacheStore", "MemoryCacheStore", "RedisCacheStore", "build_cache_store"]

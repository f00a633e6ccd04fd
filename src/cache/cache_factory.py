# src/cache/cache_factory.py — v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path

from medileaf.cache.base_cache_store import BaseCacheStore
from medileaf.config.settings import Settings

_DEFAULT_CACHE_ROOT = "~/.medileaf/cache"


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the SQLite backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "sqlite" if settings is None else settings.cache_backend
    cache_root = Path(
        _DEFAULT_CACHE_ROOT if settings is None else settings.cache_root
    ).expanduser()

    if backend == "memory":
        from medileaf.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from medileaf.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from medileaf.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=cache_root / "summary_cache.db")

    if backend == "redis":
        from medileaf.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")

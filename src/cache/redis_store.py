# src/cache/redis_store.py — v1
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable when several processes share one summary cache.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from medileaf.cache.base_cache_store import BaseCacheStore
from medileaf.cache.models import SummaryCacheEntry

logger = logging.getLogger(__name__)

_KEY_PREFIX = "medileaf:summary:"
_INDEX_KEY = "medileaf:summary:__index__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed summary cache."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def get(
        self, document_id: str, section_number: int
    ) -> SummaryCacheEntry | None:
        return self._load(_redis_key(document_id, section_number))

    async def put(self, entry: SummaryCacheEntry) -> None:
        key = _redis_key(entry.document_id, entry.section_number)
        self._client.set(key, entry.model_dump_json())
        # The index set backs list/scan operations
        self._client.sadd(_INDEX_KEY, key)

    async def delete_section(self, document_id: str, section_number: int) -> None:
        self._remove(_redis_key(document_id, section_number))

    async def delete_document(self, document_id: str) -> None:
        for key, entry in self._scan():
            if entry.document_id == document_id:
                self._remove(key)

    async def delete_expired(self, cutoff: datetime) -> int:
        removed = 0
        for key, entry in self._scan():
            if entry.created_at < cutoff:
                self._remove(key)
                removed += 1
        return removed

    async def clear_all(self) -> None:
        for key in self._client.smembers(_INDEX_KEY):
            self._client.delete(key)
        self._client.delete(_INDEX_KEY)

    async def list_entries(self) -> list[SummaryCacheEntry]:
        return [entry for _, entry in self._scan()]

    def close(self) -> None:
        self._client.close()

    def _scan(self) -> list[tuple[str, SummaryCacheEntry]]:
        found: list[tuple[str, SummaryCacheEntry]] = []
        for key in sorted(self._client.smembers(_INDEX_KEY)):
            entry = self._load(key)
            if entry is not None:
                found.append((key, entry))
        return found

    def _load(self, key: str) -> SummaryCacheEntry | None:
        data = self._client.get(key)
        if data is None:
            return None
        try:
            return SummaryCacheEntry(**json.loads(data))
        except Exception as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    def _remove(self, key: str) -> None:
        self._client.delete(key)
        self._client.srem(_INDEX_KEY, key)


def _redis_key(document_id: str, section_number: int) -> str:
    return f"{_KEY_PREFIX}{document_id}:{section_number}"

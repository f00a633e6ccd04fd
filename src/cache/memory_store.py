# src/cache/memory_store.py — v1
"""In-process cache store (CACHE_BACKEND=memory). Nothing survives the process."""

from __future__ import annotations

from datetime import datetime

from medileaf.cache.base_cache_store import BaseCacheStore
from medileaf.cache.models import SummaryCacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache store, mainly for tests and one-shot CLI runs."""

    def __init__(self) -> None:
        self._entries: dict[tuple[str, int], SummaryCacheEntry] = {}

    async def get(
        self, document_id: str, section_number: int
    ) -> SummaryCacheEntry | None:
        return self._entries.get((document_id, section_number))

    async def put(self, entry: SummaryCacheEntry) -> None:
        self._entries[(entry.document_id, entry.section_number)] = entry

    async def delete_section(self, document_id: str, section_number: int) -> None:
        self._entries.pop((document_id, section_number), None)

    async def delete_document(self, document_id: str) -> None:
        for key in [k for k in self._entries if k[0] == document_id]:
            del self._entries[key]

    async def delete_expired(self, cutoff: datetime) -> int:
        expired = [k for k, e in self._entries.items() if e.created_at < cutoff]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def clear_all(self) -> None:
        self._entries.clear()

    async def list_entries(self) -> list[SummaryCacheEntry]:
        return list(self._entries.values())

# src/cache/base_cache_store.py — v1
"""Abstract summary cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from medileaf.cache.models import SummaryCacheEntry


class BaseCacheStore(ABC):
    """Unified interface for summary cache backends.

    Writes are plain upserts with no locking; concurrent writers for the
    same key resolve as last-writer-wins.
    """

    @abstractmethod
    async def get(
        self, document_id: str, section_number: int
    ) -> SummaryCacheEntry | None:
        """Retrieve the entry for one section, if any."""

    @abstractmethod
    async def put(self, entry: SummaryCacheEntry) -> None:
        """Insert or overwrite the entry for (document_id, section_number)."""

    @abstractmethod
    async def delete_section(self, document_id: str, section_number: int) -> None:
        """Remove the entry for one section."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> None:
        """Remove every entry of one document."""

    @abstractmethod
    async def delete_expired(self, cutoff: datetime) -> int:
        """Remove entries created before `cutoff`. Returns the number removed."""

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def list_entries(self) -> list[SummaryCacheEntry]:
        """List all cached entries."""

    def close(self) -> None:
        """Release backend resources. No-op unless the backend holds any."""

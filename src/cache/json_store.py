# src/cache/json_store.py — v1
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores one JSON file per (document_id, section_number) under CACHE_ROOT.
File names use a digest of the document id, so distinct ids never share a
file; the id stored inside the entry is checked on read.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from medileaf.cache.base_cache_store import BaseCacheStore
from medileaf.cache.fingerprint import hash_content
from medileaf.cache.models import SummaryCacheEntry

logger = logging.getLogger(__name__)

_ID_DIGEST_LEN = 16


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(
        self, document_id: str, section_number: int
    ) -> SummaryCacheEntry | None:
        return self._load(document_id, section_number)

    async def put(self, entry: SummaryCacheEntry) -> None:
        path = self._entry_path(entry.document_id, entry.section_number)
        path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")

    async def delete_section(self, document_id: str, section_number: int) -> None:
        if self._load(document_id, section_number) is not None:
            self._entry_path(document_id, section_number).unlink()

    async def delete_document(self, document_id: str) -> None:
        for path, entry in self._scan():
            if entry.document_id == document_id:
                path.unlink()

    async def delete_expired(self, cutoff: datetime) -> int:
        removed = 0
        for path, entry in self._scan():
            if entry.created_at < cutoff:
                path.unlink()
                removed += 1
        return removed

    async def clear_all(self) -> None:
        for path in self._root.glob("*.json"):
            path.unlink()

    async def list_entries(self) -> list[SummaryCacheEntry]:
        return [entry for _, entry in self._scan()]

    def _scan(self) -> list[tuple[Path, SummaryCacheEntry]]:
        """Readable entries with their files; unreadable files are skipped."""
        found: list[tuple[Path, SummaryCacheEntry]] = []
        for path in sorted(self._root.glob("*.json")):
            entry = self._read(path)
            if entry is not None:
                found.append((path, entry))
        return found

    @staticmethod
    def _read(path: Path) -> SummaryCacheEntry | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return SummaryCacheEntry(**data)
        except Exception as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    def _load(self, document_id: str, section_number: int) -> SummaryCacheEntry | None:
        path = self._entry_path(document_id, section_number)
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is None or entry.document_id != document_id:
            return None
        return entry

    def _entry_path(self, document_id: str, section_number: int) -> Path:
        """Return file path for a cache key."""
        digest = hash_content(document_id)[:_ID_DIGEST_LEN]
        return self._root / f"{digest}__{section_number}.json"

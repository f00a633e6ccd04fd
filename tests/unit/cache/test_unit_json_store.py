# tests/unit/cache/test_unit_json_store.py — v1
"""Tests for cache/json_store.py — file layout and corrupt files."""

from __future__ import annotations

import pytest

from medileaf.cache.fingerprint import hash_content
from medileaf.cache.json_store import JsonCacheStore
from medileaf.cache.models import SummaryCacheEntry


def _entry(doc="doc/001", num=1, summary="s") -> SummaryCacheEntry:
    return SummaryCacheEntry(document_id=doc, section_number=num, content_hash="h", summary=summary)


class TestJsonCacheStore:
    def test_creates_root(self, tmp_path):
        root = tmp_path / "a" / "b"
        JsonCacheStore(cache_root=root)
        assert root.is_dir()

    @pytest.mark.asyncio
    async def test_one_file_per_key_named_by_id_digest(self, tmp_cache_dir):
        store = JsonCacheStore(cache_root=tmp_cache_dir)
        await store.put(_entry())
        files = [p.name for p in tmp_cache_dir.iterdir()]
        assert files == [f"{hash_content('doc/001')[:16]}__1.json"]

    @pytest.mark.asyncio
    async def test_ids_differing_only_in_unsafe_chars_are_separate(self, tmp_cache_dir):
        store = JsonCacheStore(cache_root=tmp_cache_dir)
        await store.put(_entry(doc="a/b", summary="x"))
        await store.put(_entry(doc="a_b", summary="y"))
        assert (await store.get("a/b", 1)).summary == "x"
        await store.delete_section("a_b", 1)
        assert (await store.get("a/b", 1)).summary == "x"
        assert await store.get("a_b", 1) is None

    @pytest.mark.asyncio
    async def test_entry_for_other_id_not_returned(self, tmp_cache_dir):
        store = JsonCacheStore(cache_root=tmp_cache_dir)
        await store.put(_entry(doc="doc_001"))
        impostor = tmp_cache_dir / f"{hash_content('doc_002')[:16]}__1.json"
        (tmp_cache_dir / f"{hash_content('doc_001')[:16]}__1.json").rename(impostor)
        assert await store.get("doc_002", 1) is None

    @pytest.mark.asyncio
    async def test_corrupt_file_ignored(self, tmp_cache_dir):
        store = JsonCacheStore(cache_root=tmp_cache_dir)
        (tmp_cache_dir / f"{hash_content('doc')[:16]}__1.json").write_text("{not json", encoding="utf-8")
        assert await store.get("doc", 1) is None
        assert await store.list_entries() == []

# src/cache/models.py — v1
"""Cache domain model: SummaryCacheEntry."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from medileaf.cache.fingerprint import hash_content


# Section number reserved for the leaflet-level overview (real sections are 1-6).
LEAFLET_SUMMARY_SLOT = 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SummaryCacheEntry(BaseModel):
    """Cached summary for one section of one document.

    Keyed by (document_id, section_number). `content_hash` is the only
    invalidation signal: an entry is valid for a content string iff the
    hash of that string equals it.
    """

    document_id: str
    section_number: int
    content_hash: str
    summary: str
    created_at: datetime = Field(default_factory=_utcnow)

    def is_valid_for(self, content: str) -> bool:
        """Whether this entry was produced from exactly `content`."""
        return self.content_hash == hash_content(content)

# src/cache/sqlite_store.py — v1
"""SQLite-based cache store (CACHE_BACKEND=sqlite, default).

Uses stdlib sqlite3, no external dependency.
One row per (document_id, section_number); writes are upserts.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from medileaf.cache.base_cache_store import BaseCacheStore
from medileaf.cache.models import SummaryCacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS section_summary_cache (
    document_id TEXT NOT NULL,
    section_number INTEGER NOT NULL,
    content_hash TEXT NOT NULL,
    summary TEXT NOT NULL,
    created_at REAL NOT NULL,
    PRIMARY KEY (document_id, section_number)
);
CREATE INDEX IF NOT EXISTS idx_created_at ON section_summary_cache(created_at);
"""

_COLUMNS = "document_id, section_number, content_hash, summary, created_at"


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed summary cache."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(
        self, document_id: str, section_number: int
    ) -> SummaryCacheEntry | None:
        cursor = self._conn.execute(
            f"SELECT {_COLUMNS} FROM section_summary_cache "
            "WHERE document_id = ? AND section_number = ? LIMIT 1",
            (document_id, section_number),
        )
        row = cursor.fetchone()
        return None if row is None else _row_to_entry(row)

    async def put(self, entry: SummaryCacheEntry) -> None:
        self._conn.execute(
            f"INSERT OR REPLACE INTO section_summary_cache ({_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                entry.document_id,
                entry.section_number,
                entry.content_hash,
                entry.summary,
                _to_timestamp(entry.created_at),
            ),
        )
        self._conn.commit()

    async def delete_section(self, document_id: str, section_number: int) -> None:
        self._conn.execute(
            "DELETE FROM section_summary_cache "
            "WHERE document_id = ? AND section_number = ?",
            (document_id, section_number),
        )
        self._conn.commit()

    async def delete_document(self, document_id: str) -> None:
        self._conn.execute(
            "DELETE FROM section_summary_cache WHERE document_id = ?",
            (document_id,),
        )
        self._conn.commit()

    async def delete_expired(self, cutoff: datetime) -> int:
        cursor = self._conn.execute(
            "DELETE FROM section_summary_cache WHERE created_at < ?",
            (_to_timestamp(cutoff),),
        )
        self._conn.commit()
        return cursor.rowcount

    async def clear_all(self) -> None:
        self._conn.execute("DELETE FROM section_summary_cache")
        self._conn.commit()

    async def list_entries(self) -> list[SummaryCacheEntry]:
        cursor = self._conn.execute(
            f"SELECT {_COLUMNS} FROM section_summary_cache "
            "ORDER BY document_id, section_number"
        )
        return [_row_to_entry(row) for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


def _to_timestamp(value: datetime) -> float:
    # Naive datetimes are taken as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _row_to_entry(row: tuple) -> SummaryCacheEntry:
    return SummaryCacheEntry(
        document_id=row[0],
        section_number=row[1],
        content_hash=row[2],
        summary=row[3],
        created_at=datetime.fromtimestamp(row[4], tz=timezone.utc),
    )

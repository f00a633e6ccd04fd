# src/summarization/section_summarizer.py — v1
"""Adaptive section summarization with a content-hash cache.

Short sections get a single oracle call. Longer ones are split into 2-4
parts and summarized by iterative refinement: part 1 on its own, then each
later part folded into the running summary, strictly in order with a pause
between calls. A failed refinement step keeps the previous summary; a failed
first part falls back to one single-shot call over the section's opening.

Every oracle call is bounded by a timeout that wraps the retried call, and
oracle faults are converted here into either a typed failure or a
keep-previous outcome. Cache-store faults are not caught.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from medileaf.cache.fingerprint import hash_content
from medileaf.cache.models import SummaryCacheEntry
from medileaf.config.settings import Settings, load_settings
from medileaf.logging.context import clear_context, set_request_context
from medileaf.summarization.chunker import (
    SINGLE_CHUNK_THRESHOLD,
    part_count,
    split_into_parts,
)
from medileaf.summarization.errors import GenerationFailedError, OracleUnavailableError
from medileaf.summarization.prompts import (
    clean_markdown,
    first_part_prompt,
    refine_part_prompt,
    refinement_prompt,
    single_chunk_prompt,
)
from medileaf.llm.retry import with_retry

if TYPE_CHECKING:
    from medileaf.cache.base_cache_store import BaseCacheStore
    from medileaf.core.models import RefinementMode
    from medileaf.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

_AGENT = "section_summarizer"


class SectionSummaryEngine:
    """Produces and caches plain-language summaries of leaflet sections.

    Args:
        cache_store: Persistent store keyed by (document_id, section_number).
        llm: Generation oracle.
        settings: Timeouts and delays; loaded from the environment if None.
    """

    def __init__(
        self,
        cache_store: BaseCacheStore,
        llm: BaseLLMClient,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or load_settings()
        self._cache = cache_store
        self._llm = llm
        self._timeout_s = settings.summary_call_timeout_s
        self._refine_timeout_s = settings.refine_call_timeout_s
        self._delay_s = settings.summary_inter_part_delay_s
        self._max_age_days = settings.summary_cache_max_age_days

    async def get_summary(
        self, document_id: str, section_number: int, title: str, content: str
    ) -> str:
        """Return the cached summary if still valid, else generate and cache one.

        Raises:
            OracleUnavailableError: Cache miss and the oracle is not ready.
            GenerationFailedError: No oracle attempt produced a summary.
        """
        set_request_context(document_id, section_number, "summarize")
        try:
            content_hash = hash_content(content)
            cached = await self._cache.get(document_id, section_number)
            if cached is not None and cached.content_hash == content_hash:
                logger.debug("Cache hit")
                return cached.summary

            logger.info("Cache miss, generating summary (%d chars)", len(content))
            if not await self._oracle_ready():
                raise OracleUnavailableError(
                    document_id, section_number, "generation oracle not available"
                )

            if len(content) <= SINGLE_CHUNK_THRESHOLD:
                summary = await self._call(
                    single_chunk_prompt(title, content), self._timeout_s, "single chunk"
                )
            else:
                summary = await self._summarize_in_parts(title, content)

            if summary is None:
                raise GenerationFailedError(
                    document_id, section_number, "could not generate summary"
                )

            await self._store(document_id, section_number, content_hash, summary)
            return summary
        finally:
            clear_context()

    async def refine(
        self,
        document_id: str,
        section_number: int,
        title: str,
        content: str,
        mode: RefinementMode,
    ) -> str:
        """Regenerate a summary with a mode-specific instruction.

        Never reads the cache; the cleaned result overwrites the entry.

        Raises:
            OracleUnavailableError: The oracle is not ready.
            GenerationFailedError: The oracle call failed or timed out.
        """
        set_request_context(document_id, section_number, f"refine:{mode.value}")
        try:
            if not await self._oracle_ready():
                raise OracleUnavailableError(
                    document_id, section_number, "generation oracle not available"
                )

            raw = await self._call(
                refinement_prompt(title, content, mode),
                self._refine_timeout_s,
                f"refinement ({mode.value})",
            )
            summary = clean_markdown(raw) if raw is not None else ""
            if not summary:
                raise GenerationFailedError(
                    document_id, section_number, "could not generate summary"
                )

            await self._store(document_id, section_number, hash_content(content), summary)
            return summary
        finally:
            clear_context()

    # --- Cache maintenance ---

    async def delete_section_cache(self, document_id: str, section_number: int) -> None:
        await self._cache.delete_section(document_id, section_number)

    async def delete_document_cache(self, document_id: str) -> None:
        await self._cache.delete_document(document_id)

    async def clear_cache(self) -> None:
        await self._cache.clear_all()

    async def clear_expired_cache(self, max_age_days: int | None = None) -> int:
        """Drop entries older than `max_age_days` (settings default: 30)."""
        days = self._max_age_days if max_age_days is None else max_age_days
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        removed = await self._cache.delete_expired(cutoff)
        logger.info("Removed %d cache entries older than %d days", removed, days)
        return removed

    def close(self) -> None:
        """Release the cache store's resources."""
        self._cache.close()

    # --- Internals ---

    async def _summarize_in_parts(self, title: str, content: str) -> str | None:
        parts = split_into_parts(content, part_count(len(content))) or [content]
        total = len(parts)
        logger.debug("Adaptive chunking: %d chars -> %s", len(content), [len(p) for p in parts])

        summary = await self._call(
            first_part_prompt(title, parts[0], total), self._timeout_s, f"part 1/{total}"
        )
        if summary is None:
            logger.warning("First part failed, retrying as a single chunk")
            return await self._call(
                single_chunk_prompt(title, content[:SINGLE_CHUNK_THRESHOLD]),
                self._timeout_s,
                "single chunk fallback",
            )

        for i in range(1, total):
            await asyncio.sleep(self._delay_s)
            part_number = i + 1
            refined = await self._call(
                refine_part_prompt(title, summary, parts[i], part_number, total),
                self._timeout_s,
                f"part {part_number}/{total}",
            )
            if refined is None:
                logger.warning("Part %d/%d failed, keeping previous summary", part_number, total)
                continue
            summary = refined
        return summary

    async def _call(self, prompt: str, timeout_s: float, label: str) -> str | None:
        """One oracle call bounded by `timeout_s`; None on timeout or error."""
        try:
            return await asyncio.wait_for(
                with_retry(self._llm.generate, prompt, agent=_AGENT),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs", label, timeout_s)
        except Exception as exc:
            logger.warning("%s failed: %s", label, exc)
        return None

    async def _oracle_ready(self) -> bool:
        try:
            return bool(await self._llm.is_available())
        except Exception as exc:
            logger.warning("Availability check failed: %s", exc)
            return False

    async def _store(
        self, document_id: str, section_number: int, content_hash: str, summary: str
    ) -> None:
        await self._cache.put(
            SummaryCacheEntry(
                document_id=document_id,
                section_number=section_number,
                content_hash=content_hash,
                summary=summary,
            )
        )
        logger.debug("Cached summary (%d chars)", len(summary))

# src/structured/leaflet_summary.py — v1
"""Quick three-field overview of a whole leaflet.

Sections 1, 3 and 2 (or 4) are each reduced to one or two sentences by a
separate small oracle call: what the medicine is for, how it is taken, and
what to watch out for. The overview is cached per document in the summary
cache under LEAFLET_SUMMARY_SLOT.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from medileaf.cache.fingerprint import hash_content
from medileaf.cache.models import LEAFLET_SUMMARY_SLOT, SummaryCacheEntry
from medileaf.config.settings import Settings, load_settings
from medileaf.core.models import LeafletSummary
from medileaf.extraction.content_normalizer import normalize_to_blocks
from medileaf.extraction.section_extractor import extract_sections
from medileaf.llm.retry import with_retry
from medileaf.structured.content_structurer import blocks_to_text
from medileaf.summarization.prompts import load_template

if TYPE_CHECKING:
    from medileaf.cache.base_cache_store import BaseCacheStore
    from medileaf.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

MAX_SECTION_CHARS = 3000
MAX_ANSWER_CHARS = 300
FIELD_TIMEOUT_S = 15.0
DOSAGE_PLACEHOLDER = "Ver sección 3 del prospecto"
WARNINGS_PLACEHOLDER = "Ver sección 2 del prospecto"
_AGENT = "leaflet_summarizer"

# field -> (target, style, example)
_FIELD_PROMPTS: dict[str, tuple[str, str, str]] = {
    "indications": (
        "PARA QUÉ SIRVE el medicamento",
        " claras y directas",
        "Alivio del dolor leve a moderado y fiebre.",
    ),
    "dosage": (
        "CÓMO SE TOMA el medicamento (dosis y frecuencia)",
        "",
        "1 comprimido cada 8 horas. Máximo 3 al día.",
    ),
    "warnings": (
        "las PRECAUCIONES más importantes (contraindicaciones, interacciones, embarazo)",
        "",
        "No tomar con alcohol. Contraindicado en embarazo y úlcera gástrica.",
    ),
    "side_effects": (
        "los EFECTOS SECUNDARIOS más frecuentes",
        "",
        "Puede causar náuseas, dolor de cabeza y mareos.",
    ),
}


def field_prompt(field: str, text: str) -> str:
    target, style, example = _FIELD_PROMPTS[field]
    return load_template("leaflet_field.txt").format(
        target=target, style=style, example=example, text=text
    )


def clean_answer(text: str) -> str:
    """One line, no surrounding quotes, at most MAX_ANSWER_CHARS."""
    text = text.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return text.replace("\n", " ")[:MAX_ANSWER_CHARS]


class LeafletSummarizer:
    """Builds and caches LeafletSummary overviews.

    Args:
        llm: Generation oracle.
        cache_store: Optional summary cache; without it nothing is cached.
        settings: Cache max age; loaded from the environment if None.
    """

    def __init__(
        self,
        llm: BaseLLMClient,
        cache_store: BaseCacheStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or load_settings()
        self._llm = llm
        self._cache = cache_store
        self._max_age_days = settings.summary_cache_max_age_days

    async def summarize(
        self, markup: str, document_id: str | None = None
    ) -> LeafletSummary | None:
        """Overview of the leaflet, or None when no indications could be produced."""
        cached = await self._cached(markup, document_id)
        if cached is not None:
            logger.debug("Leaflet overview cache hit")
            return cached

        try:
            available = await self._llm.is_available()
        except Exception as exc:
            logger.warning("Availability check failed: %s", exc)
            available = False
        if not available:
            return None

        sections = extract_sections(markup)
        if not sections:
            logger.warning("No sections found for leaflet overview")
            return None

        fields = {"indications": "", "dosage": "", "warnings": ""}
        for section in sections:
            text = blocks_to_text(normalize_to_blocks(section.content))[:MAX_SECTION_CHARS]
            if not text.strip():
                continue

            if section.number == 1:
                fields["indications"] = await self._extract("indications", text)
            elif section.number == 3:
                fields["dosage"] = await self._extract("dosage", text)
            elif section.number == 2:
                fields["warnings"] = await self._extract("warnings", text)
            elif section.number == 4 and not fields["warnings"]:
                fields["warnings"] = await self._extract("side_effects", text)

            if all(fields.values()):
                break

        if not fields["indications"]:
            logger.warning("Could not extract indications from sections")
            return None

        summary = LeafletSummary(
            indications=fields["indications"],
            dosage=fields["dosage"] or DOSAGE_PLACEHOLDER,
            warnings=fields["warnings"] or WARNINGS_PLACEHOLDER,
        )
        if document_id is not None and self._cache is not None:
            await self._cache.put(
                SummaryCacheEntry(
                    document_id=document_id,
                    section_number=LEAFLET_SUMMARY_SLOT,
                    content_hash=hash_content(markup),
                    summary=summary.model_dump_json(),
                )
            )
        return summary

    async def _cached(self, markup: str, document_id: str | None) -> LeafletSummary | None:
        if document_id is None or self._cache is None:
            return None
        entry = await self._cache.get(document_id, LEAFLET_SUMMARY_SLOT)
        if entry is None or not entry.is_valid_for(markup):
            return None
        if entry.created_at < datetime.now(timezone.utc) - timedelta(days=self._max_age_days):
            return None
        return LeafletSummary.model_validate_json(entry.summary)

    async def _extract(self, field: str, text: str) -> str:
        try:
            raw = await asyncio.wait_for(
                with_retry(self._llm.generate, field_prompt(field, text), agent=_AGENT),
                timeout=FIELD_TIMEOUT_S,
            )
        except asyncio.TimeoutError:
            logger.warning("Timeout extracting %s", field)
            return ""
        except Exception as exc:
            logger.warning("Error extracting %s: %s", field, exc)
            return ""
        return clean_answer(raw)

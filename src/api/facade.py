# src/api/facade.py — v1
"""Public API facade for leaflet parsing and section summaries.

Usage:
    from medileaf.api.facade import extract_sections, get_section_summary
    sections = extract_sections(html)
    summary = await get_section_summary("12345", 3, sections[2].title, text)

Parsing functions never raise. Summary functions return text or raise a
SummaryError subclass.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from medileaf.config.settings import Settings, load_settings
from medileaf.extraction import content_normalizer, section_extractor
from medileaf.structured import json_recovery
from medileaf.structured.content_structurer import ContentStructurer, blocks_to_text
from medileaf.summarization.section_summarizer import SectionSummaryEngine

if TYPE_CHECKING:
    from medileaf.cache.base_cache_store import BaseCacheStore
    from medileaf.core.models import ContentBlock, LeafletSummary, RefinementMode, Section
    from medileaf.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

__all__ = [
    "blocks_to_text",
    "build_engine",
    "extract_sections",
    "get_leaflet_summary",
    "get_section_summary",
    "normalize_to_blocks",
    "parse_structured_list",
    "refine_section_summary",
    "structure_section_blocks",
]


def extract_sections(markup: str) -> list[Section]:
    """Split leaflet markup into its numbered sections."""
    return section_extractor.extract_sections(markup)


def normalize_to_blocks(markup: str) -> list[ContentBlock]:
    """Flatten section markup into typed content blocks."""
    return content_normalizer.normalize_to_blocks(markup)


async def structure_section_blocks(
    markup: str,
    llm: BaseLLMClient | None = None,
    settings: Settings | None = None,
) -> list[ContentBlock]:
    """Oracle-labelled blocks of section markup, or the Normalizer's blocks.

    Falls back to `normalize_to_blocks` whenever the oracle is unavailable,
    fails, or labels nothing.
    """
    settings = settings or load_settings()
    if llm is None:
        from medileaf.llm.client_factory import create_component_client
        llm = create_component_client("content_structurer", settings)
    blocks = await ContentStructurer(llm, settings).structure(markup)
    if blocks:
        return blocks
    logger.info("Oracle structuring produced no blocks, using normalizer output")
    return normalize_to_blocks(markup)


def parse_structured_list(raw_text: str, required_key: str = "name") -> list[dict[str, Any]]:
    """Recover a JSON record list from raw oracle output."""
    return json_recovery.parse_structured_list(raw_text, required_key=required_key)


def build_engine(
    settings: Settings | None = None,
    llm: BaseLLMClient | None = None,
    cache_store: BaseCacheStore | None = None,
) -> SectionSummaryEngine:
    """Wire a summary engine from settings, filling in missing collaborators."""
    settings = settings or load_settings()
    if llm is None:
        from medileaf.llm.client_factory import create_component_client
        llm = create_component_client("section_summarizer", settings)
    if cache_store is None:
        from medileaf.cache.cache_factory import create_cache_store
        cache_store = create_cache_store(settings)
    return SectionSummaryEngine(cache_store=cache_store, llm=llm, settings=settings)


async def get_section_summary(
    document_id: str,
    section_number: int,
    title: str,
    content: str,
    settings: Settings | None = None,
    llm: BaseLLMClient | None = None,
    cache_store: BaseCacheStore | None = None,
) -> str:
    """Cached-or-generated summary of one section.

    A cache store created here is closed before returning; a caller-supplied
    one is left open.

    Raises:
        OracleUnavailableError: Cache miss and the oracle is not ready.
        GenerationFailedError: The oracle produced no summary.
    """
    owns_cache = cache_store is None
    engine = build_engine(settings, llm, cache_store)
    try:
        return await engine.get_summary(document_id, section_number, title, content)
    finally:
        if owns_cache:
            engine.close()


async def refine_section_summary(
    document_id: str,
    section_number: int,
    title: str,
    content: str,
    mode: RefinementMode,
    settings: Settings | None = None,
    llm: BaseLLMClient | None = None,
    cache_store: BaseCacheStore | None = None,
) -> str:
    """Regenerate a section summary with a refinement mode (cache bypassed).

    Raises:
        OracleUnavailableError: The oracle is not ready.
        GenerationFailedError: The oracle produced no summary.
    """
    owns_cache = cache_store is None
    engine = build_engine(settings, llm, cache_store)
    try:
        return await engine.refine(document_id, section_number, title, content, mode)
    finally:
        if owns_cache:
            engine.close()


async def get_leaflet_summary(
    markup: str,
    document_id: str | None = None,
    settings: Settings | None = None,
    llm: BaseLLMClient | None = None,
    cache_store: BaseCacheStore | None = None,
) -> LeafletSummary | None:
    """Indications, dosage and warnings overview of a whole leaflet.

    Cached per document when `document_id` is given. Returns None when the
    oracle is unavailable or no indications could be extracted.
    """
    from medileaf.structured.leaflet_summary import LeafletSummarizer

    settings = settings or load_settings()
    if llm is None:
        from medileaf.llm.client_factory import create_component_client
        llm = create_component_client("leaflet_summarizer", settings)
    owns_cache = cache_store is None
    if owns_cache:
        from medileaf.cache.cache_factory import create_cache_store
        cache_store = create_cache_store(settings)
    try:
        return await LeafletSummarizer(llm, cache_store, settings).summarize(markup, document_id)
    finally:
        if owns_cache:
            cache_store.close()

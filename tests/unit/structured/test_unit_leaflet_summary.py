# tests/unit/structured/test_unit_leaflet_summary.py — v1
"""Tests for structured/leaflet_summary.py: field mapping, fallbacks, caching."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from medileaf.cache.fingerprint import hash_content
from medileaf.cache.models import LEAFLET_SUMMARY_SLOT, SummaryCacheEntry
from medileaf.core.models import LeafletSummary
from medileaf.structured import leaflet_summary
from medileaf.structured.leaflet_summary import (
    DOSAGE_PLACEHOLDER,
    MAX_ANSWER_CHARS,
    MAX_SECTION_CHARS,
    WARNINGS_PLACEHOLDER,
    LeafletSummarizer,
    clean_answer,
    field_prompt,
)


def _by_target(prompt: str) -> str:
    """Answer according to which field the prompt asks for."""
    if "PARA QUÉ SIRVE" in prompt:
        return "Analgésico para el dolor."
    if "CÓMO SE TOMA" in prompt:
        return "1 comprimido cada 8 horas."
    if "PRECAUCIONES" in prompt:
        return "No tomar si es alérgico."
    if "EFECTOS SECUNDARIOS" in prompt:
        return "Náuseas."
    return ""


def _leaflet(*sections: tuple[int, str]) -> str:
    body = "".join(
        f'<h2 id="{n}">{n}. Título {n}</h2><div><p>{text}</p></div>' for n, text in sections
    )
    return f"<html><body>{body}</body></html>"


class TestCleanAnswer:
    def test_strips_quotes_and_whitespace(self):
        assert clean_answer('  "Alivio del dolor."  ') == "Alivio del dolor."

    def test_newlines_become_spaces(self):
        assert clean_answer("Uno.\nDos.") == "Uno. Dos."

    def test_caps_length(self):
        assert len(clean_answer("x" * 1000)) == MAX_ANSWER_CHARS

    def test_single_quote_char_kept(self):
        assert clean_answer('"') == '"'


class TestFieldPrompt:
    def test_fills_template(self):
        prompt = field_prompt("dosage", "Adultos: 1 comprimido.")
        assert "CÓMO SE TOMA el medicamento (dosis y frecuencia)" in prompt
        assert "1 comprimido cada 8 horas. Máximo 3 al día." in prompt
        assert prompt.rstrip().endswith("Adultos: 1 comprimido.")

    def test_indications_style(self):
        assert "1-2 frases claras y directas" in field_prompt("indications", "t")


class TestLeafletSummarizer:
    @pytest.mark.asyncio
    async def test_maps_sections_to_fields(self, mock_llm_client, fast_settings, semantic_leaflet_html):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(
            semantic_leaflet_html
        )
        assert result == LeafletSummary(
            indications="Analgésico para el dolor.",
            dosage="1 comprimido cada 8 horas.",
            warnings="No tomar si es alérgico.",
        )
        prompts = [c.args[0] for c in mock_llm_client.generate.call_args_list]
        assert len(prompts) == 3
        assert "Paracetamol es un analgésico." in prompts[0]
        assert "No tome Paracetamol si es alérgico." in prompts[1]

    @pytest.mark.asyncio
    async def test_stops_once_all_fields_filled(self, mock_llm_client, fast_settings):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        markup = _leaflet((1, "Indicado."), (2, "Precaución."), (3, "Dosis."), (4, "Efectos."))
        await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        assert mock_llm_client.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_side_effects_fill_missing_warnings(self, mock_llm_client, fast_settings):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        markup = _leaflet((1, "Indicado."), (3, "Dosis."), (4, "Efectos."))
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        assert result.warnings == "Náuseas."

    @pytest.mark.asyncio
    async def test_placeholders_for_missing_fields(self, mock_llm_client, fast_settings):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        markup = _leaflet((1, "Indicado."), (5, "Conservación."))
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        assert result.dosage == DOSAGE_PLACEHOLDER
        assert result.warnings == WARNINGS_PLACEHOLDER
        assert mock_llm_client.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_no_indications_returns_none(self, mock_llm_client, fast_settings, memory_cache):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        markup = _leaflet((2, "Precaución."), (3, "Dosis."))
        result = await LeafletSummarizer(
            mock_llm_client, memory_cache, fast_settings
        ).summarize(markup, "doc-1")
        assert result is None
        assert await memory_cache.get("doc-1", LEAFLET_SUMMARY_SLOT) is None

    @pytest.mark.asyncio
    async def test_unavailable_oracle_returns_none(self, mock_llm_client, fast_settings, semantic_leaflet_html):
        mock_llm_client.is_available = AsyncMock(return_value=False)
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(
            semantic_leaflet_html
        )
        assert result is None
        mock_llm_client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_sections_returns_none(self, mock_llm_client, fast_settings):
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(
            "<p>Sin estructura</p>"
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_section_text_truncated(self, mock_llm_client, fast_settings):
        mock_llm_client.generate = AsyncMock(return_value="Indicado.")
        markup = _leaflet((1, "a" * (MAX_SECTION_CHARS + 500)))
        await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        prompt = mock_llm_client.generate.call_args.args[0]
        assert "a" * MAX_SECTION_CHARS in prompt
        assert "a" * (MAX_SECTION_CHARS + 1) not in prompt

    @pytest.mark.asyncio
    async def test_failed_field_gets_placeholder(self, mock_llm_client, fast_settings):
        def answer(prompt: str) -> str:
            if "CÓMO SE TOMA" in prompt:
                raise RuntimeError("boom")
            return _by_target(prompt)

        mock_llm_client.generate = AsyncMock(side_effect=answer)
        markup = _leaflet((1, "Indicado."), (2, "Precaución."), (3, "Dosis."))
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        assert result.indications == "Analgésico para el dolor."
        assert result.dosage == DOSAGE_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_slow_field_times_out(self, mock_llm_client, fast_settings, monkeypatch):
        monkeypatch.setattr(leaflet_summary, "FIELD_TIMEOUT_S", 0.01)

        async def answer(prompt: str) -> str:
            if "PRECAUCIONES" in prompt:
                await asyncio.sleep(1)
            return _by_target(prompt)

        mock_llm_client.generate = AsyncMock(side_effect=answer)
        markup = _leaflet((1, "Indicado."), (2, "Precaución."))
        result = await LeafletSummarizer(mock_llm_client, settings=fast_settings).summarize(markup)
        assert result.warnings == WARNINGS_PLACEHOLDER


class TestLeafletSummaryCache:
    @pytest.mark.asyncio
    async def test_result_cached_under_reserved_slot(
        self, mock_llm_client, fast_settings, memory_cache, semantic_leaflet_html
    ):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        result = await LeafletSummarizer(
            mock_llm_client, memory_cache, fast_settings
        ).summarize(semantic_leaflet_html, "doc-1")
        entry = await memory_cache.get("doc-1", LEAFLET_SUMMARY_SLOT)
        assert entry.content_hash == hash_content(semantic_leaflet_html)
        assert LeafletSummary.model_validate_json(entry.summary) == result

    @pytest.mark.asyncio
    async def test_cache_hit_skips_oracle(
        self, mock_llm_client, fast_settings, memory_cache, semantic_leaflet_html
    ):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        summarizer = LeafletSummarizer(mock_llm_client, memory_cache, fast_settings)
        first = await summarizer.summarize(semantic_leaflet_html, "doc-1")
        mock_llm_client.generate.reset_mock()
        mock_llm_client.is_available = AsyncMock(return_value=False)

        assert await summarizer.summarize(semantic_leaflet_html, "doc-1") == first
        mock_llm_client.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_changed_markup_regenerates(
        self, mock_llm_client, fast_settings, memory_cache, semantic_leaflet_html
    ):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        summarizer = LeafletSummarizer(mock_llm_client, memory_cache, fast_settings)
        await summarizer.summarize(semantic_leaflet_html, "doc-1")
        mock_llm_client.generate.reset_mock()

        await summarizer.summarize(semantic_leaflet_html + "<!-- v2 -->", "doc-1")
        assert mock_llm_client.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_expired_entry_regenerates(
        self, mock_llm_client, fast_settings, memory_cache, semantic_leaflet_html
    ):
        stale = LeafletSummary(indications="viejo", dosage="viejo", warnings="viejo")
        await memory_cache.put(
            SummaryCacheEntry(
                document_id="doc-1",
                section_number=LEAFLET_SUMMARY_SLOT,
                content_hash=hash_content(semantic_leaflet_html),
                summary=stale.model_dump_json(),
                created_at=datetime.now(timezone.utc)
                - timedelta(days=fast_settings.summary_cache_max_age_days + 1),
            )
        )
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        result = await LeafletSummarizer(
            mock_llm_client, memory_cache, fast_settings
        ).summarize(semantic_leaflet_html, "doc-1")
        assert result.indications == "Analgésico para el dolor."

    @pytest.mark.asyncio
    async def test_without_document_id_nothing_cached(
        self, mock_llm_client, fast_settings, memory_cache, semantic_leaflet_html
    ):
        mock_llm_client.generate = AsyncMock(side_effect=_by_target)
        await LeafletSummarizer(mock_llm_client, memory_cache, fast_settings).summarize(
            semantic_leaflet_html
        )
        assert await memory_cache.list_entries() == []

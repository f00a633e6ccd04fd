# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted mock oracle, an in-memory cache, fast settings and
sample leaflet markup. No external services: all oracle I/O is mocked.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from medileaf.cache.memory_store import MemoryCacheStore
from medileaf.config.settings import Settings
from medileaf.llm.models import LLMResponse


# === FIXTURES: Settings ===


@pytest.fixture
def fast_settings(tmp_path: Path) -> Settings:
    """Settings with no inter-part delay and an isolated cache root."""
    return Settings(
        _env_file=None,
        summary_inter_part_delay_s=0.0,
        summary_call_timeout_s=5.0,
        cache_backend="memory",
        cache_root=tmp_path / "cache",
    )


# === FIXTURES: Oracle ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content="El medicamento se usa para tratar el dolor.",
        input_tokens=100,
        output_tokens=20,
        model="mock-model",
        provider="mock",
        latency_ms=50,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock oracle: available, answers every prompt with the same text."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.generate = AsyncMock(return_value=mock_llm_response.content)
    client.is_available = AsyncMock(return_value=True)
    client.provider_name = "mock"
    return client


# === FIXTURES: Cache ===


@pytest.fixture
def memory_cache() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    d = tmp_path / "cache"
    d.mkdir()
    return d


# === FIXTURES: Markup ===


@pytest.fixture
def semantic_leaflet_html() -> str:
    """Leaflet using <h2 id="N"> headings, each followed by one content div."""
    return (
        "<html><body>"
        '<h2 id="1">1. Qué es Paracetamol y para qué se utiliza</h2>'
        "<div><p>Paracetamol es un analgésico.</p></div>"
        '<h2 id="2">2. Qué necesita saber antes de empezar a tomar Paracetamol</h2>'
        "<div><p>No tome Paracetamol si es alérgico.</p></div>"
        '<h2 id="3">3. Cómo tomar Paracetamol</h2>'
        "<div><p>La dosis recomendada es 1 comprimido cada 8 horas.</p></div>"
        "</body></html>"
    )


@pytest.fixture
def numbered_leaflet_html() -> str:
    """Leaflet with plain "N. Title" paragraphs and no ids or index."""
    return (
        '<html><body><div class="texto_prospecto">'
        "<p>Prospecto: información para el usuario</p>"
        "<p>1. Qué es Ibuprofeno y para qué se utiliza</p>"
        "<p>Ibuprofeno pertenece al grupo de los antiinflamatorios.</p>"
        "<p>3. Cómo tomar Ibuprofeno</p>"
        "<p>Adultos: 1 comprimido cada 8 horas.</p>"
        "<p>2. Qué necesita saber antes de empezar</p>"
        "<p>4. Posibles efectos adversos</p>"
        "<p>Náuseas y dolor de estómago.</p>"
        "</div></body></html>"
    )

# tests/unit/llm/test_unit_config.py — v1
"""Tests for llm/config.py — per-component LLM routing cascade."""

from __future__ import annotations

from medileaf.config.settings import Settings
from medileaf.llm.config import COMPONENTS, LLMAssignment, resolve_all, resolve_llm


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestResolveLLM:
    def test_default_assignment(self):
        r = resolve_llm("section_summarizer", _settings())
        assert r.provider == "ollama"
        assert r.model == "llama3.2"
        assert r.source == "default"

    def test_per_component_override(self):
        s = _settings(llm_section_summarizer="openai:gpt-4o-mini")
        r = resolve_llm("section_summarizer", s)
        assert r.provider == "openai"
        assert r.model == "gpt-4o-mini"
        assert r.source == "component"

    def test_override_only_affects_its_component(self):
        s = _settings(llm_treatment_parser="anthropic:claude-3-5-haiku-latest")
        assert resolve_llm("treatment_parser", s).provider == "anthropic"
        assert resolve_llm("section_summarizer", s).provider == "ollama"

    def test_malformed_override_ignored(self):
        s = _settings(llm_section_summarizer="gpt-4o")
        assert resolve_llm("section_summarizer", s).source == "default"

    def test_fallback_when_default_blank(self):
        s = _settings(llm_default_provider="", llm_default_model="")
        r = resolve_llm("content_structurer", s)
        assert r.source == "fallback"
        assert r.key == "ollama:llama3.2"

    def test_unknown_component_uses_default(self):
        assert resolve_llm("unknown", _settings()).source == "default"

    def test_key_format(self):
        r = LLMAssignment(provider="openai", model="gpt-4o", source="default")
        assert r.key == "openai:gpt-4o"


class TestResolveAll:
    def test_resolves_all_components(self):
        assignments = resolve_all(_settings())
        assert set(assignments) == set(COMPONENTS)
        assert "section_summarizer" in assignments

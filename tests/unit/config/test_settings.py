# tests/unit/config/test_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from medileaf.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_provider(self):
        s = Settings(_env_file=None)
        assert s.llm_default_provider == "ollama"
        assert s.llm_default_model == "llama3.2"

    def test_default_summarization(self):
        s = Settings(_env_file=None)
        assert s.summary_call_timeout_s == 20.0
        assert s.summary_inter_part_delay_s == 2.0
        assert s.summary_cache_max_age_days == 30

    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "sqlite"

    def test_refine_timeout_is_double(self):
        s = Settings(_env_file=None, summary_call_timeout_s=7.5)
        assert s.refine_call_timeout_s == 15.0


class TestSettingsValidation:
    def test_redis_without_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_redis_with_url(self):
        s = Settings(_env_file=None, cache_backend="redis", cache_redis_url="redis://x")
        assert s.cache_redis_url == "redis://x"

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, summary_call_timeout_s=0)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, summary_inter_part_delay_s=-1)

    def test_zero_delay_allowed(self):
        assert Settings(_env_file=None, summary_inter_part_delay_s=0).summary_inter_part_delay_s == 0

    def test_max_age_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, summary_cache_max_age_days=0)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="TRACE")


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SUMMARY_CALL_TIMEOUT_S", "3")
        monkeypatch.setenv("LLM_SECTION_SUMMARIZER", "openai:gpt-4o-mini")
        s = Settings(_env_file=None)
        assert s.summary_call_timeout_s == 3.0
        assert s.llm_section_summarizer == "openai:gpt-4o-mini"

    def test_load_settings_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        s = load_settings(cache_backend="memory")
        assert s.cache_backend == "memory"

# tests/unit/llm/test_unit_client_factory.py — v1
"""Tests for llm/client_factory.py — provider registry and wiring."""

from __future__ import annotations

import pytest

from medileaf.config.settings import Settings
from medileaf.llm import client_factory
from medileaf.llm.adapters.ollama_adapter import OllamaAdapter
from medileaf.llm.client_factory import (
    UnsupportedProviderError,
    create_component_client,
    create_llm_client,
    register_provider,
)


class TestCreateLLMClient:
    def test_unsupported_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Available"):
            create_llm_client("nonexistent", "m")

    def test_ollama_without_settings(self):
        client = create_llm_client("ollama", "llama3.2")
        assert isinstance(client, OllamaAdapter)
        assert client.provider_name == "ollama"

    def test_settings_injected(self):
        s = Settings(_env_file=None, ollama_base_url="http://oracle:11434", llm_max_tokens=256)
        client = create_llm_client("ollama", "mistral", settings=s)
        assert client._model == "mistral"
        assert client._host == "http://oracle:11434"
        assert client._max_tokens_default == 256

    def test_explicit_kwargs_win(self):
        s = Settings(_env_file=None, ollama_base_url="http://oracle:11434")
        client = create_llm_client("ollama", "m", settings=s, host="http://other:1")
        assert client._host == "http://other:1"


class TestCreateComponentClient:
    def test_routes_through_cascade(self):
        s = Settings(_env_file=None, llm_section_summarizer="ollama:phi3")
        client = create_component_client("section_summarizer", s)
        assert isinstance(client, OllamaAdapter)
        assert client._model == "phi3"


class TestRegisterProvider:
    def test_register_custom(self, monkeypatch):
        monkeypatch.setattr(client_factory, "_PROVIDER_REGISTRY", dict(client_factory._PROVIDER_REGISTRY))
        register_provider("local", "medileaf.llm.adapters.ollama_adapter.OllamaAdapter")
        client = create_llm_client("local", "tiny")
        assert isinstance(client, OllamaAdapter)

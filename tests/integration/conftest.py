# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

The oracle is a scripted BaseLLMClient subclass so that the real
generate()/retry/timeout path runs end to end. No external services.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from medileaf.config.settings import Settings
from medileaf.llm.base_client import BaseLLMClient
from medileaf.llm.models import LLMResponse, Message


def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class MockLLMClient(BaseLLMClient):
    """Scripted oracle: answers from a queue, then with a default response.

    Queued items that are exceptions are raised instead of returned.
    """

    def __init__(self, default_response: str = "Resumen del prospecto."):
        self._default_response = default_response
        self._response_queue: list[str | Exception] = []
        self.available = True
        self.calls: list[dict[str, Any]] = []

    def set_responses(self, *responses: str | Exception) -> None:
        self._response_queue = list(responses)

    @property
    def prompts(self) -> list[str]:
        return [c["messages"][0].content for c in self.calls]

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "system": system})
        item = self._response_queue.pop(0) if self._response_queue else self._default_response
        if isinstance(item, Exception):
            raise item
        return LLMResponse(
            content=item, input_tokens=50, output_tokens=len(item) // 4,
            model="mock-model", provider="mock", latency_ms=10,
        )

    async def is_available(self) -> bool:
        return self.available

    @property
    def provider_name(self) -> str:
        return "mock"


@pytest.fixture
def mock_oracle() -> MockLLMClient:
    return MockLLMClient()


@pytest.fixture
def sqlite_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        summary_inter_part_delay_s=0.0,
        summary_call_timeout_s=5.0,
        cache_backend="sqlite",
        cache_root=tmp_path / "cache",
    )

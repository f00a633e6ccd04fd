# src/llm/base_client.py — v1
"""Abstract LLM client interface (the generation oracle)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from medileaf.llm.models import LLMResponse, Message, OracleError


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers.

    Calls may be slow; callers apply their own timeout.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Text completion. None falls back to the adapter defaults."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the provider is ready to serve requests right now."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, openai, ollama)."""

    async def generate(self, prompt: str) -> str:
        """Single-prompt generation returning the stripped completion text.

        Raises:
            OracleError: If the provider returned an empty completion.
        """
        response = await self.complete(messages=[Message(role="user", content=prompt)])
        text = (response.content or "").strip()
        if not text:
            raise OracleError(f"{self.provider_name} returned an empty completion")
        return text

# src/llm/adapters/ollama_adapter.py — v1
"""Ollama local LLM adapter implementing BaseLLMClient.

Uses the ollama Python SDK. A local model is the closest stand-in for an
on-device oracle: slow, capacity-limited, and sometimes not running.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from medileaf.llm.base_client import BaseLLMClient
from medileaf.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)


class OllamaAdapter(BaseLLMClient):
    """Ollama local inference adapter."""

    def __init__(
        self,
        model: str = "llama3.2",
        host: str = "http://localhost:11434",
        max_tokens_default: int = 1024,
        temperature_default: float = 0.2,
        **kwargs: Any,
    ):
        self._model = model
        self._host = host
        self._max_tokens_default = max_tokens_default
        self._temperature_default = temperature_default
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-initialize the Ollama client on first use."""
        if self.__client is None:
            try:
                import ollama
            except ImportError as e:
                raise ImportError("ollama package required: pip install ollama") from e
            self.__client = ollama.AsyncClient(host=self._host)
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        msgs: list[dict[str, str]] = []
        if system:
            msgs.append({"role": "system", "content": system})
        for m in messages:
            msgs.append({"role": m.role, "content": m.content})

        options: dict[str, Any] = {
            "num_predict": max_tokens or self._max_tokens_default,
            "temperature": (
                self._temperature_default if temperature is None else temperature
            ),
        }

        t0 = time.monotonic()
        resp = await self._client.chat(model=self._model, messages=msgs, options=options)
        latency = int((time.monotonic() - t0) * 1000)

        return LLMResponse(
            content=resp["message"]["content"],
            input_tokens=resp.get("prompt_eval_count", 0) or 0,
            output_tokens=resp.get("eval_count", 0) or 0,
            model=self._model,
            provider="ollama",
            latency_ms=latency,
            raw_response=resp,
        )

    async def is_available(self) -> bool:
        """The server answers and has the configured model pulled."""
        try:
            listing = await self._client.list()
        except Exception as e:
            logger.debug("Ollama unavailable at %s: %s", self._host, e)
            return False
        names = {_model_name(m) for m in listing.get("models", [])}
        base = self._model.split(":", 1)[0]
        return any(n == self._model or n.split(":", 1)[0] == base for n in names)

    @property
    def provider_name(self) -> str:
        return "ollama"


def _model_name(entry: Any) -> str:
    if isinstance(entry, dict):
        return entry.get("model") or entry.get("name") or ""
    return getattr(entry, "model", "") or ""

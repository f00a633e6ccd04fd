# src/llm/retry.py — v1
"""Retry policy with exponential backoff for transient oracle errors.

Only capacity errors (busy, quota, rate limit) are retried; anything else
fails on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class LLMRetryExhausted(Exception):
    """All retries exhausted for an LLM call."""

    def __init__(self, agent: str, error_type: str, attempts: int, last_error: Exception):
        self.agent = agent
        self.error_type = error_type
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"'{agent}' failed after {attempts} attempts ({error_type}): {last_error}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for a specific error type."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0


# Two retries at 1s then 2s: three attempts in total.
DEFAULT_RETRY_CONFIGS: dict[str, RetryConfig] = {
    "busy": RetryConfig(max_retries=2, base_delay_s=1.0),
    "rate_limit": RetryConfig(max_retries=2, base_delay_s=1.0),
}


def classify_error(error: Exception) -> str:
    """Classify an exception into a retry error type."""
    msg = str(error).lower()

    if "busy" in msg or "errorcode 9" in msg or "quota" in msg:
        return "busy"
    if "429" in msg or "rate limit" in msg or "ratelimit" in type(error).__name__.lower():
        return "rate_limit"
    return "unknown"


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Compute delay for a given retry (0-based)."""
    return config.base_delay_s * (config.backoff_factor ** attempt)


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    agent: str = "unknown",
    retry_configs: dict[str, RetryConfig] | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async function with retry logic.

    Raises:
        LLMRetryExhausted: If the error is not retryable or retries ran out.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempts = 0

    while True:
        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            error_type = classify_error(e)
            attempts += 1
            config = configs.get(error_type)

            if config is None or attempts > config.max_retries:
                raise LLMRetryExhausted(agent, error_type, attempts, e) from e

            delay = compute_delay(config, attempts - 1)
            logger.warning(
                "'%s': %s (attempt %d/%d), retrying in %.1fs",
                agent, error_type, attempts, config.max_retries + 1, delay,
            )
            await asyncio.sleep(delay)

# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === GENERATION ORACLE ===
    llm_default_provider: str = "ollama"
    llm_default_model: str = "llama3.2"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1024

    # Provider credentials / endpoints
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # Per-component assignment (highest priority), "provider:model"
    llm_section_summarizer: str = ""
    llm_treatment_parser: str = ""
    llm_content_structurer: str = ""
    llm_leaflet_summarizer: str = ""

    # === Summarization ===
    summary_call_timeout_s: float = 20.0
    summary_inter_part_delay_s: float = 2.0
    summary_cache_max_age_days: int = 30

    # === Cache ===
    cache_backend: Literal["memory", "json", "sqlite", "redis"] = "sqlite"
    cache_root: Path = Path("~/.medileaf/cache")
    cache_redis_url: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("summary_call_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("summary_call_timeout_s must be > 0")
        return v

    @field_validator("summary_inter_part_delay_s")
    @classmethod
    def validate_delay(cls, v: float) -> float:  # noqa: N805
        if v < 0:
            raise ValueError("summary_inter_part_delay_s must be >= 0")
        return v

    @field_validator("summary_cache_max_age_days")
    @classmethod
    def validate_max_age(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("summary_cache_max_age_days must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def refine_call_timeout_s(self) -> float:
        """Explicit refinements get twice the base per-call timeout."""
        return self.summary_call_timeout_s * 2


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]

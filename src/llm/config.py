# src/llm/config.py — v1
"""Per-component LLM routing with cascade resolution.

Resolution order:
  1. Per-component setting (LLM_SECTION_SUMMARIZER=openai:gpt-4o-mini)
  2. Default provider + model (LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL)
  3. Hardcoded fallback (ollama:llama3.2)
"""

from __future__ import annotations

from dataclasses import dataclass

from medileaf.config.settings import Settings

COMPONENTS = (
    "section_summarizer",
    "treatment_parser",
    "content_structurer",
    "leaflet_summarizer",
)

_FALLBACK_PROVIDER = "ollama"
_FALLBACK_MODEL = "llama3.2"


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved LLM provider:model for a component."""

    provider: str
    model: str
    source: str  # "component", "default", or "fallback"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def _parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' string. Returns None if empty."""
    if not value or ":" not in value:
        return None
    provider, model = value.split(":", 1)
    return (provider.strip(), model.strip())


def resolve_llm(component: str, settings: Settings) -> LLMAssignment:
    """Resolve LLM assignment for a component."""
    parsed = _parse_assignment(getattr(settings, f"llm_{component}", ""))
    if parsed:
        return LLMAssignment(provider=parsed[0], model=parsed[1], source="component")

    if settings.llm_default_provider and settings.llm_default_model:
        return LLMAssignment(
            provider=settings.llm_default_provider,
            model=settings.llm_default_model,
            source="default",
        )

    return LLMAssignment(
        provider=_FALLBACK_PROVIDER,
        model=_FALLBACK_MODEL,
        source="fallback",
    )


def resolve_all(settings: Settings) -> dict[str, LLMAssignment]:
    """Resolve LLM assignments for all known components."""
    return {comp: resolve_llm(comp, settings) for comp in COMPONENTS}

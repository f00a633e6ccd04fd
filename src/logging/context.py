# src/logging/context.py — v1
"""Contextual logging support: attach document_id, section_number, operation to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per summarization request.
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_section_number: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "section_number", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document_id: str | None = None
    section_number: int | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_id=_document_id.get(),
        section_number=_section_number.get(),
        operation=_operation.get(),
    )


def set_request_context(
    document_id: str, section_number: int, operation: str | None = None
) -> None:
    """Set request-level context (called once per summary request)."""
    _document_id.set(document_id)
    _section_number.set(section_number)
    _operation.set(operation)


def clear_context() -> None:
    """Reset all context variables."""
    _document_id.set(None)
    _section_number.set(None)
    _operation.set(None)

# src/summarization/errors.py — v1
"""Typed failures surfaced by the summarization engine."""

from __future__ import annotations


class SummaryError(Exception):
    """Base class: no summary could be produced for a section."""

    def __init__(self, document_id: str, section_number: int, reason: str):
        self.document_id = document_id
        self.section_number = section_number
        self.reason = reason
        super().__init__(f"{document_id}#{section_number}: {reason}")


class OracleUnavailableError(SummaryError):
    """The generation oracle reported itself not ready. Not retried."""


class GenerationFailedError(SummaryError):
    """Every oracle attempt with a remaining fallback failed or timed out."""

# src/structured/treatment_parser.py — v1
"""Turn free-text treatment instructions into medication records.

The text is cut on line boundaries into chunks small enough that the oracle
does not truncate its JSON answer; each chunk is parsed independently and a
failing chunk only loses its own records.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from medileaf.config.settings import Settings, load_settings
from medileaf.core.models import MedicationRecord
from medileaf.llm.retry import with_retry
from medileaf.structured.json_recovery import parse_structured_list
from medileaf.summarization.prompts import load_template

if TYPE_CHECKING:
    from medileaf.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

MAX_CHUNK_CHARS = 1000
_AGENT = "treatment_parser"


def split_lines_into_chunks(text: str, max_chunk_chars: int = MAX_CHUNK_CHARS) -> list[str]:
    """Group non-blank lines into chunks of at most `max_chunk_chars`.

    A single line longer than the limit becomes its own chunk.
    """
    chunks: list[str] = []
    current: list[str] = []
    size = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        if current and size + len(line) > max_chunk_chars:
            chunks.append("\n".join(current))
            current, size = [], 0
        current.append(line)
        size += len(line) + 1
    if current:
        chunks.append("\n".join(current))
    return chunks


class TreatmentParser:
    """Extract MedicationRecord objects from prescription-style text."""

    def __init__(self, llm: BaseLLMClient, settings: Settings | None = None) -> None:
        settings = settings or load_settings()
        self._llm = llm
        self._timeout_s = settings.summary_call_timeout_s

    async def parse(self, text: str) -> list[MedicationRecord]:
        """Records found in `text`, deduplicated by name (case-insensitive).

        Returns an empty list when the oracle is unavailable.
        """
        try:
            available = await self._llm.is_available()
        except Exception as exc:
            logger.warning("Availability check failed: %s", exc)
            available = False
        if not available:
            logger.warning("Oracle not available for treatment parsing")
            return []

        chunks = split_lines_into_chunks(text)
        logger.debug("Processing %d treatment chunks", len(chunks))

        records: list[MedicationRecord] = []
        seen: set[str] = set()
        for i, chunk in enumerate(chunks, 1):
            for record in await self._parse_chunk(chunk, i):
                key = record.name.strip().casefold()
                if key and key not in seen:
                    seen.add(key)
                    records.append(record)

        logger.info("Parsed %d unique medications", len(records))
        return records

    async def _parse_chunk(self, chunk: str, index: int) -> list[MedicationRecord]:
        prompt = load_template("treatment.txt").format(text=chunk)
        try:
            raw = await asyncio.wait_for(
                with_retry(self._llm.generate, prompt, agent=_AGENT),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Treatment chunk %d timed out", index)
            return []
        except Exception as exc:
            logger.warning("Treatment chunk %d failed: %s", index, exc)
            return []

        records: list[MedicationRecord] = []
        for item in parse_structured_list(raw, required_key="name"):
            try:
                records.append(_to_record(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid medication record: %s", exc.errors()[0]["msg"])
        logger.debug("Chunk %d yielded %d medications", index, len(records))
        return records


def _to_record(item: dict) -> MedicationRecord:
    """Build a record, letting defaults cover missing or blank fields."""
    data: dict = {"name": str(item["name"]).strip()}
    dosage = item.get("dosage")
    if isinstance(dosage, str) and dosage.strip():
        data["dosage"] = dosage.strip()
    times = item.get("times")
    if isinstance(times, list) and times:
        data["times"] = [str(t) for t in times]
    frequency = item.get("frequency")
    if isinstance(frequency, str) and frequency.strip():
        data["frequency"] = frequency.strip()
    return MedicationRecord(**data)

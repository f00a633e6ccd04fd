# src/structured/json_recovery.py — v1
"""Recover a list of JSON records from untrusted LLM output.

Small models wrap JSON in prose or markdown fences, and long outputs get
cut off mid-object. Recovery runs in three stages, stopping at the first
that parses:

  1. Direct: the text between the first '[' and the last ']'.
  2. Repair: drop the trailing partial object, then close whatever
     braces/brackets are still open.
  3. Salvage: regex out every flat {...} object carrying the required key
     and parse each one on its own.

Records that are not objects, lack the key, or have a blank key are dropped;
duplicates (same key, case-insensitive) keep their first occurrence.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*$", re.MULTILINE)


def parse_structured_list(
    raw_text: str,
    required_key: str = "name",
    dedupe: bool = True,
) -> list[dict[str, Any]]:
    """Parse an LLM response expected to hold a JSON array of objects.

    Args:
        raw_text: Raw oracle response.
        required_key: Natural key every record must carry (non-blank).
        dedupe: Drop records whose key repeats, ignoring case.

    Returns:
        Recovered records in response order. Never raises.
    """
    text = strip_code_fences(raw_text or "")
    items = _parse_array(text, required_key)

    records: list[dict[str, Any]] = []
    seen: set[str] = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object record at index %d", i)
            continue
        key = str(item.get(required_key) or "").strip()
        if not key:
            continue
        if dedupe:
            folded = key.casefold()
            if folded in seen:
                continue
            seen.add(folded)
        records.append(item)
    return records


def strip_code_fences(text: str) -> str:
    """Remove markdown ``` fence lines around a JSON payload."""
    return _FENCE.sub("", text).strip()


def repair_truncated_array(truncated: str) -> str:
    """Close a JSON array that was cut off.

    A trailing partial object is cut back to the last complete "}," and the
    remaining open braces then brackets are closed.
    """
    text = truncated.rstrip()
    if text.endswith(","):
        text = text[:-1].rstrip()

    if not text.endswith(("}", "]")):
        cut = text.rfind("},")
        if cut != -1 and cut > text.rfind("}]"):
            text = text[: cut + 1]

    open_braces, open_brackets = _count_open(text)
    repaired = text + "}" * max(open_braces, 0) + "]" * max(open_brackets, 0)
    logger.debug("Repaired JSON ends with: ...%s", repaired[-50:])
    return repaired


def _parse_array(text: str, required_key: str) -> list[Any]:
    start = text.find("[")
    if start == -1:
        return _salvage_objects(text, required_key)

    end = text.rfind("]")
    if end > start:
        parsed = _try_load_list(text[start : end + 1])
        if parsed is not None:
            return parsed

    parsed = _try_load_list(repair_truncated_array(text[start:]))
    if parsed is not None:
        return parsed

    logger.warning("JSON array unrecoverable, salvaging individual objects")
    return _salvage_objects(text, required_key)


def _try_load_list(candidate: str) -> list[Any] | None:
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, list) else None


def _salvage_objects(text: str, required_key: str) -> list[Any]:
    pattern = re.compile(r"\{[^{}]*\"" + re.escape(required_key) + r"\"[^{}]*\}")
    recovered: list[Any] = []
    for match in pattern.finditer(text):
        try:
            recovered.append(json.loads(match.group(0)))
        except json.JSONDecodeError:
            logger.warning("Dropping malformed object: %s", match.group(0)[:50])
    logger.debug("Salvage recovered %d objects", len(recovered))
    return recovered


def _count_open(text: str) -> tuple[int, int]:
    """Net open braces and brackets, ignoring characters inside strings."""
    braces = brackets = 0
    in_string = escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            braces += 1
        elif ch == "}":
            braces -= 1
        elif ch == "[":
            brackets += 1
        elif ch == "]":
            brackets -= 1
    return braces, brackets

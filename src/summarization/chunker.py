# src/summarization/chunker.py — v1
"""Adaptive splitting of long section text for iterative summarization.

Part count grows with length (1 up to 2500 chars, then 2, 3, capped at 4).
Split points start at even offsets and slide to the nearest sentence end
within a window so no part starts mid-sentence when avoidable.
"""

from __future__ import annotations

SINGLE_CHUNK_THRESHOLD = 2500
TWO_PARTS_THRESHOLD = 5000
THREE_PARTS_THRESHOLD = 8000
MAX_PARTS = 4

SENTENCE_SEARCH_WINDOW = 200


def part_count(length: int) -> int:
    """Number of parts for content of `length` characters."""
    if length <= SINGLE_CHUNK_THRESHOLD:
        return 1
    if length <= TWO_PARTS_THRESHOLD:
        return 2
    if length <= THREE_PARTS_THRESHOLD:
        return 3
    return MAX_PARTS


def split_into_parts(text: str, num_parts: int) -> list[str]:
    """Split `text` into about `num_parts` stripped parts at sentence breaks.

    The last part absorbs the remainder. Parts that end up empty are
    dropped, so fewer than `num_parts` may be returned.
    """
    if num_parts <= 1:
        return [text]

    part_size = len(text) // num_parts
    parts: list[str] = []
    start = 0
    for _ in range(num_parts - 1):
        split_at = find_sentence_break(text, start + part_size)
        parts.append(text[start:split_at].strip())
        start = split_at
    parts.append(text[start:].strip())

    return [p for p in parts if p]


def find_sentence_break(
    text: str, target: int, window: int = SENTENCE_SEARCH_WINDOW
) -> int:
    """Offset just past a sentence end near `target`, else `target` itself.

    A sentence end is '.' or a newline followed by whitespace or the end of
    the text. Searches backward to `target - window` first, then forward to
    `target + window`.
    """
    target = min(max(target, 0), len(text))
    lower = max(0, target - window)
    upper = min(len(text), target + window)

    for i in range(target, lower - 1, -1):
        if _is_break(text, i):
            return i
    for i in range(target, upper):
        if _is_break(text, i):
            return i
    return target


def _is_break(text: str, i: int) -> bool:
    if i <= 0 or text[i - 1] not in ".\n":
        return False
    return i >= len(text) or text[i].isspace()

# src/structured/content_structurer.py — v1
"""Oracle-assisted structuring of a markup fragment into content blocks.

An alternative to the rule-based normalizer for fragments whose markup is
too poor to carry emphasis or subheadings. Any failure yields an empty list
and callers keep the normalizer output.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Comment

from medileaf.config.settings import Settings, load_settings
from medileaf.core.models import (
    Bold,
    BulletItem,
    ContentBlock,
    Italic,
    NumberedItem,
    Paragraph,
    SubHeading,
)
from medileaf.llm.retry import with_retry
from medileaf.structured.json_recovery import parse_structured_list
from medileaf.summarization.prompts import load_template

if TYPE_CHECKING:
    from medileaf.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

MAX_HTML_CHARS = 6000
_AGENT = "content_structurer"

_NOISE_TAGS = ["script", "style", "meta", "link", "header", "footer", "nav", "iframe"]
_NOISE_ATTRS = ("style", "class", "width", "height")
_WHITESPACE = re.compile(r"\s+")


def clean_markup(markup: str) -> str:
    """Drop non-content elements and presentational attributes."""
    soup = BeautifulSoup(markup, "html.parser")
    for el in soup.find_all(_NOISE_TAGS):
        el.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for el in soup.find_all(True):
        for attr in _NOISE_ATTRS:
            el.attrs.pop(attr, None)
    root = soup.body or soup
    return _WHITESPACE.sub(" ", root.decode_contents()).strip()


def parse_content_blocks(raw_text: str) -> list[ContentBlock]:
    """Map `{"t", "v", "n"}` records from an oracle answer onto blocks."""
    blocks: list[ContentBlock] = []
    for item in parse_structured_list(raw_text, required_key="v", dedupe=False):
        block = _to_block(item)
        if block is not None:
            blocks.append(block)
    return blocks


class ContentStructurer:
    """Ask the oracle to label the blocks of a markup fragment."""

    def __init__(self, llm: BaseLLMClient, settings: Settings | None = None) -> None:
        settings = settings or load_settings()
        self._llm = llm
        self._timeout_s = settings.summary_call_timeout_s

    async def structure(self, markup: str) -> list[ContentBlock]:
        try:
            if not await self._llm.is_available():
                return []
            html = clean_markup(markup)
            if len(html) > MAX_HTML_CHARS:
                html = html[:MAX_HTML_CHARS] + "..."
            prompt = load_template("content_blocks.txt").format(html=html)
            raw = await asyncio.wait_for(
                with_retry(self._llm.generate, prompt, agent=_AGENT),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Content structuring timed out")
            return []
        except Exception as exc:
            logger.warning("Content structuring failed: %s", exc)
            return []

        blocks = parse_content_blocks(raw)
        logger.debug("Oracle structured %d blocks", len(blocks))
        return blocks


def _to_block(item: dict[str, Any]) -> ContentBlock | None:
    text = str(item.get("v", "")).strip()
    if not text:
        return None
    kind = item.get("t")
    if kind == "b":
        return Bold(text=text)
    if kind == "i":
        return Italic(text=text)
    if kind == "li":
        return BulletItem(text=text)
    if kind == "ol":
        try:
            index = int(item.get("n", 1))
        except (TypeError, ValueError):
            index = 1
        return NumberedItem(index=index, text=text)
    if kind == "h":
        return SubHeading(text=text)
    return Paragraph(text=text)


def blocks_to_text(blocks: list[ContentBlock]) -> str:
    """Render blocks as plain text, one per line, keeping list markers."""
    lines: list[str] = []
    for block in blocks:
        if isinstance(block, BulletItem):
            lines.append(f"• {block.text}")
        elif isinstance(block, NumberedItem):
            lines.append(f"{block.index}. {block.text}")
        else:
            lines.append(block.text)
    return "\n".join(lines)

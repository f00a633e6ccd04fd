# src/extraction/content_normalizer.py — v1
"""Flatten section HTML into an ordered list of typed content blocks.

Pass 1 walks the markup tree and emits flat elements (paragraph, bullet,
numbered). Inline runs are split on <br> and every line is classified with
the same two patterns, so "• Take with food" typed as plain text still
becomes a bullet. Lists nested inside prose are pulled out as list items
instead of being swallowed by the surrounding paragraph. Short consecutive
paragraphs are then merged (labels split across nodes).

Pass 2 maps each element 1:1 onto a ContentBlock, dropping blank text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Literal

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from medileaf.core.models import BulletItem, ContentBlock, NumberedItem, Paragraph

logger = logging.getLogger(__name__)

BULLET_PATTERN = re.compile(r"^[•·◦▪▫‣⁃●○■□➢►✓\-–—*]\s+(.+)$", re.DOTALL)
NUMBERED_PATTERN = re.compile(r"^(\d{1,9})[.)\-]\s+(.+)$", re.DOTALL)

MERGE_MAX_LEN = 50
# Deeper subtrees are flattened to their text.
_MAX_DEPTH = 100

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]*>")

_LIST_TAGS = frozenset({"ul", "ol"})
_TEXT_BLOCK_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "table"})
_BLOCK_TAGS = frozenset(
    {
        "p", "div", "section", "article", "main", "header", "footer", "aside",
        "blockquote", "body", "html", "dl", "dt", "dd", "li", "center",
        "form", "fieldset", "figure", "nav",
    }
) | _LIST_TAGS | _TEXT_BLOCK_TAGS
_SKIP_TAGS = frozenset({"script", "style", "head", "title", "meta", "link", "noscript"})
_BLOCK_TAG_NAMES = sorted(_BLOCK_TAGS)
_BOLD_TAGS = frozenset({"b", "strong"})
_ITALIC_TAGS = frozenset({"i", "em", "cite"})


@dataclass
class _Element:
    kind: Literal["paragraph", "bullet", "numbered"]
    text: str
    index: int | None = None


def normalize_to_blocks(markup: str) -> list[ContentBlock]:
    """Normalize a markup fragment into display-ready content blocks.

    Never raises: if the tree walk fails, the whole fragment degrades to a
    single paragraph of its plain text.
    """
    if not markup or not markup.strip():
        return []
    soup: BeautifulSoup | None = None
    try:
        soup = BeautifulSoup(markup, "html.parser")
        elements = _merge_fragments(_Flattener().run(soup))
    except Exception:
        logger.warning("Content normalization failed, keeping plain text", exc_info=True)
        return _plain_text_fallback(markup, soup)
    return [block for block in map(_to_block, elements) if block is not None]


def classify_line(text: str) -> _Element | None:
    """Classify one line of plain text as bullet, numbered item or paragraph."""
    text = collapse_whitespace(text)
    if not text:
        return None
    bullet = BULLET_PATTERN.match(text)
    if bullet:
        return _Element("bullet", bullet.group(1).strip())
    numbered = NUMBERED_PATTERN.match(text)
    if numbered:
        return _Element("numbered", numbered.group(2).strip(), int(numbered.group(1)))
    return _Element("paragraph", text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _plain_text_fallback(markup: str, soup: BeautifulSoup | None) -> list[ContentBlock]:
    raw = soup.get_text(" ") if soup is not None else _TAG.sub(" ", markup)
    text = collapse_whitespace(raw)
    return [Paragraph(text=text)] if text else []


# === Pass 1 ===


class _Flattener:
    """Tree walk producing flat elements in document order."""

    def __init__(self) -> None:
        self._out: list[_Element] = []

    def run(self, root: Tag) -> list[_Element]:
        self._container(root, depth=0)
        return self._out

    def _walk(self, node: Tag, depth: int) -> None:
        name = node.name
        if name in _SKIP_TAGS:
            return
        if depth > _MAX_DEPTH:
            self._emit_paragraph(node.get_text(" "))
            return
        if name in _LIST_TAGS:
            for child in node.children:
                if isinstance(child, Tag):
                    self._walk(child, depth + 1)
        elif name == "li":
            self._list_item(node, depth)
        elif name in _TEXT_BLOCK_TAGS:
            self._emit_paragraph(node.get_text(" "))
        else:
            self._container(node, depth)

    def _container(self, node: Tag, depth: int) -> None:
        """Generic block: inline runs become lines, block children recurse.

        A nested list splits its parent into before/list/after, each part
        processed on its own.
        """
        buffer: list[str] = []
        for child in node.children:
            if isinstance(child, Tag) and _is_blockish(child):
                self._flush_lines(buffer)
                buffer = []
                self._walk(child, depth + 1)
            else:
                buffer.append(_inline_text(child, with_breaks=True))
        self._flush_lines(buffer)

    def _list_item(self, node: Tag, depth: int) -> None:
        text = collapse_whitespace(_item_text(node))
        parent = node.parent
        if text:
            if parent is not None and parent.name == "ol":
                self._out.append(_Element("numbered", text, _position_in_list(node)))
            else:
                self._out.append(_Element("bullet", text))
        for nested in _outer_lists(node):
            self._walk(nested, depth + 1)

    def _flush_lines(self, buffer: list[str]) -> None:
        for line in "".join(buffer).split("\n"):
            element = classify_line(line)
            if element is not None:
                self._out.append(element)

    def _emit_paragraph(self, text: str) -> None:
        text = collapse_whitespace(text)
        if text:
            self._out.append(_Element("paragraph", text))


def _is_blockish(node: Tag) -> bool:
    if node.name in _BLOCK_TAGS or node.name in _SKIP_TAGS:
        return True
    return node.find(_BLOCK_TAG_NAMES) is not None


def _inline_text(node: object, with_breaks: bool) -> str:
    """Text of an inline run; <br> becomes a newline when `with_breaks`."""
    if isinstance(node, PreformattedString):
        return ""
    if isinstance(node, NavigableString):
        return _WHITESPACE.sub(" ", str(node))
    if not isinstance(node, Tag) or node.name in _SKIP_TAGS:
        return ""
    if node.name == "br":
        return "\n" if with_breaks else " "
    return "".join(_inline_text(child, with_breaks) for child in node.children)


def _item_text(node: object) -> str:
    """List-item text with emphasis markers, skipping nested lists."""
    if isinstance(node, PreformattedString):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if not isinstance(node, Tag) or node.name in _SKIP_TAGS or node.name in _LIST_TAGS:
        return ""
    if node.name == "br":
        return " "
    inner = "".join(_item_text(child) for child in node.children)
    if not inner.strip():
        return inner
    if node.name in _BOLD_TAGS:
        return f"**{inner.strip()}**"
    if node.name in _ITALIC_TAGS:
        return f"*{inner.strip()}*"
    if node.name in _BLOCK_TAGS:
        return f" {inner} "
    return inner


def _outer_lists(node: Tag) -> Iterator[Tag]:
    """Lists below `node` that are not themselves inside another such list."""
    for child in node.children:
        if not isinstance(child, Tag):
            continue
        if child.name in _LIST_TAGS:
            yield child
        else:
            yield from _outer_lists(child)


def _position_in_list(item: Tag) -> int:
    return 1 + sum(
        1 for sib in item.find_previous_siblings() if isinstance(sib, Tag) and sib.name == "li"
    )


# === Fragment merge ===


def _merge_fragments(elements: list[_Element]) -> list[_Element]:
    """Greedy left-to-right merge of consecutive short paragraphs."""
    merged: list[_Element] = []
    pending: _Element | None = None

    for element in elements:
        if element.kind != "paragraph":
            if pending is not None:
                merged.append(pending)
                pending = None
            merged.append(element)
        elif pending is None:
            pending = _Element("paragraph", element.text)
        elif len(pending.text) < MERGE_MAX_LEN and len(element.text) < MERGE_MAX_LEN:
            pending.text = f"{pending.text} {element.text}"
        else:
            merged.append(pending)
            pending = _Element("paragraph", element.text)

    if pending is not None:
        merged.append(pending)
    return merged


# === Pass 2 ===


def _to_block(element: _Element) -> ContentBlock | None:
    text = element.text.strip()
    if not text:
        return None
    if element.kind == "bullet":
        return BulletItem(text=text)
    if element.kind == "numbered":
        return NumberedItem(index=1 if element.index is None else element.index, text=text)
    return Paragraph(text=text)

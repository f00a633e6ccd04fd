# src/extraction/section_extractor.py — v1
"""Recover the numbered section structure of a leaflet from its HTML.

Three strategies are tried in priority order and the first one that yields
a usable result wins (results are never blended):

  1. Semantic ids: <h1 id="N">Title</h1> followed by the content element.
  2. Index links: an in-document table of contents (<a href="#anchor">)
     whose link texts name at least three distinct sections.
  3. Heading scan: walk block/inline elements in document order looking for
     "N. Title" headings. Always succeeds, possibly with zero sections.

A failing strategy is logged and treated as "no result".
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from medileaf.core.models import Section
from medileaf.extraction.title_rules import (
    SECTION_NUMBERS,
    match_numbered_header,
    section_number_from_text,
)

logger = logging.getLogger(__name__)

_HEADING_TAGS = ("h1", "h2", "h3")
_MIN_INDEX_SECTIONS = 3
# Longer elements are body copy, never headings.
_MAX_HEADER_LEN = 200
_SCAN_SELECTOR = "p, div, h1, h2, h3, h4, h5, h6, header, li, strong, b, span"
_SCAN_CONTENT_TAGS = ("p", "li", "div")


def extract_sections(markup: str) -> list[Section]:
    """Split leaflet markup into ordered sections.

    Never raises: unparseable input or a document without recognisable
    headings yields an empty list.
    """
    try:
        soup = BeautifulSoup(markup or "", "html.parser")
    except Exception as exc:
        logger.warning("Could not parse leaflet markup: %s", exc)
        return []

    for name, strategy in (
        ("semantic-id", _by_semantic_ids),
        ("index-link", _by_index_links),
    ):
        try:
            sections = strategy(soup)
        except Exception:
            logger.warning("%s strategy failed, falling back", name, exc_info=True)
            continue
        if sections:
            logger.debug("Using %s strategy (%d sections)", name, len(sections))
            return sections

    try:
        sections = _by_heading_scan(soup)
    except Exception:
        logger.warning("heading-scan strategy failed", exc_info=True)
        return []
    logger.debug("Using heading-scan strategy (%d sections)", len(sections))
    return sections


# === Strategy 1 ===


def _by_semantic_ids(soup: BeautifulSoup) -> list[Section]:
    sections: list[Section] = []
    for number in SECTION_NUMBERS:
        header = soup.find(id=str(number))
        if not isinstance(header, Tag) or header.name not in _HEADING_TAGS:
            continue
        content_el = header.find_next_sibling()
        content = str(content_el) if content_el is not None else ""
        if content.strip():
            sections.append(
                Section(
                    number=number,
                    title=header.get_text(" ", strip=True),
                    content=content,
                )
            )
    return sections


# === Strategy 2 ===


def _by_index_links(soup: BeautifulSoup) -> list[Section]:
    targets: dict[int, str] = {}
    for link in soup.select('a[href^="#"]'):
        number = section_number_from_text(link.get_text(" ", strip=True))
        if number is not None and number not in targets:
            targets[number] = link["href"][1:]

    if len(targets) < _MIN_INDEX_SECTIONS:
        return []

    ordered = sorted(targets.items())
    sections: list[Section] = []
    for i, (number, anchor_id) in enumerate(ordered):
        next_id = ordered[i + 1][1] if i + 1 < len(ordered) else None
        start = _find_anchor(soup, anchor_id)
        if start is None:
            continue

        parts: list[str] = []
        for sibling in start.find_next_siblings():
            if next_id is not None and _holds_anchor(sibling, next_id):
                break
            parts.append(str(sibling))

        sections.append(
            Section(
                number=number,
                title=start.get_text(" ", strip=True) or f"Sección {number}",
                content="".join(parts),
            )
        )
    return sections


def _find_anchor(soup: BeautifulSoup, anchor_id: str) -> Tag | None:
    found = soup.find(id=anchor_id)
    if found is None:
        found = soup.find(attrs={"name": anchor_id})
    return found if isinstance(found, Tag) else None


def _holds_anchor(el: Tag, anchor_id: str) -> bool:
    """Whether `el` is, or contains, the element targeted by `anchor_id`."""
    if el.get("id") == anchor_id or el.get("name") == anchor_id:
        return True
    return (
        el.find(id=anchor_id) is not None
        or el.find(attrs={"name": anchor_id}) is not None
    )


# === Strategy 3 ===


def _by_heading_scan(soup: BeautifulSoup) -> list[Section]:
    container = soup.select_one(".texto_prospecto") or soup.body or soup

    sections: list[Section] = []
    current_number = 0
    current_title = ""
    content: list[str] = []

    for el in container.select(_SCAN_SELECTOR):
        text = el.get_text(" ", strip=True)
        if not text:
            continue
        if len(text) > _MAX_HEADER_LEN:
            if current_number > 0:
                content.append(f"<p>{el.decode_contents()}</p>")
            continue

        found = match_numbered_header(text)
        # Headers never go backward
        if found is not None and found > current_number:
            if current_number > 0:
                sections.append(
                    Section(number=current_number, title=current_title, content="".join(content))
                )
            current_number = found
            current_title = text
            content = []
        elif current_number > 0 and el.name in _SCAN_CONTENT_TAGS:
            content.append(str(el))

    if current_number > 0:
        sections.append(
            Section(number=current_number, title=current_title, content="".join(content))
        )
    return sections

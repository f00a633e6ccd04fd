# src/extraction/title_rules.py — v1
"""Keyword rules recognising the six standard leaflet section titles.

Leaflets follow the Spanish package-leaflet template:
  1. Qué es X y para qué se utiliza
  2. Qué necesita saber antes de empezar a tomar X
  3. Cómo tomar X
  4. Posibles efectos adversos
  5. Conservación de X
  6. Contenido del envase e información adicional
"""

from __future__ import annotations

import re

SECTION_NUMBERS = range(1, 7)

# Leading "<digit 1-6><separator><rest>" of a numbered heading.
HEADER_PATTERN = re.compile(r"^([1-6])[\s.\-)]+(.*)", re.DOTALL)

_TITLE_KEYWORDS: dict[int, tuple[str, ...]] = {
    1: ("qué es", "que es"),
    2: ("necesita saber", "antes de", "tenga cuidado"),
    3: ("cómo", "como", "usar"),
    4: ("efectos", "adversos"),
    5: ("conservación", "conservacion"),
    6: ("contenido", "envase", "información"),
}

# Unnumbered link texts, checked in order; first hit wins.
_LINK_KEYWORDS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (1, ("qué es", "que es")),
    (2, ("antes de", "necesita saber")),
    (3, ("cómo tomar", "como usar", "posología")),
    (4, ("efectos adversos",)),
    (5, ("conservación",)),
    (6, ("contenido del envase", "información adicional")),
)


def is_valid_section_title(number: int, title_part: str) -> bool:
    """Whether `title_part` reads like the title of section `number`."""
    keywords = _TITLE_KEYWORDS.get(number)
    if not keywords:
        return False
    lower = title_part.lower()
    return any(k in lower for k in keywords)


def section_number_from_text(text: str) -> int | None:
    """Classify index-link text to a section number, or None."""
    text = text.strip()
    lower = text.lower()

    for number in SECTION_NUMBERS:
        if text.startswith(str(number)) and any(c in text for c in ".- "):
            if is_valid_section_title(number, lower):
                return number

    for number, keywords in _LINK_KEYWORDS:
        if any(k in lower for k in keywords):
            return number
    return None


def match_numbered_header(text: str) -> int | None:
    """Section number of a `"3. Cómo tomar ..."` style heading, or None."""
    match = HEADER_PATTERN.match(text)
    if match is None:
        return None
    number = int(match.group(1))
    return number if is_valid_section_title(number, match.group(2)) else None

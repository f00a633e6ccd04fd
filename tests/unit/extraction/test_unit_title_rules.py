# tests/unit/extraction/test_unit_title_rules.py — v1
"""Tests for extraction/title_rules.py."""

from __future__ import annotations

import pytest

from medileaf.extraction.title_rules import (
    is_valid_section_title,
    match_numbered_header,
    section_number_from_text,
)


class TestIsValidSectionTitle:
    @pytest.mark.parametrize(
        "number,title",
        [
            (1, "Qué es Ibuprofeno y para qué se utiliza"),
            (2, "Qué necesita saber antes de empezar a tomar Ibuprofeno"),
            (3, "Cómo tomar Ibuprofeno"),
            (4, "Posibles efectos adversos"),
            (5, "Conservación de Ibuprofeno"),
            (6, "Contenido del envase e información adicional"),
        ],
    )
    def test_standard_titles(self, number, title):
        assert is_valid_section_title(number, title)

    def test_wrong_number_for_title(self):
        assert not is_valid_section_title(5, "Posibles efectos adversos")

    def test_unknown_number(self):
        assert not is_valid_section_title(7, "Qué es")


class TestMatchNumberedHeader:
    def test_dot_separator(self):
        assert match_numbered_header("3. Cómo tomar Ibuprofeno") == 3

    def test_parenthesis_separator(self):
        assert match_numbered_header("4) Posibles efectos adversos") == 4

    def test_number_without_matching_title(self):
        assert match_numbered_header("3. Conservación") is None

    def test_out_of_range_number(self):
        assert match_numbered_header("7. Qué es esto") is None

    def test_plain_text(self):
        assert match_numbered_header("Tome el comprimido con agua") is None


class TestSectionNumberFromText:
    def test_numbered_link(self):
        assert section_number_from_text("2. Qué necesita saber antes de tomar X") == 2

    def test_unnumbered_link_by_keyword(self):
        assert section_number_from_text("Posibles efectos adversos") == 4

    def test_unnumbered_storage_link(self):
        assert section_number_from_text("Conservación de X") == 5

    def test_unrelated_text(self):
        assert section_number_from_text("Volver arriba") is None

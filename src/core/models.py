# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# === SECTIONS ===


class Section(BaseModel):
    """One numbered, titled region of a leaflet.

    `content` is the raw markup of the region, exactly as found in the
    source document.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, le=6)
    title: str
    content: str


# === CONTENT BLOCKS ===


class Paragraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    text: str


class Bold(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bold"] = "bold"
    text: str


class Italic(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["italic"] = "italic"
    text: str


class BulletItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bullet"] = "bullet"
    text: str


class NumberedItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["numbered"] = "numbered"
    index: int
    text: str


class SubHeading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["subheading"] = "subheading"
    text: str


ContentBlock = Annotated[
    Union[Paragraph, Bold, Italic, BulletItem, NumberedItem, SubHeading],
    Field(discriminator="kind"),
]


class ContentBlockList(BaseModel):
    """Serializable wrapper for an ordered block sequence (CLI/JSON output)."""

    blocks: list[ContentBlock] = Field(default_factory=list)


# === REFINEMENT ===


class RefinementMode(str, Enum):
    """Named intent that changes the summary prompt, not the caching contract."""

    REGENERATE = "regenerate"
    MORE_DETAIL = "more_detail"
    SIMPLER = "simpler"
    FOCUS_DOSAGE = "focus_dosage"
    FOR_CHILD = "for_child"
    FOR_ELDERLY = "for_elderly"
    SERIOUS_EFFECTS_ONLY = "serious_effects_only"
    ALL_EFFECTS = "all_effects"
    ALCOHOL_INTERACTION = "alcohol_interaction"
    PREGNANCY_INTERACTION = "pregnancy_interaction"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def options_for_section(cls, section_title: str) -> list[RefinementMode]:
        """Modes worth offering for a section, based on its title."""
        general = [cls.REGENERATE, cls.MORE_DETAIL, cls.SIMPLER]
        title = section_title.lower()

        if any(k in title for k in ("tomar", "usar", "dosis", "posolog")):
            return general + [cls.FOCUS_DOSAGE, cls.FOR_CHILD, cls.FOR_ELDERLY]
        if "efectos adversos" in title or "efectos secundarios" in title:
            return general + [cls.SERIOUS_EFFECTS_ONLY, cls.ALL_EFFECTS]
        if any(
            k in title
            for k in ("antes de", "tener en cuenta", "precaucion", "interaccion")
        ):
            return general + [cls.ALCOHOL_INTERACTION, cls.PREGNANCY_INTERACTION]
        return general


_DISPLAY_NAMES: dict[RefinementMode, str] = {
    RefinementMode.REGENERATE: "Regenerar resumen",
    RefinementMode.MORE_DETAIL: "Más detallado",
    RefinementMode.SIMPLER: "Más simple",
    RefinementMode.FOCUS_DOSAGE: "Enfócate en dosis exactas",
    RefinementMode.FOR_CHILD: "Simplifica para niño",
    RefinementMode.FOR_ELDERLY: "Simplifica para anciano",
    RefinementMode.SERIOUS_EFFECTS_ONLY: "Solo efectos graves",
    RefinementMode.ALL_EFFECTS: "Lista todos los efectos",
    RefinementMode.ALCOHOL_INTERACTION: "¿Puedo beber alcohol?",
    RefinementMode.PREGNANCY_INTERACTION: "Embarazo/lactancia",
}


# === STRUCTURED RECORDS ===


class LeafletSummary(BaseModel):
    """Three-line overview of a whole leaflet."""

    indications: str
    dosage: str
    warnings: str


class MedicationRecord(BaseModel):
    """One medication recovered from free-text treatment instructions."""

    name: str
    dosage: str = "1 comprimido"
    times: list[str] = Field(default_factory=lambda: ["08:00"])
    frequency: str = "DAILY"

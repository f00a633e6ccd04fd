# src/summarization/prompts.py — v1
"""Prompt construction for section summaries and refinements.

Templates live in src/prompts/*.txt and are filled with str.format.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from medileaf.core.models import RefinementMode

_PROMPT_DIR = Path(__file__).parent.parent / "prompts"

_DOSAGE_KEYWORDS = ("dosis", "posolog", "tomar", "usar")

_SINGLE_DOSAGE_NOTE = (
    "\nIMPORTANTE: Si hay dosis específicas (mg, ml, comprimidos, etc.), "
    "INCLÚYELAS en el resumen."
)
_PART_DOSAGE_NOTE = " Si hay dosis específicas (mg, ml, comprimidos), inclúyelas."

_MODE_INSTRUCTIONS: dict[RefinementMode, str] = {
    RefinementMode.REGENERATE: (
        "Resume esta sección del prospecto en 3-4 frases claras para un paciente."
    ),
    RefinementMode.MORE_DETAIL: (
        "Resume esta sección de forma DETALLADA (5-6 frases). Incluye todos los "
        "puntos importantes que aparecen en el contenido."
    ),
    RefinementMode.SIMPLER: (
        "Resume el contenido en 2 frases MUY SIMPLES, como si explicaras a alguien "
        "sin conocimientos médicos."
    ),
    RefinementMode.FOCUS_DOSAGE: (
        "Del contenido proporcionado, extrae SOLO la información de DOSIS: cuántos "
        "mg/ml, cuántas veces al día, duración del tratamiento. Incluye los números "
        "exactos que aparecen."
    ),
    RefinementMode.FOR_CHILD: (
        "Del contenido proporcionado, extrae la información relevante para NIÑOS: "
        "dosis pediátricas, precauciones en menores, contraindicaciones en niños. "
        "Si no hay información específica para niños, indícalo."
    ),
    RefinementMode.FOR_ELDERLY: (
        "Del contenido proporcionado, extrae la información relevante para PERSONAS "
        "MAYORES: ajustes de dosis en ancianos, precauciones especiales. Si no hay "
        "información específica para ancianos, indícalo."
    ),
    RefinementMode.SERIOUS_EFFECTS_ONLY: (
        "Del contenido proporcionado, menciona SOLO los efectos adversos GRAVES o "
        "MUY FRECUENTES. Ignora los raros o leves."
    ),
    RefinementMode.ALL_EFFECTS: (
        "Del contenido proporcionado, menciona TODOS los efectos adversos, "
        "organizados por frecuencia si es posible."
    ),
    RefinementMode.ALCOHOL_INTERACTION: (
        "Del contenido proporcionado, busca y responde: ¿Se menciona algo sobre el "
        "alcohol? Si no se menciona, indícalo."
    ),
    RefinementMode.PREGNANCY_INTERACTION: (
        "Del contenido proporcionado, busca y responde: ¿Qué dice sobre embarazo y "
        "lactancia? Si no se menciona, indícalo."
    ),
}

# Applied in order
_MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^#+\s*", re.MULTILINE), ""),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"^[-*•]\s+", re.MULTILINE), ""),
    (re.compile(r"^\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
)


@lru_cache(maxsize=None)
def load_template(name: str) -> str:
    """Read a prompt template from the bundled prompts directory."""
    return (_PROMPT_DIR / name).read_text(encoding="utf-8")


def is_dosage_section(title: str) -> bool:
    lower = title.lower()
    return any(k in lower for k in _DOSAGE_KEYWORDS)


def single_chunk_prompt(title: str, content: str) -> str:
    return load_template("section_summary.txt").format(
        title=title,
        content=content,
        dosage_note=_SINGLE_DOSAGE_NOTE if is_dosage_section(title) else "",
    )


def first_part_prompt(title: str, part: str, total: int) -> str:
    return load_template("first_part.txt").format(
        title=title,
        content=part,
        total=total,
        dosage_note=_PART_DOSAGE_NOTE if is_dosage_section(title) else "",
    )


def refine_part_prompt(
    title: str, current_summary: str, part: str, part_number: int, total: int
) -> str:
    """Prompt folding part `part_number` (1-based) into the running summary."""
    is_last = part_number == total
    return load_template("refine_part.txt").format(
        title=title,
        current_summary=current_summary,
        content=part,
        done=part_number - 1,
        part=part_number,
        total=total,
        goal="genera el RESUMEN FINAL COMPLETO" if is_last else "actualiza el resumen",
        dosage_note=_PART_DOSAGE_NOTE if is_dosage_section(title) else "",
    )


def refinement_prompt(title: str, content: str, mode: RefinementMode) -> str:
    return load_template("refinement.txt").format(
        instruction=_MODE_INSTRUCTIONS[mode],
        title=title,
        content=content,
    )


def clean_markdown(text: str) -> str:
    """Strip residual markdown (headings, emphasis, list markers) from text."""
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()

# src/main.py — v1
"""CLI entry point: sections, blocks, summarize, overview, treatment, cache commands.

Usage:
    medileaf sections <file>
    medileaf blocks <file> [--section N] [--ai]
    medileaf summarize <file> --document-id ID --section N [--mode MODE]
    medileaf overview <file> [--document-id ID]
    medileaf treatment <file>
    medileaf cache {clear,expire,invalidate} [options]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from medileaf.version import __version__

if TYPE_CHECKING:
    from medileaf.config.settings import Settings
    from medileaf.core.models import Section

logger = logging.getLogger(__name__)

EXIT_SUMMARY_UNAVAILABLE = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from medileaf.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    from medileaf.core.models import RefinementMode

    parser = argparse.ArgumentParser(
        prog="medileaf",
        description=f"medileaf v{__version__}: medical leaflet sections and summaries",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- sections ---
    p_sections = subparsers.add_parser(
        "sections", help="List the numbered sections of a leaflet",
    )
    p_sections.add_argument("file", type=Path, help="Path to leaflet HTML")
    p_sections.set_defaults(func=_cmd_sections)

    # --- blocks ---
    p_blocks = subparsers.add_parser(
        "blocks", help="Normalize leaflet markup into content blocks (JSON)",
    )
    p_blocks.add_argument("file", type=Path, help="Path to leaflet HTML")
    p_blocks.add_argument(
        "--section", type=int, default=None,
        help="Only this section number (default: whole file)",
    )
    p_blocks.add_argument(
        "--ai", action="store_true",
        help="Label blocks with the oracle, falling back to the normalizer",
    )
    p_blocks.set_defaults(func=_cmd_blocks)

    # --- summarize ---
    p_summarize = subparsers.add_parser(
        "summarize", help="Summarize one section (cached)",
    )
    p_summarize.add_argument("file", type=Path, help="Path to leaflet HTML")
    p_summarize.add_argument(
        "--document-id", required=True,
        help="Stable document identifier used as cache key",
    )
    p_summarize.add_argument(
        "--section", type=int, required=True, help="Section number (1-6)",
    )
    p_summarize.add_argument(
        "--mode", choices=[m.value for m in RefinementMode], default=None,
        help="Refinement mode (bypasses the cache)",
    )
    p_summarize.set_defaults(func=_cmd_summarize)

    # --- overview ---
    p_overview = subparsers.add_parser(
        "overview", help="Indications, dosage and warnings of a whole leaflet (JSON)",
    )
    p_overview.add_argument("file", type=Path, help="Path to leaflet HTML")
    p_overview.add_argument(
        "--document-id", default=None,
        help="Stable document identifier; enables caching",
    )
    p_overview.set_defaults(func=_cmd_overview)

    # --- treatment ---
    p_treatment = subparsers.add_parser(
        "treatment", help="Extract medications from treatment text (JSON)",
    )
    p_treatment.add_argument("file", type=Path, help="Path to plain-text file")
    p_treatment.set_defaults(func=_cmd_treatment)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Summary cache maintenance")
    cache_sub = p_cache.add_subparsers(dest="cache_command")

    p_clear = cache_sub.add_parser("clear", help="Delete every cached summary")
    p_clear.set_defaults(func=_cmd_cache_clear)

    p_expire = cache_sub.add_parser("expire", help="Delete old cached summaries")
    p_expire.add_argument(
        "--max-age-days", type=int, default=None,
        help="Maximum entry age (default: SUMMARY_CACHE_MAX_AGE_DAYS)",
    )
    p_expire.set_defaults(func=_cmd_cache_expire)

    p_invalidate = cache_sub.add_parser(
        "invalidate", help="Delete cached summaries of one document",
    )
    p_invalidate.add_argument("--document-id", required=True)
    p_invalidate.add_argument(
        "--section", type=int, default=None,
        help="Only this section (default: all sections of the document)",
    )
    p_invalidate.set_defaults(func=_cmd_cache_invalidate)

    return parser


async def _cmd_sections(args: argparse.Namespace, settings: Settings) -> int:
    """Print one line per extracted section."""
    from medileaf.api.facade import extract_sections

    markup = _read_file(args.file)
    if markup is None:
        return 1

    sections = extract_sections(markup)
    if not sections:
        print("No sections found")
        return 0
    for section in sections:
        print(f"{section.number}. {section.title} ({len(section.content)} chars)")
    return 0


async def _cmd_blocks(args: argparse.Namespace, settings: Settings) -> int:
    """Print the normalized blocks of a file or one of its sections."""
    from medileaf.api.facade import normalize_to_blocks, structure_section_blocks
    from medileaf.core.models import ContentBlockList

    markup = _read_file(args.file)
    if markup is None:
        return 1

    if args.section is not None:
        section = _find_section(markup, args.section)
        if section is None:
            return 1
        markup = section.content

    if args.ai:
        blocks = await structure_section_blocks(markup, settings=settings)
    else:
        blocks = normalize_to_blocks(markup)
    result = ContentBlockList(blocks=blocks)
    print(result.model_dump_json(indent=2))
    return 0


async def _cmd_summarize(args: argparse.Namespace, settings: Settings) -> int:
    """Summarize one section, printing the text or an unavailable notice."""
    from medileaf.api.facade import blocks_to_text, build_engine, normalize_to_blocks
    from medileaf.core.models import RefinementMode
    from medileaf.summarization.errors import SummaryError

    markup = _read_file(args.file)
    if markup is None:
        return 1

    section = _find_section(markup, args.section)
    if section is None:
        return 1
    text = blocks_to_text(normalize_to_blocks(section.content)) or section.content

    engine = build_engine(settings)
    try:
        if args.mode is not None:
            summary = await engine.refine(
                args.document_id, section.number, section.title, text,
                RefinementMode(args.mode),
            )
        else:
            summary = await engine.get_summary(
                args.document_id, section.number, section.title, text,
            )
    except SummaryError as exc:
        print(f"Summary unavailable: {exc.reason}", file=sys.stderr)
        return EXIT_SUMMARY_UNAVAILABLE
    finally:
        engine.close()

    print(f"{section.number}. {section.title}\n")
    print(summary)
    return 0


async def _cmd_overview(args: argparse.Namespace, settings: Settings) -> int:
    """Print the leaflet overview as JSON, or an unavailable notice."""
    from medileaf.api.facade import get_leaflet_summary

    markup = _read_file(args.file)
    if markup is None:
        return 1

    summary = await get_leaflet_summary(markup, args.document_id, settings=settings)
    if summary is None:
        print("Summary unavailable", file=sys.stderr)
        return EXIT_SUMMARY_UNAVAILABLE
    print(summary.model_dump_json(indent=2))
    return 0


async def _cmd_treatment(args: argparse.Namespace, settings: Settings) -> int:
    """Print medications found in a treatment text as JSON."""
    from medileaf.llm.client_factory import create_component_client
    from medileaf.structured.treatment_parser import TreatmentParser

    text = _read_file(args.file)
    if text is None:
        return 1

    llm = create_component_client("treatment_parser", settings)
    records = await TreatmentParser(llm, settings).parse(text)
    print(json.dumps([r.model_dump() for r in records], indent=2, ensure_ascii=False))
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, settings: Settings) -> int:
    from medileaf.api.facade import build_engine

    engine = build_engine(settings)
    try:
        await engine.clear_cache()
    finally:
        engine.close()
    print("Cache cleared")
    return 0


async def _cmd_cache_expire(args: argparse.Namespace, settings: Settings) -> int:
    from medileaf.api.facade import build_engine

    engine = build_engine(settings)
    try:
        removed = await engine.clear_expired_cache(args.max_age_days)
    finally:
        engine.close()
    print(f"Removed {removed} expired entries")
    return 0


async def _cmd_cache_invalidate(args: argparse.Namespace, settings: Settings) -> int:
    from medileaf.api.facade import build_engine

    engine = build_engine(settings)
    try:
        if args.section is None:
            await engine.delete_document_cache(args.document_id)
        else:
            await engine.delete_section_cache(args.document_id, args.section)
    finally:
        engine.close()
    print(f"Invalidated {args.document_id}")
    return 0


def _read_file(path: Path) -> str | None:
    if not path.is_file():
        logger.error("File not found: %s", path)
        return None
    return path.read_text(encoding="utf-8", errors="replace")


def _find_section(markup: str, number: int) -> Section | None:
    from medileaf.api.facade import extract_sections

    for section in extract_sections(markup):
        if section.number == number:
            return section
    logger.error("Section %d not found", number)
    return None


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from medileaf.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())

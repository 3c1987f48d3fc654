"""Extract quality defect records from free text and export them to Excel.

Usage:
    # Fragments as arguments
    qc-extract "名称：123，件号：ABC，是否客服返修件：新品，供应商名称：XH，问题点：划伤，不良批次：647，不良数量：1"

    # Fragments from a file, separated by blank lines
    qc-extract --input reports.txt --output out/report.xlsx

    # From stdin, preview only
    cat reports.txt | qc-extract --input - --no-export
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import unicodedata
from collections.abc import Iterable, Sequence
from pathlib import Path

from qc_extractor.core.config import get_settings
from qc_extractor.core.exceptions import ExportValidationError
from qc_extractor.core.structured_logging import setup_logging
from qc_extractor.schemas.quality import ExtractedRecord, Fragment
from qc_extractor.services.ai.extraction import ExtractionClient
from qc_extractor.services.ai.interfaces import ExtractorProtocol
from qc_extractor.services.excel_export import export_records
from qc_extractor.services.fragment_store import FragmentStore


logger = logging.getLogger(__name__)

# Preview columns: (heading, record attribute)
PREVIEW_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Name (G)", "name"),
    ("Part # (F)", "part_number"),
    ("Supplier (N)", "supplier_name"),
    ("Problem (E)", "problem_point"),
    ("Batch (H)", "defect_batch"),
    ("Qty (I)", "defect_quantity"),
    ("Status (K)", "is_customer_return"),
)


def split_fragments(raw: str) -> list[str]:
    """Split text into fragments separated by one or more blank lines."""
    fragments: list[str] = []
    current: list[str] = []
    for line in raw.splitlines():
        if line.strip():
            current.append(line.rstrip())
        elif current:
            fragments.append("\n".join(current))
            current = []
    if current:
        fragments.append("\n".join(current))
    return fragments


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def load_store(store: FragmentStore, texts: Iterable[str]) -> int:
    """Fill *store* with *texts*; returns how many were dropped at the cap."""
    dropped = 0
    slot: Fragment | None = store.fragments[0]
    for text in texts:
        if slot is None:
            slot = store.add_fragment()
        if slot is None:
            dropped += 1
            continue
        store.update_text(slot.id, text)
        slot = None
    return dropped


def _display_width(value: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in "WF" else 1 for ch in value)


def _pad(value: str, width: int) -> str:
    return value + " " * (width - _display_width(value))


def format_preview(records: Sequence[ExtractedRecord]) -> str:
    """Render *records* as a plain-text table."""
    headings = [heading for heading, _ in PREVIEW_COLUMNS]
    rows = [[str(getattr(r, attr)) for _, attr in PREVIEW_COLUMNS] for r in records]
    widths = [
        max(_display_width(cell) for cell in column)
        for column in zip(headings, *rows, strict=False)
    ]
    lines = [
        "  ".join(_pad(cell, width) for cell, width in zip(row, widths, strict=True))
        for row in [headings, *rows]
    ]
    lines.insert(1, "  ".join("-" * width for width in widths))
    return "\n".join(line.rstrip() for line in lines)


def format_status(store: FragmentStore) -> str:
    lines = []
    for index, fragment in enumerate(store.fragments, start=1):
        label = fragment.status_label or ("(empty)" if not fragment.has_text else "")
        lines.append(f"{index:>2}. {label}")
    return "\n".join(lines)


def _log_transition(fragment: Fragment) -> None:
    logger.debug(
        "fragment %s: processing=%s result=%s error=%s",
        fragment.id,
        fragment.is_processing,
        fragment.result is not None,
        fragment.error,
    )


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qc-extract",
        description="Extract quality defect records with Gemini and export to Excel",
    )
    parser.add_argument(
        "fragments",
        nargs="*",
        help="Free-text defect reports, one per argument",
    )
    parser.add_argument(
        "--input",
        "-i",
        help="File with fragments separated by blank lines ('-' for stdin)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Spreadsheet path (default: EXPORT_FILENAME setting)",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Only print the preview table; do not write a spreadsheet",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


async def main(
    argv: Sequence[str] | None = None,
    extractor: ExtractorProtocol | None = None,
) -> int:
    args = _create_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    settings = get_settings()

    texts = list(args.fragments)
    if args.input:
        texts.extend(split_fragments(_read_input(args.input)))

    store = FragmentStore(extractor or ExtractionClient())
    store.subscribe(_log_transition)
    dropped = load_store(store, texts)
    if dropped:
        logger.warning(
            "Only %d fragments are supported; ignored %d",
            store.max_fragments,
            dropped,
        )

    if not store.has_input:
        print("No fragment text provided.", file=sys.stderr)
        return 2

    await store.process_all()

    print(format_status(store))
    records = store.results()
    if records:
        print()
        print(f"Extraction Preview ({store.processed_count} items)")
        print(format_preview(records))

    if args.no_export:
        return 0 if records else 1

    try:
        path = export_records(records, args.output or settings.EXPORT_FILENAME)
    except ExportValidationError as e:
        print(e.message, file=sys.stderr)
        return 1

    print(f"\nSaved {len(records)} rows to {path}")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

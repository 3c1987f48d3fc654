"""Spreadsheet export of extracted quality records.

The sheet layout is positional: a downstream template expects each field in
a fixed column (0-indexed E..N below), with columns A-D and L-M left blank
in every row, header included.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from qc_extractor.core.exceptions import ExportValidationError
from qc_extractor.schemas.quality import ExtractedRecord


logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "质量数据报表.xlsx"
SHEET_NAME = "Data"
TAG_VALUE = "NEIAS"
BLANK_COLUMN_WIDTH = 5


@dataclass(frozen=True, slots=True)
class ExportColumn:
    """One populated column of the export sheet."""

    index: int
    header: str
    width: int
    field: str | None = None
    constant: str | None = None

    @property
    def letter(self) -> str:
        return get_column_letter(self.index + 1)

    def value_for(self, record: ExtractedRecord) -> str | None:
        if self.field is None:
            return self.constant
        # Control characters are rejected by the xlsx writer
        return ILLEGAL_CHARACTERS_RE.sub("", str(getattr(record, self.field)))


EXPORT_LAYOUT: tuple[ExportColumn, ...] = (
    ExportColumn(4, "问题点", 20, field="problem_point"),
    ExportColumn(5, "件号", 15, field="part_number"),
    ExportColumn(6, "名称", 15, field="name"),
    ExportColumn(7, "不良批次", 12, field="defect_batch"),
    ExportColumn(8, "数量", 10, field="defect_quantity"),
    ExportColumn(9, "J列", 10, constant=TAG_VALUE),
    ExportColumn(10, "是否客服返修件", 15, field="is_customer_return"),
    ExportColumn(13, "供应商名称", 20, field="supplier_name"),
)

COLUMN_COUNT = max(column.index for column in EXPORT_LAYOUT) + 1


def header_row() -> list[str | None]:
    row: list[str | None] = [None] * COLUMN_COUNT
    for column in EXPORT_LAYOUT:
        row[column.index] = column.header
    return row


def record_row(record: ExtractedRecord) -> list[str | None]:
    row: list[str | None] = [None] * COLUMN_COUNT
    for column in EXPORT_LAYOUT:
        row[column.index] = column.value_for(record)
    return row


def build_rows(records: Sequence[ExtractedRecord]) -> list[list[str | None]]:
    """Header row followed by one row per record, in input order."""
    return [header_row(), *(record_row(record) for record in records)]


def build_workbook(records: Sequence[ExtractedRecord]) -> Workbook:
    """Build a single-sheet workbook holding *records*."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME

    for row in build_rows(records):
        sheet.append(row)

    # Extracted text is data; never let a leading "=" turn it into a formula
    for cells in sheet.iter_rows():
        for cell in cells:
            if cell.data_type == "f":
                cell.data_type = "s"

    widths = {column.index: column.width for column in EXPORT_LAYOUT}
    for index in range(COLUMN_COUNT):
        letter = get_column_letter(index + 1)
        sheet.column_dimensions[letter].width = widths.get(index, BLANK_COLUMN_WIDTH)

    return workbook


def export_records(
    records: Sequence[ExtractedRecord],
    destination: str | Path | BinaryIO = DEFAULT_FILENAME,
) -> Path | None:
    """Write *records* to an ``.xlsx`` file or binary stream.

    Returns the written path, or None when *destination* is a stream.

    Raises:
        ExportValidationError: If *records* is empty; nothing is written.
    """
    if not records:
        logger.warning("Export requested with no extracted records")
        raise ExportValidationError()

    workbook = build_workbook(records)

    if isinstance(destination, str | Path):
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(str(path))
        logger.info("Exported %d records to %s", len(records), path)
        return path

    workbook.save(destination)
    logger.info("Exported %d records to stream", len(records))
    return None

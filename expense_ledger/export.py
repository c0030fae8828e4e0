"""Spreadsheet export of the ledger.

Structure:
    * COLUMNS - fixed header labels and their display widths.
    * build_workbook - lay records out on a single ``Expenses`` sheet.
    * export - serialise the workbook to ``.xlsx`` bytes.
    * export_filename / write_export - dated file naming and saving.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .models import ExpenseRecord

LOGGER = logging.getLogger(__name__)

SHEET_NAME = "Expenses"
COLUMNS: Tuple[Tuple[str, int], ...] = (
    ("Date", 12),
    ("Category", 15),
    ("Description", 30),
    ("Amount", 10),
)
AMOUNT_FORMAT = "0.00"


def build_workbook(records: Iterable[ExpenseRecord]) -> Workbook:
    """Return a workbook with a header row and one row per record, in input order."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME

    sheet.append([label for label, _ in COLUMNS])
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for index, (_, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width

    for record in records:
        sheet.append([record.date, record.category, record.description, record.amount])
        row = sheet.max_row
        # Free text stays text even when it starts with "=".
        sheet.cell(row=row, column=3).data_type = "s"
        sheet.cell(row=row, column=len(COLUMNS)).number_format = AMOUNT_FORMAT
    return workbook


def export(records: Iterable[ExpenseRecord]) -> bytes:
    """Serialise ``records`` to the bytes of an .xlsx workbook."""
    workbook = build_workbook(records)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    """Return ``expenses_<YYYY-MM-DD>.xlsx`` for ``today`` (default: the current date)."""
    return f"expenses_{(today or date.today()).isoformat()}.xlsx"


def write_export(
    records: Iterable[ExpenseRecord],
    directory: Path,
    today: Optional[date] = None,
) -> Path:
    """Write the export under its dated filename inside ``directory``."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / export_filename(today)
    destination.write_bytes(export(records))
    LOGGER.info("Exported expenses to %s", destination)
    return destination

"""Tests for the spreadsheet export."""

from __future__ import annotations

import io
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from expense_ledger.export import COLUMNS, export, export_filename, write_export
from expense_ledger.models import ExpenseRecord


def _records():
    return (
        ExpenseRecord(id="b", date="2024-01-14", amount=Decimal("25.50"), category="Transportation", description="Bus"),
        ExpenseRecord(id="a", date="2024-02-01", amount=Decimal("50.00"), category="Food", description="-"),
        ExpenseRecord(id="c", date="2023-12-31", amount=Decimal("0.01"), category="Other", description="Gum"),
    )


def _rows(data: bytes):
    workbook = load_workbook(io.BytesIO(data))
    assert workbook.sheetnames == ["Expenses"]
    return workbook["Expenses"], list(workbook["Expenses"].iter_rows(values_only=True))


def test_export_writes_header_and_rows_in_input_order():
    records = _records()
    _, rows = _rows(export(records))

    assert len(rows) == len(records) + 1
    assert rows[0] == ("Date", "Category", "Description", "Amount")
    for row, record in zip(rows[1:], records):
        assert row[:3] == (record.date, record.category, record.description)
        assert Decimal(str(row[3])) == record.amount


def test_export_of_empty_ledger_has_only_header():
    _, rows = _rows(export(()))
    assert rows == [("Date", "Category", "Description", "Amount")]


def test_export_sets_fixed_column_widths_and_amount_format():
    sheet, _ = _rows(export(_records()))

    for letter, (_, width) in zip("ABCD", COLUMNS):
        assert sheet.column_dimensions[letter].width == width
    assert sheet["D2"].number_format == "0.00"


def test_export_accepts_any_iterable_without_consuming_ledger():
    records = _records()
    first = export(iter(records))
    _, rows = _rows(first)
    assert [row[0] for row in rows[1:]] == ["2024-01-14", "2024-02-01", "2023-12-31"]


def test_export_filename_uses_generation_date():
    assert export_filename(date(2024, 3, 5)) == "expenses_2024-03-05.xlsx"
    assert export_filename() == f"expenses_{date.today().isoformat()}.xlsx"


def test_write_export_creates_dated_file(tmp_path):
    target = write_export(_records(), tmp_path / "exports", today=date(2024, 3, 5))

    assert target == tmp_path / "exports" / "expenses_2024-03-05.xlsx"
    _, rows = _rows(target.read_bytes())
    assert len(rows) == 4


def test_export_keeps_formula_like_descriptions_as_text():
    record = ExpenseRecord(id="f", date="2024-03-01", amount=Decimal("4.00"), category="Other", description="=1+1")

    workbook = load_workbook(io.BytesIO(export([record])), data_only=True)
    cell = workbook["Expenses"].cell(row=2, column=3)

    assert cell.data_type == "s"
    assert cell.value == "=1+1"

# tests/test_parser.py

"""
Tests for spreadsheet parsing.
"""

from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from core.errors import MalformedFileError, ValidationError
from services.spreadsheet_parser import clean_cell, parse_spreadsheet


def build_xlsx(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_parse_xlsx_rows_and_types():
    content = build_xlsx([
        ["name", "address", "installments", "delivery_date"],
        ["Plaza Zañartu", "Zañartu 2566", 36, datetime(2026, 6, 30)],
        ["Torre Norte", None, None, None],
    ])

    sheet = parse_spreadsheet(content, "projects.xlsx")

    assert sheet.headers == ["name", "address", "installments", "delivery_date"]
    assert len(sheet.rows) == 2

    first = sheet.rows[0]
    assert first.row_number == 2
    assert first.values["name"] == "Plaza Zañartu"
    assert first.values["installments"] == 36
    assert first.values["delivery_date"] == datetime(2026, 6, 30)

    second = sheet.rows[1]
    assert second.row_number == 3
    assert second.values["address"] is None


def test_empty_rows_are_skipped_but_row_numbers_kept():
    content = build_xlsx([
        ["name"],
        ["A"],
        ["   "],
        ["B"],
    ])

    sheet = parse_spreadsheet(content, "projects.xlsx")

    assert [(r.row_number, r.values["name"]) for r in sheet.rows] == [(2, "A"), (4, "B")]


def test_blank_header_gets_a_placeholder():
    content = build_xlsx([
        ["name", None],
        ["A", "x"],
    ])

    sheet = parse_spreadsheet(content, "projects.xlsx")

    assert sheet.headers == ["name", "column_2"]


def test_parse_csv():
    content = "name,address\nTorre Sur,Av. Matta 100\n".encode("utf-8")

    sheet = parse_spreadsheet(content, "projects.csv")

    assert sheet.headers == ["name", "address"]
    assert sheet.rows[0].values == {"name": "Torre Sur", "address": "Av. Matta 100"}


def test_missing_file():
    with pytest.raises(ValidationError):
        parse_spreadsheet(b"", "projects.xlsx")


def test_malformed_file():
    with pytest.raises(MalformedFileError) as exc:
        parse_spreadsheet(b"this is not a workbook", "projects.xlsx")
    assert exc.value.status_code == 500


def test_too_large(monkeypatch):
    from core.config import settings

    monkeypatch.setattr(settings, "IMPORT_MAX_UPLOAD_BYTES", 10)
    with pytest.raises(ValidationError):
        parse_spreadsheet(b"x" * 11, "projects.csv")


def test_clean_cell():
    assert clean_cell(float("nan")) is None
    assert clean_cell("text") == "text"
    assert clean_cell(3) == 3

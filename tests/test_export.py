# tests/test_export.py

"""
Tests for the XLSX project export.
"""

from datetime import datetime

from openpyxl import load_workbook

from models.project import mappable_field_paths
from services.field_mapping import build_field_mapping
from services.project_export import export_projects_workbook
from services.spreadsheet_parser import parse_spreadsheet


PROJECT = {
    "id": "5f0c7b2a-1d3e-4a6b-9c8d-7e6f5a4b3c2d",
    "name": "Plaza Zañartu",
    "address": "Zañartu 2566",
    "delivery_date": "2026-06-30T15:00:00+00:00",
    "installments": 36,
    "location": {"lat": -33.47, "lng": -70.62},
    "gallery": ["a.jpg", "b.jpg"],
}


def test_workbook_layout():
    buf = export_projects_workbook([PROJECT])
    ws = load_workbook(buf).active

    headers = [c.value for c in ws[1]]
    assert headers == mappable_field_paths()
    assert ws.freeze_panes == "A2"
    assert ws["A1"].font.bold

    row = dict(zip(headers, [c.value for c in ws[2]]))
    assert row["name"] == "Plaza Zañartu"
    assert row["location.lat"] == -33.47
    assert row["gallery"] == "a.jpg, b.jpg"
    assert row["delivery_date"] == datetime(2026, 6, 30, 15, 0)
    assert row["county_name"] is None


def test_export_headers_map_back_onto_fields():
    buf = export_projects_workbook([PROJECT])
    sheet = parse_spreadsheet(buf.getvalue(), "projects.xlsx")

    mapping = build_field_mapping(sheet.headers)

    assert mapping.unmapped == []
    assert set(mapping.columns.values()) == set(mappable_field_paths())


def test_custom_columns():
    buf = export_projects_workbook([PROJECT], field_paths=["name", "address"])
    ws = load_workbook(buf).active

    assert [c.value for c in ws[1]] == ["name", "address"]
    assert [c.value for c in ws[2]] == ["Plaza Zañartu", "Zañartu 2566"]

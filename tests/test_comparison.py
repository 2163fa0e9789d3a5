# tests/test_comparison.py

"""
Tests for field-wise value comparison.
"""

from datetime import datetime, timedelta, timezone

import pytest

from services.comparison import normalize_id, parse_cell_value, to_datetime, values_equal


BASE = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_dates_within_tolerance_are_equal():
    assert values_equal(BASE, BASE + timedelta(seconds=59), "delivery_date")
    assert values_equal(BASE.isoformat(), (BASE - timedelta(seconds=59)).isoformat(), "updatedAt")


def test_dates_outside_tolerance_differ():
    assert not values_equal(BASE, BASE + timedelta(seconds=61), "delivery_date")
    assert not values_equal(BASE.isoformat(), (BASE + timedelta(seconds=61)).isoformat(), "updatedAt")


def test_date_formats_are_normalized():
    assert values_equal("2025-03-01T12:00:00Z", "2025-03-01T12:00:00+00:00", "delivery_date")
    assert values_equal(datetime(2025, 3, 1, 12, 0), "2025-03-01T12:00:00.000Z", "delivery_date")


def test_unparsable_date_never_equals_a_date():
    assert not values_equal("soon", BASE, "delivery_date")


def test_custom_tolerance():
    assert values_equal(BASE, BASE + timedelta(seconds=100), "delivery_date", tolerance_seconds=120)


@pytest.mark.parametrize("a,b", [(None, ""), ("", None), (None, None), ("", "")])
def test_null_and_empty_are_equal(a, b):
    assert values_equal(a, b, "commercialConditions")


def test_blank_vs_value_differs():
    assert not values_equal(None, "x", "commercialConditions")
    assert not values_equal("", 0, "installments")


def test_ids_ignore_quotes_and_whitespace():
    assert values_equal('"abc-123"', "abc-123", "country_id")
    assert values_equal(" 'abc-123' ", "abc-123", "country_id")
    assert not values_equal('"abc-123"', "abc-124", "country_id")
    assert normalize_id('  "x" ') == "x"


def test_numbers_and_types():
    assert values_equal(10, 10.0, "reservationValue")
    assert not values_equal("10", 10, "reservationValue")
    assert not values_equal(True, 1, "installments")


def test_objects_compare_key_by_key():
    assert values_equal({"lat": -33.4, "lng": -70.6}, {"lng": -70.6, "lat": -33.4}, "location")
    assert not values_equal({"lat": -33.4, "lng": -70.6}, {"lat": -33.4, "lng": -70.5}, "location")
    assert not values_equal({"lat": -33.4}, {"lat": -33.4, "lng": None}, "location")
    assert not values_equal({"lat": 1}, None, "location")


def test_lists_compare_in_order():
    assert values_equal(["a.jpg", "b.jpg"], ["a.jpg", "b.jpg"], "gallery")
    assert not values_equal(["a.jpg", "b.jpg"], ["b.jpg", "a.jpg"], "gallery")
    assert not values_equal(["a.jpg"], ["a.jpg", "b.jpg"], "gallery")


def test_to_datetime():
    assert to_datetime(None) is None
    assert to_datetime("not a date") is None
    assert to_datetime("2025-03-01") == datetime(2025, 3, 1, tzinfo=timezone.utc)
    assert to_datetime(datetime(2025, 3, 1)).tzinfo is not None


def test_parse_cell_value():
    assert parse_cell_value(datetime(2025, 3, 1, 10, 30), "address") == "2025-03-01"
    assert parse_cell_value(2566.0, "address") == "2566"
    assert parse_cell_value("Zañartu 2566", "address") == "Zañartu 2566"
    assert parse_cell_value(datetime(2025, 3, 1), "delivery_date") == "2025-03-01T00:00:00+00:00"
    assert parse_cell_value(5, "installments") == 5
    assert parse_cell_value(None, "address") is None

from __future__ import annotations

from datetime import date, datetime

import pytest

from statement_parser.dates import is_valid_date_string, normalize_to_iso, parse_flexible_date


@pytest.mark.parametrize(
    "text",
    ["2024-03-15", "03/15/2024", "15 Mar 2024", "March 15, 2024", "Mar 15, 2024", "15.03.2024", "03/15/24", "2024/03/15"],
)
def test_same_calendar_date_from_any_layout(text):
    parsed = parse_flexible_date(text)
    assert parsed is not None
    assert parsed.date() == date(2024, 3, 15)


def test_ambiguous_day_month_resolved_by_format_order():
    # month-first wins
    assert parse_flexible_date("03/04/2024").date() == date(2024, 3, 4)
    # day-first only when month-first is impossible
    assert parse_flexible_date("15/03/2024").date() == date(2024, 3, 15)


def test_preferred_format_is_tried_first():
    assert parse_flexible_date("03/04/2024", "%d/%m/%Y").date() == date(2024, 4, 3)
    # a preferred format that does not fit falls through to the common list
    assert parse_flexible_date("2024-03-15", "%d.%m.%Y").date() == date(2024, 3, 15)


def test_time_component_kept():
    assert parse_flexible_date("15.03.2024 08:15") == datetime(2024, 3, 15, 8, 15)
    assert parse_flexible_date("03/15/2024 23:59:01") == datetime(2024, 3, 15, 23, 59, 1)


def test_generic_fallback():
    assert parse_flexible_date("2024-03-15T10:30:00") == datetime(2024, 3, 15, 10, 30)


@pytest.mark.parametrize("value", ["", "   ", None, "hello world", "12345", "31/31/2024", 20240315])
def test_unparseable_returns_none(value):
    assert parse_flexible_date(value) is None


def test_date_objects_pass_through():
    assert parse_flexible_date(date(2024, 1, 2)) == datetime(2024, 1, 2)
    now = datetime(2024, 1, 2, 3, 4)
    assert parse_flexible_date(now) is now


def test_helpers():
    assert is_valid_date_string("03/15/2024")
    assert not is_valid_date_string("soon")
    assert normalize_to_iso("03/15/2024") == "2024-03-15T00:00:00"
    assert normalize_to_iso("soon") is None

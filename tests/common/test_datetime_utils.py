from datetime import date, datetime, timezone

import pytest

from src.parking_system.parking_system.common.datetime_utils import (
    add_months,
    format_display,
    parse_flexible_datetime,
    parse_iso_date,
)
from src.parking_system.parking_system.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2025-01-07T14:30:00", datetime(2025, 1, 7, 14, 30)),
        ("2025-01-07 14:30", datetime(2025, 1, 7, 14, 30)),
        ("2025.01.07, 14:30", datetime(2025, 1, 7, 14, 30)),
        ("2025.1.7 09:05", datetime(2025, 1, 7, 9, 5)),
        ("01/07/2025, 08:42 AM", datetime(2025, 1, 7, 8, 42)),
        ("01/07/2025, 08:42 pm", datetime(2025, 1, 7, 20, 42)),
        ("01/07/2025 12:05 AM", datetime(2025, 1, 7, 0, 5)),
    ],
)
def test_parse_flexible_datetime(text, expected):
    assert parse_flexible_datetime(text) == expected


def test_parse_flexible_datetime_converts_aware_to_local():
    expected = datetime(2025, 1, 7, 14, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    parsed = parse_flexible_datetime("2025-01-07T14:30:00Z")
    assert parsed.tzinfo is None
    assert parsed == expected


@pytest.mark.parametrize("text", ["", "yesterday", "2025.13.40, 10:00", "13/45/2025, 10:00 AM"])
def test_parse_flexible_datetime_rejects_garbage(text):
    with pytest.raises(ValidationError):
        parse_flexible_datetime(text)


def test_parse_iso_date():
    assert parse_iso_date(" 2025-02-28 ") == date(2025, 2, 28)
    with pytest.raises(ValidationError):
        parse_iso_date("28/02/2025")


def test_format_display():
    assert format_display(datetime(2025, 3, 1, 7, 5)) == "2025/03/01, 07:05"
    assert format_display(None) == "-"


def test_add_months_crosses_years():
    assert add_months(date(2025, 3, 31), -5) == date(2024, 10, 1)
    assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 1)

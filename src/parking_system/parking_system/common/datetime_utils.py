from __future__ import annotations

import re
from datetime import date, datetime

from ..core.exceptions import ValidationError

_DOTTED_RE = re.compile(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})[,\s]+(\d{1,2}):(\d{2})")
_US_FORMATS = ("%m/%d/%Y, %I:%M %p", "%m/%d/%Y %I:%M %p", "%m/%d/%Y, %I:%M:%S %p")

def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")

def parse_flexible_datetime(value: str) -> datetime:
    """Parse the timestamp formats found in stored and imported records.

    Accepted:
    - ISO 8601 ("2025-01-07T14:30:00", optionally with offset or trailing Z)
    - dotted local format ("2025.01.07, 14:30")
    - US format with AM/PM ("07/01/2025, 08:42 AM")

    Aware values are converted to naive local time.
    """

    text = (value or "").strip()
    if not text:
        raise ValidationError("Empty timestamp")

    if "AM" in text.upper() or "PM" in text.upper():
        for fmt in _US_FORMATS:
            try:
                return datetime.strptime(text.upper(), fmt)
            except ValueError:
                continue
        raise ValidationError(f"Unrecognized timestamp: {value!r}")

    m = _DOTTED_RE.match(text)
    if m:
        year, month, day, hour, minute = (int(g) for g in m.groups())
        try:
            return datetime(year, month, day, hour, minute)
        except ValueError:
            raise ValidationError(f"Unrecognized timestamp: {value!r}")

    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        raise ValidationError(f"Unrecognized timestamp: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

def format_display(value: datetime | None) -> str:
    """YYYY/MM/DD, HH:MM used across lists and exports."""
    if value is None:
        return "-"
    return value.strftime("%Y/%m/%d, %H:%M")


def month_start(value: date) -> date:
    return value.replace(day=1)

def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + int(months)
    return date(index // 12, index % 12 + 1, 1)

"""Entry ticket codes of the form ``PARK-<record_id>``.

Attendants hand out the ticket at entry and scan it at the exit gate.
"""

from __future__ import annotations

from ..core.constants import TICKET_PREFIX
from ..core.exceptions import ValidationError


def ticket_token(record_id: int) -> str:
    return f"{TICKET_PREFIX}{int(record_id)}"


def parse_ticket_token(token: str) -> int:
    value = (token or "").strip().upper()
    if not value.startswith(TICKET_PREFIX):
        raise ValidationError("Invalid ticket code")
    digits = value[len(TICKET_PREFIX):]
    if not digits.isdigit():
        raise ValidationError("Invalid ticket code")
    return int(digits)

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account tiers used for access control."""

    MANAGER = "manager"
    EMPLOYEE = "employee"
    DRIVER = "driver"


class RecordStatus(str, Enum):
    """Lifecycle of a parking record."""

    PARKED = "parked"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"

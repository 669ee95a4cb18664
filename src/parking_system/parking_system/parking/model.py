from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import PaymentMethod, PaymentStatus, RecordStatus


@dataclass(frozen=True)
class ParkingRecord:
    """Domain entity: one vehicle's stay in the lot."""

    record_id: int
    plate_number: str
    car_brand: str
    attendant_names: tuple[str, ...]
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: RecordStatus = RecordStatus.PARKED
    duration_hours: Optional[int] = None
    amount: int = 0
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: Optional[PaymentMethod] = None
    paid_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    image_count: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.PARKED and self.exit_time is None

    @property
    def is_completed(self) -> bool:
        return not self.is_active

    @property
    def attendants_label(self) -> str:
        return ", ".join(self.attendant_names)

    def handled_by(self, name: str) -> bool:
        return bool(name) and name in self.attendant_names


@dataclass(frozen=True)
class ParkingImage:
    image_id: int
    record_id: int
    data: bytes
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class NewEntry:
    """Input collected by the entry form."""

    plate_number: str
    car_brand: str
    attendant_names: list[str] = field(default_factory=list)
    images: list[bytes] = field(default_factory=list)

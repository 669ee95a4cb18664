from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod, PaymentStatus
from .model import ParkingImage, ParkingRecord


class ParkingRecordRepository(Protocol):
    def create_entry(
        self,
        *,
        plate_number: str,
        car_brand: str,
        attendant_names: Sequence[str],
        entry_time: datetime,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[ParkingRecord]:
        raise NotImplementedError

    def get_active_by_plate(self, plate_number: str) -> Optional[ParkingRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[ParkingRecord]:
        """Every record, newest entry first."""
        raise NotImplementedError

    def complete_exit(
        self,
        *,
        record_id: int,
        exit_time: datetime,
        duration_hours: int,
        amount: int,
    ) -> bool:
        raise NotImplementedError

    def update_payment(
        self,
        *,
        record_id: int,
        payment_status: PaymentStatus,
        payment_method: Optional[PaymentMethod],
        paid_at: Optional[datetime],
        updated_at: datetime,
        updated_by: str,
    ) -> bool:
        raise NotImplementedError

    def delete_many(self, record_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def add_image(self, *, record_id: int, data: bytes, content_type: str = "image/jpeg") -> int:
        raise NotImplementedError

    def list_images(self, record_id: int) -> Sequence[ParkingImage]:
        raise NotImplementedError

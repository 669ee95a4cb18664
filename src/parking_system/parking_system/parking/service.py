from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.images import normalize_image
from ..common.validators import clean_names, require_non_empty
from ..core.constants import DEFAULT_RECENT_LIMIT, MAX_IMAGES_PER_RECORD
from ..core.enums import PaymentMethod, PaymentStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..pricing.model import ExitQuote
from ..pricing.service import PricingService
from ..users.service import SessionUser
from .model import NewEntry, ParkingImage, ParkingRecord
from .repository import ParkingRecordRepository
from .tickets import parse_ticket_token

logger = logging.getLogger(__name__)


def visible_to(record: ParkingRecord, user: SessionUser) -> bool:
    """Employees see only the cars they handle; managers and drivers see the whole lot."""
    if user.role == Role.EMPLOYEE:
        return record.handled_by(user.name)
    return True


class ParkingService:
    """Use cases around a vehicle's stay: entry, exit, payment and listings."""

    def __init__(self, records: ParkingRecordRepository, pricing: PricingService):
        self._records = records
        self._pricing = pricing

    def _get(self, record_id: int) -> ParkingRecord:
        record = self._records.get_by_id(int(record_id))
        if not record:
            raise NotFoundError("Parking record not found")
        return record

    def get(self, record_id: int) -> ParkingRecord:
        return self._get(record_id)

    # ----- entry / exit -------------------------------------------------

    def register_entry(self, current_user: SessionUser, entry: NewEntry, *, now: Optional[datetime] = None) -> int:
        now = now or datetime.now()

        plate = require_non_empty(entry.plate_number, "Plate number").upper()
        brand = require_non_empty(entry.car_brand, "Car brand").upper()
        attendants = clean_names(entry.attendant_names)
        if not attendants:
            raise ValidationError("Select at least one attendant")

        if len(entry.images) > MAX_IMAGES_PER_RECORD:
            raise ValidationError(f"At most {MAX_IMAGES_PER_RECORD} photos per vehicle")
        images = [normalize_image(data) for data in entry.images if data]

        if self._records.get_active_by_plate(plate):
            raise ValidationError(f"Vehicle {plate} is already parked")

        record_id = self._records.create_entry(
            plate_number=plate,
            car_brand=brand,
            attendant_names=attendants,
            entry_time=now,
            created_by=current_user.user_id,
        )
        for data in images:
            self._records.add_image(record_id=record_id, data=data)

        logger.info("entry %s: %s (%s) by %s", record_id, plate, brand, current_user.user_id)
        return record_id

    def preview_exit(self, record_id: int, *, now: Optional[datetime] = None) -> ExitQuote:
        record = self._records.get_by_id(int(record_id))
        if not record:
            raise ValidationError("Parking record not found")
        if not record.is_active:
            raise ValidationError("This vehicle has already left")
        return self._pricing.quote(record.entry_time, now or datetime.now())

    def confirm_exit(self, record_id: int, *, now: Optional[datetime] = None) -> ExitQuote:
        quote = self.preview_exit(record_id, now=now)
        ok = self._records.complete_exit(
            record_id=int(record_id),
            exit_time=quote.exit_time,
            duration_hours=quote.duration_hours,
            amount=quote.fee,
        )
        if not ok:
            raise ValidationError("This vehicle has already left")

        logger.info("exit %s: %sh, fee=%s", record_id, quote.duration_hours, quote.fee)
        return quote

    def exit_by_ticket(self, token: str, *, now: Optional[datetime] = None) -> tuple[ParkingRecord, ExitQuote]:
        record_id = parse_ticket_token(token)
        quote = self.confirm_exit(record_id, now=now)
        return self._get(record_id), quote

    def current_fee(self, record: ParkingRecord, *, now: Optional[datetime] = None) -> int:
        """Stored amount once completed; running fee while parked."""
        if record.is_active:
            return self._pricing.current_fee(record.entry_time, now)
        return record.amount

    # ----- listings -----------------------------------------------------

    def _visible(self, current_user: SessionUser) -> list[ParkingRecord]:
        return [r for r in self._records.list_all() if visible_to(r, current_user)]

    def list_active(self, current_user: SessionUser, *, search: str = "") -> list[ParkingRecord]:
        needle = (search or "").strip().lower()
        rows = [r for r in self._visible(current_user) if r.is_active]
        if needle:
            rows = [r for r in rows if needle in r.plate_number.lower()]
        return _newest_first(rows)

    def list_recent(self, current_user: SessionUser, *, limit: int = DEFAULT_RECENT_LIMIT) -> list[ParkingRecord]:
        return _newest_first(self._visible(current_user))[: int(limit)]

    def list_history(
        self,
        current_user: SessionUser,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        plate: str = "",
    ) -> list[ParkingRecord]:
        needle = (plate or "").strip().lower()
        rows = [r for r in self._visible(current_user) if r.is_completed]
        if year:
            rows = [r for r in rows if r.entry_time.year == int(year)]
        if month:
            rows = [r for r in rows if r.entry_time.month == int(month)]
        if needle:
            rows = [r for r in rows if needle in r.plate_number.lower()]
        return _newest_first(rows)

    def available_years(self, current_user: SessionUser) -> list[int]:
        return sorted({r.entry_time.year for r in self._visible(current_user)}, reverse=True)

    # ----- manager actions ----------------------------------------------

    def update_payment(
        self,
        *,
        current_role: Role,
        record_id: int,
        status: PaymentStatus,
        method: Optional[PaymentMethod] = None,
        updated_by: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can change payment status")

        now = now or datetime.now()
        record = self._get(record_id)
        if status == PaymentStatus.PAID and method is None:
            raise ValidationError("Choose a payment method")

        self._records.update_payment(
            record_id=record.record_id,
            payment_status=status,
            payment_method=method if status == PaymentStatus.PAID else None,
            paid_at=now if status == PaymentStatus.PAID else None,
            updated_at=now,
            updated_by=updated_by or "Manager",
        )
        logger.info("record %s marked %s", record.record_id, status.value)

    def delete_record(self, *, current_role: Role, record_id: int) -> None:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can delete records")
        record = self._get(record_id)
        self._records.delete_many([record.record_id])
        logger.info("record %s deleted", record.record_id)

    def images(self, record_id: int) -> Sequence[ParkingImage]:
        return self._records.list_images(int(record_id))

    def get_image(self, record_id: int, index: int) -> ParkingImage:
        images = self.images(record_id)
        if index < 0 or index >= len(images):
            raise NotFoundError("Image not found")
        return images[index]


def _newest_first(rows: list[ParkingRecord]) -> list[ParkingRecord]:
    return sorted(rows, key=lambda r: (r.entry_time, r.record_id), reverse=True)

from __future__ import annotations

import io
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

from src.parking_system.parking_system.core.enums import RecordStatus, Role
from src.parking_system.parking_system.parking.model import ParkingImage, ParkingRecord
from src.parking_system.parking_system.parking.service import ParkingService
from src.parking_system.parking_system.pricing.model import PricingConfig
from src.parking_system.parking_system.pricing.service import PricingService
from src.parking_system.parking_system.settings.model import SiteConfig
from src.parking_system.parking_system.users.model import User
from src.parking_system.parking_system.users.service import SessionUser


class InMemoryUsers:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}
        self.images: dict[int, bytes] = {}

    def add(self, *, name: str, email: str, password: str = "secret123", role: Role = Role.EMPLOYEE, is_active=True):
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            phone=None,
            position=None,
            start_date=None,
        )
        if not is_active:
            self.set_active(user_id, is_active=False)
        return self.users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, phone, position, start_date) -> int:
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            phone=phone,
            position=position,
            start_date=start_date,
        )
        return user_id

    def update_details(self, user_id, *, name, email, phone) -> bool:
        self.users[user_id] = replace(self.users[user_id], name=name, email=email, phone=phone)
        return True

    def update_password(self, user_id, *, password_hash) -> bool:
        self.users[user_id] = replace(self.users[user_id], password_hash=password_hash)
        return True

    def set_profile_image(self, user_id, *, image) -> bool:
        self.images[user_id] = image
        return True

    def get_profile_image(self, user_id):
        return self.images.get(user_id)

    def set_active(self, user_id, *, is_active) -> bool:
        self.users[user_id] = replace(self.users[user_id], is_active=is_active)
        return True

    def delete_by_id(self, user_id) -> bool:
        return self.users.pop(int(user_id), None) is not None

    def list_by_role(self, role):
        return [u for u in self.users.values() if u.role == role]


class InMemoryPricing:
    def __init__(self, config: Optional[PricingConfig] = None):
        self.config = config

    def get(self):
        return self.config

    def save(self, config):
        self.config = config


class InMemorySite:
    def __init__(self, config: Optional[SiteConfig] = None):
        self.config = config

    def get(self):
        return self.config

    def save(self, config):
        self.config = config


class InMemoryRecords:
    def __init__(self):
        self._next_id = 1
        self.records: dict[int, ParkingRecord] = {}
        self.images: dict[int, list[ParkingImage]] = {}
        self.deleted: list[int] = []

    def add(self, record: ParkingRecord) -> ParkingRecord:
        self.records[record.record_id] = record
        self._next_id = max(self._next_id, record.record_id + 1)
        return record

    def create_entry(self, *, plate_number, car_brand, attendant_names, entry_time, created_by) -> int:
        record_id = self._next_id
        self._next_id += 1
        self.records[record_id] = ParkingRecord(
            record_id=record_id,
            plate_number=plate_number,
            car_brand=car_brand,
            attendant_names=tuple(attendant_names),
            entry_time=entry_time,
            created_by=created_by,
        )
        return record_id

    def get_by_id(self, record_id):
        record = self.records.get(int(record_id))
        if record:
            return replace(record, image_count=len(self.images.get(record.record_id, [])))
        return None

    def get_active_by_plate(self, plate_number):
        return next((r for r in self.records.values() if r.plate_number == plate_number and r.is_active), None)

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: r.entry_time, reverse=True)

    def complete_exit(self, *, record_id, exit_time, duration_hours, amount) -> bool:
        record = self.records.get(record_id)
        if not record or not record.is_active:
            return False
        self.records[record_id] = replace(
            record,
            exit_time=exit_time,
            status=RecordStatus.COMPLETED,
            duration_hours=duration_hours,
            amount=amount,
        )
        return True

    def update_payment(self, *, record_id, payment_status, payment_method, paid_at, updated_at, updated_by) -> bool:
        self.records[record_id] = replace(
            self.records[record_id],
            payment_status=payment_status,
            payment_method=payment_method,
            paid_at=paid_at,
            updated_at=updated_at,
            updated_by=updated_by,
        )
        return True

    def delete_many(self, record_ids) -> int:
        count = 0
        for record_id in record_ids:
            if self.records.pop(record_id, None) is not None:
                self.images.pop(record_id, None)
                self.deleted.append(record_id)
                count += 1
        return count

    def add_image(self, *, record_id, data, content_type="image/jpeg") -> int:
        images = self.images.setdefault(record_id, [])
        image_id = sum(len(v) for v in self.images.values()) + 1
        images.append(ParkingImage(image_id=image_id, record_id=record_id, data=data, content_type=content_type))
        return image_id

    def list_images(self, record_id):
        return list(self.images.get(record_id, []))


def completed(record_id: int, plate: str, entry: datetime, exit_: datetime, *, amount: int, hours: int, **kwargs):
    """A finished stay, for dashboards and reports."""
    return ParkingRecord(
        record_id=record_id,
        plate_number=plate,
        car_brand=kwargs.pop("car_brand", "TOYOTA"),
        attendant_names=kwargs.pop("attendant_names", ("Alice",)),
        entry_time=entry,
        exit_time=exit_,
        status=RecordStatus.COMPLETED,
        duration_hours=hours,
        amount=amount,
        **kwargs,
    )


def parked(record_id: int, plate: str, entry: datetime, **kwargs):
    return ParkingRecord(
        record_id=record_id,
        plate_number=plate,
        car_brand=kwargs.pop("car_brand", "HONDA"),
        attendant_names=kwargs.pop("attendant_names", ("Alice",)),
        entry_time=entry,
        **kwargs,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 14, 30, 0)


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (40, 30), color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def manager() -> SessionUser:
    return SessionUser(user_id=1, name="Manager", email="manager@parking.local", role=Role.MANAGER)


@pytest.fixture
def alice() -> SessionUser:
    return SessionUser(user_id=2, name="Alice", email="alice@parking.local", role=Role.EMPLOYEE)


@pytest.fixture
def bob() -> SessionUser:
    return SessionUser(user_id=3, name="Bob", email="bob@parking.local", role=Role.EMPLOYEE)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def pricing_repo() -> InMemoryPricing:
    return InMemoryPricing(PricingConfig(hourly_rate=1000))


@pytest.fixture
def site_repo() -> InMemorySite:
    return InMemorySite()


@pytest.fixture
def records_repo() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def pricing_service(pricing_repo) -> PricingService:
    return PricingService(pricing_repo)


@pytest.fixture
def parking_service(records_repo, pricing_service) -> ParkingService:
    return ParkingService(records_repo, pricing_service)


@pytest.fixture
def make_completed():
    return completed


@pytest.fixture
def make_parked():
    return parked

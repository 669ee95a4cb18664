from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import parse_flexible_datetime
from ..core.enums import PaymentMethod, PaymentStatus, RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bytes, db_cursor, fetchall, fetchone
from .model import ParkingImage, ParkingRecord
from .repository import ParkingRecordRepository

_SELECT = """
    SELECT r.record_id, r.plate_number, r.car_brand, r.attendant_names, r.entry_time, r.exit_time,
           r.status, r.duration_hours, r.amount, r.payment_status, r.payment_method, r.paid_at,
           r.created_by, r.updated_at, r.updated_by,
           (SELECT COUNT(*) FROM parking_record_images i WHERE i.record_id = r.record_id) AS image_count
    FROM parking_records r
"""

NAME_SEPARATOR = ", "


def _split_names(value: Optional[str]) -> tuple[str, ...]:
    return tuple(n.strip() for n in (value or "").split(",") if n.strip())


def _as_datetime(value) -> Optional[datetime]:
    """Columns imported from older exports may hold text timestamps."""
    if value is None or isinstance(value, datetime):
        return value
    return parse_flexible_datetime(str(value))


def _to_record(r: dict) -> ParkingRecord:
    method = r.get("payment_method")
    return ParkingRecord(
        record_id=int(r["record_id"]),
        plate_number=r["plate_number"],
        car_brand=r["car_brand"],
        attendant_names=_split_names(r.get("attendant_names")),
        entry_time=_as_datetime(r["entry_time"]),
        exit_time=_as_datetime(r.get("exit_time")),
        status=RecordStatus(r["status"]),
        duration_hours=r.get("duration_hours"),
        amount=int(r.get("amount") or 0),
        payment_status=PaymentStatus(r.get("payment_status") or PaymentStatus.UNPAID.value),
        payment_method=PaymentMethod(method) if method else None,
        paid_at=_as_datetime(r.get("paid_at")),
        created_by=r.get("created_by"),
        updated_at=r.get("updated_at"),
        updated_by=r.get("updated_by"),
        image_count=int(r.get("image_count") or 0),
    )


class MySQLParkingRecordRepository(ParkingRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_entry(
        self,
        *,
        plate_number: str,
        car_brand: str,
        attendant_names: Sequence[str],
        entry_time: datetime,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO parking_records(plate_number, car_brand, attendant_names, entry_time, status,
                                            amount, payment_status, created_by)
                VALUES(%s,%s,%s,%s,%s,0,%s,%s)
                """,
                (
                    plate_number,
                    car_brand,
                    NAME_SEPARATOR.join(attendant_names),
                    entry_time,
                    RecordStatus.PARKED.value,
                    PaymentStatus.UNPAID.value,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, record_id: int) -> Optional[ParkingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE r.record_id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_active_by_plate(self, plate_number: str) -> Optional[ParkingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE r.plate_number=%s AND r.status=%s AND r.exit_time IS NULL LIMIT 1",
                (plate_number, RecordStatus.PARKED.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_all(self) -> Sequence[ParkingRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY r.entry_time DESC, r.record_id DESC")
            return [_to_record(r) for r in fetchall(cur)]

    def complete_exit(
        self,
        *,
        record_id: int,
        exit_time: datetime,
        duration_hours: int,
        amount: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE parking_records
                SET exit_time=%s, duration_hours=%s, amount=%s, status=%s, updated_at=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    exit_time,
                    duration_hours,
                    amount,
                    RecordStatus.COMPLETED.value,
                    exit_time,
                    record_id,
                    RecordStatus.PARKED.value,
                ),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE parking_records
                SET payment_status=%s, payment_method=%s, paid_at=%s, updated_at=%s, updated_by=%s
                WHERE record_id=%s
                """,
                (
                    payment_status.value,
                    payment_method.value if payment_method else None,
                    paid_at,
                    updated_at,
                    updated_by,
                    record_id,
                ),
            )
            return cur.rowcount > 0

    def delete_many(self, record_ids: Sequence[int]) -> int:
        ids = [int(i) for i in record_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM parking_records WHERE record_id IN ({placeholders})", tuple(ids))
            return int(cur.rowcount)

    def add_image(self, *, record_id: int, data: bytes, content_type: str = "image/jpeg") -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO parking_record_images(record_id, content_type, data) VALUES(%s,%s,%s)",
                (record_id, content_type, data),
            )
            return int(cur.lastrowid)

    def list_images(self, record_id: int) -> Sequence[ParkingImage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT image_id, record_id, content_type, data
                FROM parking_record_images
                WHERE record_id=%s
                ORDER BY image_id
                """,
                (record_id,),
            )
            return [
                ParkingImage(
                    image_id=int(r["image_id"]),
                    record_id=int(r["record_id"]),
                    data=as_bytes(r["data"]),
                    content_type=r.get("content_type") or "image/jpeg",
                )
                for r in fetchall(cur)
            ]

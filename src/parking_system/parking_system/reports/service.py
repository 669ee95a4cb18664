from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..core.enums import PaymentStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..parking.model import ParkingRecord
from ..parking.repository import ParkingRecordRepository
from ..parking.service import ParkingService
from .dashboard_service import in_range
from .excel_exporter import ExcelExporter, export_filename
from .model import ExportResult, ReportFilter

logger = logging.getLogger(__name__)


class ReportService:
    """Manager reports: filtering, per-record fees and Excel export."""

    def __init__(
        self,
        records: ParkingRecordRepository,
        parking: ParkingService,
        *,
        exporter: Optional[ExcelExporter] = None,
    ):
        self._records = records
        self._parking = parking
        self._exporter = exporter or ExcelExporter(fee_for=self.report_fee)

    def report_fee(self, record: ParkingRecord) -> int:
        return self._parking.current_fee(record)

    def filter_records(self, report_filter: ReportFilter) -> list[ParkingRecord]:
        f = report_filter
        if f.start_date and f.end_date and f.start_date > f.end_date:
            raise ValidationError("Start date must be before end date")

        plate = f.plate_number.strip().lower()
        attendant = f.attendant.strip().lower()

        rows = list(self._records.list_all())
        if f.year:
            rows = [r for r in rows if r.entry_time.year == int(f.year)]
        if f.month:
            rows = [r for r in rows if r.entry_time.month == int(f.month)]
        if plate:
            rows = [r for r in rows if plate in r.plate_number.lower()]
        if attendant:
            rows = [r for r in rows if attendant in r.attendants_label.lower()]
        if f.payment_status == PaymentStatus.PAID:
            rows = [r for r in rows if r.payment_status == PaymentStatus.PAID]
        elif f.payment_status == PaymentStatus.UNPAID:
            rows = [r for r in rows if r.payment_status != PaymentStatus.PAID]
        if f.start_date or f.end_date:
            rows = [r for r in rows if in_range(r, f.start_date, f.end_date)]

        return sorted(rows, key=lambda r: (r.entry_time, r.record_id), reverse=True)

    def available_years(self) -> list[int]:
        return sorted({r.entry_time.year for r in self._records.list_all()}, reverse=True)

    def attendant_names(self) -> list[str]:
        names = {n for r in self._records.list_all() for n in r.attendant_names}
        return sorted(names)

    def export(self, report_filter: ReportFilter, *, current_role: Role, now: Optional[datetime] = None) -> ExportResult:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can export reports")

        records = self.filter_records(report_filter)
        content = self._exporter.export(records)
        return ExportResult(filename=export_filename(today=now), content=content, record_count=len(records))

    def export_range(
        self,
        *,
        current_role: Role,
        start: date,
        end: date,
        delete_after_export: bool = False,
    ) -> ExportResult:
        """Export one date range; optionally purge what was exported."""
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can export reports")
        if not start or not end:
            raise ValidationError("Start and end dates are required")

        records = self.filter_records(ReportFilter(start_date=start, end_date=end))
        if not records:
            raise ValidationError("No records found in this period")

        content = self._exporter.export(records)

        deleted = 0
        if delete_after_export:
            deleted = self._records.delete_many([r.record_id for r in records])
            logger.info("exported and deleted %d records (%s..%s)", deleted, start, end)

        return ExportResult(
            filename=export_filename(start=start, end=end),
            content=content,
            record_count=len(records),
            deleted=deleted,
        )

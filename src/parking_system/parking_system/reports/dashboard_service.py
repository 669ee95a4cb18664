from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from ..common.datetime_utils import add_months, month_start
from ..core.constants import (
    DAILY_CHART_MAX_DAYS,
    DEFAULT_ACTIVITY_LIMIT,
    DEFAULT_CHART_DAYS,
    DEFAULT_CHART_MONTHS,
)
from ..core.exceptions import ValidationError
from ..parking.model import ParkingRecord
from ..parking.repository import ParkingRecordRepository
from .model import Dashboard, DashboardStats, PeriodStat


def in_range(record: ParkingRecord, start: Optional[date], end: Optional[date]) -> bool:
    """Entry date within [start, end]; the whole end day counts."""
    day = record.entry_time.date()
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def _stat(label: str, day: date, rows: Iterable[ParkingRecord]) -> PeriodStat:
    rows = list(rows)
    return PeriodStat(
        period=label,
        date=day.isoformat(),
        customers=len(rows),
        revenue=sum(r.amount for r in rows),
    )


class DashboardService:
    """Manager dashboard: totals, revenue charts and recent activity."""

    def __init__(self, records: ParkingRecordRepository):
        self._records = records

    def build(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Dashboard:
        today = today or date.today()
        if start and end and start > end:
            raise ValidationError("Start date must be before end date")

        records = list(self._records.list_all())
        if start and end:
            records = [r for r in records if in_range(r, start, end)]

        completed = [r for r in records if r.is_completed]
        active = [r for r in records if r.is_active]

        if start and end:
            period_stats = self._range_series(completed, start, end)
        else:
            period_stats = self._monthly_series(completed, add_months(today, -(DEFAULT_CHART_MONTHS - 1)), today)

        recent = sorted(records, key=lambda r: (r.entry_time, r.record_id), reverse=True)

        return Dashboard(
            stats=self._stats(completed, active, today),
            period_stats=period_stats,
            daily_stats=self._daily_series(completed, today - timedelta(days=DEFAULT_CHART_DAYS - 1), today, "%a"),
            recent_activity=recent[:DEFAULT_ACTIVITY_LIMIT],
        )

    @staticmethod
    def _stats(completed: list[ParkingRecord], active: list[ParkingRecord], today: date) -> DashboardStats:
        today_rows = [r for r in completed if r.entry_time.date() == today]
        total_revenue = sum(r.amount for r in completed)
        count = len(completed)

        return DashboardStats(
            total_customers=count,
            total_revenue=total_revenue,
            active_records=len(active),
            today_customers=len(today_rows),
            today_revenue=sum(r.amount for r in today_rows),
            average_session_hours=(sum(r.duration_hours or 0 for r in completed) / count) if count else 0.0,
            average_revenue=(total_revenue / count) if count else 0.0,
        )

    def _range_series(self, completed: list[ParkingRecord], start: date, end: date) -> list[PeriodStat]:
        if (end - start).days <= DAILY_CHART_MAX_DAYS:
            return self._daily_series(completed, start, end, "%b %d")
        return self._monthly_series(completed, start, end)

    @staticmethod
    def _daily_series(completed: list[ParkingRecord], start: date, end: date, label_fmt: str) -> list[PeriodStat]:
        out: list[PeriodStat] = []
        day = start
        while day <= end:
            rows = [r for r in completed if r.entry_time.date() == day]
            out.append(_stat(day.strftime(label_fmt), day, rows))
            day += timedelta(days=1)
        return out

    @staticmethod
    def _monthly_series(completed: list[ParkingRecord], start: date, end: date) -> list[PeriodStat]:
        out: list[PeriodStat] = []
        current = month_start(start)
        last = month_start(end)
        while current <= last:
            rows = [
                r for r in completed
                if r.entry_time.year == current.year and r.entry_time.month == current.month
            ]
            out.append(_stat(current.strftime("%Y %b"), current, rows))
            current = add_months(current, 1)
        return out

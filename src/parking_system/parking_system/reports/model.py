from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import PaymentStatus
from ..parking.model import ParkingRecord


@dataclass(frozen=True)
class DashboardStats:
    total_customers: int = 0
    total_revenue: int = 0
    active_records: int = 0
    today_customers: int = 0
    today_revenue: int = 0
    average_session_hours: float = 0.0
    average_revenue: float = 0.0


@dataclass(frozen=True)
class PeriodStat:
    period: str
    date: str
    customers: int
    revenue: int


@dataclass(frozen=True)
class Dashboard:
    stats: DashboardStats
    period_stats: list[PeriodStat]
    daily_stats: list[PeriodStat]
    recent_activity: list[ParkingRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ReportFilter:
    """Manager report filters; every field is optional."""

    year: Optional[int] = None
    month: Optional[int] = None
    plate_number: str = ""
    attendant: str = ""
    payment_status: Optional[PaymentStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    record_count: int
    deleted: int = 0

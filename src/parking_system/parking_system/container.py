from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_HOURLY_RATE
from .database.connection import DBConfig, DatabaseConnection
from .parking.mysql_parking_repository import MySQLParkingRecordRepository
from .parking.service import ParkingService
from .pricing.factory import FeeCalculatorFactory
from .pricing.mysql_pricing_repository import MySQLPricingRepository
from .pricing.service import PricingService
from .reports.dashboard_service import DashboardService
from .reports.service import ReportService
from .settings.mysql_site_repository import MySQLSiteConfigRepository
from .settings.service import SiteSettingsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    records_repo: MySQLParkingRecordRepository
    pricing_repo: MySQLPricingRepository
    site_repo: MySQLSiteConfigRepository

    auth_service: AuthService
    user_service: UserService
    pricing_service: PricingService
    parking_service: ParkingService
    dashboard_service: DashboardService
    report_service: ReportService
    site_settings_service: SiteSettingsService


def build_container(*, db_config: dict, default_hourly_rate: int = DEFAULT_HOURLY_RATE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    records_repo = MySQLParkingRecordRepository(conn)
    pricing_repo = MySQLPricingRepository(conn)
    site_repo = MySQLSiteConfigRepository(conn)

    pricing_service = PricingService(
        pricing_repo,
        factory=FeeCalculatorFactory(),
        default_hourly_rate=default_hourly_rate,
    )
    parking_service = ParkingService(records_repo, pricing_service)

    return Container(
        conn=conn,
        users_repo=users_repo,
        records_repo=records_repo,
        pricing_repo=pricing_repo,
        site_repo=site_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        pricing_service=pricing_service,
        parking_service=parking_service,
        dashboard_service=DashboardService(records_repo),
        report_service=ReportService(records_repo, parking_service),
        site_settings_service=SiteSettingsService(site_repo),
    )

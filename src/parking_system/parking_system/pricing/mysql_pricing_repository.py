from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import PricingConfig
from .repository import PricingRepository


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


class MySQLPricingRepository(PricingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[PricingConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT hourly_rate, first_hour_rate, additional_hour_rate, daily_max, updated_at, updated_by
                FROM pricing_config
                WHERE id=1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return PricingConfig(
                hourly_rate=int(r["hourly_rate"]),
                first_hour_rate=_opt_int(r.get("first_hour_rate")),
                additional_hour_rate=_opt_int(r.get("additional_hour_rate")),
                daily_max=_opt_int(r.get("daily_max")),
                updated_at=r.get("updated_at"),
                updated_by=r.get("updated_by"),
            )

    def save(self, config: PricingConfig) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pricing_config(id, hourly_rate, first_hour_rate, additional_hour_rate, daily_max, updated_at, updated_by)
                VALUES(1,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    hourly_rate=VALUES(hourly_rate),
                    first_hour_rate=VALUES(first_hour_rate),
                    additional_hour_rate=VALUES(additional_hour_rate),
                    daily_max=VALUES(daily_max),
                    updated_at=VALUES(updated_at),
                    updated_by=VALUES(updated_by)
                """,
                (
                    config.hourly_rate,
                    config.first_hour_rate,
                    config.additional_hour_rate,
                    config.daily_max,
                    config.updated_at,
                    config.updated_by,
                ),
            )

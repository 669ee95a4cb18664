from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bytes, db_cursor, fetchone
from .model import SiteConfig
from .repository import SiteConfigRepository


class MySQLSiteConfigRepository(SiteConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[SiteConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT site_name, site_logo, site_background, updated_at, updated_by FROM site_config WHERE id=1"
            )
            r = fetchone(cur)
            if not r:
                return None
            return SiteConfig(
                site_name=r["site_name"],
                site_logo=as_bytes(r.get("site_logo")),
                site_background=as_bytes(r.get("site_background")),
                updated_at=r.get("updated_at"),
                updated_by=r.get("updated_by"),
            )

    def save(self, config: SiteConfig) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO site_config(id, site_name, site_logo, site_background, updated_at, updated_by)
                VALUES(1,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    site_name=VALUES(site_name),
                    site_logo=VALUES(site_logo),
                    site_background=VALUES(site_background),
                    updated_at=VALUES(updated_at),
                    updated_by=VALUES(updated_by)
                """,
                (config.site_name, config.site_logo, config.site_background, config.updated_at, config.updated_by),
            )

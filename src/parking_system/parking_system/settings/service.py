from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.images import normalize_image
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import SiteConfig
from .repository import SiteConfigRepository

logger = logging.getLogger(__name__)


class SiteSettingsService:
    def __init__(self, sites: SiteConfigRepository):
        self._sites = sites

    def get(self) -> SiteConfig:
        return self._sites.get() or SiteConfig()

    def update(
        self,
        *,
        current_role: Role,
        site_name: str,
        logo: Optional[bytes] = None,
        background: Optional[bytes] = None,
        updated_by: str = "",
        now: Optional[datetime] = None,
    ) -> SiteConfig:
        """Save branding; images left as None keep their stored value."""
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can change site settings")

        current = self.get()
        config = SiteConfig(
            site_name=require_non_empty(site_name, "Site name"),
            site_logo=normalize_image(logo) if logo else current.site_logo,
            site_background=normalize_image(background) if background else current.site_background,
            updated_at=now or datetime.now(),
            updated_by=updated_by or "Manager",
        )
        self._sites.save(config)
        logger.info("site settings updated by %s", config.updated_by)
        return config

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SiteConfig:
    """Branding shown on the login page and headers."""

    site_name: str = "Parking"
    site_logo: Optional[bytes] = None
    site_background: Optional[bytes] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

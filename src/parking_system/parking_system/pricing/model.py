from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_HOURLY_RATE


@dataclass(frozen=True)
class PricingConfig:
    """Stored parking rate.

    ``hourly_rate`` is charged per started hour. When ``first_hour_rate`` is set
    the tiered scheme applies instead: first hour, then ``additional_hour_rate``
    per further hour, each 24h block capped at ``daily_max`` when given.
    """

    hourly_rate: int = DEFAULT_HOURLY_RATE
    first_hour_rate: Optional[int] = None
    additional_hour_rate: Optional[int] = None
    daily_max: Optional[int] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    @property
    def is_tiered(self) -> bool:
        return self.first_hour_rate is not None


@dataclass(frozen=True)
class ExitQuote:
    exit_time: datetime
    duration_hours: int
    fee: int

    @property
    def is_free(self) -> bool:
        return self.fee == 0

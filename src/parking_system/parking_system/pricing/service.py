from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.validators import require_non_negative
from ..core.constants import DEFAULT_HOURLY_RATE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .calculator.base import parking_duration_hours
from .factory import FeeCalculatorFactory
from .model import ExitQuote, PricingConfig
from .repository import PricingRepository

logger = logging.getLogger(__name__)


class PricingService:
    def __init__(
        self,
        pricing: PricingRepository,
        *,
        factory: Optional[FeeCalculatorFactory] = None,
        default_hourly_rate: int = DEFAULT_HOURLY_RATE,
    ):
        self._pricing = pricing
        self._factory = factory or FeeCalculatorFactory()
        self._default_rate = int(default_hourly_rate)

    def get_config(self) -> PricingConfig:
        return self._pricing.get() or PricingConfig(hourly_rate=self._default_rate)

    def update_config(
        self,
        *,
        current_role: Role,
        hourly_rate,
        first_hour_rate=None,
        additional_hour_rate=None,
        daily_max=None,
        updated_by: str = "",
        now: Optional[datetime] = None,
    ) -> PricingConfig:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Only managers can change pricing")

        def _optional(value, field_name: str) -> Optional[int]:
            if value is None or str(value).strip() == "":
                return None
            return require_non_negative(value, field_name)

        config = PricingConfig(
            hourly_rate=require_non_negative(hourly_rate, "Hourly rate"),
            first_hour_rate=_optional(first_hour_rate, "First hour rate"),
            additional_hour_rate=_optional(additional_hour_rate, "Additional hour rate"),
            daily_max=_optional(daily_max, "Daily maximum"),
            updated_at=now or datetime.now(),
            updated_by=updated_by or "Manager",
        )
        self._pricing.save(config)
        logger.info("pricing updated by %s: %s", config.updated_by, config)
        return config

    def fee(self, entry: datetime, exit_: datetime) -> int:
        return self._factory.for_config(self.get_config()).fee(entry, exit_)

    def quote(self, entry: datetime, exit_: datetime) -> ExitQuote:
        return ExitQuote(
            exit_time=exit_,
            duration_hours=parking_duration_hours(entry, exit_),
            fee=self.fee(entry, exit_),
        )

    def current_fee(self, entry: datetime, now: Optional[datetime] = None) -> int:
        return self.fee(entry, now or datetime.now())

from __future__ import annotations

from datetime import datetime

from .base import FeeCalculator, parking_duration_hours


class HourlyFeeCalculator(FeeCalculator):
    """Flat rule: started hours * rate. A zero rate means free parking."""

    def __init__(self, hourly_rate: int):
        self._rate = int(hourly_rate)

    def fee(self, entry: datetime, exit_: datetime) -> int:
        if self._rate <= 0:
            return 0
        return parking_duration_hours(entry, exit_) * self._rate

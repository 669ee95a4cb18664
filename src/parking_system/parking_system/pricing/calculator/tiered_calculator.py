from __future__ import annotations

from datetime import datetime
from typing import Optional

from .base import FeeCalculator, parking_duration_hours

HOURS_PER_DAY = 24


class TieredFeeCalculator(FeeCalculator):
    """First hour at one rate, every further started hour at another.

    With ``daily_max`` each 24-hour block (and the trailing partial block)
    costs at most that amount.
    """

    def __init__(self, first_hour_rate: int, additional_hour_rate: int, daily_max: Optional[int] = None):
        self._first = int(first_hour_rate)
        self._additional = int(additional_hour_rate)
        self._daily_max = int(daily_max) if daily_max else None

    def _block_fee(self, hours: int, *, includes_first: bool) -> int:
        if includes_first:
            cost = self._first + self._additional * (hours - 1)
        else:
            cost = self._additional * hours
        if self._daily_max is not None:
            cost = min(cost, self._daily_max)
        return cost

    def fee(self, entry: datetime, exit_: datetime) -> int:
        remaining = parking_duration_hours(entry, exit_)
        total = 0
        first = True
        while remaining > 0:
            block = min(remaining, HOURS_PER_DAY)
            total += self._block_fee(block, includes_first=first)
            remaining -= block
            first = False
        return total

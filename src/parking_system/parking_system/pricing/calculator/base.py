from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import datetime


def parking_duration_hours(entry: datetime, exit_: datetime) -> int:
    """Started hours between entry and exit, never less than 1."""
    seconds = (exit_ - entry).total_seconds()
    return max(1, math.ceil(seconds / 3600))


class FeeCalculator(ABC):
    """Calculator interface (Strategy Pattern for pricing)."""

    @abstractmethod
    def fee(self, entry: datetime, exit_: datetime) -> int:
        raise NotImplementedError

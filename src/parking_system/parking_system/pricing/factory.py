from __future__ import annotations

from dataclasses import dataclass

from .calculator.base import FeeCalculator
from .calculator.hourly_calculator import HourlyFeeCalculator
from .calculator.tiered_calculator import TieredFeeCalculator
from .model import PricingConfig


@dataclass
class FeeCalculatorFactory:
    """Factory Pattern: choose the fee strategy for a pricing config."""

    def for_config(self, config: PricingConfig) -> FeeCalculator:
        if config.is_tiered:
            additional = config.additional_hour_rate
            if additional is None:
                additional = config.hourly_rate
            return TieredFeeCalculator(config.first_hour_rate, additional, config.daily_max)
        return HourlyFeeCalculator(config.hourly_rate)

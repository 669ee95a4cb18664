from __future__ import annotations

from typing import Optional, Protocol

from .model import PricingConfig


class PricingRepository(Protocol):
    def get(self) -> Optional[PricingConfig]:
        raise NotImplementedError

    def save(self, config: PricingConfig) -> None:
        raise NotImplementedError

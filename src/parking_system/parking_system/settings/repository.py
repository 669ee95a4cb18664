from __future__ import annotations

from typing import Optional, Protocol

from .model import SiteConfig


class SiteConfigRepository(Protocol):
    def get(self) -> Optional[SiteConfig]:
        raise NotImplementedError

    def save(self, config: SiteConfig) -> None:
        raise NotImplementedError

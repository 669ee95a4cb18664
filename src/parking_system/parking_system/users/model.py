from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account (manager, employee or driver).

    Plain data object; no database access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    phone: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.images import normalize_image
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role

    @property
    def landing_endpoint(self) -> str:
        return "manager_dashboard" if self.role == Role.MANAGER else "home"


def _require_manager(current_role: Role) -> None:
    if current_role != Role.MANAGER:
        raise AuthorizationError("Only managers can do this")


class AuthService:
    """Use case: authenticate an account (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Wrong email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Wrong email or password")

        if not user.is_active:
            raise AuthenticationError("Your account has been disabled. Please contact a manager.")

        logger.info("user %s logged in as %s", user.user_id, user.role.value)
        return SessionUser(user_id=user.user_id, name=user.name, email=user.email, role=user.role)


class UserService:
    """Use case: manage accounts (manager) and own profile (everyone)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _get(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Account not found")
        return user

    def get(self, user_id: int) -> User:
        return self._get(user_id)

    def register_account(
        self,
        *,
        current_role: Role,
        name: str,
        email: str,
        password: str,
        role: Role,
        phone: str = "",
        position: str = "",
        start_date: Optional[date] = None,
    ) -> int:
        _require_manager(current_role)

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("This email is already in use")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            phone=(phone or "").strip() or None,
            position=(position or "").strip() or None,
            start_date=start_date,
        )
        logger.info("registered %s account %s (%s)", role.value, user_id, email)
        return user_id

    def update_account(self, *, current_role: Role, user_id: int, name: str, email: str, phone: str = "") -> None:
        _require_manager(current_role)
        self._save_details(user_id, name=name, email=email, phone=phone)

    def _save_details(self, user_id: int, *, name: str, email: str, phone: str) -> None:
        user = self._get(user_id)
        name = require_non_empty(name, "Name")
        email = require_email(email)

        other = self._users.get_by_email(email)
        if other and other.user_id != user.user_id:
            raise ValidationError("This email is already in use")

        self._users.update_details(user.user_id, name=name, email=email, phone=(phone or "").strip() or None)

    def set_active(self, *, current_role: Role, current_user_id: int, user_id: int, is_active: bool) -> None:
        _require_manager(current_role)
        user = self._get(user_id)
        if user.user_id == int(current_user_id) and not is_active:
            raise ValidationError("You cannot disable your own account")

        self._users.set_active(user.user_id, is_active=bool(is_active))
        logger.info("account %s %s", user.user_id, "enabled" if is_active else "disabled")

    def delete_account(self, *, current_role: Role, current_user_id: int, user_id: int) -> None:
        _require_manager(current_role)
        user = self._get(user_id)
        if user.user_id == int(current_user_id):
            raise ValidationError("You cannot delete your own account")

        if not self._users.delete_by_id(user.user_id):
            raise ValidationError("Failed to delete account")
        logger.info("account %s deleted", user.user_id)

    def list_by_role(self, role: Role):
        return sorted(self._users.list_by_role(role), key=lambda u: u.name.lower())

    def employee_names(self) -> list[str]:
        return [u.name for u in self.list_by_role(Role.EMPLOYEE) if u.is_active]

    def update_profile(
        self,
        *,
        user_id: int,
        name: str,
        email: str,
        phone: str = "",
        new_password: str = "",
        confirm_password: str = "",
        profile_image: Optional[bytes] = None,
    ) -> None:
        if new_password:
            require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
            if new_password != confirm_password:
                raise ValidationError("Passwords do not match")

        image = normalize_image(profile_image) if profile_image else None

        self._save_details(user_id, name=name, email=email, phone=phone)
        if new_password:
            self._users.update_password(int(user_id), password_hash=generate_password_hash(new_password))
        if image:
            self._users.set_profile_image(int(user_id), image=image)

    def profile_image(self, user_id: int) -> Optional[bytes]:
        return self._users.get_profile_image(int(user_id))

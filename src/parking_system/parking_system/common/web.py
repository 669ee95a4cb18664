from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, request, session, url_for

from ..core.enums import Role
from ..users.service import SessionUser


def current_user() -> Optional[SessionUser]:
    if "user_id" not in session:
        return None
    return SessionUser(
        user_id=int(session["user_id"]),
        name=session.get("name", ""),
        email=session.get("email", ""),
        role=Role(session.get("role", Role.DRIVER.value)),
    )


def render_forbidden():
    return render_template("403.html", current_user=current_user()), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Please log in to continue", "warning")
            return redirect(url_for("login", next=request.path))
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return redirect(url_for("login", next=request.path))
        if session.get("role") != Role.MANAGER.value:
            return render_forbidden()
        return view(*args, **kwargs)

    return wrapper


def wants_json() -> bool:
    return request.is_json or request.accept_mimetypes.best == "application/json"


def optional_int(value) -> Optional[int]:
    value = (value or "").strip() if isinstance(value, str) else value
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def read_upload(field: str) -> Optional[bytes]:
    file = request.files.get(field)
    if not file or not file.filename:
        return None
    return file.read()


def read_uploads(field: str) -> list[bytes]:
    return [f.read() for f in request.files.getlist(field) if f and f.filename]

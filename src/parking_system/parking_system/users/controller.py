from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, Response, abort, flash, redirect, render_template, request, session, url_for

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_user, login_required, manager_required, read_upload
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    app.jinja_env.globals["csrf_token"] = lambda: ""

    @app.context_processor
    def inject_user():
        return {"current_user": current_user(), "Role": Role}

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        user = current_user()
        if user:
            return redirect(url_for(user.landing_endpoint))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.clear()
                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=int(app.config.get("SESSION_DAYS", 7)))

                session["user_id"] = s_user.user_id
                session["name"] = s_user.name
                session["email"] = s_user.email
                session["role"] = s_user.role.value

                flash("Logged in", "success")
                return redirect(url_for(s_user.landing_endpoint))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("login failed")
                flash("System error while logging in", "danger")

        site = container.site_settings_service.get()
        return render_template("login.html", site=site)

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    def logout():
        session.clear()
        flash("Logged out", "info")
        return redirect(url_for("login"))

    @app.route("/manager/users", endpoint="manager_users")
    @manager_required
    def manager_users():
        accounts = {role: container.user_service.list_by_role(role) for role in Role}
        return render_template("manager/users.html", accounts=accounts, active_page="manager_users")

    @app.route("/manager/users/add", methods=["POST"], endpoint="add_user")
    @manager_required
    def add_user():
        try:
            try:
                role = Role(request.form.get("role", Role.DRIVER.value))
            except ValueError:
                raise ValidationError("Unknown account type")

            start_s = request.form.get("start_date", "").strip()
            container.user_service.register_account(
                current_role=current_user().role,
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                password=request.form.get("password", ""),
                role=role,
                phone=request.form.get("phone", ""),
                position=request.form.get("position", ""),
                start_date=parse_iso_date(start_s) if start_s else None,
            )
            flash("Account registered", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("add user failed")
            flash("System error while registering the account", "danger")
        return redirect(url_for("manager_users"))

    @app.route("/manager/users/<int:user_id>/edit", methods=["POST"], endpoint="edit_user")
    @manager_required
    def edit_user(user_id: int):
        try:
            container.user_service.update_account(
                current_role=current_user().role,
                user_id=user_id,
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                phone=request.form.get("phone", ""),
            )
            flash("Account updated", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("edit user %s failed", user_id)
            flash("System error while updating the account", "danger")
        return redirect(url_for("manager_users"))

    @app.route("/manager/users/<int:user_id>/toggle", methods=["POST"], endpoint="toggle_user")
    @manager_required
    def toggle_user(user_id: int):
        me = current_user()
        try:
            target = container.user_service.get(user_id)
            container.user_service.set_active(
                current_role=me.role,
                current_user_id=me.user_id,
                user_id=user_id,
                is_active=not target.is_active,
            )
            flash("Account enabled" if not target.is_active else "Account disabled", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("toggle user %s failed", user_id)
            flash("System error while changing account status", "danger")
        return redirect(url_for("manager_users"))

    @app.route("/manager/users/<int:user_id>/delete", methods=["POST"], endpoint="delete_user")
    @manager_required
    def delete_user(user_id: int):
        me = current_user()
        try:
            container.user_service.delete_account(current_role=me.role, current_user_id=me.user_id, user_id=user_id)
            flash("Account deleted", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("delete user %s failed", user_id)
            flash("System error while deleting the account", "danger")
        return redirect(url_for("manager_users"))

    @app.route("/profile", methods=["GET", "POST"], endpoint="profile")
    @login_required
    def profile():
        me = current_user()
        if request.method == "POST":
            try:
                container.user_service.update_profile(
                    user_id=me.user_id,
                    name=request.form.get("name", ""),
                    email=request.form.get("email", ""),
                    phone=request.form.get("phone", ""),
                    new_password=request.form.get("new_password", ""),
                    confirm_password=request.form.get("confirm_password", ""),
                    profile_image=read_upload("profile_image"),
                )
                updated = container.user_service.get(me.user_id)
                session["name"] = updated.name
                session["email"] = updated.email
                flash("Profile updated", "success")
                return redirect(url_for("profile"))
            except DomainError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("profile update failed")
                flash("System error while updating the profile", "danger")

        try:
            user = container.user_service.get(me.user_id)
        except NotFoundError:
            # account deleted while the session was still live
            session.clear()
            flash("Your account no longer exists", "warning")
            return redirect(url_for("login"))
        return render_template("profile.html", user=user, active_page="profile")

    @app.route("/users/<int:user_id>/image", endpoint="profile_image")
    @login_required
    def profile_image(user_id: int):
        data = container.user_service.profile_image(user_id)
        if not data:
            abort(404)
        return Response(data, mimetype="image/jpeg")

from __future__ import annotations

import logging

from flask import Flask, Response, abort, flash, redirect, render_template, request, url_for

from ..common.web import current_user, manager_required, read_upload
from ..container import Container
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_site():
        return {"site_name": container.site_settings_service.get().site_name}

    @app.route("/manager/settings", endpoint="manager_settings")
    @manager_required
    def manager_settings():
        return render_template(
            "manager/settings.html",
            site=container.site_settings_service.get(),
            pricing=container.pricing_service.get_config(),
            active_page="manager_settings",
        )

    @app.route("/manager/settings/site", methods=["POST"], endpoint="save_site_settings")
    @manager_required
    def save_site_settings():
        me = current_user()
        try:
            container.site_settings_service.update(
                current_role=me.role,
                site_name=request.form.get("site_name", ""),
                logo=read_upload("site_logo"),
                background=read_upload("site_background"),
                updated_by=me.name,
            )
            flash("Site settings saved", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("saving site settings failed")
            flash("System error while saving site settings", "danger")
        return redirect(url_for("manager_settings"))

    @app.route("/manager/settings/pricing", methods=["POST"], endpoint="save_pricing")
    @manager_required
    def save_pricing():
        me = current_user()
        try:
            container.pricing_service.update_config(
                current_role=me.role,
                hourly_rate=request.form.get("hourly_rate", ""),
                first_hour_rate=request.form.get("first_hour_rate"),
                additional_hour_rate=request.form.get("additional_hour_rate"),
                daily_max=request.form.get("daily_max"),
                updated_by=me.name,
            )
            flash("Pricing saved", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("saving pricing failed")
            flash("System error while saving pricing", "danger")
        return redirect(url_for("manager_settings"))

    @app.route("/site/<kind>.jpg", endpoint="site_image")
    def site_image(kind: str):
        site = container.site_settings_service.get()
        data = {"logo": site.site_logo, "background": site.site_background}.get(kind)
        if not data:
            abort(404)
        return Response(data, mimetype="image/jpeg")

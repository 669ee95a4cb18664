from __future__ import annotations

import logging

from flask import Flask, Response, flash, jsonify, redirect, render_template, request, url_for

from ..common.datetime_utils import format_display
from ..common.web import current_user, login_required, optional_int, read_upload, read_uploads, wants_json
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .model import NewEntry
from .ticket_images import decode_ticket_image, ticket_qr_png
from .tickets import ticket_token

logger = logging.getLogger(__name__)


def _error_status(e: DomainError) -> int:
    if isinstance(e, NotFoundError):
        return 404
    if isinstance(e, ValidationError):
        return 400
    return 403


def register(app: Flask, container: Container) -> None:
    parking = container.parking_service

    def _quote_json(record_id: int, quote, *, plate: str = "") -> dict:
        return {
            "success": True,
            "record_id": record_id,
            "plate_number": plate,
            "exit_time": format_display(quote.exit_time),
            "duration_hours": quote.duration_hours,
            "fee": quote.fee,
            "free": quote.is_free,
        }

    @app.route("/", endpoint="home")
    @login_required
    def home():
        me = current_user()
        if me.role == Role.MANAGER and not request.args.get("attendant"):
            return redirect(url_for("manager_dashboard"))

        search = request.args.get("search", "")
        year = optional_int(request.args.get("year"))
        month = optional_int(request.args.get("month"))
        plate = request.args.get("plate", "")

        active = parking.list_active(me, search=search)
        return render_template(
            "home.html",
            active=active,
            fees={r.record_id: parking.current_fee(r) for r in active},
            recent=parking.list_recent(me),
            history=parking.list_history(me, year=year, month=month, plate=plate),
            years=parking.available_years(me),
            employees=container.user_service.employee_names(),
            pricing=container.pricing_service.get_config(),
            filters={"search": search, "year": year, "month": month, "plate": plate},
            active_page="home",
        )

    @app.route("/parking/entry", methods=["POST"], endpoint="parking_entry")
    @login_required
    def parking_entry():
        entry = NewEntry(
            plate_number=request.form.get("plate_number", ""),
            car_brand=request.form.get("car_brand", ""),
            attendant_names=request.form.getlist("attendants"),
            images=read_uploads("images"),
        )
        try:
            record_id = parking.register_entry(current_user(), entry)
            flash(f"Entry registered. Ticket: {ticket_token(record_id)}", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("entry registration failed")
            flash("System error while registering the entry", "danger")
        return redirect(url_for("home"))

    @app.route("/parking/<int:record_id>/exit", methods=["GET", "POST"], endpoint="parking_exit")
    @login_required
    def parking_exit(record_id: int):
        """GET previews the fee for the confirmation dialog, POST confirms."""
        try:
            record = parking.get(record_id)
            if request.method == "GET":
                return jsonify(_quote_json(record_id, parking.preview_exit(record_id), plate=record.plate_number))

            quote = parking.confirm_exit(record_id)
            if wants_json():
                return jsonify(_quote_json(record_id, quote, plate=record.plate_number))
            flash(f"{record.plate_number} left after {quote.duration_hours}h, fee {quote.fee}", "success")
        except DomainError as e:
            if request.method == "GET" or wants_json():
                return jsonify({"success": False, "message": str(e)}), _error_status(e)
            flash(str(e), "danger")
        except Exception:
            logger.exception("exit for record %s failed", record_id)
            if request.method == "GET" or wants_json():
                return jsonify({"success": False, "message": "System error while registering the exit"}), 500
            flash("System error while registering the exit", "danger")
        return redirect(url_for("home"))

    @app.route("/api/parking/<int:record_id>/fee", endpoint="api_current_fee")
    @login_required
    def api_current_fee(record_id: int):
        try:
            record = parking.get(record_id)
            return jsonify({"success": True, "record_id": record_id, "fee": parking.current_fee(record)})
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), _error_status(e)

    @app.route("/parking/<int:record_id>/ticket.png", endpoint="parking_ticket")
    @login_required
    def parking_ticket(record_id: int):
        try:
            parking.get(record_id)
        except NotFoundError:
            return jsonify({"success": False, "message": "Parking record not found"}), 404
        return Response(ticket_qr_png(record_id), mimetype="image/png")

    @app.route("/api/parking/exit/ticket", methods=["POST"], endpoint="api_exit_by_ticket")
    @login_required
    def api_exit_by_ticket():
        data = request.get_json(silent=True) or {}
        code = (data.get("code") or "").strip()
        if not code:
            return jsonify({"success": False, "message": "Ticket code is required"}), 400
        try:
            record, quote = parking.exit_by_ticket(code)
            return jsonify(_quote_json(record.record_id, quote, plate=record.plate_number))
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), _error_status(e)
        except Exception:
            logger.exception("ticket exit failed")
            return jsonify({"success": False, "message": "System error while registering the exit"}), 500

    @app.route("/api/parking/exit/ticket/image", methods=["POST"], endpoint="api_exit_by_ticket_image")
    @login_required
    def api_exit_by_ticket_image():
        data = read_upload("image")
        if not data:
            return jsonify({"success": False, "message": "Image file is required"}), 400
        try:
            code = decode_ticket_image(data)
            if not code:
                return jsonify({"success": False, "message": "No QR code found in the image"}), 400
            record, quote = parking.exit_by_ticket(code)
            return jsonify(_quote_json(record.record_id, quote, plate=record.plate_number))
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), _error_status(e)
        except Exception:
            logger.exception("ticket image exit failed")
            return jsonify({"success": False, "message": "System error while registering the exit"}), 500

    @app.route("/parking/<int:record_id>/images/<int:index>", endpoint="parking_image")
    @login_required
    def parking_image(record_id: int, index: int):
        try:
            image = parking.get_image(record_id, index)
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        return Response(image.data, mimetype=image.content_type)

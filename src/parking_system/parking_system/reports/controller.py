from __future__ import annotations

import logging

from flask import Flask, Response, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_user, manager_required, optional_int
from ..container import Container
from ..core.enums import PaymentMethod, PaymentStatus
from ..core.exceptions import DomainError, ValidationError
from .model import ReportFilter

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _filter_from_args(args) -> ReportFilter:
    start_s = (args.get("start") or "").strip()
    end_s = (args.get("end") or "").strip()
    status_s = (args.get("payment_status") or "").strip()
    return ReportFilter(
        year=optional_int(args.get("year")),
        month=optional_int(args.get("month")),
        plate_number=args.get("plate", ""),
        attendant=args.get("attendant", ""),
        payment_status=PaymentStatus(status_s) if status_s in {s.value for s in PaymentStatus} else None,
        start_date=parse_iso_date(start_s) if start_s else None,
        end_date=parse_iso_date(end_s) if end_s else None,
    )


def _xlsx_response(result) -> Response:
    return Response(
        result.content,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f"attachment; filename={result.filename}"},
    )


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/manager", endpoint="manager_dashboard")
    @manager_required
    def manager_dashboard():
        start_s = request.args.get("start", "").strip()
        end_s = request.args.get("end", "").strip()
        try:
            start = parse_iso_date(start_s) if start_s else None
            end = parse_iso_date(end_s) if end_s else None
            if bool(start) != bool(end):
                raise ValidationError("Enter both start and end dates")
            dashboard = container.dashboard_service.build(start=start, end=end)
        except ValidationError as e:
            flash(str(e), "warning")
            start_s = end_s = ""
            dashboard = container.dashboard_service.build()

        return render_template(
            "manager/dashboard.html",
            dashboard=dashboard,
            start=start_s,
            end=end_s,
            active_page="manager_dashboard",
        )

    @app.route("/manager/report", endpoint="manager_report")
    @manager_required
    def manager_report():
        try:
            report_filter = _filter_from_args(request.args)
            records = reports.filter_records(report_filter)
        except ValidationError as e:
            flash(str(e), "warning")
            report_filter = ReportFilter()
            records = reports.filter_records(report_filter)

        return render_template(
            "manager/report.html",
            records=records,
            fees={r.record_id: reports.report_fee(r) for r in records},
            report_filter=report_filter,
            years=reports.available_years(),
            attendants=reports.attendant_names(),
            payment_methods=list(PaymentMethod),
            args=request.args,
            active_page="manager_report",
        )

    @app.route("/manager/report.xlsx", endpoint="manager_report_xlsx")
    @manager_required
    def manager_report_xlsx():
        try:
            result = reports.export(_filter_from_args(request.args), current_role=current_user().role)
        except DomainError as e:
            flash(str(e), "warning")
            return redirect(url_for("manager_report"))
        return _xlsx_response(result)

    @app.route("/manager/report/export-range", methods=["POST"], endpoint="manager_export_range")
    @manager_required
    def manager_export_range():
        try:
            start_s = request.form.get("start", "").strip()
            end_s = request.form.get("end", "").strip()
            if not start_s or not end_s:
                raise ValidationError("Enter both start and end dates")

            result = reports.export_range(
                current_role=current_user().role,
                start=parse_iso_date(start_s),
                end=parse_iso_date(end_s),
                delete_after_export=bool(request.form.get("delete_after_export")),
            )
        except DomainError as e:
            flash(str(e), "warning")
            return redirect(url_for("manager_report"))
        except Exception:
            logger.exception("range export failed")
            flash("System error while exporting", "danger")
            return redirect(url_for("manager_report"))
        return _xlsx_response(result)

    @app.route("/manager/records/<int:record_id>/payment", methods=["POST"], endpoint="manager_record_payment")
    @manager_required
    def manager_record_payment(record_id: int):
        me = current_user()
        try:
            try:
                status = PaymentStatus(request.form.get("payment_status", ""))
            except ValueError:
                raise ValidationError("Unknown payment status")
            method_s = request.form.get("payment_method", "")
            method = PaymentMethod(method_s) if method_s in {m.value for m in PaymentMethod} else None

            container.parking_service.update_payment(
                current_role=me.role,
                record_id=record_id,
                status=status,
                method=method,
                updated_by=me.name,
            )
            flash("Payment status updated", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("payment update for %s failed", record_id)
            flash("System error while updating payment", "danger")
        return redirect(request.referrer or url_for("manager_report"))

    @app.route("/manager/records/<int:record_id>/delete", methods=["POST"], endpoint="manager_record_delete")
    @manager_required
    def manager_record_delete(record_id: int):
        try:
            container.parking_service.delete_record(current_role=current_user().role, record_id=record_id)
            flash("Record deleted", "success")
        except DomainError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("delete of record %s failed", record_id)
            flash("System error while deleting the record", "danger")
        return redirect(url_for("manager_report"))

from __future__ import annotations

import io
from datetime import datetime
from typing import Callable, Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import format_display
from ..core.enums import PaymentMethod, PaymentStatus
from ..parking.model import ParkingRecord

SHEET_NAME = "Parking report"

COLUMNS = [
    ("№", 5),
    ("Plate number", 15),
    ("Attendant", 20),
    ("Car brand", 15),
    ("Entry time", 20),
    ("Exit time", 20),
    ("Duration (h)", 15),
    ("Fee", 12),
    ("Payment status", 15),
    ("Payment method", 15),
    ("Images", 10),
]

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.TRANSFER: "Transfer",
}


class ExcelExporter:
    """Render parking records into a single-sheet .xlsx workbook."""

    def __init__(self, fee_for: Optional[Callable[[ParkingRecord], int]] = None):
        self._fee_for = fee_for or (lambda r: r.amount)

    def to_rows(self, records: Sequence[ParkingRecord]) -> list[dict]:
        rows = []
        for index, r in enumerate(records, start=1):
            values = [
                index,
                r.plate_number,
                r.attendants_label or "-",
                r.car_brand or "-",
                format_display(r.entry_time),
                format_display(r.exit_time),
                r.duration_hours if r.duration_hours is not None else "-",
                self._fee_for(r),
                "Paid" if r.payment_status == PaymentStatus.PAID else "Unpaid",
                PAYMENT_METHOD_LABELS.get(r.payment_method, "-"),
                "Yes" if r.image_count else "No",
            ]
            rows.append({name: value for (name, _), value in zip(COLUMNS, values)})
        return rows

    def export(self, records: Sequence[ParkingRecord]) -> bytes:
        df = pd.DataFrame(self.to_rows(records), columns=[name for name, _ in COLUMNS])

        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
            sheet = writer.sheets[SHEET_NAME]
            for i, (_, width) in enumerate(COLUMNS, start=1):
                sheet.column_dimensions[get_column_letter(i)].width = width
        return out.getvalue()


def export_filename(*, start=None, end=None, today: Optional[datetime] = None) -> str:
    if start and end:
        return f"parking_report_{start.isoformat()}_{end.isoformat()}.xlsx"
    today = today or datetime.now()
    return f"parking_report_{today.strftime('%Y-%m-%d')}.xlsx"

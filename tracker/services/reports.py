from __future__ import annotations

import io
import logging
import re
from datetime import date
from typing import Any, Optional, Sequence

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from tracker.errors import ValidationError
from tracker.services.batches import Batch

logger = logging.getLogger(__name__)

SHEET_NAME = "Production Report"
REPORT_COLUMNS = [
    "Sr. No.",
    "Date",
    "Time",
    "SKU Code",
    "Product Name",
    "Batch Number",
    "Pieces Produced",
]
COLUMN_WIDTHS = [8, 12, 12, 15, 25, 15, 18]
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def report_rows(batches: Sequence[Batch]) -> list[dict[str, Any]]:
    """One row per batch, in the given order, then a TOTAL row."""
    rows: list[dict[str, Any]] = []
    for i, b in enumerate(batches, start=1):
        ts = b.created_local
        rows.append(
            {
                "Sr. No.": i,
                "Date": ts.strftime("%d/%m/%Y"),
                "Time": ts.strftime("%H:%M:%S"),
                "SKU Code": b.sku_code,
                "Product Name": b.sku_name,
                "Batch Number": b.batch_number,
                "Pieces Produced": b.pieces,
            }
        )

    rows.append(
        {
            "Sr. No.": "",
            "Date": "",
            "Time": "",
            "SKU Code": "",
            "Product Name": "TOTAL",
            "Batch Number": "",
            "Pieces Produced": sum(b.pieces for b in batches),
        }
    )
    return rows


def report_frame(batches: Sequence[Batch]) -> pd.DataFrame:
    return pd.DataFrame(report_rows(batches), columns=REPORT_COLUMNS)


def report_filename(selected_date: date, sku_code: Optional[str] = None) -> str:
    date_str = selected_date.strftime("%d-%m-%Y")
    sku_str = re.sub(r"[\\/:*?\"<>|\s]+", "-", sku_code.strip()) if sku_code else ""
    sku_str = sku_str.strip("-") or "All-SKUs"
    return f"Production-Report_{date_str}_{sku_str}.xlsx"


def build_report_xlsx(batches: Sequence[Batch]) -> bytes:
    if not batches:
        raise ValidationError("No production data found for the selected date and SKU")

    df = report_frame(batches)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        ws = writer.sheets[SHEET_NAME]

        for idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        total_row = ws.max_row
        for cell in ws[total_row]:
            cell.font = Font(bold=True)

    logger.info("Report built: %s batches", len(batches))
    return buf.getvalue()

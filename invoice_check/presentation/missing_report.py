"""Missing-invoice report generators."""
from __future__ import annotations

import csv
import io
import logging
from datetime import date
from pathlib import Path
from typing import Sequence

import pandas as pd

from invoice_check.domain.models import MissingInvoiceRecord

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ("ShopNo", "EcrHdKey", "InvoiceNumber")
REPORT_NAME_TEMPLATE = "MissingInvoices_{day:%Y%m%d}.csv"


def _clean(value: object) -> str:
    if value is None:
        return ""
    return str(value).replace(",", " ").replace("\r", " ").replace("\n", " ")


def missing_to_rows(missing: Sequence[MissingInvoiceRecord]) -> list[dict[str, str]]:
    return [
        {
            "ShopNo": _clean(item.shop_code),
            "EcrHdKey": _clean(item.full_record_id),
            "InvoiceNumber": _clean(item.invoice_number),
        }
        for item in missing
    ]


def render_csv(missing: Sequence[MissingInvoiceRecord]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(REPORT_COLUMNS), lineterminator="\n")
    writer.writeheader()
    writer.writerows(missing_to_rows(missing))
    return buffer.getvalue().encode("utf-8")


def render_xlsx(missing: Sequence[MissingInvoiceRecord]) -> bytes:
    frame = pd.DataFrame(missing_to_rows(missing), columns=list(REPORT_COLUMNS))
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name="MissingInvoices")
    return buffer.getvalue()


def report_path(reports_dir: Path, window_date: date) -> Path:
    return Path(reports_dir) / REPORT_NAME_TEMPLATE.format(day=window_date)


def write_missing_report(
    missing: Sequence[MissingInvoiceRecord],
    reports_dir: Path,
    window_date: date,
) -> Path | None:
    """Write the day's CSV; an empty missing set writes nothing and returns ``None``."""
    if not missing:
        return None
    target = report_path(reports_dir, window_date)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(render_csv(missing))
    logger.info("Wrote %d missing invoice(s) to %s", len(missing), target)
    return target

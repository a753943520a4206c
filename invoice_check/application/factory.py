"""Wiring of settings into a ready-to-run reconciliation context."""
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Callable, Sequence

from invoice_check.application.use_cases import ReconciliationContext
from invoice_check.config import Settings
from invoice_check.domain.models import MissingInvoiceRecord
from invoice_check.domain.repositories import InvoiceStore
from invoice_check.domain.services import ReconciliationEngine
from invoice_check.infrastructure.inbox.directory import DirectoryAckInbox
from invoice_check.infrastructure.storage.sqlite_store import SqliteInvoiceStore
from invoice_check.presentation.missing_report import write_missing_report


def open_store(settings: Settings) -> SqliteInvoiceStore:
    return SqliteInvoiceStore(settings.store, shop_group=settings.shop_group)


def build_context(
    settings: Settings,
    store: InvoiceStore,
    clock: Callable[[], datetime] = datetime.now,
) -> ReconciliationContext:
    reports_dir = Path(settings.reports_dir)

    def report_writer(missing: Sequence[MissingInvoiceRecord], window_date: date) -> Path | None:
        return write_missing_report(missing, reports_dir, window_date)

    return ReconciliationContext(
        inbox=DirectoryAckInbox(settings.input_root),
        store=store,
        engine=ReconciliationEngine(),
        report_writer=report_writer,
        encoding=settings.encoding,
        diff_source=settings.diff_source,
        clock=clock,
    )

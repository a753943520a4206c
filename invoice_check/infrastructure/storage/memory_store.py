"""In-memory invoice store used by tests and local dry runs."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from invoice_check.domain.models import InvoiceAcknowledgment, IssuedInvoice, MissingInvoiceRecord
from invoice_check.domain.services import ReconciliationEngine


class InMemoryInvoiceStore:
    def __init__(self, issued: Iterable[IssuedInvoice] = ()) -> None:
        self._issued: list[IssuedInvoice] = list(issued)
        self._staged: dict[date, tuple[InvoiceAcknowledgment, ...]] = {}

    def add_issued(self, *invoices: IssuedInvoice) -> None:
        self._issued.extend(invoices)

    def query_issued(self, window_date: date) -> Sequence[IssuedInvoice]:
        return [invoice for invoice in self._issued if invoice.issue_date == window_date]

    def replace_staged(self, window_date: date, records: Sequence[InvoiceAcknowledgment]) -> int:
        self._staged[window_date] = tuple(records)
        return len(records)

    def staged(self, window_date: date) -> tuple[InvoiceAcknowledgment, ...]:
        return self._staged.get(window_date, ())

    def query_missing(self, window_date: date) -> Sequence[MissingInvoiceRecord]:
        return ReconciliationEngine().find_missing(self.query_issued(window_date), self.staged(window_date))

    def truncate_staged(self) -> None:
        self._staged.clear()

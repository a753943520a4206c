"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Protocol, Sequence

from .models import InvoiceAcknowledgment, IssuedInvoice, MissingInvoiceRecord


class InvoiceStore(Protocol):
    """Authoritative invoice source plus the acknowledgment staging area."""

    def query_issued(self, window_date: date) -> Sequence[IssuedInvoice]:
        ...

    def replace_staged(self, window_date: date, records: Sequence[InvoiceAcknowledgment]) -> int:
        ...

    def query_missing(self, window_date: date) -> Sequence[MissingInvoiceRecord]:
        ...

    def truncate_staged(self) -> None:
        ...


class AckInbox(Protocol):
    """Locates the acknowledgment files delivered for a processing date."""

    def has_date(self, window_date: date) -> bool:
        ...

    def list_ack_files(self, window_date: date) -> Sequence[Path]:
        ...

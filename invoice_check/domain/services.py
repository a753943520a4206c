"""Domain services implementing the acknowledgment diff."""
from __future__ import annotations

from typing import Iterable

from .models import InvoiceAcknowledgment, IssuedInvoice, MissingInvoiceRecord
from .results import ReconciliationResult


def normalize_key(value: str | None) -> str:
    """Matching form of a key or invoice number: trimmed and casefolded."""
    return (value or "").strip().casefold()


class ReconciliationEngine:
    """Finds issued invoices that no acknowledgment in the window accounts for.

    Keys are compared case-insensitively. Issued rows without an invoice
    number are not finalized yet and are never reported. Output order
    follows the issued input; duplicate issued keys are kept as separate rows.
    """

    def find_missing(
        self,
        issued: Iterable[IssuedInvoice],
        acknowledged: Iterable[InvoiceAcknowledgment],
    ) -> tuple[MissingInvoiceRecord, ...]:
        ack_keys = self._ack_keys(acknowledged)
        return tuple(
            MissingInvoiceRecord.from_issued(invoice)
            for invoice in issued
            if self._is_finalized(invoice) and normalize_key(invoice.full_record_id) not in ack_keys
        )

    def reconcile(
        self,
        issued: Iterable[IssuedInvoice],
        acknowledged: Iterable[InvoiceAcknowledgment],
    ) -> ReconciliationResult:
        issued = tuple(issued)
        acknowledged = tuple(acknowledged)
        return ReconciliationResult(
            total_issued=len(issued),
            total_acknowledged=len(acknowledged),
            unfinalized=len([invoice for invoice in issued if not normalize_key(invoice.invoice_number)]),
            missing=self.find_missing(issued, acknowledged),
        )

    @classmethod
    def _ack_keys(cls, acknowledged: Iterable[InvoiceAcknowledgment]) -> set[str]:
        keys = {normalize_key(record.full_record_id) for record in acknowledged}
        keys.discard("")
        return keys

    @staticmethod
    def _is_finalized(invoice: IssuedInvoice) -> bool:
        return bool(normalize_key(invoice.invoice_number)) and bool(normalize_key(invoice.full_record_id))

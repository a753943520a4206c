"""Domain models for acknowledgment reconciliation.

These dataclasses capture the canonical schema shared by the parsers,
the stores and the reconciliation engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class RecordType(str, Enum):
    ISSUED = "issued"
    VOIDED = "voided"


@dataclass(frozen=True)
class InvoiceAcknowledgment:
    """One acknowledged invoice as decoded from an ACK file line."""

    shop_code: str
    full_record_id: str
    invoice_number: str
    record_type: RecordType
    invoice_date: date | None = None
    captured_at: datetime | None = None
    source_file: str | None = None


@dataclass(frozen=True)
class IssuedInvoice:
    """Invoice produced by the issuing system, read from the authoritative store."""

    shop_code: str
    full_record_id: str
    invoice_number: str
    issue_date: date | None = None


@dataclass(frozen=True)
class MissingInvoiceRecord:
    """Issued invoice with no acknowledgment in the processing window."""

    shop_code: str
    full_record_id: str
    invoice_number: str
    issue_date: date | None = None

    @classmethod
    def from_issued(cls, invoice: IssuedInvoice) -> MissingInvoiceRecord:
        return cls(
            shop_code=invoice.shop_code,
            full_record_id=invoice.full_record_id,
            invoice_number=invoice.invoice_number,
            issue_date=invoice.issue_date,
        )

"""Window-scoped accumulation of parsed acknowledgments."""
from __future__ import annotations

from typing import Iterable, Mapping

from .models import InvoiceAcknowledgment


def merge(
    existing: Mapping[str, InvoiceAcknowledgment],
    incoming: Iterable[InvoiceAcknowledgment],
) -> dict[str, InvoiceAcknowledgment]:
    """Combine two record sets keyed by full record id; incoming records win."""
    merged = dict(existing)
    for record in incoming:
        merged[record.full_record_id] = record
    return merged


class StagingAccumulator:
    """Holds the acknowledgments collected for the current processing window."""

    def __init__(self) -> None:
        self._records: dict[str, InvoiceAcknowledgment] = {}

    def merge(self, records: Iterable[InvoiceAcknowledgment]) -> None:
        self._records = merge(self._records, records)

    def clear(self) -> None:
        self._records = {}

    def records(self) -> tuple[InvoiceAcknowledgment, ...]:
        return tuple(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, full_record_id: object) -> bool:
        return full_record_id in self._records

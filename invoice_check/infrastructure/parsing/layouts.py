"""Line decoders for the two acknowledgment file layouts.

Each layout owns its field positions; nothing outside this module indexes
into a split ACK line.

``IG`` (issued) lines, at least 7 fields::

    ...^...^...^60499576_PUB_20260103...^PUB0220260100000256^...^XL84791838

``VOID`` lines, at least 8 fields::

    00001^Y^^R^60499576_PUB_20260107_PUB0220260100001185^PUB0220260100001185^20260107^XL84792751
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Sequence

from invoice_check.domain.errors import MalformedRecord
from invoice_check.domain.models import InvoiceAcknowledgment, RecordType
from invoice_check.infrastructure.parsing.utils import (
    PACKED_SEPARATOR,
    packed_segment,
    parse_compact_date,
    split_fields,
)

UNKNOWN_SHOP = "N/A"


@dataclass(frozen=True)
class DecodedFields:
    shop_code: str
    full_record_id: str
    invoice_number: str
    invoice_date: date | None


@dataclass(frozen=True)
class AckLayout:
    name: str
    tag: str
    record_type: RecordType
    min_fields: int
    extract: Callable[[Sequence[str]], DecodedFields]

    def decode(
        self,
        line: str,
        captured_at: datetime | None = None,
        source_file: str | None = None,
    ) -> InvoiceAcknowledgment | None:
        if not line.strip():
            return None
        columns = split_fields(line)
        if len(columns) < self.min_fields:
            raise MalformedRecord(self.name, len(columns), self.min_fields)
        fields = self.extract(columns)
        return InvoiceAcknowledgment(
            shop_code=fields.shop_code,
            full_record_id=fields.full_record_id,
            invoice_number=fields.invoice_number,
            record_type=self.record_type,
            invoice_date=fields.invoice_date,
            captured_at=captured_at,
            source_file=source_file,
        )


def _shop_code(packed: str) -> str:
    segment = packed_segment(packed, 1)
    return UNKNOWN_SHOP if segment is None else segment


def _extract_issued(columns: Sequence[str]) -> DecodedFields:
    packed = columns[3]
    date_segment = packed_segment(packed, 2)
    return DecodedFields(
        shop_code=_shop_code(packed),
        full_record_id=columns[4],
        invoice_number=columns[6],
        invoice_date=parse_compact_date(date_segment[:8]) if date_segment else None,
    )


def _extract_voided(columns: Sequence[str]) -> DecodedFields:
    return DecodedFields(
        shop_code=_shop_code(columns[4]),
        full_record_id=columns[5],
        invoice_number=columns[7],
        invoice_date=parse_compact_date(columns[6]),
    )


ISSUED_LAYOUT = AckLayout(
    name="issued",
    tag="IG",
    record_type=RecordType.ISSUED,
    min_fields=7,
    extract=_extract_issued,
)

VOID_LAYOUT = AckLayout(
    name="void",
    tag="VOID",
    record_type=RecordType.VOIDED,
    min_fields=8,
    extract=_extract_voided,
)

LAYOUTS: dict[str, AckLayout] = {layout.tag: layout for layout in (ISSUED_LAYOUT, VOID_LAYOUT)}


def layout_for_tag(tag: str) -> AckLayout | None:
    return LAYOUTS.get(tag.strip().upper())


def layout_for_filename(name: str) -> AckLayout | None:
    """Pick the layout from the text before the first underscore, e.g. ``IG_...``."""
    return layout_for_tag(name.split(PACKED_SEPARATOR, 1)[0])

"""ACK flat-file reader producing canonical acknowledgment records."""
from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Iterable, Sequence

from invoice_check.domain.errors import IngestFailure, MalformedRecord, UnknownLayout
from invoice_check.domain.models import InvoiceAcknowledgment
from invoice_check.infrastructure.parsing.layouts import AckLayout, layout_for_filename
from invoice_check.infrastructure.parsing.utils import decode_text, ensure_bytes, split_lines

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


def parse_ack_lines(
    lines: Iterable[str],
    layout: AckLayout,
    captured_at: datetime | None = None,
    source_file: str | None = None,
) -> list[InvoiceAcknowledgment]:
    records: list[InvoiceAcknowledgment] = []
    for line_no, line in enumerate(lines, start=1):
        try:
            record = layout.decode(line, captured_at=captured_at, source_file=source_file)
        except MalformedRecord as exc:
            logger.debug("Skipping %s line %d: %s", source_file or "<input>", line_no, exc)
            continue
        if record is not None:
            records.append(record)
    return records


def parse_ack_source(
    source: BytesIO | Path | bytes,
    layout: AckLayout,
    captured_at: datetime | None = None,
    encoding: str = DEFAULT_ENCODING,
    source_file: str | None = None,
) -> list[InvoiceAcknowledgment]:
    text = decode_text(ensure_bytes(source), encoding)
    return parse_ack_lines(split_lines(text), layout, captured_at=captured_at, source_file=source_file)


def parse_ack_file(
    path: Path,
    captured_at: datetime | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> Sequence[InvoiceAcknowledgment]:
    """Parse one ``*_ACK.txt`` file, choosing the layout from its name prefix.

    Raises ``IngestFailure`` when the file cannot be read or decoded and
    ``UnknownLayout`` when its prefix matches no known layout.
    """
    path = Path(path)
    layout = layout_for_filename(path.name)
    if layout is None:
        raise UnknownLayout(path)
    try:
        records = parse_ack_source(
            path,
            layout,
            captured_at=captured_at,
            encoding=encoding,
            source_file=path.name,
        )
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        raise IngestFailure(path, exc) from exc
    logger.debug("Parsed %d %s record(s) from %s", len(records), layout.name, path.name)
    return records

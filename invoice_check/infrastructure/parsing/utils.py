"""Shared parsing utilities for acknowledgment ingestion."""
from __future__ import annotations

from datetime import date, datetime
from io import BytesIO
from pathlib import Path
import codecs

FIELD_SEPARATOR = "^"
PACKED_SEPARATOR = "_"
COMPACT_DATE_FORMAT = "%Y%m%d"


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def split_fields(line: str) -> list[str]:
    return line.rstrip("\r\n").split(FIELD_SEPARATOR)


def packed_segment(value: str, index: int) -> str | None:
    parts = value.split(PACKED_SEPARATOR)
    if len(parts) > index:
        return parts[index]
    return None


def parse_compact_date(value: object) -> date | None:
    """Parse a ``yyyyMMdd`` fragment; anything else becomes ``None``."""
    if value is None:
        return None
    s = str(value).strip()
    if len(s) != 8 or not s.isdigit():
        return None
    try:
        return datetime.strptime(s, COMPACT_DATE_FORMAT).date()
    except ValueError:
        return None


def decode_text(data: bytes, encoding: str) -> str:
    if codecs.lookup(encoding).name == "utf-8" and data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):]
    return data.decode(encoding)


def split_lines(text: str) -> list[str]:
    """Split on CR, LF and CRLF only; other Unicode line breaks stay inside fields."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

from datetime import date, datetime
from pathlib import Path

import pytest

from invoice_check.domain.errors import IngestFailure, MalformedRecord, UnknownLayout
from invoice_check.domain.models import RecordType
from invoice_check.infrastructure.parsing.ack_files import parse_ack_file, parse_ack_lines
from invoice_check.infrastructure.parsing.layouts import (
    ISSUED_LAYOUT,
    VOID_LAYOUT,
    layout_for_filename,
)

CAPTURED_AT = datetime(2026, 1, 9, 8, 30, 0)
IG_LINE = "00001^Y^^60499576_PUB_20260103120000^PUB0220260100000256^X^XL84791838"
VOID_LINE = (
    "00001^Y^^R^60499576_PUB_20260107_PUB0220260100001185^PUB0220260100001185^20260107^XL84792751"
)


def test_issued_line_decodes_named_fields():
    record = ISSUED_LAYOUT.decode(IG_LINE, captured_at=CAPTURED_AT, source_file="IG_1_ACK.txt")

    assert record.shop_code == "PUB"
    assert record.full_record_id == "PUB0220260100000256"
    assert record.invoice_number == "XL84791838"
    assert record.invoice_date == date(2026, 1, 3)
    assert record.record_type is RecordType.ISSUED
    assert record.captured_at == CAPTURED_AT
    assert record.source_file == "IG_1_ACK.txt"


def test_issued_line_is_deterministic():
    first = ISSUED_LAYOUT.decode(IG_LINE, captured_at=CAPTURED_AT)
    second = ISSUED_LAYOUT.decode(IG_LINE, captured_at=CAPTURED_AT)

    assert first == second


def test_void_line_scenario():
    record = VOID_LAYOUT.decode(VOID_LINE)

    assert record.shop_code == "PUB"
    assert record.full_record_id == "PUB0220260100001185"
    assert record.invoice_date == date(2026, 1, 7)
    assert record.invoice_number == "XL84792751"
    assert record.record_type is RecordType.VOIDED


def test_void_line_with_trailing_empty_fields():
    record = VOID_LAYOUT.decode(VOID_LINE + "^^^^^^")

    assert record.invoice_number == "XL84792751"


def test_bad_date_fragment_yields_empty_date():
    record = ISSUED_LAYOUT.decode("a^b^c^60499576_PUB_2026XX03^KEY1^x^INV1")

    assert record.invoice_date is None
    assert record.full_record_id == "KEY1"


def test_missing_packed_segments_fall_back():
    record = ISSUED_LAYOUT.decode("a^b^c^60499576^KEY1^x^INV1")

    assert record.shop_code == "N/A"
    assert record.invoice_date is None


def test_short_line_signals_malformed_record():
    with pytest.raises(MalformedRecord) as excinfo:
        VOID_LAYOUT.decode("00001^Y^^R^packed^KEY")

    assert excinfo.value.required == 8
    assert excinfo.value.field_count == 6


def test_blank_line_yields_nothing():
    assert ISSUED_LAYOUT.decode("   ") is None


def test_parse_lines_skips_blank_and_short_lines():
    lines = ["", IG_LINE, "too^short", "   ", IG_LINE.replace("PUB0220260100000256", "KEY2")]

    records = parse_ack_lines(lines, ISSUED_LAYOUT, captured_at=CAPTURED_AT)

    assert [r.full_record_id for r in records] == ["PUB0220260100000256", "KEY2"]


def test_layout_chosen_from_filename_prefix():
    assert layout_for_filename("IG_20260107_01_ACK.txt") is ISSUED_LAYOUT
    assert layout_for_filename("void_20260107_01_ACK.txt") is VOID_LAYOUT
    assert layout_for_filename("C0401_20260107_ACK.txt") is None


def test_parse_file_reads_utf8_with_bom(tmp_path: Path):
    path = tmp_path / "VOID_20260107_ACK.txt"
    path.write_bytes(b"\xef\xbb\xbf" + (VOID_LINE + "\r\n\r\n").encode("utf-8"))

    records = parse_ack_file(path, captured_at=CAPTURED_AT)

    assert len(records) == 1
    assert records[0].source_file == "VOID_20260107_ACK.txt"
    assert records[0].captured_at == CAPTURED_AT


def test_parse_file_with_legacy_encoding(tmp_path: Path):
    path = tmp_path / "IG_20260103_ACK.txt"
    path.write_bytes(IG_LINE.replace("^X^", "^中文^").encode("big5"))

    records = parse_ack_file(path, encoding="big5")

    assert records[0].invoice_number == "XL84791838"


def test_parse_file_unknown_prefix_raises_unknown_layout(tmp_path: Path):
    path = tmp_path / "OTHER_ACK.txt"
    path.write_text(IG_LINE, encoding="utf-8")

    with pytest.raises(UnknownLayout) as excinfo:
        parse_ack_file(path)

    assert excinfo.value.path == path


def test_missing_file_raises_ingest_failure(tmp_path: Path):
    path = tmp_path / "IG_missing_ACK.txt"

    with pytest.raises(IngestFailure) as excinfo:
        parse_ack_file(path)

    assert excinfo.value.path == path
    assert isinstance(excinfo.value.__cause__, OSError)


def test_undecodable_file_raises_ingest_failure(tmp_path: Path):
    path = tmp_path / "IG_bad_ACK.txt"
    path.write_bytes(b"a^b^c^\xff\xfe_PUB^KEY^x^INV")

    with pytest.raises(IngestFailure) as excinfo:
        parse_ack_file(path)

    assert isinstance(excinfo.value.cause, UnicodeDecodeError)


def test_empty_shop_segment_stays_empty():
    record = ISSUED_LAYOUT.decode("a^b^c^60499576__20260103^KEY1^x^INV1")

    assert record.shop_code == ""
    assert record.invoice_date == date(2026, 1, 3)


def test_only_cr_and_lf_end_a_record(tmp_path: Path):
    path = tmp_path / "IG_20260103_ACK.txt"
    odd_number = "XL84\u20287918\x1c38\x85"
    content = IG_LINE.replace("XL84791838", odd_number) + "\r" + IG_LINE.replace("PUB0220260100000256", "KEY2") + "\r\n"
    path.write_text(content, encoding="utf-8", newline="")

    records = parse_ack_file(path)

    assert [r.full_record_id for r in records] == ["PUB0220260100000256", "KEY2"]
    assert records[0].invoice_number == odd_number

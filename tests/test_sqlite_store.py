from datetime import date, datetime
from pathlib import Path

import pytest

from invoice_check.domain.errors import PersistenceFailure
from invoice_check.domain.models import InvoiceAcknowledgment, IssuedInvoice, RecordType
from invoice_check.domain.services import ReconciliationEngine
from invoice_check.infrastructure.storage.sqlite_store import SqliteInvoiceStore

DAY = date(2026, 1, 7)


def make_issued(key: str, number: str, shop: str = "PUB", day: date = DAY) -> IssuedInvoice:
    return IssuedInvoice(shop_code=shop, full_record_id=key, invoice_number=number, issue_date=day)


def make_ack(key: str, number: str = "INV") -> InvoiceAcknowledgment:
    return InvoiceAcknowledgment(
        shop_code="PUB",
        full_record_id=key,
        invoice_number=number,
        record_type=RecordType.ISSUED,
        invoice_date=DAY,
        captured_at=datetime(2026, 1, 9, 8, 0, 0),
        source_file="IG_1_ACK.txt",
    )


@pytest.fixture
def store(tmp_path: Path):
    with SqliteInvoiceStore(tmp_path / "invoices.db") as db:
        db.init_schema()
        db.insert_shops({"PUB": "6000", "OUT": "7000"})
        db.insert_issued(
            [
                make_issued("KEY1", "INV1"),
                make_issued("KEY2", "INV2"),
                make_issued("KEY3", ""),
                make_issued("KEY9", "INV9", shop="OUT"),
                make_issued("KEY8", "INV8", day=date(2026, 1, 6)),
            ]
        )
        yield db


def test_query_issued_filters_date_and_shop_group(store: SqliteInvoiceStore):
    issued = store.query_issued(DAY)

    assert [i.full_record_id for i in issued] == ["KEY1", "KEY2", "KEY3"]
    assert issued[0] == make_issued("KEY1", "INV1")


def test_replace_staged_is_idempotent(store: SqliteInvoiceStore):
    store.replace_staged(DAY, [make_ack("KEY1"), make_ack("KEY2")])
    store.replace_staged(DAY, [make_ack("KEY1")])

    assert store.count_staged(DAY) == 1


def test_replace_staged_leaves_other_windows(store: SqliteInvoiceStore):
    store.replace_staged(date(2026, 1, 6), [make_ack("KEY8")])
    store.replace_staged(DAY, [make_ack("KEY1")])

    assert store.count_staged() == 2


def test_query_missing_excludes_acknowledged_and_unfinalized(store: SqliteInvoiceStore):
    store.replace_staged(DAY, [make_ack("key1")])

    missing = store.query_missing(DAY)

    assert [(m.shop_code, m.full_record_id, m.invoice_number) for m in missing] == [("PUB", "KEY2", "INV2")]


def test_failed_staging_write_rolls_back(store: SqliteInvoiceStore):
    store.replace_staged(DAY, [make_ack("KEY1")])

    with pytest.raises(PersistenceFailure):
        store.replace_staged(DAY, [make_ack("KEY2"), make_ack("KEY2")])

    assert store.count_staged(DAY) == 1
    assert [m.full_record_id for m in store.query_missing(DAY)] == ["KEY2"]


def test_truncate_staged(store: SqliteInvoiceStore):
    store.replace_staged(DAY, [make_ack("KEY1")])

    store.truncate_staged()

    assert store.count_staged() == 0


def test_query_without_schema_raises_persistence_failure(tmp_path: Path):
    with SqliteInvoiceStore(tmp_path / "empty.db") as db:
        with pytest.raises(PersistenceFailure):
            db.query_issued(DAY)


def test_query_missing_agrees_with_engine(tmp_path: Path):
    issued = [
        make_issued("KEY1", "INV1"),
        make_issued("KEY2", "   "),
        make_issued("Straße01", "INV3"),
        make_issued("KEY4", "INV4"),
    ]
    staged = [make_ack(" KEY1 "), make_ack("STRASSE01"), make_ack("  ")]
    with SqliteInvoiceStore(tmp_path / "parity.db") as db:
        db.init_schema()
        db.insert_shops({"PUB": "6000"})
        db.insert_issued(issued)
        db.replace_staged(DAY, staged)

        from_store = db.query_missing(DAY)

    from_engine = ReconciliationEngine().find_missing(issued, staged)
    assert list(from_store) == list(from_engine)
    assert [m.full_record_id for m in from_store] == ["KEY4"]

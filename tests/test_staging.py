from invoice_check.domain.models import InvoiceAcknowledgment, RecordType
from invoice_check.domain.staging import StagingAccumulator, merge


def make_ack(key: str, number: str, record_type: RecordType = RecordType.ISSUED) -> InvoiceAcknowledgment:
    return InvoiceAcknowledgment(
        shop_code="PUB",
        full_record_id=key,
        invoice_number=number,
        record_type=record_type,
    )


def test_merge_last_write_wins():
    first = merge({}, [make_ack("KEY1", "INV1"), make_ack("KEY2", "INV2")])
    merged = merge(first, [make_ack("KEY2", "INV2-VOID", RecordType.VOIDED)])

    assert sorted(merged) == ["KEY1", "KEY2"]
    assert merged["KEY2"].invoice_number == "INV2-VOID"
    assert merged["KEY2"].record_type is RecordType.VOIDED


def test_merge_does_not_mutate_existing():
    existing = {"KEY1": make_ack("KEY1", "INV1")}

    merge(existing, [make_ack("KEY1", "OTHER")])

    assert existing["KEY1"].invoice_number == "INV1"


def test_duplicates_within_one_batch_collapse():
    accumulator = StagingAccumulator()
    accumulator.merge([make_ack("KEY1", "A"), make_ack("KEY1", "B")])

    assert len(accumulator) == 1
    assert accumulator.records()[0].invoice_number == "B"


def test_accumulator_clear_resets_window():
    accumulator = StagingAccumulator()
    accumulator.merge([make_ack("KEY1", "INV1")])
    accumulator.merge([make_ack("KEY2", "INV2")])
    assert len(accumulator) == 2
    assert "KEY1" in accumulator

    accumulator.clear()

    assert len(accumulator) == 0
    assert accumulator.records() == ()

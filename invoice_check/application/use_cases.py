"""Application services orchestrating the acknowledgment reconciliation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Sequence

from invoice_check.domain.errors import IngestFailure, PersistenceFailure, UnknownLayout
from invoice_check.domain.models import InvoiceAcknowledgment, MissingInvoiceRecord
from invoice_check.domain.repositories import AckInbox, InvoiceStore
from invoice_check.domain.results import DateOutcome, RunSummary, SkippedFile
from invoice_check.domain.services import ReconciliationEngine
from invoice_check.domain.staging import StagingAccumulator
from invoice_check.infrastructure.parsing.ack_files import DEFAULT_ENCODING, parse_ack_file

logger = logging.getLogger(__name__)

AckFileParser = Callable[[Path, datetime, str], Sequence[InvoiceAcknowledgment]]
ReportWriter = Callable[[Sequence[MissingInvoiceRecord], date], Path | None]


def _parse_with_default_reader(path: Path, captured_at: datetime, encoding: str) -> Sequence[InvoiceAcknowledgment]:
    return parse_ack_file(path, captured_at=captured_at, encoding=encoding)


@dataclass(slots=True)
class ReconciliationContext:
    inbox: AckInbox
    store: InvoiceStore
    engine: ReconciliationEngine
    report_writer: ReportWriter
    encoding: str = DEFAULT_ENCODING
    diff_source: str = "memory"
    clock: Callable[[], datetime] = datetime.now
    parser: AckFileParser = _parse_with_default_reader
    accumulator: StagingAccumulator = field(default_factory=StagingAccumulator)


class ReconcileDateUseCase:
    """One full gather -> parse -> stage -> diff -> report cycle for a single date."""

    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context

    def execute(self, window_date: date) -> DateOutcome:
        ctx = self._context
        if not ctx.inbox.has_date(window_date):
            logger.info("%s: no ACK directory, skipping", window_date.isoformat())
            return DateOutcome(window_date=window_date, no_data=True)

        files = ctx.inbox.list_ack_files(window_date)
        if not files:
            logger.info("%s: no ACK files found, skipping", window_date.isoformat())
            return DateOutcome(window_date=window_date, no_data=True)

        captured_at = ctx.clock()
        accumulator = ctx.accumulator
        accumulator.clear()
        skipped: list[SkippedFile] = []
        files_read = 0
        for path in files:
            try:
                records = ctx.parser(path, captured_at, ctx.encoding)
            except IngestFailure as exc:
                logger.warning("%s: skipping %s (%s)", window_date.isoformat(), path, exc.cause)
                skipped.append(SkippedFile(path=path, reason=str(exc.cause)))
                continue
            except UnknownLayout as exc:
                logger.warning("%s: skipping %s (%s)", window_date.isoformat(), path, exc)
                skipped.append(SkippedFile(path=path, reason=str(exc)))
                continue
            accumulator.merge(records)
            files_read += 1

        staged = accumulator.records()
        ctx.store.replace_staged(window_date, staged)
        issued = ctx.store.query_issued(window_date)
        result = ctx.engine.reconcile(issued, staged)
        missing = result.missing
        if ctx.diff_source == "store":
            missing = tuple(ctx.store.query_missing(window_date))
        accumulator.clear()

        report_path = ctx.report_writer(missing, window_date) if missing else None
        logger.info(
            "%s: %d ACK file(s), %d acknowledged, %d issued, %d unfinalized, %d missing",
            window_date.isoformat(),
            files_read,
            result.total_acknowledged,
            result.total_issued,
            result.unfinalized,
            len(missing),
        )
        return DateOutcome(
            window_date=window_date,
            files_read=files_read,
            skipped_files=tuple(skipped),
            total_acknowledged=result.total_acknowledged,
            total_issued=result.total_issued,
            unfinalized=result.unfinalized,
            missing=missing,
            report_path=report_path,
        )


class ReconcileWindowUseCase:
    """Processes every date of the look-back window in order, oldest first."""

    def __init__(self, context: ReconciliationContext) -> None:
        self._context = context
        self._per_date = ReconcileDateUseCase(context)

    def execute(self, dates: Sequence[date]) -> RunSummary:
        clock = self._context.clock
        started_at = clock()
        logger.info("Run started at %s", started_at.isoformat(sep=" ", timespec="seconds"))

        outcomes: list[DateOutcome] = []
        for window_date in dates:
            try:
                outcome = self._per_date.execute(window_date)
            except PersistenceFailure as exc:
                logger.exception("%s: persistence failure, date aborted", window_date.isoformat())
                self._context.accumulator.clear()
                outcome = DateOutcome(window_date=window_date, failure=str(exc))
            except OSError as exc:
                logger.exception("%s: I/O failure, date aborted", window_date.isoformat())
                self._context.accumulator.clear()
                outcome = DateOutcome(window_date=window_date, failure=f"I/O failure: {exc}")
            else:
                logger.info("%s: missing invoices = %d", window_date.isoformat(), outcome.missing_count)
            outcomes.append(outcome)

        finished_at = clock()
        summary = RunSummary(started_at=started_at, finished_at=finished_at, outcomes=tuple(outcomes))
        logger.info("Total missing invoices = %d", summary.total_missing)
        logger.info("Elapsed %.2f seconds", summary.elapsed_seconds)
        logger.info("Run finished at %s", finished_at.isoformat(sep=" ", timespec="seconds"))
        return summary

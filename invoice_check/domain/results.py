"""Domain-level results for acknowledgment reconciliation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Sequence

from .models import MissingInvoiceRecord


@dataclass(frozen=True)
class ReconciliationResult:
    total_issued: int
    total_acknowledged: int
    unfinalized: int
    missing: Sequence[MissingInvoiceRecord] = field(default_factory=tuple)

    def has_issues(self) -> bool:
        return bool(self.missing)


@dataclass(frozen=True)
class SkippedFile:
    path: Path
    reason: str


@dataclass(frozen=True)
class DateOutcome:
    """What happened while processing one date of the look-back window."""

    window_date: date
    files_read: int = 0
    skipped_files: Sequence[SkippedFile] = field(default_factory=tuple)
    total_acknowledged: int = 0
    total_issued: int = 0
    unfinalized: int = 0
    missing: Sequence[MissingInvoiceRecord] = field(default_factory=tuple)
    report_path: Path | None = None
    no_data: bool = False
    failure: str | None = None

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def failed(self) -> bool:
        return self.failure is not None


@dataclass(frozen=True)
class RunSummary:
    started_at: datetime
    finished_at: datetime
    outcomes: Sequence[DateOutcome] = field(default_factory=tuple)

    @property
    def total_missing(self) -> int:
        return sum(outcome.missing_count for outcome in self.outcomes)

    @property
    def elapsed_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def has_failures(self) -> bool:
        return any(outcome.failed for outcome in self.outcomes)

    def iter_missing(self) -> Iterable[MissingInvoiceRecord]:
        for outcome in self.outcomes:
            yield from outcome.missing

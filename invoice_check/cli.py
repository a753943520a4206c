"""Command-line entrypoint for acknowledgment reconciliation."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from invoice_check.application.factory import build_context, open_store
from invoice_check.application.use_cases import ReconcileWindowUseCase
from invoice_check.config import Settings, load_settings
from invoice_check.domain.errors import ConfigurationError, PersistenceFailure
from invoice_check.domain.results import RunSummary
from invoice_check.logging_config import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report issued invoices missing from the ACK files")
    parser.add_argument("--date", type=str, help="Newest date to check (YYYY-MM-DD); defaults to today minus the lag")
    parser.add_argument("--lookback", type=int, help="Number of dates to re-check, ending at --date")
    parser.add_argument("--input-root", type=str, help="Root directory of dated ACK deliveries")
    parser.add_argument("--reports-dir", type=str, help="Directory for MissingInvoices_<date>.csv")
    parser.add_argument("--store", type=str, help="Invoice store (SQLite database path)")
    parser.add_argument("--init-store", action="store_true", help="Create the store schema before running")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {
        "lookback_days": args.lookback,
        "input_root": args.input_root,
        "reports_dir": args.reports_dir,
        "store": args.store,
    }
    if args.date:
        overrides["lag_days"] = 0
    return load_settings(overrides=overrides)


def print_summary(summary: RunSummary) -> None:
    print("Reconciliation Summary")
    print("======================")
    for outcome in summary.outcomes:
        label = outcome.window_date.isoformat()
        if outcome.failed:
            print(f"{label}: FAILED ({outcome.failure})")
        elif outcome.no_data:
            print(f"{label}: no ACK directory")
        else:
            line = f"{label}: {outcome.missing_count} missing of {outcome.total_issued} issued"
            if outcome.skipped_files:
                line += f", {len(outcome.skipped_files)} file(s) skipped"
            if outcome.report_path:
                line += f" -> {outcome.report_path}"
            print(line)
    print(f"\nTotal missing: {summary.total_missing}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        settings = resolve_settings(args)
        end_date = date.fromisoformat(args.date) if args.date else None
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"Configuration error: invalid --date: {exc}", file=sys.stderr)
        return 2

    today = date.today()
    configure_logging(settings.log_dir, today)
    dates = settings.window_dates(end_date or today)

    try:
        store = open_store(settings)
    except PersistenceFailure:
        logger.exception("Cannot open invoice store")
        return 1
    with store:
        if args.init_store:
            try:
                store.init_schema()
            except PersistenceFailure:
                logger.exception("Cannot initialize invoice store")
                return 1
        use_case = ReconcileWindowUseCase(build_context(settings, store))
        summary = use_case.execute(dates)

    print_summary(summary)
    return 1 if summary.has_failures() else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

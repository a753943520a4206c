"""Streamlit front-end for the acknowledgment reconciliation."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

import pandas as pd
import streamlit as st

from invoice_check import ReconcileWindowUseCase
from invoice_check.application.factory import build_context, open_store
from invoice_check.config import DEFAULT_LAG_DAYS, Settings, load_settings
from invoice_check.domain.errors import ConfigurationError, InvoiceCheckError
from invoice_check.domain.models import MissingInvoiceRecord
from invoice_check.domain.results import DateOutcome, RunSummary
from invoice_check.presentation.missing_report import missing_to_rows, render_csv, render_xlsx


st.set_page_config(page_title="Invoice ACK Check", layout="wide")
st.title("Invoice Acknowledgment Check")


def outcomes_to_dataframe(outcomes: Sequence[DateOutcome]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": o.window_date,
                "files_read": o.files_read,
                "files_skipped": len(o.skipped_files),
                "acknowledged": o.total_acknowledged,
                "issued": o.total_issued,
                "unfinalized": o.unfinalized,
                "missing": o.missing_count,
                "status": "failed" if o.failed else ("no data" if o.no_data else "ok"),
                "report": str(o.report_path) if o.report_path else "",
            }
            for o in outcomes
        ]
    )


def missing_to_dataframe(missing: Sequence[MissingInvoiceRecord]) -> pd.DataFrame:
    return pd.DataFrame(missing_to_rows(missing), columns=["ShopNo", "EcrHdKey", "InvoiceNumber"])


def run_reconciliation(settings: Settings, end_date: date, lookback: int) -> RunSummary:
    settings = settings.with_overrides(lookback_days=lookback, lag_days=0)
    with open_store(settings) as store:
        use_case = ReconcileWindowUseCase(build_context(settings, store))
        return use_case.execute(settings.window_dates(end_date))


try:
    SETTINGS = load_settings()
except ConfigurationError as exc:
    st.error(f"Configuration error: {exc}")
    st.stop()

if "summary" not in st.session_state:
    st.session_state["summary"] = None

col1, col2 = st.columns(2)
with col1:
    end_date = st.date_input("Newest date to check", value=date.today() - timedelta(days=DEFAULT_LAG_DAYS))
with col2:
    lookback = st.number_input("Look-back days", min_value=1, value=SETTINGS.lookback_days, step=1)

st.caption(f"ACK root: {SETTINGS.input_root} | store: {SETTINGS.store} | shop group: {SETTINGS.shop_group}")

if st.button("Run check"):
    with st.spinner("Reconciling..."):
        try:
            st.session_state["summary"] = run_reconciliation(SETTINGS, end_date, int(lookback))
        except InvoiceCheckError as exc:
            st.error(str(exc))
            st.session_state["summary"] = None

summary: RunSummary | None = st.session_state.get("summary")
if summary is None:
    st.info("Pick a date and run the check.")
else:
    st.subheader("Summary")
    st.metric("Total missing", summary.total_missing)
    st.metric("Elapsed (s)", f"{summary.elapsed_seconds:.2f}")
    if summary.has_failures():
        st.warning("Some dates failed; see the run log for details.")
    st.dataframe(outcomes_to_dataframe(summary.outcomes))
    all_missing = tuple(summary.iter_missing())
    if all_missing:
        st.download_button(
            "Download all missing (CSV)",
            data=render_csv(all_missing),
            file_name="MissingInvoices_all.csv",
            mime="text/csv",
            key="csv_all",
        )

    for outcome in summary.outcomes:
        if not outcome.missing:
            continue
        label = outcome.window_date.strftime("%Y%m%d")
        with st.expander(f"{outcome.window_date.isoformat()}: {outcome.missing_count} missing", expanded=True):
            st.dataframe(missing_to_dataframe(outcome.missing))
            st.download_button(
                "Download CSV",
                data=render_csv(outcome.missing),
                file_name=f"MissingInvoices_{label}.csv",
                mime="text/csv",
                key=f"csv_{label}",
            )
            st.download_button(
                "Download XLSX",
                data=render_xlsx(outcome.missing),
                file_name=f"MissingInvoices_{label}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                key=f"xlsx_{label}",
            )

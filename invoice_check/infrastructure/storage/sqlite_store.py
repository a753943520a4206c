"""SQLite-backed invoice store.

Tables:
- shop: shop_no -> group_no (the shop-group classifier)
- ecr_invoice: invoices issued by the point-of-sale system
- ack_invoice: acknowledgments staged per processing window
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import pandas as pd

from invoice_check.domain.errors import PersistenceFailure
from invoice_check.domain.models import InvoiceAcknowledgment, IssuedInvoice, MissingInvoiceRecord
from invoice_check.domain.services import normalize_key

logger = logging.getLogger(__name__)

DEFAULT_SHOP_GROUP = "6000"

SCHEMA = """
CREATE TABLE IF NOT EXISTS shop (
    shop_no TEXT PRIMARY KEY,
    group_no TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS ecr_invoice (
    shop_no TEXT NOT NULL,
    ecr_hd_key TEXT NOT NULL,
    invoice_number TEXT NOT NULL DEFAULT '',
    issue_date TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_ecr_invoice_date ON ecr_invoice(issue_date);

CREATE TABLE IF NOT EXISTS ack_invoice (
    window_date TEXT NOT NULL,
    ecr_hd_key TEXT NOT NULL,
    invoice_type TEXT NOT NULL,
    shop_no TEXT,
    invoice_date TEXT,
    invoice_number TEXT,
    process_datetime TEXT,
    source_file TEXT,
    PRIMARY KEY (window_date, ecr_hd_key)
);
"""

ISSUED_SQL = """
SELECT tk.shop_no, tk.ecr_hd_key, tk.invoice_number, tk.issue_date
FROM ecr_invoice tk
INNER JOIN shop s ON tk.shop_no = s.shop_no AND s.group_no = ?
WHERE tk.issue_date = ?
"""

NATURAL_ORDER = "\nORDER BY tk.rowid"

MISSING_SQL = ISSUED_SQL + """
  AND match_key(tk.invoice_number) <> ''
  AND match_key(tk.ecr_hd_key) <> ''
  AND NOT EXISTS (
      SELECT 1 FROM ack_invoice a
      WHERE a.window_date = ?
        AND match_key(a.ecr_hd_key) = match_key(tk.ecr_hd_key)
  )
""" + NATURAL_ORDER

INSERT_ACK_SQL = """
INSERT INTO ack_invoice
(window_date, ecr_hd_key, invoice_type, shop_no, invoice_date, invoice_number, process_datetime, source_file)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


def _to_db_value(value: object) -> object:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _parse_iso_date(value: object) -> date | None:
    text = "" if value is None else str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


class SqliteInvoiceStore:
    def __init__(self, database: str | Path, shop_group: str = DEFAULT_SHOP_GROUP) -> None:
        self._database = str(database)
        self._shop_group = shop_group
        try:
            self._conn = sqlite3.connect(self._database)
            self._conn.create_function("match_key", 1, normalize_key, deterministic=True)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot open invoice store {self._database}: {exc}") from exc

    def __enter__(self) -> SqliteInvoiceStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def init_schema(self) -> None:
        try:
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot create schema in {self._database}: {exc}") from exc

    def insert_shops(self, shops: Mapping[str, str]) -> None:
        rows = [(shop_no, group_no) for shop_no, group_no in shops.items()]
        self._write("INSERT OR REPLACE INTO shop (shop_no, group_no) VALUES (?, ?)", rows)

    def insert_issued(self, invoices: Iterable[IssuedInvoice]) -> None:
        rows = [
            (
                invoice.shop_code,
                invoice.full_record_id,
                invoice.invoice_number or "",
                invoice.issue_date.isoformat() if invoice.issue_date else "",
            )
            for invoice in invoices
        ]
        self._write(
            "INSERT INTO ecr_invoice (shop_no, ecr_hd_key, invoice_number, issue_date) VALUES (?, ?, ?, ?)",
            rows,
        )

    def query_issued(self, window_date: date) -> Sequence[IssuedInvoice]:
        frame = self._read(ISSUED_SQL + NATURAL_ORDER, (self._shop_group, window_date.isoformat()))
        return [
            IssuedInvoice(
                shop_code=str(row.shop_no),
                full_record_id=str(row.ecr_hd_key),
                invoice_number=str(row.invoice_number),
                issue_date=_parse_iso_date(row.issue_date),
            )
            for row in frame.itertuples(index=False)
        ]

    def query_missing(self, window_date: date) -> Sequence[MissingInvoiceRecord]:
        day = window_date.isoformat()
        frame = self._read(MISSING_SQL, (self._shop_group, day, day))
        return [
            MissingInvoiceRecord(
                shop_code=str(row.shop_no),
                full_record_id=str(row.ecr_hd_key),
                invoice_number=str(row.invoice_number),
                issue_date=_parse_iso_date(row.issue_date),
            )
            for row in frame.itertuples(index=False)
        ]

    def replace_staged(self, window_date: date, records: Sequence[InvoiceAcknowledgment]) -> int:
        """Swap the window's staged rows for ``records`` in one transaction."""
        day = window_date.isoformat()
        rows = [
            (
                day,
                record.full_record_id,
                record.record_type.value,
                _to_db_value(record.shop_code),
                record.invoice_date.isoformat() if record.invoice_date else None,
                _to_db_value(record.invoice_number),
                record.captured_at.isoformat(sep=" ", timespec="seconds") if record.captured_at else None,
                _to_db_value(record.source_file),
            )
            for record in records
        ]
        try:
            with self._conn:
                deleted = self._conn.execute("DELETE FROM ack_invoice WHERE window_date = ?", (day,)).rowcount
                self._conn.executemany(INSERT_ACK_SQL, rows)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Staging write for {day} failed: {exc}") from exc
        logger.debug("Replaced %d staged row(s) with %d for %s", deleted, len(rows), day)
        return len(rows)

    def truncate_staged(self) -> None:
        try:
            with self._conn:
                self._conn.execute("DELETE FROM ack_invoice")
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Truncating staged acknowledgments failed: {exc}") from exc

    def count_staged(self, window_date: date | None = None) -> int:
        if window_date is None:
            frame = self._read("SELECT COUNT(*) AS n FROM ack_invoice", ())
        else:
            frame = self._read("SELECT COUNT(*) AS n FROM ack_invoice WHERE window_date = ?", (window_date.isoformat(),))
        return int(frame["n"].iloc[0])

    def _read(self, sql: str, params: Sequence[object]) -> pd.DataFrame:
        try:
            frame = pd.read_sql_query(sql, self._conn, params=tuple(params))
        except (sqlite3.Error, pd.errors.DatabaseError) as exc:
            raise PersistenceFailure(f"Query against {self._database} failed: {exc}") from exc
        return frame.fillna("")

    def _write(self, sql: str, rows: Sequence[Sequence[object]]) -> None:
        try:
            with self._conn:
                self._conn.executemany(sql, rows)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Write to {self._database} failed: {exc}") from exc

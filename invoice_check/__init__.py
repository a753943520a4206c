"""Reconciliation of e-invoice acknowledgment files against issued invoices."""
from invoice_check.application.use_cases import (
    ReconcileDateUseCase,
    ReconcileWindowUseCase,
    ReconciliationContext,
)
from invoice_check.domain.services import ReconciliationEngine
from invoice_check.domain.staging import StagingAccumulator
from invoice_check.infrastructure.inbox.directory import DirectoryAckInbox
from invoice_check.infrastructure.storage.memory_store import InMemoryInvoiceStore
from invoice_check.infrastructure.storage.sqlite_store import SqliteInvoiceStore

__all__ = [
    "ReconcileDateUseCase",
    "ReconcileWindowUseCase",
    "ReconciliationContext",
    "ReconciliationEngine",
    "StagingAccumulator",
    "DirectoryAckInbox",
    "InMemoryInvoiceStore",
    "SqliteInvoiceStore",
]

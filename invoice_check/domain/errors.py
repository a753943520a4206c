"""Error taxonomy for acknowledgment reconciliation."""
from __future__ import annotations

from pathlib import Path


class InvoiceCheckError(Exception):
    """Base class for every error raised by the reconciliation pipeline."""


class MalformedRecord(InvoiceCheckError):
    """A single line has fewer fields than its layout requires."""

    def __init__(self, layout: str, field_count: int, required: int) -> None:
        super().__init__(f"{layout} line has {field_count} fields, expected at least {required}")
        self.layout = layout
        self.field_count = field_count
        self.required = required


class IngestFailure(InvoiceCheckError):
    """An acknowledgment file could not be opened or decoded."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause


class PersistenceFailure(InvoiceCheckError):
    """The staging write or the authoritative query failed."""


class ConfigurationError(InvoiceCheckError):
    """Required settings are missing or invalid."""


class UnknownLayout(InvoiceCheckError):
    """An acknowledgment file name matches no known layout prefix."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Unrecognized ACK layout for {path.name}")
        self.path = path

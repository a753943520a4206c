"""Filesystem inbox for dated acknowledgment deliveries."""
from __future__ import annotations

from datetime import date
from pathlib import Path

ACK_FILE_PATTERN = "*_ACK.txt"
DATE_DIR_FORMAT = "%Y%m%d"


class DirectoryAckInbox:
    """Reads ``<root>/<yyyyMMdd>/<batch>/*_ACK.txt``."""

    def __init__(self, root: Path, pattern: str = ACK_FILE_PATTERN) -> None:
        self._root = Path(root)
        self._pattern = pattern

    def date_dir(self, window_date: date) -> Path:
        return self._root / window_date.strftime(DATE_DIR_FORMAT)

    def has_date(self, window_date: date) -> bool:
        return self.date_dir(window_date).is_dir()

    def list_ack_files(self, window_date: date) -> list[Path]:
        day_dir = self.date_dir(window_date)
        if not day_dir.is_dir():
            return []
        files: list[Path] = []
        for batch_dir in sorted(p for p in day_dir.iterdir() if p.is_dir()):
            files.extend(sorted(p for p in batch_dir.glob(self._pattern) if p.is_file()))
        return files

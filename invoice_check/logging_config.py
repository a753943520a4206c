"""
Logging configuration module.
Logs to the console and to one append-only run log per calendar day.
"""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
RUN_LOG_TEMPLATE = "InvoiceCheck_{day:%Y%m%d}.log"


def run_log_path(log_dir: Path, day: date) -> Path:
    return Path(log_dir) / RUN_LOG_TEMPLATE.format(day=day)


def configure_logging(log_dir: Path, day: date, level: int = logging.INFO) -> Path:
    path = run_log_path(log_dir, day)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(path, mode="a", encoding="utf-8"), logging.StreamHandler()],
        force=True,
    )
    return path

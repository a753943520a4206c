"""Central configuration for the invoice check package.

Deployment values come from the environment, optionally seeded from a
local ``.env`` file:

- INVOICE_CHECK_STORE (required): SQLite database holding issued invoices and staging
- INVOICE_CHECK_INPUT_ROOT: root of the dated ACK directories
- INVOICE_CHECK_REPORTS_DIR / INVOICE_CHECK_LOG_DIR: output locations
- INVOICE_CHECK_LOOKBACK_DAYS: number of dates re-checked per run (at least 1)
- INVOICE_CHECK_LAG_DAYS: distance between today and the newest checked date
- INVOICE_CHECK_SHOP_GROUP: shop group whose invoices are reconciled
- INVOICE_CHECK_ENCODING: ACK file encoding (``big5`` on legacy feeds)
- INVOICE_CHECK_DIFF_SOURCE: ``memory`` or ``store``
"""
from __future__ import annotations

import codecs
import os
from dataclasses import dataclass, replace
from datetime import date, timedelta
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from invoice_check.domain.errors import ConfigurationError

BASE_DIR = Path.cwd()
DATA_DIR = BASE_DIR / "data"
DEFAULT_INPUT_ROOT = DATA_DIR / "deq"
DEFAULT_REPORTS_DIR = BASE_DIR / "reports"
DEFAULT_LOG_DIR = BASE_DIR / "logs"

DEFAULT_LOOKBACK_DAYS = 1
DEFAULT_LAG_DAYS = 2
DEFAULT_SHOP_GROUP = "6000"
DEFAULT_ENCODING = "utf-8"
DIFF_SOURCES = ("memory", "store")

ENV_PREFIX = "INVOICE_CHECK_"


@dataclass(slots=True, frozen=True)
class Settings:
    input_root: Path
    reports_dir: Path
    log_dir: Path
    store: str
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    lag_days: int = DEFAULT_LAG_DAYS
    shop_group: str = DEFAULT_SHOP_GROUP
    encoding: str = DEFAULT_ENCODING
    diff_source: str = "memory"

    def window_dates(self, today: date) -> list[date]:
        """Dates to check, oldest first, ending ``lag_days`` before ``today``."""
        newest = today - timedelta(days=self.lag_days)
        return [newest - timedelta(days=offset) for offset in range(self.lookback_days - 1, -1, -1)]

    def with_overrides(self, **changes: object) -> Settings:
        cleaned = {key: value for key, value in changes.items() if value is not None}
        return validate(replace(self, **cleaned))


def clamp_lookback(days: int) -> int:
    return max(1, days)


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def validate(settings: Settings) -> Settings:
    if not settings.store or not str(settings.store).strip():
        raise ConfigurationError(f"{ENV_PREFIX}STORE is not set; no invoice store to reconcile against")
    if settings.diff_source not in DIFF_SOURCES:
        raise ConfigurationError(
            f"{ENV_PREFIX}DIFF_SOURCE must be one of {', '.join(DIFF_SOURCES)}, got {settings.diff_source!r}"
        )
    if settings.lag_days < 0:
        raise ConfigurationError(f"{ENV_PREFIX}LAG_DAYS must not be negative, got {settings.lag_days}")
    try:
        codecs.lookup(settings.encoding)
    except LookupError as exc:
        raise ConfigurationError(f"Unknown ACK file encoding {settings.encoding!r}") from exc
    return replace(
        settings,
        input_root=Path(settings.input_root),
        reports_dir=Path(settings.reports_dir),
        log_dir=Path(settings.log_dir),
        lookback_days=clamp_lookback(settings.lookback_days),
    )


def load_settings(env: Mapping[str, str] | None = None, overrides: Mapping[str, object] | None = None) -> Settings:
    """Read settings from ``env`` (default: the process environment plus ``.env``).

    ``overrides`` win over the environment; ``None`` values are ignored.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    def text(name: str, default: str = "") -> str:
        return env.get(ENV_PREFIX + name, "").strip() or default

    settings = Settings(
        input_root=Path(text("INPUT_ROOT", str(DEFAULT_INPUT_ROOT))),
        reports_dir=Path(text("REPORTS_DIR", str(DEFAULT_REPORTS_DIR))),
        log_dir=Path(text("LOG_DIR", str(DEFAULT_LOG_DIR))),
        store=text("STORE"),
        lookback_days=_int_setting(env, "LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS),
        lag_days=_int_setting(env, "LAG_DAYS", DEFAULT_LAG_DAYS),
        shop_group=text("SHOP_GROUP", DEFAULT_SHOP_GROUP),
        encoding=text("ENCODING", DEFAULT_ENCODING),
        diff_source=text("DIFF_SOURCE", "memory").lower(),
    )
    cleaned = {key: value for key, value in (overrides or {}).items() if value is not None}
    return validate(replace(settings, **cleaned))

"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ReportIngestionSettings:
    """
    Runtime settings for affiliate report ingestion.
    """

    batch_size: int = 100
    max_validation_errors: int = 500
    log_validation_errors: bool = True


@dataclass(frozen=True)
class TimezoneSettings:
    """
    Fixed UTC offsets for source business days and display dates.
    """

    source_utc_offset_hours: float = 8.0
    display_utc_offset_hours: float = -3.0


def _clamp_offset(hours: float, default: float) -> float:
    # timezone() only accepts offsets strictly within one day.
    if -24.0 < hours < 24.0:
        return hours
    return default


@lru_cache(maxsize=1)
def get_report_ingestion_settings() -> ReportIngestionSettings:
    """
    Return cached report ingestion settings from environment variables.
    """

    return ReportIngestionSettings(
        batch_size=max(1, _get_int_env("REPORT_INGEST_BATCH_SIZE", 100)),
        max_validation_errors=max(1, _get_int_env("REPORT_INGEST_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=_get_bool_env("REPORT_INGEST_LOG_VALIDATION_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_timezone_settings() -> TimezoneSettings:
    """
    Return cached timezone offsets from environment variables.
    """

    return TimezoneSettings(
        source_utc_offset_hours=_clamp_offset(_get_float_env("SOURCE_UTC_OFFSET_HOURS", 8.0), 8.0),
        display_utc_offset_hours=_clamp_offset(
            _get_float_env("DISPLAY_UTC_OFFSET_HOURS", -3.0), -3.0
        ),
    )


INTEGER_SETTINGS: tuple[str, ...] = (
    "REPORT_INGEST_BATCH_SIZE",
    "REPORT_INGEST_MAX_VALIDATION_ERRORS",
)
FLOAT_SETTINGS: tuple[str, ...] = (
    "SOURCE_UTC_OFFSET_HOURS",
    "DISPLAY_UTC_OFFSET_HOURS",
)


def numeric_setting_errors() -> list[str]:
    """
    Describe every numeric setting whose env value its reader would reject.

    Each value is checked with the same conversion its getter applies, so a
    value that passes here is never silently replaced by the default.
    """

    _load_env_once()
    errors: list[str] = []
    checks = [(name, int, "an integer") for name in INTEGER_SETTINGS]
    checks += [(name, float, "numeric") for name in FLOAT_SETTINGS]
    for name, convert, expected in checks:
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            convert(raw)
        except ValueError:
            errors.append(f"{name}={raw!r} is not {expected}.")
    return errors

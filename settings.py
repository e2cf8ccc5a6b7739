from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_SOURCE_ENV = "PM25_SOURCE"
_DATE_COLUMN_ENV = "PM25_DATE_COLUMN"
_VALUE_COLUMN_ENV = "PM25_VALUE_COLUMN"
_FETCH_TIMEOUT_ENV = "PM25_FETCH_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SOURCE = "./data/Torino-Rebaudengo_Polveri-sottili_2023-11-08_2024-11-07.csv"
DEFAULT_DATE_COLUMN = "Data rilevamento"
DEFAULT_VALUE_COLUMN = "Valore"


@dataclass(frozen=True)
class Settings:
    source: str
    date_column: str
    value_column: str
    fetch_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_fetch_timeout(default: float) -> float:
    value = os.getenv(_FETCH_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        source=_read_str_env(_SOURCE_ENV, DEFAULT_SOURCE),
        date_column=_read_str_env(_DATE_COLUMN_ENV, DEFAULT_DATE_COLUMN),
        value_column=_read_str_env(_VALUE_COLUMN_ENV, DEFAULT_VALUE_COLUMN),
        fetch_timeout=_read_fetch_timeout(30.0),
        log_level=_read_log_level("INFO"),
    )

"""Conversion of raw CSV records into typed readings."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from models.records import RawRecord, Reading, RowIssue
from services.errors import SourceFormatError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"

INVALID_DATE = "invalid date"
INVALID_VALUE = "invalid numeric value"

_DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+(?:\.[0-9]+)?")


@dataclass
class ExtractionResult:
    """Readings in input order plus the row issues met along the way."""

    readings: List[Reading] = field(default_factory=list)
    issues: List[RowIssue] = field(default_factory=list)


def require_columns(header: Sequence[str], *columns: str) -> None:
    """Raise ``SourceFormatError`` when any of ``columns`` is absent."""
    if not header:
        return
    missing = [column for column in columns if column not in header]
    if missing:
        raise SourceFormatError(f"CSV missing required columns: {', '.join(missing)}")


def parse_date(value: str) -> date:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Date is empty.")
    try:
        return datetime.strptime(candidate, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Invalid date {candidate!r}, expected DD/MM/YYYY") from exc


def parse_value(value: str) -> Optional[float]:
    """Parse a decimal string; empty means missing.

    Only plain ``.``-separated decimals are accepted; exponents, digit
    separators and non-ASCII digits raise ``ValueError``, as does a value
    too large to be finite.
    """
    candidate = value.strip()
    if not candidate:
        return None
    if not _DECIMAL_PATTERN.fullmatch(candidate):
        raise ValueError(f"Not a dot-separated decimal: {candidate!r}")
    parsed = float(candidate)
    if not math.isfinite(parsed):
        raise ValueError(f"Non-finite value {candidate!r}")
    return parsed


def extract_readings(
    records: Iterable[RawRecord],
    date_column: str,
    value_column: str,
) -> ExtractionResult:
    """Map records to readings, keeping null-valued ones.

    A non-numeric value becomes a missing reading. A record whose date cannot
    be parsed is rejected so it never lands in the wrong month.
    """
    result = ExtractionResult()

    for record in records:
        date_raw = record.get(date_column)
        value_raw = record.get(value_column)

        try:
            day = parse_date(date_raw)
        except ValueError:
            logger.warning(
                "Skipping row %d: %s",
                record.row_number,
                INVALID_DATE,
                extra={
                    "row_number": record.row_number,
                    "reason": INVALID_DATE,
                    "invalid_value": date_raw,
                },
            )
            result.issues.append(RowIssue(row_number=record.row_number, reason=INVALID_DATE))
            continue

        try:
            value = parse_value(value_raw)
        except ValueError:
            logger.warning(
                "Treating row %d as missing: %s",
                record.row_number,
                INVALID_VALUE,
                extra={
                    "row_number": record.row_number,
                    "reason": INVALID_VALUE,
                    "invalid_value": value_raw,
                },
            )
            result.issues.append(RowIssue(row_number=record.row_number, reason=INVALID_VALUE))
            value = None

        result.readings.append(Reading(date=date_raw, value=value, day=day))

    return result

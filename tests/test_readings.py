"""Unit tests for converting raw records into readings."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from models.records import MonthKey, RawRecord
from services.errors import SourceFormatError
from services.readings import (
    INVALID_DATE,
    INVALID_VALUE,
    extract_readings,
    parse_date,
    parse_value,
    require_columns,
)

DATE = "Data rilevamento"
VALUE = "Valore"


def _record(row_number: int, day: str, value: str) -> RawRecord:
    return RawRecord(row_number=row_number, fields={DATE: day, VALUE: value})


def test_parse_value_handles_empty_and_decimal() -> None:
    assert parse_value("") is None
    assert parse_value("  ") is None
    assert parse_value("12.5") == 12.5
    assert parse_value("-3") == -3.0
    assert parse_value("+4.25") == 4.25


@pytest.mark.parametrize(
    "raw",
    ["abc", "1,5", "nan", "inf", "1_000", "1e3", "12.", "\u0661\u0662", "9" * 400],
)
def test_parse_value_rejects_non_numeric(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_value(raw)


def test_parse_date_reads_day_month_year() -> None:
    assert parse_date("08/11/2023") == date(2023, 11, 8)


@pytest.mark.parametrize("raw", ["", "2023-11-08", "08-11-2023", "31/02/2024", "08/xx/2023"])
def test_parse_date_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_date(raw)


def test_extract_keeps_null_readings_in_order() -> None:
    records = [
        _record(2, "08/11/2023", "30"),
        _record(3, "09/11/2023", ""),
        _record(4, "10/11/2023", "20"),
    ]

    result = extract_readings(records, DATE, VALUE)

    assert [reading.value for reading in result.readings] == [30.0, None, 20.0]
    assert result.readings[1].is_missing
    assert result.readings[0].month_key == MonthKey(year=2023, month=11)
    assert result.issues == []


def test_extract_treats_non_numeric_value_as_missing(caplog) -> None:
    records = [_record(2, "08/11/2023", "abc")]

    with caplog.at_level(logging.WARNING):
        result = extract_readings(records, DATE, VALUE)

    assert len(result.readings) == 1
    assert result.readings[0].value is None
    assert [(issue.row_number, issue.reason) for issue in result.issues] == [(2, INVALID_VALUE)]
    assert any(getattr(record, "invalid_value", None) == "abc" for record in caplog.records)


def test_extract_rejects_malformed_date() -> None:
    records = [
        _record(2, "2023-11-08", "30"),
        _record(3, "09/11/2023", "12"),
    ]

    result = extract_readings(records, DATE, VALUE)

    assert [reading.date for reading in result.readings] == ["09/11/2023"]
    assert [(issue.row_number, issue.reason) for issue in result.issues] == [(2, INVALID_DATE)]


def test_require_columns_reports_missing_names() -> None:
    with pytest.raises(SourceFormatError, match="Valore"):
        require_columns(["Data rilevamento", "Stazione"], DATE, VALUE)


def test_require_columns_accepts_empty_header() -> None:
    require_columns([], DATE, VALUE)


def test_month_key_orders_numerically_and_validates() -> None:
    assert MonthKey(year=2023, month=12) < MonthKey(year=2024, month=1)
    assert MonthKey(year=2024, month=2) < MonthKey(year=2024, month=10)
    assert MonthKey(year=2024, month=3).label == "03/2024"
    with pytest.raises(ValueError):
        MonthKey(year=2024, month=13)

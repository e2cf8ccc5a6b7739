"""Semicolon-delimited CSV parsing into trimmed, ordered records."""

from __future__ import annotations

import csv
import io
import logging
from typing import Iterator, List, Tuple

from models.records import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"
_BOM = "\ufeff"


def _iter_rows(text: str, delimiter: str) -> Iterator[Tuple[int, List[str]]]:
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            # The reader resets on the next call, so only the offending line is lost.
            logger.warning(
                "Skipping unparseable row %d: %s",
                reader.line_num,
                exc,
                extra={"row_number": reader.line_num, "reason": "unparseable row"},
            )
            continue
        if not any(field.strip() for field in row):
            continue
        yield reader.line_num, [field.strip() for field in row]


def read_header(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    """Return the trimmed header names, or an empty list when there is none."""
    for _, row in _iter_rows(text, delimiter):
        return row
    return []


def parse_records(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[RawRecord]:
    """Parse CSV text with a header row into records in input order.

    Header names and values are stripped of surrounding whitespace. Blank
    lines are skipped. Rows with too few fields are padded with empty
    strings and surplus fields are dropped, so a ragged row never aborts the
    pass.
    """
    header: List[str] | None = None
    records: List[RawRecord] = []

    for row_number, values in _iter_rows(text, delimiter):
        if header is None:
            header = values
            continue

        if len(values) != len(header):
            logger.warning(
                "Row %d has %d fields, expected %d",
                row_number,
                len(values),
                len(header),
                extra={"row_number": row_number, "reason": "column count mismatch"},
            )
            values = (values + [""] * len(header))[: len(header)]

        records.append(RawRecord(row_number=row_number, fields=dict(zip(header, values))))

    return records

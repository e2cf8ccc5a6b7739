"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional


@dataclass(frozen=True, slots=True, order=True)
class MonthKey:
    """Calendar month bucket; ordering is numeric on (year, month)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}.")

    @classmethod
    def from_date(cls, day: date) -> MonthKey:
        return cls(year=day.year, month=day.month)

    @property
    def label(self) -> str:
        return f"{self.month:02d}/{self.year}"


@dataclass(frozen=True, slots=True)
class RawRecord:
    """A CSV row keyed by trimmed header name, with its 1-based source line."""

    row_number: int
    fields: Dict[str, str] = field(default_factory=dict)

    def get(self, column: str) -> str:
        return self.fields.get(column, "")


@dataclass(frozen=True, slots=True)
class Reading:
    """A single daily PM2.5 observation; ``value`` is None when missing."""

    date: str
    value: Optional[float]
    day: date

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.from_date(self.day)

    @property
    def is_missing(self) -> bool:
        return self.value is None


@dataclass(frozen=True, slots=True)
class RowIssue:
    """A non-fatal problem found while reading a CSV row."""

    row_number: int
    reason: str

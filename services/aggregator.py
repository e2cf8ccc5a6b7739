"""Aggregation logic for PM2.5 readings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from functools import reduce
from typing import Iterable, List, Mapping, Optional

from models.records import MonthKey, Reading

EXCEEDANCE_THRESHOLD = 25.0

_ONE_DECIMAL = Decimal("0.1")


def round_half_up(value: float) -> float:
    """Round to one decimal with ties away from zero (6.25 -> 6.3)."""
    return float(Decimal(str(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class OverallStats:
    """Summary statistics over every reading with a value."""

    count: int = 0
    min_value: float | None = None
    max_value: float | None = None
    avg_value: float | None = None
    exceedances: int = 0

    @classmethod
    def empty(cls) -> OverallStats:
        return cls()

    @property
    def has_data(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class MonthlyStats:
    """Finalized statistics for one calendar month."""

    month_key: MonthKey
    total_days: int
    exceedances: int
    avg_value: float | None
    exceedance_percentage: float | None


@dataclass(frozen=True)
class MonthAccumulator:
    """Immutable running state for one month during the fold."""

    month_key: MonthKey
    count: int = 0
    total: float = 0.0
    exceedances: int = 0

    def add(self, value: Optional[float]) -> MonthAccumulator:
        if value is None:
            return self
        return replace(
            self,
            count=self.count + 1,
            total=self.total + value,
            exceedances=self.exceedances + (1 if value > EXCEEDANCE_THRESHOLD else 0),
        )

    def finalize(self) -> MonthlyStats:
        if self.count:
            avg_value: float | None = self.total / self.count
            percentage: float | None = round_half_up(self.exceedances / self.count * 100)
        else:
            avg_value = None
            percentage = None
        return MonthlyStats(
            month_key=self.month_key,
            total_days=self.count,
            exceedances=self.exceedances,
            avg_value=avg_value,
            exceedance_percentage=percentage,
        )


@dataclass(frozen=True)
class AggregationSummary:
    """Everything the presentation layer consumes from one pass."""

    series: List[Reading] = field(default_factory=list)
    overall: OverallStats = field(default_factory=OverallStats.empty)
    monthly: List[MonthlyStats] = field(default_factory=list)

    @property
    def last_updated(self) -> str | None:
        if not self.series:
            return None
        return self.series[-1].date


def _fold_month(
    buckets: Mapping[MonthKey, MonthAccumulator], reading: Reading
) -> Mapping[MonthKey, MonthAccumulator]:
    key = reading.month_key
    bucket = buckets.get(key) or MonthAccumulator(month_key=key)
    return {**buckets, key: bucket.add(reading.value)}


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def overall(self, readings: Iterable[Reading]) -> OverallStats:
        values = [reading.value for reading in readings if reading.value is not None]
        if not values:
            return OverallStats.empty()

        return OverallStats(
            count=len(values),
            min_value=min(values),
            max_value=max(values),
            avg_value=sum(values) / len(values),
            exceedances=sum(1 for value in values if value > EXCEEDANCE_THRESHOLD),
        )

    def monthly(self, readings: Iterable[Reading]) -> List[MonthlyStats]:
        """Bucket readings by calendar month, sorted by (year, month).

        Readings without a value still open their month but do not count
        towards days, exceedances or the average.
        """
        buckets = reduce(_fold_month, readings, {})
        finalized = [bucket.finalize() for bucket in buckets.values()]
        return sorted(finalized, key=lambda stats: stats.month_key)

    def aggregate(self, readings: Iterable[Reading]) -> AggregationSummary:
        items = list(readings)
        series = [reading for reading in items if reading.value is not None]
        return AggregationSummary(
            series=series,
            overall=self.overall(series),
            monthly=self.monthly(items),
        )

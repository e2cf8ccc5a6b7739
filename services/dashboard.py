"""Load orchestration: retrieve the CSV, aggregate it, publish the result."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from app.schemas import (
    DashboardResult,
    MonthlyRow,
    OverallSummary,
    ProcessingIssue,
    ReadingPoint,
)
from services.aggregator import EXCEEDANCE_THRESHOLD, AggregationSummary, Aggregator
from services.csv_adapter import parse_records, read_header
from services.errors import DashboardNotLoadedError
from services.readings import extract_readings, require_columns
from services.source import SourceLoader
from settings import get_settings

logger = logging.getLogger(__name__)


class DashboardService:
    """Coordinates retrieval, aggregation, and the currently published result."""

    def __init__(
        self,
        loader: SourceLoader,
        aggregator: Aggregator,
        source: str,
        date_column: str,
        value_column: str,
    ) -> None:
        self.loader = loader
        self.aggregator = aggregator
        self.source = source
        self.date_column = date_column
        self.value_column = value_column
        self._current: Optional[DashboardResult] = None

    async def load(self, source: Optional[str] = None) -> DashboardResult:
        """Fetch the source and publish a fresh result.

        Retrieval and format errors propagate and leave the previously
        published result untouched.
        """
        target = source or self.source
        text = await self.loader.fetch_text(target)
        result = self.build(text, target)
        self._current = result
        return result

    def build(self, text: str, source: str) -> DashboardResult:
        """Aggregate CSV text without publishing it."""
        start_time = time.perf_counter()

        require_columns(read_header(text), self.date_column, self.value_column)
        records = parse_records(text)
        extraction = extract_readings(records, self.date_column, self.value_column)
        summary = self.aggregator.aggregate(extraction.readings)

        processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Aggregated PM2.5 readings",
            extra={
                "source": source,
                "reading_count": summary.overall.count,
                "month_count": len(summary.monthly),
                "issue_count": len(extraction.issues),
                "processing_ms": processing_ms,
            },
        )

        return DashboardResult(
            source=source,
            loaded_at=datetime.now(timezone.utc),
            processing_ms=processing_ms,
            threshold=EXCEEDANCE_THRESHOLD,
            last_updated=summary.last_updated,
            issues=[
                ProcessingIssue(row_number=issue.row_number, reason=issue.reason)
                for issue in extraction.issues
            ],
            **_summary_fields(summary),
        )

    def current(self) -> DashboardResult:
        if self._current is None:
            raise DashboardNotLoadedError("Dashboard data has not been loaded yet.")
        return self._current


def _summary_fields(summary: AggregationSummary) -> dict:
    overall = summary.overall
    return {
        "series": [
            ReadingPoint(date=reading.date, value=reading.value)
            for reading in summary.series
        ],
        "overall": OverallSummary(
            count=overall.count,
            min_value=overall.min_value,
            max_value=overall.max_value,
            avg_value=overall.avg_value,
            exceedances=overall.exceedances,
            has_data=overall.has_data,
        ),
        "monthly": [
            MonthlyRow(
                year=stats.month_key.year,
                month=stats.month_key.month,
                label=stats.month_key.label,
                total_days=stats.total_days,
                exceedances=stats.exceedances,
                avg_value=stats.avg_value,
                exceedance_percentage=stats.exceedance_percentage,
            )
            for stats in summary.monthly
        ],
    }


@lru_cache
def build_default_service() -> DashboardService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    return DashboardService(
        loader=SourceLoader(timeout=settings.fetch_timeout),
        aggregator=Aggregator(),
        source=settings.source,
        date_column=settings.date_column,
        value_column=settings.value_column,
    )

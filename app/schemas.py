"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReadingPoint(BaseModel):
    """One point of the daily time series."""

    date: str = Field(..., description="Detection date as DD/MM/YYYY.")
    value: float


class OverallSummary(BaseModel):
    """Statistics over the whole retained dataset."""

    count: int = Field(..., ge=0)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    avg_value: Optional[float] = None
    exceedances: int = Field(..., ge=0)
    has_data: bool = Field(..., description="False when no reading carries a value.")


class MonthlyRow(BaseModel):
    """Statistics for one calendar month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    label: str = Field(..., description="Month key formatted as MM/YYYY.")
    total_days: int = Field(..., ge=0)
    exceedances: int = Field(..., ge=0)
    avg_value: Optional[float] = None
    exceedance_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class ProcessingIssue(BaseModel):
    """Details about a row that was skipped or treated as missing."""

    row_number: int = Field(..., ge=1)
    reason: str


class DashboardResult(BaseModel):
    """Full payload handed to the presentation layer."""

    source: str
    loaded_at: datetime
    processing_ms: int = Field(
        ..., ge=0, description="Duration in milliseconds from parse start to finish."
    )
    threshold: float = Field(..., description="Exceedance threshold in µg/m³.")
    series: List[ReadingPoint] = Field(default_factory=list)
    overall: OverallSummary
    monthly: List[MonthlyRow] = Field(default_factory=list)
    last_updated: Optional[str] = None
    issues: List[ProcessingIssue] = Field(default_factory=list)

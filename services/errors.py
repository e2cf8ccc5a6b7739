"""Exceptions raised while loading and aggregating dashboard data."""

from __future__ import annotations


class DashboardError(Exception):
    """Base exception for the PM2.5 dashboard."""


class RetrievalError(DashboardError):
    """The CSV source could not be fetched or decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to retrieve {source!r}: {reason}")
        self.source = source
        self.reason = reason


class SourceFormatError(DashboardError):
    """The CSV header does not carry the columns the pipeline needs."""


class DashboardNotLoadedError(DashboardError):
    """No dashboard data has been published yet."""

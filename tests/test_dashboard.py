import asyncio
import logging

import httpx
import pytest

from services.aggregator import Aggregator
from services.dashboard import DashboardService
from services.errors import DashboardNotLoadedError, RetrievalError, SourceFormatError
from services.source import SourceLoader

CSV_CONTENT = """Data rilevamento;Valore
08/11/2023;30
09/11/2023;
10/11/2023;20
"""

SOURCE_URL = "https://example.test/pm25.csv"


def _service(source: str, transport: httpx.AsyncBaseTransport | None = None) -> DashboardService:
    return DashboardService(
        loader=SourceLoader(timeout=5.0, transport=transport),
        aggregator=Aggregator(),
        source=source,
        date_column="Data rilevamento",
        value_column="Valore",
    )


def _serving(body: str, status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


def test_load_from_file_publishes_result(tmp_path) -> None:
    path = tmp_path / "pm25.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    service = _service(str(path))

    result = asyncio.run(service.load())

    assert service.current() is result
    assert result.source == str(path)
    assert result.threshold == 25.0
    assert result.overall.count == 2
    assert result.overall.avg_value == 25.0
    assert result.overall.has_data is True
    assert [point.date for point in result.series] == ["08/11/2023", "10/11/2023"]
    assert result.last_updated == "10/11/2023"
    assert len(result.monthly) == 1
    row = result.monthly[0]
    assert (row.year, row.month, row.label) == (2023, 11, "11/2023")
    assert row.exceedance_percentage == 50.0
    assert result.issues == []


def test_load_from_url(tmp_path) -> None:
    service = _service(SOURCE_URL, transport=_serving(CSV_CONTENT))

    result = asyncio.run(service.load())

    assert result.source == SOURCE_URL
    assert result.overall.exceedances == 1


def test_current_before_load_raises() -> None:
    service = _service(SOURCE_URL)

    with pytest.raises(DashboardNotLoadedError):
        service.current()


def test_http_error_status_is_fatal_and_publishes_nothing() -> None:
    service = _service(SOURCE_URL, transport=_serving("gone", status_code=404))

    with pytest.raises(RetrievalError, match="404"):
        asyncio.run(service.load())

    with pytest.raises(DashboardNotLoadedError):
        service.current()


def test_unreachable_source_raises_retrieval_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(SOURCE_URL, transport=httpx.MockTransport(handler))

    with pytest.raises(RetrievalError):
        asyncio.run(service.load())


def test_missing_file_raises_retrieval_error(tmp_path) -> None:
    service = _service(str(tmp_path / "missing.csv"))

    with pytest.raises(RetrievalError):
        asyncio.run(service.load())


def test_non_utf8_bytes_raise_retrieval_error(tmp_path) -> None:
    path = tmp_path / "latin.csv"
    path.write_bytes("Data rilevamento;Valore\n08/11/2023;\xff\n".encode("latin-1"))
    service = _service(str(path))

    with pytest.raises(RetrievalError, match="UTF-8"):
        asyncio.run(service.load())


def test_failed_reload_keeps_previous_result(tmp_path) -> None:
    path = tmp_path / "pm25.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    service = _service(str(path))
    first = asyncio.run(service.load())

    path.unlink()
    with pytest.raises(RetrievalError):
        asyncio.run(service.load())

    assert service.current() is first


def test_reload_replaces_previous_result(tmp_path) -> None:
    path = tmp_path / "pm25.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    service = _service(str(path))
    asyncio.run(service.load())

    path.write_text(CSV_CONTENT + "01/12/2023;40\n", encoding="utf-8")
    second = asyncio.run(service.load())

    assert service.current() is second
    assert second.overall.count == 3
    assert [row.label for row in second.monthly] == ["11/2023", "12/2023"]


def test_build_missing_columns_raises_format_error() -> None:
    service = _service(SOURCE_URL)

    with pytest.raises(SourceFormatError, match="CSV missing required columns"):
        service.build("Data;Valore\n08/11/2023;30\n", "inline")


def test_build_empty_text_reports_no_data() -> None:
    service = _service(SOURCE_URL)

    result = service.build("", "inline")

    assert result.overall.count == 0
    assert result.overall.has_data is False
    assert result.overall.avg_value is None
    assert result.monthly == []
    assert result.last_updated is None


def test_build_collects_row_issues() -> None:
    service = _service(SOURCE_URL)
    text = (
        "Data rilevamento;Valore\n"
        "08/11/2023;30\n"
        "2023-11-09;12\n"
        "10/11/2023;abc\n"
    )

    result = service.build(text, "inline")

    assert result.overall.count == 1
    assert sorted((issue.row_number, issue.reason) for issue in result.issues) == [
        (3, "invalid date"),
        (4, "invalid numeric value"),
    ]


def test_build_does_not_publish() -> None:
    service = _service(SOURCE_URL)

    service.build(CSV_CONTENT, "inline")

    with pytest.raises(DashboardNotLoadedError):
        service.current()


def test_build_logs_summary_and_skipped_rows(caplog) -> None:
    service = _service(SOURCE_URL)
    text = "Data rilevamento;Valore\n08/11/2023;30\nbad-date;12\n"

    with caplog.at_level(logging.INFO):
        service.build(text, "inline")

    skipped = [record for record in caplog.records if record.name == "services.readings"]
    assert any("Skipping row" in record.getMessage() for record in skipped)
    assert any(getattr(record, "row_number", None) == 3 for record in skipped)

    summaries = [record for record in caplog.records if record.name == "services.dashboard"]
    assert summaries
    assert summaries[-1].reading_count == 1
    assert summaries[-1].issue_count == 1
    assert summaries[-1].source == "inline"

"""Tests for CSV sources."""

import httpx
import pytest

from signal_ingest.config import Config
from signal_ingest.services.retry import SourceReadError
from signal_ingest.services.sources import (
    RemoteCsvClient,
    parse_csv_text,
    read_local_csv,
    read_rows,
    sheet_export_url,
)


@pytest.fixture
def config(tmp_path):
    return Config(_env_file=None, database_path=str(tmp_path / "test.db"), max_retry_attempts=0)


def _client(config, handler):
    client = RemoteCsvClient(config)
    client._client = httpx.Client(transport=httpx.MockTransport(handler))
    return client


class TestParseCsvText:
    def test_basic(self):
        rows = parse_csv_text("Company,Signal\nAcme,Raised $40M\n")
        assert rows == [{"Company": "Acme", "Signal": "Raised $40M"}]

    def test_byte_order_mark_stripped(self):
        rows = parse_csv_text("\ufeffCompany,Signal\nAcme,Hiring\n")
        assert list(rows[0]) == ["Company", "Signal"]

    def test_leading_comments_and_blank_lines_skipped(self):
        text = "# exported 2025-06-01\n\n# analyst: jd\nCompany,Signal\nAcme,Hiring\n"
        assert parse_csv_text(text) == [{"Company": "Acme", "Signal": "Hiring"}]

    def test_blank_rows_skipped(self):
        text = "Company,Signal\nAcme,Hiring\n,\n , \nBlue Forge,Layoffs\n"
        assert [r["Company"] for r in parse_csv_text(text)] == ["Acme", "Blue Forge"]

    def test_overflow_cells_dropped(self):
        rows = parse_csv_text("Company,Signal\nAcme,Hiring,extra\n")
        assert rows == [{"Company": "Acme", "Signal": "Hiring"}]

    def test_quoted_commas(self):
        rows = parse_csv_text('Company,Signal\n"Acme, Inc.","Raised $40M, Series B"\n')
        assert rows[0]["Company"] == "Acme, Inc."

    @pytest.mark.parametrize("separator", ["\x0b", "\x0c", "\u2028", "\x1c"])
    def test_quoted_cell_keeps_line_separators(self, separator):
        text = f'Company,Signal\nAcme,"Series B{separator}led by Example Ventures"\nBlue Forge,Hiring\n'
        rows = parse_csv_text(text)
        assert rows == [
            {"Company": "Acme", "Signal": f"Series B{separator}led by Example Ventures"},
            {"Company": "Blue Forge", "Signal": "Hiring"},
        ]

    def test_quoted_newline_after_comment(self):
        text = '# exported\nCompany,Signal\nAcme,"line one\r\nline two"\n'
        assert parse_csv_text(text)[0]["Signal"] == "line one\r\nline two"

    @pytest.mark.parametrize("text", ["", "\n\n", "# only a comment\n"])
    def test_empty(self, text):
        assert parse_csv_text(text) == []


class TestSheetExportUrl:
    def test_without_gid(self):
        assert sheet_export_url("sheet:abc123") == (
            "https://docs.google.com/spreadsheets/d/abc123/export?format=csv"
        )

    def test_with_gid(self):
        assert sheet_export_url("sheet:abc123#42").endswith("export?format=csv&gid=42")

    def test_missing_id(self):
        with pytest.raises(SourceReadError):
            sheet_export_url("sheet:")


class TestReadLocalCsv:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "signals.csv"
        path.write_text("Company,Signal\nAcme,Hiring\n", encoding="utf-8")
        assert read_local_csv(path) == [{"Company": "Acme", "Signal": "Hiring"}]

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceReadError):
            read_local_csv(tmp_path / "missing.csv")

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes(b"Company\n\xff\xfe\xfa\n")
        with pytest.raises(SourceReadError):
            read_local_csv(path)


class TestReadRows:
    def test_local_path(self, tmp_path, config):
        path = tmp_path / "companies.csv"
        path.write_text("name,website\nAcme,acme.com\n")
        assert read_rows(str(path), config) == [{"name": "Acme", "website": "acme.com"}]

    def test_url(self, config):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="Company,Signal\nAcme,Hiring\n")

        rows = read_rows("https://example.com/signals.csv", config, client=_client(config, handler))
        assert rows == [{"Company": "Acme", "Signal": "Hiring"}]
        assert seen == ["https://example.com/signals.csv"]

    def test_sheet_reference(self, config):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="Company\nAcme\n")

        read_rows("sheet:abc123", config, client=_client(config, handler))
        assert seen == ["https://docs.google.com/spreadsheets/d/abc123/export?format=csv"]

    def test_http_error_becomes_source_error(self, config):
        def handler(request):
            return httpx.Response(404, text="not found")

        with pytest.raises(SourceReadError):
            read_rows("https://example.com/missing.csv", config, client=_client(config, handler))

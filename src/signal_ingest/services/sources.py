"""Input sources: local CSV files, CSV URLs and Google Sheets exports.

Every source yields plain ``dict`` rows keyed by the raw header. A source
that cannot be read at all raises ``SourceReadError``; that is the only
failure that aborts a batch.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path

import httpx
import structlog

from signal_ingest.config import Config
from signal_ingest.services.retry import SourceReadError, with_retry

logger = structlog.get_logger()

SHEET_PREFIX = "sheet:"


def parse_csv_text(text: str) -> list[dict[str, str]]:
    """Parse CSV text, skipping leading ``#`` comment lines and blank lines."""
    text = text.lstrip("\ufeff")
    while text:
        line, _, rest = text.partition("\n")
        if line.strip() and not line.lstrip().startswith("#"):
            break
        text = rest
    if not text:
        return []

    # body reaches csv verbatim; quoted cells may contain \x0c or \u2028
    reader = csv.DictReader(io.StringIO(text, newline=""))
    rows: list[dict[str, str]] = []
    for row in reader:
        # restkey collects overflow cells under None
        row.pop(None, None)  # type: ignore[call-overload]
        if not any((v or "").strip() for v in row.values()):
            continue
        rows.append(row)
    return rows


def sheet_export_url(reference: str) -> str:
    """``sheet:<spreadsheet-id>[#gid]`` -> the sheet's CSV export URL."""
    body = reference[len(SHEET_PREFIX):].strip()
    sheet_id, _, gid = body.partition("#")
    if not sheet_id:
        raise SourceReadError(f"Invalid sheet reference: {reference!r}")
    url = f"https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"
    if gid:
        url += f"&gid={gid}"
    return url


class RemoteCsvClient:
    """Fetches CSV documents over HTTP with bounded retries."""

    def __init__(self, config: Config):
        self.max_retries = config.max_retry_attempts
        self._client = httpx.Client(
            timeout=config.remote_timeout_seconds,
            follow_redirects=True,
        )

    def fetch_text(self, url: str) -> str:
        fetch = with_retry(self.max_retries)(self._do_fetch)
        return fetch(url)

    def _do_fetch(self, url: str) -> str:
        resp = self._client.get(url)
        resp.raise_for_status()
        return resp.text

    def close(self) -> None:
        self._client.close()


def read_local_csv(path: str | Path) -> list[dict[str, str]]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Cannot read {path}: {exc}") from exc
    return parse_csv_text(text)


def read_rows(source: str, config: Config, client: RemoteCsvClient | None = None) -> list[dict[str, str]]:
    """Load every row of ``source`` in file order."""
    if source.startswith(SHEET_PREFIX):
        url = sheet_export_url(source)
    elif source.startswith(("http://", "https://")):
        url = source
    else:
        rows = read_local_csv(source)
        logger.info("source_loaded", source=source, rows=len(rows))
        return rows

    owns_client = client is None
    remote = client or RemoteCsvClient(config)
    try:
        text = remote.fetch_text(url)
    except httpx.HTTPError as exc:
        raise SourceReadError(f"Cannot fetch {source}: {exc}") from exc
    finally:
        if owns_client:
            remote.close()

    rows = parse_csv_text(text)
    logger.info("source_loaded", source=source, rows=len(rows))
    return rows

"""Batch pipeline: one parameterized runner for every import flavor.

source -> raw rows -> column adapter -> engine (row by row, in file order)
-> reporter. The read-only indices are loaded concurrently before the
first row is processed.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import structlog
from pydantic import ValidationError

from signal_ingest.config import Config
from signal_ingest.database import Database
from signal_ingest.models import Company, Industry, Outcome, Segment
from signal_ingest.services.adapters import ADAPTERS, normalize_row
from signal_ingest.services.engine import IngestEngine
from signal_ingest.services.identity import CompanyIndex
from signal_ingest.services.reporter import BatchReporter
from signal_ingest.services.sources import read_rows
from signal_ingest.services.taxonomy import TaxonomyIndex

logger = structlog.get_logger()

FLAVORS = ("signals", "companies", "projects", "corrections", "taxonomy")


def build_indices(db: Database) -> tuple[CompanyIndex, TaxonomyIndex]:
    """Load companies, industries and segments in parallel and index them."""
    loaders: dict[str, Callable[[], list[Any]]] = {
        "companies": db.get_all_companies,
        "industries": db.get_all_industries,
        "segments": db.get_all_segments,
    }
    loaded: dict[str, list[Any]] = {}

    with ThreadPoolExecutor(max_workers=len(loaders)) as executor:
        futures = {executor.submit(fn): name for name, fn in loaders.items()}
        for future in as_completed(futures):
            loaded[futures[future]] = future.result()

    companies: list[Company] = loaded["companies"]
    industries: list[Industry] = loaded["industries"]
    segments: list[Segment] = loaded["segments"]
    logger.info(
        "indices_loaded",
        companies=len(companies),
        industries=len(industries),
        segments=len(segments),
    )
    return CompanyIndex.build(companies), TaxonomyIndex.build(industries, segments)


def _handler_for(engine: IngestEngine, flavor: str, create_missing: bool, require_taxonomy: bool) -> tuple[Callable, dict[str, Any]]:
    if flavor == "signals":
        return engine.ingest_signal, {"create_missing": create_missing}
    if flavor == "companies":
        return engine.ingest_company, {"require_taxonomy": require_taxonomy}
    if flavor == "projects":
        return engine.ingest_project, {"create_missing": create_missing}
    if flavor == "corrections":
        return engine.apply_correction, {}
    if flavor == "taxonomy":
        return engine.seed_taxonomy_row, {}
    raise ValueError(f"Unknown import flavor: {flavor!r}")


def default_issues_log_path(config: Config, flavor: str) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return Path(config.issues_dir) / f"{flavor}-{stamp}.log"


def run_rows(
    rows: list[dict[str, str]],
    flavor: str,
    config: Config,
    db: Database,
    dry_run: bool = False,
    create_missing: bool = True,
    require_taxonomy: bool = False,
) -> BatchReporter:
    """Process already-loaded rows strictly in order and return the batch report."""
    if flavor not in FLAVORS:
        raise ValueError(f"Unknown import flavor: {flavor!r}")

    companies, taxonomy = build_indices(db)
    reporter = BatchReporter(dry_run=dry_run)
    engine = IngestEngine(db, config, companies, taxonomy, reporter=reporter, dry_run=dry_run)
    handler, kwargs = _handler_for(engine, flavor, create_missing, require_taxonomy)
    adapter = ADAPTERS[flavor]

    for row_number, raw in enumerate(rows, start=1):
        try:
            record = adapter(normalize_row(raw), row_number)
        except ValidationError as exc:
            reporter.record(Outcome.rejected, f"row {row_number}: unreadable row ({exc.error_count()} errors)")
            continue
        except Exception as exc:
            logger.warning("row_adapter_failed", row=row_number, error=str(exc))
            reporter.record(Outcome.rejected, f"row {row_number}: unreadable row ({exc})")
            continue
        engine.process(record, handler, **kwargs)

    logger.info(
        "batch_complete",
        flavor=flavor,
        dry_run=dry_run,
        rows=reporter.total_rows,
        **{outcome.value: count for outcome, count in reporter.counts.items()},
    )
    return reporter


def run_import(
    source: str,
    flavor: str,
    config: Config,
    db: Database,
    dry_run: bool = False,
    create_missing: bool = True,
    require_taxonomy: bool = False,
    issues_log: str | Path | None = None,
) -> BatchReporter:
    """Read ``source`` and run it through the pipeline.

    Raises ``SourceReadError`` when the source cannot be read; every other
    failure is recorded per row. The full issues log is always written.
    """
    logger.info("batch_started", source=source, flavor=flavor, dry_run=dry_run)
    rows = read_rows(source, config)
    reporter = run_rows(
        rows,
        flavor,
        config,
        db,
        dry_run=dry_run,
        create_missing=create_missing,
        require_taxonomy=require_taxonomy,
    )
    reporter.write_issues_log(issues_log or default_issues_log_path(config, flavor))
    return reporter

"""Typer CLI for the signal ingestion pipeline.

All commands load configuration, initialize the database, and delegate
to the batch pipeline. The exit code is non-zero only when a batch cannot
start (bad configuration, unreadable source).
"""

from __future__ import annotations

import logging
from typing import Optional

import structlog
import typer

from signal_ingest.config import Config
from signal_ingest.database import Database

app = typer.Typer(
    name="signal-ingest",
    help="Ingest and reconcile company signals, projects and taxonomy from tabular sources.",
    add_completion=False,
)

logger = structlog.get_logger()


def _get_config() -> Config:
    try:
        config = Config()  # type: ignore[call-arg]
    except Exception as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(1)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level)),
    )
    return config


def _get_db(config: Config) -> Database:
    db = Database(config.database_path, timeout=config.store_timeout_seconds)
    db.init_db()
    return db


def _run_batch(
    source: str,
    flavor: str,
    dry_run: bool,
    issues_log: Optional[str],
    create_missing: bool = True,
    require_taxonomy: bool = False,
) -> None:
    from signal_ingest.services.pipeline import run_import
    from signal_ingest.services.reporter import render_summary
    from signal_ingest.services.retry import SourceReadError

    config = _get_config()
    db = _get_db(config)
    try:
        reporter = run_import(
            source,
            flavor,
            config,
            db,
            dry_run=dry_run,
            create_missing=create_missing,
            require_taxonomy=require_taxonomy,
            issues_log=issues_log,
        )
    except SourceReadError as exc:
        typer.echo(f"Cannot read source: {exc}", err=True)
        raise typer.Exit(1)

    for line in render_summary(reporter.summarize(limit=config.summary_issue_limit)):
        typer.echo(line)


# ===================================================================
# Database
# ===================================================================

@app.command()
def init_db() -> None:
    """Initialize the database schema."""
    config = _get_config()
    _get_db(config)
    typer.echo("Database initialized successfully.")


@app.command()
def seed_taxonomy(
    source: str = typer.Argument(..., help="CSV path, URL or sheet:<id>[#gid]"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report planned changes without writing"),
    issues_log: Optional[str] = typer.Option(None, "--issues-log", help="Where to write the full issues log"),
) -> None:
    """Create missing industries and segments."""
    _run_batch(source, "taxonomy", dry_run, issues_log)


# ===================================================================
# Imports
# ===================================================================

@app.command()
def import_signals(
    source: str = typer.Argument(..., help="CSV path, URL or sheet:<id>[#gid]"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report planned changes without writing"),
    issues_log: Optional[str] = typer.Option(None, "--issues-log", help="Where to write the full issues log"),
    create_missing: bool = typer.Option(
        True, "--create-missing/--no-create-missing", help="Create companies that cannot be resolved"
    ),
) -> None:
    """Import company signals."""
    _run_batch(source, "signals", dry_run, issues_log, create_missing=create_missing)


@app.command()
def import_companies(
    source: str = typer.Argument(..., help="CSV path, URL or sheet:<id>[#gid]"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report planned changes without writing"),
    issues_log: Optional[str] = typer.Option(None, "--issues-log", help="Where to write the full issues log"),
    require_taxonomy: bool = typer.Option(
        False, "--require-taxonomy", help="Reject rows whose segment cannot be mapped"
    ),
) -> None:
    """Import companies with their industry and segment tags."""
    _run_batch(source, "companies", dry_run, issues_log, require_taxonomy=require_taxonomy)


@app.command()
def import_projects(
    source: str = typer.Argument(..., help="CSV path, URL or sheet:<id>[#gid]"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report planned changes without writing"),
    issues_log: Optional[str] = typer.Option(None, "--issues-log", help="Where to write the full issues log"),
    create_missing: bool = typer.Option(
        True, "--create-missing/--no-create-missing", help="Create companies that cannot be resolved"
    ),
) -> None:
    """Import facility / investment project announcements."""
    _run_batch(source, "projects", dry_run, issues_log, create_missing=create_missing)


@app.command()
def reconcile_corrections(
    source: str = typer.Argument(..., help="CSV path, URL or sheet:<id>[#gid]"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report planned changes without writing"),
    issues_log: Optional[str] = typer.Option(None, "--issues-log", help="Where to write the full issues log"),
) -> None:
    """Apply operator corrections (company_slug, field, new_value)."""
    _run_batch(source, "corrections", dry_run, issues_log)


# ===================================================================
# Query Commands
# ===================================================================

@app.command()
def show_company(
    slug: str = typer.Argument(..., help="Company slug"),
) -> None:
    """Show a company with its segments, signals and projects."""
    config = _get_config()
    db = _get_db(config)

    company = db.get_company_by_slug(slug)
    if not company:
        typer.echo(f"Company '{slug}' not found.", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n{company.name} ({company.slug})")
    typer.echo("-" * 60)
    typer.echo(f"  Website: {company.website or '-'}")
    typer.echo(f"  HQ: {', '.join(p for p in (company.hq_city, company.hq_state, company.country) if p) or '-'}")
    typer.echo(f"  Industry: {company.industry or '-'}")
    typer.echo(f"  Score: {company.composite_score if company.composite_score is not None else '-'}")

    segments = {s.id: s for s in db.get_all_segments()}
    links = db.get_company_segments(company.id)  # type: ignore[arg-type]
    if links:
        typer.echo("  Segments:")
        for link in links:
            segment = segments.get(link.segment_id)
            name = segment.name if segment else f"#{link.segment_id}"
            typer.echo(f"    - {name}{' (primary)' if link.is_primary else ''}")

    signals = db.get_signals_for_company(company.id)  # type: ignore[arg-type]
    typer.echo(f"\nSignals ({len(signals)}):")
    for s in signals:
        typer.echo(
            f"  {s.signal_date.isoformat()} | tier {s.tier} | {s.signal_type.value} | "
            f"{s.status.value} | {s.title}"
        )

    projects = db.get_projects_for_company(company.id)  # type: ignore[arg-type]
    if projects:
        typer.echo(f"\nProjects ({len(projects)}):")
        for p in projects:
            when = p.announcement_date.isoformat() if p.announcement_date else "undated"
            typer.echo(
                f"  {when} | {p.location_city or '?'}, {p.location_state or '?'} | "
                f"jobs: {p.jobs_announced or '-'} | capex: {p.capex_millions or '-'}M"
            )


if __name__ == "__main__":
    app()

"""SQLite database layer with full schema and CRUD for the signal store.

All datetimes are stored as ISO 8601 strings in UTC, dates as ISO
``YYYY-MM-DD`` strings. Uniqueness violations surface as
``ConflictError`` and busy/locked databases as ``TransientStoreError``.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import structlog

from signal_ingest.models import (
    Company,
    CompanySegment,
    Industry,
    Project,
    Segment,
    Signal,
    SignalStatus,
    SignalType,
)
from signal_ingest.services.retry import ConflictError, TransientStoreError

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Schema SQL
# ---------------------------------------------------------------------------

_SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS companies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    website TEXT,
    hq_city TEXT,
    hq_state TEXT,
    country TEXT,
    founded_year INTEGER,
    ownership TEXT,
    composite_score REAL,
    industry TEXT,
    messaging_hook TEXT,
    description TEXT,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS industries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS segments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    industry_id INTEGER NOT NULL REFERENCES industries(id),
    description TEXT,
    display_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS company_segments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id INTEGER NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    segment_id INTEGER NOT NULL REFERENCES segments(id) ON DELETE CASCADE,
    is_primary INTEGER NOT NULL DEFAULT 0,
    UNIQUE(company_id, segment_id)
);

CREATE TABLE IF NOT EXISTS signals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id INTEGER NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    signal_type TEXT NOT NULL,
    tier INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    signal_date TEXT NOT NULL,
    discovered_date TEXT NOT NULL,
    expiry_date TEXT,
    source_url TEXT,
    source_type TEXT,
    source_2_url TEXT,
    source_2_type TEXT,
    strength INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'active',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(company_id, signal_type, signal_date)
);

CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id INTEGER NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    location_city TEXT,
    location_state TEXT,
    county TEXT,
    jobs_announced INTEGER,
    capex_millions REAL,
    sector TEXT,
    project_type TEXT,
    announcement_date TEXT,
    fdi_origin TEXT,
    source_url TEXT,
    notes TEXT,
    created_at TEXT NOT NULL
);
"""

_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_companies_name ON companies(name);
CREATE INDEX IF NOT EXISTS idx_segments_industry_id ON segments(industry_id);
CREATE INDEX IF NOT EXISTS idx_company_segments_company_id ON company_segments(company_id);
CREATE INDEX IF NOT EXISTS idx_signals_company_id ON signals(company_id);
CREATE INDEX IF NOT EXISTS idx_signals_signal_date ON signals(signal_date);
CREATE INDEX IF NOT EXISTS idx_signals_status ON signals(status);
CREATE INDEX IF NOT EXISTS idx_projects_company_state ON projects(company_id, location_state);
"""

_COMPANY_COLUMNS = {
    "name", "website", "hq_city", "hq_state", "country", "founded_year", "ownership",
    "composite_score", "industry", "messaging_hook", "description", "notes",
}
_SIGNAL_COLUMNS = {
    "signal_type", "tier", "title", "description", "expiry_date", "source_url", "source_type",
    "source_2_url", "source_2_type", "strength", "status",
}
_PROJECT_COLUMNS = {
    "location_city", "county", "jobs_announced", "capex_millions", "sector", "project_type",
    "announcement_date", "fdi_origin", "source_url", "notes",
}

_TRANSIENT_MARKERS = ("locked", "busy", "unable to open")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _dt_to_iso(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def _iso_to_dt(val: str | None) -> datetime | None:
    if val is None:
        return None
    dt = datetime.fromisoformat(val)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _date_to_iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _iso_to_date(val: str | None) -> date | None:
    return date.fromisoformat(val) if val else None


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return _dt_to_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


def _set_clause(kwargs: dict[str, Any], allowed: set[str], table: str) -> tuple[str, list[Any]]:
    unknown = set(kwargs) - allowed
    if unknown:
        raise ValueError(f"Unknown {table} column(s): {sorted(unknown)}")
    sets = ", ".join(f"{k} = ?" for k in kwargs)
    return sets, [_to_db(v) for v in kwargs.values()]


# ---------------------------------------------------------------------------
# Database class
# ---------------------------------------------------------------------------

class Database:
    def __init__(self, db_path: str = "data/signals.db", timeout: float = 30.0):
        self.db_path = db_path
        self.timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.OperationalError as exc:
            raise TransientStoreError(str(exc)) from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            if "UNIQUE" in str(exc):
                raise ConflictError(str(exc)) from exc
            raise
        except sqlite3.OperationalError as exc:
            conn.rollback()
            if any(marker in str(exc).lower() for marker in _TRANSIENT_MARKERS):
                raise TransientStoreError(str(exc)) from exc
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # --- Schema ---

    def init_db(self) -> None:
        with self.connection() as conn:
            conn.executescript(_SCHEMA_SQL)
            conn.executescript(_INDEX_SQL)
        logger.info("database_initialized", path=self.db_path)

    # =======================================================================
    # Companies CRUD
    # =======================================================================

    def insert_company(self, company: Company) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO companies
                    (name, slug, website, hq_city, hq_state, country, founded_year, ownership,
                     composite_score, industry, messaging_hook, description, notes,
                     created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    company.name,
                    company.slug,
                    company.website,
                    company.hq_city,
                    company.hq_state,
                    company.country,
                    company.founded_year,
                    company.ownership,
                    company.composite_score,
                    company.industry,
                    company.messaging_hook,
                    company.description,
                    company.notes,
                    _dt_to_iso(company.created_at),
                    _dt_to_iso(company.updated_at),
                ),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def get_company_by_slug(self, slug: str) -> Company | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM companies WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            return None
        return self._row_to_company(row)

    def get_all_companies(self, limit: int | None = None) -> list[Company]:
        sql = "SELECT * FROM companies ORDER BY id"
        params: tuple = ()
        if limit:
            sql += " LIMIT ?"
            params = (limit,)
        with self.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_company(r) for r in rows]

    def update_company(self, company_id: int, **kwargs: Any) -> None:
        if not kwargs:
            return
        sets, vals = _set_clause(kwargs, _COMPANY_COLUMNS, "companies")
        vals += [_dt_to_iso(datetime.now(timezone.utc)), company_id]
        with self.connection() as conn:
            conn.execute(f"UPDATE companies SET {sets}, updated_at = ? WHERE id = ?", vals)

    @staticmethod
    def _row_to_company(row: sqlite3.Row) -> Company:
        return Company(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            website=row["website"],
            hq_city=row["hq_city"],
            hq_state=row["hq_state"],
            country=row["country"],
            founded_year=row["founded_year"],
            ownership=row["ownership"],
            composite_score=row["composite_score"],
            industry=row["industry"],
            messaging_hook=row["messaging_hook"],
            description=row["description"],
            notes=row["notes"],
            created_at=_iso_to_dt(row["created_at"]) or datetime.now(timezone.utc),
            updated_at=_iso_to_dt(row["updated_at"]) or datetime.now(timezone.utc),
        )

    # =======================================================================
    # Industries / Segments CRUD
    # =======================================================================

    def insert_industry(self, industry: Industry) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO industries (name, slug) VALUES (?, ?)",
                (industry.name, industry.slug),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def get_industry_by_slug(self, slug: str) -> Industry | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM industries WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            return None
        return Industry(id=row["id"], name=row["name"], slug=row["slug"])

    def get_all_industries(self) -> list[Industry]:
        with self.connection() as conn:
            rows = conn.execute("SELECT * FROM industries ORDER BY id").fetchall()
        return [Industry(id=r["id"], name=r["name"], slug=r["slug"]) for r in rows]

    def insert_segment(self, segment: Segment) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO segments (name, slug, industry_id, description, display_order)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    segment.name,
                    segment.slug,
                    segment.industry_id,
                    segment.description,
                    segment.display_order,
                ),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def get_segment_by_slug(self, slug: str) -> Segment | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM segments WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            return None
        return self._row_to_segment(row)

    def get_all_segments(self) -> list[Segment]:
        with self.connection() as conn:
            rows = conn.execute("SELECT * FROM segments ORDER BY industry_id, display_order").fetchall()
        return [self._row_to_segment(r) for r in rows]

    @staticmethod
    def _row_to_segment(row: sqlite3.Row) -> Segment:
        return Segment(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            industry_id=row["industry_id"],
            description=row["description"],
            display_order=row["display_order"],
        )

    # =======================================================================
    # Company Segments CRUD
    # =======================================================================

    def insert_company_segment(self, link: CompanySegment) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                "INSERT INTO company_segments (company_id, segment_id, is_primary) VALUES (?, ?, ?)",
                (link.company_id, link.segment_id, int(link.is_primary)),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def get_company_segments(self, company_id: int) -> list[CompanySegment]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM company_segments WHERE company_id = ? ORDER BY id",
                (company_id,),
            ).fetchall()
        return [
            CompanySegment(
                id=r["id"],
                company_id=r["company_id"],
                segment_id=r["segment_id"],
                is_primary=bool(r["is_primary"]),
            )
            for r in rows
        ]

    # =======================================================================
    # Signals CRUD
    # =======================================================================

    def insert_signal(self, signal: Signal) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO signals
                    (company_id, signal_type, tier, title, description, signal_date,
                     discovered_date, expiry_date, source_url, source_type, source_2_url,
                     source_2_type, strength, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    signal.company_id,
                    signal.signal_type.value,
                    signal.tier,
                    signal.title,
                    signal.description,
                    _date_to_iso(signal.signal_date),
                    _date_to_iso(signal.discovered_date),
                    _date_to_iso(signal.expiry_date),
                    signal.source_url,
                    signal.source_type,
                    signal.source_2_url,
                    signal.source_2_type,
                    signal.strength,
                    signal.status.value,
                    _dt_to_iso(signal.created_at),
                    _dt_to_iso(signal.updated_at),
                ),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def find_signal(self, company_id: int, signal_type: SignalType, signal_date: date) -> Signal | None:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT * FROM signals WHERE company_id = ? AND signal_type = ? AND signal_date = ?",
                (company_id, signal_type.value, _date_to_iso(signal_date)),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_signal(row)

    def get_signals_for_company(
        self,
        company_id: int,
        signal_type: SignalType | None = None,
        signal_date: date | None = None,
    ) -> list[Signal]:
        sql = "SELECT * FROM signals WHERE company_id = ?"
        params: list = [company_id]
        if signal_type is not None:
            sql += " AND signal_type = ?"
            params.append(signal_type.value)
        if signal_date is not None:
            sql += " AND signal_date = ?"
            params.append(_date_to_iso(signal_date))
        sql += " ORDER BY signal_date DESC, id"
        with self.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._row_to_signal(r) for r in rows]

    def update_signal(self, signal_id: int, **kwargs: Any) -> None:
        if not kwargs:
            return
        sets, vals = _set_clause(kwargs, _SIGNAL_COLUMNS, "signals")
        vals += [_dt_to_iso(datetime.now(timezone.utc)), signal_id]
        with self.connection() as conn:
            conn.execute(f"UPDATE signals SET {sets}, updated_at = ? WHERE id = ?", vals)

    @staticmethod
    def _row_to_signal(row: sqlite3.Row) -> Signal:
        return Signal(
            id=row["id"],
            company_id=row["company_id"],
            signal_type=SignalType(row["signal_type"]),
            tier=row["tier"],
            title=row["title"],
            description=row["description"],
            signal_date=_iso_to_date(row["signal_date"]),
            discovered_date=_iso_to_date(row["discovered_date"]),
            expiry_date=_iso_to_date(row["expiry_date"]),
            source_url=row["source_url"],
            source_type=row["source_type"],
            source_2_url=row["source_2_url"],
            source_2_type=row["source_2_type"],
            strength=row["strength"],
            status=SignalStatus(row["status"]),
            created_at=_iso_to_dt(row["created_at"]) or datetime.now(timezone.utc),
            updated_at=_iso_to_dt(row["updated_at"]) or datetime.now(timezone.utc),
        )

    # =======================================================================
    # Projects CRUD
    # =======================================================================

    def insert_project(self, project: Project) -> int:
        with self.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO projects
                    (company_id, location_city, location_state, county, jobs_announced,
                     capex_millions, sector, project_type, announcement_date, fdi_origin,
                     source_url, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.company_id,
                    project.location_city,
                    project.location_state,
                    project.county,
                    project.jobs_announced,
                    project.capex_millions,
                    project.sector,
                    project.project_type,
                    _date_to_iso(project.announcement_date),
                    project.fdi_origin,
                    project.source_url,
                    project.notes,
                    _dt_to_iso(project.created_at),
                ),
            )
            return cursor.lastrowid  # type: ignore[return-value]

    def find_project(
        self,
        company_id: int,
        location_state: str | None,
        announcement_date: date | None = None,
        match_date: bool = True,
    ) -> Project | None:
        """Look up a project by its dedup key; NULLs compare equal."""
        sql = "SELECT * FROM projects WHERE company_id = ? AND location_state IS ?"
        params: list = [company_id, location_state]
        if match_date:
            sql += " AND announcement_date IS ?"
            params.append(_date_to_iso(announcement_date))
        sql += " ORDER BY id LIMIT 1"
        with self.connection() as conn:
            row = conn.execute(sql, params).fetchone()
        if row is None:
            return None
        return self._row_to_project(row)

    def get_projects_for_company(self, company_id: int) -> list[Project]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM projects WHERE company_id = ? ORDER BY announcement_date DESC, id",
                (company_id,),
            ).fetchall()
        return [self._row_to_project(r) for r in rows]

    def update_project(self, project_id: int, **kwargs: Any) -> None:
        if not kwargs:
            return
        sets, vals = _set_clause(kwargs, _PROJECT_COLUMNS, "projects")
        vals.append(project_id)
        with self.connection() as conn:
            conn.execute(f"UPDATE projects SET {sets} WHERE id = ?", vals)

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            company_id=row["company_id"],
            location_city=row["location_city"],
            location_state=row["location_state"],
            county=row["county"],
            jobs_announced=row["jobs_announced"],
            capex_millions=row["capex_millions"],
            sector=row["sector"],
            project_type=row["project_type"],
            announcement_date=_iso_to_date(row["announcement_date"]),
            fdi_origin=row["fdi_origin"],
            source_url=row["source_url"],
            notes=row["notes"],
            created_at=_iso_to_dt(row["created_at"]) or datetime.now(timezone.utc),
        )

    # =======================================================================
    # Stats
    # =======================================================================

    def count_rows(self) -> dict[str, int]:
        tables = ["companies", "industries", "segments", "company_segments", "signals", "projects"]
        counts: dict[str, int] = {}
        with self.connection() as conn:
            for table in tables:
                counts[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        return counts

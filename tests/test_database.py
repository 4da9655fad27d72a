"""Tests for database layer."""

from datetime import date

import pytest

from signal_ingest.database import Database
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
from signal_ingest.services.retry import ConflictError


@pytest.fixture
def db(tmp_path):
    """Create a fresh database for each test."""
    db_path = str(tmp_path / "test.db")
    database = Database(db_path)
    database.init_db()
    return database


@pytest.fixture
def company_id(db):
    return db.insert_company(Company(name="Acme Robotics", slug="acme-robotics", website="https://acme.com"))


def _signal(company_id, **overrides):
    fields = dict(
        company_id=company_id,
        signal_type=SignalType.funding_round,
        tier=3,
        title="Raised $40M Series B",
        signal_date=date(2025, 4, 1),
        strength=8,
    )
    fields.update(overrides)
    return Signal(**fields)


class TestSchemaInitialization:
    def test_all_tables_created(self, db):
        expected_tables = {
            "companies", "industries", "segments", "company_segments", "signals", "projects",
        }
        with db.connection() as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            ).fetchall()
        actual = {r["name"] for r in rows}
        assert expected_tables.issubset(actual)

    def test_indexes_created(self, db):
        expected_indexes = {
            "idx_companies_name",
            "idx_segments_industry_id",
            "idx_company_segments_company_id",
            "idx_signals_company_id",
            "idx_signals_signal_date",
            "idx_signals_status",
            "idx_projects_company_state",
        }
        with db.connection() as conn:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type='index'").fetchall()
        actual = {r["name"] for r in rows}
        assert expected_indexes.issubset(actual)

    def test_init_is_idempotent(self, db, company_id):
        db.init_db()
        assert db.count_rows()["companies"] == 1


class TestCompanies:
    def test_insert_and_get(self, db, company_id):
        company = db.get_company_by_slug("acme-robotics")
        assert company.id == company_id
        assert company.name == "Acme Robotics"
        assert company.website == "https://acme.com"
        assert company.composite_score is None

    def test_missing(self, db):
        assert db.get_company_by_slug("nope") is None

    def test_duplicate_slug_conflicts(self, db, company_id):
        with pytest.raises(ConflictError):
            db.insert_company(Company(name="ACME Robotics Inc", slug="acme-robotics"))

    def test_update(self, db, company_id):
        before = db.get_company_by_slug("acme-robotics")
        db.update_company(company_id, hq_state="TX", founded_year=2015)
        after = db.get_company_by_slug("acme-robotics")
        assert after.hq_state == "TX"
        assert after.founded_year == 2015
        assert after.updated_at >= before.updated_at

    def test_update_rejects_unknown_column(self, db, company_id):
        with pytest.raises(ValueError):
            db.update_company(company_id, slug="other")

    def test_get_all(self, db, company_id):
        db.insert_company(Company(name="Blue Forge", slug="blue-forge"))
        assert [c.slug for c in db.get_all_companies()] == ["acme-robotics", "blue-forge"]
        assert len(db.get_all_companies(limit=1)) == 1


class TestTaxonomy:
    def test_segments_and_industries(self, db):
        industry_id = db.insert_industry(Industry(name="Semiconductors", slug="semiconductors"))
        db.insert_segment(Segment(name="OSAT", slug="osat", industry_id=industry_id, display_order=4))
        assert db.get_all_segments()[0].display_order == 4
        assert db.get_segment_by_slug("osat").industry_id == industry_id
        assert db.get_industry_by_slug("semiconductors").id == industry_id

    def test_duplicate_industry_conflicts(self, db):
        db.insert_industry(Industry(name="Semiconductors", slug="semiconductors"))
        with pytest.raises(ConflictError):
            db.insert_industry(Industry(name="Semis", slug="semiconductors"))

    def test_company_segments(self, db, company_id):
        industry_id = db.insert_industry(Industry(name="Robotics", slug="robotics"))
        segment_id = db.insert_segment(Segment(name="Industrial", slug="industrial", industry_id=industry_id))
        assert db.get_company_segments(company_id) == []
        db.insert_company_segment(CompanySegment(company_id=company_id, segment_id=segment_id, is_primary=True))
        links = db.get_company_segments(company_id)
        assert len(links) == 1 and links[0].is_primary is True
        with pytest.raises(ConflictError):
            db.insert_company_segment(CompanySegment(company_id=company_id, segment_id=segment_id))


class TestSignals:
    def test_insert_and_find(self, db, company_id):
        signal_id = db.insert_signal(_signal(company_id))
        found = db.find_signal(company_id, SignalType.funding_round, date(2025, 4, 1))
        assert found.id == signal_id
        assert found.status == SignalStatus.active
        assert db.find_signal(company_id, SignalType.funding_round, date(2025, 4, 2)) is None

    def test_dedup_key_unique(self, db, company_id):
        db.insert_signal(_signal(company_id))
        with pytest.raises(ConflictError):
            db.insert_signal(_signal(company_id, title="Different title"))

    def test_update(self, db, company_id):
        signal_id = db.insert_signal(_signal(company_id))
        db.update_signal(signal_id, title="Series B closed", status=SignalStatus.superseded)
        found = db.find_signal(company_id, SignalType.funding_round, date(2025, 4, 1))
        assert found.title == "Series B closed"
        assert found.status == SignalStatus.superseded

    def test_filtered_listing(self, db, company_id):
        db.insert_signal(_signal(company_id))
        db.insert_signal(_signal(company_id, signal_type=SignalType.hiring_surge, tier=4, signal_date=date(2025, 6, 1)))
        assert len(db.get_signals_for_company(company_id)) == 2
        hiring = db.get_signals_for_company(company_id, signal_type=SignalType.hiring_surge)
        assert [s.signal_date for s in hiring] == [date(2025, 6, 1)]
        dated = db.get_signals_for_company(company_id, signal_date=date(2025, 4, 1))
        assert [s.signal_type for s in dated] == [SignalType.funding_round]


class TestProjects:
    def test_find_with_date(self, db, company_id):
        project_id = db.insert_project(Project(
            company_id=company_id, location_state="OH", announcement_date=date(2025, 3, 1), jobs_announced=1200,
        ))
        assert db.find_project(company_id, "OH", date(2025, 3, 1)).id == project_id
        assert db.find_project(company_id, "OH", date(2025, 9, 1)) is None
        assert db.find_project(company_id, "OH", date(2025, 9, 1), match_date=False).id == project_id

    def test_null_key_parts_match(self, db, company_id):
        project_id = db.insert_project(Project(company_id=company_id))
        assert db.find_project(company_id, None, None).id == project_id
        assert db.find_project(company_id, "TX", None) is None

    def test_update(self, db, company_id):
        project_id = db.insert_project(Project(company_id=company_id, location_state="OH"))
        db.update_project(project_id, capex_millions=450.5, fdi_origin="Japan")
        project = db.get_projects_for_company(company_id)[0]
        assert project.capex_millions == 450.5
        assert project.fdi_origin == "Japan"

    def test_state_not_updatable(self, db, company_id):
        project_id = db.insert_project(Project(company_id=company_id, location_state="OH"))
        with pytest.raises(ValueError):
            db.update_project(project_id, location_state="TX")

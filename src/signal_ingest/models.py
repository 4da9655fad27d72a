"""Pydantic models for all domain entities.

Covers: companies, industries, segments, company-segment links, signals,
projects, the canonical inbound records produced by the column adapters,
and the batch report shapes.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from signal_ingest.services.normalize import normalize_website


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _collapse(v: str | None) -> str | None:
    if v is None:
        return None
    v = " ".join(v.split())
    return v or None


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SignalType(str, Enum):
    site_search = "site_search"
    site_selection_consultant = "site_selection_consultant"
    capacity_constrained = "capacity_constrained"
    evaluating_expansion = "evaluating_expansion"
    major_funding = "major_funding"
    funding_round = "funding_round"
    pe_acquisition = "pe_acquisition"
    chips_award = "chips_award"
    new_ceo = "new_ceo"
    major_contract = "major_contract"
    contract_award = "contract_award"
    job_posting_site_selection = "job_posting_site_selection"
    job_posting_real_estate = "job_posting_real_estate"
    job_posting_ops = "job_posting_ops"
    hiring_surge = "hiring_surge"
    facility_announced = "facility_announced"
    new_facility = "new_facility"
    facility_opened = "facility_opened"
    facility_expansion = "facility_expansion"
    acquisition = "acquisition"
    partnership = "partnership"
    regulatory_approval = "regulatory_approval"
    product_launch = "product_launch"
    layoff = "layoff"
    facility_closure = "facility_closure"
    relocation = "relocation"


class SignalStatus(str, Enum):
    active = "active"
    expired = "expired"
    superseded = "superseded"


class Outcome(str, Enum):
    created = "created"
    updated = "updated"
    skipped_duplicate = "skipped_duplicate"
    not_found = "not_found"
    rejected = "rejected"


class IssueCategory(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    REJECTED = "REJECTED"
    MALFORMED = "MALFORMED"
    STALE = "STALE"


OUTCOME_CATEGORIES: dict[Outcome, IssueCategory] = {
    Outcome.skipped_duplicate: IssueCategory.DUPLICATE,
    Outcome.not_found: IssueCategory.NOT_FOUND,
    Outcome.rejected: IssueCategory.REJECTED,
}


class ClassificationMethod(str, Enum):
    explicit = "explicit"
    heuristic = "heuristic"
    default = "default"


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------

class Company(BaseModel):
    id: int | None = None
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    website: str | None = None
    hq_city: str | None = None
    hq_state: str | None = None
    country: str | None = None
    founded_year: int | None = Field(default=None, ge=1600, le=2200)
    ownership: str | None = None
    composite_score: float | None = None
    industry: str | None = None
    messaging_hook: str | None = None
    description: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, v: str) -> str:
        return " ".join(v.split())

    @property
    def normalized_domain(self) -> str:
        return normalize_website(self.website)


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class Industry(BaseModel):
    id: int | None = None
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)


class Segment(BaseModel):
    id: int | None = None
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    industry_id: int
    description: str | None = None
    display_order: int = 0


class CompanySegment(BaseModel):
    id: int | None = None
    company_id: int
    segment_id: int
    is_primary: bool = False


# ---------------------------------------------------------------------------
# Signal
# ---------------------------------------------------------------------------

class Signal(BaseModel):
    id: int | None = None
    company_id: int
    signal_type: SignalType
    tier: int = Field(..., ge=1, le=6)
    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    signal_date: date
    discovered_date: date = Field(default_factory=lambda: utcnow().date())
    expiry_date: date | None = None
    source_url: str | None = None
    source_type: str | None = None
    source_2_url: str | None = None
    source_2_type: str | None = None
    strength: int = Field(..., ge=1, le=10)
    status: SignalStatus = SignalStatus.active
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def dedup_key(self) -> tuple[int, SignalType, date]:
        return (self.company_id, self.signal_type, self.signal_date)


class SignalClassification(BaseModel):
    signal_type: SignalType
    tier: int = Field(ge=1, le=6)
    default_strength: int = Field(ge=1, le=10)
    method: ClassificationMethod
    matched_keyword: str | None = None


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------

class Project(BaseModel):
    id: int | None = None
    company_id: int
    location_city: str | None = None
    location_state: str | None = None
    county: str | None = None
    jobs_announced: int | None = Field(default=None, ge=0)
    capex_millions: float | None = Field(default=None, ge=0)
    sector: str | None = None
    project_type: str | None = None
    announcement_date: date | None = None
    fdi_origin: str | None = None
    source_url: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Inbound records (output of the column adapters)
# ---------------------------------------------------------------------------

class InboundRecord(BaseModel):
    """Fields shared by every row flavor that references a company."""
    row_number: int
    company_name: str | None = None
    company_slug: str | None = None
    website: str | None = None
    malformed: list[str] = Field(default_factory=list)

    @field_validator("company_name", "company_slug", "website")
    @classmethod
    def _clean_text(cls, v: str | None) -> str | None:
        return _collapse(v)

    @property
    def label(self) -> str:
        return self.company_name or self.company_slug or "unknown"


class SignalRecord(InboundRecord):
    signal_type: str | None = None
    tier: int | None = None
    title: str | None = None
    description: str | None = None
    signal_date: str | None = None
    discovered_date: str | None = None
    expiry_date: str | None = None
    source_url: str | None = None
    source_type: str | None = None
    source_2_url: str | None = None
    source_2_type: str | None = None
    strength: int | None = None
    status: str | None = None
    messaging_hook: str | None = None
    industry: str | None = None
    segment: str | None = None
    hq_city: str | None = None
    hq_state: str | None = None

    @property
    def text(self) -> str:
        return " ".join(p for p in (self.title, self.description) if p)


class CompanyRecord(InboundRecord):
    hq_city: str | None = None
    hq_state: str | None = None
    country: str | None = None
    founded_year: int | None = None
    ownership: str | None = None
    composite_score: float | None = None
    industry: str | None = None
    segment: str | None = None
    messaging_hook: str | None = None
    description: str | None = None
    notes: str | None = None


class ProjectRecord(InboundRecord):
    location_city: str | None = None
    location_state: str | None = None
    county: str | None = None
    jobs_announced: int | None = None
    capex_millions: float | None = None
    sector: str | None = None
    project_type: str | None = None
    announcement_date: str | None = None
    fdi_origin: str | None = None
    source_url: str | None = None
    notes: str | None = None


class CorrectionRecord(InboundRecord):
    field: str | None = None
    new_value: str | None = None
    signal_type: str | None = None
    signal_date: str | None = None


class TaxonomyRecord(BaseModel):
    row_number: int
    industry: str | None = None
    industry_slug: str | None = None
    segment: str | None = None
    segment_slug: str | None = None
    description: str | None = None


# ---------------------------------------------------------------------------
# Batch report
# ---------------------------------------------------------------------------

class IssueSection(BaseModel):
    category: IssueCategory
    lines: list[str] = Field(default_factory=list)
    remaining: int = 0


class BatchSummary(BaseModel):
    """Console-friendly view of one batch run."""
    counts: dict[Outcome, int]
    entity_counts: dict[str, dict[str, int]] = Field(default_factory=dict)
    sections: list[IssueSection] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def total_rows(self) -> int:
        return sum(self.counts.values())

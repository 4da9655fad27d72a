"""Column adapters: raw tabular rows to canonical inbound records.

Every source format spells its columns differently (``Company`` vs
``company_name``, ``headline`` vs ``signal_text``, ``Capex_M`` vs
``capex_millions``). Headers are normalized to snake_case, then each
canonical field takes the first non-blank value among its aliases.
Unknown columns are ignored.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from signal_ingest.models import (
    CompanyRecord,
    CorrectionRecord,
    ProjectRecord,
    SignalRecord,
    TaxonomyRecord,
)
from signal_ingest.services.normalize import normalize_header

MAX_TITLE_LENGTH = 200
FDI_MARKER = "/fdi"

_NUMERIC_NOISE = re.compile(r"[\s$,]")

# ---------------------------------------------------------------------------
# Alias tables (canonical field -> normalized header variants, in priority order)
# ---------------------------------------------------------------------------

COMPANY_REF_COLUMNS: dict[str, tuple[str, ...]] = {
    "company_name": ("company_name", "company", "name"),
    "company_slug": ("company_slug", "company_id", "slug"),
    "website": ("website", "company_website", "homepage", "homepage_url"),
}

SIGNAL_COLUMNS: dict[str, tuple[str, ...]] = {
    "signal_type": ("signal_type", "signal_code", "type"),
    "tier": ("signal_tier", "tier"),
    "headline": ("headline", "title"),
    "signal_text": ("signal_text", "signal_title", "signal"),
    "description": ("details", "description", "summary"),
    "signal_date": ("signal_date", "date", "event_date"),
    "discovered_date": ("discovered_date",),
    "expiry_date": ("expiry_date", "expires"),
    "source_url": ("source_url", "source_1_url", "url"),
    "source_type": ("source_type", "source_1_type"),
    "source_2_url": ("source_2_url",),
    "source_2_type": ("source_2_type",),
    "strength": ("score", "signal_score", "strength", "signal_strength"),
    "status": ("status",),
    "messaging_hook": ("messaging_hook",),
    "industry": ("industry",),
    "segment": ("segment", "sub_segment"),
    "hq_city": ("hq_city",),
    "hq_state": ("hq_state",),
}

COMPANY_COLUMNS: dict[str, tuple[str, ...]] = {
    "hq_city": ("hq_city", "city"),
    "hq_state": ("hq_state", "state"),
    "country": ("country",),
    "founded_year": ("founded_year", "founded"),
    "ownership": ("ownership",),
    "composite_score": ("composite_score", "score"),
    "industry": ("industry",),
    "segment": ("segment", "segment_slug", "sub_segment"),
    "messaging_hook": ("messaging_hook",),
    "description": ("description", "details"),
    "notes": ("notes",),
}

PROJECT_COLUMNS: dict[str, tuple[str, ...]] = {
    "location_city": ("location", "location_city", "city"),
    "location_state": ("state", "location_state"),
    "county": ("county",),
    "jobs_announced": ("jobs", "jobs_announced"),
    "capex_millions": ("capex_m", "capex_millions", "capex"),
    "sector": ("sector",),
    "project_type": ("project_type", "type"),
    "announcement_date": ("announcement_date", "date"),
    "fdi_origin": ("fdi_origin",),
    "source_url": ("source_url", "url"),
    "notes": ("notes",),
}

CORRECTION_COLUMNS: dict[str, tuple[str, ...]] = {
    "field": ("field", "column"),
    "new_value": ("new_value", "value"),
    "signal_type": ("signal_type",),
    "signal_date": ("signal_date",),
}

TAXONOMY_COLUMNS: dict[str, tuple[str, ...]] = {
    "industry": ("industry", "industry_name"),
    "industry_slug": ("industry_slug",),
    "segment": ("segment", "segment_name"),
    "segment_slug": ("segment_slug",),
    "description": ("description", "segment_description"),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_row(raw: Mapping[str, Any]) -> dict[str, str]:
    """Snake-case the headers and strip the values; first occurrence of a header wins."""
    row: dict[str, str] = {}
    for header, value in raw.items():
        key = normalize_header(header)
        if not key or key in row:
            continue
        row[key] = "" if value is None else str(value).strip()
    return row


def pick(row: Mapping[str, str], aliases: tuple[str, ...]) -> str | None:
    for alias in aliases:
        value = row.get(alias)
        if value:
            return value
    return None


def _pick_all(row: Mapping[str, str], columns: dict[str, tuple[str, ...]]) -> dict[str, str | None]:
    return {field: pick(row, aliases) for field, aliases in columns.items()}


def parse_float(value: str | None, field: str, malformed: list[str]) -> float | None:
    """Lenient number parsing; ``$1,250.5`` -> 1250.5, junk -> None and a note."""
    if value is None:
        return None
    cleaned = _NUMERIC_NOISE.sub("", value)
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        number = None
    if number is None or not math.isfinite(number):
        malformed.append(f"{field}={value!r}")
        return None
    return number


def parse_int(value: str | None, field: str, malformed: list[str]) -> int | None:
    number = parse_float(value, field, malformed)
    if number is None:
        return None
    return int(number)


def _company_ref(row: Mapping[str, str]) -> dict[str, str | None]:
    return _pick_all(row, COMPANY_REF_COLUMNS)


# ---------------------------------------------------------------------------
# Per-flavor adapters
# ---------------------------------------------------------------------------

def to_signal_record(row: Mapping[str, str], row_number: int) -> SignalRecord:
    values = _pick_all(row, SIGNAL_COLUMNS)
    malformed: list[str] = []

    headline = values.pop("headline")
    signal_text = values.pop("signal_text")
    description = values.pop("description")

    title = headline or signal_text
    if title and len(title) > MAX_TITLE_LENGTH:
        description = description or title
        title = title[: MAX_TITLE_LENGTH - 3].rstrip() + "..."

    tier = parse_int(values.pop("tier"), "signal_tier", malformed)
    if tier is not None and not 1 <= tier <= 6:
        malformed.append(f"signal_tier={tier}")
        tier = None
    strength = parse_int(values.pop("strength"), "score", malformed)
    if strength is not None and not 1 <= strength <= 10:
        malformed.append(f"score={strength}")
        strength = None

    return SignalRecord(
        row_number=row_number,
        **_company_ref(row),
        title=title,
        description=description,
        tier=tier,
        strength=strength,
        malformed=malformed,
        **values,
    )


def to_company_record(row: Mapping[str, str], row_number: int) -> CompanyRecord:
    values = _pick_all(row, COMPANY_COLUMNS)
    malformed: list[str] = []
    founded_year = parse_int(values.pop("founded_year"), "founded_year", malformed)
    composite_score = parse_float(values.pop("composite_score"), "composite_score", malformed)
    return CompanyRecord(
        row_number=row_number,
        **_company_ref(row),
        founded_year=founded_year,
        composite_score=composite_score,
        malformed=malformed,
        **values,
    )


def to_project_record(row: Mapping[str, str], row_number: int) -> ProjectRecord:
    values = _pick_all(row, PROJECT_COLUMNS)
    malformed: list[str] = []
    jobs = parse_int(values.pop("jobs_announced"), "jobs", malformed)
    capex = parse_float(values.pop("capex_millions"), "capex", malformed)

    sector = values.pop("sector")
    fdi_origin = values.pop("fdi_origin")
    if sector and FDI_MARKER in sector.lower():
        idx = sector.lower().index(FDI_MARKER)
        sector = (sector[:idx] + sector[idx + len(FDI_MARKER):]).strip() or None
        fdi_origin = fdi_origin or "Foreign"

    return ProjectRecord(
        row_number=row_number,
        **_company_ref(row),
        jobs_announced=jobs,
        capex_millions=capex,
        sector=sector,
        fdi_origin=fdi_origin,
        malformed=malformed,
        **values,
    )


def to_correction_record(row: Mapping[str, str], row_number: int) -> CorrectionRecord:
    return CorrectionRecord(
        row_number=row_number,
        **_company_ref(row),
        **_pick_all(row, CORRECTION_COLUMNS),
    )


def to_taxonomy_record(row: Mapping[str, str], row_number: int) -> TaxonomyRecord:
    return TaxonomyRecord(row_number=row_number, **_pick_all(row, TAXONOMY_COLUMNS))


ADAPTERS: dict[str, Callable[[Mapping[str, str], int], BaseModel]] = {
    "signals": to_signal_record,
    "companies": to_company_record,
    "projects": to_project_record,
    "corrections": to_correction_record,
    "taxonomy": to_taxonomy_record,
}

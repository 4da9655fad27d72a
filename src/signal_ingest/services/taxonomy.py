"""Taxonomy mapping: free-text industry and segment labels to reference rows.

Lookup order for segments: exact slug, case-insensitive name, curated
synonym table for the row's industry, then the slugified label against the
slug index. A label that resolves nowhere is skipped silently.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from signal_ingest.models import Industry, Segment
from signal_ingest.services.normalize import normalize_label, slugify

logger = structlog.get_logger()

UNKNOWN_LABELS = {"unknown", "n/a", "na", "none", "tbd", "-", "?"}

# Analyst label -> canonical segment slug, per industry slug
SEGMENT_SYNONYMS: dict[str, dict[str, str]] = {
    "space-aerospace": {
        "launch & space access": "launch-space-access",
        "spacecraft components & subsystems": "spacecraft-components",
        "spacecraft & satellite systems": "spacecraft-satellite-systems",
        "data software & space intelligence": "space-data-intelligence",
        "data, software & space intelligence": "space-data-intelligence",
        "in-space services logistics & safety": "in-space-services",
        "in-space services, logistics & safety": "in-space-services",
        "earth observation sensing & geospatial intelligence": "earth-observation",
        "earth observation & geospatial intelligence": "earth-observation",
        "space stations habitats & orbital platforms": "space-stations-habitats",
        "space stations, habitats & orbital platforms": "space-stations-habitats",
        "communications pnt & connectivity": "space-communications",
        "communications, pnt & connectivity": "space-communications",
        "human spaceflight exploration & commercial space": "human-spaceflight",
        "human spaceflight & commercial space": "human-spaceflight",
        "research workforce & ecosystem enablement": "space-research-ecosystem",
        "research, workforce & ecosystem": "space-research-ecosystem",
        "in-space manufacturing materials & zero-gravity r&d": "in-space-manufacturing",
        "in-space manufacturing & zero-g r&d": "in-space-manufacturing",
        "space resources isru & off-world infrastructure": "space-resources",
        "space resources & off-world infrastructure": "space-resources",
        "ground infrastructure & mission operations": "ground-infrastructure",
        "space tech": "space-tech",
        "evtol": "evtol",
    },
    "semiconductors": {
        "fabs": "fabs-foundries",
        "equipment-front-end": "equipment-frontend",
        "equipment-back-end": "equipment-backend",
        "materials": "materials-chemicals",
        "fabless": "fabless",
        "testing": "testing",
        "substrates": "substrates",
        "osat": "osat",
    },
}


def is_unknown_label(label: str | None) -> bool:
    """True for empty labels and placeholders like ``Unknown`` or ``N/A``."""
    key = normalize_label(label)
    return not key or key in UNKNOWN_LABELS


class TaxonomyIndex:
    """Industries and segments keyed by slug and lowercased name."""

    def __init__(self) -> None:
        self.industries_by_slug: dict[str, Industry] = {}
        self.industries_by_name: dict[str, Industry] = {}
        self.segments_by_slug: dict[str, Segment] = {}
        self.segments_by_name: dict[str, Segment] = {}

    @classmethod
    def build(cls, industries: Iterable[Industry], segments: Iterable[Segment]) -> TaxonomyIndex:
        index = cls()
        for industry in industries:
            index.add_industry(industry)
        for segment in segments:
            index.add_segment(segment)
        logger.debug(
            "taxonomy_index_built",
            industries=len(index.industries_by_slug),
            segments=len(index.segments_by_slug),
        )
        return index

    def add_industry(self, industry: Industry) -> None:
        self.industries_by_slug[industry.slug] = industry
        self.industries_by_name.setdefault(normalize_label(industry.name), industry)

    def add_segment(self, segment: Segment) -> None:
        self.segments_by_slug[segment.slug] = segment
        self.segments_by_name.setdefault(normalize_label(segment.name), segment)

    def next_display_order(self, industry_id: int) -> int:
        orders = [s.display_order for s in self.segments_by_slug.values() if s.industry_id == industry_id]
        return max(orders, default=0) + 1

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def resolve_industry(self, label: str | None) -> Industry | None:
        if label is None or is_unknown_label(label):
            return None
        stripped = label.strip()
        if stripped in self.industries_by_slug:
            return self.industries_by_slug[stripped]
        by_name = self.industries_by_name.get(normalize_label(label))
        if by_name is not None:
            return by_name
        return self.industries_by_slug.get(slugify(label))

    def resolve_segment(self, label: str | None, industry: Industry | None = None) -> Segment | None:
        """Map a segment label to a known segment, or None when unmapped.

        ``industry`` narrows the synonym table; without it every industry's
        synonyms are consulted.
        """
        if label is None or is_unknown_label(label):
            return None
        stripped = label.strip()

        if stripped in self.segments_by_slug:
            return self.segments_by_slug[stripped]

        key = normalize_label(label)
        if key in self.segments_by_name:
            return self.segments_by_name[key]

        synonym_tables = (
            [SEGMENT_SYNONYMS.get(industry.slug, {})] if industry is not None
            else list(SEGMENT_SYNONYMS.values())
        )
        for table in synonym_tables:
            target = table.get(key)
            if target and target in self.segments_by_slug:
                return self.segments_by_slug[target]

        segment = self.segments_by_slug.get(slugify(label))
        if segment is None:
            logger.debug("segment_unmapped", label=label)
        return segment


def resolve_segment(label: str | None, index: TaxonomyIndex, industry: Industry | None = None) -> Segment | None:
    return index.resolve_segment(label, industry)

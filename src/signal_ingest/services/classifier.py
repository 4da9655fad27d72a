"""Signal classification.

Maps explicit signal-type strings onto the canonical signal taxonomy and,
when no usable type is given, infers one from free text with ordered
keyword rules. Rules are checked strictly in tier order so that the
highest-value lead types (site searches) win over everything else.
"""

from __future__ import annotations

import structlog

from signal_ingest.models import ClassificationMethod, SignalClassification, SignalType

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Canonical taxonomy: type -> (tier, default strength)
# ---------------------------------------------------------------------------

SIGNAL_TAXONOMY: dict[SignalType, tuple[int, int]] = {
    # Tier 1 - location TBD
    SignalType.site_search: (1, 10),
    SignalType.site_selection_consultant: (1, 9),
    # Tier 2 - expansion pressure
    SignalType.capacity_constrained: (2, 9),
    SignalType.evaluating_expansion: (2, 8),
    # Tier 3 - major financial
    SignalType.major_funding: (3, 8),
    SignalType.funding_round: (3, 7),
    SignalType.pe_acquisition: (3, 7),
    SignalType.chips_award: (3, 8),
    # Tier 4 - corporate changes
    SignalType.new_ceo: (4, 7),
    SignalType.major_contract: (4, 7),
    SignalType.contract_award: (4, 7),
    # Tier 5 - job postings
    SignalType.job_posting_site_selection: (5, 8),
    SignalType.job_posting_real_estate: (5, 7),
    SignalType.job_posting_ops: (5, 6),
    SignalType.hiring_surge: (5, 6),
    # Tier 6 - announced / informational
    SignalType.facility_announced: (6, 6),
    SignalType.new_facility: (6, 6),
    SignalType.facility_opened: (6, 5),
    SignalType.facility_expansion: (6, 6),
    SignalType.acquisition: (6, 6),
    SignalType.partnership: (6, 5),
    SignalType.regulatory_approval: (6, 5),
    SignalType.product_launch: (6, 5),
    SignalType.layoff: (6, 4),
    SignalType.facility_closure: (6, 4),
    SignalType.relocation: (6, 6),
}

DEFAULT_SIGNAL_TYPE = SignalType.facility_announced

# Legacy type codes seen in older exports
SIGNAL_TYPE_ALIASES: dict[str, SignalType] = {
    "expansion_announcement": SignalType.facility_expansion,
    "leadership_change": SignalType.new_ceo,
    "ipo_filing": SignalType.regulatory_approval,
    "site_selection": SignalType.site_search,
    "new_facility_announced": SignalType.facility_announced,
}


# ---------------------------------------------------------------------------
# Heuristic rules, in priority order
# ---------------------------------------------------------------------------

KEYWORD_RULES: list[tuple[SignalType, list[str]]] = [
    # Tier 1
    (SignalType.site_selection_consultant, [
        "site selection consultant", "site selection firm", "site selector",
        "location consultant",
    ]),
    (SignalType.site_search, [
        "site search", "site selection", "location tbd", "location to be determined",
        "searching for a site", "seeking a site", "evaluating sites",
        "shortlisted sites", "shortlist of sites",
    ]),
    # Tier 2
    (SignalType.capacity_constrained, [
        "capacity constrained", "capacity-constrained", "capacity constraints",
        "at full capacity", "running out of space", "maxed out capacity",
    ]),
    (SignalType.evaluating_expansion, [
        "evaluating expansion", "considering expansion", "exploring expansion",
        "expansion plans", "plans to expand", "considering a new facility",
    ]),
    # Tier 3
    (SignalType.chips_award, [
        "chips act", "chips award", "chips and science", "doe grant", "doe award",
        "doe loan", "federal grant", "state grant", "grant award",
    ]),
    (SignalType.pe_acquisition, [
        "private equity", "pe firm", "pe-backed", "buyout", "take-private",
    ]),
    (SignalType.major_funding, [
        "major funding", "mega round", "mega-round", "series d", "series e", "series f",
    ]),
    (SignalType.funding_round, [
        "series a", "series b", "series c", "seed round", "funding round",
        "funding", "raised", "raises",
    ]),
    # Tier 4
    (SignalType.new_ceo, [
        "new ceo", "names ceo", "named ceo", "appoints ceo", "appointed ceo",
        "new chief executive",
    ]),
    (SignalType.major_contract, [
        "major contract", "billion contract", "multi-year contract", "multiyear contract",
    ]),
    (SignalType.contract_award, [
        "contract", "awarded",
    ]),
    # Tier 5
    (SignalType.job_posting_site_selection, [
        "site acquisition manager", "location strategy manager", "site strategy manager",
    ]),
    (SignalType.job_posting_real_estate, [
        "real estate manager", "real estate director", "head of real estate",
        "director of real estate",
    ]),
    (SignalType.job_posting_ops, [
        "plant manager", "operations manager", "director of operations",
        "vp of operations", "vp operations",
    ]),
    (SignalType.hiring_surge, [
        "hiring", "hires", "job openings", "headcount", "recruiting",
    ]),
    # Tier 6
    (SignalType.facility_closure, [
        "closure", "closing", "shut down", "shutting down", "shutter",
    ]),
    (SignalType.layoff, [
        "layoff", "laid off", "lays off", "job cuts",
    ]),
    (SignalType.relocation, [
        "relocat", "moving headquarters", "moves headquarters", "hq move",
    ]),
    (SignalType.facility_opened, [
        "grand opening", "ribbon cutting", "ribbon-cutting", "opened", "opens",
    ]),
    (SignalType.facility_expansion, [
        "expansion", "expanding", "expands", "expand",
    ]),
    (SignalType.new_facility, [
        "new facility", "facility", "new fab", "plant", "factory", "campus",
        "manufacturing",
    ]),
    (SignalType.acquisition, [
        "acquisition", "acquired", "acquires", "acquire", "merger",
    ]),
    (SignalType.partnership, [
        "partnership", "partners with", "alliance", "joint venture",
    ]),
    (SignalType.regulatory_approval, [
        "regulatory approval", "fda approval", "fda clearance", "permit approved",
        "initial public offering", " ipo",
    ]),
    (SignalType.product_launch, [
        "product launch", "launches", "unveils", "new product",
    ]),
    (SignalType.facility_announced, [
        "announce", "investment", "invests", "invest",
    ]),
]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def lookup_signal_type(raw: str | None) -> SignalType | None:
    """Resolve an explicit type string against the closed taxonomy."""
    if not raw:
        return None
    key = "_".join(raw.strip().lower().replace("-", " ").split())
    if key in SignalType.__members__:
        return SignalType(key)
    return SIGNAL_TYPE_ALIASES.get(key)


def infer_signal_type(text: str | None) -> tuple[SignalType, str] | None:
    """Return the first keyword rule matching ``text`` and the keyword that hit."""
    if not text:
        return None
    text_lower = f" {text.lower()} "
    for signal_type, keywords in KEYWORD_RULES:
        for keyword in keywords:
            if keyword in text_lower:
                return signal_type, keyword.strip()
    return None


def _build(signal_type: SignalType, method: ClassificationMethod, keyword: str | None = None) -> SignalClassification:
    tier, strength = SIGNAL_TAXONOMY[signal_type]
    return SignalClassification(
        signal_type=signal_type,
        tier=tier,
        default_strength=strength,
        method=method,
        matched_keyword=keyword,
    )


def classify_signal(explicit_type: str | None = None, free_text: str | None = None) -> SignalClassification:
    """Classify a signal from an explicit type and/or free text.

    1. Explicit type present in the canonical table -> used directly
    2. Ordered keyword rules over the free text (an unrecognized explicit
       type string is searched too) -> first match wins
    3. Nothing matched -> facility_announced, tier 6
    """
    explicit = lookup_signal_type(explicit_type)
    if explicit is not None:
        return _build(explicit, ClassificationMethod.explicit)

    haystack = " ".join(p for p in (explicit_type, free_text) if p)
    inferred = infer_signal_type(haystack)
    if inferred is not None:
        signal_type, keyword = inferred
        return _build(signal_type, ClassificationMethod.heuristic, keyword)

    if explicit_type:
        logger.info("signal_type_unrecognized", raw=explicit_type)
    return _build(DEFAULT_SIGNAL_TYPE, ClassificationMethod.default)

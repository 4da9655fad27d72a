"""Tests for signal classification."""

import pytest

from signal_ingest.models import ClassificationMethod, SignalType
from signal_ingest.services.classifier import (
    KEYWORD_RULES,
    SIGNAL_TAXONOMY,
    classify_signal,
    lookup_signal_type,
)


class TestTaxonomyTable:
    def test_covers_every_signal_type(self):
        assert set(SIGNAL_TAXONOMY) == set(SignalType)
        assert len(SIGNAL_TAXONOMY) == 26

    @pytest.mark.parametrize("signal_type,tier,strength", [
        (SignalType.site_search, 1, 10),
        (SignalType.site_selection_consultant, 1, 9),
        (SignalType.capacity_constrained, 2, 9),
        (SignalType.funding_round, 3, 7),
        (SignalType.chips_award, 3, 8),
        (SignalType.new_ceo, 4, 7),
        (SignalType.job_posting_ops, 5, 6),
        (SignalType.facility_announced, 6, 6),
        (SignalType.partnership, 6, 5),
    ])
    def test_tiers_and_default_strengths(self, signal_type, tier, strength):
        assert SIGNAL_TAXONOMY[signal_type] == (tier, strength)

    def test_rules_ordered_by_tier(self):
        tiers = [SIGNAL_TAXONOMY[signal_type][0] for signal_type, _ in KEYWORD_RULES]
        assert tiers == sorted(tiers)


class TestExplicitType:
    @pytest.mark.parametrize("raw", ["funding_round", "FUNDING_ROUND", "Funding Round", "funding-round"])
    def test_explicit_type_normalized(self, raw):
        result = classify_signal(raw)
        assert result.signal_type is SignalType.funding_round
        assert result.tier == 3
        assert result.default_strength == 7
        assert result.method is ClassificationMethod.explicit

    def test_explicit_type_wins_over_text(self):
        result = classify_signal("partnership", "Company hiring a site selection consultant")
        assert result.signal_type is SignalType.partnership

    @pytest.mark.parametrize("raw,expected", [
        ("EXPANSION_ANNOUNCEMENT", SignalType.facility_expansion),
        ("leadership_change", SignalType.new_ceo),
        ("site_selection", SignalType.site_search),
    ])
    def test_legacy_aliases(self, raw, expected):
        assert lookup_signal_type(raw) is expected

    def test_unknown_type_returns_none(self):
        assert lookup_signal_type("weather_event") is None


class TestHeuristics:
    def test_site_search_beats_hiring(self):
        result = classify_signal(None, "Company is hiring and running a site search for a new plant")
        assert result.signal_type is SignalType.site_search
        assert result.tier == 1
        assert result.method is ClassificationMethod.heuristic

    def test_consultant_beats_site_search(self):
        result = classify_signal(None, "Engaged a site selection consultant")
        assert result.signal_type is SignalType.site_selection_consultant

    @pytest.mark.parametrize("text,expected", [
        ("Raised $40M Series B", SignalType.funding_round),
        ("Closes $300M Series E mega round", SignalType.major_funding),
        ("Receives CHIPS Act award", SignalType.chips_award),
        ("Acquired by private equity firm", SignalType.pe_acquisition),
        ("Names new CEO", SignalType.new_ceo),
        ("Wins Air Force contract", SignalType.contract_award),
        ("Posting for a Real Estate Manager", SignalType.job_posting_real_estate),
        ("Hiring 200 technicians", SignalType.hiring_surge),
        ("Plant running at full capacity", SignalType.capacity_constrained),
        ("Grand opening of Ohio site", SignalType.facility_opened),
        ("Announces layoffs", SignalType.layoff),
        ("Strategic partnership with Boeing", SignalType.partnership),
    ])
    def test_keyword_examples(self, text, expected):
        assert classify_signal(None, text).signal_type is expected

    def test_case_insensitive(self):
        assert classify_signal(None, "SERIES A ROUND").signal_type is SignalType.funding_round

    def test_unknown_explicit_type_searched_as_text(self):
        result = classify_signal("Series A funding", None)
        assert result.signal_type is SignalType.funding_round
        assert result.method is ClassificationMethod.heuristic


class TestDefault:
    @pytest.mark.parametrize("explicit,text", [
        (None, None),
        (None, ""),
        (None, "Quarterly newsletter"),
        ("weather_event", "Sunny day"),
    ])
    def test_falls_back_to_facility_announced(self, explicit, text):
        result = classify_signal(explicit, text)
        assert result.signal_type is SignalType.facility_announced
        assert result.tier == 6
        assert result.method is ClassificationMethod.default

"""Tests for per-entity merge policies."""

from signal_ingest.services.merge_policy import (
    COMPANY_IMPORT_POLICY,
    CORRECTION_POLICY,
    SIGNAL_REIMPORT_POLICY,
    FieldRule,
    MergePolicy,
)


class TestMergePolicy:
    def test_fill_if_null_only_fills_empty(self):
        policy = MergePolicy(name="t")
        changes = policy.merge(
            {"hq_city": None, "hq_state": "TX", "country": ""},
            {"hq_city": "Austin", "hq_state": "CA", "country": "USA"},
        )
        assert changes == {"hq_city": "Austin", "country": "USA"}

    def test_overwrite_replaces_value(self):
        policy = MergePolicy(name="t", default=FieldRule.OVERWRITE)
        assert policy.merge({"website": "a.com"}, {"website": "b.com"}) == {"website": "b.com"}

    def test_blank_incoming_never_clears(self):
        policy = MergePolicy(name="t", default=FieldRule.OVERWRITE)
        assert policy.merge({"website": "a.com"}, {"website": "  "}) == {}
        assert policy.merge({"website": "a.com"}, {"website": None}) == {}

    def test_ignore(self):
        policy = MergePolicy(name="t", rules={"slug": FieldRule.IGNORE})
        assert policy.merge({"slug": None}, {"slug": "acme"}) == {}

    def test_identical_value_is_not_a_change(self):
        policy = MergePolicy(name="t", default=FieldRule.OVERWRITE)
        assert policy.merge({"tier": 3}, {"tier": 3}) == {}


class TestDeclaredPolicies:
    def test_company_import_keeps_curated_data(self):
        existing = {"name": "Acme", "website": "https://acme.com", "messaging_hook": "old hook", "hq_city": None}
        incoming = {"name": "ACME INC", "website": "acme.io", "messaging_hook": "new hook", "hq_city": "Austin"}
        assert COMPANY_IMPORT_POLICY.merge(existing, incoming) == {
            "messaging_hook": "new hook",
            "hq_city": "Austin",
        }

    def test_correction_overwrites(self):
        existing = {"website": "https://acme.com", "slug": "acme"}
        incoming = {"website": "https://acme.io", "slug": "other"}
        assert CORRECTION_POLICY.merge(existing, incoming) == {"website": "https://acme.io"}

    def test_signal_reimport_updates_title_keeps_discovery(self):
        existing = {"title": "Old", "discovered_date": "2025-01-01", "description": None}
        incoming = {"title": "New", "discovered_date": "2025-02-01", "description": "Details"}
        assert SIGNAL_REIMPORT_POLICY.merge(existing, incoming) == {"title": "New", "description": "Details"}

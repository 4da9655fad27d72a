"""Tests for the batch reconciliation reporter."""

from signal_ingest.models import IssueCategory, Outcome
from signal_ingest.services.reporter import BatchReporter, render_summary


class TestBatchReporter:
    def test_counts_start_at_zero(self):
        summary = BatchReporter().summarize()
        assert summary.counts == {outcome: 0 for outcome in Outcome}
        assert summary.total_rows == 0
        assert summary.sections == []

    def test_record_counts_and_categorizes(self):
        reporter = BatchReporter()
        reporter.record(Outcome.created)
        reporter.record(Outcome.updated)
        reporter.record(Outcome.not_found, "Ghost Co (row 3): company not found")
        reporter.record(Outcome.rejected, "row 4: missing company name")
        reporter.record(Outcome.skipped_duplicate, "Acme (row 5): no new data")

        assert reporter.counts[Outcome.created] == 1
        assert reporter.total_rows == 5
        assert reporter.issues(IssueCategory.NOT_FOUND) == ["Ghost Co (row 3): company not found"]
        assert reporter.issue_lines() == [
            "NOT_FOUND: Ghost Co (row 3): company not found",
            "REJECTED: row 4: missing company name",
            "DUPLICATE: Acme (row 5): no new data",
        ]

    def test_notes_do_not_count_rows(self):
        reporter = BatchReporter()
        reporter.note(IssueCategory.MALFORMED, "Acme (row 1): unparseable value jobs='many'")
        assert reporter.total_rows == 0
        assert reporter.issue_lines() == ["MALFORMED: Acme (row 1): unparseable value jobs='many'"]

    def test_summary_truncates_per_category(self):
        reporter = BatchReporter()
        for i in range(15):
            reporter.record(Outcome.not_found, f"company {i}")
        reporter.record(Outcome.rejected, "bad row")

        summary = reporter.summarize(limit=10)
        sections = {s.category: s for s in summary.sections}
        assert sections[IssueCategory.NOT_FOUND].lines == [f"company {i}" for i in range(10)]
        assert sections[IssueCategory.NOT_FOUND].remaining == 5
        assert sections[IssueCategory.REJECTED].remaining == 0
        # full list remains available for the log
        assert len(reporter.issues(IssueCategory.NOT_FOUND)) == 15

    def test_entity_tracking(self):
        reporter = BatchReporter()
        reporter.track("companies", Outcome.created)
        reporter.track("companies", Outcome.created)
        reporter.track("company_segments", Outcome.created)
        summary = reporter.summarize()
        assert summary.entity_counts == {"companies": {"created": 2}, "company_segments": {"created": 1}}
        assert summary.total_rows == 0

    def test_write_issues_log(self, tmp_path):
        reporter = BatchReporter()
        reporter.record(Outcome.not_found, "Ghost Co (row 1): company not found")
        reporter.note(IssueCategory.STALE, "Acme (row 2): expired on 2024-01-01")
        path = reporter.write_issues_log(tmp_path / "logs" / "issues.log")
        assert path.read_text() == (
            "NOT_FOUND: Ghost Co (row 1): company not found\n"
            "STALE: Acme (row 2): expired on 2024-01-01\n"
        )

    def test_empty_issues_log(self, tmp_path):
        path = BatchReporter().write_issues_log(tmp_path / "issues.log")
        assert path.read_text() == ""


class TestRenderSummary:
    def test_render(self):
        reporter = BatchReporter(dry_run=True)
        reporter.record(Outcome.created)
        for i in range(3):
            reporter.record(Outcome.not_found, f"company {i}")
        lines = render_summary(reporter.summarize(limit=2))
        assert lines[0] == "Batch summary (dry run, nothing written)"
        assert "  created: 1" in lines
        assert "  not_found: 3" in lines
        assert "NOT_FOUND:" in lines
        assert "  ... and 1 more" in lines

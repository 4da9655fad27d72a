"""Batch reconciliation reporter.

Accumulates per-row outcomes for one batch run and renders them as a short
console summary plus a full issues log (one ``CATEGORY: text`` per line).
"""

from __future__ import annotations

from collections import Counter, defaultdict
from pathlib import Path

import structlog

from signal_ingest.models import (
    OUTCOME_CATEGORIES,
    BatchSummary,
    IssueCategory,
    IssueSection,
    Outcome,
)

logger = structlog.get_logger()


class BatchReporter:
    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run
        self.counts: Counter[Outcome] = Counter({outcome: 0 for outcome in Outcome})
        self.entity_counts: dict[str, Counter[str]] = defaultdict(Counter)
        self._issues: list[tuple[IssueCategory, str]] = []

    def record(self, outcome: Outcome, detail: str | None = None) -> None:
        """Count one row's outcome; non-success outcomes also log an issue line."""
        self.counts[outcome] += 1
        category = OUTCOME_CATEGORIES.get(outcome)
        if category is not None and detail:
            self._issues.append((category, detail))

    def note(self, category: IssueCategory, detail: str) -> None:
        """Log an issue without counting a row (malformed cells, stale dates)."""
        self._issues.append((category, detail))

    def track(self, entity: str, outcome: Outcome) -> None:
        """Tally a side effect on a secondary entity, e.g. a company created for a signal row."""
        self.entity_counts[entity][outcome.value] += 1

    @property
    def total_rows(self) -> int:
        return sum(self.counts.values())

    def issues(self, category: IssueCategory | None = None) -> list[str]:
        return [text for cat, text in self._issues if category is None or cat is category]

    def issue_lines(self) -> list[str]:
        return [f"{cat.value}: {text}" for cat, text in self._issues]

    def summarize(self, limit: int = 10) -> BatchSummary:
        grouped: dict[IssueCategory, list[str]] = defaultdict(list)
        for cat, text in self._issues:
            grouped[cat].append(text)

        sections = [
            IssueSection(
                category=cat,
                lines=grouped[cat][:limit],
                remaining=max(len(grouped[cat]) - limit, 0),
            )
            for cat in IssueCategory
            if grouped.get(cat)
        ]
        return BatchSummary(
            counts=dict(self.counts),
            entity_counts={k: dict(v) for k, v in self.entity_counts.items()},
            sections=sections,
            dry_run=self.dry_run,
        )

    def write_issues_log(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = self.issue_lines()
        path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        logger.info("issues_log_written", path=str(path), issues=len(lines))
        return path


def render_summary(summary: BatchSummary) -> list[str]:
    """Format a summary as console lines."""
    header = "Batch summary (dry run, nothing written)" if summary.dry_run else "Batch summary"
    lines = [header]
    for outcome in Outcome:
        lines.append(f"  {outcome.value}: {summary.counts.get(outcome, 0)}")
    for entity, counts in sorted(summary.entity_counts.items()):
        detail = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
        lines.append(f"  {entity}: {detail}")
    for section in summary.sections:
        lines.append(f"{section.category.value}:")
        lines.extend(f"  - {line}" for line in section.lines)
        if section.remaining:
            lines.append(f"  ... and {section.remaining} more")
    return lines

"""Dedup/upsert engine.

Stateful for the lifetime of one batch: every row sees the companies,
signals, segment links and projects produced by the rows before it. Each
row ends in exactly one outcome (created, updated, skipped_duplicate,
not_found, rejected) and a failing row never stops the batch.

In dry-run mode no write reaches the store. Planned entities live in an
in-memory overlay with negative ids so within-batch lookups still behave
as they would for a real run.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from signal_ingest.config import Config
from signal_ingest.database import Database
from signal_ingest.models import (
    Company,
    CompanyRecord,
    CompanySegment,
    CorrectionRecord,
    Industry,
    InboundRecord,
    IssueCategory,
    Outcome,
    Project,
    ProjectRecord,
    Segment,
    Signal,
    SignalRecord,
    SignalStatus,
    SignalType,
    TaxonomyRecord,
)
from signal_ingest.services.classifier import classify_signal, lookup_signal_type
from signal_ingest.services.dates import parse_signal_date, try_parse_date
from signal_ingest.services.identity import CompanyIndex
from signal_ingest.services.merge_policy import (
    COMPANY_IMPORT_POLICY,
    CORRECTION_POLICY,
    PROJECT_IMPORT_POLICY,
    SIGNAL_REIMPORT_POLICY,
)
from signal_ingest.services.normalize import ensure_scheme, normalize_header, slugify
from signal_ingest.services.reporter import BatchReporter
from signal_ingest.services.retry import (
    ConflictError,
    ResolutionMiss,
    RetryPolicy,
    RowValidationError,
    TransientStoreError,
    classify_error,
)
from signal_ingest.services.taxonomy import TaxonomyIndex, is_unknown_label

logger = structlog.get_logger()

MAX_TITLE_LENGTH = 200

# correction field name -> Company attribute
COMPANY_CORRECTION_FIELDS = {
    "website": "website",
    "score": "composite_score",
    "composite_score": "composite_score",
    "messaging_hook": "messaging_hook",
    "description": "description",
    "hq_city": "hq_city",
    "hq_state": "hq_state",
    "country": "country",
    "industry": "industry",
    "ownership": "ownership",
    "founded_year": "founded_year",
    "name": "name",
    "notes": "notes",
}

# correction field name -> Signal attribute
SIGNAL_CORRECTION_FIELDS = {
    "source_url": "source_url",
    "signal_type": "signal_type",
    "signal_tier": "tier",
    "tier": "tier",
    "status": "status",
    "title": "title",
    "summary": "description",
    "signal_description": "description",
    "strength": "strength",
}

DELETE_FIELD = "delete"

RowResult = tuple[Outcome, str | None]


def _where(record: InboundRecord | TaxonomyRecord) -> str:
    label = record.label if isinstance(record, InboundRecord) else (record.segment or record.industry or "unknown")
    return f"{label} (row {record.row_number})"


def _humanize(signal_type: SignalType) -> str:
    return signal_type.value.replace("_", " ").capitalize()


def _parse_status(raw: str | None) -> SignalStatus | None:
    if not raw:
        return None
    try:
        return SignalStatus(raw.strip().lower())
    except ValueError as exc:
        raise RowValidationError(f"unknown status {raw!r}") from exc


class IngestEngine:
    def __init__(
        self,
        db: Database,
        config: Config,
        companies: CompanyIndex,
        taxonomy: TaxonomyIndex,
        reporter: BatchReporter | None = None,
        dry_run: bool = False,
        today: date | None = None,
    ):
        self.db = db
        self.config = config
        self.companies = companies
        self.taxonomy = taxonomy
        self.dry_run = dry_run
        self.reporter = reporter or BatchReporter(dry_run=dry_run)
        self.today = today or date.today()
        self._store = RetryPolicy(max_attempts=config.store_retry_attempts)

        # batch-local state
        self._next_planned_id = -1
        self._linked: set[tuple[int, int]] = set()
        self._has_primary: set[int] = set()
        self._planned_signals: dict[tuple[int, SignalType, date], Signal] = {}
        self._planned_projects: dict[tuple[int, str | None, date | None], Project] = {}

    # ------------------------------------------------------------------
    # Row boundary
    # ------------------------------------------------------------------

    def process(self, record: BaseModel, handler: Callable[..., RowResult], **kwargs: Any) -> Outcome:
        """Run one row through ``handler`` and record exactly one outcome."""
        where = _where(record)  # type: ignore[arg-type]
        for item in getattr(record, "malformed", []):
            self.reporter.note(IssueCategory.MALFORMED, f"{where}: unparseable value {item}")

        try:
            outcome, detail = handler(record, **kwargs)
        except RowValidationError as exc:
            outcome, detail = Outcome.rejected, f"{where}: {exc}"
        except ResolutionMiss as exc:
            outcome, detail = Outcome.not_found, f"{where}: {exc}"
        except ConflictError as exc:
            outcome, detail = Outcome.rejected, f"{where}: uniqueness conflict: {exc}"
        except TransientStoreError as exc:
            outcome, detail = Outcome.rejected, f"{where}: {exc}"
        except ValidationError as exc:
            errors = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
            outcome, detail = Outcome.rejected, f"{where}: invalid value ({errors})"
        except Exception as exc:
            logger.error("row_failed", row=where, error=str(exc), category=classify_error(exc))
            outcome, detail = Outcome.rejected, f"{where}: {classify_error(exc)}: {exc}"

        if outcome in (Outcome.created, Outcome.updated):
            logger.debug("row_processed", row=where, outcome=outcome.value, detail=detail)
            detail = None
        elif outcome is Outcome.skipped_duplicate and detail is None:
            detail = f"{where}: no new data"
        else:
            logger.info("row_not_applied", row=where, outcome=outcome.value, detail=detail)
        self.reporter.record(outcome, detail)
        return outcome

    # ------------------------------------------------------------------
    # Store access (real or planned)
    # ------------------------------------------------------------------

    def _write(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if self.dry_run:
            planned_id = self._next_planned_id
            self._next_planned_id -= 1
            return planned_id
        return self._store.call(func, *args, **kwargs)

    @staticmethod
    def _is_planned(entity_id: int | None) -> bool:
        return entity_id is not None and entity_id < 0

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------

    @staticmethod
    def _require_company_ref(record: InboundRecord) -> None:
        if not (record.company_name or record.company_slug):
            raise RowValidationError("missing company name")

    def _resolve(self, record: InboundRecord) -> Company | None:
        return self.companies.resolve(
            name=record.company_name,
            website=record.website,
            slug=record.company_slug,
        )

    def _create_company(self, record: InboundRecord, fields: dict[str, Any]) -> tuple[Company, bool]:
        """Insert a new company; on a slug conflict return the stored one with ``False``."""
        if not record.company_name:
            raise RowValidationError("company name is required to create a company")
        slug = slugify(record.company_slug) or slugify(record.company_name)
        if not slug:
            raise RowValidationError(f"company name {record.company_name!r} yields an empty slug")

        company = Company(
            name=record.company_name,
            slug=slug,
            website=ensure_scheme(record.website) if record.website else None,
            **{k: v for k, v in fields.items() if v is not None},
        )
        try:
            company_id = self._write(self.db.insert_company, company)
        except ConflictError:
            existing = self.db.get_company_by_slug(slug)
            if existing is None:
                raise
            logger.warning("company_insert_conflict", slug=slug)
            self.companies.add(existing)
            return existing, False

        company = company.model_copy(update={"id": company_id})
        self.companies.add(company)
        self.reporter.track("companies", Outcome.created)
        logger.info("company_created", company=company.name, slug=company.slug, planned=self.dry_run)
        return company, True

    def _fill_company(self, company: Company, fields: dict[str, Any]) -> Company:
        """Fill empty fields of an existing company; returns the refreshed company."""
        changes = COMPANY_IMPORT_POLICY.merge(company.model_dump(), fields)
        if not changes:
            return company
        if not self._is_planned(company.id):
            self._write(self.db.update_company, company.id, **changes)
        updated = company.model_copy(update=changes)
        self.companies.add(updated)
        self.reporter.track("companies", Outcome.updated)
        logger.info("company_updated", company=company.name, fields=sorted(changes), planned=self.dry_run)
        return updated

    def _resolve_or_create(
        self,
        record: InboundRecord,
        create_missing: bool,
        create_fields: dict[str, Any],
        fill_fields: dict[str, Any] | None = None,
    ) -> tuple[Company, bool]:
        company = self._resolve(record)
        if company is None:
            if not create_missing:
                raise ResolutionMiss(f"company not found: {record.label}")
            company, created = self._create_company(record, create_fields)
            if created:
                return company, True
        if fill_fields:
            company = self._fill_company(company, fill_fields)
        return company, False

    def _industry_label(self, label: str | None) -> str | None:
        if label is None or is_unknown_label(label):
            return None
        industry = self.taxonomy.resolve_industry(label)
        return industry.name if industry is not None else " ".join(label.split())

    # ------------------------------------------------------------------
    # Segment links
    # ------------------------------------------------------------------

    def _link_segment(self, company: Company, segment: Segment | None) -> bool:
        """Link ``company`` to ``segment`` unless already linked; True when a link was made."""
        if segment is None or company.id is None or segment.id is None:
            return False
        key = (company.id, segment.id)
        if key in self._linked:
            return False

        existing = [] if self._is_planned(company.id) else self.db.get_company_segments(company.id)
        if any(link.segment_id == segment.id for link in existing):
            self._linked.add(key)
            return False

        already_primary = company.id in self._has_primary or any(link.is_primary for link in existing)
        link = CompanySegment(company_id=company.id, segment_id=segment.id, is_primary=not already_primary)
        try:
            self._write(self.db.insert_company_segment, link)
        except ConflictError:
            logger.info("company_segment_exists", company=company.slug, segment=segment.slug)
            self._linked.add(key)
            return False

        self._linked.add(key)
        if link.is_primary:
            self._has_primary.add(company.id)
        self.reporter.track("company_segments", Outcome.created)
        logger.info(
            "company_segment_linked",
            company=company.slug,
            segment=segment.slug,
            is_primary=link.is_primary,
            planned=self.dry_run,
        )
        return True

    def _resolve_taxonomy(self, industry_label: str | None, segment_label: str | None) -> Segment | None:
        industry = self.taxonomy.resolve_industry(industry_label)
        return self.taxonomy.resolve_segment(segment_label, industry)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def _find_signal(self, company_id: int, signal_type: SignalType, signal_date: date) -> Signal | None:
        key = (company_id, signal_type, signal_date)
        if key in self._planned_signals:
            return self._planned_signals[key]
        if self._is_planned(company_id):
            return None
        return self.db.find_signal(company_id, signal_type, signal_date)

    def _update_signal(self, existing: Signal, fields: dict[str, Any]) -> RowResult:
        changes = SIGNAL_REIMPORT_POLICY.merge(existing.model_dump(), fields)
        if not changes:
            return Outcome.skipped_duplicate, None
        if not self._is_planned(existing.id):
            self._write(self.db.update_signal, existing.id, **changes)
        if self.dry_run:
            self._planned_signals[existing.dedup_key] = existing.model_copy(update=changes)
        logger.info("signal_updated", signal_id=existing.id, fields=sorted(changes), planned=self.dry_run)
        return Outcome.updated, None

    def ingest_signal(self, record: SignalRecord, create_missing: bool = True) -> RowResult:
        self._require_company_ref(record)
        if not record.signal_date:
            raise RowValidationError("missing signal_date")
        if not (record.signal_type or record.text):
            raise RowValidationError("missing signal type and text")

        where = _where(record)
        signal_date = try_parse_date(record.signal_date)
        if signal_date is None:
            signal_date = parse_signal_date(record.signal_date, self.today)
            self.reporter.note(
                IssueCategory.MALFORMED,
                f"{where}: unparseable signal_date {record.signal_date!r}, using {self.today.isoformat()}",
            )

        classification = classify_signal(record.signal_type, record.text)
        status = _parse_status(record.status)

        expiry_date = try_parse_date(record.expiry_date)
        if record.expiry_date and expiry_date is None:
            self.reporter.note(IssueCategory.MALFORMED, f"{where}: unparseable expiry_date {record.expiry_date!r}")
        if expiry_date is not None and expiry_date < self.today:
            status = SignalStatus.expired
            self.reporter.note(IssueCategory.STALE, f"{where}: expired on {expiry_date.isoformat()}")

        industry_label = self._industry_label(record.industry)
        company_fields = {
            "hq_city": record.hq_city,
            "hq_state": record.hq_state,
            "industry": industry_label,
            "messaging_hook": record.messaging_hook,
        }
        company, _ = self._resolve_or_create(
            record,
            create_missing,
            create_fields=company_fields,
            fill_fields={**company_fields, "website": ensure_scheme(record.website) if record.website else None},
        )
        self._link_segment(company, self._resolve_taxonomy(record.industry, record.segment))

        title = record.title or (record.text[:MAX_TITLE_LENGTH] if record.text else _humanize(classification.signal_type))
        fields: dict[str, Any] = {
            "tier": record.tier or classification.tier,
            "title": title,
            "description": record.description,
            "expiry_date": expiry_date,
            "source_url": record.source_url,
            "source_type": record.source_type,
            "source_2_url": record.source_2_url,
            "source_2_type": record.source_2_type,
            "strength": record.strength or classification.default_strength,
            "status": status,
        }

        existing = self._find_signal(company.id, classification.signal_type, signal_date)
        if existing is not None:
            return self._update_signal(existing, fields)

        discovered = try_parse_date(record.discovered_date) or self.today
        signal = Signal(
            company_id=company.id,
            signal_type=classification.signal_type,
            signal_date=signal_date,
            discovered_date=discovered,
            **{k: v for k, v in fields.items() if v is not None},
        )
        try:
            signal_id = self._write(self.db.insert_signal, signal)
        except ConflictError:
            existing = self.db.find_signal(company.id, classification.signal_type, signal_date)
            if existing is None:
                raise
            logger.warning("signal_insert_conflict", company=company.slug, signal_type=signal.signal_type.value)
            try:
                return self._update_signal(existing, fields)
            except ConflictError as exc:
                raise ConflictError(f"insert and follow-up update both conflicted: {exc}") from exc

        signal = signal.model_copy(update={"id": signal_id})
        if self.dry_run:
            self._planned_signals[signal.dedup_key] = signal
        logger.info(
            "signal_created",
            company=company.slug,
            signal_type=signal.signal_type.value,
            tier=signal.tier,
            method=classification.method.value,
            planned=self.dry_run,
        )
        return Outcome.created, None

    # ------------------------------------------------------------------
    # Companies (direct import)
    # ------------------------------------------------------------------

    def ingest_company(self, record: CompanyRecord, require_taxonomy: bool = False) -> RowResult:
        self._require_company_ref(record)

        segment = self._resolve_taxonomy(record.industry, record.segment)
        if require_taxonomy and segment is None:
            raise RowValidationError(
                f"unresolved taxonomy (industry={record.industry!r}, segment={record.segment!r})"
            )

        fields: dict[str, Any] = {
            "hq_city": record.hq_city,
            "hq_state": record.hq_state,
            "country": record.country,
            "founded_year": record.founded_year,
            "ownership": record.ownership,
            "composite_score": record.composite_score,
            "industry": self._industry_label(record.industry),
            "messaging_hook": record.messaging_hook,
            "description": record.description,
            "notes": record.notes,
        }

        company = self._resolve(record)
        if company is None:
            company, created = self._create_company(record, fields)
            if created:
                self._link_segment(company, segment)
                return Outcome.created, None

        filled = self._fill_company(company, {**fields, "website": ensure_scheme(record.website) if record.website else None})
        linked = self._link_segment(filled, segment)
        if filled is company and not linked:
            return Outcome.skipped_duplicate, None
        return Outcome.updated, None

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _project_key(self, company_id: int, state: str | None, announced: date | None) -> tuple[int, str | None, date | None]:
        return (company_id, state, announced if self.config.project_key_includes_date else None)

    def _find_project(self, company_id: int, state: str | None, announced: date | None) -> Project | None:
        key = self._project_key(company_id, state, announced)
        if key in self._planned_projects:
            return self._planned_projects[key]
        if self._is_planned(company_id):
            return None
        return self.db.find_project(
            company_id,
            state,
            announced,
            match_date=self.config.project_key_includes_date,
        )

    def ingest_project(self, record: ProjectRecord, create_missing: bool = True) -> RowResult:
        self._require_company_ref(record)
        where = _where(record)

        announced = try_parse_date(record.announcement_date)
        if record.announcement_date and announced is None:
            self.reporter.note(
                IssueCategory.MALFORMED,
                f"{where}: unparseable announcement_date {record.announcement_date!r}",
            )

        # project location is not the HQ for foreign direct investment
        create_fields = {
            "hq_state": None if record.fdi_origin else record.location_state,
            "notes": f"FDI: {record.fdi_origin}" if record.fdi_origin else None,
        }
        company, _ = self._resolve_or_create(record, create_missing, create_fields=create_fields)

        fields: dict[str, Any] = {
            "location_city": record.location_city,
            "county": record.county,
            "jobs_announced": record.jobs_announced,
            "capex_millions": record.capex_millions,
            "sector": record.sector,
            "project_type": record.project_type,
            "announcement_date": announced,
            "fdi_origin": record.fdi_origin,
            "source_url": record.source_url,
            "notes": record.notes,
        }

        existing = self._find_project(company.id, record.location_state, announced)
        if existing is not None:
            changes = PROJECT_IMPORT_POLICY.merge(existing.model_dump(), fields)
            if not changes:
                return Outcome.skipped_duplicate, None
            if not self._is_planned(existing.id):
                self._write(self.db.update_project, existing.id, **changes)
            if self.dry_run:
                key = self._project_key(company.id, existing.location_state, existing.announcement_date)
                self._planned_projects[key] = existing.model_copy(update=changes)
            logger.info("project_updated", company=company.slug, fields=sorted(changes), planned=self.dry_run)
            return Outcome.updated, None

        project = Project(
            company_id=company.id,
            location_state=record.location_state,
            **{k: v for k, v in fields.items() if v is not None},
        )
        project_id = self._write(self.db.insert_project, project)
        if self.dry_run:
            key = self._project_key(company.id, record.location_state, announced)
            self._planned_projects[key] = project.model_copy(update={"id": project_id})
        logger.info(
            "project_created",
            company=company.slug,
            state=record.location_state,
            fdi=bool(record.fdi_origin),
            planned=self.dry_run,
        )
        return Outcome.created, None

    # ------------------------------------------------------------------
    # Corrections
    # ------------------------------------------------------------------

    def _matching_signals(self, company: Company, signal_type: SignalType | None, signal_date: date | None) -> list[Signal]:
        found: dict[tuple[int, SignalType, date], Signal] = {}
        if not self._is_planned(company.id):
            for signal in self.db.get_signals_for_company(company.id, signal_type, signal_date):  # type: ignore[arg-type]
                found[signal.dedup_key] = signal
        for key, signal in self._planned_signals.items():
            if key[0] != company.id:
                continue
            if signal_type is not None and key[1] != signal_type:
                continue
            if signal_date is not None and key[2] != signal_date:
                continue
            found[key] = signal
        return list(found.values())

    def _apply_signal_changes(self, signal: Signal, changes: dict[str, Any]) -> None:
        if not self._is_planned(signal.id):
            self._write(self.db.update_signal, signal.id, **changes)
        if self.dry_run:
            self._planned_signals[signal.dedup_key] = signal.model_copy(update=changes)

    def apply_correction(self, record: CorrectionRecord) -> RowResult:
        self._require_company_ref(record)
        if not record.field:
            raise RowValidationError("missing field")
        field = normalize_header(record.field)

        company = self._resolve(record)
        if company is None:
            raise ResolutionMiss(f"company not found: {record.label}")

        if field in COMPANY_CORRECTION_FIELDS:
            return self._correct_company(company, COMPANY_CORRECTION_FIELDS[field], record.new_value)
        if field in SIGNAL_CORRECTION_FIELDS or field == DELETE_FIELD:
            return self._correct_signals(company, field, record)
        raise RowValidationError(f"unknown correction field {record.field!r}")

    def _correct_company(self, company: Company, attr: str, value: str | None) -> RowResult:
        if value is None:
            raise RowValidationError("missing new_value")
        # validate and coerce through the model
        candidate = Company.model_validate({**company.model_dump(), attr: value})
        changes = CORRECTION_POLICY.merge(company.model_dump(), {attr: getattr(candidate, attr)})
        if not changes:
            return Outcome.skipped_duplicate, None
        if not self._is_planned(company.id):
            self._write(self.db.update_company, company.id, **changes)
        self.companies.add(company.model_copy(update=changes))
        logger.info("company_corrected", company=company.slug, field=attr, planned=self.dry_run)
        return Outcome.updated, None

    def _correct_signals(self, company: Company, field: str, record: CorrectionRecord) -> RowResult:
        signal_type = None
        if record.signal_type:
            signal_type = lookup_signal_type(record.signal_type)
            if signal_type is None:
                raise RowValidationError(f"unknown signal_type filter {record.signal_type!r}")
        signal_date = None
        if record.signal_date:
            signal_date = try_parse_date(record.signal_date)
            if signal_date is None:
                raise RowValidationError(f"unparseable signal_date filter {record.signal_date!r}")

        signals = self._matching_signals(company, signal_type, signal_date)
        if not signals:
            raise ResolutionMiss(f"no matching signals for {company.slug}")

        if field == DELETE_FIELD:
            attr, value = "status", SignalStatus.superseded
        else:
            attr = SIGNAL_CORRECTION_FIELDS[field]
            if record.new_value is None:
                raise RowValidationError("missing new_value")
            value = record.new_value
            if attr == "signal_type":
                value = lookup_signal_type(record.new_value)
                if value is None:
                    raise RowValidationError(f"unknown signal type {record.new_value!r}")
            elif attr == "status":
                value = _parse_status(record.new_value)

        changed = 0
        for signal in signals:
            candidate = Signal.model_validate({**signal.model_dump(), attr: value})
            changes = CORRECTION_POLICY.merge(signal.model_dump(), {attr: getattr(candidate, attr)})
            if not changes:
                continue
            self._apply_signal_changes(signal, changes)
            changed += 1

        if not changed:
            return Outcome.skipped_duplicate, None
        logger.info(
            "signals_corrected",
            company=company.slug,
            field=attr,
            signals=changed,
            planned=self.dry_run,
        )
        return Outcome.updated, None

    # ------------------------------------------------------------------
    # Taxonomy seeding
    # ------------------------------------------------------------------

    def seed_taxonomy_row(self, record: TaxonomyRecord) -> RowResult:
        industry_slug = slugify(record.industry_slug or record.industry)
        if not industry_slug:
            raise RowValidationError("missing industry")

        created = False
        industry = self.taxonomy.industries_by_slug.get(industry_slug)
        if industry is None:
            industry = Industry(name=record.industry or industry_slug, slug=industry_slug)
            try:
                industry_id = self._write(self.db.insert_industry, industry)
            except ConflictError:
                existing = self.db.get_industry_by_slug(industry_slug)
                if existing is None:
                    raise
                industry = existing
            else:
                industry = industry.model_copy(update={"id": industry_id})
                created = True
                self.reporter.track("industries", Outcome.created)
                logger.info("industry_created", slug=industry_slug, planned=self.dry_run)
            self.taxonomy.add_industry(industry)

        segment_slug = slugify(record.segment_slug or record.segment)
        if not segment_slug:
            return (Outcome.created if created else Outcome.skipped_duplicate), None
        if segment_slug in self.taxonomy.segments_by_slug:
            return (Outcome.created if created else Outcome.skipped_duplicate), None

        segment = Segment(
            name=record.segment or segment_slug,
            slug=segment_slug,
            industry_id=industry.id,
            description=record.description,
            display_order=self.taxonomy.next_display_order(industry.id),
        )
        try:
            segment_id = self._write(self.db.insert_segment, segment)
        except ConflictError:
            existing_segment = self.db.get_segment_by_slug(segment_slug)
            if existing_segment is None:
                raise
            self.taxonomy.add_segment(existing_segment)
            return (Outcome.created if created else Outcome.skipped_duplicate), None

        self.taxonomy.add_segment(segment.model_copy(update={"id": segment_id}))
        self.reporter.track("segments", Outcome.created)
        logger.info("segment_created", slug=segment_slug, industry=industry.slug, planned=self.dry_run)
        return Outcome.created, None

"""Company identity resolution.

Matches an inbound company reference against the companies already known
to the batch: exact slug first, then normalized website domain, then a
case-insensitive exact name. No fuzzy matching.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from signal_ingest.models import Company
from signal_ingest.services.normalize import normalize_label, normalize_website, slugify

logger = structlog.get_logger()


class CompanyIndex:
    """In-memory lookup of companies by slug, domain and name for one batch."""

    def __init__(self) -> None:
        self.by_slug: dict[str, Company] = {}
        self.by_domain: dict[str, Company] = {}
        self.by_name: dict[str, Company] = {}

    @classmethod
    def build(cls, companies: Iterable[Company]) -> CompanyIndex:
        index = cls()
        for company in companies:
            index.add(company)
        logger.debug("company_index_built", companies=len(index))
        return index

    def __len__(self) -> int:
        return len(self.by_slug)

    def add(self, company: Company) -> None:
        """Register (or refresh) a company so later rows resolve to it."""
        self.by_slug[company.slug] = company

        domain = company.normalized_domain
        if domain:
            existing = self.by_domain.get(domain)
            if existing is None or existing.slug == company.slug:
                self.by_domain[domain] = company
            else:
                # first company wins; the index keeps the older entry
                logger.warning(
                    "duplicate_company_domain",
                    domain=domain,
                    kept=existing.slug,
                    ignored=company.slug,
                )

        name_key = normalize_label(company.name)
        if name_key:
            self.by_name.setdefault(name_key, company)
            if self.by_name[name_key].slug == company.slug:
                self.by_name[name_key] = company

    def resolve(
        self,
        name: str | None = None,
        website: str | None = None,
        slug: str | None = None,
    ) -> Company | None:
        slug_key = slugify(slug)
        if slug_key and slug_key in self.by_slug:
            return self.by_slug[slug_key]

        domain = normalize_website(website)
        if domain and domain in self.by_domain:
            return self.by_domain[domain]

        # derived name slug ranks below the website domain
        name_slug = slugify(name)
        if name_slug and name_slug in self.by_slug:
            return self.by_slug[name_slug]

        name_key = normalize_label(name)
        if name_key and name_key in self.by_name:
            return self.by_name[name_key]

        return None


def resolve_company(
    name: str | None,
    index: CompanyIndex,
    website: str | None = None,
    slug: str | None = None,
) -> Company | None:
    """Find the existing company an inbound reference points at, if any."""
    return index.resolve(name=name, website=website, slug=slug)

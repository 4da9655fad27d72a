"""Tests for company identity resolution."""

import pytest

from signal_ingest.models import Company
from signal_ingest.services.identity import CompanyIndex, resolve_company


@pytest.fixture
def index():
    return CompanyIndex.build([
        Company(id=1, name="Acme Robotics", slug="acme-robotics", website="https://www.acmerobotics.com/"),
        Company(id=2, name="Blue Forge", slug="blue-forge", website="blueforge.io"),
        Company(id=3, name="Orbital Ltd.", slug="orbital-industries"),
    ])


class TestResolveCompany:
    def test_by_explicit_slug(self, index):
        company = resolve_company("Something Else", index, slug="blue-forge")
        assert company.id == 2

    @pytest.mark.parametrize("name", ["Acme Robotics", "ACME ROBOTICS", "Acme, Robotics"])
    def test_by_derived_slug(self, index, name):
        assert resolve_company(name, index).id == 1

    def test_derived_slug_after_unmatched_domain(self, index):
        assert resolve_company("Acme Robotics", index, website="unknown.example").id == 1

    @pytest.mark.parametrize("website", ["acmerobotics.com", "http://acmerobotics.com", "https://www.AcmeRobotics.com/careers"])
    def test_by_website_domain(self, index, website):
        company = resolve_company("Acme Robotics Holdings", index, website=website)
        assert company.id == 1

    def test_by_case_insensitive_name(self, index):
        # slug differs from the name, so only the name step matches
        company = resolve_company("orbital  LTD.", index)
        assert company.id == 3

    def test_slug_beats_domain(self, index):
        company = resolve_company("Blue Forge", index, website="acmerobotics.com", slug="blue-forge")
        assert company.id == 2

    def test_domain_beats_derived_slug(self, index):
        company = resolve_company("Blue Forge", index, website="acmerobotics.com")
        assert company.id == 1

    def test_website_beats_name(self):
        index = CompanyIndex.build([
            Company(id=1, name="Acme", slug="acme", website="acme.com"),
            Company(id=2, name="Acme Corp", slug="acme-corp", website="acme.io"),
        ])
        assert index.resolve(name="Acme", website="acme.io").id == 2

    def test_no_match(self, index):
        assert resolve_company("Unknown Co", index, website="unknown.example") is None

    def test_empty_reference(self, index):
        assert resolve_company(None, index) is None


class TestCompanyIndex:
    def test_added_company_visible(self, index):
        index.add(Company(id=4, name="New Co", slug="new-co", website="newco.com"))
        assert resolve_company("New Co", index).id == 4
        assert resolve_company("Renamed", index, website="https://newco.com").id == 4
        assert len(index) == 4

    def test_first_company_keeps_domain(self, index):
        index.add(Company(id=5, name="Acme Clone", slug="acme-clone", website="acmerobotics.com"))
        assert resolve_company("Other", index, website="acmerobotics.com").id == 1

    def test_refresh_replaces_entry(self, index):
        index.add(Company(id=2, name="Blue Forge", slug="blue-forge", website="blueforge.io", hq_state="TX"))
        assert resolve_company("Blue Forge", index).hq_state == "TX"

# Overview: Pytest coverage for the flask CLI groups and the tenant directory.

from datetime import datetime

import pytest

from app.models import Company, Payment
from app.services import tenant_service
from app.services.tenant_service import TenantAccessError


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_companies_create_and_list(runner, db_session):
    result = runner.invoke(args=["companies", "create", "--title", "Green Tech", "--registered-at", "2023-01-15T00:00:00Z"])
    assert result.exit_code == 0
    assert "Created company 'Green Tech'" in result.output

    company = db_session.query(Company).filter_by(title="Green Tech").one()
    assert company.registered_at == datetime(2023, 1, 15)

    listing = runner.invoke(args=["companies", "list"])
    assert "Green Tech" in listing.output


def test_companies_create_duplicate_fails(runner, db_session, company_a):
    result = runner.invoke(args=["companies", "create", "--title", company_a.title])
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_payments_generate_skips_platform_owner(runner, db_session, company_a):
    tenant_service.create_company(title="CYDEO")

    result = runner.invoke(args=["payments", "generate"])

    assert result.exit_code == 0
    assert "Created 12 payments." in result.output
    assert {p.company_id for p in db_session.query(Payment).all()} == {company_a.id}


class TestTenantDirectory:
    def test_require_company(self, db_session, company_a):
        assert tenant_service.require_company(company_a.id).title == "Green Tech"
        with pytest.raises(TenantAccessError):
            tenant_service.require_company(99999)

    def test_active_only_listing(self, db_session, company_a, company_b):
        company_b.is_active = False
        db_session.commit()

        assert [c.title for c in tenant_service.list_companies()] == ["Green Tech", "Blue Ocean"]
        assert [c.title for c in tenant_service.list_companies(active_only=True)] == ["Green Tech"]

    def test_blank_title_rejected(self, db_session):
        with pytest.raises(ValueError):
            tenant_service.create_company(title="   ")

"""
Multi-Tenant Service: company directory and tenant scoping helpers

Every request is scoped to one company. The request layer resolves it
into g.company_id (see decorators.require_company); services never read
g themselves and always take company_id as an argument.

USAGE:
    from app.services.tenant_service import require_company

    company = require_company(company_id)
"""

from __future__ import annotations

from ..extensions import db
from ..models import Company
from app.time_utils import utcnow


class TenantAccessError(Exception):
    """Raised when a company is unknown or a resource belongs to another company."""
    pass


def get_company(company_id: int) -> Company | None:
    return db.session.query(Company).filter_by(id=company_id).first()


def require_company(company_id: int) -> Company:
    company = get_company(company_id)
    if company is None:
        raise TenantAccessError("Company not found")
    return company


def list_companies(*, active_only: bool = False) -> list[Company]:
    query = db.session.query(Company)
    if active_only:
        query = query.filter(Company.is_active.is_(True))
    return query.order_by(Company.id.asc()).all()


def create_company(*, title: str, registered_at=None, phone: str | None = None) -> Company:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")
    if db.session.query(Company).filter_by(title=title).first():
        raise ValueError(f"Company {title!r} already exists")

    company = Company(title=title, phone=phone, registered_at=registered_at or utcnow())
    db.session.add(company)
    db.session.commit()
    return company

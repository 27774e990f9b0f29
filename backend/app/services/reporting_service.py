# Overview: Service-layer operations for profit/loss reporting; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..models import Category, Product
from app.pagination import chart_scale
from app.report_periods import bucket_keys_for_year, bucket_keys_since_signup, year_options
from app.time_utils import month_label, today as utc_today
from . import invoice_service, queries
from .tenant_service import get_company

ProfitLossRow = tuple[str, int]


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _registered_at(company_id: int):
    company = get_company(company_id)
    if company is None:
        raise ReportError("Company not found")
    return company.registered_at


def _profit_loss_by_keys(keys: list[date], company_id: int) -> list[ProfitLossRow]:
    # Buckets are read in the same session transaction, so the months are a
    # consistent snapshot.
    rows: list[ProfitLossRow] = []
    for key in keys:
        amount = invoice_service.profit_loss_for_month(company_id, key.year, key.month)
        rows.append((month_label(key), amount))
    return rows


def monthly_profit_loss_since_signup(company_id: int, *, today: date | None = None) -> list[ProfitLossRow]:
    """
    Profit/loss per month from the company's signup to today.

    Returns (label, amount_cents) pairs, most recent month first,
    labels like "2023 JUNE".
    """
    keys = bucket_keys_since_signup(_registered_at(company_id), today or utc_today())
    return _profit_loss_by_keys(keys, company_id)


def monthly_profit_loss_for_year(company_id: int, year: int, *, today: date | None = None) -> list[ProfitLossRow]:
    """Profit/loss per month of one calendar year, bounded by signup and today."""
    keys = bucket_keys_for_year(_registered_at(company_id), year, today or utc_today())
    return _profit_loss_by_keys(keys, company_id)


def product_profit_loss_breakdown(company_id: int) -> list[ProfitLossRow]:
    """(product name, lifetime profit/loss cents) for every active product in the catalog."""
    _registered_at(company_id)
    products = (
        queries.company_products(company_id)
        .order_by(Category.description.asc(), Product.name.asc())
        .all()
    )
    return [(p.name, invoice_service.product_profit_loss(p.id, company_id)) for p in products]


def profit_loss_year_options(company_id: int, *, today: date | None = None) -> list[str]:
    return year_options(_registered_at(company_id), today or utc_today())


def profit_loss_chart_scale(rows: list[ProfitLossRow]) -> int:
    """Chart scale over whole currency units (amounts are stored in cents)."""
    return chart_scale(Decimal(amount) / 100 for _, amount in rows)


def stock_report(company_id: int) -> list[dict]:
    """Every approved invoice line with its invoice context, newest first."""
    rows = []
    for line in invoice_service.approved_invoice_lines(company_id):
        rows.append(
            {
                **line.to_dict(),
                "invoice_no": line.invoice.invoice_no,
                "invoice_type": line.invoice.invoice_type,
                "date": line.invoice.date.isoformat(),
                "client_vendor": line.invoice.client_vendor.name,
            }
        )
    return rows

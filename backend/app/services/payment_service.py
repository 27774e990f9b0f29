# Overview: Service-layer operations for monthly subscription payments.

"""
Subscription Payments (authoritative)

- Each billable company owes MONTHLY_SUBSCRIPTION_FEE_CENTS per month.
- The yearly job creates all twelve monthly rows for the current year at
  once, unpaid, with payment_date = today moved to that month.
- The platform owner (PLATFORM_OWNER_COMPANY_TITLE, exact title match)
  is never billed.
- No idempotency guard: running the job twice in a year duplicates the
  rows. The scheduler (cron calling `flask payments generate` once, on
  January 1st) guarantees a single run.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from flask import current_app

from ..extensions import db
from ..models import Company, Payment
from app.time_utils import MONTH_NAMES, today as utc_today, with_month
from .tenant_service import list_companies


def billable_companies(companies: Iterable[Company]) -> list[Company]:
    owner_title = current_app.config["PLATFORM_OWNER_COMPANY_TITLE"]
    return [c for c in companies if c.title != owner_title]


def generate_monthly_payments(
    companies: Iterable[Company] | None = None,
    *,
    today: date | None = None,
) -> list[Payment]:
    """
    Create twelve unpaid Payment rows (one per month of the current year)
    for every billable company.

    Args:
        companies: Companies to bill (all companies if None)
        today: Reference day; its year and day-of-month are used

    Returns:
        The created Payment rows
    """
    if companies is None:
        companies = list_companies()
    today = today or utc_today()
    fee_cents = current_app.config["MONTHLY_SUBSCRIPTION_FEE_CENTS"]

    created: list[Payment] = []
    billable = billable_companies(companies)
    for company in billable:
        for month_number, month_name in enumerate(MONTH_NAMES, start=1):
            payment = Payment(
                company_id=company.id,
                year=today.year,
                month=month_name,
                amount_cents=fee_cents,
                payment_date=with_month(today, month_number),
                is_paid=False,
            )
            db.session.add(payment)
            created.append(payment)

    db.session.commit()
    current_app.logger.info(
        "Generated %d subscription payments for %d companies (%d)",
        len(created), len(billable), today.year,
    )
    return created


def list_payments(company_id: int, year: int | None = None) -> list[dict]:
    query = db.session.query(Payment).filter(Payment.company_id == company_id)
    if year is not None:
        query = query.filter(Payment.year == year)
    payments = query.order_by(Payment.year.desc(), Payment.payment_date.asc(), Payment.id.asc()).all()
    return [p.to_dict() for p in payments]

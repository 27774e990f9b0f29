# Overview: Service-layer operations for purchase/sales invoices; encapsulates business logic and database work.

"""
Invoice Invariants (authoritative)

Lifecycle:
- Invoices are created as DRAFT with the next per-company number (P-001 / S-001).
- Lines can only be added/removed while DRAFT.
- Approval is all-or-nothing: every line's stock change and cost
  bookkeeping happens in one DB transaction; one failing line rolls back all.
- APPROVED invoices are immutable and cannot be deleted.
- Deleting is a soft delete (record_status=DELETED) of the invoice and its lines.

Stock and cost:
- PURCHASE approval increases stock; each line becomes a cost lot with
  remaining_quantity = quantity.
- SALES approval decreases stock (never below zero) and consumes lots
  first-in-first-out by invoice date. profit_loss_cents on the sales line is
  line total minus the gross cost of the consumed units. Units not covered
  by any lot are costed at zero.
- Totals include tax (whole percent, half-up to the cent) on both sides.

Profit/loss queries:
- Only APPROVED, non-deleted lines of non-deleted invoices count.
- A month is the half-open date range [1st, 1st of next month) on Invoice.date.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from ..extensions import db
from ..models import Invoice, InvoiceProduct, Product
from ..models.inventory import RECORD_DELETED
from ..models.invoices import APPROVED, CLIENT, DRAFT, PURCHASE, SALES, VENDOR, gross_cents
from app.time_utils import month_bounds, today as utc_today, utcnow
from . import client_vendor_service, queries
from .stock_service import (
    InvalidQuantityError,
    ProductNotFoundError,
    decrease_stock_inner,
    increase_stock_inner,
)

INVOICE_TYPES = (PURCHASE, SALES)

_NUMBER_PREFIX = {PURCHASE: "P", SALES: "S"}
_COUNTER_PARTY = {PURCHASE: VENDOR, SALES: CLIENT}


class InvoiceError(Exception):
    """Raised when an invoice operation violates the lifecycle rules."""


class InvoiceNotFoundError(InvoiceError, LookupError):
    pass


def _require_type(invoice_type: str) -> None:
    if invoice_type not in INVOICE_TYPES:
        raise InvoiceError("invoice_type must be PURCHASE or SALES")


def get_invoice(invoice_id: int, company_id: int) -> Invoice:
    invoice = queries.company_invoices(company_id).filter(Invoice.id == invoice_id).first()
    if invoice is None:
        raise InvoiceNotFoundError(f"Invoice not found with id: {invoice_id}")
    return invoice


def list_invoices(company_id: int, invoice_type: str) -> list[dict]:
    _require_type(invoice_type)
    invoices = (
        queries.company_invoices(company_id)
        .filter(Invoice.invoice_type == invoice_type)
        .order_by(Invoice.invoice_no.desc())
        .all()
    )
    return [inv.to_dict() for inv in invoices]


def list_invoice_lines(invoice_id: int, company_id: int) -> list[dict]:
    get_invoice(invoice_id, company_id)
    return [line.to_dict() for line in queries.invoice_lines(invoice_id).all()]


def next_invoice_no(company_id: int, invoice_type: str) -> str:
    """Sequential per company and type; deleted invoices keep their numbers."""
    _require_type(invoice_type)
    issued = (
        db.session.query(func.count(Invoice.id))
        .filter(Invoice.company_id == company_id, Invoice.invoice_type == invoice_type)
        .scalar()
    )
    return f"{_NUMBER_PREFIX[invoice_type]}-{int(issued or 0) + 1:03d}"


def create_invoice(
    *,
    company_id: int,
    invoice_type: str,
    client_vendor_id: int,
    invoice_date: date | None = None,
) -> dict:
    """
    Create a DRAFT invoice.

    Raises:
        InvoiceError: unknown type, or counter-party missing / of the wrong kind
    """
    _require_type(invoice_type)

    counter_party = client_vendor_service.get_client_vendor(client_vendor_id, company_id)
    if counter_party is None:
        raise InvoiceError("Client vendor not found")
    if counter_party.client_vendor_type != _COUNTER_PARTY[invoice_type]:
        raise InvoiceError(f"{invoice_type} invoices require a {_COUNTER_PARTY[invoice_type]}")

    invoice = Invoice(
        company_id=company_id,
        client_vendor_id=counter_party.id,
        invoice_no=next_invoice_no(company_id, invoice_type),
        invoice_type=invoice_type,
        invoice_status=DRAFT,
        date=invoice_date or utc_today(),
    )
    db.session.add(invoice)
    db.session.commit()
    return invoice.to_dict()


def _require_draft(invoice: Invoice) -> None:
    if invoice.invoice_status != DRAFT:
        raise InvoiceError(f"Invoice {invoice.invoice_no} is {invoice.invoice_status}; only DRAFT invoices can change")


def add_invoice_line(*, invoice_id: int, company_id: int, patch: dict) -> dict:
    """
    Add a product line to a DRAFT invoice.

    Raises:
        InvoiceNotFoundError / InvoiceError: invoice missing or not DRAFT
        ProductNotFoundError: product not in the company's catalog
    """
    invoice = get_invoice(invoice_id, company_id)
    _require_draft(invoice)

    product = (
        queries.company_products(company_id)
        .filter(Product.id == patch.get("product_id"))
        .first()
    )
    if product is None:
        raise ProductNotFoundError(f"Product not found with id: {patch.get('product_id')}")

    line = InvoiceProduct(
        invoice_id=invoice.id,
        product_id=product.id,
        quantity=patch["quantity"],
        price_cents=patch["price_cents"],
        tax=patch.get("tax", 0),
    )
    db.session.add(line)
    db.session.commit()
    return line.to_dict()


def remove_invoice_line(*, invoice_id: int, line_id: int, company_id: int) -> None:
    invoice = get_invoice(invoice_id, company_id)
    _require_draft(invoice)

    line = queries.invoice_lines(invoice.id).filter(InvoiceProduct.id == line_id).first()
    if line is None:
        raise InvoiceNotFoundError(f"Invoice line not found with id: {line_id}")

    line.record_status = RECORD_DELETED
    db.session.commit()


def delete_invoice(*, invoice_id: int, company_id: int) -> None:
    invoice = get_invoice(invoice_id, company_id)
    _require_draft(invoice)

    for line in invoice.active_lines():
        line.record_status = RECORD_DELETED
    invoice.record_status = RECORD_DELETED
    db.session.commit()


def _consume_purchase_cost(product_id: int, quantity: int, company_id: int) -> int:
    """Gross cost of `quantity` units taken FIFO from approved purchase lots."""
    lots = (
        queries.company_invoice_lines(company_id)
        .filter(
            InvoiceProduct.product_id == product_id,
            InvoiceProduct.remaining_quantity > 0,
            Invoice.invoice_type == PURCHASE,
            Invoice.invoice_status == APPROVED,
        )
        .order_by(Invoice.date.asc(), InvoiceProduct.id.asc())
        .with_for_update()
        .all()
    )

    cost = 0
    needed = quantity
    for lot in lots:
        if needed == 0:
            break
        take = min(needed, lot.remaining_quantity)
        cost += gross_cents(take, lot.price_cents, lot.tax)
        lot.remaining_quantity -= take
        needed -= take
    return cost


def approve_invoice(*, invoice_id: int, company_id: int, today: date | None = None) -> dict:
    """
    Approve a DRAFT invoice: move stock, book costs, stamp the approval date.

    Low-stock alerts are NOT raised here; callers run
    stock_service.check_low_limit_alert after a successful approval.

    Raises:
        InvoiceNotFoundError / InvoiceError: missing, not DRAFT, or no lines
        InvalidQuantityError: a sales line exceeds the stock on hand
        ProductNotFoundError: a line's product was deleted meanwhile
    """
    invoice = get_invoice(invoice_id, company_id)
    _require_draft(invoice)

    lines = invoice.active_lines()
    if not lines:
        raise InvoiceError(f"Invoice {invoice.invoice_no} has no products")

    try:
        for line in lines:
            if invoice.invoice_type == PURCHASE:
                increase_stock_inner(line.product_id, line.quantity, company_id=company_id)
                line.remaining_quantity = line.quantity
                line.profit_loss_cents = 0
            else:
                decrease_stock_inner(line.product_id, line.quantity, company_id=company_id)
                cost = _consume_purchase_cost(line.product_id, line.quantity, company_id)
                line.profit_loss_cents = line.total_cents - cost

        invoice.invoice_status = APPROVED
        invoice.date = today or utc_today()
        invoice.approved_at = utcnow()
        db.session.commit()
    except (InvalidQuantityError, ProductNotFoundError):
        db.session.rollback()
        raise

    return invoice.to_dict()


def _approved_lines(company_id: int, invoice_type: str):
    return queries.company_invoice_lines(company_id).filter(
        Invoice.invoice_type == invoice_type,
        Invoice.invoice_status == APPROVED,
    )


def profit_loss_for_month(company_id: int, year: int, month: int, invoice_type: str = SALES) -> int:
    """Summed profit/loss (cents) of approved lines dated in the given month."""
    start, end = month_bounds(year, month)
    total = (
        _approved_lines(company_id, invoice_type)
        .filter(Invoice.date >= start, Invoice.date < end)
        .with_entities(func.coalesce(func.sum(InvoiceProduct.profit_loss_cents), 0))
        .scalar()
    )
    return int(total or 0)


def product_profit_loss(product_id: int, company_id: int) -> int:
    """Lifetime profit/loss (cents) of a product across approved sales invoices."""
    total = (
        _approved_lines(company_id, SALES)
        .filter(InvoiceProduct.product_id == product_id)
        .with_entities(func.coalesce(func.sum(InvoiceProduct.profit_loss_cents), 0))
        .scalar()
    )
    return int(total or 0)


def approved_invoice_lines(company_id: int) -> list[InvoiceProduct]:
    """All approved lines (both types), newest invoice first."""
    return (
        queries.company_invoice_lines(company_id)
        .filter(Invoice.invoice_status == APPROVED)
        .order_by(Invoice.date.desc(), InvoiceProduct.id.desc())
        .all()
    )

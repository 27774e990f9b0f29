# Overview: Query builders that apply soft-delete and company scoping in one place.

"""
Every read of a soft-deletable model starts here.

INVARIANT: rows with record_status=DELETED are invisible to services.
Building queries only through these helpers keeps the filter from being
forgotten at individual call sites.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Category, ClientVendor, Invoice, InvoiceProduct, Product
from ..models.inventory import RECORD_ACTIVE


def active(model):
    """Base query over non-deleted rows of a soft-deletable model."""
    return db.session.query(model).filter(model.record_status == RECORD_ACTIVE)


def company_categories(company_id: int):
    return active(Category).filter(Category.company_id == company_id)


def company_products(company_id: int):
    """Active products whose (active) category belongs to the company."""
    return (
        active(Product)
        .join(Category, Product.category_id == Category.id)
        .filter(
            Category.company_id == company_id,
            Category.record_status == RECORD_ACTIVE,
        )
    )


def company_client_vendors(company_id: int):
    return active(ClientVendor).filter(ClientVendor.company_id == company_id)


def company_invoices(company_id: int):
    return active(Invoice).filter(Invoice.company_id == company_id)


def invoice_lines(invoice_id: int):
    return (
        active(InvoiceProduct)
        .filter(InvoiceProduct.invoice_id == invoice_id)
        .order_by(InvoiceProduct.id.asc())
    )


def company_invoice_lines(company_id: int):
    """Active lines of active invoices owned by the company."""
    return (
        active(InvoiceProduct)
        .join(Invoice, InvoiceProduct.invoice_id == Invoice.id)
        .filter(
            Invoice.company_id == company_id,
            Invoice.record_status == RECORD_ACTIVE,
        )
    )

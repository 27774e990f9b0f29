# Overview: Service-layer operations for product stock levels.

"""
Stock Invariants (authoritative)

- Product.quantity_in_stock is never negative. A decrease that would go
  below zero fails and leaves the stored level unchanged.
- Quantities passed in are never negative; direction comes from the
  operation (increase/decrease), not the sign.
- Every mutation reads the product row with SELECT ... FOR UPDATE and
  writes through the versioned mapper, so concurrent approvals cannot
  lose updates.
- The *_inner variants only flush. Invoice approval uses them so all
  lines of one invoice commit (or roll back) together.

Low-limit alert:
- A product is low when quantity_in_stock <= low_limit_alert.
- The alert is advisory and raised after the mutation committed; the
  caller decides what to do with it.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Category, Product
from . import queries
from .concurrency import lock_for_update


class ProductNotFoundError(LookupError):
    """Raised when a product id is unknown (or belongs to another company)."""


class InvalidQuantityError(ValueError):
    """Raised when a stock change would drive quantity_in_stock below zero."""


class LowStockAlertError(Exception):
    """Advisory: products on an invoice are at or below their low limit."""

    def __init__(self, product_names: list[str]):
        self.product_names = product_names
        super().__init__(f"Stock of {', '.join(product_names)} decreased below low limit!")


def _load_product_for_update(product_id: int, company_id: int | None) -> Product:
    if company_id is None:
        query = queries.active(Product).filter(Product.id == product_id)
    else:
        query = queries.company_products(company_id).filter(Product.id == product_id)
    product = lock_for_update(query).first()
    if product is None:
        raise ProductNotFoundError(f"Product not found with id: {product_id}")
    return product


def _require_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError("quantity must be an integer")
    if quantity < 0:
        raise InvalidQuantityError("quantity must be >= 0")


def decrease_stock_inner(product_id: int, quantity: int, *, company_id: int | None = None) -> int:
    _require_quantity(quantity)
    product = _load_product_for_update(product_id, company_id)

    new_quantity = product.quantity_in_stock - quantity
    if new_quantity < 0:
        raise InvalidQuantityError(
            f"Quantity cannot be negative: {product.name} has {product.quantity_in_stock}, requested {quantity}"
        )

    product.quantity_in_stock = new_quantity
    db.session.flush()
    return new_quantity


def increase_stock_inner(product_id: int, quantity: int, *, company_id: int | None = None) -> int:
    _require_quantity(quantity)
    product = _load_product_for_update(product_id, company_id)

    product.quantity_in_stock = product.quantity_in_stock + quantity
    db.session.flush()
    return product.quantity_in_stock


def decrease_stock(product_id: int, quantity: int, *, company_id: int | None = None) -> int:
    """
    Take quantity out of stock and commit.

    Returns the new stock level.

    Raises:
        ProductNotFoundError: unknown product
        InvalidQuantityError: negative quantity or insufficient stock
    """
    try:
        new_quantity = decrease_stock_inner(product_id, quantity, company_id=company_id)
    except (ProductNotFoundError, InvalidQuantityError):
        db.session.rollback()
        raise
    db.session.commit()
    return new_quantity


def increase_stock(product_id: int, quantity: int, *, company_id: int | None = None) -> int:
    """Put quantity into stock and commit. Returns the new stock level."""
    try:
        new_quantity = increase_stock_inner(product_id, quantity, company_id=company_id)
    except (ProductNotFoundError, InvalidQuantityError):
        db.session.rollback()
        raise
    db.session.commit()
    return new_quantity


def low_stock_products(invoice_id: int) -> list[Product]:
    """Products on the invoice's active lines at or below their low limit, in line order."""
    seen: set[int] = set()
    low: list[Product] = []
    for line in queries.invoice_lines(invoice_id).all():
        product = line.product
        if product.id in seen:
            continue
        seen.add(product.id)
        if product.quantity_in_stock <= product.low_limit_alert:
            low.append(product)
    return low


def check_low_limit_alert(invoice_id: int) -> None:
    """
    Raise LowStockAlertError naming every low product on the invoice.

    Returns silently when all products are above their limits.
    """
    low = low_stock_products(invoice_id)
    if low:
        raise LowStockAlertError([p.name for p in low])


def list_low_stock(company_id: int) -> list[dict]:
    products = (
        queries.company_products(company_id)
        .filter(Product.quantity_in_stock <= Product.low_limit_alert)
        .order_by(Category.description.asc(), Product.name.asc())
        .all()
    )
    return [p.to_dict() for p in products]

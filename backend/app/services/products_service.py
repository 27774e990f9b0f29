# backend/app/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are company-scoped through the
product's category (Category.company_id).

CATALOG RULES:
- Product names are unique per (category, company) among active products
- Duplicate names are reported as field errors (ValidationResult), never raised
  from the validators; create/update raise InvalidFieldsError carrying them
- quantity_in_stock is never written here; only stock_service moves stock
- Soft delete only when stock is 0 and no active invoice line uses the product
"""
from __future__ import annotations

from ..extensions import db
from ..models import Category, InvoiceProduct, Product
from ..models.inventory import RECORD_DELETED
from ..validation import ConflictError, InvalidFieldsError, ValidationError, ValidationResult
from . import category_service, queries
from .stock_service import ProductNotFoundError

PRODUCT_MUTABLE_FIELDS = {"name", "product_unit", "category_id", "low_limit_alert"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _duplicate_name_error(name: str) -> str:
    return f"Product name \"{name}\" is already in use for this company."


def _name_taken(name: str, category_id: int, company_id: int, *, exclude_product_id: int | None = None) -> bool:
    query = queries.company_products(company_id).filter(
        Product.name == name,
        Product.category_id == category_id,
    )
    if exclude_product_id is not None:
        query = query.filter(Product.id != exclude_product_id)
    return db.session.query(query.exists()).scalar()


def validate_unique_name_on_create(name: str, category_id: int | None, company_id: int) -> ValidationResult:
    """
    Field error on "name" when an active product with the same name already
    exists in the category for this company. Read-only.
    """
    result = ValidationResult()
    if category_id is None:
        return result
    if _name_taken(name, category_id, company_id):
        result.add("name", _duplicate_name_error(name))
    return result


def validate_unique_name_on_update(
    *,
    product_id: int,
    name: str | None,
    category_id: int | None,
    company_id: int,
) -> ValidationResult:
    """
    Same check as on create, but only when the name or the category
    description actually changed. Saving a product unchanged never
    reports it as a duplicate of itself.

    Raises:
        ProductNotFoundError: existing product not found for the company
    """
    existing = queries.company_products(company_id).filter(Product.id == product_id).first()
    if existing is None:
        raise ProductNotFoundError(f"Product not found with id: {product_id}")

    result = ValidationResult()
    new_name = name if name is not None else existing.name
    new_category_id = category_id if category_id is not None else existing.category_id

    new_category = db.session.get(Category, new_category_id)
    new_description = new_category.description if new_category else None

    changed = new_name != existing.name or new_description != existing.category.description
    if changed and _name_taken(new_name, new_category_id, company_id, exclude_product_id=existing.id):
        result.add("name", _duplicate_name_error(new_name))
    return result


def _require_category(category_id: int, company_id: int) -> Category:
    category = category_service.get_category(category_id, company_id)
    if category is None:
        raise ValidationError("category not found")
    return category


def get_product(product_id: int, company_id: int) -> Product:
    product = queries.company_products(company_id).filter(Product.id == product_id).first()
    if product is None:
        raise ProductNotFoundError(f"Product not found with id: {product_id}")
    return product


def list_products(
    company_id: int,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Company-scoped product listing with optional pagination.

    Args:
        company_id: Company whose catalog to list
        page: Page number (1-indexed). If None, returns all items.
        per_page: Items per page (default 20, max 100)

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    base_query = (
        queries.company_products(company_id)
        .order_by(Category.description.asc(), Product.name.asc(), Product.id.asc())
    )

    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    per_page = min(per_page or 20, 100)
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def list_products_in_stock(company_id: int) -> list[dict]:
    """Products that can go on a sales invoice (quantity_in_stock > 0)."""
    products = (
        queries.company_products(company_id)
        .filter(Product.quantity_in_stock > 0)
        .order_by(Product.name.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def list_products_by_category(category_id: int, company_id: int) -> list[dict]:
    _require_category(category_id, company_id)
    products = (
        queries.company_products(company_id)
        .filter(Product.category_id == category_id)
        .order_by(Product.name.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def create_product(*, patch: dict, company_id: int) -> dict:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: category missing or owned by another company
        InvalidFieldsError: name already used in the category
    """
    category_id = patch.get("category_id")
    if category_id is None:
        raise ValidationError("category_id is required")
    _require_category(category_id, company_id)

    result = validate_unique_name_on_create(patch["name"], category_id, company_id)
    if not result.ok:
        raise InvalidFieldsError(result)

    p = Product(quantity_in_stock=0)
    apply_product_patch(p, patch)
    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict, company_id: int) -> dict:
    """
    Update catalog fields. The stored stock level is always kept.

    Raises:
        ProductNotFoundError: unknown product for this company
        ValidationError: new category missing or owned by another company
        InvalidFieldsError: new name already used in the category
    """
    if patch.get("category_id") is not None:
        _require_category(patch["category_id"], company_id)

    result = validate_unique_name_on_update(
        product_id=product_id,
        name=patch.get("name"),
        category_id=patch.get("category_id"),
        company_id=company_id,
    )
    if not result.ok:
        raise InvalidFieldsError(result)

    p = get_product(product_id, company_id)
    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def product_has_invoice(product_id: int) -> bool:
    query = queries.active(InvoiceProduct).filter(InvoiceProduct.product_id == product_id)
    return db.session.query(query.exists()).scalar()


def delete_product(*, product_id: int, company_id: int) -> None:
    """
    Soft-delete a product.

    Raises:
        ProductNotFoundError: unknown product for this company
        ConflictError: product still has stock or appears on an invoice
    """
    p = get_product(product_id, company_id)

    if p.quantity_in_stock != 0:
        raise ConflictError(f"{p.name} cannot be deleted while it has {p.quantity_in_stock} in stock.")
    if product_has_invoice(p.id):
        raise ConflictError(f"{p.name} cannot be deleted because it appears on an invoice.")

    p.record_status = RECORD_DELETED
    db.session.commit()

# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/app/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to the caller's company.
The company_id is derived from g.company_id (set by @require_company).

Stock is read-only here: quantity_in_stock only moves through invoice approval.
"""
from flask import Blueprint, request, g
from ..services import products_service
from ..services.stock_service import ProductNotFoundError, list_low_stock
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
    InvalidFieldsError,
)
from ..decorators import require_company

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "product_unit", "category_id", "low_limit_alert"},
    required_on_create={"name", "product_unit", "category_id", "low_limit_alert"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_company
def list_products():
    """
    List all products with optional pagination.

    Query params:
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)

    return products_service.list_products(g.company_id, page=page, per_page=per_page)


@products_bp.get("/in-stock")
@require_company
def list_products_in_stock():
    return {"items": products_service.list_products_in_stock(g.company_id)}


@products_bp.get("/low-stock")
@require_company
def list_low_stock_products():
    return {"items": list_low_stock(g.company_id)}


@products_bp.get("/by-category/<int:category_id>")
@require_company
def list_products_by_category(category_id: int):
    try:
        items = products_service.list_products_by_category(category_id, g.company_id)
    except ValidationError:
        return {"error": "Category not found"}, 404
    return {"items": items}


@products_bp.get("/<int:product_id>")
@require_company
def get_product(product_id: int):
    try:
        return products_service.get_product(product_id, g.company_id).to_dict()
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404


@products_bp.post("")
@require_company
def create_product_route():
    """
    Create a new product in the caller's company.

    Duplicate names within the category come back as 422 field errors.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        created = products_service.create_product(patch=patch, company_id=g.company_id)
    except InvalidFieldsError as e:
        return e.result.to_dict(), 422
    except ValidationError as e:
        return {"error": str(e)}, 400

    return created, 201


@products_bp.put("/<int:product_id>")
@require_company
def update_product_route(product_id: int):
    """Update a product's catalog fields (never its stock)."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = products_service.update_product(product_id=product_id, patch=patch, company_id=g.company_id)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404
    except InvalidFieldsError as e:
        return e.result.to_dict(), 422
    except ValidationError as e:
        return {"error": str(e)}, 400

    return updated, 200


@products_bp.delete("/<int:product_id>")
@require_company
def delete_product_route(product_id: int):
    """Soft-delete a product with no stock and no invoice lines."""
    try:
        products_service.delete_product(product_id=product_id, company_id=g.company_id)
    except ProductNotFoundError:
        return {"error": "Product not found"}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409

    return {"ok": True}, 200

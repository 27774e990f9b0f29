# Overview: Flask API routes for categories and clients/vendors; parses input and returns JSON responses.

"""
Catalog reference data routes.

MULTI-TENANT: Everything is scoped to g.company_id (set by @require_company).
"""
from flask import Blueprint, request, g

from ..decorators import require_company
from ..models import Category, ClientVendor
from ..services import category_service, client_vendor_service
from ..validation import ModelValidationPolicy, ValidationError, validate_payload

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"description"},
    required_on_create={"description"},
)

CLIENT_VENDOR_POLICY = ModelValidationPolicy(
    writable_fields={"name", "client_vendor_type", "phone", "website"},
    required_on_create={"name", "client_vendor_type"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")
client_vendors_bp = Blueprint("client_vendors", __name__, url_prefix="/api/client-vendors")


@categories_bp.get("")
@require_company
def list_categories():
    return {"items": category_service.list_categories(g.company_id)}


@categories_bp.post("")
@require_company
def create_category():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    result = category_service.validate_unique_description(patch["description"], g.company_id)
    if not result.ok:
        return result.to_dict(), 422

    category = category_service.create_category(description=patch["description"], company_id=g.company_id)
    return category.to_dict(), 201


@client_vendors_bp.get("")
@require_company
def list_client_vendors():
    try:
        items = client_vendor_service.list_client_vendors(g.company_id, request.args.get("type"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    return {"items": items}


@client_vendors_bp.post("")
@require_company
def create_client_vendor():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=ClientVendor, payload=payload, policy=CLIENT_VENDOR_POLICY, partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    result = client_vendor_service.validate_unique_name(patch["name"], g.company_id)
    if not result.ok:
        return result.to_dict(), 422

    try:
        cv = client_vendor_service.create_client_vendor(patch=patch, company_id=g.company_id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    return cv.to_dict(), 201

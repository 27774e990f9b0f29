# Overview: Service-layer operations for clients and vendors (invoice counter-parties).

from __future__ import annotations

from ..extensions import db
from ..models import ClientVendor
from ..models.invoices import CLIENT, VENDOR
from ..validation import ValidationError, ValidationResult
from . import queries

CLIENT_VENDOR_TYPES = (CLIENT, VENDOR)


def list_client_vendors(company_id: int, client_vendor_type: str | None = None) -> list[dict]:
    query = queries.company_client_vendors(company_id)
    if client_vendor_type is not None:
        if client_vendor_type not in CLIENT_VENDOR_TYPES:
            raise ValidationError("type must be CLIENT or VENDOR")
        query = query.filter(ClientVendor.client_vendor_type == client_vendor_type)
    return [cv.to_dict() for cv in query.order_by(ClientVendor.name.asc()).all()]


def get_client_vendor(client_vendor_id: int, company_id: int) -> ClientVendor | None:
    return queries.company_client_vendors(company_id).filter(ClientVendor.id == client_vendor_id).first()


def validate_unique_name(name: str, company_id: int) -> ValidationResult:
    result = ValidationResult()
    if queries.company_client_vendors(company_id).filter(ClientVendor.name == name).first():
        result.add("name", f"\"{name}\" is already in use for this company.")
    return result


def create_client_vendor(*, patch: dict, company_id: int) -> ClientVendor:
    if patch.get("client_vendor_type") not in CLIENT_VENDOR_TYPES:
        raise ValidationError("client_vendor_type must be CLIENT or VENDOR")

    cv = ClientVendor(company_id=company_id, **patch)
    db.session.add(cv)
    db.session.commit()
    return cv

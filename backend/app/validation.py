from __future__ import annotations
from datetime import date, datetime
from app.time_utils import parse_iso_date

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from app.models.inventory import PRODUCT_UNITS


# Largest unit price an invoice line accepts: 9,999,999.99
MAX_PRICE_CENTS = 999_999_999

MAX_TAX_PERCENT = 20


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a product that is in stock)."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    """
    Accumulated field-level validation errors.

    Empty errors == Ok. Checks add to one result (or merge several) so the
    caller can report every field problem at once instead of the first.
    """
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> "ValidationResult":
        self.errors.append(FieldError(field_name, message))
        return self

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(errors=[*self.errors, *other.errors])

    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def to_dict(self) -> dict:
        return {"errors": [e.to_dict() for e in self.errors]}


class InvalidFieldsError(ValidationError):
    """422-level: one or more field-level rule failures, carried as a ValidationResult."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(e.message for e in result.errors))


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Per-resource input policy:
    - writable_fields: keys a client may send at all
    - required_on_create: keys a POST must carry
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def _as_int(key: str, value: Any) -> int:
    # JSON numbers arrive as int/float; query strings and forms as str.
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{key} must be an integer")


def _as_date(key: str, value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_date(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(f"{key} must be a YYYY-MM-DD date")


def _coerce_value(col, value: Any):
    coltype = col.type
    if isinstance(coltype, Integer):
        return _as_int(col.key, value)
    if isinstance(coltype, Date):
        return _as_date(col.key, value)
    if isinstance(coltype, (String, Text)):
        text = str(value).strip()
        if not text and not col.nullable:
            raise ValidationError(f"{col.key} cannot be blank")
        if isinstance(coltype, String) and coltype.length and len(text) > coltype.length:
            raise ValidationError(f"{col.key} exceeds max length {coltype.length}")
        return text
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Turn a JSON body into a clean patch dict for `model`.

    Keys outside policy.writable_fields are rejected, values are coerced to
    the column types, and non-nullable columns refuse null. With
    partial=False every key in policy.required_on_create must be present.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable_fields or key not in columns:
            raise ValidationError(f"Field not allowed: {key}")

        col = columns[key]
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _coerce_value(col, raw)

    return patch


def enforce_rules_product(patch: dict) -> None:
    """Product rules the column metadata cannot express."""
    if "product_unit" in patch and patch["product_unit"] not in PRODUCT_UNITS:
        raise ValidationError(f"product_unit must be one of {', '.join(PRODUCT_UNITS)}")

    if "low_limit_alert" in patch and patch["low_limit_alert"] < 0:
        raise ValidationError("low_limit_alert must be >= 0")

    if "name" in patch and len(patch["name"]) < 2:
        raise ValidationError("name must be at least 2 characters")


def enforce_rules_invoice_line(patch: dict) -> None:
    if patch.get("quantity") is None or patch["quantity"] <= 0:
        raise ValidationError("quantity must be > 0")

    price = patch.get("price_cents")
    if price is None or price <= 0:
        raise ValidationError("price_cents must be > 0")
    if price > MAX_PRICE_CENTS:
        raise ValidationError(f"price_cents cannot exceed {MAX_PRICE_CENTS}")

    tax = patch.get("tax", 0)
    if tax is None or not 0 <= tax <= MAX_TAX_PERCENT:
        raise ValidationError(f"tax must be between 0 and {MAX_TAX_PERCENT}")

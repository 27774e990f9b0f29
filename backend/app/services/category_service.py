# Overview: Service-layer operations for product categories.

from __future__ import annotations

from ..extensions import db
from ..models import Category
from ..validation import ValidationResult
from . import queries


def list_categories(company_id: int) -> list[dict]:
    categories = queries.company_categories(company_id).order_by(Category.description.asc()).all()
    return [c.to_dict() for c in categories]


def get_category(category_id: int, company_id: int) -> Category | None:
    return queries.company_categories(company_id).filter(Category.id == category_id).first()


def validate_unique_description(description: str, company_id: int) -> ValidationResult:
    result = ValidationResult()
    exists = (
        queries.company_categories(company_id)
        .filter(Category.description == description)
        .first()
    )
    if exists:
        result.add("description", f"Category \"{description}\" already exists for this company.")
    return result


def create_category(*, description: str, company_id: int) -> Category:
    category = Category(company_id=company_id, description=description)
    db.session.add(category)
    db.session.commit()
    return category

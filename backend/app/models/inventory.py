from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z

# Soft delete: rows are never removed, only flagged.
RECORD_ACTIVE = "ACTIVE"
RECORD_DELETED = "DELETED"

PRODUCT_UNITS = ("PCS", "KG", "LBS", "GALLON", "FEET", "METER", "INCH")


class Category(db.Model):
    """
    Product category, owned by a company.

    MULTI-TENANT: products reach their company through the category,
    so category.company_id is the tenant boundary for the catalog.
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.Index("ix_categories_company_description", "company_id", "description"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    description = db.Column(db.String(100), nullable=False)

    record_status = db.Column(db.String(16), nullable=False, default=RECORD_ACTIVE, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("categories", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} description={self.description!r} company_id={self.company_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Product master data with its stock level.

    STOCK INVARIANTS:
    - quantity_in_stock is never negative (CHECK constraint + stock_service guard)
    - quantity_in_stock only changes through stock_service (invoice approval)
    - version_id gives optimistic concurrency on top of the row lock taken
      by stock_service, so two approvals can never lose an update

    SOFT DELETE:
    - record_status=DELETED only when stock is 0 and no active invoice line
      references the product
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity_in_stock >= 0", name="quantity_in_stock_non_negative"),
        db.CheckConstraint("low_limit_alert >= 0", name="low_limit_alert_non_negative"),
        db.Index("ix_products_category_name", "category_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    name = db.Column(db.String(100), nullable=False)
    product_unit = db.Column(db.String(16), nullable=False, default="PCS")

    quantity_in_stock = db.Column(db.Integer, nullable=False, default=0)
    low_limit_alert = db.Column(db.Integer, nullable=False, default=0)

    record_status = db.Column(db.String(16), nullable=False, default=RECORD_ACTIVE, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} category_id={self.category_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "category": self.category.description if self.category else None,
            "name": self.name,
            "product_unit": self.product_unit,
            "quantity_in_stock": self.quantity_in_stock,
            "low_limit_alert": self.low_limit_alert,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z, utcnow


class Company(db.Model):
    """
    Multi-tenant root: every tenant is a Company.

    All categories, products, client/vendors, invoices and payments belong
    to exactly one company, and every service query is scoped by company_id.

    registered_at is the subscription start. It anchors the month buckets
    of the profit/loss reports, so it is set once on insert and never
    touched by updates.
    """
    __tablename__ = "companies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=True)
    website = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    registered_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} title={self.title!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "phone": self.phone,
            "website": self.website,
            "is_active": self.is_active,
            "registered_at": to_utc_z(self.registered_at),
        }

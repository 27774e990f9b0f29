from __future__ import annotations

from ..extensions import db
from app.time_utils import MONTH_NAMES, to_iso_date, to_utc_z


class Payment(db.Model):
    """
    Monthly subscription charge for a company.

    One row per company per month per year, generated in bulk for the
    whole year by payment_service. is_paid is flipped by billing, never
    by the generator.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.Index("ix_payments_company_year", "company_id", "year"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)

    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Enum(*MONTH_NAMES, name="payment_month"), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("payments", lazy=True))

    def __repr__(self) -> str:
        return f"<Payment id={self.id} company_id={self.company_id} {self.month} {self.year}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "year": self.year,
            "month": self.month,
            "amount_cents": self.amount_cents,
            "payment_date": to_iso_date(self.payment_date),
            "is_paid": self.is_paid,
            "created_at": to_utc_z(self.created_at),
        }

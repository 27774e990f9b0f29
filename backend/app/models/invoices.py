from __future__ import annotations

from ..extensions import db
from app.time_utils import to_iso_date, to_utc_z
from .inventory import RECORD_ACTIVE

CLIENT = "CLIENT"
VENDOR = "VENDOR"

PURCHASE = "PURCHASE"
SALES = "SALES"

DRAFT = "DRAFT"
APPROVED = "APPROVED"


def gross_cents(quantity: int, price_cents: int, tax: int) -> int:
    """quantity * unit price plus tax percent, nearest-cent rounding (half-up)."""
    net = quantity * price_cents
    return net + (net * tax + 50) // 100


class ClientVendor(db.Model):
    """Counter-party of an invoice: a CLIENT for sales, a VENDOR for purchases."""
    __tablename__ = "client_vendors"
    __table_args__ = (
        db.Index("ix_client_vendors_company_type", "company_id", "client_vendor_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    client_vendor_type = db.Column(db.String(16), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    website = db.Column(db.String(255), nullable=True)

    record_status = db.Column(db.String(16), nullable=False, default=RECORD_ACTIVE, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("client_vendors", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "client_vendor_type": self.client_vendor_type,
            "phone": self.phone,
            "website": self.website,
            "created_at": to_utc_z(self.created_at),
        }


class Invoice(db.Model):
    """
    Purchase or sales invoice.

    LIFECYCLE:
    - DRAFT: lines can be added/removed, no stock effect
    - APPROVED: stock moved, sales profit/loss recorded; immutable afterwards
    - Only DRAFT invoices can be soft-deleted

    invoice_no is sequential per company and type: P-001, S-001, ...
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.UniqueConstraint("company_id", "invoice_no", name="uq_invoices_company_invoice_no"),
        db.Index("ix_invoices_company_type_status", "company_id", "invoice_type", "invoice_status"),
        db.Index("ix_invoices_company_date", "company_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    client_vendor_id = db.Column(db.Integer, db.ForeignKey("client_vendors.id"), nullable=False, index=True)

    invoice_no = db.Column(db.String(16), nullable=False)
    invoice_type = db.Column(db.String(16), nullable=False)
    invoice_status = db.Column(db.String(16), nullable=False, default=DRAFT)
    date = db.Column(db.Date, nullable=False)

    record_status = db.Column(db.String(16), nullable=False, default=RECORD_ACTIVE, index=True)

    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    company = db.relationship("Company", backref=db.backref("invoices", lazy=True))
    client_vendor = db.relationship("ClientVendor")

    def active_lines(self) -> list["InvoiceProduct"]:
        return [line for line in self.lines if line.record_status == RECORD_ACTIVE]

    def totals(self) -> dict:
        price = sum(line.quantity * line.price_cents for line in self.active_lines())
        total = sum(line.total_cents for line in self.active_lines())
        return {"price_cents": price, "tax_cents": total - price, "total_cents": total}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "invoice_no": self.invoice_no,
            "invoice_type": self.invoice_type,
            "invoice_status": self.invoice_status,
            "date": to_iso_date(self.date),
            "client_vendor_id": self.client_vendor_id,
            "client_vendor": self.client_vendor.name if self.client_vendor else None,
            "approved_at": to_utc_z(self.approved_at),
            **self.totals(),
        }


class InvoiceProduct(db.Model):
    """
    Invoice line.

    PRICING: price_cents is the unit price at the time of sale/purchase;
    tax is a whole percent. total_cents includes tax.

    COST TRACKING (filled on approval):
    - PURCHASE lines: remaining_quantity starts at quantity and is consumed
      first-in-first-out by later sales
    - SALES lines: profit_loss_cents = line total - cost of consumed purchase units
    """
    __tablename__ = "invoice_products"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="quantity_positive"),
        db.Index("ix_invoice_products_product_status", "product_id", "record_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    tax = db.Column(db.Integer, nullable=False, default=0)

    remaining_quantity = db.Column(db.Integer, nullable=False, default=0)
    profit_loss_cents = db.Column(db.Integer, nullable=False, default=0)

    record_status = db.Column(db.String(16), nullable=False, default=RECORD_ACTIVE, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    invoice = db.relationship("Invoice", backref=db.backref("lines", lazy=True, order_by="InvoiceProduct.id"))
    product = db.relationship("Product")

    @property
    def total_cents(self) -> int:
        return gross_cents(self.quantity, self.price_cents, self.tax)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "product_id": self.product_id,
            "product": self.product.name if self.product else None,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
            "tax": self.tax,
            "total_cents": self.total_cents,
            "remaining_quantity": self.remaining_quantity,
            "profit_loss_cents": self.profit_loss_cents,
        }

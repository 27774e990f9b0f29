"""
Pytest fixtures for the invoicing backend tests.

Provides test database setup, two-company tenant fixtures, catalog
fixtures and a test client.
"""

from datetime import date, datetime

import pytest
from app import create_app
from app.config import TestingConfig
from app.extensions import db
from app.models import Category, ClientVendor, Company, Product
from app.models.invoices import CLIENT, VENDOR
from app.services import invoice_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def company_a(db_session):
    """Company A (first tenant), signed up 2022-01-10."""
    company = Company(title="Green Tech", registered_at=datetime(2022, 1, 10, 9, 30))
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def company_b(db_session):
    """Company B (second tenant)."""
    company = Company(title="Blue Ocean", registered_at=datetime(2023, 3, 15, 8, 0))
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def category_a(db_session, company_a):
    category = Category(company_id=company_a.id, description="Computers")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def category_b(db_session, company_b):
    category = Category(company_id=company_b.id, description="Computers")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: product in a category with a given stock level and low limit."""
    def _make(category, name, quantity_in_stock=0, low_limit_alert=0, product_unit="PCS"):
        product = Product(
            category_id=category.id,
            name=name,
            product_unit=product_unit,
            quantity_in_stock=quantity_in_stock,
            low_limit_alert=low_limit_alert,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def product_a(make_product, category_a):
    return make_product(category_a, "HP Elite 800G1 Desktop", quantity_in_stock=10, low_limit_alert=3)


@pytest.fixture(scope='function')
def vendor_a(db_session, company_a):
    vendor = ClientVendor(company_id=company_a.id, name="Apple Tech", client_vendor_type=VENDOR)
    db_session.add(vendor)
    db_session.commit()
    return vendor


@pytest.fixture(scope='function')
def client_a(db_session, company_a):
    cv = ClientVendor(company_id=company_a.id, name="Best Buy", client_vendor_type=CLIENT)
    db_session.add(cv)
    db_session.commit()
    return cv


@pytest.fixture(scope='function')
def approved_invoice(company_a):
    """Factory: create, fill and approve an invoice in one call."""
    def _approve(invoice_type, counter_party, lines, on: date):
        invoice = invoice_service.create_invoice(
            company_id=company_a.id,
            invoice_type=invoice_type,
            client_vendor_id=counter_party.id,
            invoice_date=on,
        )
        for product, quantity, price_cents, tax in lines:
            invoice_service.add_invoice_line(
                invoice_id=invoice["id"],
                company_id=company_a.id,
                patch={"product_id": product.id, "quantity": quantity, "price_cents": price_cents, "tax": tax},
            )
        return invoice_service.approve_invoice(invoice_id=invoice["id"], company_id=company_a.id, today=on)
    return _approve


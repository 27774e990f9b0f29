# Overview: Pytest coverage for stock level mutations and low-stock alerts.

import pytest

from app.extensions import db
from app.models import Product
from app.models.inventory import RECORD_DELETED
from app.models.invoices import SALES
from app.services import invoice_service
from app.services.stock_service import (
    InvalidQuantityError,
    LowStockAlertError,
    ProductNotFoundError,
    check_low_limit_alert,
    decrease_stock,
    increase_stock,
    list_low_stock,
)


def _stock(product_id: int) -> int:
    return db.session.get(Product, product_id).quantity_in_stock


class TestDecreaseStock:
    @pytest.mark.parametrize("quantity", [0, 1, 4, 10])
    def test_within_stock(self, db_session, product_a, quantity):
        assert decrease_stock(product_a.id, quantity) == 10 - quantity
        assert _stock(product_a.id) == 10 - quantity

    @pytest.mark.parametrize("quantity", [11, 50])
    def test_beyond_stock_leaves_stock_unchanged(self, db_session, product_a, quantity):
        with pytest.raises(InvalidQuantityError):
            decrease_stock(product_a.id, quantity)
        assert _stock(product_a.id) == 10

    def test_negative_quantity_rejected(self, db_session, product_a):
        with pytest.raises(InvalidQuantityError):
            decrease_stock(product_a.id, -1)
        assert _stock(product_a.id) == 10

    def test_unknown_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            decrease_stock(99999, 1)

    def test_other_company_product_is_not_found(self, db_session, product_a, company_b):
        with pytest.raises(ProductNotFoundError):
            decrease_stock(product_a.id, 1, company_id=company_b.id)
        assert _stock(product_a.id) == 10

    def test_deleted_product_is_not_found(self, db_session, product_a):
        product_a.record_status = RECORD_DELETED
        db_session.commit()
        with pytest.raises(ProductNotFoundError):
            decrease_stock(product_a.id, 1)


class TestIncreaseStock:
    def test_no_upper_bound(self, db_session, product_a):
        assert increase_stock(product_a.id, 1_000_000) == 1_000_010

    def test_round_trip(self, db_session, product_a):
        increase_stock(product_a.id, 7, company_id=product_a.category.company_id)
        decrease_stock(product_a.id, 7, company_id=product_a.category.company_id)
        assert _stock(product_a.id) == 10

    def test_unknown_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            increase_stock(99999, 1)

    def test_version_bumps_on_every_change(self, db_session, product_a):
        before = product_a.version_id
        increase_stock(product_a.id, 1)
        decrease_stock(product_a.id, 1)
        assert db.session.get(Product, product_a.id).version_id == before + 2


class TestLowLimitAlert:
    def _sales_draft(self, company, client, lines):
        invoice = invoice_service.create_invoice(
            company_id=company.id, invoice_type=SALES, client_vendor_id=client.id
        )
        for product in lines:
            invoice_service.add_invoice_line(
                invoice_id=invoice["id"],
                company_id=company.id,
                patch={"product_id": product.id, "quantity": 1, "price_cents": 500, "tax": 0},
            )
        return invoice["id"]

    def test_names_every_product_at_or_below_limit(self, db_session, company_a, category_a, client_a, make_product):
        at_limit = make_product(category_a, "Monitor", quantity_in_stock=3, low_limit_alert=3)
        below = make_product(category_a, "Keyboard", quantity_in_stock=1, low_limit_alert=5)
        fine = make_product(category_a, "Mouse", quantity_in_stock=20, low_limit_alert=5)
        invoice_id = self._sales_draft(company_a, client_a, [at_limit, fine, below])

        with pytest.raises(LowStockAlertError) as exc_info:
            check_low_limit_alert(invoice_id)

        assert exc_info.value.product_names == ["Monitor", "Keyboard"]
        assert str(exc_info.value) == "Stock of Monitor, Keyboard decreased below low limit!"

    def test_silent_when_all_above_limit(self, db_session, company_a, client_a, product_a):
        invoice_id = self._sales_draft(company_a, client_a, [product_a])
        assert check_low_limit_alert(invoice_id) is None

    def test_alert_does_not_undo_stock_change(self, db_session, company_a, client_a, product_a):
        invoice_id = self._sales_draft(company_a, client_a, [product_a])
        decrease_stock(product_a.id, 8)

        with pytest.raises(LowStockAlertError):
            check_low_limit_alert(invoice_id)
        assert _stock(product_a.id) == 2

    def test_list_low_stock(self, db_session, company_a, category_a, make_product):
        make_product(category_a, "Cable", quantity_in_stock=0, low_limit_alert=0)
        make_product(category_a, "Dock", quantity_in_stock=9, low_limit_alert=2)

        names = [p["name"] for p in list_low_stock(company_a.id)]
        assert names == ["Cable"]

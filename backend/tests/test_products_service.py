# Overview: Pytest coverage for catalog rules: unique names, stock-safe updates, soft delete.

import pytest

from app.models import Category
from app.models.inventory import RECORD_DELETED
from app.models.invoices import PURCHASE
from app.services import invoice_service, products_service
from app.services.stock_service import ProductNotFoundError
from app.validation import ConflictError, InvalidFieldsError, ValidationError, ValidationResult


@pytest.fixture
def widget(make_product, category_a):
    return make_product(category_a, "Widget", quantity_in_stock=4, low_limit_alert=1)


@pytest.fixture
def category_a2(db_session, company_a):
    category = Category(company_id=company_a.id, description="Phones")
    db_session.add(category)
    db_session.commit()
    return category


class TestUniqueNameOnCreate:
    def test_duplicate_in_same_category_and_company(self, db_session, widget, category_a, company_a):
        result = products_service.validate_unique_name_on_create("Widget", category_a.id, company_a.id)

        assert not result.ok
        assert result.fields() == ["name"]
        assert result.errors[0].message == 'Product name "Widget" is already in use for this company.'

    def test_same_name_other_category(self, db_session, widget, category_a2, company_a):
        assert products_service.validate_unique_name_on_create("Widget", category_a2.id, company_a.id).ok

    def test_same_name_other_company(self, db_session, widget, category_b, company_b):
        assert products_service.validate_unique_name_on_create("Widget", category_b.id, company_b.id).ok

    def test_deleted_product_does_not_count(self, db_session, widget, category_a, company_a):
        widget.record_status = RECORD_DELETED
        db_session.commit()
        assert products_service.validate_unique_name_on_create("Widget", category_a.id, company_a.id).ok


class TestUniqueNameOnUpdate:
    def test_unchanged_save_is_not_a_duplicate(self, db_session, widget, category_a, company_a):
        result = products_service.validate_unique_name_on_update(
            product_id=widget.id, name="Widget", category_id=category_a.id, company_id=company_a.id
        )
        assert result.ok

    def test_rename_onto_existing_name(self, db_session, widget, make_product, category_a, company_a):
        gadget = make_product(category_a, "Gadget")
        result = products_service.validate_unique_name_on_update(
            product_id=gadget.id, name="Widget", category_id=category_a.id, company_id=company_a.id
        )
        assert result.fields() == ["name"]

    def test_move_into_category_with_same_name(self, db_session, widget, make_product, category_a2, company_a):
        other = make_product(category_a2, "Widget")
        result = products_service.validate_unique_name_on_update(
            product_id=other.id, name="Widget", category_id=widget.category_id, company_id=company_a.id
        )
        assert result.fields() == ["name"]

    def test_missing_existing_product(self, db_session, category_a, company_a):
        with pytest.raises(ProductNotFoundError):
            products_service.validate_unique_name_on_update(
                product_id=99999, name="Widget", category_id=category_a.id, company_id=company_a.id
            )


class TestProductWrites:
    def test_create_starts_with_empty_stock(self, db_session, category_a, company_a):
        created = products_service.create_product(
            patch={"name": "Tablet", "product_unit": "PCS", "category_id": category_a.id, "low_limit_alert": 2},
            company_id=company_a.id,
        )
        assert created["quantity_in_stock"] == 0
        assert created["category"] == "Computers"

    def test_create_duplicate_raises_field_errors(self, db_session, widget, category_a, company_a):
        with pytest.raises(InvalidFieldsError) as exc_info:
            products_service.create_product(
                patch={"name": "Widget", "product_unit": "PCS", "category_id": category_a.id, "low_limit_alert": 0},
                company_id=company_a.id,
            )
        assert exc_info.value.result.fields() == ["name"]

    def test_create_in_foreign_category(self, db_session, category_b, company_a):
        with pytest.raises(ValidationError):
            products_service.create_product(
                patch={"name": "Tablet", "product_unit": "PCS", "category_id": category_b.id, "low_limit_alert": 0},
                company_id=company_a.id,
            )

    def test_update_keeps_stock(self, db_session, widget, company_a):
        updated = products_service.update_product(
            product_id=widget.id,
            patch={"name": "Widget Pro", "quantity_in_stock": 999},
            company_id=company_a.id,
        )
        assert updated["name"] == "Widget Pro"
        assert updated["quantity_in_stock"] == 4

    def test_delete_requires_empty_stock(self, db_session, widget, company_a):
        with pytest.raises(ConflictError):
            products_service.delete_product(product_id=widget.id, company_id=company_a.id)

    def test_delete_requires_no_invoice_lines(self, db_session, make_product, category_a, company_a, vendor_a):
        unused = make_product(category_a, "Scanner")
        invoice = invoice_service.create_invoice(
            company_id=company_a.id, invoice_type=PURCHASE, client_vendor_id=vendor_a.id
        )
        invoice_service.add_invoice_line(
            invoice_id=invoice["id"],
            company_id=company_a.id,
            patch={"product_id": unused.id, "quantity": 1, "price_cents": 100},
        )
        with pytest.raises(ConflictError):
            products_service.delete_product(product_id=unused.id, company_id=company_a.id)

    def test_soft_delete_hides_product(self, db_session, make_product, category_a, company_a):
        empty = make_product(category_a, "Printer")
        products_service.delete_product(product_id=empty.id, company_id=company_a.id)

        assert empty.record_status == RECORD_DELETED
        listed = products_service.list_products(company_a.id)
        assert "Printer" not in [p["name"] for p in listed["items"]]
        with pytest.raises(ProductNotFoundError):
            products_service.get_product(empty.id, company_a.id)


class TestListings:
    def test_pagination(self, db_session, make_product, category_a, company_a):
        for i in range(5):
            make_product(category_a, f"Item {i}")

        page = products_service.list_products(company_a.id, page=2, per_page=2)
        assert [p["name"] for p in page["items"]] == ["Item 2", "Item 3"]
        assert page["pagination"]["total_pages"] == 3
        assert page["pagination"]["has_next"] is True

    def test_in_stock_and_by_category(self, db_session, widget, make_product, category_a, category_a2, company_a):
        make_product(category_a, "Empty")
        make_product(category_a2, "Phone", quantity_in_stock=2)

        assert [p["name"] for p in products_service.list_products_in_stock(company_a.id)] == ["Phone", "Widget"]
        assert [p["name"] for p in products_service.list_products_by_category(category_a.id, company_a.id)] == [
            "Empty",
            "Widget",
        ]

    def test_tenant_isolation(self, db_session, widget, company_b):
        assert products_service.list_products(company_b.id)["items"] == []


def test_validation_results_merge():
    first = ValidationResult().add("name", "taken")
    second = ValidationResult().add("category_id", "missing")

    merged = first.merge(second)
    assert merged.fields() == ["name", "category_id"]
    assert ValidationResult().merge(ValidationResult()).ok

# Overview: Flask API routes for purchase/sales invoices; parses input and returns JSON responses.

"""
Invoice routes.

MULTI-TENANT: All invoice operations are scoped to g.company_id.

Approval is retried here on concurrent stock updates; the services never
retry. A low-stock alert after approval is reported as a warning on the
successful response, the approval itself stands.
"""

from flask import Blueprint, current_app, g, request, jsonify

from ..decorators import require_company
from ..models import Invoice, InvoiceProduct
from ..services import invoice_service
from ..services.concurrency import run_with_retry
from ..services.invoice_service import InvoiceError, InvoiceNotFoundError
from ..services.stock_service import (
    InvalidQuantityError,
    LowStockAlertError,
    ProductNotFoundError,
    check_low_limit_alert,
)
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_invoice_line,
    validate_payload,
)

INVOICE_POLICY = ModelValidationPolicy(
    writable_fields={"invoice_type", "client_vendor_id", "date"},
    required_on_create={"invoice_type", "client_vendor_id"},
)

INVOICE_LINE_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "quantity", "price_cents", "tax"},
    required_on_create={"product_id", "quantity", "price_cents"},
)

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@require_company
def list_invoices_route():
    invoice_type = request.args.get("type", "").upper()
    try:
        items = invoice_service.list_invoices(g.company_id, invoice_type)
    except InvoiceError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"items": items}), 200


@invoices_bp.post("")
@require_company
def create_invoice_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Invoice, payload=payload, policy=INVOICE_POLICY, partial=False)
        invoice = invoice_service.create_invoice(
            company_id=g.company_id,
            invoice_type=patch["invoice_type"].upper(),
            client_vendor_id=patch["client_vendor_id"],
            invoice_date=patch.get("date"),
        )
    except (ValidationError, InvoiceError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(invoice), 201


@invoices_bp.get("/<int:invoice_id>")
@require_company
def get_invoice_route(invoice_id: int):
    try:
        invoice = invoice_service.get_invoice(invoice_id, g.company_id)
        lines = invoice_service.list_invoice_lines(invoice_id, g.company_id)
    except InvoiceNotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    return jsonify({"invoice": invoice.to_dict(), "lines": lines}), 200


@invoices_bp.post("/<int:invoice_id>/lines")
@require_company
def add_line_route(invoice_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=InvoiceProduct, payload=payload, policy=INVOICE_LINE_POLICY, partial=False)
        enforce_rules_invoice_line(patch)
        line = invoice_service.add_invoice_line(invoice_id=invoice_id, company_id=g.company_id, patch=patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except (InvoiceNotFoundError, ProductNotFoundError) as e:
        return jsonify({"error": str(e)}), 404
    except InvoiceError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(line), 201


@invoices_bp.delete("/<int:invoice_id>/lines/<int:line_id>")
@require_company
def remove_line_route(invoice_id: int, line_id: int):
    try:
        invoice_service.remove_invoice_line(invoice_id=invoice_id, line_id=line_id, company_id=g.company_id)
    except InvoiceNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvoiceError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"ok": True}), 200


@invoices_bp.post("/<int:invoice_id>/approve")
@require_company
def approve_invoice_route(invoice_id: int):
    company_id = g.company_id
    try:
        invoice = run_with_retry(
            lambda: invoice_service.approve_invoice(invoice_id=invoice_id, company_id=company_id)
        )
    except InvoiceNotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except (InvoiceError, InvalidQuantityError, ProductNotFoundError) as e:
        return jsonify({"error": str(e)}), 409

    body = {"invoice": invoice}
    try:
        check_low_limit_alert(invoice_id)
    except LowStockAlertError as e:
        current_app.logger.warning("Invoice %s approved with low stock: %s", invoice["invoice_no"], e)
        body["warning"] = str(e)
    return jsonify(body), 200


@invoices_bp.delete("/<int:invoice_id>")
@require_company
def delete_invoice_route(invoice_id: int):
    try:
        invoice_service.delete_invoice(invoice_id=invoice_id, company_id=g.company_id)
    except InvoiceNotFoundError:
        return jsonify({"error": "Invoice not found"}), 404
    except InvoiceError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"ok": True}), 200

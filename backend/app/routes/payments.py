# Overview: Flask API routes for subscription payments; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_company
from ..services import payment_service

payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.get("")
@require_company
def list_payments():
    """
    Subscription payments of the caller's company.

    Query params:
    - year: int (optional) - only payments for that year
    """
    year = request.args.get("year", type=int)
    return jsonify({"items": payment_service.list_payments(g.company_id, year)}), 200

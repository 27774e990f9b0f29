from flask import Blueprint, current_app, g, jsonify, request

from app.decorators import require_company
from app.pagination import EmptySeriesError, PageOutOfRangeError, page_options, paginate
from app.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _rows(rows) -> list[dict]:
    return [{"label": label, "amount_cents": amount} for label, amount in rows]


def _scale(rows):
    try:
        return reporting_service.profit_loss_chart_scale(rows)
    except EmptySeriesError:
        return None


@reports_bp.get("/profit-loss")
@require_company
def profit_loss_report():
    """
    Monthly profit/loss, most recent month first.

    Query params:
    - year: int (optional) - restrict to one calendar year; default is since signup
    - page: int (optional, default 1) - REPORT_PAGE_SIZE months per page
    """
    year = request.args.get("year", type=int)
    page = request.args.get("page", 1, type=int)
    page_size = current_app.config["REPORT_PAGE_SIZE"]

    try:
        if year is None:
            rows = reporting_service.monthly_profit_loss_since_signup(g.company_id)
        else:
            rows = reporting_service.monthly_profit_loss_for_year(g.company_id, year)
        page_rows = paginate(rows, page, page_size)
        years = reporting_service.profit_loss_year_options(g.company_id)
    except PageOutOfRangeError as exc:
        return jsonify({"error": str(exc)}), 400
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify(
        {
            "year": year,
            "page": page,
            "pages": page_options(len(rows), page_size),
            "years": years,
            "scale": _scale(rows),
            "rows": _rows(page_rows),
        }
    ), 200


@reports_bp.get("/product-profit-loss")
@require_company
def product_profit_loss_report():
    try:
        rows = reporting_service.product_profit_loss_breakdown(g.company_id)
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"scale": _scale(rows), "rows": _rows(rows)}), 200


@reports_bp.get("/stock")
@require_company
def stock_report():
    return jsonify({"rows": reporting_service.stock_report(g.company_id)}), 200

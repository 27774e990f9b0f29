# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services.tenant_service import get_company

COMPANY_HEADER = "X-Company-Id"


def require_company(f):
    """
    Establish the caller's company (tenant context).

    MULTI-TENANT: Sets g.company_id from the X-Company-Id header, which the
    upstream authentication layer stamps on every request. Routes pass
    g.company_id explicitly into services; services never read g.

    Returns 401 if:
    - Header missing or not an integer
    - Company unknown or deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get(COMPANY_HEADER, "").strip()
        if not raw.isdigit():
            return jsonify({"error": "Company context required"}), 401

        company = get_company(int(raw))
        if company is None or not company.is_active:
            return jsonify({"error": "Invalid company context"}), 401

        g.company_id = company.id
        return f(*args, **kwargs)

    return decorated_function

# Overview: Flask API routes for reports; parses input and returns JSON responses.

from flask import Blueprint, g

from ..decorators import require_auth, require_policy
from ..responses import ok
from ..services import reporting_service
from ..validation import body_value, json_body, parse_date_arg, parse_int

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/daily")
@require_auth
@require_policy("reports", "read")
def daily_report_route():
    """Query: date (YYYY-MM-DD, UTC; today when omitted)."""
    return ok(reporting_service.daily_report(g.scope, parse_date_arg("date")))


@reports_bp.post("/cash-closing")
@require_auth
@require_policy("reports", "read")
def cash_closing_route():
    """Request body: {"shift_id": 12} (or "shiftId")."""
    data = json_body()
    shift_id = parse_int(body_value(data, "shift_id", "shiftId"), "shift_id")
    return ok(reporting_service.cash_closing_report(g.scope, shift_id))

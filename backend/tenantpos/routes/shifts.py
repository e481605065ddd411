# Overview: Flask API routes for cashier shifts; parses input and returns JSON responses.

"""
Shift API routes

GET  /api/shifts                ?status&account_id&page&limit
GET  /api/shifts/active         open shifts in scope
GET  /api/shifts/<id>           shift with its reconciliation
POST /api/shifts/start          {accountId, openingCash}
PUT  /api/shifts/<id>/close     {closingCash, notes?}

accountId defaults to the caller; openingCash defaults to 0.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import scope_service, shift_service
from ..validation import body_value, json_body, page_args, parse_int

shifts_bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")


@shifts_bp.get("")
@shifts_bp.get("/")
@require_auth
@require_policy("shifts", "list")
def list_shifts_route():
    page_number, limit = page_args()
    query = shift_service.list_shifts(
        g.scope,
        status=request.args.get("status") or None,
        account_id=parse_int(request.args.get("account_id"), "account_id", required=False),
    )
    return page(scope_service.paginate(query, page_number, limit, serialize=shift_service.shift_to_dict))


@shifts_bp.get("/active")
@require_auth
@require_policy("shifts", "list")
def list_active_shifts_route():
    shifts = shift_service.list_active_shifts(g.scope).all()
    return ok([shift_service.shift_to_dict(shift) for shift in shifts])


@shifts_bp.get("/<int:shift_id>")
@require_auth
@require_policy("shifts", "read")
def get_shift_route(shift_id: int):
    return ok(shift_service.shift_to_dict(shift_service.get_shift(g.scope, shift_id)))


@shifts_bp.post("/start")
@require_auth
@require_policy("shifts", "start")
def start_shift_route():
    data = json_body()
    account_id = parse_int(
        body_value(data, "accountId", "account_id", default=g.principal.account_id),
        "accountId",
    )
    opening_cash = body_value(data, "openingCash", "opening_cash", default=0)

    shift = shift_service.open_shift(g.scope, g.principal, account_id, opening_cash)
    current_app.logger.info(
        "Shift %s opened for account %s in tenant %s", shift.id, shift.account_id, shift.tenant_id
    )
    return created(shift_service.shift_to_dict(shift), message="Shift started")


@shifts_bp.put("/<int:shift_id>/close")
@require_auth
@require_policy("shifts", "close")
def close_shift_route(shift_id: int):
    data = json_body()
    shift, reconciliation = shift_service.close_shift(
        g.scope,
        g.principal,
        shift_id,
        body_value(data, "closingCash", "closing_cash"),
        notes=data.get("notes"),
    )
    current_app.logger.info(
        "Shift %s closed: variance %s (%s)",
        shift.id, reconciliation.variance_cents, reconciliation.status,
    )
    payload = shift.to_dict()
    payload["reconciliation"] = reconciliation.to_dict()
    return ok(payload, message="Shift closed")

# Overview: Flask API routes for sales; parses input and returns JSON responses.

"""
Sale API routes

GET   /api/sales                 ?shift_id&status&payment_method&page&limit
GET   /api/sales/shift/<id>      sales of one shift plus its summary
POST  /api/sales                 {shiftId, catalogItemId, quantity, paymentMethod, unitPrice?}
PATCH /api/sales/<id>/void
GET   /api/sales/stats/today     completed totals for the current UTC day
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import reporting_service, sale_service, scope_service
from ..validation import body_value, json_body, page_args, parse_int

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@sales_bp.get("/")
@require_auth
@require_policy("sales", "list")
def list_sales_route():
    page_number, limit = page_args()
    query = sale_service.list_sales(
        g.scope,
        shift_id=parse_int(request.args.get("shift_id"), "shift_id", required=False),
        status=request.args.get("status") or None,
        payment_method=request.args.get("payment_method") or None,
    )
    return page(scope_service.paginate(query, page_number, limit))


@sales_bp.get("/shift/<int:shift_id>")
@require_auth
@require_policy("sales", "list")
def shift_sales_route(shift_id: int):
    summary = sale_service.shift_sales_summary(g.scope, shift_id)
    sales = sale_service.list_sales(g.scope, shift_id=shift_id).all()
    return ok([sale.to_dict() for sale in sales], summary=summary)


@sales_bp.post("")
@sales_bp.post("/")
@require_auth
@require_policy("sales", "create")
def create_sale_route():
    data = json_body()
    sale = sale_service.record_sale(
        g.scope,
        g.principal,
        shift_id=parse_int(body_value(data, "shiftId", "shift_id"), "shiftId"),
        catalog_item_id=parse_int(body_value(data, "catalogItemId", "catalog_item_id"), "catalogItemId"),
        quantity=body_value(data, "quantity", default=1),
        payment_method=body_value(data, "paymentMethod", "payment_method"),
        unit_price=body_value(data, "unitPrice", "unit_price"),
    )
    return created(sale.to_dict(), message="Sale recorded")


@sales_bp.patch("/<int:sale_id>/void")
@require_auth
@require_policy("sales", "void")
def void_sale_route(sale_id: int):
    sale = sale_service.void_sale(g.scope, sale_id)
    current_app.logger.info("Sale %s voided by account %s", sale.id, g.principal.account_id)
    return ok(sale.to_dict(), message="Sale voided")


@sales_bp.get("/stats/today")
@require_auth
@require_policy("sales", "list")
def today_stats_route():
    return ok(reporting_service.daily_summary(g.scope))

# Overview: Flask API routes for staff accounts; parses input and returns JSON responses.

"""
Staff Account API routes

GET    /api/accounts                     ?search&active&role&show_deleted&page&limit
GET    /api/accounts/<id>
POST   /api/accounts                     operators must send tenant_id
PUT    /api/accounts/<id>
PATCH  /api/accounts/<id>/toggle-active
DELETE /api/accounts/<id>                soft delete
PATCH  /api/accounts/<id>/restore

Operator accounts never appear here, whoever is asking.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import account_service, scope_service
from ..validation import body_value, json_body, page_args, parse_bool_arg, parse_int

accounts_bp = Blueprint("accounts", __name__, url_prefix="/api/accounts")


@accounts_bp.get("")
@accounts_bp.get("/")
@require_auth
@require_policy("accounts", "list")
def list_accounts_route():
    page_number, limit = page_args()
    query = account_service.list_accounts(
        g.scope,
        search=request.args.get("search"),
        active=parse_bool_arg("active"),
        role=request.args.get("role") or None,
        visibility=scope_service.parse_visibility(request.args.get("show_deleted")),
    )
    return page(scope_service.paginate(query, page_number, limit))


@accounts_bp.get("/<int:account_id>")
@require_auth
@require_policy("accounts", "read")
def get_account_route(account_id: int):
    return ok(account_service.get_account(g.scope, account_id).to_dict())


@accounts_bp.post("")
@accounts_bp.post("/")
@require_auth
@require_policy("accounts", "create")
def create_account_route():
    """
    Request body:
    {
        "email": "cashier@shop.test",
        "name": "Front Cashier",
        "role": "cashier",
        "password": "secret123",
        "tenant_id": 3          (operators only)
    }
    """
    data = json_body()
    account = account_service.create_account(
        g.scope,
        email=data.get("email"),
        name=data.get("name"),
        role=data.get("role"),
        password=data.get("password"),
        tenant_id=parse_int(body_value(data, "tenant_id", "tenantId"), "tenant_id", required=False),
    )
    current_app.logger.info("Account %s created in tenant %s", account.id, account.tenant_id)
    return created(account.to_dict(), message="Account created")


@accounts_bp.put("/<int:account_id>")
@require_auth
@require_policy("accounts", "update")
def update_account_route(account_id: int):
    data = json_body()
    account = account_service.update_account(
        g.scope,
        account_id,
        name=data.get("name"),
        email=data.get("email"),
        role=data.get("role"),
        password=data.get("password"),
    )
    return ok(account.to_dict(), message="Account updated")


@accounts_bp.patch("/<int:account_id>/toggle-active")
@require_auth
@require_policy("accounts", "toggle_active")
def toggle_account_route(account_id: int):
    account = account_service.toggle_account_active(g.scope, account_id)
    state = "activated" if account.is_active else "deactivated"
    current_app.logger.info("Account %s %s", account.id, state)
    return ok(account.to_dict(), message=f"Account {state}")


@accounts_bp.delete("/<int:account_id>")
@require_auth
@require_policy("accounts", "delete")
def delete_account_route(account_id: int):
    account = account_service.delete_account(g.scope, account_id)
    current_app.logger.info("Account %s deleted", account.id)
    return ok(account.to_dict(), message="Account deleted")


@accounts_bp.patch("/<int:account_id>/restore")
@require_auth
@require_policy("accounts", "restore")
def restore_account_route(account_id: int):
    account = account_service.restore_account(g.scope, account_id)
    current_app.logger.info("Account %s restored", account.id)
    return ok(account.to_dict(), message="Account restored")

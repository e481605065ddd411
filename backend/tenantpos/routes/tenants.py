# Overview: Flask API routes for tenant administration (operators only).

"""
Tenant administration API routes

GET   /api/tenants                     ?search&active&page&limit
GET   /api/tenants/<id>
POST  /api/tenants                     creates the tenant and its first owner
PUT   /api/tenants/<id>
PATCH /api/tenants/<id>/toggle-active
"""

from flask import Blueprint, current_app, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import scope_service, tenant_service
from ..validation import body_value, json_body, page_args, parse_bool_arg

tenants_bp = Blueprint("tenants", __name__, url_prefix="/api/tenants")


@tenants_bp.get("")
@tenants_bp.get("/")
@require_auth
@require_policy("tenants", "list")
def list_tenants_route():
    page_number, limit = page_args()
    query = tenant_service.list_tenants(
        search=request.args.get("search"),
        active=parse_bool_arg("active"),
    )
    return page(scope_service.paginate(query, page_number, limit))


@tenants_bp.get("/<int:tenant_id>")
@require_auth
@require_policy("tenants", "read")
def get_tenant_route(tenant_id: int):
    return ok(tenant_service.get_tenant(tenant_id).to_dict())


@tenants_bp.post("")
@tenants_bp.post("/")
@require_auth
@require_policy("tenants", "create")
def create_tenant_route():
    """
    Request body:
    {
        "name": "Corner Shop",
        "slug": "corner-shop",          (optional, derived from name)
        "tier": "basic",                (basic | pro | enterprise)
        "email": "...", "phone": "...", "address": "...",
        "owner": {"name": "...", "email": "...", "password": "..."}
    }
    """
    data = json_body()
    owner = body_value(data, "owner", default={}) or {}
    if not isinstance(owner, dict):
        owner = {}

    tenant, owner_account = tenant_service.create_tenant(
        data.get("name"),
        owner_name=owner.get("name") or body_value(data, "ownerName", "owner_name"),
        owner_email=owner.get("email") or body_value(data, "ownerEmail", "owner_email"),
        owner_password=owner.get("password") or body_value(data, "ownerPassword", "owner_password"),
        slug=data.get("slug"),
        tier=data.get("tier") or "basic",
        email=data.get("email"),
        phone=data.get("phone"),
        address=data.get("address"),
    )
    current_app.logger.info("Tenant %s (%s) created", tenant.id, tenant.slug)
    return created(
        {"tenant": tenant.to_dict(), "owner": owner_account.to_dict()},
        message="Tenant created",
    )


@tenants_bp.put("/<int:tenant_id>")
@require_auth
@require_policy("tenants", "update")
def update_tenant_route(tenant_id: int):
    data = json_body()
    fields = {key: data[key] for key in ("name", "slug", "tier", "email", "phone", "address") if key in data}
    tenant = tenant_service.update_tenant(tenant_id, **fields)
    return ok(tenant.to_dict(), message="Tenant updated")


@tenants_bp.patch("/<int:tenant_id>/toggle-active")
@require_auth
@require_policy("tenants", "toggle_active")
def toggle_tenant_route(tenant_id: int):
    tenant = tenant_service.toggle_tenant_active(tenant_id)
    state = "activated" if tenant.is_active else "deactivated"
    current_app.logger.info("Tenant %s %s", tenant.id, state)
    return ok(tenant.to_dict(), message=f"Tenant {state}")

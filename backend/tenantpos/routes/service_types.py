# Overview: Flask API routes for service types; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import catalog_service, scope_service
from ..validation import json_body, page_args, parse_bool_arg

service_types_bp = Blueprint("service_types", __name__, url_prefix="/api/service-types")


@service_types_bp.get("")
@service_types_bp.get("/")
@require_auth
@require_policy("service_types", "list")
def list_service_types_route():
    """Query: search, active, show_deleted (false|only|true), page, limit."""
    page_number, limit = page_args()
    query = catalog_service.list_service_types(
        g.scope,
        search=request.args.get("search"),
        active=parse_bool_arg("active"),
        visibility=scope_service.parse_visibility(request.args.get("show_deleted")),
    )
    return page(scope_service.paginate(query, page_number, limit))


@service_types_bp.get("/<int:service_type_id>")
@require_auth
@require_policy("service_types", "read")
def get_service_type_route(service_type_id: int):
    return ok(catalog_service.get_service_type(g.scope, service_type_id).to_dict())


@service_types_bp.post("")
@service_types_bp.post("/")
@require_auth
@require_policy("service_types", "create")
def create_service_type_route():
    """
    Request body:
    {
        "name": "Delivery",
        "description": "Orders sent out",  (optional)
        "icon": "truck"                     (optional)
    }
    """
    data = json_body()
    service_type = catalog_service.create_service_type(
        g.scope,
        data.get("name"),
        data.get("description"),
        data.get("icon"),
    )
    current_app.logger.info("Service type %s created", service_type.id)
    return created(service_type.to_dict(), message="Service type created")


@service_types_bp.put("/<int:service_type_id>")
@require_auth
@require_policy("service_types", "update")
def update_service_type_route(service_type_id: int):
    service_type = catalog_service.update_service_type(g.scope, service_type_id, json_body())
    return ok(service_type.to_dict(), message="Service type updated")


@service_types_bp.patch("/<int:service_type_id>/toggle-active")
@require_auth
@require_policy("service_types", "toggle_active")
def toggle_service_type_route(service_type_id: int):
    service_type = catalog_service.toggle_service_type_active(g.scope, service_type_id)
    state = "activated" if service_type.is_active else "deactivated"
    current_app.logger.info("Service type %s %s", service_type.id, state)
    return ok(service_type.to_dict(), message=f"Service type {state}")


@service_types_bp.delete("/<int:service_type_id>")
@require_auth
@require_policy("service_types", "delete")
def delete_service_type_route(service_type_id: int):
    service_type = catalog_service.delete_service_type(g.scope, service_type_id)
    current_app.logger.info("Service type %s deleted", service_type.id)
    return ok(service_type.to_dict(), message="Service type deleted")


@service_types_bp.patch("/<int:service_type_id>/restore")
@require_auth
@require_policy("service_types", "restore")
def restore_service_type_route(service_type_id: int):
    service_type = catalog_service.restore_service_type(g.scope, service_type_id)
    current_app.logger.info("Service type %s restored", service_type.id)
    return ok(service_type.to_dict(), message="Service type restored")

# Overview: Flask API routes for catalog items; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import catalog_service, scope_service
from ..validation import body_value, json_body, page_args, parse_bool_arg, parse_int

catalog_items_bp = Blueprint("catalog_items", __name__, url_prefix="/api/catalog-items")


@catalog_items_bp.get("")
@catalog_items_bp.get("/")
@require_auth
@require_policy("catalog_items", "list")
def list_catalog_items_route():
    """Query: search, active, category_id, service_type_id, show_deleted (false|only|true), page, limit."""
    page_number, limit = page_args()
    query = catalog_service.list_catalog_items(
        g.scope,
        search=request.args.get("search"),
        active=parse_bool_arg("active"),
        category_id=parse_int(request.args.get("category_id"), "category_id", required=False),
        service_type_id=parse_int(request.args.get("service_type_id"), "service_type_id", required=False),
        visibility=scope_service.parse_visibility(request.args.get("show_deleted")),
    )
    return page(scope_service.paginate(query, page_number, limit))


@catalog_items_bp.get("/<int:item_id>")
@require_auth
@require_policy("catalog_items", "read")
def get_catalog_item_route(item_id: int):
    return ok(catalog_service.get_catalog_item(g.scope, item_id).to_dict())


@catalog_items_bp.post("")
@catalog_items_bp.post("/")
@require_auth
@require_policy("catalog_items", "create")
def create_catalog_item_route():
    """
    Request body:
    {
        "name": "Espresso",
        "price": "2.50",
        "category_id": 1,
        "description": "Single shot",  (optional)
        "service_type_id": 2           (optional)
    }
    """
    data = json_body()
    item = catalog_service.create_catalog_item(
        g.scope,
        name=data.get("name"),
        price=data.get("price"),
        category_id=body_value(data, "category_id", "categoryId"),
        description=data.get("description"),
        service_type_id=body_value(data, "service_type_id", "serviceTypeId"),
    )
    return created(item.to_dict(), message="Catalog item created")


@catalog_items_bp.put("/<int:item_id>")
@require_auth
@require_policy("catalog_items", "update")
def update_catalog_item_route(item_id: int):
    data = json_body()
    for camel, snake in (("categoryId", "category_id"), ("serviceTypeId", "service_type_id")):
        if camel in data and snake not in data:
            data[snake] = data[camel]
    item = catalog_service.update_catalog_item(g.scope, item_id, data)
    return ok(item.to_dict(), message="Catalog item updated")


@catalog_items_bp.patch("/<int:item_id>/toggle-active")
@require_auth
@require_policy("catalog_items", "toggle_active")
def toggle_catalog_item_route(item_id: int):
    item = catalog_service.toggle_catalog_item_active(g.scope, item_id)
    state = "activated" if item.is_active else "deactivated"
    current_app.logger.info("Catalog item %s %s", item.id, state)
    return ok(item.to_dict(), message=f"Catalog item {state}")


@catalog_items_bp.delete("/<int:item_id>")
@require_auth
@require_policy("catalog_items", "delete")
def delete_catalog_item_route(item_id: int):
    item = catalog_service.delete_catalog_item(g.scope, item_id)
    current_app.logger.info("Catalog item %s deleted", item.id)
    return ok(item.to_dict(), message="Catalog item deleted")


@catalog_items_bp.patch("/<int:item_id>/restore")
@require_auth
@require_policy("catalog_items", "restore")
def restore_catalog_item_route(item_id: int):
    item = catalog_service.restore_catalog_item(g.scope, item_id)
    current_app.logger.info("Catalog item %s restored", item.id)
    return ok(item.to_dict(), message="Catalog item restored")

# Overview: Flask API routes for catalog categories; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_policy
from ..responses import created, ok, page
from ..services import catalog_service, scope_service
from ..validation import json_body, page_args, parse_bool_arg

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@categories_bp.get("/")
@require_auth
@require_policy("categories", "list")
def list_categories_route():
    """Query: search, active, show_deleted (false|only|true), page, limit."""
    page_number, limit = page_args()
    query = catalog_service.list_categories(
        g.scope,
        search=request.args.get("search"),
        active=parse_bool_arg("active"),
        visibility=scope_service.parse_visibility(request.args.get("show_deleted")),
    )
    return page(scope_service.paginate(query, page_number, limit))


@categories_bp.get("/<int:category_id>")
@require_auth
@require_policy("categories", "read")
def get_category_route(category_id: int):
    return ok(catalog_service.get_category(g.scope, category_id).to_dict())


@categories_bp.post("")
@categories_bp.post("/")
@require_auth
@require_policy("categories", "create")
def create_category_route():
    data = json_body()
    category = catalog_service.create_category(g.scope, data.get("name"), data.get("description"))
    return created(category.to_dict(), message="Category created")


@categories_bp.put("/<int:category_id>")
@require_auth
@require_policy("categories", "update")
def update_category_route(category_id: int):
    category = catalog_service.update_category(g.scope, category_id, json_body())
    return ok(category.to_dict(), message="Category updated")


@categories_bp.patch("/<int:category_id>/toggle-active")
@require_auth
@require_policy("categories", "toggle_active")
def toggle_category_route(category_id: int):
    category = catalog_service.toggle_category_active(g.scope, category_id)
    state = "activated" if category.is_active else "deactivated"
    current_app.logger.info("Category %s %s", category.id, state)
    return ok(category.to_dict(), message=f"Category {state}")


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_policy("categories", "delete")
def delete_category_route(category_id: int):
    category = catalog_service.delete_category(g.scope, category_id)
    current_app.logger.info("Category %s deleted", category.id)
    return ok(category.to_dict(), message="Category deleted")


@categories_bp.patch("/<int:category_id>/restore")
@require_auth
@require_policy("categories", "restore")
def restore_category_route(category_id: int):
    category = catalog_service.restore_category(g.scope, category_id)
    current_app.logger.info("Category %s restored", category.id)
    return ok(category.to_dict(), message="Category restored")

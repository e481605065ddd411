# backend/tenantpos/services/catalog_service.py
"""
Catalog Service: categories and catalog items

MULTI-TENANT: Both are tenant-owned and soft-deletable. Names are unique
within a tenant among non-deleted rows.
- Create checks the name against live and deleted rows (ConflictWithDeleted
  lets the client offer a restore instead)
- Rename checks live rows only
- An item's category (and optional service type) must be live, active and
  in the same tenant
- Deleted rows must be restored before they can be edited
- Creating catalog data needs a single tenant: operators cannot create here
"""
from __future__ import annotations

from ..errors import ValidationError
from ..extensions import db
from ..models import CatalogItem, Category, ServiceType
from ..money import to_cents
from ..validation import optional_text, parse_int, required_text
from . import lifecycle_service, scope_service
from .concurrency import commit
from .scope_service import CollectionQuery, Visibility
from .tenant_service import TenantScope


DESCRIPTION_LIMIT = 2000


def _rename(entity, model, value, limit: int) -> str:
    """Validated new name; a change is checked against live rows only."""
    name = required_text(value, "name", limit)
    if name != entity.name:
        scope_service.check_unique(
            TenantScope.scoped(entity.tenant_id),
            model,
            "name",
            name,
            exclude_id=entity.id,
            include_deleted=False,
        )
    return name

# =============================================================================
# CATEGORIES
# =============================================================================

def list_categories(
    scope: TenantScope,
    *,
    search: str | None = None,
    active: bool | None = None,
    visibility: Visibility = Visibility.ACTIVE,
):
    collection = (
        CollectionQuery(Category)
        .search(search, Category.name, Category.description)
        .active(active)
        .with_visibility(visibility)
        .order_by(Category.name.asc(), Category.id.asc())
    )
    return scope_service.apply(scope, collection)


def get_category(scope: TenantScope, category_id: int) -> Category:
    return scope_service.get_in_scope(scope, Category, category_id, label="Category")


def create_category(scope: TenantScope, name: str, description: str | None = None) -> Category:
    tenant_id = scope.require_tenant_id()
    name = required_text(name, "name", 120)
    description = optional_text(description, "description", DESCRIPTION_LIMIT)
    scope_service.check_unique(scope, Category, "name", name)

    category = Category(tenant_id=tenant_id, name=name, description=description, is_active=True)
    db.session.add(category)
    commit(scope_service.unique_conflict(Category, "name", name))
    return category


def update_category(scope: TenantScope, category_id: int, patch: dict) -> Category:
    category = lifecycle_service.ensure_live(get_category(scope, category_id))

    for key, value in patch.items():
        if key == "name":
            category.name = _rename(category, Category, value, 120)
        elif key == "description":
            category.description = optional_text(value, "description", DESCRIPTION_LIMIT)

    commit(scope_service.unique_conflict(Category, "name", category.name))
    return category


def delete_category(scope: TenantScope, category_id: int) -> Category:
    return lifecycle_service.delete_entity(scope, Category, category_id)


def restore_category(scope: TenantScope, category_id: int) -> Category:
    return lifecycle_service.restore_entity(scope, Category, category_id)


def toggle_category_active(scope: TenantScope, category_id: int) -> Category:
    return lifecycle_service.toggle_active(scope, Category, category_id)


# =============================================================================
# SERVICE TYPES
# =============================================================================

def list_service_types(
    scope: TenantScope,
    *,
    search: str | None = None,
    active: bool | None = None,
    visibility: Visibility = Visibility.ACTIVE,
):
    collection = (
        CollectionQuery(ServiceType)
        .search(search, ServiceType.name, ServiceType.description)
        .active(active)
        .with_visibility(visibility)
        .order_by(ServiceType.name.asc(), ServiceType.id.asc())
    )
    return scope_service.apply(scope, collection)


def get_service_type(scope: TenantScope, service_type_id: int) -> ServiceType:
    return scope_service.get_in_scope(scope, ServiceType, service_type_id, label="Service type")


def create_service_type(
    scope: TenantScope,
    name: str,
    description: str | None = None,
    icon: str | None = None,
) -> ServiceType:
    tenant_id = scope.require_tenant_id()
    name = required_text(name, "name", 120)
    description = optional_text(description, "description", DESCRIPTION_LIMIT)
    icon = optional_text(icon, "icon", 64)
    scope_service.check_unique(scope, ServiceType, "name", name)

    service_type = ServiceType(
        tenant_id=tenant_id,
        name=name,
        description=description,
        icon=icon,
        is_active=True,
    )
    db.session.add(service_type)
    commit(scope_service.unique_conflict(ServiceType, "name", name))
    return service_type


def update_service_type(scope: TenantScope, service_type_id: int, patch: dict) -> ServiceType:
    service_type = lifecycle_service.ensure_live(get_service_type(scope, service_type_id))

    for key, value in patch.items():
        if key == "name":
            service_type.name = _rename(service_type, ServiceType, value, 120)
        elif key == "description":
            service_type.description = optional_text(value, "description", DESCRIPTION_LIMIT)
        elif key == "icon":
            service_type.icon = optional_text(value, "icon", 64)

    commit(scope_service.unique_conflict(ServiceType, "name", service_type.name))
    return service_type


def delete_service_type(scope: TenantScope, service_type_id: int) -> ServiceType:
    return lifecycle_service.delete_entity(scope, ServiceType, service_type_id)


def restore_service_type(scope: TenantScope, service_type_id: int) -> ServiceType:
    return lifecycle_service.restore_entity(scope, ServiceType, service_type_id)


def toggle_service_type_active(scope: TenantScope, service_type_id: int) -> ServiceType:
    return lifecycle_service.toggle_active(scope, ServiceType, service_type_id)


# =============================================================================
# CATALOG ITEMS
# =============================================================================

def _usable(model, tenant_id: int, value, field: str, label: str):
    """Row an item may point at: same tenant, live and active."""
    entity_id = parse_int(value, field)
    entity = db.session.query(model).filter(
        model.id == entity_id,
        model.tenant_id == tenant_id,
        model.deleted_at.is_(None),
        model.is_active.is_(True),
    ).first()
    if entity is None:
        raise ValidationError(f"{label} not found or inactive", field=field)
    return entity


def _usable_category(tenant_id: int, category_id) -> Category:
    return _usable(Category, tenant_id, category_id, "category_id", "Category")


def _usable_service_type_id(tenant_id: int, service_type_id) -> int | None:
    """service_type_id is optional; None clears it."""
    if service_type_id is None:
        return None
    return _usable(ServiceType, tenant_id, service_type_id, "service_type_id", "Service type").id


def list_catalog_items(
    scope: TenantScope,
    *,
    search: str | None = None,
    active: bool | None = None,
    category_id: int | None = None,
    service_type_id: int | None = None,
    visibility: Visibility = Visibility.ACTIVE,
):
    collection = (
        CollectionQuery(CatalogItem)
        .search(search, CatalogItem.name, CatalogItem.description)
        .active(active)
        .filter_by(category_id=category_id, service_type_id=service_type_id)
        .with_visibility(visibility)
        .order_by(CatalogItem.name.asc(), CatalogItem.id.asc())
    )
    return scope_service.apply(scope, collection)


def get_catalog_item(scope: TenantScope, item_id: int) -> CatalogItem:
    return scope_service.get_in_scope(scope, CatalogItem, item_id, label="Catalog item")


def create_catalog_item(
    scope: TenantScope,
    *,
    name: str,
    price,
    category_id,
    description: str | None = None,
    service_type_id=None,
) -> CatalogItem:
    tenant_id = scope.require_tenant_id()
    name = required_text(name, "name", 255)
    description = optional_text(description, "description", DESCRIPTION_LIMIT)
    price_cents = to_cents(price, "price")
    category = _usable_category(tenant_id, category_id)
    service_type_id = _usable_service_type_id(tenant_id, service_type_id)
    scope_service.check_unique(scope, CatalogItem, "name", name)

    item = CatalogItem(
        tenant_id=tenant_id,
        category_id=category.id,
        service_type_id=service_type_id,
        name=name,
        description=description,
        price_cents=price_cents,
        is_active=True,
    )
    db.session.add(item)
    commit(scope_service.unique_conflict(CatalogItem, "name", name))
    return item


def update_catalog_item(scope: TenantScope, item_id: int, patch: dict) -> CatalogItem:
    item = lifecycle_service.ensure_live(get_catalog_item(scope, item_id))

    for key, value in patch.items():
        if key == "name":
            item.name = _rename(item, CatalogItem, value, 255)
        elif key == "description":
            item.description = optional_text(value, "description", DESCRIPTION_LIMIT)
        elif key == "price":
            item.price_cents = to_cents(value, "price")
        elif key == "category_id":
            item.category_id = _usable_category(item.tenant_id, value).id
        elif key == "service_type_id":
            item.service_type_id = _usable_service_type_id(item.tenant_id, value)

    commit(scope_service.unique_conflict(CatalogItem, "name", item.name))
    return item


def delete_catalog_item(scope: TenantScope, item_id: int) -> CatalogItem:
    return lifecycle_service.delete_entity(scope, CatalogItem, item_id)


def restore_catalog_item(scope: TenantScope, item_id: int) -> CatalogItem:
    return lifecycle_service.restore_entity(scope, CatalogItem, item_id)


def toggle_catalog_item_active(scope: TenantScope, item_id: int) -> CatalogItem:
    return lifecycle_service.toggle_active(scope, CatalogItem, item_id)

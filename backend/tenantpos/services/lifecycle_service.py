# Overview: Soft-delete lifecycle for tenant-owned entities; encapsulates business logic and database work.

"""
Soft-Delete Lifecycle Service

STATE MACHINE (per soft-deletable entity):
    ACTIVE <-> DELETED

    delete:        ACTIVE -> DELETED   (AlreadyDeleted otherwise)
    restore:       DELETED -> ACTIVE   (NotDeleted otherwise), always reactivates
    update, toggle_active: ACTIVE only (EntityDeleted otherwise)

RULES:
1. deleted_at and is_active change together (SoftDeleteMixin transitions)
2. A dependency blocks delete with DependencyExists(count) and nothing changes
3. Restore re-checks the uniqueness key against live rows
4. Every transition looks the entity up through the scope filter first, so a
   foreign-tenant id is NotFound

DEPENDENCIES:
- Category     <- active, non-deleted catalog items (also blocks deactivation)
- ServiceType  <- non-deleted catalog items tagged with it
- CatalogItem  <- completed sales on shifts that are still open
- Account      <- its open shifts
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..errors import AlreadyDeletedError, DependencyExistsError, EntityDeletedError, NotDeletedError
from ..extensions import db
from ..models import Account, CatalogItem, Category, Sale, ServiceType, Shift, SALE_COMPLETED, SHIFT_OPEN
from ..time_utils import utcnow
from . import scope_service
from .concurrency import commit
from .tenant_service import TenantScope


@dataclass(frozen=True)
class Dependency:
    count: Callable[[object], int]
    description: str
    blocks_deactivation: bool = False


_DEPENDENCIES: dict[type, Dependency] = {}


def dependency(model, description: str, *, blocks_deactivation: bool = False):
    """Register the dependent-row counter for model."""
    def decorator(func):
        _DEPENDENCIES[model] = Dependency(func, description, blocks_deactivation)
        return func
    return decorator


@dependency(Category, "active catalog item(s) still use this category", blocks_deactivation=True)
def _category_items(category: Category) -> int:
    return db.session.query(CatalogItem).filter(
        CatalogItem.tenant_id == category.tenant_id,
        CatalogItem.category_id == category.id,
        CatalogItem.deleted_at.is_(None),
        CatalogItem.is_active.is_(True),
    ).count()


@dependency(ServiceType, "catalog item(s) are tagged with this service type")
def _service_type_items(service_type: ServiceType) -> int:
    return db.session.query(CatalogItem).filter(
        CatalogItem.tenant_id == service_type.tenant_id,
        CatalogItem.service_type_id == service_type.id,
        CatalogItem.deleted_at.is_(None),
    ).count()


@dependency(CatalogItem, "completed sale(s) on open shifts reference this item")
def _item_open_shift_sales(item: CatalogItem) -> int:
    return db.session.query(Sale).join(Shift, Sale.shift_id == Shift.id).filter(
        Sale.tenant_id == item.tenant_id,
        Sale.catalog_item_id == item.id,
        Sale.status == SALE_COMPLETED,
        Shift.status == SHIFT_OPEN,
    ).count()


@dependency(Account, "open shift(s) belong to this account")
def _account_open_shifts(account: Account) -> int:
    return db.session.query(Shift).filter(
        Shift.account_id == account.id,
        Shift.status == SHIFT_OPEN,
    ).count()


def dependency_count(entity) -> int:
    dep = _DEPENDENCIES.get(type(entity))
    return dep.count(entity) if dep else 0


def _ensure_no_dependents(entity, *, deactivating: bool = False) -> None:
    dep = _DEPENDENCIES.get(type(entity))
    if dep is None or (deactivating and not dep.blocks_deactivation):
        return
    count = dep.count(entity)
    if count:
        verb = "deactivate" if deactivating else "delete"
        raise DependencyExistsError(count, f"Cannot {verb}: {count} {dep.description}")


def ensure_live(entity):
    """Edits and toggles only apply to live rows."""
    if entity.is_deleted:
        raise EntityDeletedError(f"{type(entity).__name__} is deleted. Restore it first.")
    return entity


def delete_entity(scope: TenantScope, model, entity_id: int):
    """Soft delete: sets deleted_at and clears is_active in one update."""
    entity = scope_service.get_in_scope(scope, model, entity_id, lock=True)
    if entity.is_deleted:
        raise AlreadyDeletedError(f"{model.__name__} is already deleted")

    _ensure_no_dependents(entity)

    entity.mark_deleted(utcnow())
    commit()
    return entity


def restore_entity(scope: TenantScope, model, entity_id: int):
    """
    Restore a soft-deleted entity. Restore always reactivates.

    Raises ConflictError if a live row took the entity's unique key while
    it was deleted.
    """
    entity = scope_service.get_in_scope(scope, model, entity_id, lock=True)
    if not entity.is_deleted:
        raise NotDeletedError(f"{model.__name__} is not deleted")

    key = model.__unique_key__
    if key is not None:
        scope_service.check_unique(
            TenantScope.scoped(entity.tenant_id),
            model,
            key,
            getattr(entity, key),
            exclude_id=entity.id,
            include_deleted=False,
        )

    entity.mark_restored()
    if key is not None:
        commit(scope_service.unique_conflict(model, key, getattr(entity, key)))
    else:
        commit()
    return entity


def toggle_active(scope: TenantScope, model, entity_id: int):
    """Flip is_active on a live entity."""
    entity = ensure_live(scope_service.get_in_scope(scope, model, entity_id, lock=True))

    if entity.is_active:
        _ensure_no_dependents(entity, deactivating=True)

    entity.is_active = not entity.is_active
    commit()
    return entity

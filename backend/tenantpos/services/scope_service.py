# Overview: Tenant scoping, soft-delete visibility, scoped uniqueness and pagination for collections.

"""
Scope Filter

Every read of tenant-owned data goes through apply() or get_in_scope().
Callers assemble their optional filters on a CollectionQuery; apply() then
adds the tenant restriction and the visibility rule last, so neither can be
skipped by leaving a filter out.

VISIBILITY (show_deleted query parameter):
- "false" / absent -> ACTIVE: rows with no deleted_at (default)
- "only"           -> DELETED: soft-deleted rows only
- "true"           -> ALL: both

An entity outside the caller's scope is reported as NotFound, never as
forbidden, so cross-tenant ids reveal nothing.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable

from sqlalchemy import or_

from ..errors import ConflictError, ConflictWithDeletedError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Account
from ..permissions import Role
from .concurrency import lock_for_update
from .tenant_service import TenantScope


class Visibility(Enum):
    ACTIVE = "false"
    DELETED = "only"
    ALL = "true"


def parse_visibility(raw: str | None) -> Visibility:
    if raw is None or raw == "":
        return Visibility.ACTIVE
    try:
        return Visibility(raw.strip().lower())
    except ValueError:
        raise ValidationError("show_deleted must be one of: false, only, true", field="show_deleted")


class CollectionQuery:
    """
    Accumulates optional predicates for one model.

    Nothing here touches tenant scoping: that is added by apply().
    """

    def __init__(self, model):
        self.model = model
        self.visibility = Visibility.ACTIVE
        self._predicates = []
        self._order_by = []

    @property
    def predicates(self) -> list:
        return list(self._predicates)

    @property
    def ordering(self) -> list:
        return list(self._order_by)

    def where(self, *predicates) -> CollectionQuery:
        self._predicates.extend(predicates)
        return self

    def filter_by(self, **values) -> CollectionQuery:
        """Equality filters; None values are skipped."""
        for column, value in values.items():
            if value is not None:
                self._predicates.append(getattr(self.model, column) == value)
        return self

    def search(self, term: str | None, *columns) -> CollectionQuery:
        term = (term or "").strip()
        if term:
            pattern = f"%{term}%"
            self._predicates.append(or_(*[column.ilike(pattern) for column in columns]))
        return self

    def active(self, flag: bool | None) -> CollectionQuery:
        if flag is not None:
            self._predicates.append(self.model.is_active == flag)
        return self

    def with_visibility(self, visibility: Visibility) -> CollectionQuery:
        self.visibility = visibility
        return self

    def order_by(self, *clauses) -> CollectionQuery:
        self._order_by.extend(clauses)
        return self


def _restrict(scope: TenantScope, model, query):
    if scope.is_unscoped:
        return query
    return query.filter(model.tenant_id == scope.tenant_id)


def _apply_visibility(model, query, visibility: Visibility):
    if not hasattr(model, "deleted_at"):
        return query
    if visibility is Visibility.ACTIVE:
        return query.filter(model.deleted_at.is_(None))
    if visibility is Visibility.DELETED:
        return query.filter(model.deleted_at.isnot(None))
    return query


def apply(scope: TenantScope, collection: CollectionQuery):
    """Build the SQLAlchemy query for collection, restricted to scope."""
    model = collection.model
    query = db.session.query(model)
    for predicate in collection.predicates:
        query = query.filter(predicate)
    query = _restrict(scope, model, query)
    query = _apply_visibility(model, query, collection.visibility)
    if collection.ordering:
        query = query.order_by(*collection.ordering)
    return query


def get_in_scope(
    scope: TenantScope,
    model,
    entity_id: int,
    *,
    visibility: Visibility = Visibility.ALL,
    lock: bool = False,
    error: type[NotFoundError] = NotFoundError,
    label: str | None = None,
):
    """
    Fetch one entity by id inside scope, or raise NotFound.

    Deleted rows are visible by default so restore and lookups by id work.
    """
    query = _restrict(scope, model, db.session.query(model).filter(model.id == entity_id))
    query = _apply_visibility(model, query, visibility)
    if lock:
        query = lock_for_update(query)
    entity = query.first()
    if entity is None:
        raise error(f"{label or model.__name__} not found")
    return entity


def check_unique(
    scope: TenantScope,
    model,
    field: str,
    value,
    exclude_id: int | None = None,
    *,
    include_deleted: bool = True,
) -> None:
    """
    Pre-check the per-tenant uniqueness key before a create or rename.

    A match on a live row raises ConflictError. A match only on soft-deleted
    rows raises ConflictWithDeletedError (carrying deleted_id) so the client
    can offer a restore. With include_deleted=False deleted rows are ignored.

    The partial unique index is what actually guarantees uniqueness; this is
    for the error message.
    """
    tenant_id = scope.require_tenant_id()
    column = getattr(model, field)
    query = db.session.query(model).filter(model.tenant_id == tenant_id, column == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if not include_deleted:
        query = query.filter(model.deleted_at.is_(None))

    matches = query.all()
    if any(not match.is_deleted for match in matches):
        raise ConflictError(
            f"{model.__name__} with {field} '{value}' already exists",
            field=field,
        )
    if matches:
        raise ConflictWithDeletedError(
            f"A deleted {model.__name__} with {field} '{value}' exists. Restore it instead of creating a new one.",
            field=field,
            deleted_id=matches[0].id,
        )


def unique_conflict(model, field: str, value) -> Callable[[], ConflictError]:
    """Error factory used when the unique index rejects a write."""
    return lambda: ConflictError(
        f"{model.__name__} with {field} '{value}' already exists",
        field=field,
    )


def paginate(query, page: int, limit: int, serialize: Callable | None = None) -> dict:
    """
    Page through query.

    Returns {"data": [...], "pagination": {total, page, limit, totalPages}}.
    """
    serialize = serialize or (lambda entity: entity.to_dict())
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "data": [serialize(row) for row in rows],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }


def staff_query(scope: TenantScope, collection: CollectionQuery | None = None):
    """
    Scoped account listing: operator identities are never tenant staff.

    The role filter holds for every caller, operators included.
    """
    collection = collection or CollectionQuery(Account)
    return apply(scope, collection.where(Account.role != Role.OPERATOR))

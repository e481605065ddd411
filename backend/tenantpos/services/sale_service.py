# Overview: Sale recording against open shifts; encapsulates business logic and database work.

"""
Sale Journal boundary

A sale belongs to exactly one tenant and one shift that is open when the
sale is written. After creation only status (completed -> voided) and
voided_at ever change.

RULES:
- Shift must be open and in the caller's tenant, otherwise ShiftNotActive
- Catalog item must be live and active in the same tenant
- total = quantity * unit price (unit price defaults to the item price)
- Void only while the shift is still open: a closed shift's reconciliation
  never changes afterwards
- Cashiers record sales only on their own shift
"""

from __future__ import annotations

from sqlalchemy import func

from ..errors import (
    PermissionDeniedError,
    ShiftNotActiveError,
    ShiftNotFoundError,
    ShiftNotOpenError,
    StateConflictError,
    ValidationError,
)
from ..extensions import db
from ..models import CatalogItem, Sale, Shift, PAYMENT_METHODS, SALE_COMPLETED, SALE_VOIDED, SHIFT_OPEN
from ..money import MAX_AMOUNT_CENTS, cents_to_json, to_cents
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import parse_int
from . import scope_service
from .concurrency import commit, lock_for_update
from .scope_service import CollectionQuery
from .tenant_service import Principal, TenantScope

MAX_QUANTITY = 10_000


def _validate_quantity(value) -> int:
    quantity = parse_int(value, "quantity", minimum=1)
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"quantity must be between 1 and {MAX_QUANTITY}", field="quantity")
    return quantity


def _validate_payment_method(value) -> str:
    if value not in PAYMENT_METHODS:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}",
            field="payment_method",
        )
    return value


def record_sale(
    scope: TenantScope,
    actor: Principal,
    *,
    shift_id: int,
    catalog_item_id: int,
    quantity,
    payment_method: str,
    unit_price=None,
) -> Sale:
    tenant_id = scope.require_tenant_id()
    quantity = _validate_quantity(quantity)
    payment_method = _validate_payment_method(payment_method)

    shift = lock_for_update(
        db.session.query(Shift).filter(Shift.id == shift_id, Shift.tenant_id == tenant_id)
    ).first()
    if shift is None or shift.status != SHIFT_OPEN:
        raise ShiftNotActiveError("Shift is not open in this tenant")
    if actor.role == Role.CASHIER and shift.account_id != actor.account_id:
        raise PermissionDeniedError("Cashiers may only record sales on their own shift")

    item = db.session.query(CatalogItem).filter(
        CatalogItem.id == catalog_item_id,
        CatalogItem.tenant_id == tenant_id,
        CatalogItem.deleted_at.is_(None),
        CatalogItem.is_active.is_(True),
    ).first()
    if item is None:
        raise ValidationError("Catalog item not found or inactive", field="catalog_item_id")

    unit_cents = item.price_cents if unit_price is None else to_cents(unit_price, "unit_price")
    total_cents = quantity * unit_cents
    if total_cents > MAX_AMOUNT_CENTS:
        raise ValidationError("Sale total is too large", field="quantity")

    sale = Sale(
        tenant_id=tenant_id,
        shift_id=shift.id,
        catalog_item_id=item.id,
        quantity=quantity,
        unit_price_cents=unit_cents,
        total_cents=total_cents,
        payment_method=payment_method,
        status=SALE_COMPLETED,
        created_by_account_id=actor.account_id,
        created_at=utcnow(),
    )
    db.session.add(sale)
    commit()
    return sale


def get_sale(scope: TenantScope, sale_id: int) -> Sale:
    return scope_service.get_in_scope(scope, Sale, sale_id, label="Sale")


def void_sale(scope: TenantScope, sale_id: int) -> Sale:
    sale = scope_service.get_in_scope(scope, Sale, sale_id, lock=True, label="Sale")
    if sale.status == SALE_VOIDED:
        raise StateConflictError("Sale is already voided")
    if sale.shift.status != SHIFT_OPEN:
        raise ShiftNotOpenError("Sales can only be voided while their shift is open")

    sale.status = SALE_VOIDED
    sale.voided_at = utcnow()
    commit()
    return sale


def list_sales(
    scope: TenantScope,
    *,
    shift_id: int | None = None,
    status: str | None = None,
    payment_method: str | None = None,
):
    collection = (
        CollectionQuery(Sale)
        .filter_by(shift_id=shift_id, status=status, payment_method=payment_method)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
    )
    return scope_service.apply(scope, collection)


def totals_by_payment_method(query) -> dict:
    """
    Aggregate completed sales of query.

    Returns {"count", "total", "by_payment_method": {method: {count, total}}}.
    """
    rows = (
        query.filter(Sale.status == SALE_COMPLETED)
        .with_entities(Sale.payment_method, func.count(Sale.id), func.coalesce(func.sum(Sale.total_cents), 0))
        .group_by(Sale.payment_method)
        .order_by(None)
        .all()
    )

    by_method = {}
    count = 0
    total_cents = 0
    for method, method_count, method_total in rows:
        by_method[method] = {"count": method_count, "total": cents_to_json(int(method_total))}
        count += method_count
        total_cents += int(method_total)

    return {"count": count, "total": cents_to_json(total_cents), "by_payment_method": by_method}


def shift_sales_summary(scope: TenantScope, shift_id: int) -> dict:
    shift = scope_service.get_in_scope(scope, Shift, shift_id, error=ShiftNotFoundError, label="Shift")
    summary = totals_by_payment_method(list_sales(scope, shift_id=shift.id))
    summary["shift_id"] = shift.id
    return summary

"""
Shift Ledger: cashier shifts and cash-drawer reconciliation

WHY: Every sale is recorded against an open shift, and every shift closes
with a till count that is compared to the cash the drawer should hold.

STATE MACHINE:
    OPEN -> CLOSED   (one way, CLOSED is terminal, shifts are never deleted)

DESIGN PRINCIPLES:
- At most one open shift per (account, tenant). The pre-check gives the
  friendly error; the partial unique index uq_shifts_open_per_account holds
  the invariant under concurrent opens.
- Close writes closing cash, expected cash, variance, status and closed_at
  in one commit: a closed shift never lacks its variance.
- All amounts are integer cents, so every accumulation step is exact.

RECONCILIATION:
    expected_cash = opening_cash + cash_sales
    variance      = closing_cash - expected_cash
    status        = exact (0) | surplus (> 0) | shortage (< 0), derived only

Cashiers may open and close only their own shift.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from ..errors import (
    PermissionDeniedError,
    ShiftAlreadyOpenError,
    ShiftNotFoundError,
    ShiftNotOpenError,
)
from ..extensions import db
from ..models import Sale, Shift, PAYMENT_CASH, SALE_COMPLETED, SHIFT_CLOSED, SHIFT_OPEN
from ..money import cents_to_json, to_cents
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import optional_text
from . import account_service, scope_service
from .concurrency import commit, lock_for_update
from .scope_service import CollectionQuery
from .tenant_service import Principal, TenantScope

VARIANCE_EXACT = "exact"
VARIANCE_SURPLUS = "surplus"
VARIANCE_SHORTAGE = "shortage"


@dataclass(frozen=True)
class Reconciliation:
    """Cash reconciliation of one shift. closing/variance are None while open."""
    opening_cash_cents: int
    cash_sales_cents: int
    expected_cash_cents: int
    closing_cash_cents: int | None = None
    variance_cents: int | None = None

    @property
    def status(self) -> str | None:
        if self.variance_cents is None:
            return None
        if self.variance_cents == 0:
            return VARIANCE_EXACT
        return VARIANCE_SURPLUS if self.variance_cents > 0 else VARIANCE_SHORTAGE

    def to_dict(self) -> dict:
        return {
            "openingCash": cents_to_json(self.opening_cash_cents),
            "cashSales": cents_to_json(self.cash_sales_cents),
            "expectedCash": cents_to_json(self.expected_cash_cents),
            "closingCash": cents_to_json(self.closing_cash_cents),
            "variance": cents_to_json(self.variance_cents),
            "status": self.status,
        }


def cash_sales_cents(shift_id: int) -> int:
    """Sum of completed cash sale totals on a shift."""
    total = db.session.query(func.coalesce(func.sum(Sale.total_cents), 0)).filter(
        Sale.shift_id == shift_id,
        Sale.payment_method == PAYMENT_CASH,
        Sale.status == SALE_COMPLETED,
    ).scalar()
    return int(total)


def reconcile(shift: Shift) -> Reconciliation:
    """
    Reconciliation for a shift.

    Closed shifts report the figures stored at close. Open shifts report the
    running expected cash with no closing count yet.
    """
    if shift.status == SHIFT_CLOSED:
        return Reconciliation(
            opening_cash_cents=shift.opening_cash_cents,
            cash_sales_cents=shift.cash_sales_cents,
            expected_cash_cents=shift.expected_cash_cents,
            closing_cash_cents=shift.closing_cash_cents,
            variance_cents=shift.variance_cents,
        )

    cash_sales = cash_sales_cents(shift.id)
    return Reconciliation(
        opening_cash_cents=shift.opening_cash_cents,
        cash_sales_cents=cash_sales,
        expected_cash_cents=shift.opening_cash_cents + cash_sales,
    )


def shift_to_dict(shift: Shift) -> dict:
    data = shift.to_dict()
    data["reconciliation"] = reconcile(shift).to_dict()
    return data


def _ensure_own_shift(actor: Principal, account_id: int, verb: str) -> None:
    if actor.role == Role.CASHIER and account_id != actor.account_id:
        raise PermissionDeniedError(f"Cashiers may only {verb} their own shift")


def open_shift(scope: TenantScope, actor: Principal, account_id: int, opening_cash) -> Shift:
    """
    Open a shift for account_id in the scoped tenant.

    Raises InvalidAmountError for a negative or malformed opening cash,
    ShiftAlreadyOpenError if the account already has an open shift.
    """
    tenant_id = scope.require_tenant_id()
    _ensure_own_shift(actor, account_id, "open")
    opening_cents = to_cents(opening_cash, "openingCash")
    account = account_service.get_staff_member(scope, account_id)

    existing = lock_for_update(
        db.session.query(Shift).filter_by(
            account_id=account.id,
            tenant_id=tenant_id,
            status=SHIFT_OPEN,
        )
    ).first()
    if existing:
        raise ShiftAlreadyOpenError(shift_id=existing.id)

    shift = Shift(
        tenant_id=tenant_id,
        account_id=account.id,
        opened_by_account_id=actor.account_id,
        status=SHIFT_OPEN,
        opening_cash_cents=opening_cents,
        opened_at=utcnow(),
    )
    db.session.add(shift)
    commit(ShiftAlreadyOpenError)
    return shift


def close_shift(
    scope: TenantScope,
    actor: Principal,
    shift_id: int,
    closing_cash,
    notes: str | None = None,
) -> tuple[Shift, Reconciliation]:
    """
    Close a shift and reconcile the drawer.

    IMMUTABLE: Once closed, the shift cannot be reopened or modified.
    """
    closing_cents = to_cents(closing_cash, "closingCash")
    notes = optional_text(notes, "notes", 2000)
    shift = scope_service.get_in_scope(
        scope, Shift, shift_id, lock=True, error=ShiftNotFoundError, label="Shift"
    )
    _ensure_own_shift(actor, shift.account_id, "close")

    if shift.status != SHIFT_OPEN:
        raise ShiftNotOpenError()

    cash_sales = cash_sales_cents(shift.id)
    expected = shift.opening_cash_cents + cash_sales
    reconciliation = Reconciliation(
        opening_cash_cents=shift.opening_cash_cents,
        cash_sales_cents=cash_sales,
        expected_cash_cents=expected,
        closing_cash_cents=closing_cents,
        variance_cents=closing_cents - expected,
    )

    shift.status = SHIFT_CLOSED
    shift.closed_at = utcnow()
    shift.closing_cash_cents = closing_cents
    shift.cash_sales_cents = cash_sales
    shift.expected_cash_cents = expected
    shift.variance_cents = reconciliation.variance_cents
    if notes is not None:
        shift.notes = notes

    commit()
    return shift, reconciliation


def get_shift(scope: TenantScope, shift_id: int) -> Shift:
    return scope_service.get_in_scope(scope, Shift, shift_id, error=ShiftNotFoundError, label="Shift")


def list_shifts(scope: TenantScope, *, status: str | None = None, account_id: int | None = None):
    collection = (
        CollectionQuery(Shift)
        .filter_by(status=status, account_id=account_id)
        .order_by(Shift.opened_at.desc(), Shift.id.desc())
    )
    return scope_service.apply(scope, collection)


def list_active_shifts(scope: TenantScope):
    return list_shifts(scope, status=SHIFT_OPEN)

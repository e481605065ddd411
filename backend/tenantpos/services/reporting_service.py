# Overview: Shift cash-closing and daily sales reports; read-only.

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func

from ..errors import ShiftNotFoundError
from ..models import Account, Sale, Shift, SALE_COMPLETED
from ..money import cents_to_json
from ..time_utils import start_of_day, to_utc_z, utcnow
from . import scope_service, shift_service
from .sale_service import list_sales, totals_by_payment_method
from .tenant_service import TenantScope


def cash_closing_report(scope: TenantScope, shift_id: int) -> dict:
    """
    Cash-closing report for one shift: completed sales, totals overall and
    per payment method, and the drawer reconciliation.
    """
    shift = scope_service.get_in_scope(scope, Shift, shift_id, error=ShiftNotFoundError, label="Shift")

    completed = (
        list_sales(scope, shift_id=shift.id, status=SALE_COMPLETED)
        .order_by(None)
        .order_by(Sale.created_at.asc(), Sale.id.asc())
        .all()
    )
    summary = totals_by_payment_method(list_sales(scope, shift_id=shift.id))

    return {
        "shift": {
            "id": shift.id,
            "account": shift.account.to_summary() if shift.account else None,
            "status": shift.status,
            "opened_at": to_utc_z(shift.opened_at),
            "closed_at": to_utc_z(shift.closed_at),
            "generated_at": to_utc_z(utcnow()),
        },
        "summary": {
            "total_sales": summary["total"],
            "total_transactions": summary["count"],
            "by_payment_method": summary["by_payment_method"],
        },
        "reconciliation": shift_service.reconcile(shift).to_dict(),
        "sales": [sale.to_dict() for sale in completed],
    }


def _day_sales(scope: TenantScope, day: datetime | None):
    start = start_of_day(day or utcnow())
    end = start + timedelta(days=1)
    return start, list_sales(scope).filter(Sale.created_at >= start, Sale.created_at < end)


def daily_summary(scope: TenantScope, day: datetime | None = None) -> dict:
    """Completed sales for one UTC day (today by default)."""
    start, query = _day_sales(scope, day)
    summary = totals_by_payment_method(query)

    return {
        "date": start.date().isoformat(),
        "total_sales": summary["total"],
        "transaction_count": summary["count"],
        "by_payment_method": summary["by_payment_method"],
    }


def _totals_by_employee(query) -> list[dict]:
    """Completed sales of query grouped by the account that rang them up, largest total first."""
    rows = (
        query.filter(Sale.status == SALE_COMPLETED)
        .outerjoin(Account, Sale.created_by_account_id == Account.id)
        .with_entities(
            Sale.created_by_account_id,
            Account.name,
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total_cents), 0),
        )
        .group_by(Sale.created_by_account_id, Account.name)
        .order_by(None)
        .all()
    )
    employees = [
        {"account_id": account_id, "name": name or "Unknown", "count": count, "total_cents": int(total)}
        for account_id, name, count, total in rows
    ]
    employees.sort(key=lambda row: (-row["total_cents"], row["name"]))
    return employees


def _average_cents(total_cents: int, count: int) -> int:
    if not count:
        return 0
    return int((Decimal(total_cents) / count).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def daily_report(scope: TenantScope, day: datetime | None = None) -> dict:
    """
    Daily sales report for one UTC day: totals, average ticket, and the
    breakdowns per payment method and per employee, plus the completed
    sales themselves in the order they were rung up.
    """
    start, query = _day_sales(scope, day)
    summary = totals_by_payment_method(query)
    employees = _totals_by_employee(query)
    total_cents = sum(row["total_cents"] for row in employees)

    completed = (
        query.filter(Sale.status == SALE_COMPLETED)
        .order_by(None)
        .order_by(Sale.created_at.asc(), Sale.id.asc())
        .all()
    )

    return {
        "date": start.date().isoformat(),
        "summary": {
            "total_sales": summary["total"],
            "total_transactions": summary["count"],
            "average_ticket": cents_to_json(_average_cents(total_cents, summary["count"])),
        },
        "by_payment_method": summary["by_payment_method"],
        "by_employee": [
            {
                "account_id": row["account_id"],
                "name": row["name"],
                "count": row["count"],
                "total": cents_to_json(row["total_cents"]),
            }
            for row in employees
        ],
        "sales": [sale.to_dict() for sale in completed],
    }

from __future__ import annotations

from datetime import datetime

from ..extensions import db


class LifecycleState:
    """Two-state soft-delete lifecycle: ACTIVE <-> DELETED (ACTIVE initial)."""
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class SoftDeleteMixin:
    """
    Soft-delete columns and the transitions that keep them consistent.

    INVARIANTS (enforced here and by the ck_<table>_deleted_inactive check):
    - DELETED implies is_active is False
    - restore always reactivates

    __unique_key__ names the column that must be unique per tenant among
    non-deleted rows (None when the model has no such key).
    """
    __unique_key__: str | None = None

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @property
    def lifecycle_state(self) -> str:
        return LifecycleState.DELETED if self.deleted_at is not None else LifecycleState.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, at: datetime) -> None:
        self.deleted_at = at
        self.is_active = False

    def mark_restored(self) -> None:
        self.deleted_at = None
        self.is_active = True


def soft_delete_check(table: str):
    """Storage-level guard: a deleted row can never be flagged active."""
    return db.CheckConstraint(
        "deleted_at IS NULL OR NOT is_active",
        name=f"ck_{table}_deleted_inactive",
    )


def active_unique_index(name: str, *columns: str):
    """Unique index that only covers rows not currently soft-deleted."""
    return db.Index(
        name,
        *columns,
        unique=True,
        sqlite_where=db.text("deleted_at IS NULL"),
        postgresql_where=db.text("deleted_at IS NULL"),
    )

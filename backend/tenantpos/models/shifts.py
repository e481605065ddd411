from __future__ import annotations

from ..extensions import db
from ..money import cents_to_json
from ..time_utils import to_utc_z

SHIFT_OPEN = "open"
SHIFT_CLOSED = "closed"


class Shift(db.Model):
    """
    Cashier shift with cash-drawer accountability.

    LIFECYCLE:
    - open: shift is active, sales can be recorded against it
    - closed: cash counted, variance calculated (terminal)

    At most one open shift per (account, tenant): enforced by the partial
    unique index uq_shifts_open_per_account. A closed shift always carries
    its closing cash and variance (ck_shifts_closed_reconciled).
    Shifts are never deleted.
    """
    __tablename__ = "shifts"
    __table_args__ = (
        db.Index(
            "uq_shifts_open_per_account",
            "account_id",
            "tenant_id",
            unique=True,
            sqlite_where=db.text("status = 'open'"),
            postgresql_where=db.text("status = 'open'"),
        ),
        db.CheckConstraint("status IN ('open', 'closed')", name="ck_shifts_status"),
        db.CheckConstraint(
            "status = 'open' OR (closing_cash_cents IS NOT NULL "
            "AND variance_cents IS NOT NULL AND closed_at IS NOT NULL)",
            name="ck_shifts_closed_reconciled",
        ),
        db.CheckConstraint("opening_cash_cents >= 0", name="ck_shifts_opening_nonnegative"),
        db.Index("ix_shifts_tenant_status", "tenant_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False, index=True)
    opened_by_account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=SHIFT_OPEN, index=True)

    # Cash tracking (all amounts in cents)
    opening_cash_cents = db.Column(db.Integer, nullable=False, default=0)
    closing_cash_cents = db.Column(db.Integer, nullable=True)
    cash_sales_cents = db.Column(db.Integer, nullable=True)
    expected_cash_cents = db.Column(db.Integer, nullable=True)
    variance_cents = db.Column(db.Integer, nullable=True)  # closing - expected

    opened_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    notes = db.Column(db.Text, nullable=True)

    tenant = db.relationship("Tenant", backref=db.backref("shifts", lazy=True))
    account = db.relationship("Account", foreign_keys=[account_id], backref=db.backref("shifts", lazy=True))
    opened_by = db.relationship("Account", foreign_keys=[opened_by_account_id])

    @property
    def is_open(self) -> bool:
        return self.status == SHIFT_OPEN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "account_id": self.account_id,
            "account": self.account.to_summary() if self.account else None,
            "opened_by_account_id": self.opened_by_account_id,
            "status": self.status,
            "opening_cash": cents_to_json(self.opening_cash_cents),
            "closing_cash": cents_to_json(self.closing_cash_cents),
            "cash_sales": cents_to_json(self.cash_sales_cents),
            "expected_cash": cents_to_json(self.expected_cash_cents),
            "variance": cents_to_json(self.variance_cents),
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at),
            "notes": self.notes,
        }

from __future__ import annotations

from ..extensions import db
from ..money import cents_to_json
from ..time_utils import to_utc_z

SALE_COMPLETED = "completed"
SALE_VOIDED = "voided"

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD)


class Sale(db.Model):
    """
    Completed sale recorded against an open shift.

    IMMUTABLE: Only status (completed -> voided) and voided_at change after
    creation. total_cents = quantity * unit_price_cents, fixed at insert.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_shift_status", "shift_id", "status"),
        db.Index("ix_sales_tenant_created", "tenant_id", "created_at"),
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint("total_cents >= 0", name="ck_sales_total_nonnegative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    catalog_item_id = db.Column(db.Integer, db.ForeignKey("catalog_items.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=SALE_COMPLETED, index=True)

    created_by_account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    shift = db.relationship("Shift", backref=db.backref("sales", lazy=True))
    catalog_item = db.relationship("CatalogItem")
    created_by = db.relationship("Account", foreign_keys=[created_by_account_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "shift_id": self.shift_id,
            "catalog_item_id": self.catalog_item_id,
            "catalog_item": (
                {"id": self.catalog_item.id, "name": self.catalog_item.name}
                if self.catalog_item else None
            ),
            "quantity": self.quantity,
            "unit_price": cents_to_json(self.unit_price_cents),
            "total": cents_to_json(self.total_cents),
            "payment_method": self.payment_method,
            "status": self.status,
            "created_by_account_id": self.created_by_account_id,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at),
        }

from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

TENANT_TIERS = ("basic", "pro", "enterprise")


class Tenant(db.Model):
    """
    Multi-tenant root: every business is a Tenant.

    All accounts, catalog entries, shifts and sales carry exactly one
    tenant_id. An inactive tenant rejects all non-operator access.

    The slug is the global uniqueness key (tenants are not tenant-owned).
    """
    __tablename__ = "tenants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(64), nullable=False, unique=True, index=True)
    tier = db.Column(db.String(16), nullable=False, default="basic")

    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} slug={self.slug!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "tier": self.tier,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_public_dict(self) -> dict:
        """Subset returned to tenant members at login."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "tier": self.tier,
        }

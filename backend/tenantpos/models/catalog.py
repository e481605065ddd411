from __future__ import annotations

from ..extensions import db
from ..money import cents_to_json
from ..time_utils import to_utc_z
from .mixins import SoftDeleteMixin, active_unique_index, soft_delete_check


class Category(SoftDeleteMixin, db.Model):
    """
    Catalog category, tenant-owned.

    Names are unique within a tenant among non-deleted categories.
    A category cannot be deleted or deactivated while active catalog items
    still reference it.
    """
    __tablename__ = "categories"
    __unique_key__ = "name"
    __table_args__ = (
        active_unique_index("uq_categories_tenant_name_active", "tenant_id", "name"),
        soft_delete_check("categories"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    tenant = db.relationship("Tenant", backref=db.backref("categories", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r} tenant_id={self.tenant_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "deleted_at": to_utc_z(self.deleted_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CatalogItem(SoftDeleteMixin, db.Model):
    """
    Sellable catalog item, tenant-owned.

    Names are unique within a tenant among non-deleted items.
    Price is stored in cents.
    """
    __tablename__ = "catalog_items"
    __unique_key__ = "name"
    __table_args__ = (
        active_unique_index("uq_catalog_items_tenant_name_active", "tenant_id", "name"),
        soft_delete_check("catalog_items"),
        db.CheckConstraint("price_cents >= 0", name="ck_catalog_items_price_nonnegative"),
        db.Index("ix_catalog_items_tenant_category", "tenant_id", "category_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    service_type_id = db.Column(db.Integer, db.ForeignKey("service_types.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    tenant = db.relationship("Tenant", backref=db.backref("catalog_items", lazy=True))
    category = db.relationship("Category", backref=db.backref("items", lazy=True))
    service_type = db.relationship("ServiceType", backref=db.backref("items", lazy=True))

    def __repr__(self) -> str:
        return f"<CatalogItem id={self.id} name={self.name!r} tenant_id={self.tenant_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "category_id": self.category_id,
            "category": {"id": self.category.id, "name": self.category.name} if self.category else None,
            "service_type_id": self.service_type_id,
            "name": self.name,
            "description": self.description,
            "price": cents_to_json(self.price_cents),
            "is_active": self.is_active,
            "deleted_at": to_utc_z(self.deleted_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ServiceType(SoftDeleteMixin, db.Model):
    """
    Kind of service a catalog item belongs to (e.g. dine-in, delivery), tenant-owned.

    Names are unique within a tenant among non-deleted service types.
    A service type cannot be deleted while live catalog items are tagged
    with it.
    """
    __tablename__ = "service_types"
    __unique_key__ = "name"
    __table_args__ = (
        active_unique_index("uq_service_types_tenant_name_active", "tenant_id", "name"),
        soft_delete_check("service_types"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    icon = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    tenant = db.relationship("Tenant", backref=db.backref("service_types", lazy=True))

    def __repr__(self) -> str:
        return f"<ServiceType id={self.id} name={self.name!r} tenant_id={self.tenant_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "is_active": self.is_active,
            "deleted_at": to_utc_z(self.deleted_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

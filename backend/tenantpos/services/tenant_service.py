"""
Multi-Tenant Service: Tenant Resolution, Scope Value and Tenant Administration

WHY: Every request touching business data runs inside exactly one
TenantScope. The scope is computed once per request by resolve() and then
passed explicitly to every service call; no service reads it from request
globals.

SECURITY INVARIANTS:
1. Non-operator principals are always Scoped to their bound tenant
2. An inactive tenant rejects every non-operator request
3. Only operators hold an Unscoped scope, and only operators may narrow it
4. Resolution failures are terminal (403), never retried or partially scoped

USAGE:
    scope = tenant_service.resolve(principal)
    items = scope_service.apply(scope, CollectionQuery(CatalogItem)).all()
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy import or_

from ..errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    TenantInactiveError,
    TenantMissingError,
    TenantNotFoundError,
    ValidationError,
)
from ..extensions import db
from ..models import Account, Tenant, TENANT_TIERS
from ..permissions import Role
from ..validation import optional_text, required_text
from .concurrency import commit

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
CONTACT_LIMITS = {"email": 255, "phone": 32, "address": 255}


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller, as snapshotted on the session at login.

    role and tenant_id come from the session row, not the live account, so
    they never change during a session.
    """
    account_id: int
    role: str
    tenant_id: int | None

    @property
    def is_operator(self) -> bool:
        return self.role == Role.OPERATOR


@dataclass(frozen=True)
class TenantScope:
    """Scoped(tenant_id) or Unscoped (tenant_id None). Immutable per request."""
    tenant_id: int | None

    @classmethod
    def scoped(cls, tenant_id: int) -> TenantScope:
        return cls(tenant_id=tenant_id)

    @classmethod
    def unscoped(cls) -> TenantScope:
        return cls(tenant_id=None)

    @property
    def is_unscoped(self) -> bool:
        return self.tenant_id is None

    def narrow(self, tenant_id: int) -> TenantScope:
        """Return a new scope restricted to tenant_id. Unscoped only."""
        if not self.is_unscoped:
            if tenant_id == self.tenant_id:
                return self
            raise PermissionDeniedError("Only operators may select a tenant")
        return TenantScope.scoped(tenant_id)

    def require_tenant_id(self) -> int:
        """Tenant id for writes that must land in exactly one tenant."""
        if self.is_unscoped:
            raise ValidationError("A tenant must be selected for this operation", field="tenant_id")
        return self.tenant_id

    def __str__(self) -> str:
        return "Unscoped" if self.is_unscoped else f"Scoped({self.tenant_id})"


def resolve(principal: Principal) -> TenantScope:
    """
    Determine the tenant scope for one request.

    Operators are Unscoped. Everyone else is Scoped to their bound tenant,
    which must exist and be active. Performs exactly one tenant lookup.

    Raises TenantMissingError, TenantNotFoundError, TenantInactiveError.
    """
    if principal.is_operator:
        return TenantScope.unscoped()

    if principal.tenant_id is None:
        raise TenantMissingError()

    tenant = db.session.get(Tenant, principal.tenant_id)
    if tenant is None:
        raise TenantNotFoundError()
    if not tenant.is_active:
        raise TenantInactiveError()

    return TenantScope.scoped(tenant.id)


def narrow_for_operator(scope: TenantScope, tenant_id: int) -> TenantScope:
    """
    Narrow an operator's scope to one existing tenant.

    Inactive tenants may still be inspected by operators.
    """
    if db.session.get(Tenant, tenant_id) is None:
        raise TenantNotFoundError()
    return scope.narrow(tenant_id)


# =============================================================================
# TENANT ADMINISTRATION (operator only)
# =============================================================================

def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-")


def _validate_slug(slug: str) -> str:
    slug = (optional_text(slug, "slug") or "").lower()
    if not (2 <= len(slug) <= 64) or not SLUG_PATTERN.match(slug):
        raise ValidationError(
            "slug must be 2-64 characters of lowercase letters, digits and single hyphens",
            field="slug",
        )
    return slug


def _validate_tier(tier: str) -> str:
    if not isinstance(tier, str) or tier not in TENANT_TIERS:
        raise ValidationError(f"tier must be one of: {', '.join(TENANT_TIERS)}", field="tier")
    return tier


def _contact_fields(**values) -> dict:
    """Optional contact strings, stripped and length-checked; blanks become None."""
    return {key: optional_text(value, key, CONTACT_LIMITS[key]) for key, value in values.items()}


def _check_slug_available(slug: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Tenant).filter(Tenant.slug == slug)
    if exclude_id is not None:
        query = query.filter(Tenant.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"A tenant with slug '{slug}' already exists", field="slug")


def get_tenant(tenant_id: int) -> Tenant:
    tenant = db.session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant not found")
    return tenant


def list_tenants(*, search: str | None = None, active: bool | None = None):
    query = db.session.query(Tenant)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Tenant.name.ilike(pattern), Tenant.slug.ilike(pattern)))
    if active is not None:
        query = query.filter(Tenant.is_active == active)
    return query.order_by(Tenant.created_at.desc(), Tenant.id.desc())


def create_tenant(
    name: str,
    owner_name: str,
    owner_email: str,
    owner_password: str,
    *,
    slug: str | None = None,
    tier: str = "basic",
    email: str | None = None,
    phone: str | None = None,
    address: str | None = None,
) -> tuple[Tenant, Account]:
    """
    Create a tenant together with its first owner account.

    Both rows are written in one transaction: a tenant never exists without
    an owner.
    """
    from .auth_service import hash_password, normalize_email

    name = required_text(name, "name", 255)
    slug = _validate_slug(slug if slug else slugify(name))
    tier = _validate_tier(tier)
    _check_slug_available(slug)

    owner_name = required_text(owner_name, "owner_name", 120)
    contact = _contact_fields(email=email, phone=phone, address=address)
    owner_email = normalize_email(owner_email, field="owner_email")
    password_hash = hash_password(owner_password)

    tenant = Tenant(
        name=name,
        slug=slug,
        tier=tier,
        is_active=True,
        **contact,
    )
    db.session.add(tenant)
    db.session.flush()

    owner = Account(
        tenant_id=tenant.id,
        email=owner_email,
        name=owner_name,
        role=Role.OWNER,
        password_hash=password_hash,
        is_active=True,
    )
    db.session.add(owner)

    commit(lambda: ConflictError(f"A tenant with slug '{slug}' already exists", field="slug"))
    return tenant, owner


def update_tenant(tenant_id: int, **fields) -> Tenant:
    tenant = get_tenant(tenant_id)

    if "name" in fields and fields["name"] is not None:
        tenant.name = required_text(fields["name"], "name", 255)
    if "slug" in fields and fields["slug"] is not None:
        slug = _validate_slug(fields["slug"])
        _check_slug_available(slug, exclude_id=tenant.id)
        tenant.slug = slug
    if "tier" in fields and fields["tier"] is not None:
        tenant.tier = _validate_tier(fields["tier"])
    contact = {key: fields[key] for key in CONTACT_LIMITS if key in fields}
    for key, value in _contact_fields(**contact).items():
        setattr(tenant, key, value)

    commit(lambda: ConflictError("A tenant with that slug already exists", field="slug"))
    return tenant


def toggle_tenant_active(tenant_id: int) -> Tenant:
    """
    Flip the tenant's active flag.

    Members of an inactive tenant are rejected on their next request, since
    resolve() re-reads the flag every time.
    """
    tenant = get_tenant(tenant_id)
    tenant.is_active = not tenant.is_active
    commit()
    return tenant

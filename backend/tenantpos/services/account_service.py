# Overview: Staff account management; encapsulates business logic and database work.

"""
Account Service

Staff accounts (owner, supervisor, cashier) are tenant-owned, soft-deletable
and unique by email within their tenant. Operator accounts are never
returned or modified here; they are provisioned from the CLI.

An operator creating an account must name the tenant explicitly.
"""

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Account
from ..permissions import Role, STAFF_ROLES
from ..validation import required_text
from . import lifecycle_service, scope_service
from .auth_service import hash_password, normalize_email
from .concurrency import commit
from .scope_service import CollectionQuery, Visibility
from .tenant_service import TenantScope, get_tenant


def _validate_role(role: str | None) -> str:
    if not isinstance(role, str) or role not in STAFF_ROLES:
        raise ValidationError(
            f"role must be one of: {', '.join(sorted(STAFF_ROLES))}",
            field="role",
        )
    return role


def _validate_name(name: str | None) -> str:
    return required_text(name, "name", 120)


def list_accounts(
    scope: TenantScope,
    *,
    search: str | None = None,
    active: bool | None = None,
    role: str | None = None,
    visibility: Visibility = Visibility.ACTIVE,
):
    """Scoped staff listing query. Operators never appear."""
    collection = (
        CollectionQuery(Account)
        .search(search, Account.name, Account.email)
        .active(active)
        .filter_by(role=role)
        .with_visibility(visibility)
        .order_by(Account.name.asc(), Account.id.asc())
    )
    return scope_service.staff_query(scope, collection)


def get_account(scope: TenantScope, account_id: int) -> Account:
    account = scope_service.get_in_scope(scope, Account, account_id, label="Account")
    if account.role == Role.OPERATOR:
        raise NotFoundError("Account not found")
    return account


def get_staff_member(scope: TenantScope, account_id: int) -> Account:
    """Live, active staff member of the scoped tenant."""
    account = get_account(scope, account_id)
    if account.is_deleted or not account.is_active:
        raise ValidationError("Account is not an active staff member", field="account_id")
    return account


def create_account(
    scope: TenantScope,
    *,
    email: str,
    name: str,
    role: str,
    password: str,
    tenant_id: int | None = None,
) -> Account:
    """
    Create a staff account in the scoped tenant.

    Unscoped callers (operators) pass tenant_id; scoped callers may omit it
    and cannot name any tenant but their own.
    """
    if scope.is_unscoped:
        if tenant_id is None:
            raise ValidationError("tenant_id is required", field="tenant_id")
        target = TenantScope.scoped(get_tenant(tenant_id).id)
    else:
        if tenant_id is not None and tenant_id != scope.tenant_id:
            raise NotFoundError("Tenant not found")
        target = scope

    email = normalize_email(email)
    name = _validate_name(name)
    role = _validate_role(role)

    scope_service.check_unique(target, Account, "email", email)

    account = Account(
        tenant_id=target.require_tenant_id(),
        email=email,
        name=name,
        role=role,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.session.add(account)
    commit(scope_service.unique_conflict(Account, "email", email))
    return account


def update_account(scope: TenantScope, account_id: int, **fields) -> Account:
    """
    Update name, email, role or password.

    Email changes re-check uniqueness against live accounts only.
    """
    account = lifecycle_service.ensure_live(get_account(scope, account_id))

    if fields.get("name") is not None:
        account.name = _validate_name(fields["name"])
    if fields.get("role") is not None:
        account.role = _validate_role(fields["role"])
    if fields.get("password"):
        account.password_hash = hash_password(fields["password"])

    email = None
    if fields.get("email") is not None:
        email = normalize_email(fields["email"])
        if email != account.email:
            scope_service.check_unique(
                TenantScope.scoped(account.tenant_id),
                Account,
                "email",
                email,
                exclude_id=account.id,
                include_deleted=False,
            )
            account.email = email

    commit(scope_service.unique_conflict(Account, "email", email or account.email))
    return account


def delete_account(scope: TenantScope, account_id: int) -> Account:
    get_account(scope, account_id)
    return lifecycle_service.delete_entity(scope, Account, account_id)


def restore_account(scope: TenantScope, account_id: int) -> Account:
    get_account(scope, account_id)
    return lifecycle_service.restore_entity(scope, Account, account_id)


def toggle_account_active(scope: TenantScope, account_id: int) -> Account:
    get_account(scope, account_id)
    return lifecycle_service.toggle_active(scope, Account, account_id)

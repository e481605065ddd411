# Overview: Password hashing, credential checks and operator provisioning.

"""
Authentication Service

WHY: Every action must be attributable. Uses bcrypt for password hashing.

MULTI-TENANT: Staff accounts belong to exactly one tenant and their email is
unique only within that tenant. The same email may therefore exist in two
tenants; login disambiguates with the optional tenant slug.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS)
- Minimum length from MIN_PASSWORD_LENGTH
- authenticate() never says whether the identifier or the secret was wrong
- Tenant activity is checked afterwards by tenant_service.resolve()
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import AuthenticationError, ValidationError
from ..extensions import db
from ..models import Account, Tenant
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import required_text
from .concurrency import commit
from . import session_service

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str | None, field: str = "email") -> str:
    email = required_text(value, field).lower()
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        raise ValidationError(f"{field} must be a valid email address", field=field)
    return email


def validate_password_strength(password: str | None, field: str = "password") -> None:
    minimum = current_app.config["MIN_PASSWORD_LENGTH"]
    if not isinstance(password, str) or len(password) < minimum:
        raise ValidationError(f"Password must be at least {minimum} characters long", field=field)


def hash_password(password: str, field: str = "password") -> str:
    """Validate then hash with bcrypt. Cost comes from BCRYPT_ROUNDS."""
    validate_password_strength(password, field=field)
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def authenticate(identifier: str | None, secret: str | None, tenant_slug: str | None = None) -> Account:
    """
    Authenticate by email and password.

    Deleted and deactivated accounts cannot log in. When the same email
    exists in several tenants and the password matches more than one, the
    caller must name the tenant.

    Raises AuthenticationError with one fixed message for every credential
    failure.
    """
    if not isinstance(identifier, str) or not isinstance(secret, str):
        raise AuthenticationError()
    if not identifier.strip() or not secret or not isinstance(tenant_slug, (str, type(None))):
        raise AuthenticationError()

    query = db.session.query(Account).filter(
        Account.email == identifier.strip().lower(),
        Account.deleted_at.is_(None),
        Account.is_active.is_(True),
    )
    if tenant_slug:
        query = query.join(Tenant, Account.tenant_id == Tenant.id).filter(
            Tenant.slug == tenant_slug.strip().lower()
        )

    matches = [account for account in query.all() if verify_password(secret, account.password_hash)]

    if not matches:
        raise AuthenticationError()
    if len(matches) > 1:
        raise ValidationError("tenant is required to log in with this account", field="tenant")

    account = matches[0]
    account.last_login_at = utcnow()
    commit()
    return account


def change_password(account: Account, current_password: str, new_password: str, keep_session_id: int | None = None) -> int:
    """
    Replace the password and revoke every other session of the account.

    Returns the number of sessions revoked.
    """
    if not isinstance(current_password, str) or not current_password \
            or not verify_password(current_password, account.password_hash):
        raise AuthenticationError("Current password is incorrect")

    account.password_hash = hash_password(new_password, field="new_password")
    return session_service.revoke_all_sessions(
        account.id,
        reason="Password changed",
        except_session_id=keep_session_id,
    )


def create_operator(email: str, name: str, password: str) -> Account:
    """Provision a cross-tenant operator account. CLI only."""
    email = normalize_email(email)
    name = required_text(name, "name", 120)

    existing = db.session.query(Account).filter(
        Account.tenant_id.is_(None),
        Account.email == email,
        Account.deleted_at.is_(None),
    ).first()
    if existing is not None:
        raise ValidationError(f"Operator '{email}' already exists", field="email")

    account = Account(
        tenant_id=None,
        email=email,
        name=name,
        role=Role.OPERATOR,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.session.add(account)
    commit()
    return account

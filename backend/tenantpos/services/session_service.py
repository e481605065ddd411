# Overview: Bearer session issue, validation and revocation with the principal snapshot.

"""
Session Token Management Service

Tokens are random, stored only as SHA-256 hashes, and time-limited.

PRINCIPAL SNAPSHOT: role and tenant_id are copied onto the session when it
is issued. validate_session() builds the Principal from those copies, so a
role change on the account only takes effect at the next login.

SECURITY FEATURES:
- 32 bytes of entropy per token (secrets.token_hex)
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, 24h by default)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, 2h by default)
- Revocable on logout or password change
- Deleted or deactivated accounts lose their sessions on next use
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import Account, SessionToken
from ..time_utils import utcnow
from .tenant_service import Principal


@dataclass
class SessionContext:
    account: Account
    session: SessionToken
    principal: Principal


def generate_token() -> str:
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    """
    SHA-256 of the token, hex-encoded.

    Tokens are already high-entropy, so a fast hash is sufficient here.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"])


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_IDLE_TIMEOUT_HOURS"])


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def create_session(
    account: Account,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Issue a session for account.

    Returns (session_record, plaintext_token). Only the hash is stored.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        account_id=account.id,
        tenant_id=account.tenant_id,
        role=account.role,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Return the SessionContext for a live token, or None.

    None when the token is unknown, revoked, expired, idle too long, or its
    account is deleted or deactivated. Updates last_used_at on success.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        _revoke(session, "Expired")
        db.session.commit()
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    account = session.account
    if not account or account.is_deleted or not account.is_active:
        _revoke(session, "Account deactivated")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(
        account=account,
        session=session,
        principal=Principal(
            account_id=account.id,
            role=session.role,
            tenant_id=session.tenant_id,
        ),
    )


def revoke_session(token: str, reason: str = "Logout") -> bool:
    """Returns True if a live session was revoked."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_all_sessions(account_id: int, reason: str, except_session_id: int | None = None) -> int:
    """Revoke every live session of an account. Commits pending changes too."""
    query = db.session.query(SessionToken).filter_by(account_id=account_id, is_revoked=False)
    if except_session_id is not None:
        query = query.filter(SessionToken.id != except_session_id)

    count = 0
    for session in query.all():
        _revoke(session, reason)
        count += 1

    db.session.commit()
    return count

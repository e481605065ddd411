# Overview: Authorization gate over the static policy table, plus security audit logging.

"""
Authorization Gate

authorize() is a pure predicate: role membership in a set, no I/O. Routes
call require() with the (resource, action) they perform before any scoped
lookup runs, so an unauthorized caller never triggers a storage read.

Denials are written to security_events by the HTTP boundary via
log_security_event().
"""

from __future__ import annotations

from ..errors import PermissionDeniedError
from ..extensions import db
from ..models import SecurityEvent
from ..permissions import required_roles
from ..time_utils import utcnow
from .tenant_service import Principal


def authorize(principal: Principal, roles: frozenset[str]) -> bool:
    """Allow iff the principal's role is in roles."""
    return principal.role in roles


def require(principal: Principal, resource: str, action: str) -> None:
    """
    Raise PermissionDeniedError unless the policy admits principal's role.
    """
    roles = required_roles(resource, action)
    if not authorize(principal, roles):
        raise PermissionDeniedError(
            f"Role '{principal.role}' may not perform {resource}.{action}",
            required_roles=sorted(roles),
        )


def log_security_event(
    account_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    tenant_id: int | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail with tenant context.

    event_type examples:
    - LOGIN_FAILED
    - LOGIN_SUCCESS
    - LOGOUT
    - PERMISSION_DENIED
    - TENANT_RESOLUTION_FAILED
    - PASSWORD_CHANGED
    """
    event = SecurityEvent(
        account_id=account_id,
        tenant_id=tenant_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event

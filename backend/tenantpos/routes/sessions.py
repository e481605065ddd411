# Overview: Flask API routes for login sessions; parses input and returns JSON responses.

"""
Session API routes

POST   /api/sessions                   login, returns a bearer token
DELETE /api/sessions                   logout (revokes the presented token)
GET    /api/sessions/verify            current principal and tenant
POST   /api/sessions/change-password   rotate password, revoke other sessions

Login never reveals whether the identifier or the secret was wrong. A
member of an inactive tenant gets 403 TenantInactive after valid
credentials.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth
from ..errors import AuthenticationError, TenantAccessError
from ..responses import ok
from ..services import auth_service, permission_service, session_service, tenant_service
from ..services.tenant_service import Principal
from ..time_utils import to_utc_z
from ..validation import body_value, json_body

sessions_bp = Blueprint("sessions", __name__, url_prefix="/api/sessions")


def _principal_payload(account, principal: Principal) -> dict:
    return {
        "id": account.id,
        "email": account.email,
        "name": account.name,
        "role": principal.role,
        "tenant_id": principal.tenant_id,
    }


@sessions_bp.post("")
@sessions_bp.post("/")
def login_route():
    """
    Request body:
    {
        "identifier": "cashier@shop.test",   (or "email")
        "secret": "secret123",               (or "password")
        "tenant": "shop"                     (optional tenant slug)
    }
    """
    data = json_body()
    identifier = body_value(data, "identifier", "email")
    secret = body_value(data, "secret", "password")
    tenant_slug = body_value(data, "tenant", "tenantSlug", "tenant_slug")

    ip_address = request.remote_addr
    user_agent = request.headers.get("User-Agent")

    try:
        account = auth_service.authenticate(identifier, secret, tenant_slug)
    except AuthenticationError:
        current_app.logger.warning("Failed login for identifier %r", identifier)
        permission_service.log_security_event(
            account_id=None,
            event_type="LOGIN_FAILED",
            success=False,
            resource=request.path,
            action="login",
            reason="Invalid credentials",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise

    principal = Principal(account_id=account.id, role=account.role, tenant_id=account.tenant_id)
    try:
        tenant_service.resolve(principal)
    except TenantAccessError as exc:
        current_app.logger.warning("Login refused for account %s: %s", account.id, exc.code)
        permission_service.log_security_event(
            account_id=account.id,
            event_type="TENANT_RESOLUTION_FAILED",
            success=False,
            resource=request.path,
            action="login",
            reason=exc.code,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise

    session, token = session_service.create_session(account, user_agent=user_agent, ip_address=ip_address)
    permission_service.log_security_event(
        account_id=account.id,
        event_type="LOGIN_SUCCESS",
        success=True,
        resource=request.path,
        action="login",
        ip_address=ip_address,
        user_agent=user_agent,
        tenant_id=account.tenant_id,
    )

    return ok(
        {
            "token": token,
            "expires_at": to_utc_z(session.expires_at),
            "principal": _principal_payload(account, principal),
            "tenant": account.tenant.to_public_dict() if account.tenant else None,
        },
        message="Login successful",
    )


@sessions_bp.delete("")
@sessions_bp.delete("/")
@require_auth
def logout_route():
    token = request.headers["Authorization"].split(" ", 1)[1].strip()
    session_service.revoke_session(token, reason="Logout")
    permission_service.log_security_event(
        account_id=g.principal.account_id,
        event_type="LOGOUT",
        success=True,
        resource=request.path,
        tenant_id=g.principal.tenant_id,
    )
    return ok(message="Logged out")


@sessions_bp.get("/verify")
@require_auth
def verify_route():
    account = g.current_account
    return ok({
        "principal": _principal_payload(account, g.principal),
        "tenant": account.tenant.to_public_dict() if account.tenant else None,
        "scope": str(g.scope),
        "session": g.session_context.session.to_dict(),
    })


@sessions_bp.post("/change-password")
@require_auth
def change_password_route():
    data = json_body()
    current_password = body_value(data, "currentPassword", "current_password")
    new_password = body_value(data, "newPassword", "new_password")

    revoked = auth_service.change_password(
        g.current_account,
        current_password,
        new_password,
        keep_session_id=g.session_context.session.id,
    )
    permission_service.log_security_event(
        account_id=g.principal.account_id,
        event_type="PASSWORD_CHANGED",
        success=True,
        resource=request.path,
        tenant_id=g.principal.tenant_id,
    )
    current_app.logger.info("Password changed for account %s, %d session(s) revoked", g.principal.account_id, revoked)
    return ok({"revoked_sessions": revoked}, message="Password changed")

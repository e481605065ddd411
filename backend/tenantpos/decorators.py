# Overview: Request and policy decorators for API routes.

from functools import wraps

from flask import current_app, g, request

from .errors import AuthenticationError, PermissionDeniedError, TenantAccessError, TenantNotFoundError
from .services import permission_service, session_service, tenant_service
from .validation import parse_int


def _client_context() -> dict:
    return {
        "ip_address": request.remote_addr,
        "user_agent": request.headers.get("User-Agent"),
    }


def require_auth(f):
    """
    Require authentication and establish the tenant scope.

    Sets the following Flask g attributes for the route body:
    - g.current_account: the authenticated Account
    - g.principal: Principal snapshot taken from the session
    - g.scope: TenantScope resolved for this request
    - g.session_context: the full SessionContext

    Operators may pass ?tenant_id=<id> to narrow their Unscoped scope to one
    tenant. The parameter is ignored for everyone else.

    Raises AuthenticationError (401) for a missing, invalid or expired token
    and the TenantAccessError family (403) when the scope cannot be resolved.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            raise AuthenticationError("Authentication required")

        token = auth_header.split(" ", 1)[1].strip()
        context = session_service.validate_session(token)
        if not context:
            raise AuthenticationError("Invalid or expired token")

        principal = context.principal
        try:
            scope = tenant_service.resolve(principal)
        except TenantAccessError as exc:
            current_app.logger.warning(
                "Tenant resolution failed for account %s: %s", principal.account_id, exc.code
            )
            permission_service.log_security_event(
                account_id=principal.account_id,
                event_type="TENANT_RESOLUTION_FAILED",
                success=False,
                resource=request.path,
                action=request.method,
                reason=exc.code,
                tenant_id=None if isinstance(exc, TenantNotFoundError) else principal.tenant_id,
                **_client_context(),
            )
            raise

        tenant_arg = request.args.get("tenant_id")
        if tenant_arg and scope.is_unscoped:
            scope = tenant_service.narrow_for_operator(scope, parse_int(tenant_arg, "tenant_id"))

        g.current_account = context.account
        g.principal = principal
        g.scope = scope
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_policy(resource: str, action: str):
    """
    Admit the request only if the policy table allows (resource, action)
    for the caller's role. Must be applied after @require_auth.

    Denials are logged to security_events with tenant context.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                raise AuthenticationError("Authentication required")

            try:
                permission_service.require(principal, resource, action)
            except PermissionDeniedError:
                current_app.logger.warning(
                    "Permission denied: account %s (%s) on %s.%s",
                    principal.account_id, principal.role, resource, action,
                )
                permission_service.log_security_event(
                    account_id=principal.account_id,
                    event_type="PERMISSION_DENIED",
                    success=False,
                    resource=request.path,
                    action=f"{resource}.{action}",
                    reason=f"Role {principal.role} not permitted",
                    tenant_id=principal.tenant_id,
                    **_client_context(),
                )
                raise

            return f(*args, **kwargs)

        return decorated_function
    return decorator

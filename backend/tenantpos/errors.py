# Overview: Domain error taxonomy shared by services and the HTTP boundary.

"""
Domain errors with stable identifiers.

Every failure a service can report is one of these classes. Each class
carries a stable `code` (returned to clients as the `error` field) and the
HTTP status the boundary maps it to. Services raise them; the error handlers
registered in `create_app` render them into the response envelope:

    {"success": false, "message": "...", "error": "<code>"}

STATUS MAP:
- AuthenticationFailure ............................ 401
- AuthorizationFailure, Tenant* .................... 403
- NotFound, ShiftNotFound .......................... 404
- ValidationFailure, InvalidAmount ................. 400
- AlreadyDeleted, NotDeleted, EntityDeleted,
  ShiftAlreadyOpen, ShiftNotOpen, ShiftNotActive ... 400
- DependencyExists ................................. 400 (with count)
- Conflict, ConflictWithDeleted .................... 400
- TransientStoreFailure ............................ 500
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all failures reported to API callers."""

    code = "DomainError"
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: str | None = None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {
            "success": False,
            "message": self.message,
            "error": self.code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


# -- Authentication / authorization --

class AuthenticationError(DomainError):
    code = "AuthenticationFailure"
    status_code = 401
    default_message = "Invalid credentials"


class PermissionDeniedError(DomainError):
    code = "AuthorizationFailure"
    status_code = 403
    default_message = "Permission denied"


# -- Tenant resolution --

class TenantAccessError(DomainError):
    """Tenant scope could not be established. Terminal, never retried."""
    code = "TenantAccessDenied"
    status_code = 403
    default_message = "Tenant access denied"


class TenantMissingError(TenantAccessError):
    code = "TenantMissing"
    default_message = "Account is not associated with any tenant"


class TenantNotFoundError(TenantAccessError):
    code = "TenantNotFound"
    default_message = "Tenant not found"


class TenantInactiveError(TenantAccessError):
    code = "TenantInactive"
    default_message = "Tenant is deactivated. Contact support."


# -- Lookups --

class NotFoundError(DomainError):
    """Entity absent or outside the caller's scope (never distinguished)."""
    code = "NotFound"
    status_code = 404
    default_message = "Not found"


class ShiftNotFoundError(NotFoundError):
    code = "ShiftNotFound"
    default_message = "Shift not found"


# -- Input validation --

class ValidationError(DomainError):
    """400-level input problem, optionally tied to one field."""
    code = "ValidationFailure"
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, field: str | None = None, **details):
        if field is not None:
            details["field"] = field
        super().__init__(message, **details)
        self.field = field


class InvalidAmountError(ValidationError):
    code = "InvalidAmount"
    default_message = "Amount must be zero or greater"


# -- Uniqueness --

class ConflictError(DomainError):
    """A non-deleted entity in the same tenant already holds the key."""
    code = "Conflict"
    status_code = 400
    default_message = "An entity with that value already exists"


class ConflictWithDeletedError(ConflictError):
    """Only a soft-deleted entity holds the key; caller may restore it instead."""
    code = "ConflictWithDeleted"
    default_message = "A deleted entity with that value exists. Restore it instead of creating a new one."


# -- Lifecycle / state machine --

class StateConflictError(DomainError):
    code = "StateConflict"
    status_code = 400


class AlreadyDeletedError(StateConflictError):
    code = "AlreadyDeleted"
    default_message = "Entity is already deleted"


class NotDeletedError(StateConflictError):
    code = "NotDeleted"
    default_message = "Entity is not deleted"


class EntityDeletedError(StateConflictError):
    code = "EntityDeleted"
    default_message = "Entity is deleted. Restore it first."


class ShiftAlreadyOpenError(StateConflictError):
    code = "ShiftAlreadyOpen"
    default_message = "Account already has an open shift"


class ShiftNotOpenError(StateConflictError):
    code = "ShiftNotOpen"
    default_message = "Shift is already closed"


class ShiftNotActiveError(StateConflictError):
    code = "ShiftNotActive"
    default_message = "Shift is not active"


class DependencyExistsError(DomainError):
    code = "DependencyExists"
    status_code = 400

    def __init__(self, count: int, message: str | None = None):
        self.count = count
        super().__init__(
            message or f"Operation blocked: {count} dependent record(s) still reference this entity",
            count=count,
        )


# -- Infrastructure --

class TransientStoreError(DomainError):
    """Storage unavailable or timed out. Safe for the caller to retry."""
    code = "TransientStoreFailure"
    status_code = 500
    default_message = "Storage temporarily unavailable. Please retry."

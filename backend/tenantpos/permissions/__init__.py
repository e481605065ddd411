# Overview: Role and policy package.
# Re-exports the public APIs used by services and routes.

from .roles import Role, ALL_ROLES, STAFF_ROLES
from .policy import POLICY, required_roles

__all__ = [
    "Role",
    "ALL_ROLES",
    "STAFF_ROLES",
    "POLICY",
    "required_roles",
]

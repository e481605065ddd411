# Overview: Declarative (resource, action) -> allowed roles table.

"""
Authorization policy.

One static table drives every role check: routes name the (resource,
action) they perform and the gate looks the requirement up here. Nothing
outside this table decides which roles may do what.

OPERATOR appears only on tenant administration and on observing actions
(staff administration, reports). It is never implied for tenant business
writes: an operator does not create catalog data, shifts or sales.
"""

from .roles import Role

_ANY_STAFF = frozenset({Role.OWNER, Role.SUPERVISOR, Role.CASHIER})
_MANAGERS = frozenset({Role.OWNER, Role.SUPERVISOR})
_ADMINISTRATORS = frozenset({Role.OPERATOR, Role.OWNER})


POLICY: dict[tuple[str, str], frozenset[str]] = {
    # Tenant administration (cross-tenant)
    ("tenants", "list"): frozenset({Role.OPERATOR}),
    ("tenants", "read"): frozenset({Role.OPERATOR}),
    ("tenants", "create"): frozenset({Role.OPERATOR}),
    ("tenants", "update"): frozenset({Role.OPERATOR}),
    ("tenants", "toggle_active"): frozenset({Role.OPERATOR}),

    # Staff accounts (listing is the staff directory every member may see)
    ("accounts", "list"): frozenset({Role.OPERATOR}) | _ANY_STAFF,
    ("accounts", "read"): frozenset({Role.OPERATOR}) | _ANY_STAFF,
    ("accounts", "create"): _ADMINISTRATORS,
    ("accounts", "update"): _ADMINISTRATORS,
    ("accounts", "toggle_active"): _ADMINISTRATORS,
    ("accounts", "delete"): _ADMINISTRATORS,
    ("accounts", "restore"): _ADMINISTRATORS,

    # Catalog
    ("categories", "list"): _ANY_STAFF,
    ("categories", "read"): _ANY_STAFF,
    ("categories", "create"): _MANAGERS,
    ("categories", "update"): _MANAGERS,
    ("categories", "toggle_active"): _MANAGERS,
    ("categories", "delete"): _MANAGERS,
    ("categories", "restore"): _MANAGERS,

    ("catalog_items", "list"): _ANY_STAFF,
    ("catalog_items", "read"): _ANY_STAFF,
    ("catalog_items", "create"): _MANAGERS,
    ("catalog_items", "update"): _MANAGERS,
    ("catalog_items", "toggle_active"): _MANAGERS,
    ("catalog_items", "delete"): _MANAGERS,
    ("catalog_items", "restore"): _MANAGERS,

    ("service_types", "list"): _ANY_STAFF,
    ("service_types", "read"): _ANY_STAFF,
    ("service_types", "create"): _MANAGERS,
    ("service_types", "update"): _MANAGERS,
    ("service_types", "toggle_active"): _MANAGERS,
    ("service_types", "delete"): _MANAGERS,
    ("service_types", "restore"): _MANAGERS,

    # Shifts
    ("shifts", "list"): _ANY_STAFF,
    ("shifts", "read"): _ANY_STAFF,
    ("shifts", "start"): _ANY_STAFF,
    ("shifts", "close"): _ANY_STAFF,

    # Sales
    ("sales", "list"): _ANY_STAFF,
    ("sales", "read"): _ANY_STAFF,
    ("sales", "create"): _ANY_STAFF,
    ("sales", "void"): _MANAGERS,

    # Reports
    ("reports", "read"): frozenset({Role.OPERATOR, Role.OWNER, Role.SUPERVISOR}),
}


def required_roles(resource: str, action: str) -> frozenset[str]:
    """
    Roles admitted for (resource, action).

    Raises KeyError for a pair missing from the table: an unregistered
    action is a programming error, not a runtime deny.
    """
    return POLICY[(resource, action)]

# Overview: Account role constants.


class Role:
    """
    Account roles.

    OPERATOR is the cross-tenant role that administers tenants themselves.
    It carries no tenant binding. The remaining roles are tenant staff.
    """
    OPERATOR = "operator"
    OWNER = "owner"
    SUPERVISOR = "supervisor"
    CASHIER = "cashier"


ALL_ROLES = frozenset({Role.OPERATOR, Role.OWNER, Role.SUPERVISOR, Role.CASHIER})

# Roles that may be assigned through the API (operators are provisioned via CLI)
STAFF_ROLES = frozenset({Role.OWNER, Role.SUPERVISOR, Role.CASHIER})

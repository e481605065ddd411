# Overview: Pytest coverage for the authorization gate and policy table.

"""
Authorization Tests

The policy table is the only place role requirements live. These tests pin
the rules that matter for tenant isolation and check that the gate runs
before any scoped lookup.
"""

import pytest

from tenantpos.errors import PermissionDeniedError
from tenantpos.models import SecurityEvent
from tenantpos.permissions import ALL_ROLES, POLICY, Role, required_roles
from tenantpos.services import permission_service
from tenantpos.services.tenant_service import Principal


def _principal(role, tenant_id=1):
    return Principal(account_id=1, role=role, tenant_id=None if role == Role.OPERATOR else tenant_id)


class TestAuthorize:
    """permission_service.authorize() is a pure membership check."""

    @pytest.mark.parametrize("role,allowed", [
        (Role.OWNER, True),
        (Role.SUPERVISOR, True),
        (Role.CASHIER, False),
        (Role.OPERATOR, False),
    ])
    def test_membership(self, role, allowed):
        roles = frozenset({Role.OWNER, Role.SUPERVISOR})
        assert permission_service.authorize(_principal(role), roles) is allowed

    def test_require_raises_with_required_roles(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            permission_service.require(_principal(Role.CASHIER), "categories", "create")
        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "AuthorizationFailure"
        assert exc_info.value.details["required_roles"] == ["owner", "supervisor"]

    def test_unknown_action_is_a_programming_error(self):
        with pytest.raises(KeyError):
            required_roles("categories", "explode")


class TestPolicyTable:
    """Static policy content."""

    def test_every_entry_names_known_roles(self):
        for key, roles in POLICY.items():
            assert roles, key
            assert roles <= ALL_ROLES, key

    def test_tenant_administration_is_operator_only(self):
        for (resource, action), roles in POLICY.items():
            if resource == "tenants":
                assert roles == frozenset({Role.OPERATOR}), action

    @pytest.mark.parametrize("resource,action", [
        ("categories", "create"),
        ("catalog_items", "create"),
        ("service_types", "create"),
        ("shifts", "start"),
        ("shifts", "close"),
        ("sales", "create"),
        ("sales", "void"),
    ])
    def test_operator_not_implied_for_business_writes(self, resource, action):
        assert Role.OPERATOR not in required_roles(resource, action)

    def test_operator_administers_staff(self):
        assert Role.OPERATOR in required_roles("accounts", "create")
        assert Role.OPERATOR in required_roles("accounts", "list")

    def test_cashier_cannot_manage_staff_or_catalog(self):
        for key in [("accounts", "create"), ("accounts", "delete"), ("categories", "delete")]:
            assert Role.CASHIER not in required_roles(*key)


class TestRouteGate:
    """Gate behaviour through the HTTP surface."""

    def test_missing_token_is_401(self, client, db_session):
        response = client.get("/api/categories")
        assert response.status_code == 401
        body = response.get_json()
        assert body == {"success": False, "message": "Authentication required", "error": "AuthenticationFailure"}

    def test_garbage_token_is_401(self, client, db_session):
        response = client.get("/api/categories", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_cashier_denied_category_create_and_logged(
        self, client, db_session, tenant_a, cashier_a, auth_headers
    ):
        response = client.post("/api/categories", json={"name": "Snacks"}, headers=auth_headers(cashier_a))

        assert response.status_code == 403
        assert response.get_json()["error"] == "AuthorizationFailure"

        event = db_session.query(SecurityEvent).filter_by(event_type="PERMISSION_DENIED").one()
        assert event.account_id == cashier_a.id
        assert event.tenant_id == tenant_a.id
        assert event.action == "categories.create"

    def test_gate_runs_before_lookup(self, client, db_session, tenant_a, cashier_a, auth_headers):
        """A denied caller gets 403 even for an id that does not exist."""
        response = client.delete("/api/categories/99999", headers=auth_headers(cashier_a))
        assert response.status_code == 403

    def test_cashier_may_read_catalog(self, client, db_session, tenant_a, cashier_a, category_a, auth_headers):
        response = client.get("/api/categories", headers=auth_headers(cashier_a))
        assert response.status_code == 200

    def test_owner_cannot_reach_tenant_admin(self, client, db_session, tenant_a, owner_a, auth_headers):
        response = client.get("/api/tenants", headers=auth_headers(owner_a))
        assert response.status_code == 403

    def test_operator_cannot_open_shift(self, client, db_session, tenant_a, cashier_a, operator, auth_headers):
        response = client.post(
            f"/api/shifts/start?tenant_id={tenant_a.id}",
            json={"accountId": cashier_a.id, "openingCash": 10},
            headers=auth_headers(operator),
        )
        assert response.status_code == 403

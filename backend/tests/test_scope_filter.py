# Overview: Pytest coverage for tenant scoping, visibility, scoped uniqueness and pagination.

"""
Scope Filter Tests

CRITICAL: Every read of tenant-owned data is restricted to the caller's
scope. A foreign-tenant id must look exactly like a missing one.
"""

import pytest

from tenantpos.errors import ConflictError, ConflictWithDeletedError, NotFoundError, ValidationError
from tenantpos.models import Account, Category
from tenantpos.services import catalog_service, lifecycle_service, scope_service
from tenantpos.services.scope_service import CollectionQuery, Visibility
from tenantpos.services.tenant_service import TenantScope

from conftest import scope_for


class TestVisibility:
    """show_deleted parsing and filtering."""

    @pytest.mark.parametrize("raw,expected", [
        (None, Visibility.ACTIVE),
        ("", Visibility.ACTIVE),
        ("false", Visibility.ACTIVE),
        ("only", Visibility.DELETED),
        ("TRUE", Visibility.ALL),
    ])
    def test_parse(self, raw, expected):
        assert scope_service.parse_visibility(raw) is expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValidationError) as exc_info:
            scope_service.parse_visibility("maybe")
        assert exc_info.value.field == "show_deleted"

    def test_listing_by_visibility(self, db_session, tenant_a, owner_a):
        scope = scope_for(owner_a)
        live = catalog_service.create_category(scope, "Drinks")
        gone = catalog_service.create_category(scope, "Snacks")
        catalog_service.delete_category(scope, gone.id)

        def names(visibility):
            return {c.name for c in catalog_service.list_categories(scope, visibility=visibility).all()}

        assert names(Visibility.ACTIVE) == {"Drinks"}
        assert names(Visibility.DELETED) == {"Snacks"}
        assert names(Visibility.ALL) == {"Drinks", "Snacks"}
        assert live.deleted_at is None


class TestTenantRestriction:
    """apply() and get_in_scope() never cross tenants."""

    def test_listing_is_restricted(self, db_session, owner_a, category_a, category_b):
        rows = catalog_service.list_categories(scope_for(owner_a)).all()
        assert [row.id for row in rows] == [category_a.id]

    def test_restriction_survives_conflicting_predicates(self, db_session, owner_a, category_a, category_b):
        """A caller-supplied tenant filter cannot widen the scope."""
        collection = CollectionQuery(Category).filter_by(tenant_id=category_b.tenant_id)
        assert scope_service.apply(scope_for(owner_a), collection).all() == []

    def test_unscoped_sees_every_tenant(self, db_session, category_a, category_b):
        rows = scope_service.apply(TenantScope.unscoped(), CollectionQuery(Category)).all()
        assert {row.id for row in rows} == {category_a.id, category_b.id}

    def test_foreign_id_is_not_found(self, db_session, owner_a, category_b):
        with pytest.raises(NotFoundError):
            catalog_service.get_category(scope_for(owner_a), category_b.id)

    def test_foreign_and_missing_ids_look_the_same(
        self, client, db_session, owner_a, category_b, auth_headers
    ):
        headers = auth_headers(owner_a)
        foreign = client.get(f"/api/categories/{category_b.id}", headers=headers)
        missing = client.get("/api/categories/99999", headers=headers)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.get_json() == missing.get_json()

    def test_foreign_update_does_not_touch_row(self, client, db_session, owner_a, category_b, auth_headers):
        response = client.put(
            f"/api/categories/{category_b.id}",
            json={"name": "Hijacked"},
            headers=auth_headers(owner_a),
        )
        assert response.status_code == 404
        db_session.refresh(category_b)
        assert category_b.name == "Drinks"


class TestScopedUniqueness:
    """check_unique() and the partial unique indexes."""

    def test_same_name_allowed_in_other_tenant(self, db_session, owner_b, category_a):
        category = catalog_service.create_category(scope_for(owner_b), "Drinks")
        assert category.tenant_id == owner_b.tenant_id

    def test_live_duplicate_is_conflict(self, db_session, owner_a, category_a):
        with pytest.raises(ConflictError) as exc_info:
            catalog_service.create_category(scope_for(owner_a), "Drinks")
        assert type(exc_info.value) is ConflictError
        assert exc_info.value.status_code == 400

    def test_deleted_duplicate_offers_restore(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)

        with pytest.raises(ConflictWithDeletedError) as exc_info:
            catalog_service.create_category(scope, "Drinks")
        assert exc_info.value.details["deleted_id"] == category_a.id
        assert exc_info.value.code == "ConflictWithDeleted"

    def test_rename_ignores_deleted_rows(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)
        other = catalog_service.create_category(scope, "Food")

        renamed = catalog_service.update_category(scope, other.id, {"name": "Drinks"})
        assert renamed.name == "Drinks"

    def test_rename_to_own_name_is_allowed(self, db_session, owner_a, category_a):
        updated = catalog_service.update_category(
            scope_for(owner_a), category_a.id, {"name": "Drinks", "description": "Cold"}
        )
        assert updated.description == "Cold"

    def test_unscoped_check_needs_tenant(self, db_session):
        with pytest.raises(ValidationError):
            scope_service.check_unique(TenantScope.unscoped(), Category, "name", "Drinks")

    def test_index_holds_without_precheck(self, db_session, monkeypatch, owner_a, category_a):
        """Two concurrent creates both pass the pre-check; the index rejects one."""
        monkeypatch.setattr(scope_service, "check_unique", lambda *args, **kwargs: None)

        with pytest.raises(ConflictError):
            catalog_service.create_category(scope_for(owner_a), "Drinks")

        live = db_session.query(Category).filter_by(tenant_id=owner_a.tenant_id, name="Drinks").all()
        assert len(live) == 1

    def test_duplicate_over_http_is_400(self, client, db_session, owner_a, category_a, auth_headers):
        headers = auth_headers(owner_a)
        response = client.post("/api/categories", json={"name": "Drinks"}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["error"] == "Conflict"

        client.delete(f"/api/categories/{category_a.id}", headers=headers)
        response = client.post("/api/categories", json={"name": "Drinks"}, headers=headers)
        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "ConflictWithDeleted"
        assert body["details"]["deleted_id"] == category_a.id


class TestStaffListing:
    """Account listings never include operators."""

    def test_operator_sees_staff_of_every_tenant(
        self, client, db_session, owner_a, cashier_a, owner_b, operator, auth_headers
    ):
        response = client.get("/api/accounts", headers=auth_headers(operator))

        assert response.status_code == 200
        emails = {row["email"] for row in response.get_json()["data"]}
        assert emails == {owner_a.email, cashier_a.email, owner_b.email}

    def test_cashier_sees_own_tenant_only(
        self, client, db_session, owner_a, cashier_a, owner_b, operator, auth_headers
    ):
        response = client.get("/api/accounts", headers=auth_headers(cashier_a))

        assert response.status_code == 200
        rows = response.get_json()["data"]
        assert {row["email"] for row in rows} == {owner_a.email, cashier_a.email}
        assert all(row["role"] != "operator" for row in rows)

    def test_operator_account_is_not_found_by_id(self, db_session, operator):
        from tenantpos.services import account_service

        with pytest.raises(NotFoundError):
            account_service.get_account(TenantScope.unscoped(), operator.id)

    def test_staff_query_applies_scope(self, db_session, owner_a, owner_b, operator):
        rows = scope_service.staff_query(scope_for(owner_a)).all()
        assert [row.id for row in rows] == [owner_a.id]
        assert db_session.query(Account).count() == 3


class TestPagination:
    """paginate() envelope."""

    def test_shape(self, db_session, tenant_a, owner_a):
        scope = scope_for(owner_a)
        for name in ("A", "B", "C", "D", "E"):
            catalog_service.create_category(scope, name)

        result = scope_service.paginate(catalog_service.list_categories(scope), page=2, limit=2)

        assert [row["name"] for row in result["data"]] == ["C", "D"]
        assert result["pagination"] == {"total": 5, "page": 2, "limit": 2, "totalPages": 3}

    def test_http_limit_is_capped(self, client, db_session, owner_a, category_a, auth_headers):
        response = client.get("/api/categories?limit=1000", headers=auth_headers(owner_a))
        assert response.get_json()["pagination"]["limit"] == 100

    def test_http_rejects_bad_page(self, client, db_session, owner_a, auth_headers):
        response = client.get("/api/categories?page=0", headers=auth_headers(owner_a))
        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationFailure"

# Overview: Pytest coverage for the soft-delete lifecycle and dependency blocking.

"""
Lifecycle Tests

STATE MACHINE: ACTIVE <-> DELETED. deleted_at and is_active always move
together, dependencies block deletion with a count, and restore re-checks
the uniqueness key.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from tenantpos.errors import (
    AlreadyDeletedError,
    ConflictError,
    DependencyExistsError,
    EntityDeletedError,
    NotDeletedError,
    NotFoundError,
)
from tenantpos.models import Account, CatalogItem, Category
from tenantpos.models.mixins import LifecycleState
from tenantpos.services import account_service, catalog_service, lifecycle_service, sale_service, shift_service
from tenantpos.time_utils import utcnow

from conftest import principal_for, scope_for


class TestTransitions:
    """delete / restore / toggle_active"""

    def test_delete_then_restore_round_trip(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)

        deleted = lifecycle_service.delete_entity(scope, Category, category_a.id)
        assert deleted.lifecycle_state == LifecycleState.DELETED
        assert deleted.is_active is False
        assert deleted.deleted_at is not None

        restored = lifecycle_service.restore_entity(scope, Category, category_a.id)
        assert restored.lifecycle_state == LifecycleState.ACTIVE
        assert restored.is_active is True
        assert restored.deleted_at is None

    def test_restore_reactivates_inactive_entity(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.toggle_active(scope, Category, category_a.id)
        lifecycle_service.delete_entity(scope, Category, category_a.id)

        restored = lifecycle_service.restore_entity(scope, Category, category_a.id)
        assert restored.is_active is True

    def test_delete_twice(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)
        with pytest.raises(AlreadyDeletedError):
            lifecycle_service.delete_entity(scope, Category, category_a.id)

    def test_restore_live_entity(self, db_session, owner_a, category_a):
        with pytest.raises(NotDeletedError):
            lifecycle_service.restore_entity(scope_for(owner_a), Category, category_a.id)

    def test_toggle_deleted_entity(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)
        with pytest.raises(EntityDeletedError):
            lifecycle_service.toggle_active(scope, Category, category_a.id)

    def test_toggle_flips_flag(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        assert lifecycle_service.toggle_active(scope, Category, category_a.id).is_active is False
        assert lifecycle_service.toggle_active(scope, Category, category_a.id).is_active is True

    def test_foreign_entity_is_not_found(self, db_session, owner_a, category_b):
        with pytest.raises(NotFoundError):
            lifecycle_service.delete_entity(scope_for(owner_a), Category, category_b.id)
        db_session.refresh(category_b)
        assert category_b.deleted_at is None

    def test_state_errors_are_400(self):
        for error_class in (AlreadyDeletedError, NotDeletedError, EntityDeletedError):
            assert error_class.status_code == 400


class TestDependencies:
    """Dependent rows block deletion with a count."""

    def test_category_with_active_item(self, db_session, owner_a, category_a, make_item):
        scope = scope_for(owner_a)
        item = make_item(category_a, "Cola", 250)

        with pytest.raises(DependencyExistsError) as exc_info:
            lifecycle_service.delete_entity(scope, Category, category_a.id)
        assert exc_info.value.count == 1
        db_session.refresh(category_a)
        assert category_a.deleted_at is None

        lifecycle_service.toggle_active(scope, CatalogItem, item.id)
        deleted = lifecycle_service.delete_entity(scope, Category, category_a.id)
        assert deleted.is_deleted

    def test_category_deactivation_is_blocked_too(self, db_session, owner_a, category_a, make_item):
        make_item(category_a, "Cola", 250)
        make_item(category_a, "Water", 100)

        with pytest.raises(DependencyExistsError) as exc_info:
            lifecycle_service.toggle_active(scope_for(owner_a), Category, category_a.id)
        assert exc_info.value.count == 2

    def test_deleted_items_do_not_block(self, db_session, owner_a, category_a, make_item):
        scope = scope_for(owner_a)
        item = make_item(category_a, "Cola", 250)
        lifecycle_service.delete_entity(scope, CatalogItem, item.id)

        assert lifecycle_service.dependency_count(category_a) == 0
        lifecycle_service.delete_entity(scope, Category, category_a.id)

    def test_item_with_sale_on_open_shift(self, db_session, owner_a, cashier_a, category_a, make_item):
        scope = scope_for(cashier_a)
        cashier = principal_for(cashier_a)
        item = make_item(category_a, "Cola", 250)
        shift = shift_service.open_shift(scope, cashier, cashier_a.id, "50.00")
        sale_service.record_sale(
            scope, cashier, shift_id=shift.id, catalog_item_id=item.id, quantity=2, payment_method="cash"
        )

        with pytest.raises(DependencyExistsError) as exc_info:
            lifecycle_service.delete_entity(scope_for(owner_a), CatalogItem, item.id)
        assert exc_info.value.count == 1

        shift_service.close_shift(scope, cashier, shift.id, "55.00")
        assert lifecycle_service.delete_entity(scope_for(owner_a), CatalogItem, item.id).is_deleted

    def test_account_with_open_shift(self, db_session, owner_a, cashier_a):
        scope = scope_for(owner_a)
        shift_service.open_shift(scope, principal_for(owner_a), cashier_a.id, 0)

        with pytest.raises(DependencyExistsError):
            account_service.delete_account(scope, cashier_a.id)

    def test_dependency_error_over_http(self, client, db_session, owner_a, category_a, make_item, auth_headers):
        make_item(category_a, "Cola", 250)

        response = client.delete(f"/api/categories/{category_a.id}", headers=auth_headers(owner_a))

        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "DependencyExists"
        assert body["details"]["count"] == 1


class TestRestoreConflicts:
    """Restore re-checks the unique key against live rows."""

    def test_restore_blocked_by_live_name(self, db_session, owner_a, category_a, make_item):
        scope = scope_for(owner_a)
        cola = make_item(category_a, "Cola", 250)
        water = make_item(category_a, "Water", 100)

        lifecycle_service.delete_entity(scope, CatalogItem, cola.id)
        catalog_service.update_catalog_item(scope, water.id, {"name": "Cola"})

        with pytest.raises(ConflictError):
            lifecycle_service.restore_entity(scope, CatalogItem, cola.id)
        db_session.refresh(cola)
        assert cola.is_deleted

    def test_account_restore_without_conflict(self, db_session, owner_a, cashier_a):
        scope = scope_for(owner_a)
        account_service.delete_account(scope, cashier_a.id)
        account_service.create_account(
            scope, email="cashier-new@corner.test", name="New", role="cashier", password="secret123"
        )
        restored = account_service.restore_account(scope, cashier_a.id)
        assert restored.is_active


class TestEditingDeletedRows:
    """A deleted row must be restored before it can be edited."""

    def test_category_update(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)

        with pytest.raises(EntityDeletedError):
            catalog_service.update_category(scope, category_a.id, {"name": "Juices"})
        db_session.refresh(category_a)
        assert category_a.name == "Drinks"

    def test_catalog_item_update(self, db_session, owner_a, category_a, make_item):
        scope = scope_for(owner_a)
        cola = make_item(category_a, "Cola", 250)
        lifecycle_service.delete_entity(scope, CatalogItem, cola.id)

        with pytest.raises(EntityDeletedError):
            catalog_service.update_catalog_item(scope, cola.id, {"price": "9.99"})
        db_session.refresh(cola)
        assert cola.price_cents == 250

    def test_account_update(self, db_session, owner_a, cashier_a):
        scope = scope_for(owner_a)
        account_service.delete_account(scope, cashier_a.id)

        with pytest.raises(EntityDeletedError):
            account_service.update_account(scope, cashier_a.id, role="supervisor")
        db_session.refresh(cashier_a)
        assert cashier_a.role == "cashier"

    def test_restored_row_is_editable_again(self, db_session, owner_a, category_a):
        scope = scope_for(owner_a)
        lifecycle_service.delete_entity(scope, Category, category_a.id)
        lifecycle_service.restore_entity(scope, Category, category_a.id)

        updated = catalog_service.update_category(scope, category_a.id, {"name": "Juices"})
        assert updated.name == "Juices"

    def test_over_http(self, client, db_session, owner_a, category_a, auth_headers):
        headers = auth_headers(owner_a)
        client.delete(f"/api/categories/{category_a.id}", headers=headers)

        response = client.put(f"/api/categories/{category_a.id}", json={"name": "Juices"}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["error"] == "EntityDeleted"


class TestStorageGuards:
    """Check constraints keep the lifecycle consistent below the services."""

    def test_deleted_row_cannot_be_active(self, db_session, category_a):
        category_a.deleted_at = utcnow()
        category_a.is_active = True

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_staff_account_requires_tenant(self, db_session):
        db_session.add(Account(email="x@y.test", name="X", role="cashier", password_hash="x", is_active=True))

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

# Overview: Pytest coverage for service types and their link to catalog items.

"""
Service Type Tests

Service types are the third tenant-owned catalog resource: names unique per
tenant among live rows, soft delete with restore, and deletion blocked while
live catalog items are tagged with the type.
"""

import pytest

from tenantpos.errors import (
    ConflictError,
    ConflictWithDeletedError,
    DependencyExistsError,
    EntityDeletedError,
    NotFoundError,
    ValidationError,
)
from tenantpos.models import CatalogItem, ServiceType
from tenantpos.services import catalog_service, lifecycle_service

from conftest import scope_for


@pytest.fixture
def delivery(db_session, owner_a):
    return catalog_service.create_service_type(scope_for(owner_a), "Delivery", "Orders sent out", "truck")


class TestServiceTypes:
    def test_create(self, db_session, owner_a, delivery):
        assert delivery.tenant_id == owner_a.tenant_id
        assert delivery.to_dict()["icon"] == "truck"
        assert delivery.is_active

    def test_name_is_unique_per_tenant(self, db_session, owner_a, owner_b, delivery):
        with pytest.raises(ConflictError):
            catalog_service.create_service_type(scope_for(owner_a), " Delivery ")

        other = catalog_service.create_service_type(scope_for(owner_b), "Delivery")
        assert other.tenant_id == owner_b.tenant_id

    def test_deleted_duplicate_offers_restore(self, db_session, owner_a, delivery):
        scope = scope_for(owner_a)
        catalog_service.delete_service_type(scope, delivery.id)

        with pytest.raises(ConflictWithDeletedError) as exc_info:
            catalog_service.create_service_type(scope, "Delivery")
        assert exc_info.value.details["deleted_id"] == delivery.id

        restored = catalog_service.restore_service_type(scope, delivery.id)
        assert restored.is_active and not restored.is_deleted

    def test_update_and_clear_icon(self, db_session, owner_a, delivery):
        updated = catalog_service.update_service_type(
            scope_for(owner_a), delivery.id, {"name": "Takeaway", "icon": None}
        )
        assert updated.name == "Takeaway"
        assert updated.icon is None

    def test_deleted_type_cannot_be_edited(self, db_session, owner_a, delivery):
        scope = scope_for(owner_a)
        catalog_service.delete_service_type(scope, delivery.id)

        with pytest.raises(EntityDeletedError):
            catalog_service.update_service_type(scope, delivery.id, {"name": "Takeaway"})
        with pytest.raises(EntityDeletedError):
            catalog_service.toggle_service_type_active(scope, delivery.id)

    def test_foreign_type_is_not_found(self, db_session, owner_b, delivery):
        with pytest.raises(NotFoundError):
            catalog_service.get_service_type(scope_for(owner_b), delivery.id)


class TestTaggedItems:
    def test_item_carries_service_type(self, db_session, owner_a, category_a, delivery):
        item = catalog_service.create_catalog_item(
            scope_for(owner_a), name="Pizza", price="12.00", category_id=category_a.id, service_type_id=delivery.id
        )
        assert item.to_dict()["service_type_id"] == delivery.id

        listed = catalog_service.list_catalog_items(scope_for(owner_a), service_type_id=delivery.id).all()
        assert [row.id for row in listed] == [item.id]

    def test_inactive_or_foreign_type_rejected(self, db_session, owner_a, owner_b, category_a, delivery):
        foreign = catalog_service.create_service_type(scope_for(owner_b), "Dine-in")
        with pytest.raises(ValidationError) as exc_info:
            catalog_service.create_catalog_item(
                scope_for(owner_a), name="Pizza", price=12, category_id=category_a.id, service_type_id=foreign.id
            )
        assert exc_info.value.field == "service_type_id"

        catalog_service.toggle_service_type_active(scope_for(owner_a), delivery.id)
        with pytest.raises(ValidationError):
            catalog_service.create_catalog_item(
                scope_for(owner_a), name="Pizza", price=12, category_id=category_a.id, service_type_id=delivery.id
            )

    def test_tagged_items_block_delete(self, db_session, owner_a, category_a, make_item, delivery):
        scope = scope_for(owner_a)
        pizza = make_item(category_a, "Pizza", 1200)
        catalog_service.update_catalog_item(scope, pizza.id, {"service_type_id": delivery.id})

        with pytest.raises(DependencyExistsError) as exc_info:
            catalog_service.delete_service_type(scope, delivery.id)
        assert exc_info.value.details["count"] == 1
        assert db_session.get(ServiceType, delivery.id).deleted_at is None

        lifecycle_service.delete_entity(scope, CatalogItem, pizza.id)
        assert catalog_service.delete_service_type(scope, delivery.id).is_deleted

    def test_untagging_clears_link(self, db_session, owner_a, category_a, make_item, delivery):
        scope = scope_for(owner_a)
        pizza = make_item(category_a, "Pizza", 1200)
        catalog_service.update_catalog_item(scope, pizza.id, {"service_type_id": delivery.id})

        updated = catalog_service.update_catalog_item(scope, pizza.id, {"service_type_id": None})
        assert updated.service_type_id is None


class TestServiceTypeEndpoints:
    def test_crud(self, client, db_session, owner_a, auth_headers):
        headers = auth_headers(owner_a)

        response = client.post("/api/service-types", json={"name": "Delivery", "icon": "truck"}, headers=headers)
        assert response.status_code == 201
        service_type_id = response.get_json()["data"]["id"]

        response = client.put(
            f"/api/service-types/{service_type_id}", json={"description": "Orders sent out"}, headers=headers
        )
        assert response.get_json()["data"]["description"] == "Orders sent out"

        response = client.patch(f"/api/service-types/{service_type_id}/toggle-active", headers=headers)
        assert response.get_json()["data"]["is_active"] is False

        response = client.delete(f"/api/service-types/{service_type_id}", headers=headers)
        assert response.status_code == 200

        listed = client.get("/api/service-types?show_deleted=only", headers=headers).get_json()
        assert [row["id"] for row in listed["data"]] == [service_type_id]

        response = client.patch(f"/api/service-types/{service_type_id}/restore", headers=headers)
        assert response.get_json()["data"]["is_active"] is True

    def test_duplicate_name(self, client, db_session, owner_a, delivery, auth_headers):
        response = client.post("/api/service-types", json={"name": "Delivery"}, headers=auth_headers(owner_a))
        assert response.status_code == 400
        assert response.get_json()["error"] == "Conflict"

    def test_cashier_reads_but_cannot_write(self, client, db_session, cashier_a, delivery, auth_headers):
        headers = auth_headers(cashier_a)
        assert client.get("/api/service-types", headers=headers).status_code == 200
        response = client.post("/api/service-types", json={"name": "Dine-in"}, headers=headers)
        assert response.status_code == 403

    def test_item_accepts_camel_case_link(self, client, db_session, owner_a, category_a, delivery, auth_headers):
        response = client.post(
            "/api/catalog-items",
            json={"name": "Pizza", "price": "12.00", "categoryId": category_a.id, "serviceTypeId": delivery.id},
            headers=auth_headers(owner_a),
        )
        assert response.status_code == 201
        assert response.get_json()["data"]["service_type_id"] == delivery.id

"""
Pytest fixtures for tenantpos backend tests.

Provides the test application, per-test table cleanup, two isolated tenants
with staff in every role, an operator, a small catalog, and helpers for
bearer-token requests.
"""

import pytest

from tenantpos import create_app
from tenantpos.config import TestConfig
from tenantpos.extensions import db
from tenantpos.models import Account, CatalogItem, Category, Tenant
from tenantpos.permissions import Role
from tenantpos.services import session_service
from tenantpos.services.auth_service import hash_password
from tenantpos.services.tenant_service import Principal, TenantScope

PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_tenant(session, name, slug, is_active=True):
    tenant = Tenant(name=name, slug=slug, tier="basic", is_active=is_active)
    session.add(tenant)
    session.commit()
    return tenant


def _make_account(session, tenant, email, role, name=None):
    account = Account(
        tenant_id=tenant.id if tenant is not None else None,
        email=email,
        name=name or email.split("@")[0].title(),
        role=role,
        password_hash=hash_password(PASSWORD),
        is_active=True,
    )
    session.add(account)
    session.commit()
    return account


@pytest.fixture(scope='function')
def tenant_a(db_session):
    """Tenant A (first business)."""
    return _make_tenant(db_session, "Tenant A - Corner Shop", "corner-shop")


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Tenant B (second business)."""
    return _make_tenant(db_session, "Tenant B - Beta Cafe", "beta-cafe")


@pytest.fixture(scope='function')
def owner_a(db_session, tenant_a):
    return _make_account(db_session, tenant_a, "owner@corner.test", Role.OWNER)


@pytest.fixture(scope='function')
def supervisor_a(db_session, tenant_a):
    return _make_account(db_session, tenant_a, "supervisor@corner.test", Role.SUPERVISOR)


@pytest.fixture(scope='function')
def cashier_a(db_session, tenant_a):
    return _make_account(db_session, tenant_a, "cashier@corner.test", Role.CASHIER)


@pytest.fixture(scope='function')
def cashier_a2(db_session, tenant_a):
    return _make_account(db_session, tenant_a, "cashier2@corner.test", Role.CASHIER)


@pytest.fixture(scope='function')
def owner_b(db_session, tenant_b):
    return _make_account(db_session, tenant_b, "owner@beta.test", Role.OWNER)


@pytest.fixture(scope='function')
def cashier_b(db_session, tenant_b):
    return _make_account(db_session, tenant_b, "cashier@beta.test", Role.CASHIER)


@pytest.fixture(scope='function')
def operator(db_session):
    """Cross-tenant operator (no tenant binding)."""
    return _make_account(db_session, None, "ops@tenantpos.test", Role.OPERATOR)


@pytest.fixture(scope='function')
def category_a(db_session, tenant_a):
    category = Category(tenant_id=tenant_a.id, name="Drinks", is_active=True)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def category_b(db_session, tenant_b):
    category = Category(tenant_id=tenant_b.id, name="Drinks", is_active=True)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory: make_item(category, name, price_cents)."""
    def _make(category, name, price_cents):
        item = CatalogItem(
            tenant_id=category.tenant_id,
            category_id=category.id,
            name=name,
            price_cents=price_cents,
            is_active=True,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def auth_headers(db_session):
    """Factory: auth_headers(account) -> Authorization header for a fresh session."""
    def _headers(account):
        _, token = session_service.create_session(account)
        return {"Authorization": f"Bearer {token}"}
    return _headers


def principal_for(account) -> Principal:
    return Principal(account_id=account.id, role=account.role, tenant_id=account.tenant_id)


def scope_for(account) -> TenantScope:
    if account.role == Role.OPERATOR:
        return TenantScope.unscoped()
    return TenantScope.scoped(account.tenant_id)

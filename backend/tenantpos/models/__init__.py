from .mixins import LifecycleState, SoftDeleteMixin
from .tenancy import Tenant, TENANT_TIERS
from .auth import Account, SessionToken
from .catalog import Category, CatalogItem, ServiceType
from .shifts import Shift, SHIFT_OPEN, SHIFT_CLOSED
from .sales import Sale, SALE_COMPLETED, SALE_VOIDED, PAYMENT_CASH, PAYMENT_CARD, PAYMENT_METHODS
from .security import SecurityEvent

__all__ = [
    'LifecycleState', 'SoftDeleteMixin',
    'Tenant', 'TENANT_TIERS',
    'Account', 'SessionToken',
    'Category', 'CatalogItem', 'ServiceType',
    'Shift', 'SHIFT_OPEN', 'SHIFT_CLOSED',
    'Sale', 'SALE_COMPLETED', 'SALE_VOIDED', 'PAYMENT_CASH', 'PAYMENT_CARD', 'PAYMENT_METHODS',
    'SecurityEvent',
]

# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso a la persistencia (archivos JSON).
# Otra implementación (base de datos) solo tiene que cumplir las interfaces.
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos (contratos)
# ├── base.py                 → Clases base JSON (DictRepository, ListRepository)
# ├── catalog_repository.py   → products / categories / extras /
# │                             delivery_areas / payment_methods .json
# ├── order_repository.py     → orders / order_items / order_item_extras .json
# ├── settings_repository.py  → company_settings.json
# └── audit_repository.py     → activity.json
# ==============================================================================

# Interfaces
from app_pedidos.repositories.interfaces import (
    ICatalogRepository,
    IOrderRepository,
    ISettingsRepository,
    IAuditRepository,
)

# Implementaciones JSON
from app_pedidos.repositories.base import BaseRepository, DictRepository, ListRepository
from app_pedidos.repositories.catalog_repository import (
    CatalogRepository,
    ProductRepository,
    CategoryRepository,
    ExtraRepository,
    DeliveryAreaRepository,
    PaymentMethodRepository,
)
from app_pedidos.repositories.order_repository import OrderRepository
from app_pedidos.repositories.settings_repository import SettingsRepository
from app_pedidos.repositories.audit_repository import AuditRepository

__all__ = [
    # Interfaces
    'ICatalogRepository',
    'IOrderRepository',
    'ISettingsRepository',
    'IAuditRepository',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',

    # Implementaciones JSON
    'CatalogRepository',
    'ProductRepository',
    'CategoryRepository',
    'ExtraRepository',
    'DeliveryAreaRepository',
    'PaymentMethodRepository',
    'OrderRepository',
    'SettingsRepository',
    'AuditRepository',
]

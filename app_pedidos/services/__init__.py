# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Los servicios dependen de las interfaces de repositorio, nunca de los
# archivos JSON directamente.
#
# ESTRUCTURA:
# ├── catalog_service.py       → Cardápio y administración del catálogo
# ├── cart_service.py          → Carrito de la sesión
# ├── checkout_service.py      → Carrito -> pedido (WhatsApp / comanda)
# ├── ticket_service.py        → Comanda de cocina en texto plano
# ├── order_service.py         → Tablero de pedidos y transiciones
# ├── dashboard_service.py     → Indicadores del panel
# ├── settings_service.py      → Configuración de la empresa
# ├── notification_service.py  → Eventos de pedidos (publish/subscribe)
# └── audit_service.py         → Registro de actividad
# ==============================================================================

from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.notification_service import NotificationService
from app_pedidos.services.catalog_service import CatalogService
from app_pedidos.services.settings_service import SettingsService
from app_pedidos.services.cart_service import CartService
from app_pedidos.services.ticket_service import TicketService
from app_pedidos.services.checkout_service import CheckoutService, CheckoutRequest, CheckoutResult
from app_pedidos.services.order_service import OrderService
from app_pedidos.services.dashboard_service import DashboardService

__all__ = [
    'AuditService',
    'NotificationService',
    'CatalogService',
    'SettingsService',
    'CartService',
    'TicketService',
    'CheckoutService',
    'CheckoutRequest',
    'CheckoutResult',
    'OrderService',
    'DashboardService',
]

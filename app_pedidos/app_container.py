# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Punto único donde se crean repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (un directorio de datos temporal por test)
#   - Cambiar el almacenamiento sin tocar los servicios
#
# ═══════════════════════════════════════════════════════════════════════════════
# OTRO ALMACENAMIENTO
# ═══════════════════════════════════════════════════════════════════════════════
#
# Para usar una base de datos en lugar de JSON:
#
# 1. Crear repositorios que cumplan las interfaces de
#    repositories/interfaces.py (ICatalogRepository, IOrderRepository, ...)
# 2. Instanciarlos en las propiedades de este archivo
# 3. Los servicios NO requieren cambios
# ==============================================================================

import os
from typing import Optional

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS
# ═══════════════════════════════════════════════════════════════════════════════
from app_pedidos.repositories import (
    AuditRepository,
    CategoryRepository,
    DeliveryAreaRepository,
    ExtraRepository,
    OrderRepository,
    PaymentMethodRepository,
    ProductRepository,
    SettingsRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS
# ═══════════════════════════════════════════════════════════════════════════════
from app_pedidos.services import (
    AuditService,
    CartService,
    CatalogService,
    CheckoutService,
    DashboardService,
    NotificationService,
    OrderService,
    SettingsService,
    TicketService,
)


def default_data_dir() -> str:
    """Directorio de datos: PEDIDOS_DATA_DIR o app_pedidos/data."""
    return os.environ.get('PEDIDOS_DATA_DIR') or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), 'data')


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Singleton con creación perezosa de cada repositorio y servicio.

    Uso:
        container = AppContainer(base_path='/srv/pedidos/data')
        orders = container.order_service.list_orders(period='7d')
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: Optional[str] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: Optional[str] = None):
        """
        Args:
            base_path: Directorio de los archivos JSON
        """
        if self._initialized:
            return

        self._base_path = base_path or default_data_dir()
        self.reset()
        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self._base_path)
        return self._product_repo

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self._base_path)
        return self._category_repo

    @property
    def extra_repo(self) -> ExtraRepository:
        if self._extra_repo is None:
            self._extra_repo = ExtraRepository(self._base_path)
        return self._extra_repo

    @property
    def delivery_area_repo(self) -> DeliveryAreaRepository:
        if self._delivery_area_repo is None:
            self._delivery_area_repo = DeliveryAreaRepository(self._base_path)
        return self._delivery_area_repo

    @property
    def payment_method_repo(self) -> PaymentMethodRepository:
        if self._payment_method_repo is None:
            self._payment_method_repo = PaymentMethodRepository(self._base_path)
        return self._payment_method_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self._base_path)
        return self._order_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self._base_path)
        return self._settings_repo

    @property
    def audit_repo(self) -> AuditRepository:
        if self._audit_repo is None:
            self._audit_repo = AuditRepository(self._base_path)
        return self._audit_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def audit_service(self) -> AuditService:
        """Servicio de auditoría (singleton)."""
        if self._audit_service is None:
            self._audit_service = AuditService(self.audit_repo)
        return self._audit_service

    @property
    def notification_service(self) -> NotificationService:
        """Canal de eventos de pedidos (singleton)."""
        if self._notification_service is None:
            self._notification_service = NotificationService()
        return self._notification_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(
                self.product_repo,
                self.category_repo,
                self.extra_repo,
                self.delivery_area_repo,
                self.payment_method_repo,
                self.audit_service
            )
        return self._catalog_service

    @property
    def settings_service(self) -> SettingsService:
        if self._settings_service is None:
            self._settings_service = SettingsService(self.settings_repo, self.audit_service)
        return self._settings_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.catalog_service)
        return self._cart_service

    @property
    def ticket_service(self) -> TicketService:
        if self._ticket_service is None:
            self._ticket_service = TicketService()
        return self._ticket_service

    @property
    def checkout_service(self) -> CheckoutService:
        if self._checkout_service is None:
            self._checkout_service = CheckoutService(
                self.order_repo,
                self.catalog_service,
                self.settings_service,
                self.ticket_service,
                self.notification_service,
                self.audit_service
            )
        return self._checkout_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(
                self.order_repo,
                self.delivery_area_repo,
                self.notification_service,
                self.audit_service
            )
        return self._order_service

    @property
    def dashboard_service(self) -> DashboardService:
        if self._dashboard_service is None:
            def product_name(product_id: str) -> Optional[str]:
                record = self.product_repo.get_by_id(product_id)
                return record.get('name') if record else None

            self._dashboard_service = DashboardService(
                orders_loader=self.order_repo.list_orders,
                items_loader=self.order_repo.get_all_items,
                product_name_lookup=product_name
            )
        return self._dashboard_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """Descarta todas las instancias (se recrean al próximo acceso)."""
        self._product_repo = None
        self._category_repo = None
        self._extra_repo = None
        self._delivery_area_repo = None
        self._payment_method_repo = None
        self._order_repo = None
        self._settings_repo = None
        self._audit_repo = None

        self._audit_service = None
        self._notification_service = None
        self._catalog_service = None
        self._settings_service = None
        self._cart_service = None
        self._ticket_service = None
        self._checkout_service = None
        self._order_service = None
        self._dashboard_service = None

    @classmethod
    def get_instance(cls, base_path: Optional[str] = None) -> 'AppContainer':
        """
        Instancia singleton del contenedor.

        Args:
            base_path: Directorio de datos (solo se usa en la primera llamada)
        """
        if cls._instance is None:
            return cls(base_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: Optional[str] = None) -> AppContainer:
    """Contenedor de dependencias global."""
    return AppContainer.get_instance(base_path)

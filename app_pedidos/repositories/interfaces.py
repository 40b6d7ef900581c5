# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que cumplen los repositorios. Los servicios dependen
# de estas interfaces, no de los archivos JSON:
#
#   - El almacenamiento externo es un colaborador opaco: otra implementación
#     (base de datos hospedada, SQL) se conecta en app_container.py.
#   - Los tests pueden pasar objetos falsos que cumplan el protocolo.
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class ICatalogRepository(Protocol):
    """
    Colección del catálogo (productos, categorías, adicionales, barrios,
    formas de pago).
    """

    def list_all(self, sort_key: str = 'name') -> List[Dict[str, Any]]:
        """Todos los registros."""
        ...

    def list_active(self, sort_key: str = 'name') -> List[Dict[str, Any]]:
        """Registros activos."""
        ...

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Un registro por id."""
        ...

    def save_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Inserta o reemplaza un registro."""
        ...

    def delete(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Elimina un registro."""
        ...

    def find_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Busca por nombre sin distinguir mayúsculas."""
        ...


@runtime_checkable
class IOrderRepository(Protocol):
    """
    Pedidos, ítems y adicionales de ítem.
    """

    def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Inserta la fila del pedido."""
        ...

    def add_items(self, items: List[Dict[str, Any]]) -> None:
        """Inserta ítems del pedido."""
        ...

    def add_item_extras(self, extras: List[Dict[str, Any]]) -> None:
        """Inserta adicionales de ítems."""
        ...

    def update_status(self, order_id: str, status: str, updated_at: str) -> bool:
        """Escribe status y updated_at."""
        ...

    def delete_order(self, order_id: str) -> bool:
        """Elimina el pedido y sus dependientes."""
        ...

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Un pedido por id."""
        ...

    def list_orders(self) -> List[Dict[str, Any]]:
        """Pedidos, más recientes primero."""
        ...

    def get_items(self, order_id: str) -> List[Dict[str, Any]]:
        """Ítems del pedido con sus adicionales."""
        ...

    def get_all_items(self) -> List[Dict[str, Any]]:
        """Todos los ítems."""
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """
    Configuración de la empresa.
    """

    def load(self) -> Dict[str, Any]:
        """Configuración guardada."""
        ...

    def save(self, settings: Dict[str, Any]) -> None:
        """Reemplaza la configuración."""
        ...


@runtime_checkable
class IAuditRepository(Protocol):
    """
    Registro de actividad.
    """

    def load(self) -> List[Dict[str, Any]]:
        """Registros, más recientes primero."""
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Registra un evento."""
        ...

    def search_logs(
        self,
        query: str = '',
        log_type: Optional[str] = None,
        user: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Filtra la actividad."""
        ...

# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Tres archivos, uno por tabla:
#   orders.json             -> [{pedido}, ...]
#   order_items.json        -> [{ítem con order_id}, ...]
#   order_item_extras.json  -> [{adicional con order_item_id}, ...]
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from .base import ListRepository


class OrderItemRepository(ListRepository):
    """Filas de order_items.json."""

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'order_items.json'))


class OrderItemExtraRepository(ListRepository):
    """Filas de order_item_extras.json."""

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'order_item_extras.json'))


class OrderRepository(ListRepository):
    """
    Repositorio de pedidos con sus ítems y adicionales.

    Formato de orders.json:
    [
        {
            "id": "9b1c...",
            "customer_name": "Ana",
            "delivery_type": "delivery",
            "subtotal": 37.0,
            "delivery_fee": 8.0,
            "total": 45.0,
            "status": "pending",
            "order_type": "cliente",
            "created_at": "2024-01-01T10:00:00+00:00",
            ...
        }
    ]
    """

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, 'orders.json'))
        self.items = OrderItemRepository(base_path)
        self.item_extras = OrderItemExtraRepository(base_path)

    # =========================================================================
    # Escritura
    # =========================================================================

    def create_order(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Inserta la fila del pedido."""
        self.append(order)
        return order

    def add_items(self, items: List[Dict[str, Any]]) -> None:
        self.items.extend(items)

    def add_item_extras(self, extras: List[Dict[str, Any]]) -> None:
        self.item_extras.extend(extras)

    def update_status(self, order_id: str, status: str, updated_at: str) -> bool:
        """
        Escribe solo status y updated_at.

        Returns:
            True si el pedido existía
        """
        return self.update_where('id', order_id, {'status': status, 'updated_at': updated_at})

    def delete_order(self, order_id: str) -> bool:
        """
        Elimina el pedido junto con sus ítems y adicionales.

        Returns:
            True si el pedido existía
        """
        with self._file_lock:
            item_ids = {i.get('id') for i in self.items.find_all_by('order_id', order_id)}
            if item_ids:
                self.item_extras.remove_where(lambda e: e.get('order_item_id') in item_ids)
                self.items.remove_where(lambda i: i.get('order_id') == order_id)
            return self.remove_where(lambda o: o.get('id') == order_id) > 0

    # =========================================================================
    # Lectura
    # =========================================================================

    def get_order(self, order_id: str) -> Optional[Dict[str, Any]]:
        return self.find_by('id', order_id)

    def list_orders(self) -> List[Dict[str, Any]]:
        """Pedidos, más recientes primero."""
        return sorted(self.get_all(), key=lambda o: o.get('created_at') or '', reverse=True)

    def get_items(self, order_id: str) -> List[Dict[str, Any]]:
        """Ítems del pedido, cada uno con su lista 'extras'."""
        items = self.items.find_all_by('order_id', order_id)
        if not items:
            return []
        item_ids = {i.get('id') for i in items}
        extras_by_item: Dict[str, List[Dict[str, Any]]] = {}
        for extra in self.item_extras.get_all():
            if extra.get('order_item_id') in item_ids:
                extras_by_item.setdefault(extra['order_item_id'], []).append(extra)
        return [dict(item, extras=extras_by_item.get(item.get('id'), [])) for item in items]

    def get_all_items(self) -> List[Dict[str, Any]]:
        """Todas las filas de order_items (para estadísticas)."""
        return self.items.get_all()

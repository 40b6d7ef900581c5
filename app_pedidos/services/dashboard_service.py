# ==============================================================================
# SERVICIO DE DASHBOARD
# ==============================================================================
# Indicadores del panel calculados sobre todos los pedidos:
#   - total de pedidos, facturación, ticket medio
#   - conteo por estado
#   - productos más pedidos (top 5 por cantidad)
#   - pedidos por día (últimos 7 días)
#   - distribución de pedidos activos por estado
#   - delivery vs balcão
#
# La facturación suma el total de todos los pedidos registrados.
# ==============================================================================

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from app_pedidos.models.money import ZERO, money_to_json, to_decimal
from app_pedidos.models.order_status import status_label
from app_pedidos.services.order_service import parse_timestamp

TOP_PRODUCTS_LIMIT = 5
DAYS_IN_CHART = 7


def _percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


class DashboardService:
    """
    Servicio de indicadores.

    Los datos llegan por funciones inyectadas (loaders), así el cálculo no
    depende del almacenamiento.
    """

    def __init__(
        self,
        orders_loader: Optional[Callable[[], List[Dict[str, Any]]]] = None,
        items_loader: Optional[Callable[[], List[Dict[str, Any]]]] = None,
        product_name_lookup: Optional[Callable[[str], Optional[str]]] = None
    ):
        """
        Args:
            orders_loader: Función que retorna las filas de pedidos
            items_loader: Función que retorna las filas de ítems
            product_name_lookup: Nombre actual de un producto por id
        """
        self._orders_loader = orders_loader
        self._items_loader = items_loader
        self._product_name_lookup = product_name_lookup

    def _load_orders(self) -> List[Dict[str, Any]]:
        return self._orders_loader() if self._orders_loader else []

    def _load_items(self) -> List[Dict[str, Any]]:
        return self._items_loader() if self._items_loader else []

    def _product_name(self, item: Dict[str, Any]) -> str:
        name = item.get('product_name')
        if not name and self._product_name_lookup:
            name = self._product_name_lookup(str(item.get('product_id', '')))
        return name or 'Produto desconhecido'

    # =========================================================================
    # CÁLCULOS
    # =========================================================================

    @staticmethod
    def status_counts(orders: List[Dict[str, Any]]) -> Dict[str, int]:
        counts = OrderedDict((s, 0) for s in ('pending', 'preparing', 'ready', 'delivered', 'cancelled'))
        for order in orders:
            status = order.get('status')
            if status in counts:
                counts[status] += 1
        return dict(counts)

    def top_products(self, items: List[Dict[str, Any]],
                     limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict[str, Any]]:
        """Productos ordenados por cantidad vendida (mayor primero)."""
        stats: Dict[str, Dict[str, Any]] = {}
        for item in items:
            name = self._product_name(item)
            entry = stats.setdefault(name, {'name': name, 'quantity': 0, 'revenue': ZERO})
            entry['quantity'] += int(item.get('quantity') or 0)
            entry['revenue'] += to_decimal(item.get('total_price'))

        ranked = sorted(stats.values(), key=lambda e: e['quantity'], reverse=True)[:limit]
        return [
            {'name': e['name'], 'quantity': e['quantity'], 'revenue': money_to_json(e['revenue'])}
            for e in ranked
        ]

    @staticmethod
    def orders_by_day(orders: List[Dict[str, Any]], now: datetime,
                      days: int = DAYS_IN_CHART) -> List[Dict[str, Any]]:
        """Cantidad y facturación por día, del más antiguo al de hoy."""
        buckets = OrderedDict()
        for offset in range(days - 1, -1, -1):
            day = (now - timedelta(days=offset)).date()
            buckets[day] = {'date': day.strftime('%d/%m'), 'orders': 0, 'revenue': ZERO}

        for order in orders:
            created = parse_timestamp(order.get('created_at'))
            if created is None:
                continue
            day = created.astimezone(now.tzinfo).date() if now.tzinfo else created.date()
            if day in buckets:
                buckets[day]['orders'] += 1
                buckets[day]['revenue'] += to_decimal(order.get('total'))

        return [
            {'date': b['date'], 'orders': b['orders'], 'revenue': money_to_json(b['revenue'])}
            for b in buckets.values()
        ]

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def get_dashboard(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Indicadores completos del panel.

        Args:
            now: Instante de referencia (por defecto, ahora en UTC)
        """
        now = now or datetime.now(timezone.utc)
        orders = self._load_orders()
        items = self._load_items()

        total_orders = len(orders)
        total_revenue: Decimal = sum((to_decimal(o.get('total')) for o in orders), ZERO)
        average = total_revenue / total_orders if total_orders else ZERO

        counts = self.status_counts(orders)
        active_total = counts['pending'] + counts['preparing'] + counts['ready']
        orders_by_status = [
            {
                'status': status_label(status),
                'count': counts[status],
                'percentage': _percentage(counts[status], active_total),
            }
            for status in ('pending', 'preparing', 'ready')
        ]

        delivery_count = sum(1 for o in orders if o.get('delivery_type') == 'delivery')
        pickup_count = sum(1 for o in orders if o.get('delivery_type') == 'pickup')
        split_total = delivery_count + pickup_count

        return {
            'total_orders': total_orders,
            'total_revenue': money_to_json(total_revenue),
            'average_order_value': money_to_json(average),
            'status_counts': counts,
            'top_products': self.top_products(items),
            'orders_by_day': self.orders_by_day(orders, now),
            'orders_by_status': orders_by_status,
            'delivery_vs_pickup': [
                {'type': 'Delivery', 'count': delivery_count,
                 'percentage': _percentage(delivery_count, split_total)},
                {'type': 'Balcão', 'count': pickup_count,
                 'percentage': _percentage(pickup_count, split_total)},
            ],
        }

# ==============================================================================
# SERVICIO DE PEDIDOS - Tablero de estados
# ==============================================================================
# Listado con filtros, conteos por estado, transiciones (avanzar, retroceder,
# cancelar) y eliminación de pedidos.
#
# Una transición ilegal no es un error para el usuario: el servicio devuelve
# {'ok': False, 'changed': False} sin escribir nada.
# Ediciones concurrentes: gana la última escritura.
# ==============================================================================

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from app_pedidos.activity_logger import log_order_event
from app_pedidos.models import order_status
from app_pedidos.models.entities import ORDER_TYPE_LABELS, Order, derive_order_type, utc_now_iso
from app_pedidos.models.errors import IllegalTransitionError, NotFoundError, ValidationError
from app_pedidos.models.order_status import BOARD_STATUSES, OrderStatus
from app_pedidos.repositories.interfaces import ICatalogRepository, IOrderRepository
from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.notification_service import NotificationService

# Períodos del filtro del tablero
PERIODS = {
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    'all': None,
}
DEFAULT_PERIOD = '24h'


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO 8601 a datetime con zona (UTC si no tiene)."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def order_view(order: Order, include_items: bool = False) -> Dict[str, Any]:
    """Pedido serializado con la información de su estado."""
    d = order.to_dict(include_items=include_items)
    d['code'] = order.code
    d['order_type_label'] = ORDER_TYPE_LABELS.get(order.order_type, order.order_type)
    d['status_info'] = order_status.status_info(order.status).to_dict()
    return d


class OrderService:
    """
    Servicio del tablero de pedidos.
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        delivery_area_repo: Optional[ICatalogRepository] = None,
        notification_service: Optional[NotificationService] = None,
        audit_service: Optional[AuditService] = None
    ):
        self.order_repo = order_repo
        self.delivery_area_repo = delivery_area_repo
        self.notification_service = notification_service
        self.audit_service = audit_service

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_order(self, order_id: str) -> Order:
        """
        Pedido con sus ítems y el nombre del barrio.

        Raises:
            NotFoundError: Si no existe
        """
        record = self.order_repo.get_order(order_id)
        if not record:
            raise NotFoundError('Pedido não encontrado.')
        order = Order.from_dict(dict(record, items=self.order_repo.get_items(order_id)))
        if order.delivery_area_id and self.delivery_area_repo is not None:
            area = self.delivery_area_repo.get_by_id(order.delivery_area_id)
            order.delivery_area_name = area.get('name') if area else None
        return order

    def get_all_orders(self) -> List[Order]:
        """Todos los pedidos, más recientes primero (sin ítems)."""
        return [Order.from_dict(r) for r in self.order_repo.list_orders()]

    def list_orders(
        self,
        period: str = DEFAULT_PERIOD,
        status: Optional[str] = None,
        order_type: Optional[str] = None,
        search: str = '',
        now: Optional[datetime] = None
    ) -> List[Order]:
        """
        Pedidos filtrados, más recientes primero.

        Args:
            period: '24h', '7d', '30d' o 'all'
            status: Estado exacto ('all' o None = todos)
            order_type: 'cliente' / 'estabelecimento' ('all' o None = todos)
            search: Texto en nombre, teléfono, observación o id
            now: Instante de referencia para el período

        Raises:
            ValidationError: Período desconocido
        """
        if period not in PERIODS:
            raise ValidationError(f"Período inválido: {period}", field='period')

        orders = self.get_all_orders()

        window = PERIODS[period]
        if window is not None:
            since = (now or datetime.now(timezone.utc)) - window
            orders = [
                o for o in orders
                if (parse_timestamp(o.created_at) or since) >= since
            ]

        if status and status != 'all':
            orders = [o for o in orders if o.status == status]

        if order_type and order_type != 'all':
            orders = [o for o in orders
                      if derive_order_type(o.order_type, o.delivery_type) == order_type]

        term = (search or '').strip().lower()
        if term:
            orders = [
                o for o in orders
                if term in (o.customer_name or '').lower()
                or term in (o.customer_phone or '')
                or term in (o.notes or '').lower()
                or term in o.id.lower()
            ]

        orders.sort(key=lambda o: parse_timestamp(o.created_at) or datetime.min.replace(tzinfo=timezone.utc),
                    reverse=True)
        return orders

    @staticmethod
    def count_by_status(orders: List[Order]) -> Dict[str, int]:
        """Conteo por columna del tablero (los estados legacy no tienen columna)."""
        counts = {s.value: 0 for s in BOARD_STATUSES}
        for order in orders:
            if order.status in counts:
                counts[order.status] += 1
        return counts

    @staticmethod
    def summary(orders: List[Order]) -> Dict[str, int]:
        """
        Resumen del encabezado del tablero.
            active    = pending + preparing + ready
            completed = ready + delivered
            cancelled = cancelled
        """
        counts = OrderService.count_by_status(orders)
        return {
            'active': counts['pending'] + counts['preparing'] + counts['ready'],
            'completed': counts['ready'] + counts['delivered'],
            'cancelled': counts['cancelled'],
            'total': len(orders),
        }

    def board(self, **filters) -> Dict[str, Any]:
        """
        Tablero kanban: columnas por estado, conteos y resumen.
        Los pedidos con estado legacy o desconocido van en 'other'.
        """
        orders = self.list_orders(**filters)
        columns: Dict[str, List[Dict[str, Any]]] = {s.value: [] for s in BOARD_STATUSES}
        other = []
        for order in orders:
            view = order_view(order)
            columns.get(order.status, other).append(view)
        return {
            'columns': columns,
            'other': other,
            'counts': self.count_by_status(orders),
            'summary': self.summary(orders),
            'statuses': [order_status.status_info(s.value).to_dict() for s in BOARD_STATUSES],
        }

    # =========================================================================
    # TRANSICIONES
    # =========================================================================

    def change_status(self, order_id: str, action: str, user: str = 'admin') -> Dict[str, Any]:
        """
        Aplica una acción del tablero.

        Args:
            order_id: Id del pedido
            action: 'advance', 'revert' o 'cancel'
            user: Usuario del panel

        Returns:
            {'ok', 'changed', 'old_status', 'new_status', 'order'} o
            {'ok': False, 'changed': False, 'error'} si la transición no aplica

        Raises:
            NotFoundError: Si el pedido no existe
        """
        record = self.order_repo.get_order(order_id)
        if not record:
            raise NotFoundError('Pedido não encontrado.')

        old_status = record.get('status') or ''
        try:
            new_status = order_status.apply_action(old_status, action)
        except IllegalTransitionError as e:
            return {
                'ok': False,
                'changed': False,
                'error': e.message,
                'status': old_status,
            }

        updated_at = utc_now_iso()
        if not self.order_repo.update_status(order_id, new_status, updated_at):
            raise NotFoundError('Pedido não encontrado.')

        order = Order.from_dict(dict(record, status=new_status, updated_at=updated_at))
        order_dict = order.to_dict()

        log_order_event('order.status_changed', order_dict, user, f"{old_status} -> {new_status}")
        if self.audit_service:
            self.audit_service.log_order_status_change(
                user, order_id,
                order_status.status_label(old_status),
                order_status.status_label(new_status),
            )
        if self.notification_service:
            self.notification_service.order_status_changed(order_dict, old_status)

        return {
            'ok': True,
            'changed': True,
            'old_status': old_status,
            'new_status': new_status,
            'order': order_view(order),
        }

    def advance(self, order_id: str, user: str = 'admin') -> Dict[str, Any]:
        return self.change_status(order_id, order_status.ADVANCE, user)

    def revert(self, order_id: str, user: str = 'admin') -> Dict[str, Any]:
        return self.change_status(order_id, order_status.REVERT, user)

    def cancel(self, order_id: str, user: str = 'admin') -> Dict[str, Any]:
        return self.change_status(order_id, order_status.CANCEL, user)

    # =========================================================================
    # ELIMINACIÓN
    # =========================================================================

    def delete_order(self, order_id: str, user: str = 'admin') -> Dict[str, Any]:
        """
        Elimina el pedido con sus ítems.

        Raises:
            NotFoundError: Si no existe
        """
        record = self.order_repo.get_order(order_id)
        if not record:
            raise NotFoundError('Pedido não encontrado.')

        self.order_repo.delete_order(order_id)

        log_order_event('order.deleted', record, user)
        if self.audit_service:
            self.audit_service.log_order_deleted(user, record)
        if self.notification_service:
            self.notification_service.order_deleted(order_id)
        return {'ok': True, 'deleted': order_id}

    def pending_count(self) -> int:
        """Pedidos pendientes (indicador del panel)."""
        return sum(1 for o in self.get_all_orders() if o.status == OrderStatus.PENDING.value)

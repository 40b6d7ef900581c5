# ==============================================================================
# SERVICIO DE NOTIFICACIONES
# ==============================================================================
# Canal publish/subscribe en proceso para eventos de pedidos:
#   order.created, order.status_changed, order.deleted
#
# Cada suscriptor recibe los eventos publicados mientras está registrado,
# por callback o por su propia cola.
# ==============================================================================

import itertools
import queue
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

EVENT_ORDER_CREATED = 'order.created'
EVENT_ORDER_STATUS_CHANGED = 'order.status_changed'
EVENT_ORDER_DELETED = 'order.deleted'

EVENTS = (EVENT_ORDER_CREATED, EVENT_ORDER_STATUS_CHANGED, EVENT_ORDER_DELETED)


class Subscription:
    """
    Registro de un suscriptor.

    Si no tiene callback, los eventos quedan en `queue` hasta que se lean
    con get() o drain().
    """

    def __init__(self, subscription_id: int, events: Optional[Iterable[str]] = None,
                 callback: Optional[Callable[[Dict[str, Any]], None]] = None,
                 maxsize: int = 0):
        self.id = subscription_id
        self.events = frozenset(events) if events else None
        self.callback = callback
        self.queue: 'queue.Queue[Dict[str, Any]]' = queue.Queue(maxsize=maxsize)

    def wants(self, event: str) -> bool:
        return self.events is None or event in self.events

    def deliver(self, message: Dict[str, Any]) -> None:
        if self.callback is not None:
            self.callback(message)
        else:
            self.queue.put_nowait(message)

    def get(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Siguiente evento, o None si no llegó ninguno en `timeout` segundos."""
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[Dict[str, Any]]:
        """Todos los eventos pendientes."""
        messages = []
        while True:
            try:
                messages.append(self.queue.get_nowait())
            except queue.Empty:
                return messages


class NotificationService:
    """
    Publicación de eventos de pedidos a los suscriptores registrados.

    La entrega es best-effort: un suscriptor que falla (callback con error,
    cola llena) no impide la entrega a los demás ni afecta al pedido.
    """

    def __init__(self):
        self._subscriptions: Dict[int, Subscription] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def subscribe(
        self,
        callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        events: Optional[Iterable[str]] = None,
        maxsize: int = 0
    ) -> Subscription:
        """
        Registra un suscriptor.

        Args:
            callback: Función llamada con cada evento (opcional)
            events: Eventos de interés (None = todos)
            maxsize: Tamaño máximo de la cola (0 = ilimitada)

        Returns:
            Subscription (usar su cola si no hay callback)
        """
        with self._lock:
            subscription = Subscription(next(self._ids), events, callback, maxsize)
            self._subscriptions[subscription.id] = subscription
            return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self._lock:
            return self._subscriptions.pop(subscription.id, None) is not None

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: str, payload: Dict[str, Any]) -> int:
        """
        Publica un evento.

        Args:
            event: Nombre del evento (ver EVENTS)
            payload: Datos del evento (el pedido serializado, estados, ...)

        Returns:
            Cantidad de suscriptores que lo recibieron
        """
        message = {
            'event': event,
            'payload': payload,
            'published_at': datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.wants(event)]

        delivered = 0
        for subscription in targets:
            try:
                subscription.deliver(message)
                delivered += 1
            except Exception as e:
                print(f"⚠️ Notificação '{event}' não entregue ao assinante {subscription.id}: {e}")
        return delivered

    # Atajos usados por los servicios de pedidos

    def order_created(self, order: Dict[str, Any]) -> int:
        return self.publish(EVENT_ORDER_CREATED, {'order': order})

    def order_status_changed(self, order: Dict[str, Any], old_status: str) -> int:
        return self.publish(EVENT_ORDER_STATUS_CHANGED, {
            'order': order,
            'old_status': old_status,
            'new_status': order.get('status'),
        })

    def order_deleted(self, order_id: str) -> int:
        return self.publish(EVENT_ORDER_DELETED, {'order_id': order_id})

# ==============================================================================
# SERVICIO DE CHECKOUT
# ==============================================================================
# Convierte el carrito en un pedido persistido.
#
# Flujo:
#   1. Validación según el modo (cliente / estabelecimento). Sin escrituras.
#   2. Totales desde el motor de precios del carrito.
#   3. Escritura: pedido -> ítems -> adicionales de ítem.
#      Si una escritura falla, el pedido parcial se elimina (rollback).
#   4. Efectos: log, auditoría, notificación y, según el modo, el enlace
#      de WhatsApp (cliente) o la comanda (estabelecimento).
# ==============================================================================

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

from app_pedidos.activity_logger import log_order_event, profile_function
from app_pedidos.models.cart import Cart
from app_pedidos.models.entities import (
    COUNTER_PAYMENT_METHOD,
    DeliveryArea,
    DeliveryType,
    Order,
    OrderItem,
    OrderItemExtra,
    OrderType,
)
from app_pedidos.models.errors import PersistenceError, ValidationError
from app_pedidos.models.money import format_brl, to_money
from app_pedidos.models.order_status import OrderStatus
from app_pedidos.repositories.interfaces import IOrderRepository
from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.catalog_service import CatalogService
from app_pedidos.services.notification_service import NotificationService
from app_pedidos.services.settings_service import SettingsService
from app_pedidos.services.ticket_service import TicketService, payment_label

SAVE_ERROR_MESSAGE = 'Erro ao salvar pedido. Tente novamente.'

# Caracteres que encodeURIComponent no escapa
URI_SAFE = "-_.!~*'()"


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ''


@dataclass
class CheckoutRequest:
    """
    Datos del formulario de checkout.

    Attributes:
        mode: 'cliente' (tienda online) o 'estabelecimento' (mostrador)
        customer_name: Nombre del cliente
        delivery_type: 'delivery' o 'pickup'
        delivery_area_id: Barrio elegido (solo delivery)
        street / number / reference: Dirección (solo delivery)
        payment_method: Código de la forma de pago (modo cliente)
        table: Número de mesa (modo estabelecimento)
        change_for: Valor para el cambio si paga en efectivo
    """
    mode: str = OrderType.CLIENTE.value
    customer_name: str = ''
    customer_phone: str = ''
    delivery_type: str = DeliveryType.PICKUP.value
    delivery_area_id: Optional[str] = None
    street: str = ''
    number: str = ''
    reference: str = ''
    payment_method: str = ''
    table: str = ''
    notes: str = ''
    change_for: Optional[str] = None

    @property
    def is_counter(self) -> bool:
        return self.mode == OrderType.ESTABELECIMENTO.value

    @property
    def is_delivery(self) -> bool:
        return self.delivery_type == DeliveryType.DELIVERY.value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CheckoutRequest':
        mode = _clean(data.get('mode') or data.get('order_type')) or OrderType.CLIENTE.value
        if mode not in (OrderType.CLIENTE.value, OrderType.ESTABELECIMENTO.value):
            mode = OrderType.CLIENTE.value
        delivery_type = _clean(data.get('delivery_type'))
        if delivery_type != DeliveryType.DELIVERY.value:
            delivery_type = DeliveryType.PICKUP.value
        return cls(
            mode=mode,
            customer_name=_clean(data.get('customer_name')),
            customer_phone=_clean(data.get('customer_phone')),
            delivery_type=delivery_type,
            delivery_area_id=_clean(data.get('delivery_area_id')) or None,
            street=_clean(data.get('street')),
            number=_clean(data.get('number')),
            reference=_clean(data.get('reference')),
            payment_method=_clean(data.get('payment_method')),
            table=_clean(data.get('table')),
            notes=_clean(data.get('notes')),
            change_for=_clean(data.get('change_for')) or None,
        )


@dataclass
class CheckoutResult:
    """Resultado de un checkout exitoso."""
    order: Order
    whatsapp_message: Optional[str] = None
    whatsapp_url: Optional[str] = None
    ticket: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'ok': True,
            'order': self.order.to_dict(include_items=True),
            'message': 'Comanda gerada com sucesso!' if self.ticket else 'Pedido realizado com sucesso!',
        }
        if self.whatsapp_url:
            d['whatsapp_url'] = self.whatsapp_url
            d['whatsapp_message'] = self.whatsapp_message
        if self.ticket:
            d['ticket'] = self.ticket
        return d


class CheckoutService:
    """
    Servicio de checkout.

    El carrito no se vacía aquí: la ruta lo vacía solo después de un
    checkout exitoso.
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        catalog_service: CatalogService,
        settings_service: SettingsService,
        ticket_service: TicketService,
        notification_service: Optional[NotificationService] = None,
        audit_service: Optional[AuditService] = None
    ):
        self.order_repo = order_repo
        self.catalog_service = catalog_service
        self.settings_service = settings_service
        self.ticket_service = ticket_service
        self.notification_service = notification_service
        self.audit_service = audit_service

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    def validate(self, cart: Cart, request: CheckoutRequest) -> Optional[DeliveryArea]:
        """
        Valida el checkout.

        Returns:
            Barrio de entrega (None si es retiro)

        Raises:
            ValidationError: Primer problema encontrado
        """
        if cart.is_empty():
            raise ValidationError('Seu carrinho está vazio.')

        if not request.is_counter:
            if not request.payment_method:
                raise ValidationError('Por favor, selecione a forma de pagamento',
                                      field='payment_method')
            method = self.catalog_service.find_payment_method(request.payment_method)
            if method is None or not method.active:
                raise ValidationError('Forma de pagamento indisponível.', field='payment_method')

        if not request.customer_name:
            raise ValidationError('Por favor, informe o nome do cliente', field='customer_name')

        if request.is_counter and not request.table:
            raise ValidationError('Por favor, informe o número da mesa', field='table')

        area = None
        if request.is_delivery:
            area = self.catalog_service.find_delivery_area(request.delivery_area_id)
            if not request.delivery_area_id or not request.street or not request.number:
                raise ValidationError('Por favor, preencha todos os dados de entrega',
                                      field='delivery_area_id')
            if area is None or not area.active:
                raise ValidationError('Bairro indisponível para entrega. Selecione outro bairro.',
                                      field='delivery_area_id')
        return area

    # =========================================================================
    # CONSTRUCCIÓN DEL PEDIDO
    # =========================================================================

    @staticmethod
    def _order_notes(request: CheckoutRequest) -> Optional[str]:
        if request.is_counter:
            notes = f"Mesa: {request.table}"
            if request.notes:
                notes += f" - {request.notes}"
            return notes
        if request.is_delivery:
            return request.reference or None
        return request.notes or None

    def build_order(self, cart: Cart, request: CheckoutRequest,
                    area: Optional[DeliveryArea]) -> Order:
        """
        Arma el pedido con sus ítems (sin escribir).
        Montos fijados aquí: total = subtotal + tasa.
        """
        subtotal = to_money(cart.subtotal())
        delivery_fee = to_money(cart.delivery_fee(request.delivery_type, area))

        order = Order(
            id=uuid.uuid4().hex,
            customer_name=request.customer_name or 'Cliente',
            customer_phone=request.customer_phone,
            customer_address=f"{request.street}, {request.number}" if request.is_delivery else None,
            delivery_type=request.delivery_type,
            payment_method=COUNTER_PAYMENT_METHOD if request.is_counter else request.payment_method,
            delivery_area_id=area.id if area else None,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=subtotal + delivery_fee,
            status=OrderStatus.PENDING.value,
            notes=self._order_notes(request),
            order_type=request.mode,
            delivery_area_name=area.name if area else None,
        )

        for line in cart.lines:
            item = OrderItem(
                id=uuid.uuid4().hex,
                order_id=order.id,
                product_id=line.product.id,
                product_name=line.product.name,
                quantity=line.quantity,
                unit_price=line.product.price,
                total_price=to_money(cart.line_total(line)),
                observations=line.notes,
            )
            for extra in line.extras:
                total_quantity = extra.quantity * line.quantity
                item.extras.append(OrderItemExtra(
                    id=uuid.uuid4().hex,
                    order_item_id=item.id,
                    extra_id=extra.id,
                    extra_name=extra.name,
                    quantity=total_quantity,
                    unit_price=extra.price,
                    total_price=to_money(extra.price * total_quantity),
                ))
            order.items.append(item)
        return order

    def _persist(self, order: Order) -> None:
        """
        Escribe pedido, ítems y adicionales. Si algo falla después de crear
        el pedido, lo elimina antes de propagar el error.

        Raises:
            PersistenceError: Con mensaje genérico para el usuario
        """
        try:
            self.order_repo.create_order(order.to_dict())
        except PersistenceError as e:
            raise PersistenceError(SAVE_ERROR_MESSAGE) from e

        try:
            self.order_repo.add_items([item.to_dict() for item in order.items])
            extras = [extra.to_dict() for item in order.items for extra in item.extras]
            if extras:
                self.order_repo.add_item_extras(extras)
        except PersistenceError as e:
            try:
                self.order_repo.delete_order(order.id)
            except PersistenceError as rollback_error:
                print(f"⚠️ Rollback do pedido {order.id} falhou: {rollback_error}")
            raise PersistenceError(SAVE_ERROR_MESSAGE) from e

    # =========================================================================
    # MENSAJE DE WHATSAPP
    # =========================================================================

    def build_whatsapp_message(self, cart: Cart, order: Order, payment_name: str) -> str:
        items = '\n'.join(
            f"• {line.quantity}x {line.product.name} - {format_brl(cart.line_total(line))}"
            for line in cart.lines
        )
        kind = 'Entrega' if order.is_delivery else 'Balcão'
        return (
            "Olá! Gostaria de fazer um pedido:\n\n"
            f"{items}\n\n"
            f"Total: {format_brl(order.total)}\n"
            f"Forma de pagamento: {payment_name}\n"
            f"Tipo: {kind}"
        )

    def build_whatsapp_url(self, message: str) -> str:
        phone = self.settings_service.get_whatsapp_number()
        return f"https://wa.me/{phone}?text={quote(message, safe=URI_SAFE)}"

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    @profile_function(name="Finalizar pedido")
    def checkout(self, cart: Cart, request: CheckoutRequest,
                 user: Optional[str] = None) -> CheckoutResult:
        """
        Valida, persiste y arma la salida del pedido.

        Args:
            cart: Carrito de la sesión
            request: Datos del formulario
            user: Usuario del panel (modo estabelecimento)

        Returns:
            CheckoutResult

        Raises:
            ValidationError: Datos incompletos (sin escrituras)
            PersistenceError: Falla del almacenamiento (pedido parcial eliminado)
        """
        area = self.validate(cart, request)
        order = self.build_order(cart, request, area)
        self._persist(order)

        order_dict = order.to_dict(include_items=True)
        log_order_event('order.created', order_dict, user)
        if self.audit_service:
            self.audit_service.log_order_created(order_dict, user)
        if self.notification_service:
            self.notification_service.order_created(order_dict)

        method = self.catalog_service.find_payment_method(order.payment_method)
        payment_name = method.name if method else payment_label(order.payment_method)

        result = CheckoutResult(order=order)
        if request.is_counter:
            result.ticket = self.ticket_service.render_ticket(
                order,
                settings=self.settings_service.get_settings(),
                payment_name=payment_label(COUNTER_PAYMENT_METHOD),
                change_for=request.change_for,
                address_details={
                    'bairro': area.name if area else None,
                    'rua': request.street,
                    'numero': request.number,
                    'referencia': request.reference,
                },
            )
        else:
            result.whatsapp_message = self.build_whatsapp_message(cart, order, payment_name)
            result.whatsapp_url = self.build_whatsapp_url(result.whatsapp_message)
        return result

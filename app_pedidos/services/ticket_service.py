# ==============================================================================
# SERVICIO DE COMANDA
# ==============================================================================
# Genera el texto plano de la comanda de cocina a partir de un pedido
# persistido. La impresión queda a cargo del cliente HTTP.
# ==============================================================================

from datetime import datetime
from typing import List, Optional

from app_pedidos.models.entities import (
    COUNTER_PAYMENT_METHOD,
    DEFAULT_PAYMENT_METHODS,
    CompanySettings,
    Order,
    OrderItem,
)
from app_pedidos.models.money import format_brl, to_decimal

WIDTH = 40
SEPARATOR = '-' * WIDTH
DOUBLE_SEPARATOR = '=' * WIDTH

PAYMENT_LABELS = dict(DEFAULT_PAYMENT_METHODS, **{COUNTER_PAYMENT_METHOD: 'Pedido no Balcão'})

# Tiempo estimado mostrado al pie
ESTIMATE_DELIVERY = '45-60 min'
ESTIMATE_PICKUP = '20-30 min'


def payment_label(code: Optional[str]) -> str:
    """Etiqueta de una forma de pago (el código crudo si no se conoce)."""
    return PAYMENT_LABELS.get(code or '', code or '')


def _format_datetime(iso_value: str) -> str:
    try:
        return datetime.fromisoformat(iso_value).astimezone().strftime('%d/%m/%Y %H:%M')
    except (TypeError, ValueError):
        return iso_value or ''


def _total_line(label: str, amount) -> str:
    value = format_brl(amount)
    return f"{label}{' ' * max(1, WIDTH - len(label) - len(value))}{value}"


class TicketService:
    """
    Comanda de cocina en texto plano.
    """

    def render_ticket(
        self,
        order: Order,
        settings: Optional[CompanySettings] = None,
        payment_name: Optional[str] = None,
        change_for: Optional[str] = None,
        address_details: Optional[dict] = None
    ) -> str:
        """
        Genera la comanda.

        Args:
            order: Pedido con sus ítems cargados
            settings: Datos de la empresa para el encabezado
            payment_name: Etiqueta de la forma de pago (si no, se deriva del código)
            change_for: Valor para el cambio ("troco") si paga en efectivo
            address_details: {'bairro', 'rua', 'numero', 'referencia'} del checkout

        Returns:
            Texto de la comanda
        """
        settings = settings or CompanySettings()
        lines: List[str] = []

        # Encabezado
        lines.append(settings.company_name.upper().center(WIDTH).rstrip())
        if settings.subtitle:
            lines.append(settings.subtitle)
        if settings.address:
            lines.append(settings.address)
        if settings.phone:
            lines.append(f"Tel: {settings.phone}")
        lines.append(f"Pedido {order.code} • {_format_datetime(order.created_at)}")
        lines.append(DOUBLE_SEPARATOR)

        # Ítems
        lines.append('ITENS DO PEDIDO:')
        for index, item in enumerate(order.items, start=1):
            lines.extend(self._item_lines(index, item))
        lines.append(SEPARATOR)

        # Entrega
        lines.append('TIPO DE ENTREGA:')
        lines.append('ENTREGA' if order.is_delivery else 'RETIRADA NO BALCÃO')
        if order.is_delivery:
            lines.append('ENDEREÇO:')
            details = address_details or {}
            bairro = details.get('bairro') or order.delivery_area_name
            if bairro:
                lines.append(f"Bairro: {bairro}")
            if details.get('rua'):
                lines.append(f"Rua: {details['rua']}")
                if details.get('numero'):
                    lines.append(f"Número: {details['numero']}")
            elif order.customer_address:
                lines.append(order.customer_address)
            if details.get('referencia'):
                lines.append(f"Referência: {details['referencia']}")
        lines.append(SEPARATOR)

        # Cliente
        lines.append('CLIENTE:')
        lines.append(f"Nome: {order.customer_name}")
        if order.customer_phone:
            lines.append(f"Telefone: {order.customer_phone}")
        if order.notes:
            lines.append(order.notes)
        lines.append(SEPARATOR)

        # Pago
        lines.append('PAGAMENTO:')
        lines.append(payment_name or payment_label(order.payment_method))
        if order.payment_method == 'dinheiro':
            if change_for:
                lines.append(f"Troco para: {format_brl(to_decimal(change_for))}")
            else:
                lines.append('Não precisa de troco')
        lines.append(DOUBLE_SEPARATOR)

        # Totales
        lines.append(_total_line('Subtotal:', order.subtotal))
        if order.is_delivery:
            lines.append(_total_line('Taxa de Entrega:', order.delivery_fee))
        lines.append(_total_line('TOTAL:', order.total))
        lines.append('')
        estimate = ESTIMATE_DELIVERY if order.is_delivery else ESTIMATE_PICKUP
        lines.append(f"Tempo estimado: {estimate}".center(WIDTH).rstrip())
        lines.append('Obrigado pela preferência!'.center(WIDTH).rstrip())

        return '\n'.join(lines) + '\n'

    @staticmethod
    def _item_lines(index: int, item: OrderItem) -> List[str]:
        # total_price ya incluye los adicionales
        quantity = item.quantity or 1
        unit_with_extras = item.total_price / quantity
        lines = [
            f"{index}. {item.product_name or 'Produto'}",
            f"   Qtd: {item.quantity}x | Unit: {format_brl(unit_with_extras)} | "
            f"Total: {format_brl(item.total_price)}",
        ]
        if item.extras:
            extras = ', '.join(
                f"{extra.quantity // quantity}x {extra.extra_name or 'Adicional'}"
                for extra in item.extras
            )
            lines.append(f"   Adicionais: {extras}")
        if item.observations:
            lines.append(f"   Obs: {item.observations}")
        return lines

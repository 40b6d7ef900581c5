# ==============================================================================
# CARRITO - Motor de precios
# ==============================================================================
# Modelo puro (sin Flask ni almacenamiento). El CartService lo reconstruye
# desde la sesión en cada request y guarda cart.to_dict() de vuelta.
#
# Reglas de precio:
#   precio unitario = precio del producto + Σ(precio adicional × cantidad)
#   total de línea  = precio unitario × cantidad de la línea
#   subtotal        = Σ totales de línea
#   total           = subtotal + tasa de entrega (solo en modo delivery)
# ==============================================================================

import random
import string
import time
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .entities import CartLine, DeliveryArea, DeliveryType, Product, SelectedExtra
from .money import ZERO, to_money


def new_line_id(product_id: str) -> str:
    """
    Genera el id de una línea: "<product_id>-<timestamp ms>-<5 caracteres>".
    """
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"{product_id}-{int(time.time() * 1000)}-{suffix}"


class Cart:
    """
    Carrito de una sesión.

    Las líneas nunca se fusionan: agregar el mismo producto dos veces crea
    dos líneas independientes (cada una con sus adicionales y observación).
    """

    def __init__(self, lines: Optional[List[CartLine]] = None):
        self.lines: List[CartLine] = list(lines or [])

    # ==========================================================================
    # MUTACIONES
    # ==========================================================================

    def add_line(
        self,
        product: Product,
        quantity: int = 1,
        notes: Optional[str] = None,
        extras: Optional[Iterable[SelectedExtra]] = None
    ) -> Optional[CartLine]:
        """
        Agrega una línea nueva al carrito.

        Args:
            product: Producto (se guarda una copia)
            quantity: Cantidad (>= 1)
            notes: Observación libre
            extras: Adicionales elegidos; los de cantidad <= 0 se descartan

        Returns:
            La línea creada, o None si quantity < 1
        """
        if quantity is None or quantity < 1:
            return None

        selected = [
            SelectedExtra(id=e.id, name=e.name, price=e.price, quantity=e.quantity)
            for e in (extras or [])
            if e.quantity > 0
        ]
        notes = notes.strip() if notes else None

        line = CartLine(
            line_id=new_line_id(product.id),
            product=replace(product, ingredients=list(product.ingredients)),
            quantity=int(quantity),
            notes=notes or None,
            extras=selected,
        )
        self.lines.append(line)
        return line

    def get_line(self, line_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        return None

    def set_quantity(self, line_id: str, quantity: int) -> bool:
        """
        Cambia la cantidad de una línea. Cantidad <= 0 equivale a remove_line.

        Returns:
            True si la línea existía
        """
        line = self.get_line(line_id)
        if line is None:
            return False
        if quantity <= 0:
            return self.remove_line(line_id)
        line.quantity = int(quantity)
        return True

    def increment(self, line_id: str) -> bool:
        line = self.get_line(line_id)
        if line is None:
            return False
        return self.set_quantity(line_id, line.quantity + 1)

    def decrement(self, line_id: str) -> bool:
        line = self.get_line(line_id)
        if line is None:
            return False
        return self.set_quantity(line_id, line.quantity - 1)

    def remove_line(self, line_id: str) -> bool:
        """Elimina exactamente una línea (las demás no se tocan)."""
        for index, line in enumerate(self.lines):
            if line.line_id == line_id:
                del self.lines[index]
                return True
        return False

    def clear(self) -> None:
        self.lines = []

    # ==========================================================================
    # PRECIOS
    # ==========================================================================

    @staticmethod
    def per_unit_price(line: CartLine) -> Decimal:
        """Precio del producto más los adicionales, por unidad."""
        return line.product.price + sum((e.per_unit_total for e in line.extras), ZERO)

    @classmethod
    def line_total(cls, line: CartLine) -> Decimal:
        return cls.per_unit_price(line) * line.quantity

    def subtotal(self) -> Decimal:
        return sum((self.line_total(line) for line in self.lines), ZERO)

    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @staticmethod
    def delivery_fee(mode: str, area: Optional[DeliveryArea]) -> Decimal:
        """
        Tasa de entrega.
        Solo se cobra en modo delivery con un barrio activo seleccionado.
        """
        if mode == DeliveryType.DELIVERY.value and area is not None and area.active:
            return area.fee
        return ZERO

    def order_total(self, mode: str, area: Optional[DeliveryArea]) -> Decimal:
        return self.subtotal() + self.delivery_fee(mode, area)

    def is_empty(self) -> bool:
        return not self.lines

    # ==========================================================================
    # SERIALIZACIÓN
    # ==========================================================================

    def summary(self, mode: str = DeliveryType.PICKUP.value,
                area: Optional[DeliveryArea] = None) -> Dict[str, Any]:
        """
        Vista del carrito para la API (montos redondeados como str).
        """
        items = []
        for line in self.lines:
            d = line.to_dict()
            d['unit_price'] = str(to_money(self.per_unit_price(line)))
            d['line_total'] = str(to_money(self.line_total(line)))
            items.append(d)

        return {
            'items': items,
            'items_count': len(self.lines),
            'total_items': self.total_items(),
            'subtotal': str(to_money(self.subtotal())),
            'delivery_fee': str(to_money(self.delivery_fee(mode, area))),
            'total': str(to_money(self.order_total(mode, area))),
        }

    def to_dict(self) -> List[Dict[str, Any]]:
        """Estructura guardada en la sesión."""
        return [line.to_dict() for line in self.lines]

    @classmethod
    def from_dict(cls, data: Optional[List[Dict[str, Any]]]) -> 'Cart':
        lines = [CartLine.from_dict(d) for d in data or []]
        return cls([line for line in lines if line.quantity > 0])

# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Une el modelo Cart (motor de precios) con la sesión de Flask y el catálogo.
# En la sesión solo se guarda cart.to_dict() bajo session['carrinho'].
# ==============================================================================

from typing import Any, Dict, List, Optional

from flask import session

from app_pedidos.models.cart import Cart
from app_pedidos.models.entities import DeliveryType, SelectedExtra
from app_pedidos.models.money import to_money
from app_pedidos.services.catalog_service import CatalogService

SESSION_KEY = 'carrinho'
EXTRA_UNAVAILABLE = 'Adicional indisponível.'


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class CartService:
    """
    Servicio para gestión del carrito de la sesión.

    Responsabilidades:
    - Agregar líneas (producto + cantidad + observación + adicionales)
    - Cambiar cantidades y eliminar líneas
    - Calcular totales con la tasa del barrio elegido
    """

    def __init__(self, catalog_service: CatalogService):
        """
        Args:
            catalog_service: Servicio de catálogo (productos y adicionales)
        """
        self.catalog_service = catalog_service

    def load_cart(self) -> Cart:
        """Carrito de la sesión actual como modelo."""
        return Cart.from_dict(session.get(SESSION_KEY, []))

    def save_cart(self, cart: Cart) -> None:
        session[SESSION_KEY] = cart.to_dict()
        session.modified = True

    def _select_extras(self, extras: Optional[List[Dict[str, Any]]]) -> List[SelectedExtra]:
        """
        Resuelve los adicionales pedidos contra el catálogo.

        Raises:
            ValueError: Adicional inexistente o inactivo
        """
        if extras is None:
            return []
        if not isinstance(extras, list):
            raise ValueError(EXTRA_UNAVAILABLE)

        selected = []
        for entry in extras:
            if not isinstance(entry, dict):
                raise ValueError(EXTRA_UNAVAILABLE)
            quantity = _to_int(entry.get('quantity', 1))
            if not quantity or quantity <= 0:
                continue
            extra = self.catalog_service.find_extra(str(entry.get('id', '')))
            if extra is None or not extra.active:
                raise ValueError(EXTRA_UNAVAILABLE)
            selected.append(SelectedExtra(id=extra.id, name=extra.name,
                                          price=extra.price, quantity=quantity))
        return selected

    def add_item(
        self,
        product_id: str,
        quantity: Any = 1,
        notes: Optional[str] = None,
        extras: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """
        Agrega una línea nueva al carrito.

        Args:
            product_id: ID del producto
            quantity: Cantidad (>= 1)
            notes: Observación de la línea
            extras: [{'id': extra_id, 'quantity': n}, ...]

        Returns:
            Dict con resultado (ok, error, line_id, cart)
        """
        if not product_id:
            return {'ok': False, 'error': 'Produto inválido.'}

        quantity = _to_int(quantity)
        if quantity is None or quantity < 1:
            return {'ok': False, 'error': 'Quantidade deve ser maior que zero.'}

        product = self.catalog_service.find_product(str(product_id))
        if product is None:
            return {'ok': False, 'error': 'Produto não encontrado.'}
        if not product.available:
            return {'ok': False, 'error': 'Produto indisponível no momento.'}

        try:
            selected = self._select_extras(extras)
        except ValueError as e:
            return {'ok': False, 'error': str(e)}

        cart = self.load_cart()
        line = cart.add_line(product, quantity, notes, selected)
        self.save_cart(cart)

        return {
            'ok': True,
            'message': f'{product.name} adicionado ao carrinho!',
            'line_id': line.line_id,
            'line_total': str(to_money(cart.line_total(line))),
            'cart': cart.summary(),
        }

    def update_quantity(self, line_id: str, quantity: Any) -> Dict[str, Any]:
        """
        Cambia la cantidad de una línea (<= 0 la elimina).
        """
        quantity = _to_int(quantity)
        if quantity is None:
            return {'ok': False, 'error': 'Quantidade inválida.'}

        cart = self.load_cart()
        if not cart.set_quantity(line_id, quantity):
            return {'ok': False, 'error': 'Item não encontrado no carrinho.'}
        self.save_cart(cart)
        return {'ok': True, 'removed': quantity <= 0, 'cart': cart.summary()}

    def remove_item(self, line_id: str) -> Dict[str, Any]:
        cart = self.load_cart()
        if not cart.remove_line(line_id):
            return {'ok': False, 'error': 'Item não encontrado no carrinho.'}
        self.save_cart(cart)
        return {'ok': True, 'cart': cart.summary()}

    def clear_cart(self) -> Dict[str, Any]:
        cart = self.load_cart()
        cart.clear()
        self.save_cart(cart)
        return {'ok': True, 'cart': cart.summary()}

    def get_totals(
        self,
        delivery_type: str = DeliveryType.PICKUP.value,
        delivery_area_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Totales del carrito para el modo de entrega y barrio elegidos.
        Un barrio inexistente o inactivo no cobra tasa.
        """
        area = self.catalog_service.find_delivery_area(delivery_area_id)
        summary = self.load_cart().summary(delivery_type, area)
        summary['delivery_type'] = delivery_type
        summary['delivery_area'] = area.to_dict() if area and area.active else None
        return summary

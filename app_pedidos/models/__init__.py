# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio (dataclasses), el carrito con su motor de precios y
# la máquina de estados del pedido. Ningún módulo de esta capa conoce Flask
# ni el almacenamiento.
# ==============================================================================

from .entities import (
    # Catálogo
    Category,
    Product,
    Extra,
    DeliveryArea,
    PaymentMethod,
    CompanySettings,

    # Carrito
    SelectedExtra,
    CartLine,

    # Pedidos
    Order,
    OrderItem,
    OrderItemExtra,
    OrderType,
    DeliveryType,
    DEFAULT_PAYMENT_METHODS,
    COUNTER_PAYMENT_METHOD,
)
from .cart import Cart
from .order_status import OrderStatus, StatusInfo, status_info
from .errors import (
    PedidosError,
    ValidationError,
    NotFoundError,
    PersistenceError,
    IllegalTransitionError,
    UnknownStateError,
)

__all__ = [
    # Catálogo
    'Category',
    'Product',
    'Extra',
    'DeliveryArea',
    'PaymentMethod',
    'CompanySettings',

    # Carrito
    'SelectedExtra',
    'CartLine',
    'Cart',

    # Pedidos
    'Order',
    'OrderItem',
    'OrderItemExtra',
    'OrderType',
    'DeliveryType',
    'DEFAULT_PAYMENT_METHODS',
    'COUNTER_PAYMENT_METHOD',
    'OrderStatus',
    'StatusInfo',
    'status_info',

    # Errores
    'PedidosError',
    'ValidationError',
    'NotFoundError',
    'PersistenceError',
    'IllegalTransitionError',
    'UnknownStateError',
]

# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio (catálogo, carrito, pedido).
# Diseñadas para ser independientes del mecanismo de persistencia: el
# almacenamiento solo ve diccionarios (to_dict / from_dict).
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .money import ZERO, money_to_json, to_decimal


def utc_now_iso() -> str:
    """Timestamp ISO en UTC (formato de created_at / updated_at)."""
    return datetime.now(timezone.utc).isoformat()


# ==============================================================================
# ENUMERACIONES - Tipos válidos
# ==============================================================================

class DeliveryType(str, Enum):
    """Modo de entrega del pedido."""
    DELIVERY = "delivery"   # Entrega a domicilio (cobra tasa del barrio)
    PICKUP = "pickup"       # Retiro en el mostrador


class OrderType(str, Enum):
    """Origen del pedido."""
    CLIENTE = "cliente"                  # Pedido online del cliente
    ESTABELECIMENTO = "estabelecimento"  # Pedido en el mostrador (staff)


# Formas de pago por defecto (código -> etiqueta)
DEFAULT_PAYMENT_METHODS = {
    'dinheiro': 'Dinheiro',
    'pix': 'PIX',
    'credito': 'Cartão de Crédito',
    'debito': 'Cartão de Débito',
}

# Forma de pago usada por el flujo de mostrador
COUNTER_PAYMENT_METHOD = 'balcao'

ORDER_TYPE_LABELS = {
    OrderType.CLIENTE.value: 'Online',
    OrderType.ESTABELECIMENTO.value: 'Balcão',
}


def derive_order_type(order_type: Optional[str], delivery_type: Optional[str]) -> str:
    """
    Tipo de pedido efectivo.
    Los pedidos antiguos no tienen order_type: pickup se asume mostrador.
    """
    if order_type in (OrderType.CLIENTE.value, OrderType.ESTABELECIMENTO.value):
        return order_type
    if delivery_type == DeliveryType.PICKUP.value:
        return OrderType.ESTABELECIMENTO.value
    return OrderType.CLIENTE.value


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Category:
    """Categoría del cardápio."""
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
            'sort_order': self.sort_order,
            'active': self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            description=data.get('description'),
            icon=data.get('icon'),
            sort_order=int(data.get('sort_order') or 0),
            active=data.get('active') is not False,
        )


@dataclass
class Product:
    """
    Producto del cardápio.

    Attributes:
        id: Identificador único
        name: Nombre visible
        description: Descripción corta
        price: Precio unitario (Decimal)
        category_id: Categoría a la que pertenece
        available: Si se puede pedir
        has_addons: Si acepta adicionales
        image: URL de la imagen
        ingredients: Lista de ingredientes
        preparation_time: Minutos de preparo (opcional)
        rating: Nota (opcional)
    """
    id: str
    name: str
    price: Decimal = ZERO
    description: str = ''
    category_id: Optional[str] = None
    available: bool = True
    has_addons: bool = False
    image: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    preparation_time: Optional[int] = None
    rating: Optional[float] = None

    def __post_init__(self):
        self.price = to_decimal(self.price)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': money_to_json(self.price),
            'category_id': self.category_id,
            'available': self.available,
            'has_addons': self.has_addons,
            'image': self.image,
            'ingredients': list(self.ingredients),
            'preparation_time': self.preparation_time,
            'rating': self.rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            description=data.get('description') or '',
            price=to_decimal(data.get('price')),
            category_id=data.get('category_id'),
            available=data.get('available') is not False,
            has_addons=bool(data.get('has_addons', False)),
            image=data.get('image'),
            ingredients=list(data.get('ingredients') or []),
            preparation_time=data.get('preparation_time'),
            rating=data.get('rating'),
        )


@dataclass
class Extra:
    """Adicional (add-on) que se puede sumar a una línea del carrito."""
    id: str
    name: str
    price: Decimal = ZERO
    active: bool = True

    def __post_init__(self):
        self.price = to_decimal(self.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': money_to_json(self.price),
            'active': self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Extra':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=to_decimal(data.get('price')),
            active=data.get('active') is not False,
        )


@dataclass
class DeliveryArea:
    """Barrio de entrega con tasa fija."""
    id: str
    name: str
    fee: Decimal = ZERO
    active: bool = True

    def __post_init__(self):
        self.fee = to_decimal(self.fee)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'fee': money_to_json(self.fee),
            'active': self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeliveryArea':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            fee=to_decimal(data.get('fee')),
            active=data.get('active') is not False,
        )


@dataclass
class PaymentMethod:
    """Forma de pago ofrecida al cliente."""
    id: str
    name: str
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'active': self.active}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaymentMethod':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            active=data.get('active') is not False,
        )


@dataclass
class CompanySettings:
    """Datos de la empresa mostrados en la tienda y en la comanda."""
    company_name: str = 'Marrom Lanches'
    welcome_title: Optional[str] = None
    subtitle: Optional[str] = 'O melhor da cidade, direto na sua casa!'
    address: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    business_hours: Optional[str] = None
    free_delivery_minimum: Decimal = ZERO
    delivery_time: Optional[str] = None
    logo_url: Optional[str] = None
    is_open: bool = True

    def __post_init__(self):
        self.free_delivery_minimum = to_decimal(self.free_delivery_minimum)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'company_name': self.company_name,
            'welcome_title': self.welcome_title,
            'subtitle': self.subtitle,
            'address': self.address,
            'phone': self.phone,
            'whatsapp': self.whatsapp,
            'business_hours': self.business_hours,
            'free_delivery_minimum': money_to_json(self.free_delivery_minimum),
            'delivery_time': self.delivery_time,
            'logo_url': self.logo_url,
            'is_open': self.is_open,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompanySettings':
        defaults = cls()
        return cls(
            company_name=data.get('company_name') or defaults.company_name,
            welcome_title=data.get('welcome_title'),
            subtitle=data.get('subtitle', defaults.subtitle),
            address=data.get('address'),
            phone=data.get('phone'),
            whatsapp=data.get('whatsapp'),
            business_hours=data.get('business_hours'),
            free_delivery_minimum=to_decimal(data.get('free_delivery_minimum')),
            delivery_time=data.get('delivery_time'),
            logo_url=data.get('logo_url'),
            is_open=data.get('is_open') is not False,
        )


# ==============================================================================
# ENTIDADES DE CARRITO
# ==============================================================================

@dataclass
class SelectedExtra:
    """
    Adicional elegido para UNA línea del carrito.
    Guarda una copia del precio al momento de elegirlo.
    """
    id: str
    name: str
    price: Decimal
    quantity: int = 1

    def __post_init__(self):
        self.price = to_decimal(self.price)

    @property
    def per_unit_total(self) -> Decimal:
        """Costo de este adicional por unidad del producto."""
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'price': str(self.price),
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SelectedExtra':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            price=to_decimal(data.get('price')),
            quantity=int(data.get('quantity', 0) or 0),
        )


@dataclass
class CartLine:
    """
    Línea del carrito: copia del producto + cantidad + observación + adicionales.

    Dos líneas del mismo producto nunca se fusionan: line_id las distingue.
    """
    line_id: str
    product: Product
    quantity: int = 1
    notes: Optional[str] = None
    extras: List[SelectedExtra] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para la sesión (precios como str exacto)."""
        product = self.product.to_dict()
        product['price'] = str(self.product.price)
        return {
            'line_id': self.line_id,
            'product': product,
            'quantity': self.quantity,
            'notes': self.notes,
            'extras': [e.to_dict() for e in self.extras],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartLine':
        return cls(
            line_id=data.get('line_id', ''),
            product=Product.from_dict(data.get('product') or {}),
            quantity=int(data.get('quantity', 1) or 0),
            notes=data.get('notes'),
            extras=[SelectedExtra.from_dict(e) for e in data.get('extras') or []],
        )


# ==============================================================================
# ENTIDADES DE PEDIDO
# ==============================================================================

@dataclass
class OrderItemExtra:
    """Adicional persistido de un ítem (cantidad ya multiplicada por la línea)."""
    id: str
    order_item_id: str
    extra_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    extra_name: Optional[str] = None
    created_at: str = ''

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)
        self.total_price = to_decimal(self.total_price)
        if not self.created_at:
            self.created_at = utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'order_item_id': self.order_item_id,
            'extra_id': self.extra_id,
            'extra_name': self.extra_name,
            'quantity': self.quantity,
            'unit_price': money_to_json(self.unit_price),
            'total_price': money_to_json(self.total_price),
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItemExtra':
        return cls(
            id=str(data.get('id', '')),
            order_item_id=str(data.get('order_item_id', '')),
            extra_id=str(data.get('extra_id', '')),
            extra_name=data.get('extra_name'),
            quantity=int(data.get('quantity', 0) or 0),
            unit_price=to_decimal(data.get('unit_price')),
            total_price=to_decimal(data.get('total_price')),
            created_at=data.get('created_at', ''),
        )


@dataclass
class OrderItem:
    """
    Ítem persistido de un pedido.
    Precios capturados al crear el pedido (registro financiero inmutable).
    """
    id: str
    order_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    observations: Optional[str] = None
    product_name: Optional[str] = None
    extras: List[OrderItemExtra] = field(default_factory=list)
    created_at: str = ''

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)
        self.total_price = to_decimal(self.total_price)
        if not self.created_at:
            self.created_at = utc_now_iso()

    def to_dict(self) -> Dict[str, Any]:
        """Fila de order_items (sin adicionales, van en su propia tabla)."""
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'unit_price': money_to_json(self.unit_price),
            'total_price': money_to_json(self.total_price),
            'observations': self.observations,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItem':
        return cls(
            id=str(data.get('id', '')),
            order_id=str(data.get('order_id', '')),
            product_id=str(data.get('product_id', '')),
            product_name=data.get('product_name'),
            quantity=int(data.get('quantity', 0) or 0),
            unit_price=to_decimal(data.get('unit_price')),
            total_price=to_decimal(data.get('total_price')),
            observations=data.get('observations'),
            extras=[OrderItemExtra.from_dict(e) for e in data.get('extras') or []],
            created_at=data.get('created_at', ''),
        )


@dataclass
class Order:
    """
    Pedido persistido.

    Invariante: total == subtotal + delivery_fee, fijado al crear el pedido
    y nunca recalculado después.
    """
    id: str
    customer_name: str
    customer_phone: str = ''
    customer_address: Optional[str] = None
    delivery_type: str = DeliveryType.PICKUP.value
    payment_method: str = ''
    delivery_area_id: Optional[str] = None
    subtotal: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    total: Decimal = ZERO
    status: str = 'pending'
    notes: Optional[str] = None
    order_type: Optional[str] = None
    created_at: str = ''
    updated_at: str = ''
    items: List[OrderItem] = field(default_factory=list)
    delivery_area_name: Optional[str] = None

    def __post_init__(self):
        self.subtotal = to_decimal(self.subtotal)
        self.delivery_fee = to_decimal(self.delivery_fee)
        self.total = to_decimal(self.total)
        self.order_type = derive_order_type(self.order_type, self.delivery_type)
        if not self.created_at:
            self.created_at = utc_now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def code(self) -> str:
        """Código corto para mostrar (#últimos 6 caracteres del id)."""
        return f"#{(self.id or '')[-6:]}"

    @property
    def is_delivery(self) -> bool:
        return self.delivery_type == DeliveryType.DELIVERY.value

    def to_dict(self, include_items: bool = False) -> Dict[str, Any]:
        """Fila de orders (opcionalmente con ítems anidados para la API)."""
        d = {
            'id': self.id,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'delivery_type': self.delivery_type,
            'payment_method': self.payment_method,
            'delivery_area_id': self.delivery_area_id,
            'subtotal': money_to_json(self.subtotal),
            'delivery_fee': money_to_json(self.delivery_fee),
            'total': money_to_json(self.total),
            'status': self.status,
            'notes': self.notes,
            'order_type': self.order_type,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
        if include_items:
            items = []
            for item in self.items:
                item_dict = item.to_dict()
                item_dict['extras'] = [e.to_dict() for e in item.extras]
                items.append(item_dict)
            d['items'] = items
            d['delivery_area_name'] = self.delivery_area_name
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        delivery_type = 'delivery' if data.get('delivery_type') == 'delivery' else 'pickup'
        return cls(
            id=str(data.get('id', '')),
            customer_name=data.get('customer_name') or '',
            customer_phone=data.get('customer_phone') or '',
            customer_address=data.get('customer_address'),
            delivery_type=delivery_type,
            payment_method=data.get('payment_method') or '',
            delivery_area_id=data.get('delivery_area_id'),
            subtotal=to_decimal(data.get('subtotal')),
            delivery_fee=to_decimal(data.get('delivery_fee')),
            total=to_decimal(data.get('total')),
            status=data.get('status') or '',
            notes=data.get('notes'),
            order_type=data.get('order_type'),
            created_at=data.get('created_at', ''),
            updated_at=data.get('updated_at', ''),
            items=[OrderItem.from_dict(i) for i in data.get('items') or []],
            delivery_area_name=data.get('delivery_area_name'),
        )

# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# Cardápio de la tienda y administración de productos, categorías,
# adicionales, barrios de entrega y formas de pago.
#
# Reglas de validación (mensajes visibles al usuario):
#   - nombre obligatorio y sin duplicados (sin distinguir mayúsculas)
#   - precio de producto / adicional > 0
#   - tasa de entrega >= 0
# Una validación fallida no escribe nada.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pedidos.models.entities import (
    Category,
    DeliveryArea,
    Extra,
    PaymentMethod,
    Product,
)
from app_pedidos.models.errors import NotFoundError, ValidationError
from app_pedidos.models.money import to_decimal
from app_pedidos.repositories.interfaces import ICatalogRepository
from app_pedidos.services.audit_service import AuditService


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in ('0', 'false', 'no', 'off', '')
    return bool(value)


class CatalogService:
    """
    Servicio de catálogo.

    Las lecturas de la tienda devuelven solo registros activos; las del
    panel devuelven todo.
    """

    def __init__(
        self,
        product_repo: ICatalogRepository,
        category_repo: ICatalogRepository,
        extra_repo: ICatalogRepository,
        delivery_area_repo: ICatalogRepository,
        payment_method_repo: ICatalogRepository,
        audit_service: Optional[AuditService] = None
    ):
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.extra_repo = extra_repo
        self.delivery_area_repo = delivery_area_repo
        self.payment_method_repo = payment_method_repo
        self.audit_service = audit_service

    def _audit(self, user: Optional[str], entity: str, action: str, name: str, record_id: str) -> None:
        if self.audit_service and user:
            self.audit_service.log_catalog_change(user, entity, action, name, record_id)

    @staticmethod
    def _require_name(data: Dict[str, Any], message: str) -> str:
        name = _clean(data.get('name'))
        if not name:
            raise ValidationError(message, field='name')
        return name

    @staticmethod
    def _check_duplicate(repo: ICatalogRepository, name: str, message: str,
                         exclude_id: Optional[str] = None) -> None:
        if repo.find_by_name(name, exclude_id=exclude_id):
            raise ValidationError(message, field='name')

    @staticmethod
    def _get_record(repo: ICatalogRepository, record_id: str, message: str) -> Dict[str, Any]:
        record = repo.get_by_id(record_id)
        if not record:
            raise NotFoundError(message)
        return record

    # =========================================================================
    # TIENDA
    # =========================================================================

    def get_catalog(self, category_id: Optional[str] = None, search: str = '') -> Dict[str, Any]:
        """
        Cardápio público: categorías activas y productos disponibles.

        Args:
            category_id: Filtrar por categoría ('all' o None = todas)
            search: Texto buscado en nombre y descripción

        Returns:
            {'categories': [...], 'products': [...]}
        """
        categories = [Category.from_dict(c) for c in self.category_repo.list_active()]
        categories.sort(key=lambda c: (c.sort_order, c.name.lower()))
        active_ids = {c.id for c in categories}

        products = [
            Product.from_dict(p) for p in self.product_repo.list_active()
            if not p.get('category_id') or p.get('category_id') in active_ids
        ]
        if category_id and category_id != 'all':
            products = [p for p in products if p.category_id == category_id]
        term = _clean(search).lower()
        if term:
            products = [
                p for p in products
                if term in p.name.lower() or term in (p.description or '').lower()
            ]

        return {
            'categories': [c.to_dict() for c in categories],
            'products': [p.to_dict() for p in products],
        }

    def list_active_extras(self) -> List[Extra]:
        return [Extra.from_dict(e) for e in self.extra_repo.list_active()]

    def list_active_delivery_areas(self) -> List[DeliveryArea]:
        """Barrios activos, ordenados por nombre."""
        return [DeliveryArea.from_dict(a) for a in self.delivery_area_repo.list_active('name')]

    def list_active_payment_methods(self) -> List[PaymentMethod]:
        return [PaymentMethod.from_dict(m) for m in self.payment_method_repo.list_active()]

    def find_product(self, product_id: str) -> Optional[Product]:
        record = self.product_repo.get_by_id(product_id)
        return Product.from_dict(record) if record else None

    def find_extra(self, extra_id: str) -> Optional[Extra]:
        record = self.extra_repo.get_by_id(extra_id)
        return Extra.from_dict(record) if record else None

    def find_delivery_area(self, area_id: Optional[str]) -> Optional[DeliveryArea]:
        if not area_id:
            return None
        record = self.delivery_area_repo.get_by_id(area_id)
        return DeliveryArea.from_dict(record) if record else None

    def find_payment_method(self, method_id: Optional[str]) -> Optional[PaymentMethod]:
        if not method_id:
            return None
        record = self.payment_method_repo.get_by_id(method_id)
        return PaymentMethod.from_dict(record) if record else None

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    def list_products(self, category_id: Optional[str] = None) -> List[Product]:
        products = [Product.from_dict(p) for p in self.product_repo.list_all()]
        if category_id and category_id != 'all':
            products = [p for p in products if p.category_id == category_id]
        return products

    def get_product(self, product_id: str) -> Product:
        return Product.from_dict(
            self._get_record(self.product_repo, product_id, 'Produto não encontrado.'))

    def _validate_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        name = _clean(data.get('name'))
        description = _clean(data.get('description'))
        category_id = _clean(data.get('category_id'))
        raw_price = data.get('price')
        if not name or not description or raw_price in (None, '') or not category_id:
            raise ValidationError('Todos os campos são obrigatórios.')

        price = to_decimal(raw_price, default=None)
        if price is None or price <= 0:
            raise ValidationError('Preço deve ser um valor válido maior que zero.', field='price')

        if not self.category_repo.get_by_id(category_id):
            raise ValidationError('Categoria não encontrada.', field='category_id')

        ingredients = data.get('ingredients') or []
        if isinstance(ingredients, str):
            ingredients = [i.strip() for i in ingredients.split(',') if i.strip()]

        return {
            'name': name,
            'description': description,
            'price': price,
            'category_id': category_id,
            'image': _clean(data.get('image')) or None,
            'available': _as_bool(data.get('available'), True),
            'has_addons': _as_bool(data.get('has_addons'), False),
            'ingredients': list(ingredients),
            'preparation_time': data.get('preparation_time'),
            'rating': data.get('rating'),
        }

    def create_product(self, data: Dict[str, Any], user: Optional[str] = None) -> Product:
        fields = self._validate_product(data)
        product = Product(id='', **fields)
        saved = self.product_repo.save_record(product.to_dict())
        product.id = saved['id']
        self._audit(user, 'Produto', 'criado', product.name, product.id)
        return product

    def update_product(self, product_id: str, data: Dict[str, Any], user: Optional[str] = None) -> Product:
        self.get_product(product_id)
        fields = self._validate_product(data)
        product = Product(id=product_id, **fields)
        self.product_repo.save_record(product.to_dict())
        self._audit(user, 'Produto', 'atualizado', product.name, product.id)
        return product

    def toggle_product(self, product_id: str, user: Optional[str] = None) -> Product:
        """Alterna disponible / indisponible."""
        product = self.get_product(product_id)
        product.available = not product.available
        self.product_repo.save_record(product.to_dict())
        self._audit(user, 'Produto', 'ativado' if product.available else 'desativado',
                    product.name, product.id)
        return product

    def delete_product(self, product_id: str, user: Optional[str] = None) -> None:
        product = self.get_product(product_id)
        self.product_repo.delete(product_id)
        self._audit(user, 'Produto', 'excluído', product.name, product.id)

    # =========================================================================
    # CATEGORÍAS
    # =========================================================================

    def list_categories(self, include_inactive: bool = False) -> List[Category]:
        records = self.category_repo.list_all() if include_inactive else self.category_repo.list_active()
        categories = [Category.from_dict(c) for c in records]
        return sorted(categories, key=lambda c: (c.sort_order, c.name.lower()))

    def get_category(self, category_id: str) -> Category:
        return Category.from_dict(
            self._get_record(self.category_repo, category_id, 'Categoria não encontrada.'))

    def create_category(self, data: Dict[str, Any], user: Optional[str] = None) -> Category:
        name = self._require_name(data, 'Nome da categoria é obrigatório.')
        self._check_duplicate(self.category_repo, name, 'Já existe uma categoria com este nome.')
        category = Category(
            id='',
            name=name,
            description=_clean(data.get('description')) or None,
            icon=_clean(data.get('icon')) or None,
            sort_order=int(data.get('sort_order') or 0),
            active=True,
        )
        category.id = self.category_repo.save_record(category.to_dict())['id']
        self._audit(user, 'Categoria', 'criada', category.name, category.id)
        return category

    def update_category(self, category_id: str, data: Dict[str, Any], user: Optional[str] = None) -> Category:
        category = self.get_category(category_id)
        name = self._require_name(data, 'Nome da categoria é obrigatório.')
        self._check_duplicate(self.category_repo, name, 'Já existe uma categoria com este nome.',
                              exclude_id=category_id)
        category.name = name
        if 'description' in data:
            category.description = _clean(data.get('description')) or None
        if 'icon' in data:
            category.icon = _clean(data.get('icon')) or None
        if 'sort_order' in data:
            category.sort_order = int(data.get('sort_order') or 0)
        if 'active' in data:
            category.active = _as_bool(data.get('active'))
        self.category_repo.save_record(category.to_dict())
        self._audit(user, 'Categoria', 'atualizada', category.name, category.id)
        return category

    def delete_category(self, category_id: str, user: Optional[str] = None) -> Category:
        """Baja lógica: la categoría queda inactiva y sus productos salen del cardápio."""
        category = self.get_category(category_id)
        category.active = False
        self.category_repo.save_record(category.to_dict())
        self._audit(user, 'Categoria', 'desativada', category.name, category.id)
        return category

    # =========================================================================
    # ADICIONALES
    # =========================================================================

    def list_extras(self) -> List[Extra]:
        return [Extra.from_dict(e) for e in self.extra_repo.list_all()]

    def get_extra(self, extra_id: str) -> Extra:
        return Extra.from_dict(
            self._get_record(self.extra_repo, extra_id, 'Adicional não encontrado.'))

    def _validate_extra(self, data: Dict[str, Any], exclude_id: Optional[str] = None) -> Extra:
        name = self._require_name(data, 'Nome do adicional é obrigatório.')
        self._check_duplicate(self.extra_repo, name, 'Já existe um adicional com este nome.',
                              exclude_id=exclude_id)
        price = to_decimal(data.get('price'), default=None)
        if price is None or price <= 0:
            raise ValidationError('Preço deve ser um valor válido maior que zero.', field='price')
        return Extra(id=exclude_id or '', name=name, price=price,
                     active=_as_bool(data.get('active'), True))

    def create_extra(self, data: Dict[str, Any], user: Optional[str] = None) -> Extra:
        extra = self._validate_extra(data)
        extra.id = self.extra_repo.save_record(extra.to_dict())['id']
        self._audit(user, 'Adicional', 'criado', extra.name, extra.id)
        return extra

    def update_extra(self, extra_id: str, data: Dict[str, Any], user: Optional[str] = None) -> Extra:
        self.get_extra(extra_id)
        extra = self._validate_extra(data, exclude_id=extra_id)
        self.extra_repo.save_record(extra.to_dict())
        self._audit(user, 'Adicional', 'atualizado', extra.name, extra.id)
        return extra

    def delete_extra(self, extra_id: str, user: Optional[str] = None) -> None:
        extra = self.get_extra(extra_id)
        self.extra_repo.delete(extra_id)
        self._audit(user, 'Adicional', 'excluído', extra.name, extra.id)

    # =========================================================================
    # BARRIOS DE ENTREGA
    # =========================================================================

    def list_delivery_areas(self) -> List[DeliveryArea]:
        return [DeliveryArea.from_dict(a) for a in self.delivery_area_repo.list_all('name')]

    def get_delivery_area(self, area_id: str) -> DeliveryArea:
        return DeliveryArea.from_dict(
            self._get_record(self.delivery_area_repo, area_id, 'Bairro não encontrado.'))

    def _validate_area(self, data: Dict[str, Any], exclude_id: Optional[str] = None) -> DeliveryArea:
        name = self._require_name(data, 'Nome do bairro é obrigatório.')
        self._check_duplicate(self.delivery_area_repo, name, 'Já existe um bairro com este nome.',
                              exclude_id=exclude_id)
        fee = to_decimal(data.get('fee'), default=None)
        if fee is None or fee < 0:
            raise ValidationError('Taxa de entrega não pode ser negativa.', field='fee')
        return DeliveryArea(id=exclude_id or '', name=name, fee=fee,
                            active=_as_bool(data.get('active'), True))

    def create_delivery_area(self, data: Dict[str, Any], user: Optional[str] = None) -> DeliveryArea:
        area = self._validate_area(data)
        area.id = self.delivery_area_repo.save_record(area.to_dict())['id']
        self._audit(user, 'Bairro', 'criado', area.name, area.id)
        return area

    def update_delivery_area(self, area_id: str, data: Dict[str, Any],
                             user: Optional[str] = None) -> DeliveryArea:
        self.get_delivery_area(area_id)
        area = self._validate_area(data, exclude_id=area_id)
        self.delivery_area_repo.save_record(area.to_dict())
        self._audit(user, 'Bairro', 'atualizado', area.name, area.id)
        return area

    def toggle_delivery_area(self, area_id: str, user: Optional[str] = None) -> DeliveryArea:
        area = self.get_delivery_area(area_id)
        area.active = not area.active
        self.delivery_area_repo.save_record(area.to_dict())
        self._audit(user, 'Bairro', 'ativado' if area.active else 'desativado', area.name, area.id)
        return area

    def delete_delivery_area(self, area_id: str, user: Optional[str] = None) -> None:
        area = self.get_delivery_area(area_id)
        self.delivery_area_repo.delete(area_id)
        self._audit(user, 'Bairro', 'excluído', area.name, area.id)

    # =========================================================================
    # FORMAS DE PAGO
    # =========================================================================

    def list_payment_methods(self) -> List[PaymentMethod]:
        return [PaymentMethod.from_dict(m) for m in self.payment_method_repo.list_all()]

    def get_payment_method(self, method_id: str) -> PaymentMethod:
        return PaymentMethod.from_dict(
            self._get_record(self.payment_method_repo, method_id,
                             'Forma de pagamento não encontrada.'))

    def create_payment_method(self, data: Dict[str, Any], user: Optional[str] = None) -> PaymentMethod:
        name = self._require_name(data, 'Nome da forma de pagamento é obrigatório.')
        self._check_duplicate(self.payment_method_repo, name,
                              'Já existe uma forma de pagamento com este nome.')
        method = PaymentMethod(id=_clean(data.get('id')), name=name,
                               active=_as_bool(data.get('active'), True))
        method.id = self.payment_method_repo.save_record(method.to_dict())['id']
        self._audit(user, 'Forma de pagamento', 'criada', method.name, method.id)
        return method

    def update_payment_method(self, method_id: str, data: Dict[str, Any],
                              user: Optional[str] = None) -> PaymentMethod:
        method = self.get_payment_method(method_id)
        name = self._require_name(data, 'Nome da forma de pagamento é obrigatório.')
        self._check_duplicate(self.payment_method_repo, name,
                              'Já existe uma forma de pagamento com este nome.',
                              exclude_id=method_id)
        method.name = name
        if 'active' in data:
            method.active = _as_bool(data.get('active'))
        self.payment_method_repo.save_record(method.to_dict())
        self._audit(user, 'Forma de pagamento', 'atualizada', method.name, method.id)
        return method

    def toggle_payment_method(self, method_id: str, user: Optional[str] = None) -> PaymentMethod:
        method = self.get_payment_method(method_id)
        method.active = not method.active
        self.payment_method_repo.save_record(method.to_dict())
        self._audit(user, 'Forma de pagamento', 'ativada' if method.active else 'desativada',
                    method.name, method.id)
        return method

    def delete_payment_method(self, method_id: str, user: Optional[str] = None) -> None:
        method = self.get_payment_method(method_id)
        self.payment_method_repo.delete(method_id)
        self._audit(user, 'Forma de pagamento', 'excluída', method.name, method.id)

# ==============================================================================
# REPOSITORIOS DE CATÁLOGO
# ==============================================================================
# Productos, categorías, adicionales, barrios de entrega y formas de pago.
# Cada colección es un archivo {id: registro}.
# ==============================================================================

import os
import uuid
from typing import Any, Dict, List, Optional

from .base import DictRepository
from app_pedidos.models.entities import DEFAULT_PAYMENT_METHODS


class CatalogRepository(DictRepository):
    """
    Colección genérica del catálogo.

    Formato (ej. products.json):
    {
        "3f2a...": {"id": "3f2a...", "name": "X-Burger", "price": 25.0, ...}
    }
    """

    # Nombre del archivo (sin extensión); definido por cada subclase
    collection = ''

    # Campo que indica si el registro está activo
    active_field = 'active'

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, f'{self.collection}.json'))

    def list_all(self, sort_key: str = 'name') -> List[Dict[str, Any]]:
        """Todos los registros ordenados por el campo dado."""
        records = list(self.get_all().values())
        return sorted(records, key=lambda r: str(r.get(sort_key) or '').lower())

    def list_active(self, sort_key: str = 'name') -> List[Dict[str, Any]]:
        """Solo los registros activos (un campo ausente se toma como activo)."""
        return [r for r in self.list_all(sort_key) if r.get(self.active_field) is not False]

    def save_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserta o reemplaza un registro. Asigna id si no tiene.

        Returns:
            Registro guardado (con id)
        """
        record = dict(record)
        if not record.get('id'):
            record['id'] = uuid.uuid4().hex
        self.update(record['id'], record)
        return record

    def find_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Busca un registro por nombre, sin distinguir mayúsculas.

        Args:
            name: Nombre a buscar
            exclude_id: Id a ignorar (el registro que se está editando)
        """
        target = (name or '').strip().lower()
        for record in self.get_all().values():
            if exclude_id is not None and str(record.get('id')) == str(exclude_id):
                continue
            if str(record.get('name') or '').strip().lower() == target:
                return record
        return None


class ProductRepository(CatalogRepository):
    collection = 'products'
    active_field = 'available'


class CategoryRepository(CatalogRepository):
    collection = 'categories'


class ExtraRepository(CatalogRepository):
    collection = 'extras'


class DeliveryAreaRepository(CatalogRepository):
    collection = 'delivery_areas'


class PaymentMethodRepository(CatalogRepository):
    """Formas de pago. El archivo nuevo se crea con las cuatro formas por defecto."""
    collection = 'payment_methods'

    def _empty_data(self) -> Dict:
        return {
            code: {'id': code, 'name': label, 'active': True}
            for code, label in DEFAULT_PAYMENT_METHODS.items()
        }

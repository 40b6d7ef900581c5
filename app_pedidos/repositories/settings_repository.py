# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DE LA EMPRESA
# ==============================================================================
# Encapsula el acceso a company_settings.json (un único registro).
# ==============================================================================

import os
from typing import Any, Dict

from .base import DictRepository


class SettingsRepository(DictRepository):
    """
    Repositorio de la configuración de la empresa.

    Formato de company_settings.json:
    {
        "company_name": "Marrom Lanches",
        "whatsapp": "79998130038",
        "free_delivery_minimum": 0.0,
        "is_open": true,
        ...
    }
    """

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directorio de datos
        """
        super().__init__(os.path.join(base_path, 'company_settings.json'))

    def load(self) -> Dict[str, Any]:
        """Configuración guardada (vacía si nunca se guardó)."""
        return self.get_all()

    def save(self, settings: Dict[str, Any]) -> None:
        """Reemplaza la configuración completa."""
        self.save_all(settings)

    def get_setting(self, key: str, default: Any = None) -> Any:
        value = self.load().get(key)
        return default if value is None else value

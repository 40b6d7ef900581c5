# ==============================================================================
# SERVICIO DE CONFIGURACIÓN DE LA EMPRESA
# ==============================================================================

import os
from typing import Any, Dict, Optional

from app_pedidos.models.entities import CompanySettings
from app_pedidos.models.errors import ValidationError
from app_pedidos.models.money import to_decimal
from app_pedidos.repositories.interfaces import ISettingsRepository
from app_pedidos.services.audit_service import AuditService

# Número de WhatsApp usado si la empresa no configuró uno
DEFAULT_WHATSAPP = '79998130038'

# Campos editables desde el panel
EDITABLE_FIELDS = (
    'company_name', 'welcome_title', 'subtitle', 'address', 'phone', 'whatsapp',
    'business_hours', 'free_delivery_minimum', 'delivery_time', 'logo_url', 'is_open',
)


class SettingsService:
    """Lectura y edición de CompanySettings."""

    def __init__(self, settings_repo: ISettingsRepository,
                 audit_service: Optional[AuditService] = None):
        self.settings_repo = settings_repo
        self.audit_service = audit_service

    def get_settings(self) -> CompanySettings:
        return CompanySettings.from_dict(self.settings_repo.load())

    def get_whatsapp_number(self) -> str:
        """
        Número de destino de los pedidos por WhatsApp (solo dígitos).
        Orden: configuración de la empresa, PEDIDOS_WHATSAPP, número por defecto.
        """
        number = self.get_settings().whatsapp or os.environ.get('PEDIDOS_WHATSAPP') or DEFAULT_WHATSAPP
        return ''.join(ch for ch in number if ch.isdigit())

    def update_settings(self, data: Dict[str, Any], user: Optional[str] = None) -> CompanySettings:
        """
        Actualiza los campos enviados; los demás se conservan.

        Raises:
            ValidationError: Nombre vacío o mínimo de entrega negativo
        """
        current = self.get_settings().to_dict()
        changed = []
        for key in EDITABLE_FIELDS:
            if key in data and data[key] != current.get(key):
                current[key] = data[key]
                changed.append(key)

        if 'free_delivery_minimum' in data:
            minimum = to_decimal(data.get('free_delivery_minimum'), default=None)
            if minimum is None or minimum < 0:
                raise ValidationError(
                    'Valor mínimo para entrega grátis não pode ser negativo.',
                    field='free_delivery_minimum')
            current['free_delivery_minimum'] = minimum

        company_name = str(current.get('company_name') or '').strip()
        if 'company_name' in data and not str(data.get('company_name') or '').strip():
            company_name = ''
        if not company_name:
            raise ValidationError('Nome da empresa é obrigatório.', field='company_name')
        current['company_name'] = company_name

        settings = CompanySettings.from_dict(current)
        self.settings_repo.save(settings.to_dict())

        if self.audit_service and user:
            self.audit_service.log_settings_updated(user, changed)
        return settings

from decimal import Decimal

import pytest

from app_pedidos.models.errors import ValidationError
from app_pedidos.services.settings_service import DEFAULT_WHATSAPP


def test_defaults(container):
    settings = container.settings_service.get_settings()
    assert settings.company_name == 'Marrom Lanches'
    assert settings.subtitle == 'O melhor da cidade, direto na sua casa!'
    assert settings.free_delivery_minimum == Decimal('0')


def test_update_keeps_other_fields(container):
    service = container.settings_service
    service.update_settings({'address': 'Av. Principal, 100', 'phone': '(79) 3333-4444'}, 'admin')
    settings = service.update_settings({'free_delivery_minimum': '50,00'}, 'admin')

    assert settings.address == 'Av. Principal, 100'
    assert settings.phone == '(79) 3333-4444'
    assert settings.free_delivery_minimum == Decimal('50.00')
    assert container.settings_repo.get_setting('free_delivery_minimum') == 50.0


def test_company_name_required(container):
    with pytest.raises(ValidationError) as exc:
        container.settings_service.update_settings({'company_name': '   '})
    assert exc.value.message == 'Nome da empresa é obrigatório.'
    assert container.settings_repo.load() == {}


def test_negative_free_delivery_minimum(container):
    with pytest.raises(ValidationError) as exc:
        container.settings_service.update_settings({'free_delivery_minimum': '-1'})
    assert exc.value.field == 'free_delivery_minimum'


def test_whatsapp_number_resolution(container, monkeypatch):
    service = container.settings_service
    monkeypatch.delenv('PEDIDOS_WHATSAPP', raising=False)
    assert service.get_whatsapp_number() == DEFAULT_WHATSAPP

    monkeypatch.setenv('PEDIDOS_WHATSAPP', '+55 79 90000-1111')
    assert service.get_whatsapp_number() == '5579900001111'

    service.update_settings({'whatsapp': '79 98888-7777'})
    assert service.get_whatsapp_number() == '79988887777'


def test_update_is_audited(container):
    container.settings_service.update_settings({'company_name': 'Marrom Burger'}, 'admin')
    logs = container.audit_service.search_logs(log_type='CONFIGURACAO')
    assert len(logs) == 1
    assert 'company_name' in logs[0]['message']

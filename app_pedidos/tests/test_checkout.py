from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import pytest

from app_pedidos.models.cart import Cart
from app_pedidos.models.entities import SelectedExtra
from app_pedidos.models.errors import PersistenceError, ValidationError
from app_pedidos.services.checkout_service import SAVE_ERROR_MESSAGE, CheckoutRequest


def _example_cart(catalog):
    """Produto A x2 com Bacon + Produto B x1 -> subtotal 45.00"""
    bacon = catalog['bacon']
    cart = Cart()
    cart.add_line(catalog['product_a'], 2, notes='sem cebola',
                  extras=[SelectedExtra(id=bacon.id, name=bacon.name, price=bacon.price, quantity=1)])
    cart.add_line(catalog['product_b'], 1)
    return cart


def _delivery_request(catalog, **overrides):
    data = {
        'mode': 'cliente',
        'customer_name': 'Ana',
        'customer_phone': '79999990000',
        'delivery_type': 'delivery',
        'delivery_area_id': catalog['centro'].id,
        'street': 'Rua das Flores',
        'number': '10',
        'reference': 'Perto da praça',
        'payment_method': 'pix',
    }
    data.update(overrides)
    return CheckoutRequest.from_dict(data)


def test_example_order_is_persisted(container, catalog):
    result = container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))
    order = result.order

    assert order.subtotal == Decimal('45.00')
    assert order.delivery_fee == Decimal('5.00')
    assert order.total == Decimal('50.00')
    assert order.status == 'pending'
    assert order.order_type == 'cliente'
    assert order.customer_address == 'Rua das Flores, 10'
    assert order.notes == 'Perto da praça'

    stored = container.order_repo.get_order(order.id)
    assert stored['total'] == 50.0
    assert stored['subtotal'] == 45.0

    items = container.order_repo.get_items(order.id)
    assert len(items) == 2
    first = next(i for i in items if i['product_id'] == catalog['product_a'].id)
    assert first['unit_price'] == 15.5
    assert first['total_price'] == 37.0
    assert first['observations'] == 'sem cebola'
    assert len(first['extras']) == 1
    assert first['extras'][0]['quantity'] == 2
    assert first['extras'][0]['total_price'] == 6.0


def test_whatsapp_link(container, catalog):
    result = container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))

    assert result.ticket is None
    assert result.whatsapp_url.startswith('https://wa.me/79998130038?text=')
    text = parse_qs(urlparse(result.whatsapp_url).query)['text'][0]
    assert text == result.whatsapp_message
    assert '• 2x Produto A - R$ 37,00' in text
    assert '• 1x Produto B - R$ 8,00' in text
    assert 'Total: R$ 50,00' in text
    assert 'Forma de pagamento: PIX' in text
    assert 'Tipo: Entrega' in text


def test_whatsapp_number_from_settings(container, catalog):
    container.settings_service.update_settings({'whatsapp': '(79) 91234-5678'})
    result = container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))
    assert result.whatsapp_url.startswith('https://wa.me/79912345678?text=')


def test_pickup_has_no_fee(container, catalog):
    request = _delivery_request(catalog, delivery_type='pickup')
    result = container.checkout_service.checkout(_example_cart(catalog), request)
    assert result.order.delivery_fee == Decimal('0')
    assert result.order.total == Decimal('45.00')
    assert result.order.customer_address is None


def test_counter_order_renders_ticket(container, catalog):
    request = CheckoutRequest.from_dict({
        'mode': 'estabelecimento',
        'customer_name': 'Mesa do João',
        'table': '7',
        'notes': 'Sem pressa',
        'delivery_type': 'pickup',
    })
    result = container.checkout_service.checkout(_example_cart(catalog), request, user='admin')
    order = result.order

    assert order.payment_method == 'balcao'
    assert order.order_type == 'estabelecimento'
    assert order.notes == 'Mesa: 7 - Sem pressa'
    assert result.whatsapp_url is None

    ticket = result.ticket
    assert 'MARROM LANCHES' in ticket
    assert f"Pedido {order.code}" in ticket
    assert '1. Produto A' in ticket
    assert 'Qtd: 2x | Unit: R$ 18,50 | Total: R$ 37,00' in ticket
    assert 'Adicionais: 1x Bacon' in ticket
    assert 'Obs: sem cebola' in ticket
    assert 'RETIRADA NO BALCÃO' in ticket
    assert 'Pedido no Balcão' in ticket
    assert 'Taxa de Entrega' not in ticket
    assert 'R$ 45,00' in ticket
    assert 'Tempo estimado: 20-30 min' in ticket
    assert result.to_dict()['message'] == 'Comanda gerada com sucesso!'


@pytest.mark.parametrize('overrides, message', [
    ({'payment_method': ''}, 'Por favor, selecione a forma de pagamento'),
    ({'customer_name': ''}, 'Por favor, informe o nome do cliente'),
    ({'street': ''}, 'Por favor, preencha todos os dados de entrega'),
    ({'delivery_area_id': ''}, 'Por favor, preencha todos os dados de entrega'),
])
def test_validation_messages(container, catalog, overrides, message):
    with pytest.raises(ValidationError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog, **overrides))
    assert exc.value.message == message
    assert container.order_repo.list_orders() == []


def test_counter_requires_table(container, catalog):
    request = CheckoutRequest.from_dict({'mode': 'estabelecimento', 'customer_name': 'João'})
    with pytest.raises(ValidationError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), request)
    assert exc.value.message == 'Por favor, informe o número da mesa'


def test_inactive_area_rejected(container, catalog):
    request = _delivery_request(catalog, delivery_area_id=catalog['fechado'].id)
    with pytest.raises(ValidationError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), request)
    assert exc.value.field == 'delivery_area_id'
    assert container.order_repo.list_orders() == []


def test_empty_cart_rejected(container, catalog):
    with pytest.raises(ValidationError):
        container.checkout_service.checkout(Cart(), _delivery_request(catalog))


def test_inactive_payment_method_rejected(container, catalog):
    container.catalog_service.toggle_payment_method('pix')
    with pytest.raises(ValidationError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))
    assert exc.value.field == 'payment_method'


def test_failed_item_write_rolls_back_order(container, catalog, monkeypatch):
    def broken_add_items(items):
        raise PersistenceError('disco cheio')

    monkeypatch.setattr(container.order_repo, 'add_items', broken_add_items)

    with pytest.raises(PersistenceError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))

    assert exc.value.message == SAVE_ERROR_MESSAGE
    assert container.order_repo.list_orders() == []
    assert container.order_repo.get_all_items() == []


def test_corrupt_order_store_is_not_overwritten(container, catalog):
    for _ in range(2):
        container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))
    path = container.order_repo.file_path
    with open(path, 'rb') as f:
        content = f.read()[:-5]
    with open(path, 'wb') as f:
        f.write(content)

    with pytest.raises(PersistenceError) as exc:
        container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))

    assert exc.value.message == SAVE_ERROR_MESSAGE
    with open(path, 'rb') as f:
        assert f.read() == content


def test_checkout_publishes_event(container, catalog):
    subscription = container.notification_service.subscribe(events=['order.created'])
    result = container.checkout_service.checkout(_example_cart(catalog), _delivery_request(catalog))

    message = subscription.get(timeout=1)
    assert message['event'] == 'order.created'
    assert message['payload']['order']['id'] == result.order.id

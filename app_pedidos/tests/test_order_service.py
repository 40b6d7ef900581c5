from datetime import datetime, timedelta, timezone

import pytest

from app_pedidos.models.entities import Order
from app_pedidos.models.errors import NotFoundError, ValidationError

NOW = datetime(2024, 5, 10, 20, 0, tzinfo=timezone.utc)


def _add_order(container, order_id, status='pending', hours_ago=1, **fields):
    created = (NOW - timedelta(hours=hours_ago)).isoformat()
    data = dict(
        id=order_id,
        customer_name=fields.pop('customer_name', 'Ana'),
        status=status,
        created_at=created,
        subtotal=fields.pop('subtotal', '20.00'),
        total=fields.pop('total', '20.00'),
        order_type=fields.pop('order_type', 'cliente'),
        **fields
    )
    container.order_repo.create_order(Order(**data).to_dict())


def test_advance_chain_updates_status(container):
    _add_order(container, 'order-000001')
    service = container.order_service

    for expected in ('preparing', 'ready', 'delivered'):
        result = service.advance('order-000001', 'admin')
        assert result['ok'] and result['changed']
        assert result['new_status'] == expected

    stored = container.order_repo.get_order('order-000001')
    assert stored['status'] == 'delivered'
    assert stored['updated_at'] != stored['created_at']


def test_advance_from_delivered_is_noop(container):
    _add_order(container, 'order-000002', status='delivered')
    before = container.order_repo.get_order('order-000002')

    result = container.order_service.advance('order-000002')

    assert result['ok'] is False
    assert result['changed'] is False
    assert result['status'] == 'delivered'
    assert container.order_repo.get_order('order-000002') == before


def test_cancel_from_ready_is_rejected(container):
    _add_order(container, 'order-000003', status='ready')
    result = container.order_service.cancel('order-000003')
    assert result['changed'] is False
    assert container.order_repo.get_order('order-000003')['status'] == 'ready'


def test_cancel_and_revert(container):
    _add_order(container, 'order-000004', status='preparing')
    _add_order(container, 'order-000005', status='preparing')

    assert container.order_service.cancel('order-000004')['new_status'] == 'cancelled'
    assert container.order_service.revert('order-000005')['new_status'] == 'pending'
    assert container.order_service.revert('order-000005')['changed'] is False


def test_unknown_status_has_no_actions(container):
    _add_order(container, 'order-000006', status='archived')
    result = container.order_service.advance('order-000006')
    assert result['changed'] is False

    board = container.order_service.board(period='all', now=NOW)
    assert [o['id'] for o in board['other']] == ['order-000006']
    info = board['other'][0]['status_info']
    assert info['label'] == 'archived'
    assert info['actions'] == []


def test_missing_order(container):
    with pytest.raises(NotFoundError):
        container.order_service.advance('nao-existe')
    with pytest.raises(NotFoundError):
        container.order_service.get_order('nao-existe')


def test_order_deleted_before_write_is_not_found(container, monkeypatch):
    _add_order(container, 'order-000009')
    received = []
    container.notification_service.subscribe(callback=received.append)
    monkeypatch.setattr(container.order_repo, 'update_status', lambda *args: False)

    with pytest.raises(NotFoundError):
        container.order_service.advance('order-000009')

    assert received == []


def test_status_change_publishes_event(container):
    _add_order(container, 'order-000007')
    received = []
    container.notification_service.subscribe(callback=received.append)

    container.order_service.advance('order-000007', 'maria')

    assert len(received) == 1
    payload = received[0]['payload']
    assert received[0]['event'] == 'order.status_changed'
    assert payload['old_status'] == 'pending'
    assert payload['new_status'] == 'preparing'


def test_status_change_is_audited(container):
    _add_order(container, 'order-000008')
    container.order_service.advance('order-000008', 'maria')
    logs = container.audit_service.search_logs(query='order-000008')
    assert logs
    assert 'Pendente → Preparando' in logs[0]['message']


def test_period_filter(container):
    _add_order(container, 'recent-00001', hours_ago=2)
    _add_order(container, 'week-000001', hours_ago=24 * 3)
    _add_order(container, 'old-0000001', hours_ago=24 * 40)
    service = container.order_service

    assert [o.id for o in service.list_orders(period='24h', now=NOW)] == ['recent-00001']
    assert [o.id for o in service.list_orders(period='7d', now=NOW)] == ['recent-00001', 'week-000001']
    assert len(service.list_orders(period='30d', now=NOW)) == 2
    assert len(service.list_orders(period='all', now=NOW)) == 3


def test_invalid_period(container):
    with pytest.raises(ValidationError):
        container.order_service.list_orders(period='1y')


def test_search_and_filters(container):
    _add_order(container, 'aaa-000001', customer_name='Maria Souza', customer_phone='79988887777')
    _add_order(container, 'bbb-000002', customer_name='Pedro', notes='Mesa: 4',
               order_type='estabelecimento')
    _add_order(container, 'ccc-000003', customer_name='Joana', status='ready')
    service = container.order_service

    assert [o.id for o in service.list_orders(search='maria', now=NOW)] == ['aaa-000001']
    assert [o.id for o in service.list_orders(search='8888', now=NOW)] == ['aaa-000001']
    assert [o.id for o in service.list_orders(search='mesa', now=NOW)] == ['bbb-000002']
    assert [o.id for o in service.list_orders(search='ccc-', now=NOW)] == ['ccc-000003']
    assert [o.id for o in service.list_orders(status='ready', now=NOW)] == ['ccc-000003']
    assert [o.id for o in service.list_orders(order_type='estabelecimento', now=NOW)] == ['bbb-000002']


def test_board_counts_and_summary(container):
    _add_order(container, 'o1', status='pending')
    _add_order(container, 'o2', status='preparing')
    _add_order(container, 'o3', status='ready')
    _add_order(container, 'o4', status='delivered')
    _add_order(container, 'o5', status='cancelled')
    _add_order(container, 'o6', status='out_for_delivery')

    board = container.order_service.board(period='24h', now=NOW)

    assert board['counts'] == {
        'pending': 1, 'preparing': 1, 'ready': 1, 'delivered': 1, 'cancelled': 1,
    }
    assert board['summary'] == {'active': 3, 'completed': 2, 'cancelled': 1, 'total': 6}
    assert [o['id'] for o in board['columns']['ready']] == ['o3']
    assert [o['id'] for o in board['other']] == ['o6']
    assert board['other'][0]['status_info']['label'] == 'Saiu para entrega'
    assert board['columns']['pending'][0]['order_type_label'] == 'Online'


def test_delete_order_removes_items(container, catalog):
    from app_pedidos.models.cart import Cart
    from app_pedidos.services.checkout_service import CheckoutRequest

    cart = Cart()
    cart.add_line(catalog['product_a'], 1)
    request = CheckoutRequest.from_dict({'customer_name': 'Ana', 'payment_method': 'dinheiro'})
    order = container.checkout_service.checkout(cart, request).order

    result = container.order_service.delete_order(order.id, 'admin')

    assert result == {'ok': True, 'deleted': order.id}
    assert container.order_repo.get_order(order.id) is None
    assert container.order_repo.get_items(order.id) == []

import json
import os
from decimal import Decimal

import pytest

from app_pedidos.models.errors import PersistenceError
from app_pedidos.models.money import format_brl, to_decimal, to_money
from app_pedidos.repositories import (
    AuditRepository,
    OrderRepository,
    PaymentMethodRepository,
    ProductRepository,
)


def test_money_helpers():
    assert to_decimal('5,50') == Decimal('5.50')
    assert to_decimal('R$ 1.234,56') == Decimal('1234.56')
    assert to_decimal(0.1) == Decimal('0.1')
    assert to_decimal('abc', default=None) is None
    assert to_money('2.345') == Decimal('2.35')
    assert format_brl(Decimal('1234.5')) == 'R$ 1.234,50'
    assert format_brl(8) == 'R$ 8,00'


def test_corrupt_file_raises_and_is_kept(tmp_path):
    path = tmp_path / 'products.json'
    path.write_text('{not json', encoding='utf-8')
    repo = ProductRepository(str(tmp_path))

    with pytest.raises(PersistenceError):
        repo.get_all()
    with pytest.raises(PersistenceError):
        repo.save_record({'name': 'X-Burger', 'price': 25.0})
    assert path.read_text(encoding='utf-8') == '{not json'


def test_wrong_shape_raises(tmp_path):
    (tmp_path / 'orders.json').write_text('{"a": 1}', encoding='utf-8')
    repo = OrderRepository(str(tmp_path))
    with pytest.raises(PersistenceError):
        repo.create_order({'id': 'o1'})
    assert json.loads((tmp_path / 'orders.json').read_text(encoding='utf-8')) == {'a': 1}


def test_missing_file_reads_as_empty(tmp_path):
    repo = OrderRepository(str(tmp_path))
    os.remove(repo.file_path)
    assert repo.list_orders() == []


def test_save_record_assigns_id(tmp_path):
    repo = ProductRepository(str(tmp_path))
    saved = repo.save_record({'name': 'X-Burger', 'price': 25.0})
    assert saved['id']
    assert repo.get_by_id(saved['id'])['name'] == 'X-Burger'

    with open(os.path.join(str(tmp_path), 'products.json'), encoding='utf-8') as f:
        assert saved['id'] in json.load(f)


def test_list_active_uses_available_field(tmp_path):
    repo = ProductRepository(str(tmp_path))
    repo.save_record({'id': 'a', 'name': 'B', 'available': True})
    repo.save_record({'id': 'b', 'name': 'A', 'available': False})
    repo.save_record({'id': 'c', 'name': 'C'})
    assert [r['id'] for r in repo.list_active()] == ['a', 'c']
    assert [r['id'] for r in repo.list_all()] == ['b', 'a', 'c']


def test_payment_methods_seeded(tmp_path):
    repo = PaymentMethodRepository(str(tmp_path))
    assert set(repo.get_all()) == {'dinheiro', 'pix', 'credito', 'debito'}


def test_unserializable_write_raises_persistence_error(tmp_path):
    repo = ProductRepository(str(tmp_path))
    with pytest.raises(PersistenceError):
        repo.save_record({'id': 'x', 'name': 'X', 'price': Decimal('1.00')})
    assert repo.get_all() == {}
    assert not os.path.exists(repo.file_path + '.tmp')


def test_order_repository_cascade_delete(tmp_path):
    repo = OrderRepository(str(tmp_path))
    repo.create_order({'id': 'o1', 'created_at': '2024-01-01T10:00:00+00:00'})
    repo.create_order({'id': 'o2', 'created_at': '2024-01-02T10:00:00+00:00'})
    repo.add_items([
        {'id': 'i1', 'order_id': 'o1'},
        {'id': 'i2', 'order_id': 'o2'},
    ])
    repo.add_item_extras([
        {'id': 'e1', 'order_item_id': 'i1'},
        {'id': 'e2', 'order_item_id': 'i2'},
    ])

    assert [o['id'] for o in repo.list_orders()] == ['o2', 'o1']
    assert repo.get_items('o1')[0]['extras'] == [{'id': 'e1', 'order_item_id': 'i1'}]

    assert repo.delete_order('o1')
    assert repo.get_order('o1') is None
    assert [i['id'] for i in repo.get_all_items()] == ['i2']
    assert [e['id'] for e in repo.item_extras.get_all()] == ['e2']
    assert not repo.delete_order('o1')


def test_update_status_only_touches_status(tmp_path):
    repo = OrderRepository(str(tmp_path))
    repo.create_order({'id': 'o1', 'status': 'pending', 'total': 50.0})
    assert repo.update_status('o1', 'preparing', '2024-01-01T11:00:00+00:00')
    assert repo.get_order('o1') == {
        'id': 'o1', 'status': 'preparing', 'total': 50.0,
        'updated_at': '2024-01-01T11:00:00+00:00',
    }
    assert not repo.update_status('missing', 'ready', 'x')


def test_audit_search(tmp_path):
    repo = AuditRepository(str(tmp_path))
    repo.log('PEDIDO', 'admin', 'Pedido #abc123 criado', 'abc123')
    repo.log('CATALOGO', 'maria', "Produto 'X' criado por maria", 'p1')

    assert len(repo.search_logs(log_type='PEDIDO')) == 1
    assert len(repo.search_logs(user='maria')) == 1
    assert repo.search_logs(query='ABC123')[0]['related_id'] == 'abc123'
    assert len(repo.get_recent_logs(1)) == 1

from datetime import datetime, timezone

from app_pedidos.services.dashboard_service import DashboardService

NOW = datetime(2024, 5, 10, 15, 0, tzinfo=timezone.utc)

ORDERS = [
    {'id': '1', 'status': 'pending', 'total': 50.0, 'delivery_type': 'delivery',
     'created_at': '2024-05-10T12:00:00+00:00'},
    {'id': '2', 'status': 'preparing', 'total': 30.0, 'delivery_type': 'pickup',
     'created_at': '2024-05-10T11:00:00+00:00'},
    {'id': '3', 'status': 'delivered', 'total': 20.0, 'delivery_type': 'delivery',
     'created_at': '2024-05-08T19:00:00+00:00'},
    {'id': '4', 'status': 'cancelled', 'total': 10.0, 'delivery_type': 'pickup',
     'created_at': '2024-04-01T19:00:00+00:00'},
]

ITEMS = [
    {'order_id': '1', 'product_id': 'a', 'product_name': 'X-Burger', 'quantity': 2, 'total_price': 37.0},
    {'order_id': '2', 'product_id': 'b', 'product_name': 'Refrigerante', 'quantity': 3, 'total_price': 18.0},
    {'order_id': '3', 'product_id': 'a', 'product_name': 'X-Burger', 'quantity': 2, 'total_price': 37.0},
    {'order_id': '4', 'product_id': 'z', 'quantity': 1, 'total_price': 5.0},
]


def _service():
    return DashboardService(
        orders_loader=lambda: ORDERS,
        items_loader=lambda: ITEMS,
        product_name_lookup=lambda pid: 'Batata' if pid == 'z' else None,
    )


def test_totals_include_all_orders():
    data = _service().get_dashboard(NOW)
    assert data['total_orders'] == 4
    assert data['total_revenue'] == 110.0
    assert data['average_order_value'] == 27.5


def test_status_counts_and_active_distribution():
    data = _service().get_dashboard(NOW)
    assert data['status_counts'] == {
        'pending': 1, 'preparing': 1, 'ready': 0, 'delivered': 1, 'cancelled': 1,
    }
    by_status = {e['status']: e for e in data['orders_by_status']}
    assert by_status['Pendente']['percentage'] == 50.0
    assert by_status['Preparando']['percentage'] == 50.0
    assert by_status['Pronto']['count'] == 0


def test_top_products_by_quantity():
    top = _service().get_dashboard(NOW)['top_products']
    assert top[0] == {'name': 'X-Burger', 'quantity': 4, 'revenue': 74.0}
    assert top[1]['name'] == 'Refrigerante'
    assert top[2]['name'] == 'Batata'


def test_orders_by_day_last_seven_days():
    days = _service().get_dashboard(NOW)['orders_by_day']
    assert len(days) == 7
    assert days[-1] == {'date': '10/05', 'orders': 2, 'revenue': 80.0}
    assert days[-3] == {'date': '08/05', 'orders': 1, 'revenue': 20.0}
    assert sum(d['orders'] for d in days) == 3


def test_delivery_vs_pickup():
    split = _service().get_dashboard(NOW)['delivery_vs_pickup']
    assert split[0] == {'type': 'Delivery', 'count': 2, 'percentage': 50.0}
    assert split[1] == {'type': 'Balcão', 'count': 2, 'percentage': 50.0}


def test_empty_dashboard():
    data = DashboardService().get_dashboard(NOW)
    assert data['total_orders'] == 0
    assert data['average_order_value'] == 0.0
    assert data['top_products'] == []

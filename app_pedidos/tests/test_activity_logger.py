import os

import pytest

from app_pedidos import activity_logger


def test_order_event_written(tmp_path, monkeypatch):
    monkeypatch.setattr(activity_logger, 'ENABLE_PROFILING', True)
    activity_logger.set_logs_dir(str(tmp_path))
    activity_logger.log_order_event(
        'order.created',
        {'id': 'abcdef123456', 'customer_name': 'Ana', 'status': 'pending', 'total': 50.0},
        user=None,
    )
    with open(os.path.join(str(tmp_path), 'orders.log'), encoding='utf-8') as f:
        content = f.read()
    assert '[order.created]' in content
    assert 'Pedido: #123456' in content
    assert 'Usuário: cliente' in content


@pytest.mark.skipif(not activity_logger.ENABLE_PROFILING, reason='ENABLE_PROFILING=0')
def test_requests_are_logged(client):
    client.get('/api/settings')
    with open(activity_logger.REQUESTS_LOG, encoding='utf-8') as f:
        content = f.read()
    assert 'Rota: GET /api/settings' in content


def test_profile_function_stats(monkeypatch):
    monkeypatch.setattr(activity_logger, 'ENABLE_PROFILING', True)
    activity_logger.reset_stats()

    @activity_logger.profile_function(name='Soma')
    def soma(a, b):
        return a + b

    assert soma(2, 3) == 5
    stats = activity_logger.get_function_stats()
    assert stats['Soma']['calls'] == 1

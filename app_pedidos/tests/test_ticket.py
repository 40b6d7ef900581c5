import os
import time

import pytest

from app_pedidos.models.entities import Order
from app_pedidos.services.ticket_service import TicketService


@pytest.fixture
def sao_paulo_time(monkeypatch):
    if not hasattr(time, 'tzset'):
        pytest.skip('time.tzset indisponível nesta plataforma')
    monkeypatch.setenv('TZ', 'BRT+3')
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_ticket_header_uses_local_time(sao_paulo_time):
    order = Order(id='pedido-abc123', customer_name='Ana',
                  created_at='2024-05-10T20:00:00+00:00')

    ticket = TicketService().render_ticket(order)

    assert 'Pedido #abc123 • 10/05/2024 17:00' in ticket


def test_ticket_keeps_unparseable_timestamp():
    order = Order(id='pedido-abc123', customer_name='Ana', created_at='ontem')
    assert 'Pedido #abc123 • ontem' in TicketService().render_ticket(order)

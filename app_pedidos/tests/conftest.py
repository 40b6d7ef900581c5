import pytest

from app_pedidos import activity_logger
from app_pedidos.app_container import AppContainer, get_container
from app_pedidos.main import app


@pytest.fixture
def container(tmp_path):
    """Contenedor con un directorio de datos temporal por test."""
    AppContainer.reset_instance()
    activity_logger.set_logs_dir(str(tmp_path / 'logs'))
    c = get_container(str(tmp_path / 'data'))
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def client(container):
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def catalog(container):
    """
    Cardápio mínimo:
      Lanches: Produto A (15.50), Produto B (8.00), Produto Esgotado (indisponível)
      Adicional: Bacon (3.00)
      Bairros: Centro (5.00), Fechado (inativo, 7.00)
    """
    service = container.catalog_service
    lanches = service.create_category({'name': 'Lanches', 'sort_order': 1})
    product_a = service.create_product({
        'name': 'Produto A', 'description': 'Pão, carne e queijo',
        'price': '15.50', 'category_id': lanches.id, 'has_addons': True,
    })
    product_b = service.create_product({
        'name': 'Produto B', 'description': 'Lata 350ml',
        'price': '8.00', 'category_id': lanches.id,
    })
    sold_out = service.create_product({
        'name': 'Produto Esgotado', 'description': 'Sem estoque',
        'price': '10.00', 'category_id': lanches.id, 'available': False,
    })
    bacon = service.create_extra({'name': 'Bacon', 'price': '3.00'})
    centro = service.create_delivery_area({'name': 'Centro', 'fee': '5.00'})
    fechado = service.create_delivery_area({'name': 'Fechado', 'fee': '7.00', 'active': False})
    return {
        'category': lanches,
        'product_a': product_a,
        'product_b': product_b,
        'sold_out': sold_out,
        'bacon': bacon,
        'centro': centro,
        'fechado': fechado,
    }


def login_admin(client, username='admin', password='1234'):
    r = client.post('/admin/login', json={'username': username, 'password': password})
    assert r.status_code == 200, r.get_json()
    return r


@pytest.fixture
def admin_client(client):
    login_admin(client)
    return client

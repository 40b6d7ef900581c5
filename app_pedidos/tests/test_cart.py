from decimal import Decimal

from app_pedidos.models.cart import Cart, new_line_id
from app_pedidos.models.entities import DeliveryArea, Product, SelectedExtra


def _product(pid='a', price='15.50', name='Produto A'):
    return Product(id=pid, name=name, price=Decimal(price))


def _bacon(quantity=1):
    return SelectedExtra(id='bacon', name='Bacon', price=Decimal('3.00'), quantity=quantity)


def test_line_id_format():
    line_id = new_line_id('p1')
    prefix, timestamp, suffix = line_id.split('-')
    assert prefix == 'p1'
    assert timestamp.isdigit()
    assert len(suffix) == 5


def test_subtotal_is_sum_of_line_totals():
    cart = Cart()
    line_a = cart.add_line(_product(), 2, extras=[_bacon()])
    line_b = cart.add_line(_product('b', '8.00', 'Produto B'), 1)

    assert Cart.per_unit_price(line_a) == Decimal('18.50')
    assert Cart.line_total(line_a) == Decimal('37.00')
    assert Cart.line_total(line_b) == Decimal('8.00')
    assert cart.subtotal() == Cart.line_total(line_a) + Cart.line_total(line_b)
    assert cart.subtotal() == Decimal('45.00')
    assert cart.total_items() == 3


def test_example_order_total_with_delivery_fee():
    cart = Cart()
    cart.add_line(_product(), 2, extras=[_bacon()])
    cart.add_line(_product('b', '8.00', 'Produto B'), 1)
    area = DeliveryArea(id='centro', name='Centro', fee=Decimal('5.00'))

    assert cart.delivery_fee('delivery', area) == Decimal('5.00')
    assert cart.order_total('delivery', area) == Decimal('50.00')

    summary = cart.summary('delivery', area)
    assert summary['subtotal'] == '45.00'
    assert summary['delivery_fee'] == '5.00'
    assert summary['total'] == '50.00'
    assert summary['items'][0]['line_total'] == '37.00'


def test_same_product_twice_gives_two_lines():
    cart = Cart()
    first = cart.add_line(_product(), 1, notes='sem cebola')
    second = cart.add_line(_product(), 1, notes='bem passado')

    assert len(cart.lines) == 2
    assert first.line_id != second.line_id

    assert cart.remove_line(first.line_id)
    assert [line.line_id for line in cart.lines] == [second.line_id]
    assert cart.lines[0].notes == 'bem passado'


def test_zero_or_negative_quantity_removes_line():
    cart = Cart()
    keep = cart.add_line(_product(), 1)
    gone = cart.add_line(_product('b', '8.00'), 3)
    other = cart.add_line(_product('c', '2.00'), 1)

    assert cart.set_quantity(gone.line_id, 0)
    assert cart.set_quantity(other.line_id, -2)
    assert [line.line_id for line in cart.lines] == [keep.line_id]


def test_decrement_to_zero_removes_line():
    cart = Cart()
    line = cart.add_line(_product(), 1)
    cart.increment(line.line_id)
    assert cart.get_line(line.line_id).quantity == 2
    cart.decrement(line.line_id)
    cart.decrement(line.line_id)
    assert cart.is_empty()


def test_increment_and_decrement_touch_one_line():
    cart = Cart()
    line_a = cart.add_line(_product(), 1)
    line_b = cart.add_line(_product('b', '8.00', 'Produto B'), 3)

    assert cart.increment(line_a.line_id)
    assert cart.increment(line_a.line_id)
    assert cart.decrement(line_b.line_id)

    assert cart.get_line(line_a.line_id).quantity == 3
    assert cart.get_line(line_b.line_id).quantity == 2
    assert cart.subtotal() == Decimal('62.50')

    assert cart.increment('nao-existe') is False
    assert cart.decrement('nao-existe') is False


def test_add_line_rejects_quantity_below_one():
    cart = Cart()
    assert cart.add_line(_product(), 0) is None
    assert cart.is_empty()


def test_extras_with_zero_quantity_are_dropped():
    cart = Cart()
    line = cart.add_line(_product(), 1, extras=[_bacon(0), _bacon(2)])
    assert len(line.extras) == 1
    assert Cart.per_unit_price(line) == Decimal('21.50')


def test_pickup_has_no_fee_even_with_area():
    cart = Cart()
    cart.add_line(_product(), 1)
    area = DeliveryArea(id='centro', name='Centro', fee=Decimal('5.00'))
    assert cart.delivery_fee('pickup', area) == Decimal('0')
    assert cart.order_total('pickup', area) == Decimal('15.50')


def test_inactive_or_missing_area_has_no_fee():
    closed = DeliveryArea(id='x', name='Fechado', fee=Decimal('7.00'), active=False)
    assert Cart.delivery_fee('delivery', closed) == Decimal('0')
    assert Cart.delivery_fee('delivery', None) == Decimal('0')


def test_rounding_only_at_display():
    cart = Cart()
    cart.add_line(_product(price='0.125'), 3)
    # 0.375 exacto internamente, 0.38 al mostrar
    assert cart.subtotal() == Decimal('0.375')
    assert cart.summary()['subtotal'] == '0.38'


def test_session_roundtrip_keeps_exact_prices():
    cart = Cart()
    line = cart.add_line(_product(price='0.125'), 2, notes='obs', extras=[_bacon()])
    restored = Cart.from_dict(cart.to_dict())

    assert restored.lines[0].line_id == line.line_id
    assert restored.lines[0].product.price == Decimal('0.125')
    assert restored.lines[0].extras[0].price == Decimal('3.00')
    assert restored.subtotal() == cart.subtotal()


def test_from_dict_drops_non_positive_lines():
    data = [
        {'line_id': 'a-1-xxxxx', 'product': {'id': 'a', 'name': 'A', 'price': '1.00'}, 'quantity': 0},
        {'line_id': 'b-1-yyyyy', 'product': {'id': 'b', 'name': 'B', 'price': '2.00'}, 'quantity': 2},
    ]
    cart = Cart.from_dict(data)
    assert [line.line_id for line in cart.lines] == ['b-1-yyyyy']
    assert cart.subtotal() == Decimal('4.00')

from app_pedidos.services.notification_service import (
    EVENT_ORDER_CREATED,
    EVENT_ORDER_DELETED,
    NotificationService,
)


def test_queue_subscriber_receives_events():
    service = NotificationService()
    subscription = service.subscribe()

    assert service.order_created({'id': 'abc', 'status': 'pending'}) == 1
    service.order_deleted('abc')

    events = [m['event'] for m in subscription.drain()]
    assert events == [EVENT_ORDER_CREATED, EVENT_ORDER_DELETED]
    assert subscription.get(timeout=0.01) is None


def test_event_filter():
    service = NotificationService()
    only_deleted = service.subscribe(events=[EVENT_ORDER_DELETED])

    assert service.order_created({'id': 'abc'}) == 0
    assert service.order_deleted('abc') == 1
    assert only_deleted.drain()[0]['payload'] == {'order_id': 'abc'}


def test_failing_subscriber_does_not_block_others():
    service = NotificationService()

    def broken(message):
        raise RuntimeError('boom')

    received = []
    service.subscribe(callback=broken)
    service.subscribe(callback=received.append)

    assert service.order_created({'id': 'abc'}) == 1
    assert len(received) == 1


def test_unsubscribe():
    service = NotificationService()
    subscription = service.subscribe()
    assert service.subscriber_count() == 1
    assert service.unsubscribe(subscription)
    assert not service.unsubscribe(subscription)
    assert service.order_created({'id': 'abc'}) == 0


def test_status_change_payload():
    service = NotificationService()
    subscription = service.subscribe()
    service.order_status_changed({'id': 'abc', 'status': 'ready'}, 'preparing')
    message = subscription.get(timeout=1)
    assert message['payload']['old_status'] == 'preparing'
    assert message['payload']['new_status'] == 'ready'
    assert 'published_at' in message

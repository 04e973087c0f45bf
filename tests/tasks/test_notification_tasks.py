import pytest

from domain.order.events import OrderPlaced
from infrastructure.tasks import CeleryEventPublisher, TaskDispatcher, celery_app
from infrastructure.tasks.tasks.notifications import send_order_confirmation


def _event() -> OrderPlaced:
    return OrderPlaced(
        order_id=1,
        order_number="ORD-1700000000000-001",
        user_id="u1",
        total_amount="36.50",
        item_count=2,
        email="ada@example.com",
    )


def test_celery_runs_eagerly_in_tests():
    assert celery_app.conf.task_always_eager is True
    assert celery_app.conf.task_serializer == "json"


def test_send_order_confirmation_task():
    result = send_order_confirmation.apply(
        kwargs={
            "order_id": 1,
            "order_number": "ORD-1700000000000-001",
            "user_id": "u1",
            "total_amount": "36.50",
            "item_count": 2,
            "email": "ada@example.com",
        }
    )
    assert result.successful()
    assert result.get() == {"order_id": 1, "notified": True}


def test_dispatcher_strips_event_metadata(monkeypatch):
    captured = {}

    def fake_apply_async(*args, **kwargs):
        captured.update(kwargs)

    monkeypatch.setattr(send_order_confirmation, "apply_async", fake_apply_async)
    TaskDispatcher().send_order_confirmation(_event())

    assert "event_id" not in captured["kwargs"]
    assert "occurred_at" not in captured["kwargs"]
    assert captured["kwargs"]["order_number"] == "ORD-1700000000000-001"


def test_publisher_routes_order_placed():
    class FakeDispatcher:
        def __init__(self):
            self.sent = []

        def send_order_confirmation(self, event):
            self.sent.append(event)

    dispatcher = FakeDispatcher()
    publisher = CeleryEventPublisher(dispatcher)
    event = _event()

    publisher.publish(event)
    publisher.publish(object())

    assert dispatcher.sent == [event]


@pytest.mark.asyncio
async def test_checkout_enqueues_confirmation(uow_factory, make_product, checkout_data):
    from application.services.cart_service import CartApplicationService
    from application.services.order_service import OrderApplicationService

    sent = []

    class Dispatcher(TaskDispatcher):
        def send_order_confirmation(self, event):
            sent.append(event)
            super().send_order_confirmation(event)

    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory, event_publisher=CeleryEventPublisher(Dispatcher()))

    order = await service.create_order_from_cart("u1", checkout_data)

    assert [e.order_id for e in sent] == [order.id]

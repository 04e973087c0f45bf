from decimal import Decimal

import pytest

from application.dto import OrderCreateDTO, ProductUpdateDTO
from application.services.cart_service import CartApplicationService
from application.services.catalog_service import CatalogApplicationService
from application.services.order_service import OrderApplicationService
from core.config import OrderSettings
from domain.catalog.entity import ProductStatus
from domain.common.exceptions import (
    EmptyCartException,
    InvalidStateException,
    OrderNotFoundException,
    ProductUnavailableException,
    TransactionFailureException,
)
from domain.order.entity import OrderPaymentStatus, OrderStatus
from domain.order.events import OrderPlaced
from infrastructure.repositories.cart_repository import SQLAlchemyCartRepository
from infrastructure.repositories.order_repository import SQLAlchemyOrderRepository


@pytest.mark.asyncio
async def test_checkout_snapshots_cart_and_clears_it(uow_factory, make_product, publisher, checkout_data):
    first = await make_product(name="First", price="10.00")
    second = await make_product(name="Second", price="5.50")
    cart = CartApplicationService(uow_factory=uow_factory)
    await cart.add_item("u1", first.id, 2)
    await cart.add_item("u1", second.id, 3)

    service = OrderApplicationService(uow_factory, event_publisher=publisher)
    order = await service.create_order_from_cart("u1", checkout_data)

    assert order.total_amount == Decimal("36.50")
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == OrderPaymentStatus.PENDING
    assert order.order_number.startswith("ORD-")
    assert sorted((i.product_id, i.quantity, i.price) for i in order.items) == [
        (first.id, 2, Decimal("10.00")),
        (second.id, 3, Decimal("5.50")),
    ]
    assert order.billing_address == order.shipping_address
    assert (await cart.get_cart("u1")).item_count == 0


@pytest.mark.asyncio
async def test_checkout_publishes_order_placed(uow_factory, make_product, publisher, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)

    order = await OrderApplicationService(uow_factory, event_publisher=publisher).create_order_from_cart(
        "u1", checkout_data
    )

    assert len(publisher.events) == 1
    event = publisher.events[0]
    assert isinstance(event, OrderPlaced)
    assert event.order_id == order.id
    assert event.email == "ada@example.com"
    assert event.total_amount == "10.00"


@pytest.mark.asyncio
async def test_publisher_failure_does_not_undo_order(uow_factory, make_product, checkout_data):
    class Exploding:
        def publish(self, event):
            raise ConnectionError("broker down")

    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory, event_publisher=Exploding())

    order = await service.create_order_from_cart("u1", checkout_data)
    assert (await service.get_order(order.id)).id == order.id


@pytest.mark.asyncio
async def test_snapshot_isolated_from_later_price_change(uow_factory, make_product, checkout_data):
    product = await make_product(price="10.00")
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 2)
    service = OrderApplicationService(uow_factory)
    order = await service.create_order_from_cart("u1", checkout_data)

    await CatalogApplicationService(uow_factory=uow_factory).update_product(
        product.id, ProductUpdateDTO(price=Decimal("99.99"))
    )

    reloaded = await service.get_order(order.id)
    assert reloaded.total_amount == Decimal("20.00")
    assert reloaded.items[0].price == Decimal("10.00")
    assert reloaded.items[0].product.price == Decimal("99.99")


@pytest.mark.asyncio
async def test_empty_cart_creates_no_order(uow_factory, checkout_data):
    service = OrderApplicationService(uow_factory)
    with pytest.raises(EmptyCartException):
        await service.create_order_from_cart("u1", checkout_data)
    _, total = await service.list_orders()
    assert total == 0


@pytest.mark.asyncio
async def test_unavailable_line_aborts_checkout(uow_factory, make_product, checkout_data):
    good = await make_product(name="Good")
    bad = await make_product(name="Retired", status=ProductStatus.NOT_AVAILABLE)
    cart = CartApplicationService(uow_factory=uow_factory)
    await cart.add_item("u1", good.id, 1)
    await cart.add_item("u1", bad.id, 1)

    service = OrderApplicationService(uow_factory)
    with pytest.raises(ProductUnavailableException):
        await service.create_order_from_cart("u1", checkout_data)

    _, total = await service.list_orders()
    assert total == 0
    assert (await cart.get_cart("u1")).item_count == 2


@pytest.mark.asyncio
async def test_create_order_from_explicit_items_keeps_cart(uow_factory, make_product, address):
    product = await make_product(price="4.25")
    cart = CartApplicationService(uow_factory=uow_factory)
    await cart.add_item("u1", product.id, 1)
    data = OrderCreateDTO(
        items=[{"product_id": product.id, "quantity": 4}],
        shipping_address=address,
        payment_method="paypal",
    )

    order = await OrderApplicationService(uow_factory).create_order("u1", data)

    assert order.total_amount == Decimal("17.00")
    assert order.payment_method == "paypal"
    assert (await cart.get_cart("u1")).item_count == 1


@pytest.mark.asyncio
async def test_order_lookups(uow_factory, make_product, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory)
    order = await service.create_order_from_cart("u1", checkout_data)

    assert (await service.get_order_by_number(order.order_number)).id == order.id
    with pytest.raises(OrderNotFoundException):
        await service.get_order(order.id + 100)
    with pytest.raises(OrderNotFoundException):
        await service.get_order_by_number("ORD-0-000")

    mine, total = await service.list_user_orders("u1")
    assert total == 1 and mine[0].id == order.id
    _, others = await service.list_user_orders("u2")
    assert others == 0

    found, total = await service.list_orders(search=order.order_number[-7:])
    assert total == 1 and found[0].order_number == order.order_number
    assert (await service.list_orders(search=order.order_number.lower()))[1] == 1


@pytest.mark.asyncio
async def test_order_search_treats_wildcards_literally(uow_factory, make_product, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory)
    await service.create_order_from_cart("u1", checkout_data)

    for term in ("%", "_", "ORD_"):
        found, total = await service.list_orders(search=term)
        assert (found, total) == ([], 0)


@pytest.mark.asyncio
async def test_status_transitions_are_enforced(uow_factory, make_product, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory)
    order = await service.create_order_from_cart("u1", checkout_data)

    with pytest.raises(InvalidStateException):
        await service.update_status(order.id, OrderStatus.DELIVERED)

    updated = await service.update_status(order.id, OrderStatus.CONFIRMED)
    assert updated.status == OrderStatus.CONFIRMED


@pytest.mark.asyncio
async def test_permissive_transitions_when_disabled(uow_factory, make_product, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory, order_settings=OrderSettings(enforce_transitions=False))
    order = await service.create_order_from_cart("u1", checkout_data)

    updated = await service.update_status(order.id, OrderStatus.DELIVERED)
    assert updated.status == OrderStatus.DELIVERED


@pytest.mark.asyncio
async def test_cancel_and_stats(uow_factory, make_product, checkout_data):
    product = await make_product(price="30.00")
    cart = CartApplicationService(uow_factory=uow_factory)
    service = OrderApplicationService(uow_factory, order_settings=OrderSettings(enforce_transitions=False))

    await cart.add_item("u1", product.id, 1)
    delivered = await service.create_order_from_cart("u1", checkout_data)
    await service.update_status(delivered.id, OrderStatus.DELIVERED)

    await cart.add_item("u1", product.id, 2)
    cancelled = await service.cancel_order((await service.create_order_from_cart("u1", checkout_data)).id)
    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.payment_status == OrderPaymentStatus.CANCELLED

    await cart.add_item("u2", product.id, 1)
    await service.create_order_from_cart("u2", checkout_data)

    stats = await service.order_stats()
    assert stats.total_orders == 3
    assert stats.pending_orders == 1
    assert stats.delivered_orders == 1
    assert stats.total_revenue == Decimal("30.00")
    assert (await service.order_stats("u2")).total_orders == 1


@pytest.mark.asyncio
async def test_admin_payment_status_override(uow_factory, make_product, checkout_data):
    product = await make_product()
    await CartApplicationService(uow_factory=uow_factory).add_item("u1", product.id, 1)
    service = OrderApplicationService(uow_factory)
    order = await service.create_order_from_cart("u1", checkout_data)

    updated = await service.update_payment_status(order.id, OrderPaymentStatus.PROCESSING)
    assert updated.payment_status == OrderPaymentStatus.PROCESSING
    assert updated.status == OrderStatus.PENDING


def _fixed_numbers(*numbers):
    """Order number factory that hands out the given numbers, repeating the last one."""
    pending = list(numbers)

    def _next(prefix):
        return pending.pop(0) if len(pending) > 1 else pending[0]

    return _next


@pytest.mark.asyncio
async def test_cart_clear_failure_keeps_order(uow_factory, make_product, checkout_data, monkeypatch):
    product = await make_product()
    cart = CartApplicationService(uow_factory=uow_factory)
    await cart.add_item("u1", product.id, 2)

    async def _broken_delete(self, user_id):
        raise RuntimeError("cart store unavailable")

    monkeypatch.setattr(SQLAlchemyCartRepository, "delete_by_user", _broken_delete)
    service = OrderApplicationService(uow_factory)

    order = await service.create_order_from_cart("u1", checkout_data)

    assert order.id is not None
    assert order.total_amount == Decimal("20.00")
    assert (await service.get_order(order.id)).order_number == order.order_number
    # the order stands even though the cart was left untouched
    assert (await cart.get_cart("u1")).item_count == 1


@pytest.mark.asyncio
async def test_order_number_collision_is_retried(uow_factory, make_product, address):
    product = await make_product()
    data = OrderCreateDTO(
        shipping_address=address, payment_method="stripe", items=[{"product_id": product.id, "quantity": 1}]
    )

    first = await OrderApplicationService(
        uow_factory, number_factory=_fixed_numbers("ORD-1-001")
    ).create_order("u1", data)
    second = await OrderApplicationService(
        uow_factory, number_factory=_fixed_numbers("ORD-1-001", "ORD-1-002")
    ).create_order("u2", data)

    assert first.order_number == "ORD-1-001"
    assert second.order_number == "ORD-1-002"


@pytest.mark.asyncio
async def test_order_number_exhaustion_creates_nothing(uow_factory, make_product, address):
    product = await make_product()
    data = OrderCreateDTO(
        shipping_address=address, payment_method="stripe", items=[{"product_id": product.id, "quantity": 1}]
    )
    await OrderApplicationService(uow_factory, number_factory=_fixed_numbers("ORD-1-001")).create_order("u1", data)

    service = OrderApplicationService(
        uow_factory,
        order_settings=OrderSettings(order_number_max_attempts=3),
        number_factory=_fixed_numbers("ORD-1-001"),
    )
    with pytest.raises(TransactionFailureException):
        await service.create_order("u2", data)

    _, total = await service.list_orders()
    assert total == 1
    _, mine = await service.list_user_orders("u2")
    assert mine == 0


@pytest.mark.asyncio
async def test_order_number_clash_at_insert_rolls_back(uow_factory, make_product, checkout_data, monkeypatch):
    product = await make_product()
    cart = CartApplicationService(uow_factory=uow_factory)
    await cart.add_item("u1", product.id, 1)
    await OrderApplicationService(uow_factory, number_factory=_fixed_numbers("ORD-1-001")).create_order_from_cart(
        "u1", checkout_data
    )
    await cart.add_item("u2", product.id, 1)

    async def _never_exists(self, order_number):
        return False

    monkeypatch.setattr(SQLAlchemyOrderRepository, "exists_by_number", _never_exists)
    service = OrderApplicationService(uow_factory, number_factory=_fixed_numbers("ORD-1-001"))

    with pytest.raises(TransactionFailureException):
        await service.create_order_from_cart("u2", checkout_data)

    _, total = await service.list_orders()
    assert total == 1
    assert (await cart.get_cart("u2")).item_count == 1

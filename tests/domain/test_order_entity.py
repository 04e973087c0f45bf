from decimal import Decimal

import pytest

from domain.common.exceptions import DomainValidationException, InvalidStateException
from domain.order.entity import Order, OrderItem, OrderPaymentStatus, OrderStatus
from domain.order.service import generate_order_number


def _order(*lines) -> Order:
    items = [OrderItem(id=None, product_id=i + 1, quantity=q, price=Decimal(p)) for i, (p, q) in enumerate(lines)]
    return Order.place(
        order_number="ORD-1-001",
        user_id="u1",
        items=items,
        shipping_address={"email": "a@example.com"},
    )


def test_place_snapshots_total_and_defaults_billing():
    order = _order(("10.00", 2), ("5.50", 3))
    assert order.total_amount == Decimal("36.50")
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == OrderPaymentStatus.PENDING
    assert order.billing_address == order.shipping_address


def test_place_requires_items():
    with pytest.raises(DomainValidationException):
        Order.place(order_number="ORD-1-001", user_id="u1", items=[], shipping_address={})


def test_status_follows_transition_table():
    order = _order(("1.00", 1))
    order.change_status(OrderStatus.CONFIRMED)
    order.change_status(OrderStatus.SHIPPED)
    order.change_status(OrderStatus.DELIVERED)
    assert order.status == OrderStatus.DELIVERED


def test_illegal_transition_rejected():
    order = _order(("1.00", 1))
    with pytest.raises(InvalidStateException) as exc_info:
        order.change_status(OrderStatus.DELIVERED)
    assert exc_info.value.details == {"current": "PENDING", "target": "DELIVERED"}
    assert order.status == OrderStatus.PENDING


def test_illegal_transition_allowed_when_not_enforced():
    order = _order(("1.00", 1))
    order.change_status(OrderStatus.DELIVERED, enforce_transitions=False)
    assert order.status == OrderStatus.DELIVERED


def test_cancel_is_forced_from_any_state():
    order = _order(("1.00", 1))
    order.change_status(OrderStatus.DELIVERED, enforce_transitions=False)
    order.cancel()
    assert order.status == OrderStatus.CANCELLED
    assert order.payment_status == OrderPaymentStatus.CANCELLED


def test_generate_order_number_format():
    number = generate_order_number("ORD", now_ms=1700000000123, rng=lambda a, b: 7)
    assert number == "ORD-1700000000123-007"

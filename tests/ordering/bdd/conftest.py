"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.catalog.port import ProductSnapshot
from ordering.order.events import (
    OrderApproved,
    OrderCancelled,
    OrderCompleted,
    OrderConfirmed,
    OrderMarkedReady,
    OrderModificationsAccepted,
    OrderModificationsRejected,
    OrderModified,
    OrderPlaced,
    OrderRejected,
)
from ordering.order.order import Order
from ordering.order.pricing import price_line
from ordering.shared.exceptions import ForbiddenError
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderApproved": OrderApproved,
    "OrderRejected": OrderRejected,
    "OrderConfirmed": OrderConfirmed,
    "OrderCancelled": OrderCancelled,
    "OrderMarkedReady": OrderMarkedReady,
    "OrderCompleted": OrderCompleted,
    "OrderModified": OrderModified,
    "OrderModificationsAccepted": OrderModificationsAccepted,
    "OrderModificationsRejected": OrderModificationsRejected,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def buyer_id():
    return "buyer-001"


@pytest.fixture()
def admin_id():
    return "admin-001"


@pytest.fixture()
def error():
    """Container for captured validation and authorization errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a pending order for {quantity:d} units at {price:f}"), target_fixture="order")
def pending_order(buyer_id, quantity, price):
    product = ProductSnapshot(id="prod-001", code="WID-001", name="Widget", currency="USD", price=price)
    order = Order.place(buyer_id=buyer_id, currency="USD", priced_lines=[price_line(product, quantity)])
    order._events.clear()
    return order


@given("the order was approved", target_fixture="order")
def approved_order(order, admin_id):
    order.approve(admin_id, True)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse("the order total is {total:f}"))
def order_total_is(order, total):
    assert order.total == pytest.approx(total)


@then("the order action fails with a validation error")
def order_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then("the order action is forbidden")
def order_action_forbidden(error):
    assert isinstance(error["exc"], ForbiddenError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then(parsers.cfparse('the order cancellation reason is "{reason}"'))
def order_cancellation_reason_is(order, reason):
    assert order.cancellation_reason == reason

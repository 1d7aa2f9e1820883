"""Tests for the Order state machine — every action against every status."""

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
    OrderRejected,
)
from ordering.order.order import Order, OrderStatus
from ordering.order.pricing import price_line
from protean.exceptions import ValidationError

BUYER = "buyer-001"
ADMIN = "admin-001"

PRODUCT = ProductSnapshot(id="prod-001", code="WID-001", name="Widget", currency="USD", price=100.0)


def _make_order():
    order = Order.place(buyer_id=BUYER, currency="USD", priced_lines=[price_line(PRODUCT, 5)])
    order._events.clear()
    return order


def _order_at_state(target_status):
    """Create an order and walk it to the desired status."""
    order = _make_order()

    if target_status == OrderStatus.PENDING_APPROVAL:
        pass
    elif target_status == OrderStatus.REJECTED:
        order.reject(ADMIN, True, "Out of stock")
    elif target_status == OrderStatus.MODIFICATION_PENDING:
        order.modify(ADMIN, True, "Short on stock", [{"product_id": "prod-001", "new_quantity": 3}])
    elif target_status == OrderStatus.CANCELLED:
        order.cancel(BUYER, "Changed my mind")
    else:
        order.approve(ADMIN, True)
        if target_status == OrderStatus.CONFIRMED:
            order.confirm(BUYER)
        elif target_status == OrderStatus.READY_FOR_PICKUP:
            order.mark_ready(ADMIN, True)
        elif target_status == OrderStatus.COMPLETED:
            order.mark_ready(ADMIN, True)
            order.complete(ADMIN, True)

    assert order.status == target_status.value
    order._events.clear()
    return order


# Each action performed by an actor allowed to perform it
_ACTIONS = {
    "approve": lambda order: order.approve(ADMIN, True),
    "reject": lambda order: order.reject(ADMIN, True, "Out of stock"),
    "confirm": lambda order: order.confirm(BUYER),
    "cancel": lambda order: order.cancel(BUYER, "Changed my mind"),
    "admin_cancel": lambda order: order.cancel_as_admin(ADMIN, True, "Suspicious order"),
    "mark_ready": lambda order: order.mark_ready(ADMIN, True),
    "complete": lambda order: order.complete(ADMIN, True),
    "modify": lambda order: order.modify(
        ADMIN, True, "Short on stock", [{"product_id": "prod-001", "new_quantity": 2}]
    ),
    "accept_modifications": lambda order: order.accept_modifications(BUYER),
    "reject_modifications": lambda order: order.reject_modifications(BUYER, "Too few"),
}

_CANCELLABLE = {
    OrderStatus.PENDING_APPROVAL: OrderStatus.CANCELLED,
    OrderStatus.APPROVED: OrderStatus.CANCELLED,
    OrderStatus.MODIFICATION_PENDING: OrderStatus.CANCELLED,
    OrderStatus.CONFIRMED: OrderStatus.CANCELLED,
}

# action -> {allowed source status: resulting status}
_EXPECTED = {
    "approve": {OrderStatus.PENDING_APPROVAL: OrderStatus.APPROVED},
    "reject": {OrderStatus.PENDING_APPROVAL: OrderStatus.REJECTED},
    "confirm": {OrderStatus.APPROVED: OrderStatus.CONFIRMED},
    "cancel": _CANCELLABLE,
    "admin_cancel": _CANCELLABLE,
    "mark_ready": {
        OrderStatus.APPROVED: OrderStatus.READY_FOR_PICKUP,
        OrderStatus.CONFIRMED: OrderStatus.READY_FOR_PICKUP,
    },
    "complete": {OrderStatus.READY_FOR_PICKUP: OrderStatus.COMPLETED},
    "modify": {OrderStatus.PENDING_APPROVAL: OrderStatus.MODIFICATION_PENDING},
    "accept_modifications": {OrderStatus.MODIFICATION_PENDING: OrderStatus.APPROVED},
    "reject_modifications": {OrderStatus.MODIFICATION_PENDING: OrderStatus.CANCELLED},
}

_EVENTS = {
    "approve": OrderApproved,
    "reject": OrderRejected,
    "confirm": OrderConfirmed,
    "cancel": OrderCancelled,
    "admin_cancel": OrderCancelled,
    "mark_ready": OrderMarkedReady,
    "complete": OrderCompleted,
    "modify": OrderModified,
    "accept_modifications": OrderModificationsAccepted,
    "reject_modifications": OrderModificationsRejected,
}

_ALLOWED = [(action, source) for action, edges in _EXPECTED.items() for source in edges]
_FORBIDDEN = [
    (action, source) for action in _EXPECTED for source in OrderStatus if source not in _EXPECTED[action]
]


def _id(value):
    return value.value if isinstance(value, OrderStatus) else value


class TestAllowedTransitions:
    @pytest.mark.parametrize("action,source", _ALLOWED, ids=_id)
    def test_transition(self, action, source):
        order = _order_at_state(source)
        _ACTIONS[action](order)
        assert order.status == _EXPECTED[action][source].value

    @pytest.mark.parametrize("action,source", _ALLOWED, ids=_id)
    def test_transition_raises_one_event(self, action, source):
        order = _order_at_state(source)
        _ACTIONS[action](order)
        assert len(order._events) == 1
        assert isinstance(order._events[0], _EVENTS[action])


class TestInvalidTransitions:
    @pytest.mark.parametrize("action,source", _FORBIDDEN, ids=_id)
    def test_action_fails_from_wrong_status(self, action, source):
        order = _order_at_state(source)
        with pytest.raises(ValidationError) as exc:
            _ACTIONS[action](order)
        assert "status" in exc.value.messages

    @pytest.mark.parametrize("action,source", _FORBIDDEN, ids=_id)
    def test_failed_action_leaves_order_untouched(self, action, source):
        order = _order_at_state(source)
        before = order.to_dict()
        with pytest.raises(ValidationError):
            _ACTIONS[action](order)
        assert order.to_dict() == before
        assert order._events == []

    def test_approve_twice_fails_second_time(self):
        order = _make_order()
        order.approve(ADMIN, True)
        with pytest.raises(ValidationError):
            order.approve(ADMIN, True)

    @pytest.mark.parametrize(
        "terminal",
        [OrderStatus.REJECTED, OrderStatus.CANCELLED, OrderStatus.COMPLETED],
        ids=_id,
    )
    def test_terminal_states_accept_no_action(self, terminal):
        for action in _ACTIONS:
            order = _order_at_state(terminal)
            with pytest.raises(ValidationError):
                _ACTIONS[action](order)


class TestTransitionSideEffects:
    def test_approve_stamps_approver_and_keeps_note(self):
        order = _make_order()
        order.approve(ADMIN, True, admin_notes="  Pickup at the back door  ")

        assert order.approved_by == ADMIN
        assert order.approved_at is not None
        assert order.admin_notes == "Pickup at the back door"

    def test_blank_note_keeps_existing_note(self):
        order = _make_order()
        order.approve(ADMIN, True, admin_notes="First note")
        order.mark_ready(ADMIN, True, notes="   ")
        assert order.admin_notes == "First note"

    def test_reject_records_reason(self):
        order = _make_order()
        order.reject(ADMIN, True, "Out of stock")

        assert order.rejection_reason == "Out of stock"
        assert order.rejected_by == ADMIN
        assert order.rejected_at is not None

    def test_confirm_stores_user_note(self):
        order = _order_at_state(OrderStatus.APPROVED)
        order.confirm(BUYER, note="See you Friday")

        assert order.user_notes == "See you Friday"
        assert order.confirmed_by == BUYER
        assert order.confirmed_at is not None

    def test_cancel_records_reason_and_actor(self):
        order = _order_at_state(OrderStatus.CONFIRMED)
        order.cancel(BUYER, "Found it cheaper")

        assert order.cancellation_reason == "Found it cheaper"
        assert order.cancelled_by == BUYER
        assert order.cancelled_at is not None

    def test_admin_cancel_records_admin(self):
        order = _order_at_state(OrderStatus.APPROVED)
        order.cancel_as_admin(ADMIN, True, "Duplicate order")

        assert order.cancelled_by == ADMIN
        assert order.cancellation_reason == "Duplicate order"

    def test_ready_and_complete_stamp_actor(self):
        order = _order_at_state(OrderStatus.APPROVED)
        order.mark_ready(ADMIN, True, notes="Shelf B")
        order.complete(ADMIN, True)

        assert order.ready_by == ADMIN
        assert order.ready_at is not None
        assert order.completed_by == ADMIN
        assert order.completed_at is not None
        assert order.admin_notes == "Shelf B"

    def test_updated_at_moves_forward(self):
        order = _make_order()
        created_at = order.created_at
        order.approve(ADMIN, True)
        assert order.updated_at >= created_at


class TestRequiredInput:
    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reject_requires_reason(self, reason):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.reject(ADMIN, True, reason)
        assert "reason" in exc.value.messages
        assert order.status == OrderStatus.PENDING_APPROVAL.value

    def test_cancel_requires_reason(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.cancel(BUYER, "")

    def test_reject_modifications_requires_reason(self):
        order = _order_at_state(OrderStatus.MODIFICATION_PENDING)
        with pytest.raises(ValidationError):
            order.reject_modifications(BUYER, " ")

    def test_reason_length_limit(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.reject(ADMIN, True, "x" * 1001)
        assert "reason" in exc.value.messages

    def test_reason_at_limit_is_accepted(self):
        order = _make_order()
        order.reject(ADMIN, True, "x" * 1000)
        assert order.status == OrderStatus.REJECTED.value

    def test_admin_note_length_limit(self):
        order = _make_order()
        order.approve(ADMIN, True, admin_notes="n" * 2000)
        assert len(order.admin_notes) == 2000

        other = _make_order()
        with pytest.raises(ValidationError):
            other.approve(ADMIN, True, admin_notes="n" * 2001)

    def test_buyer_note_length_limit(self):
        order = _order_at_state(OrderStatus.APPROVED)
        with pytest.raises(ValidationError) as exc:
            order.confirm(BUYER, note="n" * 1001)
        assert "note" in exc.value.messages

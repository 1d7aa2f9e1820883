"""Internal event handler — Ordering reacts to its own committed Order events.

Runs after the unit of work that raised the event has committed, so buyers
and admins are told about an order change only once it is stored. Clears
the buyer's cart after checkout and writes one info line per operation.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.catalog import get_cart_reader
from ordering.domain import ordering
from ordering.notifier import get_notifier
from ordering.order.assembler import to_view
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

logger = structlog.get_logger(__name__)


def _announce(order_id, operation: str, actor_id, created: bool = False) -> None:
    order = current_domain.repository_for(Order).get(order_id)
    view = to_view(order)
    if created:
        get_notifier().notify_created(view)
    else:
        get_notifier().notify_updated(view)

    logger.info(
        f"Order {operation}",
        order_id=str(order.id),
        actor_id=str(actor_id),
        status=order.status,
    )


@ordering.event_handler(part_of=Order)
class OrderLifecycleEventHandler:
    """Notifies and logs every stored Order change."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        if event.cart_id:
            get_cart_reader().clear_cart(event.cart_id)
        _announce(event.order_id, "placed", event.buyer_id, created=True)

    @handle(OrderApproved)
    def on_order_approved(self, event: OrderApproved) -> None:
        _announce(event.order_id, "approved", event.approved_by)

    @handle(OrderRejected)
    def on_order_rejected(self, event: OrderRejected) -> None:
        _announce(event.order_id, "rejected", event.rejected_by)

    @handle(OrderConfirmed)
    def on_order_confirmed(self, event: OrderConfirmed) -> None:
        _announce(event.order_id, "confirmed", event.buyer_id)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        operation = "cancelled by admin" if event.by_admin else "cancelled"
        _announce(event.order_id, operation, event.cancelled_by)

    @handle(OrderMarkedReady)
    def on_order_marked_ready(self, event: OrderMarkedReady) -> None:
        _announce(event.order_id, "marked ready for pickup", event.ready_by)

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        _announce(event.order_id, "completed", event.completed_by)

    @handle(OrderModified)
    def on_order_modified(self, event: OrderModified) -> None:
        _announce(event.order_id, "modified", event.modified_by)

    @handle(OrderModificationsAccepted)
    def on_modifications_accepted(self, event: OrderModificationsAccepted) -> None:
        _announce(event.order_id, "modifications accepted", event.buyer_id)

    @handle(OrderModificationsRejected)
    def on_modifications_rejected(self, event: OrderModificationsRejected) -> None:
        _announce(event.order_id, "modifications rejected", event.buyer_id)

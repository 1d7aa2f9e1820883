"""Human-readable notification messages for order changes."""

from dataclasses import dataclass

from ordering.order.order import OrderStatus
from ordering.order.views import OrderView

# Status the order moved into -> (title template, view attribute used as body)
_UPDATED_TEMPLATES = {
    OrderStatus.APPROVED.value: ("Order {number} approved", None),
    OrderStatus.REJECTED.value: ("Order {number} rejected", "rejection_reason"),
    OrderStatus.READY_FOR_PICKUP.value: ("Order {number} is ready for pickup", "admin_notes"),
    OrderStatus.COMPLETED.value: ("Order {number} completed", None),
    OrderStatus.CANCELLED.value: ("Order {number} cancelled", "cancellation_reason"),
    OrderStatus.MODIFICATION_PENDING.value: (
        "Order {number} was modified and needs your review",
        "modification_reason",
    ),
}


@dataclass(frozen=True)
class NotificationMessage:
    order_id: str
    buyer_id: str
    title: str
    body: str | None = None


def created_message(order: OrderView) -> NotificationMessage:
    return NotificationMessage(
        order_id=order.id,
        buyer_id=order.buyer_id,
        title=f"Order {order.number} received",
        body=f"Total: {order.currency} {order.total:.2f}",
    )


def updated_message(order: OrderView) -> NotificationMessage:
    """Title and body depend on the status the order moved into."""
    title_template, body_attr = _UPDATED_TEMPLATES.get(order.status, ("Order {number} updated", None))
    return NotificationMessage(
        order_id=order.id,
        buyer_id=order.buyer_id,
        title=title_template.format(number=order.number),
        body=getattr(order, body_attr) if body_attr else None,
    )

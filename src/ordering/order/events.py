"""Domain events for the Order aggregate.

Each successful workflow operation raises exactly one of these facts.
They are recorded on commit of the surrounding unit of work and never
raised for rejected attempts.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A buyer's cart was converted into a new order awaiting approval."""

    __version__ = 1

    order_id = Identifier(required=True)
    number = String(required=True)
    buyer_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    discount_total = Float(required=True)
    total = Float(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)
    cart_id = String()


@ordering.event(part_of="Order")
class OrderApproved:
    """An admin approved a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    approved_by = Identifier(required=True)
    approved_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRejected:
    """An admin rejected a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    rejected_by = Identifier(required=True)
    reason = Text(required=True)
    rejected_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderConfirmed:
    """The buyer confirmed an approved order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled by its buyer or by an admin."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    cancelled_by = Identifier(required=True)
    reason = Text(required=True)
    cancelled_at = DateTime(required=True)
    by_admin = Boolean(default=False)


@ordering.event(part_of="Order")
class OrderMarkedReady:
    """An admin marked the order ready for pickup."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    ready_by = Identifier(required=True)
    ready_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCompleted:
    """The order was handed over and closed by an admin."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    completed_by = Identifier(required=True)
    completed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderModified:
    """An admin rewrote line quantities; the buyer must accept or reject them."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    modified_by = Identifier(required=True)
    reason = Text(required=True)
    changes = Text(required=True)  # JSON: list of {product_id, previous_quantity, new_quantity}
    original_total = Float(required=True)
    new_total = Float(required=True)
    modified_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderModificationsAccepted:
    """The buyer accepted the admin's modifications; the order is approved."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    total = Float(required=True)
    accepted_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderModificationsRejected:
    """The buyer refused the admin's modifications; the order is cancelled."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    reason = Text(required=True)
    rejected_at = DateTime(required=True)

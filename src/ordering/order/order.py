"""Order aggregate — the priced result of a checkout and its approval workflow.

An order is created from a buyer's cart with every line priced and frozen,
then negotiated between the buyer and an admin until it is picked up,
rejected or cancelled. All status changes go through a single transition
table keyed by (current status, action); every other field write is a side
effect of one of those transitions.

State Machine (8 states):
    PENDING_APPROVAL → APPROVED / REJECTED / MODIFICATION_PENDING / CANCELLED
    MODIFICATION_PENDING → APPROVED (buyer accepts) / CANCELLED (buyer rejects)
    APPROVED → CONFIRMED / READY_FOR_PICKUP / CANCELLED
    CONFIRMED → READY_FOR_PICKUP / CANCELLED
    READY_FOR_PICKUP → COMPLETED
    REJECTED, CANCELLED, COMPLETED are terminal.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from ordering.domain import ordering
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
from ordering.shared.exceptions import ForbiddenError

REASON_MAX_LENGTH = 1000
NOTE_MAX_LENGTH = 1000
ADMIN_NOTE_MAX_LENGTH = 2000
MAX_MODIFIED_LINES = 100


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING_APPROVAL = "PendingApproval"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    MODIFICATION_PENDING = "ModificationPending"
    CONFIRMED = "Confirmed"
    READY_FOR_PICKUP = "ReadyForPickup"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class OrderAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    ADMIN_CANCEL = "admin_cancel"
    MARK_READY = "mark_ready"
    COMPLETE = "complete"
    MODIFY = "modify"
    ACCEPT_MODIFICATIONS = "accept_modifications"
    REJECT_MODIFICATIONS = "reject_modifications"

    @property
    def verb(self) -> str:
        return _VERBS.get(self, self.value)


_VERBS = {
    OrderAction.ADMIN_CANCEL: "cancel",
    OrderAction.MARK_READY: "mark ready",
    OrderAction.ACCEPT_MODIFICATIONS: "accept modifications for",
    OrderAction.REJECT_MODIFICATIONS: "reject modifications for",
}


# State machine transition table: (current status, action) -> next status
_TRANSITIONS = {
    (OrderStatus.PENDING_APPROVAL, OrderAction.APPROVE): OrderStatus.APPROVED,
    (OrderStatus.PENDING_APPROVAL, OrderAction.REJECT): OrderStatus.REJECTED,
    (OrderStatus.PENDING_APPROVAL, OrderAction.MODIFY): OrderStatus.MODIFICATION_PENDING,
    (OrderStatus.APPROVED, OrderAction.CONFIRM): OrderStatus.CONFIRMED,
    (OrderStatus.APPROVED, OrderAction.MARK_READY): OrderStatus.READY_FOR_PICKUP,
    (OrderStatus.CONFIRMED, OrderAction.MARK_READY): OrderStatus.READY_FOR_PICKUP,
    (OrderStatus.READY_FOR_PICKUP, OrderAction.COMPLETE): OrderStatus.COMPLETED,
    (OrderStatus.MODIFICATION_PENDING, OrderAction.ACCEPT_MODIFICATIONS): OrderStatus.APPROVED,
    (OrderStatus.MODIFICATION_PENDING, OrderAction.REJECT_MODIFICATIONS): OrderStatus.CANCELLED,
}

# States from which an order can still be cancelled
_CANCELLABLE_STATES = (
    OrderStatus.PENDING_APPROVAL,
    OrderStatus.APPROVED,
    OrderStatus.MODIFICATION_PENDING,
    OrderStatus.CONFIRMED,
)
for _state in _CANCELLABLE_STATES:
    _TRANSITIONS[(_state, OrderAction.CANCEL)] = OrderStatus.CANCELLED
    _TRANSITIONS[(_state, OrderAction.ADMIN_CANCEL)] = OrderStatus.CANCELLED

_ADMIN_ACTIONS = frozenset(
    {
        OrderAction.APPROVE,
        OrderAction.REJECT,
        OrderAction.MARK_READY,
        OrderAction.COMPLETE,
        OrderAction.MODIFY,
        OrderAction.ADMIN_CANCEL,
    }
)


def _required_text(value, field_name, max_length):
    text = (value or "").strip()
    if not text:
        raise ValidationError({field_name: ["This field is required"]})
    if len(text) > max_length:
        raise ValidationError({field_name: [f"Must not exceed {max_length} characters"]})
    return text


def _optional_text(value, field_name, max_length):
    text = (value or "").strip()
    if len(text) > max_length:
        raise ValidationError({field_name: [f"Must not exceed {max_length} characters"]})
    return text or None


def _parse_changes(changes):
    """Validate requested line changes and return them as (product_id, quantity) pairs."""
    if not changes:
        raise ValidationError({"items": ["At least one line modification is required"]})
    if len(changes) > MAX_MODIFIED_LINES:
        raise ValidationError({"items": [f"Cannot modify more than {MAX_MODIFIED_LINES} lines at once"]})

    parsed = []
    for change in changes:
        product_id = str(change.get("product_id") or "").strip()
        if not product_id:
            raise ValidationError({"product_id": ["Product id is required for every modified line"]})

        new_quantity = change.get("new_quantity")
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int):
            raise ValidationError({"new_quantity": [f"Quantity for product {product_id} must be a whole number"]})
        if new_quantity < 0:
            raise ValidationError({"new_quantity": [f"Quantity for product {product_id} cannot be negative"]})

        parsed.append((product_id, new_quantity))
    return parsed


def generate_order_number(now: datetime | None = None) -> str:
    """Build a human-readable order number from the UTC clock (not guaranteed unique)."""
    now = now or datetime.now(UTC)
    return f"SO-{now:%Y%m%d%H%M%S}{now.microsecond // 1000:03d}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A priced order line.

    Product code, name and prices are copied from the catalog at checkout and
    never refreshed, so later catalog edits do not alter historical orders.
    ``original_quantity`` is only set while an admin modification awaits the
    buyer's answer.
    """

    product_id = Identifier(required=True)
    product_code = String(required=True, max_length=50)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    discount_percent = Float(default=0.0)
    unit_price_with_discount = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)
    original_quantity = Integer()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    number = String(required=True, max_length=32)
    buyer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING_APPROVAL.value,
    )
    items = HasMany(OrderItem)
    currency = String(required=True, max_length=3)
    subtotal = Float(default=0.0)
    discount_total = Float(default=0.0)
    total = Float(default=0.0)
    original_total = Float()
    user_notes = Text()
    admin_notes = Text()
    rejection_reason = Text()
    cancellation_reason = Text()
    modification_reason = Text()
    approved_by = Identifier()
    approved_at = DateTime()
    rejected_by = Identifier()
    rejected_at = DateTime()
    confirmed_by = Identifier()
    confirmed_at = DateTime()
    ready_by = Identifier()
    ready_at = DateTime()
    completed_by = Identifier()
    completed_at = DateTime()
    cancelled_by = Identifier()
    cancelled_at = DateTime()
    modified_by = Identifier()
    modified_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def rejected_order_must_carry_reason(self):
        if self.status == OrderStatus.REJECTED.value and not self.rejection_reason:
            raise ValidationError({"rejection_reason": ["A rejected order must record why"]})

    @invariant.post
    def cancelled_order_must_carry_reason(self):
        if self.status == OrderStatus.CANCELLED.value and not self.cancellation_reason:
            raise ValidationError({"cancellation_reason": ["A cancelled order must record why"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, buyer_id, currency, priced_lines, cart_id=None):
        """Create a new order awaiting approval from lines priced at checkout.

        Args:
            buyer_id: The buyer who owns the cart.
            currency: The single currency shared by every line.
            priced_lines: ``PricedLine`` objects produced by the pricing engine.
            cart_id: The cart the lines came from, cleared once the order is stored.
        """
        if not priced_lines:
            raise ValidationError({"items": ["An order needs at least one line"]})
        product_ids = [str(line.product_id) for line in priced_lines]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError({"items": ["Each product may appear on only one line"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=line.product_id,
                product_code=line.product_code,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_percent=line.discount_percent,
                unit_price_with_discount=line.unit_price_with_discount,
                line_total=line.line_total,
            )
            for line in priced_lines
        ]
        subtotal = sum(item.unit_price * item.quantity for item in items)
        total = sum(item.line_total for item in items)

        order = cls(
            number=generate_order_number(now),
            buyer_id=buyer_id,
            status=OrderStatus.PENDING_APPROVAL.value,
            currency=currency,
            items=items,
            subtotal=subtotal,
            total=total,
            discount_total=subtotal - total,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                number=order.number,
                buyer_id=str(buyer_id),
                item_count=len(items),
                subtotal=order.subtotal,
                discount_total=order.discount_total,
                total=order.total,
                currency=currency,
                placed_at=now,
                cart_id=cart_id,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _authorize(self, action, actor_id, is_admin):
        """Admin actions need an admin; buyer actions need the owning buyer, whatever the role."""
        if action in _ADMIN_ACTIONS:
            if not is_admin or not actor_id:
                raise ForbiddenError({"actor": [f"Only administrators can {action.verb} orders"]})
        elif str(actor_id) != str(self.buyer_id):
            raise ForbiddenError({"actor": [f"Only the buyer who placed the order can {action.verb} it"]})

    def _next_status(self, action):
        current = OrderStatus(self.status)
        target = _TRANSITIONS.get((current, action))
        if target is None:
            raise ValidationError({"status": [f"Cannot {action.verb} an order in {current.value} status"]})
        return target

    def _guard(self, action, actor_id, is_admin):
        self._authorize(action, actor_id, is_admin)
        return self._next_status(action)

    def _recalculate_totals(self):
        self.subtotal = sum(item.unit_price * item.quantity for item in self.items)
        self.total = sum(item.line_total for item in self.items)
        self.discount_total = self.subtotal - self.total

    # -------------------------------------------------------------------
    # Admin transitions
    # -------------------------------------------------------------------
    def approve(self, actor_id, is_admin, admin_notes=None):
        notes = _optional_text(admin_notes, "admin_notes", ADMIN_NOTE_MAX_LENGTH)
        target = self._guard(OrderAction.APPROVE, actor_id, is_admin)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.approved_by = actor_id
            self.approved_at = now
            self.admin_notes = notes or self.admin_notes
            self.updated_at = now

        self.raise_(
            OrderApproved(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                approved_by=str(actor_id),
                approved_at=now,
            )
        )

    def reject(self, actor_id, is_admin, reason):
        reason = _required_text(reason, "reason", REASON_MAX_LENGTH)
        target = self._guard(OrderAction.REJECT, actor_id, is_admin)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.rejection_reason = reason
            self.status = target.value
            self.rejected_by = actor_id
            self.rejected_at = now
            self.updated_at = now

        self.raise_(
            OrderRejected(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                rejected_by=str(actor_id),
                reason=reason,
                rejected_at=now,
            )
        )

    def mark_ready(self, actor_id, is_admin, notes=None):
        notes = _optional_text(notes, "notes", NOTE_MAX_LENGTH)
        target = self._guard(OrderAction.MARK_READY, actor_id, is_admin)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.ready_by = actor_id
            self.ready_at = now
            self.admin_notes = notes or self.admin_notes
            self.updated_at = now

        self.raise_(
            OrderMarkedReady(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                ready_by=str(actor_id),
                ready_at=now,
            )
        )

    def complete(self, actor_id, is_admin, notes=None):
        notes = _optional_text(notes, "notes", NOTE_MAX_LENGTH)
        target = self._guard(OrderAction.COMPLETE, actor_id, is_admin)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.completed_by = actor_id
            self.completed_at = now
            self.admin_notes = notes or self.admin_notes
            self.updated_at = now

        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                completed_by=str(actor_id),
                completed_at=now,
            )
        )

    def modify(self, actor_id, is_admin, reason, changes, admin_notes=None):
        """Rewrite line quantities before approval, e.g. after a stock shortage.

        Lines set to zero are dropped. Discounts granted at checkout are kept
        as they were; only line totals and order totals are recomputed. The
        order is left untouched when any requested change is invalid or when
        no line would survive.

        Args:
            changes: List of dicts with product_id and new_quantity.
        """
        reason = _required_text(reason, "reason", REASON_MAX_LENGTH)
        notes = _optional_text(admin_notes, "admin_notes", ADMIN_NOTE_MAX_LENGTH)
        requested = _parse_changes(changes)
        target = self._guard(OrderAction.MODIFY, actor_id, is_admin)

        lines_by_product = {}
        for item in self.items:
            lines_by_product.setdefault(str(item.product_id), item)

        new_quantities = {}
        for product_id, new_quantity in requested:
            if product_id not in lines_by_product:
                raise ValidationError({"product_id": [f"Product {product_id} is not part of this order"]})
            new_quantities[product_id] = new_quantity

        surviving = [
            item for item in self.items if new_quantities.get(str(item.product_id), item.quantity) > 0
        ]
        if not surviving:
            raise ValidationError(
                {"items": ["The modification would leave the order without items; reject the order instead"]}
            )

        now = datetime.now(UTC)
        original_total = self.total
        applied = []
        with atomic_change(self):
            for product_id, new_quantity in new_quantities.items():
                item = lines_by_product[product_id]
                applied.append(
                    {"product_id": product_id, "previous_quantity": item.quantity, "new_quantity": new_quantity}
                )
                if new_quantity == 0:
                    self.remove_items(item)
                    continue
                if item.original_quantity is None:
                    item.original_quantity = item.quantity
                item.quantity = new_quantity
                item.line_total = item.unit_price_with_discount * new_quantity

            self._recalculate_totals()
            self.original_total = original_total
            self.status = target.value
            self.modification_reason = reason
            self.modified_by = actor_id
            self.modified_at = now
            self.admin_notes = notes or self.admin_notes
            self.updated_at = now

        self.raise_(
            OrderModified(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                modified_by=str(actor_id),
                reason=reason,
                changes=json.dumps(applied),
                original_total=original_total,
                new_total=self.total,
                modified_at=now,
            )
        )

    def cancel_as_admin(self, actor_id, is_admin, reason):
        reason = _required_text(reason, "reason", REASON_MAX_LENGTH)
        target = self._guard(OrderAction.ADMIN_CANCEL, actor_id, is_admin)
        self._record_cancellation(target, actor_id, reason, by_admin=True)

    # -------------------------------------------------------------------
    # Buyer transitions
    # -------------------------------------------------------------------
    def confirm(self, actor_id, note=None):
        note = _optional_text(note, "note", NOTE_MAX_LENGTH)
        target = self._guard(OrderAction.CONFIRM, actor_id, False)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.confirmed_by = actor_id
            self.confirmed_at = now
            self.user_notes = note or self.user_notes
            self.updated_at = now

        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                confirmed_at=now,
            )
        )

    def cancel(self, actor_id, reason):
        reason = _required_text(reason, "reason", REASON_MAX_LENGTH)
        target = self._guard(OrderAction.CANCEL, actor_id, False)
        self._record_cancellation(target, actor_id, reason)

    def accept_modifications(self, actor_id, note=None):
        note = _optional_text(note, "note", NOTE_MAX_LENGTH)
        target = self._guard(OrderAction.ACCEPT_MODIFICATIONS, actor_id, False)

        now = datetime.now(UTC)
        with atomic_change(self):
            for item in self.items:
                item.original_quantity = None
            self.original_total = None
            self.status = target.value
            self.user_notes = note or self.user_notes
            self.updated_at = now

        self.raise_(
            OrderModificationsAccepted(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                total=self.total,
                accepted_at=now,
            )
        )

    def reject_modifications(self, actor_id, reason):
        reason = _required_text(reason, "reason", REASON_MAX_LENGTH)
        target = self._guard(OrderAction.REJECT_MODIFICATIONS, actor_id, False)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.cancellation_reason = f"buyer rejected modifications: {reason}"
            self.status = target.value
            self.original_total = None
            self.cancelled_by = actor_id
            self.cancelled_at = now
            self.updated_at = now

        self.raise_(
            OrderModificationsRejected(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                reason=reason,
                rejected_at=now,
            )
        )

    def _record_cancellation(self, target, actor_id, reason, by_admin=False):
        now = datetime.now(UTC)
        with atomic_change(self):
            self.cancellation_reason = reason
            self.status = target.value
            self.cancelled_by = actor_id
            self.cancelled_at = now
            self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                cancelled_by=str(actor_id),
                reason=reason,
                cancelled_at=now,
                by_admin=by_admin,
            )
        )

"""Order cancellation by its buyer or by an admin — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.assembler import to_view
from ordering.order.order import Order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True)


@ordering.command(part_of="Order")
class AdminCancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = Text(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(actor_id=command.actor_id, reason=command.reason)
        repo.add(order)
        return to_view(order)

    @handle(AdminCancelOrder)
    def admin_cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel_as_admin(
            actor_id=command.actor_id,
            is_admin=command.is_admin,
            reason=command.reason,
        )
        repo.add(order)
        return to_view(order)

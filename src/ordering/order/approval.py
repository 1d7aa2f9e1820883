"""Order approval and rejection by an admin — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.assembler import to_view
from ordering.order.order import Order


@ordering.command(part_of="Order")
class ApproveOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    admin_notes = Text()


@ordering.command(part_of="Order")
class RejectOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = Text(required=True)


@ordering.command_handler(part_of=Order)
class ApprovalHandler:
    @handle(ApproveOrder)
    def approve_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.approve(
            actor_id=command.actor_id,
            is_admin=command.is_admin,
            admin_notes=command.admin_notes,
        )
        repo.add(order)
        return to_view(order)

    @handle(RejectOrder)
    def reject_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.reject(
            actor_id=command.actor_id,
            is_admin=command.is_admin,
            reason=command.reason,
        )
        repo.add(order)
        return to_view(order)

"""Order completion at pickup — command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.assembler import to_view
from ordering.order.order import Order


@ordering.command(part_of="Order")
class CompleteOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    notes = Text()


@ordering.command_handler(part_of=Order)
class CompleteOrderHandler:
    @handle(CompleteOrder)
    def complete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.complete(
            actor_id=command.actor_id,
            is_admin=command.is_admin,
            notes=command.notes,
        )
        repo.add(order)
        return to_view(order)

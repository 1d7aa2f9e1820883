"""Order modification negotiation — admin rewrites quantities, buyer answers.

Commands and handler for ModifyOrder, AcceptModifications and
RejectModifications.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.assembler import to_view
from ordering.order.order import Order


@ordering.command(part_of="Order")
class ModifyOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = Text(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, new_quantity}
    admin_notes = Text()


@ordering.command(part_of="Order")
class AcceptModifications:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    note = Text()


@ordering.command(part_of="Order")
class RejectModifications:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    reason = Text(required=True)


def _parse_lines(raw):
    try:
        lines = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as exc:
        raise ValidationError({"items": [f"Line modifications are not valid JSON: {exc.msg}"]}) from exc
    if not isinstance(lines, list) or not all(isinstance(line, dict) for line in lines):
        raise ValidationError({"items": ["Line modifications must be a list of objects"]})
    return lines


@ordering.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(ModifyOrder)
    def modify_order(self, command):
        changes = _parse_lines(command.lines)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.modify(
            actor_id=command.actor_id,
            is_admin=command.is_admin,
            reason=command.reason,
            changes=changes,
            admin_notes=command.admin_notes,
        )
        repo.add(order)
        return to_view(order)

    @handle(AcceptModifications)
    def accept_modifications(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.accept_modifications(actor_id=command.actor_id, note=command.note)
        repo.add(order)
        return to_view(order)

    @handle(RejectModifications)
    def reject_modifications(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.reject_modifications(actor_id=command.actor_id, reason=command.reason)
        repo.add(order)
        return to_view(order)

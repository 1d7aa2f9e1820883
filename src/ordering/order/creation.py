"""Order creation from a buyer's cart — command and handler."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.catalog import get_cart_reader
from ordering.domain import ordering
from ordering.order.assembler import to_view
from ordering.order.order import Order
from ordering.order.pricing import price_line


@ordering.command(part_of="Order")
class PlaceOrderFromCart:
    buyer_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class PlaceOrderFromCartHandler:
    @handle(PlaceOrderFromCart)
    def place_order_from_cart(self, command):
        cart_reader = get_cart_reader()
        cart = cart_reader.get_detailed_cart_for_buyer(str(command.buyer_id))
        if cart is None or not cart.lines:
            raise ValidationError({"cart": ["Cart is empty"]})

        unresolved = [line.product_id for line in cart.lines if line.product is None]
        if unresolved:
            raise ValidationError({"cart": [f"Products not found: {', '.join(unresolved)}"]})

        # Mixed-currency carts are refused before any line is priced
        currency = cart.lines[0].product.currency
        if any(line.product.currency != currency for line in cart.lines):
            raise ValidationError({"currency": ["All products in the cart must share one currency"]})

        now = datetime.now(UTC)
        priced_lines = [price_line(line.product, line.quantity, now) for line in cart.lines]

        order = Order.place(
            buyer_id=command.buyer_id,
            currency=currency,
            priced_lines=priced_lines,
            cart_id=cart.id,
        )
        current_domain.repository_for(Order).add(order)

        return to_view(order)

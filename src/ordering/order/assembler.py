"""Order assembler — projects Order aggregates into their external views.

This is the only place product data is joined back onto historical order
lines, and only for display: a representative image per product. Prices on
the lines are never refreshed from the catalog.
"""

from ordering.catalog import get_product_reader
from ordering.catalog.port import ProductReader, ProductSnapshot
from ordering.order.order import Order
from ordering.order.views import OrderItemView, OrderSummaryView, OrderView


def representative_image_url(product: ProductSnapshot | None) -> str | None:
    """The earliest-uploaded image of the product, if it has any."""
    if product is None or not product.images:
        return None
    return min(product.images, key=lambda image: image.uploaded_at).url


def _str_or_none(value):
    return str(value) if value is not None else None


def to_view(order: Order, product_reader: ProductReader | None = None) -> OrderView:
    product_reader = product_reader or get_product_reader()

    image_urls: dict[str, str | None] = {}
    for item in order.items:
        product_id = str(item.product_id)
        if product_id not in image_urls:
            image_urls[product_id] = representative_image_url(product_reader.get_by_id(product_id))

    items = [
        OrderItemView(
            id=str(item.id),
            product_id=str(item.product_id),
            product_code=item.product_code,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount_percent=item.discount_percent or 0.0,
            unit_price_with_discount=item.unit_price_with_discount,
            line_total=item.line_total,
            original_quantity=item.original_quantity,
            image_url=image_urls[str(item.product_id)],
        )
        for item in order.items
    ]

    return OrderView(
        id=str(order.id),
        number=order.number,
        status=order.status,
        buyer_id=str(order.buyer_id),
        currency=order.currency,
        subtotal=order.subtotal,
        discount_total=order.discount_total,
        total=order.total,
        original_total=order.original_total,
        user_notes=order.user_notes,
        admin_notes=order.admin_notes,
        rejection_reason=order.rejection_reason,
        cancellation_reason=order.cancellation_reason,
        modification_reason=order.modification_reason,
        approved_by=_str_or_none(order.approved_by),
        approved_at=order.approved_at,
        rejected_by=_str_or_none(order.rejected_by),
        rejected_at=order.rejected_at,
        confirmed_by=_str_or_none(order.confirmed_by),
        confirmed_at=order.confirmed_at,
        ready_by=_str_or_none(order.ready_by),
        ready_at=order.ready_at,
        completed_by=_str_or_none(order.completed_by),
        completed_at=order.completed_at,
        cancelled_by=_str_or_none(order.cancelled_by),
        cancelled_at=order.cancelled_at,
        modified_by=_str_or_none(order.modified_by),
        modified_at=order.modified_at,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


def to_summary(order: Order) -> OrderSummaryView:
    return OrderSummaryView(
        id=str(order.id),
        number=order.number,
        status=order.status,
        buyer_id=str(order.buyer_id),
        total=order.total,
        currency=order.currency,
        item_count=len(order.items),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )

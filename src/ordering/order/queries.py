"""Read side of the ordering context: fetch one order or list a page of them."""

from protean.utils.globals import current_domain

from ordering.catalog.port import ProductReader
from ordering.order.assembler import to_summary, to_view
from ordering.order.order import Order
from ordering.order.repository import OrderFilter
from ordering.order.views import OrderListRequest, OrderPage, OrderView
from ordering.shared.exceptions import ForbiddenError


def get_order(order_id, requester_id, is_admin: bool, product_reader: ProductReader | None = None) -> OrderView:
    """Return the order's view; only admins and the buyer who placed it may read it."""
    order = current_domain.repository_for(Order).get(order_id)
    if not is_admin and str(order.buyer_id) != str(requester_id):
        raise ForbiddenError({"actor": ["Only administrators or the buyer who placed the order can view it"]})
    return to_view(order, product_reader)


def list_orders(request: OrderListRequest, requester_id, is_admin: bool) -> OrderPage:
    """List order summaries.

    Non-admins only ever see their own orders, whatever buyer the request
    names. Admins see the requested buyer's orders, or everyone's when the
    request names no buyer.
    """
    buyer_id = request.buyer_id if is_admin else str(requester_id)

    result = current_domain.repository_for(Order).list_orders(
        OrderFilter(
            buyer_id=buyer_id or None,
            status=request.status or None,
            created_from=request.created_from,
            created_to=request.created_to,
            text=request.query,
            sort_by=request.sort_by,
            descending=request.sort_dir.upper() != "ASC",
            page=request.page,
            page_size=request.page_size,
        )
    )

    return OrderPage(
        items=[to_summary(order) for order in result.items],
        page=result.page,
        page_size=result.page_size,
        total_count=result.total_count,
    )

"""Repository for the Order aggregate.

The base repository provides add/get; list_orders adds the filtered, sorted
and paged listing used by buyers and admins.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from ordering.domain import ordering
from ordering.order.order import Order

# Upper bound on orders loaded per listing; text search, date range and sorting run in memory
_SCAN_LIMIT = 10_000

_SORT_KEYS = {
    "number": lambda order: order.number or "",
    "status": lambda order: order.status or "",
    "total": lambda order: order.total or 0.0,
    "createdAt": lambda order: _as_utc(order.created_at),
}


def _as_utc(value: datetime | None) -> datetime:
    if value is None:
        return datetime.min.replace(tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class OrderFilter:
    buyer_id: str | None = None  # None lists the orders of every buyer
    status: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    text: str | None = None
    sort_by: str = "createdAt"
    descending: bool = True
    page: int = 1
    page_size: int = 20


@dataclass(frozen=True)
class PagedResult:
    page: int
    page_size: int
    total_count: int
    items: list[Order] = field(default_factory=list)


def _matches_text(order: Order, text: str) -> bool:
    needle = text.lower()
    if needle in (order.number or "").lower():
        return True
    return any(needle in (item.product_name or "").lower() for item in order.items)


@ordering.repository(part_of=Order)
class OrderRepository:
    def list_orders(self, order_filter: OrderFilter) -> PagedResult:
        """Return one page of orders matching the filter.

        Buyer and status are matched by the store; the inclusive creation
        window, the case-insensitive text match on number or product name,
        and sorting are applied here. Unknown sort fields fall back to
        creation time.
        """
        criteria = {}
        if order_filter.buyer_id:
            criteria["buyer_id"] = str(order_filter.buyer_id)
        if order_filter.status:
            criteria["status"] = order_filter.status

        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        orders = query.limit(_SCAN_LIMIT).all().items

        if order_filter.created_from is not None:
            start = _as_utc(order_filter.created_from)
            orders = [order for order in orders if _as_utc(order.created_at) >= start]
        if order_filter.created_to is not None:
            end = _as_utc(order_filter.created_to)
            orders = [order for order in orders if _as_utc(order.created_at) <= end]

        text = (order_filter.text or "").strip()
        if text:
            orders = [order for order in orders if _matches_text(order, text)]

        sort_key = _SORT_KEYS.get(order_filter.sort_by, _SORT_KEYS["createdAt"])
        orders = sorted(orders, key=sort_key, reverse=order_filter.descending)

        offset = (order_filter.page - 1) * order_filter.page_size
        return PagedResult(
            page=order_filter.page,
            page_size=order_filter.page_size,
            total_count=len(orders),
            items=orders[offset : offset + order_filter.page_size],
        )

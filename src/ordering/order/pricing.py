"""Bulk-discount pricing for a single cart line.

Given a product snapshot and a requested quantity, picks the discount tier
that applies and freezes the line's unit price, discount and total. The
result depends only on the product's price and tiers, the quantity and the
evaluation instant, so the same inputs always produce the same line.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from ordering.catalog.port import BulkDiscountTier, ProductSnapshot

_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class PricedLine:
    """A cart line priced at checkout, ready to become an OrderItem."""

    product_id: str
    product_code: str
    product_name: str
    quantity: int
    unit_price: float
    discount_percent: float
    unit_price_with_discount: float
    line_total: float


def select_tier(
    tiers: tuple[BulkDiscountTier, ...] | list[BulkDiscountTier],
    quantity: int,
    now: datetime,
) -> BulkDiscountTier | None:
    """Return the qualifying tier with the highest discount percentage.

    A tier qualifies when its minimum quantity is reached and it is active
    within its validity window at ``now``. Overlapping tiers are allowed, so
    the largest discount wins rather than the largest threshold. On equal
    discounts the earlier tier in the product's list is kept.
    """
    best = None
    for tier in tiers:
        if tier.min_quantity > quantity or not tier.is_currently_valid(now):
            continue
        if best is None or tier.discount_percent > best.discount_percent:
            best = tier
    return best


def price_line(product: ProductSnapshot, quantity: int, now: datetime | None = None) -> PricedLine:
    """Price ``quantity`` units of ``product`` against its bulk-discount tiers."""
    now = now or datetime.now(UTC)
    tier = select_tier(product.discount_tiers, quantity, now)

    unit_price = Decimal(str(product.price))
    discount_percent = Decimal(str(tier.discount_percent)) if tier else Decimal(0)
    unit_price_with_discount = unit_price * (1 - discount_percent / _HUNDRED)
    line_total = unit_price_with_discount * quantity

    return PricedLine(
        product_id=str(product.id),
        product_code=product.code,
        product_name=product.name,
        quantity=quantity,
        unit_price=float(unit_price),
        discount_percent=float(discount_percent),
        unit_price_with_discount=float(unit_price_with_discount),
        line_total=float(line_total),
    )

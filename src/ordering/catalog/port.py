"""Catalog ports — read-only views of carts and products consumed at checkout.

Carts, products, discount tiers and product images are owned outside the
ordering context. Order creation reads them through these interfaces and
copies what it needs onto the order; nothing here is ever written back,
except the instruction to clear a cart once its order exists.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BulkDiscountTier:
    """A quantity threshold granting a percentage discount, optionally time-boxed."""

    min_quantity: int
    discount_percent: float
    is_active: bool = True
    starts_at: datetime | None = None
    ends_at: datetime | None = None

    def is_currently_valid(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.starts_at is not None and self.starts_at > now:
            return False
        if self.ends_at is not None and self.ends_at < now:
            return False
        return True


@dataclass(frozen=True)
class ProductImage:
    url: str
    uploaded_at: datetime


@dataclass(frozen=True)
class ProductSnapshot:
    """Product data as the catalog reports it at read time."""

    id: str
    code: str
    name: str
    currency: str
    price: float
    discount_tiers: tuple[BulkDiscountTier, ...] = ()
    images: tuple[ProductImage, ...] = ()


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int
    product: ProductSnapshot | None = None  # None when the product no longer resolves


@dataclass(frozen=True)
class CartSnapshot:
    id: str
    buyer_id: str
    lines: tuple[CartLine, ...] = field(default_factory=tuple)


class CartReader(ABC):
    """Abstract access to a buyer's cart."""

    @abstractmethod
    def get_detailed_cart_for_buyer(self, buyer_id: str) -> CartSnapshot | None:
        """Return the buyer's cart with products and discount tiers resolved per line."""
        ...

    @abstractmethod
    def clear_cart(self, cart_id: str) -> None:
        """Remove every line from the cart."""
        ...


class ProductReader(ABC):
    """Abstract access to product data for display-time lookups."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> ProductSnapshot | None:
        ...

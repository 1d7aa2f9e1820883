"""In-memory catalog — carts and products held in dicts for development and testing."""

from uuid import uuid4

from ordering.catalog.port import CartLine, CartReader, CartSnapshot, ProductReader, ProductSnapshot


class InMemoryCatalog(CartReader, ProductReader):
    """Serves carts and products from memory and records cart clears."""

    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}
        self.carts: dict[str, dict] = {}  # buyer_id -> {"id": ..., "lines": {product_id: qty}}
        self.cleared_carts: list[str] = []

    def add_product(self, product: ProductSnapshot) -> ProductSnapshot:
        self.products[str(product.id)] = product
        return product

    def remove_product(self, product_id: str) -> None:
        self.products.pop(str(product_id), None)

    def put_in_cart(self, buyer_id: str, product_id: str, quantity: int) -> str:
        """Add to the buyer's cart (creating the cart on first use); one line per product."""
        cart = self.carts.setdefault(str(buyer_id), {"id": f"cart-{uuid4().hex[:8]}", "lines": {}})
        lines = cart["lines"]
        lines[str(product_id)] = lines.get(str(product_id), 0) + quantity
        return cart["id"]

    def get_detailed_cart_for_buyer(self, buyer_id: str) -> CartSnapshot | None:
        cart = self.carts.get(str(buyer_id))
        if cart is None:
            return None

        lines = tuple(
            CartLine(product_id=product_id, quantity=quantity, product=self.products.get(product_id))
            for product_id, quantity in cart["lines"].items()
        )
        return CartSnapshot(id=cart["id"], buyer_id=str(buyer_id), lines=lines)

    def clear_cart(self, cart_id: str) -> None:
        for cart in self.carts.values():
            if cart["id"] == cart_id:
                cart["lines"] = {}
        self.cleared_carts.append(cart_id)

    def get_by_id(self, product_id: str) -> ProductSnapshot | None:
        return self.products.get(str(product_id))

    def reset(self) -> None:
        """Forget all carts and products (useful between tests)."""
        self.products.clear()
        self.carts.clear()
        self.cleared_carts.clear()

"""Catalog adapter factory — the cart and product readers used by the ordering context.

The in-memory catalog serves both roles by default. Select another adapter
with the CATALOG_ADAPTER environment variable, or override the readers
directly with set_catalog() in tests.
"""

import os

from ordering.catalog.port import CartReader, ProductReader

_cart_reader: CartReader | None = None
_product_reader: ProductReader | None = None


def _build_default():
    adapter = os.environ.get("CATALOG_ADAPTER", "memory")
    if adapter == "memory":
        from ordering.catalog.fake_adapter import InMemoryCatalog

        return InMemoryCatalog()
    raise ValueError(f"Unknown catalog adapter: {adapter}")


def _ensure_configured() -> None:
    global _cart_reader, _product_reader
    if _cart_reader is None or _product_reader is None:
        catalog = _build_default()
        _cart_reader = _cart_reader or catalog
        _product_reader = _product_reader or catalog


def get_cart_reader() -> CartReader:
    """Return the configured cart reader (singleton)."""
    _ensure_configured()
    return _cart_reader


def get_product_reader() -> ProductReader:
    """Return the configured product reader (singleton)."""
    _ensure_configured()
    return _product_reader


def set_catalog(cart_reader: CartReader, product_reader: ProductReader | None = None) -> None:
    """Override the active readers. A single object may serve both roles."""
    global _cart_reader, _product_reader
    _cart_reader = cart_reader
    _product_reader = product_reader if product_reader is not None else cart_reader


def reset_catalog() -> None:
    """Reset the reader singletons (useful for testing)."""
    global _cart_reader, _product_reader
    _cart_reader = None
    _product_reader = None

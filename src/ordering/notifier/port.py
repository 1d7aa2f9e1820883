"""Order notifier port — abstract interface for announcing order changes."""

from abc import ABC, abstractmethod

from ordering.order.views import OrderView


class OrderNotifier(ABC):
    """Abstract interface for telling buyers and admins about an order.

    Called exactly once after each successful mutation, never for rejected
    attempts. Delivery transport is the adapter's concern.
    """

    @abstractmethod
    def notify_created(self, order: OrderView) -> None:
        """A new order was placed from a cart."""
        ...

    @abstractmethod
    def notify_updated(self, order: OrderView) -> None:
        """An existing order changed status."""
        ...

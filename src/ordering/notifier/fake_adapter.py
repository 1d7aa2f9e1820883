"""Fake notifier — records notifications for test assertions."""

from ordering.notifier.port import OrderNotifier
from ordering.order.views import OrderView


class FakeNotifier(OrderNotifier):
    """Notifier that keeps every call in memory."""

    def __init__(self):
        self.created: list[OrderView] = []
        self.updated: list[OrderView] = []

    def notify_created(self, order: OrderView) -> None:
        self.created.append(order)

    def notify_updated(self, order: OrderView) -> None:
        self.updated.append(order)

    @property
    def call_count(self) -> int:
        return len(self.created) + len(self.updated)

    def reset(self):
        """Clear recorded notifications (useful between tests)."""
        self.created.clear()
        self.updated.clear()

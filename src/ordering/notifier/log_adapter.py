"""Logging notifier — renders notifications and emits them through structlog."""

import structlog

from ordering.notifier.messages import created_message, updated_message
from ordering.notifier.port import OrderNotifier
from ordering.order.views import OrderView

logger = structlog.get_logger(__name__)


class LoggingNotifier(OrderNotifier):
    def notify_created(self, order: OrderView) -> None:
        message = created_message(order)
        logger.info(
            "order_notification",
            kind="created",
            order_id=message.order_id,
            buyer_id=message.buyer_id,
            title=message.title,
            body=message.body,
        )

    def notify_updated(self, order: OrderView) -> None:
        message = updated_message(order)
        logger.info(
            "order_notification",
            kind="updated",
            order_id=message.order_id,
            buyer_id=message.buyer_id,
            status=order.status,
            title=message.title,
            body=message.body,
        )

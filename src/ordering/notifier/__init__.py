"""Order notifier factory.

Provides get_notifier() / set_notifier() to swap implementations:
- FakeNotifier for development and testing (default)
- LoggingNotifier to render messages into the structured log

Select with the ORDER_NOTIFIER environment variable ("fake" or "log").
"""

import os

from ordering.notifier.port import OrderNotifier

_current_notifier: OrderNotifier | None = None


def get_notifier() -> OrderNotifier:
    """Return the current notifier, building it from ORDER_NOTIFIER on first use."""
    global _current_notifier
    if _current_notifier is None:
        adapter = os.environ.get("ORDER_NOTIFIER", "fake")
        if adapter == "fake":
            from ordering.notifier.fake_adapter import FakeNotifier

            _current_notifier = FakeNotifier()
        elif adapter == "log":
            from ordering.notifier.log_adapter import LoggingNotifier

            _current_notifier = LoggingNotifier()
        else:
            raise ValueError(f"Unknown order notifier: {adapter}")
    return _current_notifier


def set_notifier(notifier: OrderNotifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    """Reset to the default notifier."""
    global _current_notifier
    _current_notifier = None

"""Errors raised by the ordering workflow besides protean's own.

Validation failures use ``protean.exceptions.ValidationError`` and unknown
order ids surface as ``protean.exceptions.ObjectNotFoundError``.
"""


class ForbiddenError(Exception):
    """The actor is not allowed to perform the requested operation."""

    def __init__(self, messages: dict[str, list[str]]):
        super().__init__(messages)
        self.messages = messages

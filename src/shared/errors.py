"""Exceptions that cross context boundaries.

Input and lookup failures use Protean's own ``ValidationError`` and
``ObjectNotFoundError``; the two classes here cover collaborators outside
the domain model.
"""


class UpstreamError(Exception):
    """The payment processor or the order store could not be reached.

    Safe for the caller to retry: every mutating operation is idempotent.
    """

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.message = message
        self.source = source


class NotificationError(Exception):
    """Composing or sending a customer message failed.

    Never escapes ``NotificationDispatcher.send``.
    """

    def __init__(self, message: str, recipient: str | None = None):
        super().__init__(message)
        self.message = message
        self.recipient = recipient

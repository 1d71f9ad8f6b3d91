"""Error taxonomy for the review relay.

Every error the handlers expect to surface derives from ``ReviewRelayError``
and carries the HTTP status plus the short message shown to the guest.
Internal detail stays in ``str(exc)`` for logs and alerts.
"""

GENERIC_ERROR_MESSAGE = "Сталася помилка. Спробуйте пізніше."


class ReviewRelayError(Exception):
    """Base class for errors raised by the relay."""

    status_code = 500

    def __init__(self, message: str, public_message: str | None = None) -> None:
        super().__init__(message)
        self.public_message = public_message or GENERIC_ERROR_MESSAGE


class ValidationError(ReviewRelayError):
    """Submitted data failed validation. The message is safe to show."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message, public_message=message)


class RateLimitedError(ReviewRelayError):
    status_code = 429

    def __init__(self, message: str = "Too many requests. Try again later.") -> None:
        super().__init__(message, public_message=message)


class RequestFailedError(ReviewRelayError):
    """A handler could not complete; ``public_message`` is the localized reply."""


class ConfigurationError(ReviewRelayError):
    """Telegram credentials are missing."""


class DeliveryError(ReviewRelayError):
    """Sending a message to Telegram failed."""


class TransientDeliveryError(DeliveryError):
    """Timeout or connection-level failure; retries were exhausted."""


class TerminalDeliveryError(DeliveryError):
    """Telegram answered with an HTTP error status. Not retried."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.response_status = status_code

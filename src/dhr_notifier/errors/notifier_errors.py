"""NotifierError: base exception class and the engine's error kinds."""

from __future__ import annotations


class NotifierError(Exception):
    """Base error for all notifier operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "notifier-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ConfigError(NotifierError):
    """Required configuration is missing or invalid. Fatal at startup."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500, code="config-error")


class FetchError(NotifierError):
    """The payment provider was unreachable or answered with an error."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="fetch-error")


class DeliveryError(NotifierError):
    """A subscriber endpoint was unreachable or rejected the notification."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="delivery-error")


class PersistenceError(NotifierError):
    """Stored state could not be read or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=500, code="persistence-error")

"""Errors raised by the order source adapters.

List fetches swallow these and degrade to an empty result; single-order
fetches and updates raise them so the orchestrator can report the failure
kind through ``SyncResult.error_kind``.
"""
from typing import Any, Optional

from app.models.orders import SyncErrorKind


class OrderSourceError(Exception):
    """Base class for failures talking to an order source."""

    kind: SyncErrorKind = SyncErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str,
        source: str,
        status_code: Optional[int] = None,
        details: Any = None
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.details = details

    def __repr__(self):
        return (f"{type(self).__name__}(source={self.source!r}, "
                f"status_code={self.status_code}, message={self.message!r})")


class OrderSourceTimeoutError(OrderSourceError):
    """Deadline exceeded. Safe for the caller to retry."""
    kind = SyncErrorKind.TIMEOUT

    def __init__(self, message: str, source: str, details: Any = None):
        super().__init__(message, source, status_code=504, details=details)


class OrderSourceRejectedError(OrderSourceError):
    """Remote answered 4xx (validation or authentication failure)."""
    kind = SyncErrorKind.REJECTED


class OrderSourceUnavailableError(OrderSourceError):
    """Remote answered 5xx or could not be reached."""
    kind = SyncErrorKind.UNAVAILABLE


class OrderSourceConfigError(OrderSourceError):
    """Adapter is missing credentials or a base URL."""
    kind = SyncErrorKind.CONFIGURATION


class OrderSourceResponseError(OrderSourceError):
    """Response body was not JSON or did not contain an order."""
    kind = SyncErrorKind.INVALID_RESPONSE

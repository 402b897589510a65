"""Exception types raised by the ingestion clients."""

from __future__ import annotations

from typing import Optional


class IntegrationError(Exception):
    """Base exception for all integration failures."""


class FetchError(IntegrationError):
    """Raised when an upstream source cannot be fetched or decoded.

    The underlying cause is chained (``raise ... from exc``) so callers can
    inspect ``__cause__`` for the transport or decode error.
    """

    def __init__(self, message: str, service: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.service = service


class PayloadError(FetchError):
    """Raised when a required field is missing or has the wrong type."""

    def __init__(self, message: str, service: str = "", field: Optional[str] = None) -> None:
        super().__init__(message, service)
        self.field = field


class UpstreamError(FetchError):
    """Raised when the upstream API answers with its own error envelope."""

    def __init__(self, message: str, service: str = "", code: Optional[str] = None) -> None:
        super().__init__(message, service)
        self.code = code

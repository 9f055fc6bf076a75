from __future__ import annotations

from httpx import TransportError


class GcpalError(Exception):
    """Base error for completion failures."""


class MissingCredentialError(GcpalError):
    pass


class RequestFailedError(GcpalError):
    """Non-success HTTP status or an unparseable response body."""

    def __init__(self, status_code: int | None, status_text: str = "", message: str | None = None):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(message or f"API request failed with status {status_code}: {status_text}")


class RequestCancelledError(GcpalError):
    """The caller's cancellation signal fired before the response arrived."""


__all__ = [
    "GcpalError",
    "MissingCredentialError",
    "RequestCancelledError",
    "RequestFailedError",
    "TransportError",
]

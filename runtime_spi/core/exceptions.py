"""
Error taxonomy for the runtime SPI adapter.

Every error carries an optional HTTP status code and a message. Callers can
tell a transport failure (no status code) from a backend failure (status code
plus the raw response body) without inspecting the concrete class.
"""

from typing import Optional


class AdapterError(Exception):
    """Base exception for all runtime SPI adapter errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code!r}, "
            f"message={self.message!r})"
        )


class ConfigurationError(AdapterError):
    """
    Raised when a required construction parameter is missing.

    Raised synchronously from the adapter constructor, before any I/O.
    """

    pass


class UnsupportedProtocolError(AdapterError):
    """Raised when the base URI scheme is neither http nor https."""

    pass


class TransportError(AdapterError):
    """
    Raised for connection-level failures.

    Never has a status code. The message is the transport diagnostic as
    reported by the HTTP client.
    """

    pass


class BackendError(AdapterError):
    """
    Raised when the backend answers outside the success contract.

    For token (POST) operations any status >= 300; for redirect (GET)
    operations any status other than 302. The message is the raw body.
    """

    pass


class ResponseTooLargeError(AdapterError):
    """Raised when a response body exceeds the configured size cap."""

    pass

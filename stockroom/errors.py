# stockroom/errors.py
"""Error types raised by the inventory API client and draft parsing."""

from __future__ import annotations


class StockroomError(Exception):
    """Base class for all errors raised by this package."""


class NetworkError(StockroomError):
    """The request never reached the server or no response came back."""


class ApiError(StockroomError):
    """Non-2xx response, or a 2xx response whose body could not be used.

    ``message`` holds the server's ``{"error": ...}`` text when one was
    sent; ``status_code`` is ``None`` for malformed success bodies.
    """

    def __init__(self, status_code: int | None, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"HTTP {status_code}")


class ValidationError(StockroomError):
    """A product draft violates the form constraints."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)

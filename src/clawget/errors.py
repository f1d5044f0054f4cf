from __future__ import annotations

from typing import Any


class ClawgetError(RuntimeError):
    """
    Raised for every failed API call.

    ``status_code`` is None when no HTTP response was received (transport failure,
    undecodable body, or a local check that failed before any request).
    ``response`` keeps the parsed body for diagnostics.
    """

    def __init__(self, message: str, status_code: int | None = None, response: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        return self.message

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_insufficient_balance(self) -> bool:
        # The backend has no dedicated error code for this yet.
        return self.status_code == 402 or "insufficient" in self.message.lower()


class ConfigurationError(ClawgetError):
    """Invalid client configuration or arguments, detected before any I/O."""


class TransportError(ClawgetError):
    """The request never produced an HTTP response (DNS, connect, timeout, ...)."""

"""
Transport errors raised by the REST client, and display-message formatting
for DRF-style error bodies.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """A failed API call.

    ``status_code`` is None for network-level failures (DNS, refused
    connection, timeout) where no HTTP response arrived.
    """

    def __init__(self, message: str, status_code: int | None = None,
                 payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def detail(self) -> str:
        if isinstance(self.payload, dict) and self.payload.get("detail") is not None:
            return str(self.payload["detail"])
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r})"


class RequestCancelled(ApiError):
    """The call was deliberately abandoned; never shown to the user."""

    def __init__(self, message: str = "request cancelled") -> None:
        super().__init__(message)


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def format_error_message(payload: Any, fallback: str) -> str:
    """Flatten a DRF error body into one line for a toast/banner.

    Order of preference: a plain string body, ``non_field_errors``,
    ``field: msg`` pairs (joined by " — "), ``detail``, then ``fallback``.
    """
    if payload is None:
        return fallback
    if isinstance(payload, str):
        return payload.strip() or fallback
    if not isinstance(payload, dict):
        return fallback
    if payload.get("non_field_errors"):
        return _join(payload["non_field_errors"])
    messages = [
        f"{key}: {_join(value)}"
        for key, value in payload.items()
        if key not in ("detail", "error", "status_code")
    ]
    if messages:
        return " — ".join(messages)
    if payload.get("detail"):
        return str(payload["detail"])
    if payload.get("error"):
        return str(payload["error"])
    return fallback


def describe_error(exc: BaseException, fallback: str) -> str:
    """User-facing message for any exception escaping a transport call."""
    if isinstance(exc, ApiError):
        if exc.payload is not None:
            return format_error_message(exc.payload, fallback)
        return exc.message or fallback
    return fallback

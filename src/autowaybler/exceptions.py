"""Custom exception hierarchy for autowaybler."""

from __future__ import annotations


class WayblerError(Exception):
    """Base exception for all autowaybler errors."""


class WayblerConfigError(WayblerError):
    """Invalid or missing configuration."""


class WayblerConnectionError(WayblerError):
    """Network or push-feed failure (timeout, error, premature close)."""


class WayblerParseError(WayblerError):
    """A push-feed message could not be decoded."""


class WayblerApiError(WayblerError):
    """Vendor API returned a non-2xx status or an unreadable body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(message)


class WayblerAuthenticationError(WayblerApiError):
    """Login was rejected or the returned token carries no user id."""

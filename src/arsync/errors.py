"""Error taxonomy for the NetSuite -> HubSpot AR sync.

Every error raised by the integrations derives from `ArSyncError` so callers can
catch "anything this service raised" without also swallowing programming errors
from the standard library.
"""

from __future__ import annotations

from typing import Any


class ArSyncError(Exception):
    """Base exception for all AR sync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AuthConfigError(ArSyncError):
    """A credential or required setting is missing. Raised before any network call."""


class SignatureError(ArSyncError):
    """The OAuth 1.0 signing inputs are malformed."""


class TransportError(ArSyncError):
    """Network-level failure (connection refused, DNS, timeout)."""


class RemoteApiError(ArSyncError):
    """Non-2xx status, or an error payload embedded in a 2xx body."""

    def __init__(self, message: str, status_code: int = 0, response_body: str = "") -> None:
        super().__init__(
            message,
            {"status_code": status_code, "response_body": response_body[:500]},
        )
        self.status_code = status_code
        self.response_body = response_body


class ParseError(ArSyncError):
    """Response body is not well-formed JSON. The raw body is kept for diagnostics."""

    def __init__(self, message: str, raw_body: str = "", status_code: int = 0) -> None:
        super().__init__(message, {"status_code": status_code, "raw_body": raw_body[:500]})
        self.raw_body = raw_body
        self.status_code = status_code

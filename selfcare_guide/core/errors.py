"""
Error taxonomy for the gateway.

Each error carries the HTTP status it maps to and a stable ``code`` so
handlers can branch on type instead of inspecting message text.
"""

from typing import Any, Optional

__all__ = [
    "GatewayError",
    "RequestValidationError",
    "AuthConfigError",
    "RateLimitError",
    "UpstreamTimeout",
    "UpstreamParseError",
    "GenericServerError",
]


class GatewayError(Exception):
    """Base class for errors rendered as ``{"error": ...}`` responses."""

    status_code: int = 500
    code: str = "server_error"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Any] = None,
        headers: Optional[dict] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = headers or {}

    def to_body(self, include_details: bool = False) -> dict:
        body = {"error": self.message}
        if include_details and self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationError(GatewayError):
    status_code = 400
    code = "validation_error"


class AuthConfigError(GatewayError):
    """Server misconfiguration (missing or rejected API key)."""

    status_code = 500
    code = "auth_config_error"


class RateLimitError(GatewayError):
    status_code = 429
    code = "rate_limited"


class UpstreamTimeout(GatewayError):
    status_code = 504
    code = "upstream_timeout"


class UpstreamParseError(GatewayError):
    """Empty, malformed or incomplete model output."""

    status_code = 500
    code = "upstream_parse_error"


class GenericServerError(GatewayError):
    status_code = 500
    code = "server_error"


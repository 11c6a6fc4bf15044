"""
Security and CORS headers applied to every gateway response.
"""

from typing import Iterable, Optional

from fastapi import Response

SECURITY_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-store, max-age=0",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}

CORS_ALLOW_METHODS = "POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"

__all__ = ["SECURITY_HEADERS", "apply_security_headers", "allowed_origin"]


def allowed_origin(origin: Optional[str], allowed: Iterable[str]) -> Optional[str]:
    """Return ``origin`` only when it exactly matches an allow-listed origin."""
    if origin and origin in allowed:
        return origin
    return None


def apply_security_headers(
    response: Response, origin: Optional[str], allowed: Iterable[str]
) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value

    echoed = allowed_origin(origin, allowed)
    if echoed:
        response.headers["Access-Control-Allow-Origin"] = echoed
        response.headers["Vary"] = "Origin"

    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    return response

"""Utility helpers shared by the gateway routers."""

from typing import Any

from fastapi import Request

from selfcare_guide.config import logger
from selfcare_guide.core.errors import RequestValidationError
from selfcare_guide.core.rate_limit import UNKNOWN_CLIENT


def get_client_ip(request: Request) -> str:
    """Extract the requester IP from proxy headers, or "unknown"."""
    forwarded = request.headers.getlist("x-forwarded-for")
    if forwarded:
        first = forwarded[0].split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT


async def read_json_body(request: Request) -> Any:
    """Decode the request body, turning malformed JSON into a 400."""
    try:
        return await request.json()
    except ValueError as exc:
        logger.warning("Malformed JSON body", extra={"error": str(exc)})
        raise RequestValidationError("Request body must be a JSON object") from exc

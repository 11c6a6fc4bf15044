"""FastAPI dependencies shared across gateway endpoints."""

from typing import Optional

from fastapi import Depends

from selfcare_guide import config
from selfcare_guide.config import logger
from selfcare_guide.core import rate_limit
from selfcare_guide.core.errors import (
    AuthConfigError,
    GenericServerError,
    RateLimitError,
)
from selfcare_guide.core.gemini import GENERIC_ERROR_MESSAGE, GeminiGateway

RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
MISSING_KEY_MESSAGE = "Service configuration error. API key not properly configured."


def get_api_key() -> Optional[str]:
    return config.GEMINI_API_KEY


def get_gateway(api_key: Optional[str] = Depends(get_api_key)) -> GeminiGateway:
    return GeminiGateway(api_key=api_key)


def get_analysis_limiter() -> rate_limit.RateLimiter:
    return rate_limit.analysis_limiter


def get_compendium_limiter() -> rate_limit.RateLimiter:
    return rate_limit.compendium_limiter


def enforce_rate_limit(
    limiter: rate_limit.RateLimiter, client_ip: str
) -> rate_limit.RateLimitDecision:
    """Count the request and raise a 429 when the window is exhausted."""
    try:
        decision = limiter.check_rate_limit(client_ip)
    except Exception as exc:
        logger.error(
            "Rate limit store failure",
            extra={"limiter": limiter.name, "error": str(exc)},
        )
        raise GenericServerError(GENERIC_ERROR_MESSAGE, details=str(exc)) from exc

    if not decision.allowed:
        raise RateLimitError(RATE_LIMITED_MESSAGE, headers=decision.headers())
    return decision


def require_api_key(api_key: Optional[str]) -> str:
    """Refuse to call the model without a usable key."""
    if not config.api_key_configured(api_key):
        logger.error(
            "GEMINI_API_KEY not configured - check environment variables",
            extra={"api_key_present": bool(api_key)},
        )
        raise AuthConfigError(
            MISSING_KEY_MESSAGE,
            details="Please ensure GEMINI_API_KEY is set in the environment",
        )
    return api_key

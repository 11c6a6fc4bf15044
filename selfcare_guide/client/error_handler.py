"""
Error classification, backoff and formatting for gateway calls.

``should_retry`` decides which failures the retry loop may repeat,
``get_retry_delay`` computes the jittered backoff, and
``format_error_message`` turns any failure into a localized sentence.
"""

import json
import math
import random
import re
from typing import Any, Callable, Dict, Optional

import httpx

from selfcare_guide.config import logger

from .i18n import error_translations

BASE_RETRY_DELAY_MS = 1000
MAX_RETRY_DELAY_MS = 30000

_RETRYABLE_MARKERS = ("network", "timeout", "econnrefused", "fetch failed", "connection")
_NETWORK_MARKERS = ("network", "fetch", "connection")
_AI_API_ERROR = re.compile(r"AI API Error: (.*)", re.DOTALL)

__all__ = [
    "APIError",
    "should_retry",
    "get_retry_delay",
    "format_error_message",
    "get_error_details",
    "log_error",
]


class APIError(Exception):
    """Non-2xx response from the gateway. Read-only once constructed."""

    def __init__(self, status: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self._status = status
        self._message = message
        self._details = details

    @property
    def status(self) -> int:
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> Any:
        return self._details

    def __repr__(self) -> str:
        return f"APIError(status={self._status}, message={self._message!r})"


def _is_transport_error(error: BaseException) -> bool:
    return isinstance(error, (ConnectionError, TimeoutError, httpx.TransportError))


def should_retry(error: Any) -> bool:
    """
    Retry on 429 and 5xx responses and on network failures.

    Any other 4xx is a permanent request error.
    """
    if isinstance(error, APIError):
        return error.status == 429 or 500 <= error.status < 600

    if isinstance(error, BaseException):
        if _is_transport_error(error):
            return True
        message = str(error).lower()
        return any(marker in message for marker in _RETRYABLE_MARKERS)

    return False


def get_retry_delay(
    attempt: int,
    base_delay: int = BASE_RETRY_DELAY_MS,
    max_delay: int = MAX_RETRY_DELAY_MS,
    rng: Callable[[], float] = random.random,
) -> int:
    """
    Exponential backoff with jitter, in milliseconds.

    The capped delay ``min(base_delay * 2**attempt, max_delay)`` is scaled by
    a random factor in [0.5, 1.0).
    """
    capped = min(base_delay * (2**attempt), max_delay)
    return math.floor(capped * (0.5 + rng() * 0.5))


def _status_message(status: int, translations: Dict[str, str]) -> Optional[str]:
    if status == 400:
        return translations["badRequest"]
    if status == 401:
        return translations["unauthorized"]
    if status == 403:
        return translations["forbidden"]
    if status == 404:
        return translations["notFound"]
    if status == 429:
        return translations["tooManyRequests"]
    if status in (500, 502, 503, 504):
        return translations["serviceUnavailable"]
    return None


def _embedded_api_message(message: str) -> Optional[str]:
    """Pull ``error.message`` out of an ``AI API Error: <json>`` string."""
    match = _AI_API_ERROR.search(message)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(1))
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    error = parsed.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


def _format(error: Any, language: str) -> str:
    translations = error_translations(language)
    api_error = translations["apiError"]

    if isinstance(error, APIError):
        text = _status_message(error.status, translations)
        if text is None:
            text = error.message or translations["genericError"]
        return api_error.replace("{message}", text)

    if isinstance(error, BaseException):
        message = str(error)
        lowered = message.lower()
        if isinstance(error, ConnectionError) or any(
            marker in lowered for marker in _NETWORK_MARKERS
        ):
            return translations["networkError"]

        embedded = _embedded_api_message(message)
        if embedded is not None:
            return api_error.replace("{message}", embedded)

        return api_error.replace("{message}", message or type(error).__name__)

    if isinstance(error, dict):
        text = error.get("message") or error.get("error") or str(error)
        return api_error.replace("{message}", str(text))

    if error is not None and not isinstance(error, (str, bytes, int, float, bool)):
        text = (
            getattr(error, "message", None)
            or getattr(error, "error", None)
            or str(error)
        )
        return api_error.replace("{message}", str(text))

    return translations["unexpected"]


def format_error_message(error: Any, language: str) -> str:
    """Return a localized, displayable message for any error value. Never raises."""
    try:
        return _format(error, language)
    except Exception as exc:
        logger.debug("Error formatting failed", extra={"error": repr(exc)})
        return error_translations(language)["unexpected"]


def get_error_details(error: Any) -> Dict[str, Any]:
    """Extract error details for logging."""
    if isinstance(error, APIError):
        return {
            "type": "APIError",
            "status": error.status,
            "message": error.message,
            "details": error.details,
        }

    if isinstance(error, BaseException):
        return {"type": type(error).__name__, "message": str(error)}

    return {"type": "Unknown", "value": str(error)}


def log_error(context: str, error: Any) -> None:
    logger.error(f"[{context}] {get_error_details(error)}")

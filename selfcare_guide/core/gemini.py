import json
from typing import Any, Dict, List, Optional, Sequence

import httpx

# Import from centralized config
from selfcare_guide.config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    GEMINI_TIMEOUT_SECONDS,
    logger,
)
from selfcare_guide.core.errors import (
    AuthConfigError,
    GatewayError,
    GenericServerError,
    RateLimitError,
    UpstreamParseError,
    UpstreamTimeout,
)

RATE_LIMITED_MESSAGE = (
    "Service temporarily unavailable due to high demand. Please try again later."
)
CONFIG_ERROR_MESSAGE = "Service configuration error. Please contact support."
TIMEOUT_MESSAGE = "Request timeout. Please try again."
GENERIC_ERROR_MESSAGE = "Failed to process request. Please try again."

EMPTY_RESPONSE_MESSAGE = "AI service returned an empty response"
INVALID_FORMAT_MESSAGE = "AI service returned an invalid response format"
INCOMPLETE_RESPONSE_MESSAGE = "AI service returned an incomplete response"

# google.rpc status names reported in the error body
_RATE_LIMIT_STATUSES = {"RESOURCE_EXHAUSTED"}
_AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}
_TIMEOUT_STATUSES = {"DEADLINE_EXCEEDED"}

# Message fragments, kept for exceptions that carry no status
_RATE_LIMIT_MARKERS = ("quota", "rate limit", "RESOURCE_EXHAUSTED")
_AUTH_MARKERS = ("API key", "authentication", "UNAUTHENTICATED")
_TIMEOUT_MARKERS = ("timeout", "DEADLINE_EXCEEDED")


class GeminiGateway:
    """
    Single-shot structured JSON generation against the Gemini REST API.

    No retry happens here; callers decide whether to try again.
    """

    def __init__(
        self,
        api_key: Optional[str] = GEMINI_API_KEY,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(
        self,
        system_instruction: str,
        parts: Sequence[Dict[str, Any]],
        response_schema: Dict[str, Any],
    ) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"parts": list(parts)}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            },
        }

    async def generate_json(
        self,
        system_instruction: str,
        parts: Sequence[Dict[str, Any]],
        response_schema: Dict[str, Any],
        required_keys: Sequence[str] = (),
    ) -> Dict[str, Any]:
        """
        Generate a JSON object conforming to ``response_schema``.

        Args:
            system_instruction: Behavioral instruction for the model
            parts: Text and inline image parts of the user turn
            response_schema: Gemini responseSchema for JSON mode
            required_keys: Top-level keys the parsed object must contain

        Returns:
            The parsed JSON object

        Raises:
            GatewayError: typed by failure (rate limit, auth, timeout, parse)
        """
        payload = self.build_payload(system_instruction, parts, response_schema)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-goog-api-key"] = self.api_key

        image_count = sum(1 for part in parts if "inline_data" in part)
        logger.info(
            "Calling Gemini generateContent",
            extra={"model": self.model, "parts": len(parts), "images": image_count},
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint, json=payload, headers=headers
                )
                response.raise_for_status()
                api_result = response.json()
        except httpx.HTTPStatusError as exc:
            raise _error_from_status(exc.response) from exc
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout(TIMEOUT_MESSAGE, details=str(exc)) from exc
        except httpx.RequestError as exc:
            raise GenericServerError(
                GENERIC_ERROR_MESSAGE,
                details=f"Network error calling Gemini API: {exc}",
            ) from exc
        except ValueError as exc:
            raise UpstreamParseError(
                INVALID_FORMAT_MESSAGE, details=str(exc)
            ) from exc

        return _extract_json(_response_text(api_result), required_keys)


def _error_from_status(response: httpx.Response) -> GatewayError:
    """Map a non-2xx Gemini response to a typed gateway error."""
    status_name = ""
    message = response.text
    try:
        body = response.json()
        error = body.get("error", {}) if isinstance(body, dict) else {}
        status_name = str(error.get("status", ""))
        message = str(error.get("message", message))
    except ValueError:
        pass

    raw = f"Gemini API HTTP error: {response.status_code} {status_name} - {message}"
    code = response.status_code

    if code == 429 or status_name in _RATE_LIMIT_STATUSES:
        return RateLimitError(RATE_LIMITED_MESSAGE, details=raw)
    if code in (401, 403) or status_name in _AUTH_STATUSES:
        logger.error(f"Gemini rejected credentials: {raw}")
        return AuthConfigError(CONFIG_ERROR_MESSAGE)
    if code == 504 or status_name in _TIMEOUT_STATUSES:
        return UpstreamTimeout(TIMEOUT_MESSAGE, details=raw)
    return GenericServerError(GENERIC_ERROR_MESSAGE, details=raw)


def _response_text(api_result: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    if not isinstance(api_result, dict):
        return ""
    candidates = api_result.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return ""
    content = candidate.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""

    texts: List[str] = [
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts).strip()


def _extract_json(raw_text: str, required_keys: Sequence[str] = ()) -> Dict[str, Any]:
    """Parse the model's JSON output and check its top-level keys."""

    cleaned = raw_text.strip()
    if not cleaned:
        logger.error("Gemini returned an empty response")
        raise UpstreamParseError(EMPTY_RESPONSE_MESSAGE)

    # Remove markdown code block delimiters
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        if first_newline > 0:
            cleaned = cleaned[first_newline + 1 :]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error(f"Failed to parse JSON from Gemini response: {raw_text[:500]}")
        raise UpstreamParseError(INVALID_FORMAT_MESSAGE, details=str(exc)) from exc

    if not isinstance(data, dict):
        logger.error(f"Gemini JSON is not an object: {type(data).__name__}")
        raise UpstreamParseError(INVALID_FORMAT_MESSAGE)

    missing_keys = [key for key in required_keys if key not in data]
    if missing_keys:
        logger.error(f"Gemini JSON missing keys: {missing_keys}")
        logger.error(f"Received keys: {list(data.keys())}")
        raise UpstreamParseError(
            INCOMPLETE_RESPONSE_MESSAGE, details={"missing": missing_keys}
        )

    return data


def classify_upstream_error(exc: BaseException) -> GatewayError:
    """
    Convert any exception raised around the generation call to a GatewayError.

    Typed errors pass through. Anything else falls back to matching fragments
    of the provider's message text; that wording is not a stable contract, so
    the fallback only applies to exceptions that carry no status.
    """
    if isinstance(exc, GatewayError):
        if isinstance(exc, AuthConfigError):
            logger.error("Authentication error - check API key configuration")
        return exc

    message = str(exc) or type(exc).__name__

    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return RateLimitError(RATE_LIMITED_MESSAGE, details=message)

    if any(marker in message for marker in _AUTH_MARKERS):
        logger.error("Authentication error - check API key configuration")
        return AuthConfigError(CONFIG_ERROR_MESSAGE)

    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return UpstreamTimeout(TIMEOUT_MESSAGE, details=message)

    return GenericServerError(GENERIC_ERROR_MESSAGE, details=message)


__all__ = [
    "GeminiGateway",
    "classify_upstream_error",
    "RATE_LIMITED_MESSAGE",
    "CONFIG_ERROR_MESSAGE",
    "TIMEOUT_MESSAGE",
    "GENERIC_ERROR_MESSAGE",
    "EMPTY_RESPONSE_MESSAGE",
    "INVALID_FORMAT_MESSAGE",
    "INCOMPLETE_RESPONSE_MESSAGE",
]

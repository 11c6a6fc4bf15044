"""
Shape checks for incoming gateway payloads.

Only the top-level structure is validated here; profile completeness is a
form concern and is not enforced by the server.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from selfcare_guide.core.errors import RequestValidationError

ANALYSIS_MODES = ("professional", "general")
LANGUAGES = ("ja", "en")
MAX_IMAGE_BYTES = 4 * 1024 * 1024
MAX_QUERY_LENGTH = 500

__all__ = [
    "ANALYSIS_MODES",
    "LANGUAGES",
    "MAX_IMAGE_BYTES",
    "MAX_QUERY_LENGTH",
    "ImageInput",
    "AnalysisPayload",
    "CompendiumPayload",
    "estimate_decoded_size",
    "validate_analysis_request",
    "validate_compendium_request",
]


@dataclass(frozen=True)
class ImageInput:
    data: str
    mime_type: str

    def to_part(self) -> Dict[str, Any]:
        """Render as an inline image part for the generation API."""
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}

    def to_payload(self) -> Dict[str, str]:
        """Render in the request-body shape the gateway accepts."""
        return {"data": self.data, "mimeType": self.mime_type}


@dataclass(frozen=True)
class AnalysisPayload:
    mode: str
    profile: Dict[str, Any]
    language: str
    face_image: Optional[ImageInput] = None
    tongue_image: Optional[ImageInput] = None


@dataclass(frozen=True)
class CompendiumPayload:
    query: str
    language: str


def estimate_decoded_size(base64_data: str) -> float:
    """Approximate byte size of a base64 string without decoding it."""
    return len(base64_data) * 3 / 4


def _require_object(body: Any) -> Dict[str, Any]:
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return body


def _validate_language(language: Any) -> str:
    if not isinstance(language, str) or language not in LANGUAGES:
        raise RequestValidationError('Language must be "ja" or "en"')
    return language


def _validate_image(value: Any, label: str) -> Optional[ImageInput]:
    if value is None:
        return None

    error = RequestValidationError(f"Invalid {label} image format")
    if not isinstance(value, dict):
        raise error

    data = value.get("data")
    mime_type = value.get("mimeType")
    if not isinstance(data, str) or not data or not isinstance(mime_type, str):
        raise error
    if not mime_type.startswith("image/"):
        raise error
    if estimate_decoded_size(data) > MAX_IMAGE_BYTES:
        raise error

    return ImageInput(data=data, mime_type=mime_type)


def validate_analysis_request(body: Any) -> AnalysisPayload:
    """
    Validate an analysis request body.

    Raises:
        RequestValidationError: on the first failing check
    """
    body = _require_object(body)

    mode = body.get("mode")
    if not isinstance(mode, str) or mode not in ANALYSIS_MODES:
        raise RequestValidationError('Mode must be "professional" or "general"')

    profile = body.get("profile")
    if not isinstance(profile, dict):
        raise RequestValidationError("Profile is required and must be an object")

    language = _validate_language(body.get("language"))

    return AnalysisPayload(
        mode=mode,
        profile=profile,
        language=language,
        face_image=_validate_image(body.get("faceImage"), "face"),
        tongue_image=_validate_image(body.get("tongueImage"), "tongue"),
    )


def validate_compendium_request(body: Any) -> CompendiumPayload:
    """Validate a compendium lookup body."""
    body = _require_object(body)

    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        raise RequestValidationError(
            "Query is required and must be a non-empty string"
        )
    if len(query) > MAX_QUERY_LENGTH:
        raise RequestValidationError(
            f"Query must be less than {MAX_QUERY_LENGTH} characters"
        )

    language = _validate_language(body.get("language"))

    return CompendiumPayload(query=query, language=language)

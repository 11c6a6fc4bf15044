"""Services turning validated payloads into Gemini calls."""

from __future__ import annotations

from typing import Any, Dict, List

from selfcare_guide.config import logger
from selfcare_guide.core.gemini import GeminiGateway
from selfcare_guide.core.prompt_templates import (
    FACE_IMAGE_LABEL,
    TONGUE_IMAGE_LABEL,
    build_analysis_prompt,
    build_analysis_user_text,
    build_compendium_prompt,
    build_compendium_user_text,
)
from selfcare_guide.core.validation import AnalysisPayload, CompendiumPayload


def build_analysis_parts(payload: AnalysisPayload) -> List[Dict[str, Any]]:
    """User-turn parts: profile text, then each labelled image if present."""
    parts: List[Dict[str, Any]] = [
        {"text": build_analysis_user_text(payload.mode, payload.profile)}
    ]

    if payload.face_image:
        parts.append({"text": FACE_IMAGE_LABEL})
        parts.append(payload.face_image.to_part())

    if payload.tongue_image:
        parts.append({"text": TONGUE_IMAGE_LABEL})
        parts.append(payload.tongue_image.to_part())

    return parts


async def run_analysis(
    gateway: GeminiGateway, payload: AnalysisPayload
) -> Dict[str, Any]:
    prompt = build_analysis_prompt(payload.mode, payload.language)
    parts = build_analysis_parts(payload)

    logger.info(
        "Running wellness analysis",
        extra={
            "mode": payload.mode,
            "language": payload.language,
            "has_face_image": payload.face_image is not None,
            "has_tongue_image": payload.tongue_image is not None,
        },
    )

    return await gateway.generate_json(
        prompt.system_instruction,
        parts,
        prompt.response_schema,
        prompt.required_keys,
    )


async def run_compendium_lookup(
    gateway: GeminiGateway, payload: CompendiumPayload
) -> Dict[str, Any]:
    prompt = build_compendium_prompt(payload.language)
    parts = [{"text": build_compendium_user_text(payload.query)}]

    logger.info(
        "Running compendium lookup",
        extra={"language": payload.language, "query_length": len(payload.query)},
    )

    return await gateway.generate_json(
        prompt.system_instruction,
        parts,
        prompt.response_schema,
        prompt.required_keys,
    )

"""Prompt templates and builders for the analysis and compendium Gemini flows."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from selfcare_guide.core.schemas import (
    COMPENDIUM_RESPONSE_SCHEMA,
    analysis_schema_for,
    required_keys,
)


@dataclass(frozen=True)
class PromptSpec:
    """System instruction plus the schema the model output must follow."""

    system_instruction: str
    response_schema: Dict[str, Any]

    @property
    def required_keys(self) -> List[str]:
        return required_keys(self.response_schema)


LANGUAGE_LEVEL = "Medical Professional Level"

LANGUAGE_NAMES = {
    "ja": "Japanese",
    "en": "English",
}


def get_language_name(language: str) -> str:
    """Display name embedded in prompts; unknown codes read as English."""
    name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])
    return f"{name} ({LANGUAGE_LEVEL})"


# --- ANALYSIS PROMPT ---

ANALYSIS_SYSTEM_TEMPLATE = """You are an expert AI in integrative medicine, skilled in Japanese Kampo, TCM, and modern wellness. Your task is to analyze user-provided data and generate a structured, professional-level (for 'professional' mode) or easy-to-understand (for 'general' mode) wellness analysis.
- Analyze all provided text data and any images (face, tongue) to form a comprehensive assessment.
- If images are provided, incorporate visual diagnosis (e.g., tongue diagnosis, facial complexion) into your analysis.
- Base your suggestions on evidence and traditional knowledge. {MODE_GUIDANCE}
- Your entire response MUST be a single, valid JSON object adhering to the provided schema, with all text in {LANGUAGE_NAME}.
- Do not include any markdown formatting (like ```json) in your response, only the raw JSON object."""

MODE_GUIDANCE = {
    "professional": (
        "This is 'professional' mode: be specific and clinical, include "
        "pharmacology and contraindications where known."
    ),
    "general": (
        "This is 'general' mode: be safe, practical, and encouraging, and "
        "avoid clinical jargon."
    ),
}

ANALYSIS_USER_TEMPLATE = """Please perform a wellness analysis.
- Mode: {MODE}
- User Profile: {PROFILE}
- If images are included, analyze them for signs relevant to the assessment (e.g., tongue coating, color, shape; facial complexion)."""

FACE_IMAGE_LABEL = "User's face image:"
TONGUE_IMAGE_LABEL = "User's tongue image:"


def build_analysis_prompt(mode: str, language: str) -> PromptSpec:
    """Select the system instruction and schema for an analysis request."""
    if mode not in MODE_GUIDANCE:
        raise ValueError(f"Unsupported analysis mode: {mode}")

    instruction = ANALYSIS_SYSTEM_TEMPLATE.format(
        MODE_GUIDANCE=MODE_GUIDANCE[mode],
        LANGUAGE_NAME=get_language_name(language),
    )
    return PromptSpec(
        system_instruction=instruction,
        response_schema=analysis_schema_for(mode),
    )


def build_analysis_user_text(mode: str, profile: Dict[str, Any]) -> str:
    return ANALYSIS_USER_TEMPLATE.format(
        MODE=mode,
        PROFILE=json.dumps(profile, indent=2, ensure_ascii=False),
    )


# --- COMPENDIUM PROMPT ---

COMPENDIUM_SYSTEM_TEMPLATE = """You are an expert integrative medicine AI combining Kampo and Western herbal traditions. Provide concise, evidence-based recommendations in {LANGUAGE_NAME}.

First decide whether the query names ONE specific substance (a single herb, Kampo formula, or supplement) or describes a symptom/condition.

For specific substances: Provide ONE detailed entry in the matching category only, leave the other categories as empty arrays, and give a brief integrative viewpoint.

For symptoms/conditions: Provide integrative viewpoint plus:
- Up to 3 Kampo formulas (traditional multi-herb Japanese prescriptions like Kakkonto, Hochuekkito)
- Up to 3 Western herbs (European/American herbs like Echinacea, Valerian, Chamomile, St. John's Wort)
- 5-7 supplements (modern supplements: vitamins, minerals, probiotics, amino acids, etc.)

CRITICAL - ALWAYS INCLUDE FOR EVERY ENTRY:
1. constituentHerbs: Main herbs in Kampo formulas, or active compounds in Western herbs/supplements
2. clinicalNotes: Clinical applications, research evidence, and traditional use (1-2 sentences minimum)
3. contraindications: Safety information, warnings, and precautions (even if minimal, state "Generally safe when used as directed")

These fields are MANDATORY. Never omit them.

Order by clinical relevance. Be concise but complete. Focus on accessible, well-researched options.

Output: Valid JSON only, no markdown."""

COMPENDIUM_USER_TEMPLATE = (
    'Provide integrative compendium information for the query: "{QUERY}"'
)


def build_compendium_prompt(language: str) -> PromptSpec:
    instruction = COMPENDIUM_SYSTEM_TEMPLATE.format(
        LANGUAGE_NAME=get_language_name(language)
    )
    return PromptSpec(
        system_instruction=instruction,
        response_schema=COMPENDIUM_RESPONSE_SCHEMA,
    )


def build_compendium_user_text(query: str) -> str:
    return COMPENDIUM_USER_TEMPLATE.format(QUERY=query.strip())


__all__ = [
    "PromptSpec",
    "ANALYSIS_SYSTEM_TEMPLATE",
    "ANALYSIS_USER_TEMPLATE",
    "COMPENDIUM_SYSTEM_TEMPLATE",
    "COMPENDIUM_USER_TEMPLATE",
    "FACE_IMAGE_LABEL",
    "TONGUE_IMAGE_LABEL",
    "get_language_name",
    "build_analysis_prompt",
    "build_analysis_user_text",
    "build_compendium_prompt",
    "build_compendium_user_text",
]

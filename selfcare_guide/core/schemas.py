"""Response schemas sent to the generation API as ``responseSchema``."""

from typing import Any, Dict, List

OBJECT = "OBJECT"
ARRAY = "ARRAY"
STRING = "STRING"


def _string(description: str = "") -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": STRING}
    if description:
        schema["description"] = description
    return schema


def _string_list(description: str = "") -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": ARRAY, "items": {"type": STRING}}
    if description:
        schema["description"] = description
    return schema


def _list_of(item: Dict[str, Any], description: str = "") -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": ARRAY, "items": item}
    if description:
        schema["description"] = description
    return schema


# --- ANALYSIS ---

PROFESSIONAL_SUGGESTION_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "name": _string(),
        "reason": _string(),
        "usage": _string(),
        "constituentHerbs": _string("Optional. The main herbs in the formula."),
        "pharmacology": _string("Optional. Known pharmacological actions."),
        "contraindications": _string("Optional. Warnings or contraindications."),
    },
    "required": ["name", "reason", "usage"],
}

GENERAL_SUGGESTION_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "name": _string(),
        "reason": _string(),
        "usage": _string(),
    },
    "required": ["name", "reason", "usage"],
}

FOLK_REMEDY_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "name": _string(),
        "description": _string(),
        "rationale": _string("Optional. The reasoning behind the remedy."),
    },
    "required": ["name", "description"],
}

LIFESTYLE_ADVICE_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "diet": _string_list(),
        "sleep": _string_list(),
        "exercise": _string_list(),
    },
    "required": ["diet", "sleep", "exercise"],
}

PROFESSIONAL_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "analysisMode": {"type": STRING, "enum": ["professional"]},
        "differentialDiagnosis": {
            "type": OBJECT,
            "properties": {
                "pattern": _string(
                    "e.g., Liver Qi Stagnation with Spleen Deficiency"
                ),
                "pathology": _string("The underlying pathological process."),
                "evidence": _string(
                    "Key signs and symptoms supporting the diagnosis."
                ),
            },
            "required": ["pattern", "pathology", "evidence"],
        },
        "rationale": _string("Detailed reasoning for the diagnosis."),
        "treatmentPrinciple": _string("The primary strategy for treatment."),
        "herbSuggestions": _list_of(PROFESSIONAL_SUGGESTION_SCHEMA),
        "kampoSuggestions": _list_of(PROFESSIONAL_SUGGESTION_SCHEMA),
        "supplementSuggestions": _list_of(PROFESSIONAL_SUGGESTION_SCHEMA),
        "folkRemedies": _list_of(FOLK_REMEDY_SCHEMA, "Optional folk remedies."),
        "lifestyleAdvice": LIFESTYLE_ADVICE_SCHEMA,
        "precautions": _string_list("Important precautions and warnings."),
    },
    "required": [
        "analysisMode",
        "differentialDiagnosis",
        "rationale",
        "treatmentPrinciple",
        "herbSuggestions",
        "kampoSuggestions",
        "supplementSuggestions",
        "lifestyleAdvice",
        "precautions",
    ],
}

GENERAL_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "analysisMode": {"type": STRING, "enum": ["general"]},
        "wellnessProfile": {
            "type": OBJECT,
            "properties": {
                "title": _string(
                    "A concise title for the user's wellness profile."
                ),
                "summary": _string(
                    "A brief, easy-to-understand summary of their condition."
                ),
            },
            "required": ["title", "summary"],
        },
        "herbSuggestions": _list_of(GENERAL_SUGGESTION_SCHEMA),
        "supplementSuggestions": _list_of(GENERAL_SUGGESTION_SCHEMA),
        "folkRemedies": _list_of(FOLK_REMEDY_SCHEMA, "Optional self-care tips."),
        "lifestyleAdvice": LIFESTYLE_ADVICE_SCHEMA,
        "precautions": _string_list("Important precautions and warnings."),
    },
    "required": [
        "analysisMode",
        "wellnessProfile",
        "herbSuggestions",
        "supplementSuggestions",
        "lifestyleAdvice",
        "precautions",
    ],
}


# --- COMPENDIUM ---

COMPENDIUM_CATEGORIES = ["Western Herb", "Kampo Formula", "Supplement"]

COMPENDIUM_ENTRY_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "name": _string(),
        "category": {"type": STRING, "enum": COMPENDIUM_CATEGORIES},
        "summary": _string(),
        "properties": _string(),
        "channels": _string(),
        "actions": _string_list(),
        "indications": _string_list(),
        "constituentHerbs": _string(
            "Key constituent herbs in Kampo formulas, or active compounds in "
            "Western herbs/supplements. Always provide this."
        ),
        "clinicalNotes": _string(
            "Clinical applications, research evidence, and traditional use "
            "notes. Always provide this information."
        ),
        "contraindications": _string(
            "Important contraindications, warnings, and precautions. Always "
            "provide this information."
        ),
    },
    "required": [
        "name",
        "category",
        "summary",
        "actions",
        "indications",
        "constituentHerbs",
        "clinicalNotes",
        "contraindications",
    ],
}

COMPENDIUM_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": OBJECT,
    "properties": {
        "integrativeViewpoint": _string(),
        "kampoEntries": _list_of(COMPENDIUM_ENTRY_SCHEMA),
        "westernHerbEntries": _list_of(COMPENDIUM_ENTRY_SCHEMA),
        "supplementEntries": _list_of(COMPENDIUM_ENTRY_SCHEMA),
    },
    "required": [
        "integrativeViewpoint",
        "kampoEntries",
        "westernHerbEntries",
        "supplementEntries",
    ],
}


def analysis_schema_for(mode: str) -> Dict[str, Any]:
    return (
        PROFESSIONAL_ANALYSIS_SCHEMA
        if mode == "professional"
        else GENERAL_ANALYSIS_SCHEMA
    )


def required_keys(schema: Dict[str, Any]) -> List[str]:
    """Top-level keys the parsed model output must contain."""
    return list(schema.get("required", []))


__all__ = [
    "PROFESSIONAL_SUGGESTION_SCHEMA",
    "GENERAL_SUGGESTION_SCHEMA",
    "FOLK_REMEDY_SCHEMA",
    "LIFESTYLE_ADVICE_SCHEMA",
    "PROFESSIONAL_ANALYSIS_SCHEMA",
    "GENERAL_ANALYSIS_SCHEMA",
    "COMPENDIUM_CATEGORIES",
    "COMPENDIUM_ENTRY_SCHEMA",
    "COMPENDIUM_RESPONSE_SCHEMA",
    "analysis_schema_for",
    "required_keys",
]

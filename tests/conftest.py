"""Shared fixtures for gateway and client tests."""

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from selfcare_guide.core.rate_limit import ANALYSIS_LIMIT, COMPENDIUM_LIMIT, RateLimiter
from selfcare_guide.main import app
from selfcare_guide.routers.dependencies import (
    get_analysis_limiter,
    get_api_key,
    get_compendium_limiter,
    get_gateway,
)


PROFESSIONAL_RESULT: Dict[str, Any] = {
    "analysisMode": "professional",
    "differentialDiagnosis": {
        "pattern": "Liver Qi Stagnation with Spleen Deficiency",
        "pathology": "Stress-driven qi constraint impairing digestion",
        "evidence": "Irritability, bloating, pale tongue with thin white coat",
    },
    "rationale": "Emotional strain with digestive weakness.",
    "treatmentPrinciple": "Soothe the liver and strengthen the spleen",
    "herbSuggestions": [
        {"name": "Bupleurum", "reason": "Moves liver qi", "usage": "Decoction"}
    ],
    "kampoSuggestions": [
        {
            "name": "Kamishoyosan",
            "reason": "Classic formula for this pattern",
            "usage": "2.5g three times daily before meals",
            "constituentHerbs": "Bupleurum, Peony, Angelica",
            "pharmacology": "Anxiolytic effects reported",
            "contraindications": "Caution in pregnancy",
        }
    ],
    "supplementSuggestions": [
        {"name": "Magnesium", "reason": "Supports relaxation", "usage": "200mg nightly"}
    ],
    "lifestyleAdvice": {
        "diet": ["Warm, cooked meals"],
        "sleep": ["Consistent bedtime"],
        "exercise": ["Daily walking"],
    },
    "precautions": ["Consult a physician if symptoms persist"],
}

GENERAL_RESULT: Dict[str, Any] = {
    "analysisMode": "general",
    "wellnessProfile": {"title": "Tired and stressed", "summary": "Rest more."},
    "herbSuggestions": [
        {"name": "Chamomile", "reason": "Calming", "usage": "Tea before bed"}
    ],
    "supplementSuggestions": [
        {"name": "Vitamin D", "reason": "Common deficiency", "usage": "1000 IU daily"}
    ],
    "folkRemedies": [{"name": "Ginger tea", "description": "Warming drink"}],
    "lifestyleAdvice": {"diet": [], "sleep": ["Sleep 7 hours"], "exercise": []},
    "precautions": [],
}

GINGER_ENTRY: Dict[str, Any] = {
    "name": "Ginger",
    "category": "Western Herb",
    "summary": "Warming digestive herb.",
    "actions": ["Carminative", "Antiemetic"],
    "indications": ["Nausea", "Poor digestion"],
    "constituentHerbs": "Gingerols, shogaols",
    "clinicalNotes": "Evidence supports use for nausea.",
    "contraindications": "Generally safe when used as directed",
}

COMPENDIUM_RESULT: Dict[str, Any] = {
    "integrativeViewpoint": "Ginger is valued in both traditions for warming digestion.",
    "kampoEntries": [],
    "westernHerbEntries": [GINGER_ENTRY],
    "supplementEntries": [
        {
            **GINGER_ENTRY,
            "name": "Ginger extract",
            "category": "Supplement",
        }
    ],
}


class FakeGateway:
    """Stands in for GeminiGateway and records every call."""

    def __init__(
        self,
        result: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.result = result
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate_json(
        self, system_instruction, parts, response_schema, required_keys=()
    ):
        self.calls.append(
            {
                "system_instruction": system_instruction,
                "parts": list(parts),
                "response_schema": response_schema,
                "required_keys": list(required_keys),
            }
        )
        if self.error is not None:
            raise self.error
        return self.result


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway(result=COMPENDIUM_RESULT)


@pytest.fixture
def limiters(clock):
    return {
        "analysis": RateLimiter("analysis", ANALYSIS_LIMIT, clock=clock),
        "compendium": RateLimiter("compendium", COMPENDIUM_LIMIT, clock=clock),
    }


@pytest.fixture
def client(gateway, limiters):
    """TestClient with the model call, API key and rate limiters replaced."""
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_api_key] = lambda: "test-api-key"
    app.dependency_overrides[get_analysis_limiter] = lambda: limiters["analysis"]
    app.dependency_overrides[get_compendium_limiter] = lambda: limiters["compendium"]

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

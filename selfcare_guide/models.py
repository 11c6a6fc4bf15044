"""Pydantic models for gateway results, named after their JSON fields."""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# --- ANALYSIS ---


class ProfessionalSuggestion(BaseModel):
    name: str
    reason: str
    usage: str
    constituentHerbs: Optional[str] = None
    pharmacology: Optional[str] = None
    contraindications: Optional[str] = None


class GeneralSuggestion(BaseModel):
    name: str
    reason: str
    usage: str


class FolkRemedy(BaseModel):
    name: str
    description: str
    rationale: Optional[str] = None


class LifestyleAdvice(BaseModel):
    diet: List[str] = Field(default_factory=list)
    sleep: List[str] = Field(default_factory=list)
    exercise: List[str] = Field(default_factory=list)


class DifferentialDiagnosis(BaseModel):
    pattern: str
    pathology: str
    evidence: str


class WellnessProfile(BaseModel):
    title: str
    summary: str


class ProfessionalAnalysis(BaseModel):
    """Clinical analysis returned for ``mode == "professional"``."""

    analysisMode: Literal["professional"]
    differentialDiagnosis: DifferentialDiagnosis
    rationale: str
    treatmentPrinciple: str
    herbSuggestions: List[ProfessionalSuggestion]
    kampoSuggestions: List[ProfessionalSuggestion]
    supplementSuggestions: List[ProfessionalSuggestion]
    folkRemedies: Optional[List[FolkRemedy]] = None
    lifestyleAdvice: LifestyleAdvice
    precautions: List[str]


class GeneralAnalysis(BaseModel):
    """Wellness summary returned for ``mode == "general"``."""

    analysisMode: Literal["general"]
    wellnessProfile: WellnessProfile
    herbSuggestions: List[GeneralSuggestion]
    supplementSuggestions: List[GeneralSuggestion]
    folkRemedies: Optional[List[FolkRemedy]] = None
    lifestyleAdvice: LifestyleAdvice
    precautions: List[str]


AnalysisResult = Annotated[
    Union[ProfessionalAnalysis, GeneralAnalysis],
    Field(discriminator="analysisMode"),
]


# --- COMPENDIUM ---


class CompendiumEntry(BaseModel):
    name: str
    category: Literal["Western Herb", "Kampo Formula", "Supplement"]
    summary: str
    properties: Optional[str] = None
    channels: Optional[str] = None
    actions: List[str] = Field(default_factory=list)
    indications: List[str] = Field(default_factory=list)
    constituentHerbs: Optional[str] = None
    clinicalNotes: Optional[str] = None
    contraindications: Optional[str] = None


class CompendiumResult(BaseModel):
    integrativeViewpoint: str
    kampoEntries: Optional[List[CompendiumEntry]] = None
    westernHerbEntries: List[CompendiumEntry] = Field(default_factory=list)
    supplementEntries: List[CompendiumEntry] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.kampoEntries or self.westernHerbEntries or self.supplementEntries
        )


# --- GATEWAY ---


class ErrorResponse(BaseModel):
    """Generic error payload."""

    error: str
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str

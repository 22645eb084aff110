"""
Pydantic schemas for the scoring and game routes
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ValidateFormulaRequest(BaseModel):
    formula: str = Field(..., description="Formula text to validate")
    test_variables: Optional[Dict[str, Any]] = Field(None, description="Optional sample variables to evaluate against")


class ValidateFormulaResponse(BaseModel):
    valid: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    variables: List[str] = Field(default_factory=list)
    test_result: Optional[float] = None


class PreviewRequest(BaseModel):
    """Score unsaved formulas against hand-supplied variables"""

    game_type: Optional[str] = None
    formulas: Dict[str, str] = Field(..., description="Competency name -> formula text")
    weights: Dict[str, float] = Field(default_factory=dict, description="Competency name -> weight")
    test_variables: Dict[str, Any] = Field(..., description="Variable name -> value")


class CompareRequest(BaseModel):
    game_type: str
    version_ids: List[str] = Field(..., min_length=2, description="Version ids, compared in this order")
    test_data: Optional[Dict[str, Any]] = Field(None, description="Shared variables to score every version with")


class SaveConfigurationRequest(BaseModel):
    game_type: str = Field(..., min_length=1)
    formulas: Dict[str, str] = Field(..., description="Competency name -> formula text")
    weights: Dict[str, float] = Field(default_factory=dict)
    settings: Dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = Field(None, max_length=2000)
    created_by: Optional[str] = Field(None, max_length=100)
    activate: bool = True

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, weights: Dict[str, float]) -> Dict[str, float]:
        """Weights must be non-negative"""
        for name, weight in weights.items():
            if weight < 0:
                raise ValueError(f"Weight for '{name}' must be non-negative, got {weight}")
        return weights


class SetActiveRequest(BaseModel):
    game_type: str = Field(..., min_length=1)
    version_name: str = Field(..., min_length=1, description="Version name, e.g. v3")


class ScoringConfigSchema(BaseModel):
    competency_formulas: Dict[str, str]
    final_weights: Dict[str, float]
    settings: Dict[str, Any] = Field(default_factory=dict)


class ScoringVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    game_type: str
    version_number: int
    version_name: str
    description: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    config: ScoringConfigSchema


class VariableCatalogResponse(BaseModel):
    game_type: str
    variables: Dict[str, str]


class SubmitSessionRequest(BaseModel):
    """A completed game session"""

    game_type: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1, max_length=100)
    raw_data: Dict[str, Any] = Field(..., description="Raw telemetry for the session")


class CompetencyScoreSchema(BaseModel):
    raw: float
    weight: float
    weighted: float


class ScoresSchema(BaseModel):
    final_score: float
    competencies: Dict[str, CompetencyScoreSchema]


class SubmitSessionResponse(BaseModel):
    session_id: str
    version_used: str
    scores: ScoresSchema


class SessionResultResponse(BaseModel):
    session_id: str
    user_id: str
    game_type: str
    version_id: str
    version_name: Optional[str] = None
    status: str
    final_scores: Dict[str, Any]
    completed_at: datetime

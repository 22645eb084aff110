"""
FastAPI routes for dynamic scoring

Formula authoring (validate, preview, compare), configuration versioning and
game session submission. Domain errors propagate to the application-level
NeuRazorError handler.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_scoring_service

from .schemas import (
    CompareRequest,
    PreviewRequest,
    SaveConfigurationRequest,
    ScoringVersionResponse,
    SessionResultResponse,
    SetActiveRequest,
    SubmitSessionRequest,
    SubmitSessionResponse,
    ValidateFormulaRequest,
    ValidateFormulaResponse,
    VariableCatalogResponse,
)
from .service import ScoringService

scoring_router = APIRouter(prefix="/api/scoring", tags=["scoring"])
games_router = APIRouter(prefix="/api/games", tags=["games"])


@scoring_router.post("/validate-formula", response_model=ValidateFormulaResponse)
def validate_formula(request: ValidateFormulaRequest, service: ScoringService = Depends(get_scoring_service)):
    """Validate a formula, optionally evaluating it against test variables"""
    return service.validate_formula(request.formula, request.test_variables)


@scoring_router.post("/preview")
def preview_scores(request: PreviewRequest, service: ScoringService = Depends(get_scoring_service)):
    """Score unsaved formulas and weights against test variables"""
    return service.preview(request.game_type, request.formulas, request.weights, request.test_variables)


@scoring_router.post("/compare")
def compare_versions(request: CompareRequest, service: ScoringService = Depends(get_scoring_service)):
    """Diff stored versions and, with test data, their scores"""
    return service.compare(request.game_type, request.version_ids, request.test_data)


@scoring_router.post("/save", response_model=ScoringVersionResponse)
def save_configuration(request: SaveConfigurationRequest, service: ScoringService = Depends(get_scoring_service)):
    """Store a new configuration version, active by default"""
    return service.save(
        game_type=request.game_type,
        formulas=request.formulas,
        weights=request.weights,
        settings=request.settings,
        description=request.description,
        created_by=request.created_by,
        activate=request.activate,
    )


@scoring_router.post("/set-active", response_model=ScoringVersionResponse)
def set_active_version(request: SetActiveRequest, service: ScoringService = Depends(get_scoring_service)):
    return service.set_active(request.game_type, request.version_name)


@scoring_router.get("/active/{game_type}", response_model=ScoringVersionResponse)
def get_active_configuration(game_type: str, service: ScoringService = Depends(get_scoring_service)):
    return service.get_active(game_type)


@scoring_router.get("/versions/{game_type}", response_model=List[ScoringVersionResponse])
def list_versions(game_type: str, service: ScoringService = Depends(get_scoring_service)):
    """All versions for a game type, newest first"""
    return service.list_versions(game_type)


@scoring_router.get("/variables/{game_type}", response_model=VariableCatalogResponse)
def get_available_variables(game_type: str, service: ScoringService = Depends(get_scoring_service)):
    """Variables formulas may reference for a game type"""
    return service.available_variables(game_type)


@games_router.post("/submit", response_model=SubmitSessionResponse)
def submit_session(request: SubmitSessionRequest, service: ScoringService = Depends(get_scoring_service)):
    """Score a completed session with the active configuration and record it"""
    return service.submit(request.game_type, request.user_id, request.raw_data)


@games_router.get("/results/{game_type}", response_model=List[SessionResultResponse])
def list_results(
    game_type: str,
    user_id: Optional[str] = Query(None, alias="userId", description="Only sessions for this user"),
    limit: int = Query(100, ge=1, le=1000),
    service: ScoringService = Depends(get_scoring_service),
):
    """Recent scored sessions, newest first"""
    return service.list_results(game_type, user_id=user_id, limit=limit)

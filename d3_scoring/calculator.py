"""
Scoring calculator

Extracts the variable environment once, evaluates every competency
formula against it, clamps each raw score to [0, 100], applies weights and
rounds the composite. Any formula failure aborts the whole pass: partial
results are never returned.
"""
import math
import time
from typing import Any, Dict, Mapping, Optional

from core.exceptions import InputError
from core.logging import get_logger
from core.metrics import metrics
from core.utils import round_half_up, truncate_text
from d1_extraction import VariableEnvironment, extract
from d2_formulas import DomainError, FormulaError, evaluate, validate_formula

from .constants import FINAL_SCORE_DECIMALS, MAX_RAW_SCORE, MIN_RAW_SCORE
from .exceptions import ScoringError
from .types import CompetencyScore, ScoreResult, ScoringConfiguration

logger = get_logger("scoring.calculator", domain="d3_scoring")


def clamp_score(value: float) -> float:
    """Clamp a raw competency score into [0, 100]"""
    return max(MIN_RAW_SCORE, min(MAX_RAW_SCORE, value))


def _evaluate_competency(competency: str, text: str, environment: Mapping[str, float]) -> float:
    start_time = time.time()
    try:
        value = evaluate(validate_formula(text), environment)
    except FormulaError as exc:
        metrics.track_formula_evaluation("error", time.time() - start_time)
        logger.warning(
            f"Formula for {competency} failed: {exc.message}",
            extra={"competency": competency, "formula": truncate_text(text, 200), "error_code": exc.error_code},
        )
        raise ScoringError(competency, exc) from exc
    metrics.track_formula_evaluation("success", time.time() - start_time)
    return value


def score_environment(configuration: ScoringConfiguration, environment: Mapping[str, float]) -> ScoreResult:
    """
    Score every competency formula of a configuration against an environment.

    A competency with a formula but no weight scores with weight 0; a weight
    without a formula contributes nothing.

    Raises:
        ScoringError: the first competency whose formula fails to validate or evaluate
    """
    competencies: Dict[str, CompetencyScore] = {}
    total_weighted = 0.0

    for competency, text in configuration.competency_formulas.items():
        raw = clamp_score(_evaluate_competency(competency, text, environment))
        weight = configuration.final_weights.get(competency, 0.0)
        weighted = raw * weight
        total_weighted += weighted
        if not (math.isfinite(weighted) and math.isfinite(total_weighted)):
            raise ScoringError(competency, DomainError(f"Weighted score overflows with weight {weight:g}"))
        competencies[competency] = CompetencyScore(raw=raw, weight=weight, weighted=weighted)

    final_score = round_half_up(total_weighted, FINAL_SCORE_DECIMALS)
    if final_score > MAX_RAW_SCORE:
        # Only raw scores are clamped; the composite is not
        logger.warning(
            f"Final score {final_score} exceeds {MAX_RAW_SCORE}; weights sum to {sum(configuration.final_weights.values()):.3f}",
            extra={"game_type": configuration.game_type},
        )

    return ScoreResult(competencies=competencies, final_score=final_score)


def calculate_scores(game_type: str, configuration: ScoringConfiguration, raw_telemetry: Mapping[str, Any]) -> ScoreResult:
    """
    Score raw session telemetry with a configuration.

    Raises:
        InputError: ``game_type`` does not match the configuration
        UnknownGameType: no extraction strategy for ``game_type``
        MissingTelemetryField: telemetry lacks a required field
        ScoringError: a competency formula failed
    """
    if configuration.game_type != game_type:
        raise InputError(
            f"Configuration is for '{configuration.game_type}', not '{game_type}'",
            field="game_type",
        )

    environment = extract(game_type, raw_telemetry)
    logger.debug(f"Extracted {len(environment)} variables for {game_type}")

    try:
        result = score_environment(configuration, environment)
    except ScoringError:
        metrics.track_scoring_run(game_type, "error")
        raise

    metrics.track_scoring_run(game_type, "success")
    return result


def preview(
    formulas: Mapping[str, str],
    weights: Mapping[str, float],
    test_variables: Mapping[str, Any],
    game_type: Optional[str] = "preview",
) -> ScoreResult:
    """
    Score ad hoc formulas and weights against hand-supplied variables.

    Same algorithm and failure semantics as ``calculate_scores``; nothing
    needs to be saved first.
    """
    configuration = ScoringConfiguration(
        game_type=game_type or "preview",
        competency_formulas=formulas,
        final_weights=weights,
    )
    return score_environment(configuration, VariableEnvironment(test_variables))

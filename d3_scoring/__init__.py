"""
D3 Scoring Module

Applies versioned competency formulas and weights to session telemetry,
compares configuration versions and stores them.
"""

from .calculator import calculate_scores, preview, score_environment
from .comparator import build_comparison, compare, score_configurations
from .exceptions import ScoringError
from .types import (
    CompetencyScore,
    ComparisonReport,
    ConfigurationDiff,
    FormulaChange,
    ScoreOutcome,
    ScoreResult,
    ScoringConfiguration,
    VersionedConfiguration,
    WeightChange,
)

__all__ = [
    # Scoring
    "calculate_scores",
    "preview",
    "score_environment",
    # Comparison
    "build_comparison",
    "compare",
    "score_configurations",
    # Types
    "CompetencyScore",
    "ComparisonReport",
    "ConfigurationDiff",
    "FormulaChange",
    "ScoreOutcome",
    "ScoreResult",
    "ScoringConfiguration",
    "VersionedConfiguration",
    "WeightChange",
    # Errors
    "ScoringError",
]

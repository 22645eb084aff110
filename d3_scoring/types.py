"""
Scoring types

Typed records for scoring configurations, score results and configuration
diffs. Configurations enforce their invariants at construction so malformed
input never reaches the evaluator.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Real
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from core.exceptions import InputError

from .exceptions import ScoringError


def _freeze_formulas(formulas: Any) -> Mapping[str, str]:
    if not isinstance(formulas, Mapping):
        raise InputError("competency_formulas must be an object", field="competency_formulas")
    frozen = {}
    for name, text in formulas.items():
        if not isinstance(name, str) or not name.strip():
            raise InputError("Competency names must be non-empty strings", field="competency_formulas")
        if not isinstance(text, str):
            raise InputError(f"Formula for '{name}' must be a string", field="competency_formulas", competency=name)
        frozen[name] = text
    return MappingProxyType(frozen)


def _freeze_weights(weights: Any) -> Mapping[str, float]:
    if not isinstance(weights, Mapping):
        raise InputError("final_weights must be an object", field="final_weights")
    frozen = {}
    for name, weight in weights.items():
        if not isinstance(name, str) or not name.strip():
            raise InputError("Competency names must be non-empty strings", field="final_weights")
        if isinstance(weight, bool) or not isinstance(weight, Real) or not math.isfinite(weight):
            raise InputError(f"Weight for '{name}' must be a finite number", field="final_weights", competency=name)
        if weight < 0:
            raise InputError(f"Weight for '{name}' must be non-negative, got {weight}", field="final_weights", competency=name)
        frozen[name] = float(weight)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class ScoringConfiguration:
    """Formulas, weights and opaque settings for one game type"""

    game_type: str
    competency_formulas: Mapping[str, str]
    final_weights: Mapping[str, float]
    settings: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.game_type, str) or not self.game_type.strip():
            raise InputError("game_type is required", field="game_type")
        if not isinstance(self.settings, Mapping):
            raise InputError("settings must be an object", field="settings")
        object.__setattr__(self, "competency_formulas", _freeze_formulas(self.competency_formulas))
        object.__setattr__(self, "final_weights", _freeze_weights(self.final_weights))
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    @classmethod
    def from_dict(cls, game_type: str, config: Mapping[str, Any]) -> "ScoringConfiguration":
        """Build from the stored/requested ``config`` payload"""
        if not isinstance(config, Mapping):
            raise InputError("config must be an object", field="config")
        return cls(
            game_type=game_type,
            competency_formulas=config.get("competency_formulas") or {},
            final_weights=config.get("final_weights") or {},
            settings=config.get("settings") or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competency_formulas": dict(self.competency_formulas),
            "final_weights": dict(self.final_weights),
            "settings": dict(self.settings),
        }


@dataclass(frozen=True)
class VersionedConfiguration:
    """A configuration as held by the configuration store"""

    id: str
    game_type: str
    version_number: int
    version_name: str
    configuration: ScoringConfiguration
    is_active: bool = False
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "game_type": self.game_type,
            "version_number": self.version_number,
            "version_name": self.version_name,
            "description": self.description,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "config": self.configuration.to_dict(),
        }


@dataclass(frozen=True)
class CompetencyScore:
    raw: float
    weight: float
    weighted: float

    def to_dict(self) -> Dict[str, float]:
        return {"raw": self.raw, "weight": self.weight, "weighted": self.weighted}


@dataclass(frozen=True)
class ScoreResult:
    """Per-competency scores plus the rounded composite"""

    competencies: Mapping[str, CompetencyScore]
    final_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_score": self.final_score,
            "competencies": {name: score.to_dict() for name, score in self.competencies.items()},
        }


@dataclass(frozen=True)
class WeightChange:
    competency: str
    old: Optional[float]
    new: Optional[float]
    delta: float

    def to_dict(self) -> Dict[str, Any]:
        return {"competency": self.competency, "old": self.old, "new": self.new, "delta": self.delta}


@dataclass(frozen=True)
class FormulaChange:
    competency: str
    old_text: Optional[str]
    new_text: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"competency": self.competency, "old_text": self.old_text, "new_text": self.new_text}


@dataclass(frozen=True)
class ConfigurationDiff:
    """Difference between two consecutive configurations"""

    from_version: str
    to_version: str
    weight_changes: List[WeightChange]
    formula_changes: List[FormulaChange]
    score_delta: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_version": self.from_version,
            "to_version": self.to_version,
            "weight_changes": [change.to_dict() for change in self.weight_changes],
            "formula_changes": [change.to_dict() for change in self.formula_changes],
            "score_delta": self.score_delta,
        }


@dataclass(frozen=True)
class ScoreOutcome:
    """Scoring result or failure for one configuration in a comparison"""

    label: str
    result: Optional[ScoreResult] = None
    error: Optional[ScoringError] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class ComparisonReport:
    outcomes: Optional[List[ScoreOutcome]]
    differences: List[ConfigurationDiff]

"""
Extraction strategy registry

Each supported game type registers one ExtractionStrategy. Adding a game
means registering a strategy, never editing a conditional.
"""
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any, Dict, List, Mapping, Type

from core.logging import get_logger
from core.utils import safe_divide

from .exceptions import MissingTelemetryField, UnknownGameType
from .types import VariableEnvironment

logger = get_logger("extraction.registry", domain="d1_extraction")


class ExtractionStrategy(ABC):
    """Derives named numeric variables from one game type's telemetry"""

    game_type: str = ""

    # Variable name -> human readable description
    variables: Dict[str, str] = {}

    @abstractmethod
    def extract(self, raw: Mapping[str, Any]) -> Dict[str, float]:
        """Return every variable in ``variables`` computed from ``raw``"""

    # Field helpers shared by strategies

    @staticmethod
    def require(raw: Mapping[str, Any], field: str) -> Any:
        if field not in raw or raw[field] is None:
            raise MissingTelemetryField(field)
        return raw[field]

    @classmethod
    def require_number(cls, raw: Mapping[str, Any], field: str, minimum: float = 0.0) -> float:
        value = cls.require(raw, field)
        return cls._as_number(value, field, minimum)

    @classmethod
    def optional_number(cls, raw: Mapping[str, Any], field: str, default: float = 0.0) -> float:
        if raw.get(field) is None:
            return default
        return cls._as_number(raw[field], field, 0.0)

    @staticmethod
    def require_list(raw: Mapping[str, Any], field: str) -> List[Any]:
        value = ExtractionStrategy.require(raw, field)
        if not isinstance(value, list):
            raise MissingTelemetryField(field, "not a list")
        return value

    @staticmethod
    def _as_number(value: Any, field: str, minimum: float) -> float:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise MissingTelemetryField(field, "not a number")
        number = float(value)
        if not math.isfinite(number):
            raise MissingTelemetryField(field, "not finite")
        if number < minimum:
            raise MissingTelemetryField(field, f"below {minimum:g}")
        return number

    @staticmethod
    def ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
        """Ratio that is 0 when the denominator is 0"""
        return safe_divide(numerator, denominator) * scale


_STRATEGIES: Dict[str, ExtractionStrategy] = {}


def register_strategy(strategy_class: Type[ExtractionStrategy]) -> Type[ExtractionStrategy]:
    """Register a strategy class under its ``game_type`` (usable as a decorator)"""
    game_type = strategy_class.game_type
    if not game_type:
        raise ValueError(f"{strategy_class.__name__} does not declare a game_type")
    if game_type in _STRATEGIES:
        raise ValueError(f"Extraction strategy already registered for '{game_type}'")
    _STRATEGIES[game_type] = strategy_class()
    logger.debug(f"Registered extraction strategy {strategy_class.__name__} for {game_type}")
    return strategy_class


def get_strategy(game_type: str) -> ExtractionStrategy:
    try:
        return _STRATEGIES[game_type]
    except KeyError:
        raise UnknownGameType(game_type) from None


def supported_game_types() -> List[str]:
    return sorted(_STRATEGIES)


def available_variables(game_type: str) -> Dict[str, str]:
    """Variable catalogue for a game type, for formula authors"""
    return dict(get_strategy(game_type).variables)


def extract(game_type: str, raw_telemetry: Mapping[str, Any]) -> VariableEnvironment:
    """
    Map raw telemetry for a game type into a variable environment.

    Raises:
        UnknownGameType: no strategy registered for ``game_type``
        MissingTelemetryField: a required field is absent or malformed
    """
    strategy = get_strategy(game_type)
    if not isinstance(raw_telemetry, Mapping):
        raise MissingTelemetryField("raw_data", "not an object")
    return VariableEnvironment(strategy.extract(raw_telemetry))

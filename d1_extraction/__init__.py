"""
D1 Extraction Module

Turns raw per-game telemetry into the flat named-variable environment
that scoring formulas are evaluated against.
"""

from . import strategies  # noqa: F401  (registers built-in game types)
from .exceptions import MissingTelemetryField, UnknownGameType
from .registry import ExtractionStrategy, available_variables, extract, get_strategy, register_strategy, supported_game_types
from .types import VariableEnvironment

__all__ = [
    "ExtractionStrategy",
    "MissingTelemetryField",
    "UnknownGameType",
    "VariableEnvironment",
    "available_variables",
    "extract",
    "get_strategy",
    "register_strategy",
    "supported_game_types",
]

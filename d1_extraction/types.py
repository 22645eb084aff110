"""
Variable environment type

The environment is the read-only snapshot of named numbers a formula is
evaluated against. It is fully materialized at construction and cannot be
changed afterwards.
"""
import math
from collections.abc import Mapping
from numbers import Real
from typing import Any, Dict, Iterator, Optional

from core.exceptions import InputError


def _coerce_value(name: str, value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if not isinstance(value, Real):
        raise InputError(f"Variable '{name}' must be a number, got {type(value).__name__}", field=name)
    number = float(value)
    if not math.isfinite(number):
        raise InputError(f"Variable '{name}' must be finite, got {value}", field=name)
    return number


class VariableEnvironment(Mapping):
    """Immutable mapping of variable name to finite float"""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        materialized: Dict[str, float] = {}
        for name, value in (values or {}).items():
            if not isinstance(name, str) or not name:
                raise InputError(f"Variable names must be non-empty strings, got {name!r}")
            materialized[name] = _coerce_value(name, value)
        object.__setattr__(self, "_values", materialized)

    def __setattr__(self, key, value):
        raise AttributeError("VariableEnvironment is immutable")

    def __getitem__(self, name: str) -> float:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableEnvironment({self._values!r})"

    def to_dict(self) -> Dict[str, float]:
        return dict(self._values)

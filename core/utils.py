"""
Core utility functions used across domains
"""
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional

# Enough precision to quantize any finite float to a handful of decimals
_DECIMAL_CONTEXT = Context(prec=400)


def to_decimal(value: float) -> Decimal:
    """Decimal built from the shortest repr, so 0.1 stays 0.1"""
    return Decimal(repr(float(value)))


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round half away from zero on the decimal representation"""
    quantum = Decimal(1).scaleb(-decimals)
    return float(to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT))


def decimal_difference(new: Optional[float], old: Optional[float]) -> float:
    """``new - old`` computed in decimal; a missing side counts as zero"""
    new_value = to_decimal(new) if new is not None else Decimal(0)
    old_value = to_decimal(old) if old is not None else Decimal(0)
    return float(new_value - old_value)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers, returning default if denominator is zero"""
    if denominator == 0:
        return default
    return numerator / denominator


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to max length with suffix"""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(suffix)] + suffix

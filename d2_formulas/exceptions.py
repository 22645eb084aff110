"""
Formula errors

Validation errors come from parsing and never need variables; evaluation
errors come from binding a valid formula to an environment.
"""
from typing import Optional

from core.exceptions import NeuRazorError


class FormulaError(NeuRazorError):
    """Base class for formula validation and evaluation failures"""

    def __init__(self, message: str, error_code: str, **details):
        super().__init__(message=message, error_code=error_code, details=details, status_code=422)


class FormulaValidationError(FormulaError):
    """Malformed formula text"""

    def __init__(self, reason: str, position: Optional[int] = None, error_code: str = "FORMULA_VALIDATION_ERROR"):
        message = reason if position is None else f"{reason} (at position {position})"
        super().__init__(message, error_code, reason=reason, position=position)
        self.reason = reason
        self.position = position


class FormulaTooComplex(FormulaValidationError):
    """Formula exceeds the length, depth or node-count limits"""

    def __init__(self, reason: str, position: Optional[int] = None):
        super().__init__(reason, position, error_code="FORMULA_TOO_COMPLEX")


class FormulaEvaluationError(FormulaError):
    """A valid formula could not be evaluated against an environment"""

    def __init__(self, message: str, error_code: str = "FORMULA_EVALUATION_ERROR", **details):
        super().__init__(message, error_code, **details)


class UndefinedVariable(FormulaEvaluationError):
    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'", "UNDEFINED_VARIABLE", variable=name)
        self.name = name


class DivisionByZero(FormulaEvaluationError):
    def __init__(self, message: str = "Division by zero"):
        super().__init__(message, "DIVISION_BY_ZERO")


class DomainError(FormulaEvaluationError):
    def __init__(self, message: str, function: Optional[str] = None):
        super().__init__(message, "DOMAIN_ERROR", function=function)
        self.function = function

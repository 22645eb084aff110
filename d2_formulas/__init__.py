"""
D2 Formulas Module

Safe parsing, validation and evaluation of operator-authored scoring
formulas over named variables.
"""

from .evaluator import FormulaEvaluator, FormulaTestResult, evaluate, get_formula_evaluator, test_formula
from .exceptions import (
    DivisionByZero,
    DomainError,
    FormulaError,
    FormulaEvaluationError,
    FormulaTooComplex,
    FormulaValidationError,
    UndefinedVariable,
)
from .nodes import Formula
from .parser import FormulaCheck, check_formula, extract_variable_names, validate_formula

__all__ = [
    # Parsing
    "Formula",
    "FormulaCheck",
    "check_formula",
    "extract_variable_names",
    "validate_formula",
    # Evaluation
    "FormulaEvaluator",
    "FormulaTestResult",
    "evaluate",
    "get_formula_evaluator",
    "test_formula",
    # Errors
    "DivisionByZero",
    "DomainError",
    "FormulaError",
    "FormulaEvaluationError",
    "FormulaTooComplex",
    "FormulaValidationError",
    "UndefinedVariable",
]

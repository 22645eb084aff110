"""
Formula evaluator

Walks a validated AST against a variable environment. Evaluation is pure
and deterministic: it reads the environment, never writes it, and its cost
is linear in the node count fixed at validation time.
"""
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Union

from core.utils import round_half_up

from .constants import MAX_ROUND_DIGITS
from .exceptions import DivisionByZero, DomainError, FormulaError, FormulaEvaluationError, UndefinedVariable
from .nodes import BinaryOp, Call, Compare, Conditional, Formula, Node, Number, UnaryOp, Variable
from .parser import validate_formula


def _finite(value: float, what: str) -> float:
    if isinstance(value, complex) or not math.isfinite(value):
        raise DomainError(f"{what} does not produce a finite real number")
    return value


def _add(left: float, right: float) -> float:
    return left + right


def _subtract(left: float, right: float) -> float:
    return left - right


def _multiply(left: float, right: float) -> float:
    return left * right


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise DivisionByZero()
    return left / right


def _power(base: float, exponent: float) -> float:
    if base == 0 and exponent < 0:
        raise DivisionByZero("Zero raised to a negative power")
    if base < 0 and not float(exponent).is_integer():
        raise DomainError("Negative base raised to a fractional power has no real result")
    try:
        return math.pow(base, exponent)
    except OverflowError:
        raise DomainError("Exponentiation overflowed") from None


_BINARY: Dict[str, Callable[[float, float], float]] = {
    "+": _add,
    "-": _subtract,
    "*": _multiply,
    "/": _divide,
    "^": _power,
}

_COMPARE: Dict[str, Callable[[float, float], bool]] = {
    "<": lambda left, right: left < right,
    "<=": lambda left, right: left <= right,
    ">": lambda left, right: left > right,
    ">=": lambda left, right: left >= right,
    "==": lambda left, right: left == right,
    "!=": lambda left, right: left != right,
}


def _sqrt(args: List[float]) -> float:
    (value,) = args
    if value < 0:
        raise DomainError(f"sqrt of negative number {value:g}", function="sqrt")
    return math.sqrt(value)


def _round(args: List[float]) -> float:
    value = args[0]
    digits = args[1] if len(args) > 1 else 0.0
    if not float(digits).is_integer() or not 0 <= digits <= MAX_ROUND_DIGITS:
        raise DomainError(f"round digits must be a whole number from 0 to {MAX_ROUND_DIGITS}", function="round")
    return round_half_up(value, int(digits))


def _clamp(args: List[float]) -> float:
    value, low, high = args
    if low > high:
        raise DomainError(f"clamp lower bound {low:g} is greater than upper bound {high:g}", function="clamp")
    return max(low, min(high, value))


_FUNCTIONS: Dict[str, Callable[[List[float]], float]] = {
    "min": min,
    "max": max,
    "sqrt": _sqrt,
    "abs": lambda args: abs(args[0]),
    "round": _round,
    "clamp": _clamp,
}


class FormulaEvaluator:
    """Evaluates validated formulas against variable environments"""

    def evaluate(self, formula: Union[Formula, Node], environment: Mapping[str, float]) -> float:
        """
        Evaluate a validated formula.

        Args:
            formula: Formula returned by ``validate_formula`` (or a bare AST node)
            environment: Variable name -> number

        Returns:
            The numeric result

        Raises:
            UndefinedVariable: a referenced variable is not in the environment
            DivisionByZero: division (or 0 ^ negative) by zero
            DomainError: sqrt of a negative, non-real power, overflow, bad clamp/round arguments
        """
        root = formula.root if isinstance(formula, Formula) else formula
        return float(self._eval(root, environment))

    def _eval(self, node: Node, env: Mapping[str, float]) -> float:
        if isinstance(node, Number):
            return node.value

        if isinstance(node, Variable):
            try:
                return env[node.name]
            except KeyError:
                raise UndefinedVariable(node.name) from None

        if isinstance(node, UnaryOp):
            return -self._eval(node.operand, env)

        if isinstance(node, BinaryOp):
            left = self._eval(node.left, env)
            right = self._eval(node.right, env)
            return _finite(_BINARY[node.op](left, right), f"'{node.op}'")

        if isinstance(node, Compare):
            left = self._eval(node.left, env)
            right = self._eval(node.right, env)
            return 1.0 if _COMPARE[node.op](left, right) else 0.0

        if isinstance(node, Conditional):
            branch = node.if_true if self._eval(node.condition, env) != 0 else node.if_false
            return self._eval(branch, env)

        if isinstance(node, Call):
            if node.name == "if":
                condition, if_true, if_false = node.args
                branch = if_true if self._eval(condition, env) != 0 else if_false
                return self._eval(branch, env)
            args = [self._eval(arg, env) for arg in node.args]
            return _finite(_FUNCTIONS[node.name](args), f"{node.name}()")

        raise FormulaEvaluationError(f"Unsupported node type {type(node).__name__}")


@dataclass(frozen=True)
class FormulaTestResult:
    """Outcome of a one-shot validate + evaluate"""

    __test__ = False  # not a pytest test class

    success: bool
    result: Optional[float] = None
    error: Optional[FormulaError] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.error_code if self.error else None


# Stateless, so one shared instance is safe across threads
_evaluator_instance = FormulaEvaluator()


def get_formula_evaluator() -> FormulaEvaluator:
    """Get the shared formula evaluator instance."""
    return _evaluator_instance


def evaluate(formula: Union[Formula, Node], environment: Mapping[str, float]) -> float:
    """Convenience function to evaluate a validated formula."""
    return _evaluator_instance.evaluate(formula, environment)


def test_formula(text: str, environment: Mapping[str, float]) -> FormulaTestResult:
    """
    Validate then evaluate formula text in one step.

    Validation errors take precedence over evaluation errors. Formula problems
    are returned in the result, never raised.
    """
    try:
        formula = validate_formula(text)
        value = _evaluator_instance.evaluate(formula, environment)
    except FormulaError as exc:
        return FormulaTestResult(success=False, error=exc)
    return FormulaTestResult(success=True, result=value)


test_formula.__test__ = False  # not a pytest test function

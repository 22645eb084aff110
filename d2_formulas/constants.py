"""Fixed limits and allow-lists for operator-authored formulas."""

# Structural limits enforced while parsing
MAX_FORMULA_LENGTH = 2000
MAX_AST_DEPTH = 32
MAX_AST_NODES = 500

# Allowed functions: name -> (min_args, max_args); None means unbounded
FUNCTION_ARITY = {
    "min": (1, None),
    "max": (1, None),
    "sqrt": (1, 1),
    "abs": (1, 1),
    "round": (1, 2),
    "clamp": (3, 3),
    "if": (3, 3),
}

ARITHMETIC_OPERATORS = ("+", "-", "*", "/", "^")
COMPARISON_OPERATORS = ("<", "<=", ">", ">=", "==", "!=")

# round(x, digits) accepts digits in this range
MAX_ROUND_DIGITS = 10

"""
Formula parser and validator

Parses operator-authored formula text into an immutable AST using a small
recursive-descent grammar. Only numeric literals, variable names, the
arithmetic and comparison operators, conditionals and the allow-listed
functions are accepted; everything else is rejected with a reason and the
offending position.

Grammar, lowest precedence first::

    expression  := conditional
    conditional := comparison ( "?" conditional ":" conditional )?
    comparison  := additive ( COMPARE_OP additive )?
    additive    := term ( ("+" | "-") term )*
    term        := unary ( ("*" | "/") unary )*
    unary       := "-" unary | power
    power       := primary ( "^" unary )?
    primary     := NUMBER | IDENT | IDENT "(" arguments ")" | "(" expression ")"
"""
import math
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Union

from .constants import (
    COMPARISON_OPERATORS,
    FUNCTION_ARITY,
    MAX_AST_DEPTH,
    MAX_AST_NODES,
    MAX_FORMULA_LENGTH,
)
from .exceptions import FormulaTooComplex, FormulaValidationError
from .nodes import BinaryOp, Call, Compare, Conditional, Formula, Node, Number, UnaryOp, Variable, walk

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<op><=|>=|==|!=|[-+*/^<>])
    |(?P<lparen>\()
    |(?P<rparen>\))
    |(?P<comma>,)
    |(?P<question>\?)
    |(?P<colon>:)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    position: int


def tokenize(text: str) -> List[Token]:
    """Split formula text into tokens, rejecting anything outside the grammar"""
    tokens: List[Token] = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            char = text[position]
            if char in "\"'":
                raise FormulaValidationError("String literals are not allowed", position)
            if char == "=":
                raise FormulaValidationError("Assignment is not allowed", position)
            raise FormulaValidationError(f"Unexpected character '{char}'", position)

        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()

    tokens.append(Token("end", "", len(text)))
    return tokens


class _Parser:
    """Single-use parser over one token list"""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0
        self.node_count = 0
        self.nesting = 0

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def expect(self, kind: str, description: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            raise self.unexpected(token, expected=description)
        return self.advance()

    @staticmethod
    def unexpected(token: Token, expected: Optional[str] = None) -> FormulaValidationError:
        if token.kind == "end":
            reason = "Unexpected end of formula"
        elif token.kind == "rparen":
            reason = "Unbalanced parentheses: unexpected ')'"
        else:
            reason = f"Unexpected token '{token.value}'"
        if expected:
            reason = f"{reason}, expected {expected}"
        return FormulaValidationError(reason, token.position)

    # Limits

    def node(self, node: Node) -> Node:
        self.node_count += 1
        if self.node_count > MAX_AST_NODES:
            raise FormulaTooComplex(f"Formula has more than {MAX_AST_NODES} nodes", node.position)
        if node.depth > MAX_AST_DEPTH:
            raise FormulaTooComplex(
                f"Formula is more than {MAX_AST_DEPTH} levels deep (each chained operator adds a level)", node.position
            )
        return node

    @contextmanager
    def nested(self, token: Token):
        self.nesting += 1
        if self.nesting > MAX_AST_DEPTH:
            raise FormulaTooComplex(f"Formula is nested deeper than {MAX_AST_DEPTH} levels", token.position)
        try:
            yield
        finally:
            self.nesting -= 1

    # Grammar

    def parse(self) -> Node:
        root = self.expression()
        token = self.peek()
        if token.kind != "end":
            raise self.unexpected(token)
        return root

    def expression(self) -> Node:
        with self.nested(self.peek()):
            return self.conditional()

    def conditional(self) -> Node:
        condition = self.comparison()
        token = self.peek()
        if token.kind != "question":
            return condition
        self.advance()
        with self.nested(token):
            if_true = self.conditional()
            self.expect("colon", "':' in conditional")
            if_false = self.conditional()
        return self.node(Conditional(condition, if_true, if_false, position=token.position))

    def comparison(self) -> Node:
        left = self.additive()
        token = self.peek()
        if token.kind == "op" and token.value in COMPARISON_OPERATORS:
            self.advance()
            right = self.additive()
            follower = self.peek()
            if follower.kind == "op" and follower.value in COMPARISON_OPERATORS:
                raise FormulaValidationError("Chained comparisons are not allowed", follower.position)
            return self.node(Compare(token.value, left, right, position=token.position))
        return left

    def additive(self) -> Node:
        left = self.term()
        while self.peek().kind == "op" and self.peek().value in ("+", "-"):
            token = self.advance()
            right = self.term()
            left = self.node(BinaryOp(token.value, left, right, position=token.position))
        return left

    def term(self) -> Node:
        left = self.unary()
        while self.peek().kind == "op" and self.peek().value in ("*", "/"):
            token = self.advance()
            right = self.unary()
            left = self.node(BinaryOp(token.value, left, right, position=token.position))
        return left

    def unary(self) -> Node:
        token = self.peek()
        if token.kind == "op" and token.value == "-":
            self.advance()
            with self.nested(token):
                operand = self.unary()
            return self.node(UnaryOp("-", operand, position=token.position))
        return self.power()

    def power(self) -> Node:
        base = self.primary()
        token = self.peek()
        if token.kind == "op" and token.value == "^":
            self.advance()
            with self.nested(token):
                exponent = self.unary()
            return self.node(BinaryOp("^", base, exponent, position=token.position))
        return base

    def primary(self) -> Node:
        token = self.peek()

        if token.kind == "number":
            self.advance()
            value = float(token.value)
            if not math.isfinite(value):
                raise FormulaValidationError(f"Numeric literal '{token.value}' is out of range", token.position)
            return self.node(Number(value, position=token.position))

        if token.kind == "ident":
            self.advance()
            if self.peek().kind == "lparen":
                return self.call(token)
            if token.value in FUNCTION_ARITY:
                raise FormulaValidationError(f"Function '{token.value}' must be called with arguments", token.position)
            return self.node(Variable(token.value, position=token.position))

        if token.kind == "lparen":
            self.advance()
            inner = self.expression()
            closing = self.peek()
            if closing.kind != "rparen":
                raise FormulaValidationError("Unbalanced parentheses: missing ')'", closing.position)
            self.advance()
            return inner

        raise self.unexpected(token, expected="a number, variable, function call or '('")

    def call(self, name_token: Token) -> Node:
        name = name_token.value
        if name not in FUNCTION_ARITY:
            raise FormulaValidationError(f"Unknown function '{name}'", name_token.position)

        self.advance()  # "("
        args: List[Node] = []
        if self.peek().kind != "rparen":
            args.append(self.expression())
            while self.peek().kind == "comma":
                self.advance()
                args.append(self.expression())
        closing = self.peek()
        if closing.kind != "rparen":
            if closing.kind == "end":
                raise FormulaValidationError("Unbalanced parentheses: missing ')'", closing.position)
            raise self.unexpected(closing, expected="',' or ')'")
        self.advance()

        minimum, maximum = FUNCTION_ARITY[name]
        if len(args) < minimum or (maximum is not None and len(args) > maximum):
            if maximum is None:
                expected = f"at least {minimum}"
            elif minimum == maximum:
                expected = str(minimum)
            else:
                expected = f"{minimum} to {maximum}"
            raise FormulaValidationError(
                f"Function '{name}' takes {expected} argument(s), got {len(args)}", name_token.position
            )

        return self.node(Call(name, tuple(args), position=name_token.position))


def validate_formula(text: str) -> Formula:
    """
    Parse and validate formula text.

    Args:
        text: Operator-authored formula, e.g. ``"accuracy * 0.5 + speed * 0.5"``

    Returns:
        The validated Formula

    Raises:
        FormulaValidationError: text is empty or not in the grammar
        FormulaTooComplex: text exceeds the length, depth or node limits
    """
    if not isinstance(text, str):
        raise FormulaValidationError("Formula must be a string")
    if not text.strip():
        raise FormulaValidationError("Formula cannot be empty")
    if len(text) > MAX_FORMULA_LENGTH:
        raise FormulaTooComplex(f"Formula is longer than {MAX_FORMULA_LENGTH} characters")

    parser = _Parser(tokenize(text))
    root = parser.parse()
    return Formula(
        text=text,
        root=root,
        node_count=parser.node_count,
        variables=extract_variable_names(root),
    )


def extract_variable_names(formula: Union[Formula, Node]) -> FrozenSet[str]:
    """Every variable name referenced by a formula or subtree"""
    root = formula.root if isinstance(formula, Formula) else formula
    return frozenset(node.name for node in walk(root) if isinstance(node, Variable))


@dataclass(frozen=True)
class FormulaCheck:
    """Non-raising validation outcome for interactive callers"""

    valid: bool
    error: Optional[FormulaValidationError] = None
    variables: FrozenSet[str] = frozenset()

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


def check_formula(text: str) -> FormulaCheck:
    """Validate without raising; returns the variable census on success"""
    try:
        formula = validate_formula(text)
    except FormulaValidationError as exc:
        return FormulaCheck(valid=False, error=exc)
    return FormulaCheck(valid=True, variables=formula.variables)

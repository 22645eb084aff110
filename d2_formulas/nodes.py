"""
Formula AST

Nodes are immutable. Each node knows its own depth so limits can be
checked as the tree is built. ``position`` is the 0-based offset of the
token that produced the node and does not take part in equality.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


class Node:
    """Base class for AST nodes"""

    def children(self) -> Tuple["Node", ...]:
        return ()

    def __post_init__(self):
        depth = 1 + max((child.depth for child in self.children()), default=0)
        object.__setattr__(self, "depth", depth)


@dataclass(frozen=True)
class Number(Node):
    value: float
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)


@dataclass(frozen=True)
class Variable(Node):
    name: str
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)

    def children(self):
        return (self.operand,)


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)

    def children(self):
        return (self.left, self.right)


@dataclass(frozen=True)
class Compare(Node):
    """Comparison yielding 1.0 when true and 0.0 when false"""

    op: str
    left: Node
    right: Node
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)

    def children(self):
        return (self.left, self.right)


@dataclass(frozen=True)
class Conditional(Node):
    """``condition ? if_true : if_false``; non-zero condition is true"""

    condition: Node
    if_true: Node
    if_false: Node
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)

    def children(self):
        return (self.condition, self.if_true, self.if_false)


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: Tuple[Node, ...]
    position: int = field(default=0, compare=False)
    depth: int = field(default=1, init=False, compare=False, repr=False)

    def children(self):
        return self.args


@dataclass(frozen=True)
class Formula:
    """A validated formula: source text plus its AST and census"""

    text: str
    root: Node
    node_count: int
    variables: FrozenSet[str]

    @property
    def depth(self) -> int:
        return self.root.depth


def walk(node: Node):
    """Yield every node in the tree, parents before children"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))

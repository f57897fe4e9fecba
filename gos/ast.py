"""Abstract Syntax Tree (AST) definitions for the gos language.

Every construct of the language is an expression, so there is no separate
statement hierarchy: a script is a sequence of nodes evaluated in order.
Nodes are immutable; child sequences are stored as tuples.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Literal(Node):
    value: Any
    literal_type: str  # 'int', 'float', 'string', 'bool'


@dataclass(frozen=True)
class Ident(Node):
    name: str


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Node, ...]


@dataclass(frozen=True)
class IfExpr(Node):
    condition: Node
    then_block: Block
    else_block: Optional[Block]


@dataclass(frozen=True)
class ForIn(Node):
    key: str
    value: Optional[str]
    target: Node
    body: Block


@dataclass(frozen=True)
class RangeExpr(Node):
    start: Node
    stop: Node
    step: Optional[Node]


@dataclass(frozen=True)
class PrintStmt(Node):
    args: Tuple[Node, ...]
    newline: bool


@dataclass(frozen=True)
class Index(Node):
    target: Node
    index: Node


@dataclass(frozen=True)
class ArrayLit(Node):
    elements: Tuple[Node, ...]


@dataclass(frozen=True)
class MapLit(Node):
    entries: Tuple[Tuple[Node, Node], ...]  # key expressions are evaluated at run time


@dataclass(frozen=True)
class FuncLit(Node):
    name: Optional[str]
    params: Tuple[str, ...]
    body: Block


@dataclass(frozen=True)
class Call(Node):
    func: Node
    args: Tuple[Node, ...]


@dataclass(frozen=True)
class ReturnStmt(Node):
    value: Optional[Node]


@dataclass(frozen=True)
class Assign(Node):
    target: Node  # Ident or Index
    value: Node


@dataclass(frozen=True)
class SwapStmt(Node):
    left: Node
    right: Node


@dataclass(frozen=True)
class ImportStmt(Node):
    source: Node


@dataclass(frozen=True)
class InputExpr(Node):
    prompt: Optional[Node]


@dataclass(frozen=True)
class LenExpr(Node):
    target: Node

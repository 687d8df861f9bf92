"""Abstract Syntax Tree (AST) definitions for the Parseon language.

The AST classes defined in this module represent the syntactic structure
of parsed Parseon programs. Both front-ends (the hand-written parser in
``interpreter`` and the Lark grammar in ``parser``) build these nodes and
the interpreter walks them without ever mutating them. Every node records
the source line of its first token so runtime errors can point at it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Block(Node):
    statements: List[Node]


# Statements

@dataclass
class VarDecl(Node):
    name: str
    expr: Node
    is_const: bool  # keep
    line: int


@dataclass
class Assign(Node):
    name: str
    value: Node
    line: int


@dataclass
class SayStmt(Node):
    expr: Node
    line: int


@dataclass
class ShowStmt(Node):
    expr: Node
    line: int


@dataclass
class AskStmt(Node):
    name: str
    line: int


@dataclass
class Branch(Node):
    condition: Node
    block: Block
    line: int


@dataclass
class IfStmt(Node):
    branches: List[Branch]
    else_block: Optional[Block]
    line: int


@dataclass
class RangeLoop(Node):
    var: str
    start: Node
    end: Node
    body: Block
    line: int


@dataclass
class WhileLoop(Node):
    condition: Node
    body: Block
    line: int


@dataclass
class BreakStmt(Node):
    line: int


@dataclass
class ContinueStmt(Node):
    line: int


# Expressions

@dataclass
class NumberLit(Node):
    value: float
    line: int


@dataclass
class TextLit(Node):
    value: str
    line: int


@dataclass
class BoolLit(Node):
    value: bool
    line: int


@dataclass
class Ident(Node):
    name: str
    line: int


@dataclass
class UnaryOp(Node):
    op: str  # '-' or 'not'
    operand: Node
    line: int


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node
    line: int


@dataclass
class Call(Node):
    name: str
    args: List[Node]
    line: int

"""JSON serialization/deserialization for the Parseon AST.

This module converts between Parseon AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes a
dict with a ``"type"`` key naming its class plus one key per field, so a
program can be parsed once (``--emit-ast``) and executed later (``--ast``).
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from .ast import (
    Node,
    Program,
    Block,
    VarDecl,
    Assign,
    SayStmt,
    ShowStmt,
    AskStmt,
    Branch,
    IfStmt,
    RangeLoop,
    WhileLoop,
    BreakStmt,
    ContinueStmt,
    NumberLit,
    TextLit,
    BoolLit,
    Ident,
    UnaryOp,
    BinaryOp,
    Call,
)


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (
        Program, Block, VarDecl, Assign, SayStmt, ShowStmt, AskStmt, Branch,
        IfStmt, RangeLoop, WhileLoop, BreakStmt, ContinueStmt,
        NumberLit, TextLit, BoolLit, Ident, UnaryOp, BinaryOp, Call,
    )
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Node) and type(node).__name__ in NODE_TYPES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {}
    for f in fields(cls):
        if f.name not in obj:
            raise ValueError(f"AST node {t} is missing field '{f.name}'")
        kwargs[f.name] = ast_from_obj(obj[f.name])
    if cls is NumberLit:
        # JSON writers may drop the fraction of whole numbers
        kwargs["value"] = float(kwargs["value"])
    return cls(**kwargs)

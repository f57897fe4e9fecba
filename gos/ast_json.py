"""JSON serialization/deserialization for the gos AST.

This module converts between gos AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object with a "type" key naming its class and one key per dataclass field;
child tuples become lists and are turned back into tuples on the way in.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from . import ast
from .ast import Node


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (
        ast.Literal, ast.Ident, ast.UnaryOp, ast.BinaryOp, ast.Block,
        ast.IfExpr, ast.ForIn, ast.RangeExpr, ast.PrintStmt, ast.Index,
        ast.ArrayLit, ast.MapLit, ast.FuncLit, ast.Call, ast.ReturnStmt,
        ast.Assign, ast.SwapStmt, ast.ImportStmt, ast.InputExpr, ast.LenExpr,
    )
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, (tuple, list)):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, Node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return tuple(ast_from_obj(item) for item in obj)
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj.get(f.name)) for f in fields(cls)}
    return cls(**kwargs)


def program_to_obj(nodes) -> Dict[str, Any]:
    """Serialize a sequence of top-level nodes as a program object."""
    return {"type": "Program", "body": [ast_to_obj(n) for n in nodes]}


def program_from_obj(obj: Dict[str, Any]):
    if not isinstance(obj, dict) or obj.get("type") != "Program":
        raise ValueError("Expected a Program object")
    return [ast_from_obj(n) for n in obj["body"]]

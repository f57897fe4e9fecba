"""Runtime values for gos.

Scalars are plain Python objects (`int`, `float`, `str`, `bool`) and nil is
`None`. Arrays are Python lists so that index assignment mutates them in
place. Maps and functions have dedicated classes below.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, List, Tuple, TYPE_CHECKING

from .errors import TypeMismatchError

if TYPE_CHECKING:
    from .ast import FuncLit
    from .environment import Environment


NUMERIC = ('int', 'float')
KEY_TYPES = ('int', 'float', 'string', 'bool')


class FunctionVal:
    """A function literal paired with the scope it was defined in."""
    def __init__(self, node: 'FuncLit', env: 'Environment'):
        self.node = node
        self.env = env

    @property
    def name(self) -> str:
        return self.node.name or 'anonymous'

    @property
    def params(self) -> Tuple[str, ...]:
        return self.node.params

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


def map_key(key: Any) -> Tuple[str, Any]:
    """Return the hashable identity of a map key.

    Keys are equal only when they have the same type and the same value, so
    the type name is part of the identity (`1`, `1.0` and `true` differ).
    """
    kind = type_name(key)
    if kind not in KEY_TYPES:
        raise TypeMismatchError(f'{kind} cannot be used as a map key')
    return (kind, key)


class MapVal:
    """Mapping from scalar keys to values, kept in insertion order."""
    def __init__(self):
        self.entries: Dict[Tuple[str, Any], Tuple[Any, Any]] = {}

    def get(self, key: Any) -> Any:
        entry = self.entries.get(map_key(key))
        return entry[1] if entry is not None else None

    def set(self, key: Any, value: Any) -> None:
        self.entries[map_key(key)] = (key, value)

    def __len__(self) -> int:
        return len(self.entries)

    def items(self) -> List[Tuple[Any, Any]]:
        return list(self.entries.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MapVal):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"MapVal({self.items()!r})"


def type_name(value: Any) -> str:
    """Return the gos type name of a runtime value."""
    # bool is a subclass of int, so it has to be tested first
    if isinstance(value, bool):
        return 'bool'
    if isinstance(value, int):
        return 'int'
    if isinstance(value, float):
        return 'float'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, MapVal):
        return 'map'
    if isinstance(value, FunctionVal):
        return 'function'
    if value is None:
        return 'nil'
    return type(value).__name__


def format_float(value: float) -> str:
    """Canonical decimal text of a float.

    Uses the shortest digits that round-trip, never an exponent, and drops
    a trailing `.0`: 1.5 -> "1.5", 2.0 -> "2", 1e21 -> "1000000000000000000000".
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return '+Inf' if value > 0 else '-Inf'
    text = format(Decimal(repr(value)), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text == '-0':
        return '0'
    return text


def to_string(value: Any) -> str:
    """Convert a value to its display text, as used by print and input prompts."""
    kind = type_name(value)
    if kind == 'string':
        return value
    if kind == 'bool':
        return 'true' if value else 'false'
    if kind == 'int':
        return str(value)
    if kind == 'float':
        return format_float(value)
    if kind == 'array':
        return '[' + ' '.join(to_string(item) for item in value) + ']'
    if kind == 'map':
        return 'map[' + ' '.join(f"{to_string(k)}:{to_string(v)}" for k, v in value.items()) + ']'
    if kind == 'nil':
        return '<nil>'
    return repr(value)


def format_print_args(values: List[Any], newline: bool) -> str:
    """Join print operands.

    `println` separates every operand with a space. `print` adds a space
    only between two operands when neither of them is a string.
    """
    if newline:
        return ' '.join(to_string(v) for v in values) + '\n'
    parts: List[str] = []
    for i, value in enumerate(values):
        if i > 0 and not isinstance(value, str) and not isinstance(values[i - 1], str):
            parts.append(' ')
        parts.append(to_string(value))
    return ''.join(parts)

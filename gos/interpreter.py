"""Tree-walking evaluator for the gos language.

Each AST node evaluates against an `Environment` to a runtime value (None
stands for nil). Control flow is carried by the Python call stack: a block
stops early when an `if` or `return` statement in it yields a non-nil
value, which is how results travel out of nested blocks and function
bodies. Errors are raised as `GosError` subclasses and never terminate the
process here; the host decides what to do with them.
"""

from __future__ import annotations

import builtins
import math
import pathlib
from typing import Any, Iterable, List, Optional

from .ast import (
    Node, Literal, Ident, UnaryOp, BinaryOp, Block, IfExpr, ForIn, RangeExpr,
    PrintStmt, Index, ArrayLit, MapLit, FuncLit, Call, ReturnStmt, Assign,
    SwapStmt, ImportStmt, InputExpr, LenExpr,
)
from .environment import Environment
from .errors import (
    GosError, EvalError, TypeMismatchError, DivisionByZeroError, ImportFailure,
)
from .parser import parse_program
from .values import (
    FunctionVal, MapVal, NUMERIC, type_name, to_string, format_float,
    format_print_args,
)


def read_source(file_path) -> str:
    """Read a script file as UTF-8 text."""
    with open(file_path, 'r', encoding='utf-8') as f:
        return f.read()


class Interpreter:
    """Core interpreter that evaluates gos AST nodes."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.global_env = Environment()
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        # files currently being executed, innermost last
        self.script_stack: List[pathlib.Path] = []

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, nodes: Iterable[Node], env: Optional[Environment] = None) -> Any:
        """Evaluate top-level nodes in order and return the last value."""
        if env is None:
            env = self.global_env
        try:
            return self.run_nodes(nodes, env)
        except RecursionError:
            raise EvalError('maximum recursion depth exceeded') from None

    def run_file(self, path: str, env: Optional[Environment] = None) -> Any:
        file_path = pathlib.Path(path)
        try:
            source = read_source(file_path)
        except UnicodeDecodeError:
            raise GosError(f'cannot decode {path}: not valid UTF-8') from None
        self.script_stack.append(file_path.resolve())
        try:
            return self.run(parse_program(source), env)
        finally:
            self.script_stack.pop()

    def run_nodes(self, nodes: Iterable[Node], env: Environment) -> Any:
        result = None
        for node in nodes:
            if self.debug_level >= 1:
                self.debug(f"statement {type(node).__name__}")
            result = self.evaluate(node, env)
        return result

    def execute_block(self, block: Block, env: Environment) -> Any:
        result = None
        for stmt in block.statements:
            result = self.evaluate(stmt, env)
            if result is not None and isinstance(stmt, (IfExpr, ReturnStmt)):
                return result
        return result

    def evaluate(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            return self.lookup(node.name, env, callee=False)
        if isinstance(node, UnaryOp):
            return self.apply_unary_op(node.op, self.evaluate(node.operand, env))
        if isinstance(node, BinaryOp):
            if node.op in ('and', 'or'):
                return self.evaluate_logical(node, env)
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Block):
            return self.execute_block(node, env)
        if isinstance(node, IfExpr):
            cond = self.evaluate(node.condition, env)
            if not isinstance(cond, bool):
                raise TypeMismatchError(f'if condition must be bool, got {type_name(cond)}')
            if self.debug_level >= 3:
                self.debug(f"if condition -> {to_string(cond)}")
            if cond:
                return self.execute_block(node.then_block, env)
            if node.else_block is not None:
                return self.execute_block(node.else_block, env)
            return None
        if isinstance(node, ForIn):
            self.execute_for(node, env)
            return None
        if isinstance(node, RangeExpr):
            return self.evaluate_range(node, env)
        if isinstance(node, PrintStmt):
            args = [self.evaluate(arg, env) for arg in node.args]
            print(format_print_args(args, node.newline), end='')
            return None
        if isinstance(node, Index):
            target = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            if isinstance(target, list):
                return target[self.array_position(target, index)]
            if isinstance(target, MapVal):
                return target.get(index)
            raise TypeMismatchError(f'cannot index into {type_name(target)}')
        if isinstance(node, ArrayLit):
            return [self.evaluate(el, env) for el in node.elements]
        if isinstance(node, MapLit):
            result = MapVal()
            for key_node, value_node in node.entries:
                key = self.evaluate(key_node, env)
                result.set(key, self.evaluate(value_node, env))
            return result
        if isinstance(node, FuncLit):
            func = FunctionVal(node, env)
            if node.name is not None:
                env.define_function(node.name, func)
                if self.debug_level >= 2:
                    self.debug(f"define function {node.name}({', '.join(node.params)})")
            return func
        if isinstance(node, Call):
            if isinstance(node.func, Ident):
                func = self.lookup(node.func.name, env, callee=True)
            else:
                func = self.evaluate(node.func, env)
            args = [self.evaluate(arg, env) for arg in node.args]
            return self.call_function(func, args)
        if isinstance(node, ReturnStmt):
            return self.evaluate(node.value, env) if node.value is not None else None
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            self.assign_lvalue(node.target, value, env)
            return value
        if isinstance(node, SwapStmt):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            self.assign_lvalue(node.left, right, env)
            self.assign_lvalue(node.right, left, env)
            return None
        if isinstance(node, ImportStmt):
            filename = self.evaluate(node.source, env)
            if not isinstance(filename, str):
                raise TypeMismatchError(f'import expects a string file name, got {type_name(filename)}')
            self.import_file(filename, env)
            return None
        if isinstance(node, InputExpr):
            prompt = '' if node.prompt is None else to_string(self.evaluate(node.prompt, env))
            try:
                return builtins.input(prompt)
            except EOFError:
                return ''
        if isinstance(node, LenExpr):
            target = self.evaluate(node.target, env)
            if isinstance(target, (str, list, MapVal)):
                return len(target)
            raise TypeMismatchError(f'len not applicable to {type_name(target)}')
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def lookup(self, name: str, env: Environment, callee: bool) -> Any:
        # A callee is looked up among functions first, anything else among
        # variables first; each falls back to the other namespace.
        if callee:
            if env.resolve_function(name) is not None:
                return env.get_function(name)
            return env.get_variable(name)
        if env.resolve_variable(name) is not None:
            return env.get_variable(name)
        if env.resolve_function(name) is not None:
            return env.get_function(name)
        return env.get_variable(name)

    def assign_lvalue(self, target: Node, value: Any, env: Environment):
        if isinstance(target, Ident):
            env.assign(target.name, value)
            if self.debug_level >= 3:
                self.debug(f"assign {target.name} = {to_string(value)}")
            return
        if isinstance(target, Index):
            container = self.evaluate(target.target, env)
            index = self.evaluate(target.index, env)
            if isinstance(container, list):
                container[self.array_position(container, index)] = value
                return
            if isinstance(container, MapVal):
                container.set(index, value)
                return
            raise TypeMismatchError(f'cannot assign to index on {type_name(container)}')
        raise TypeMismatchError('invalid assignment target')

    def array_position(self, items: List[Any], index: Any) -> int:
        if type_name(index) != 'int':
            raise TypeMismatchError(f'array index must be int, got {type_name(index)}')
        if index < 0 or index >= len(items):
            raise TypeMismatchError(f'array index {index} out of range (length {len(items)})')
        return index

    def call_function(self, func: Any, args: List[Any]) -> Any:
        if not isinstance(func, FunctionVal):
            raise TypeMismatchError(f'{type_name(func)} is not callable')
        if len(args) != len(func.params):
            raise TypeMismatchError(f"{func.name} expects {len(func.params)} arguments, got {len(args)}")
        if self.debug_level >= 2:
            self.debug(f"call {func.name}({', '.join(to_string(a) for a in args)})")
        # Fresh scope whose parent is the defining scope, not the caller's
        call_env = Environment(parent=func.env)
        for param, arg in zip(func.params, args):
            self.declare(call_env, param, arg)
        return self.execute_block(func.node.body, call_env)

    def execute_for(self, node: ForIn, env: Environment):
        target = self.evaluate(node.target, env)
        # The body shares the enclosing scope; only the loop names are rebound
        if isinstance(target, str):
            for index, char in enumerate(target):
                self.bind_loop_names(node, env, index, char)
                self.execute_block(node.body, env)
        elif isinstance(target, list):
            count = len(target)
            for index in range(count):
                self.bind_loop_names(node, env, index, target[index])
                self.execute_block(node.body, env)
        elif isinstance(target, MapVal):
            for key, value in target.items():
                self.declare(env, node.key, key)
                if node.value is not None:
                    self.declare(env, node.value, value)
                self.execute_block(node.body, env)
        else:
            raise TypeMismatchError(f'cannot iterate over {type_name(target)}')

    def bind_loop_names(self, node: ForIn, env: Environment, index: int, item: Any):
        if node.value is None:
            self.declare(env, node.key, item)
        else:
            self.declare(env, node.key, index)
            self.declare(env, node.value, item)

    def declare(self, env: Environment, name: str, value: Any):
        env.declare(name, value)
        if self.debug_level >= 3:
            self.debug(f"declare {name} = {to_string(value)}")

    def evaluate_range(self, node: RangeExpr, env: Environment) -> List[int]:
        start = self.evaluate(node.start, env)
        stop = self.evaluate(node.stop, env)
        step = self.evaluate(node.step, env) if node.step is not None else 1
        for name, bound in (('start', start), ('end', stop), ('step', step)):
            if type_name(bound) != 'int':
                raise TypeMismatchError(f'range {name} must be int, got {type_name(bound)}')
        if step == 0:
            raise TypeMismatchError('range step cannot be zero')
        # The step's sign always follows the direction of the range
        if start <= stop:
            return list(range(start, stop + 1, abs(step)))
        return list(range(start, stop - 1, -abs(step)))

    def evaluate_logical(self, node: BinaryOp, env: Environment) -> bool:
        left = self.evaluate(node.left, env)
        if not isinstance(left, bool):
            raise TypeMismatchError(f'unsupported operation {node.op} between {type_name(left)} and ...')
        if node.op == 'and' and not left:
            return False
        if node.op == 'or' and left:
            return True
        right = self.evaluate(node.right, env)
        if not isinstance(right, bool):
            raise TypeMismatchError(f'unsupported operation {node.op} between bool and {type_name(right)}')
        return right

    def apply_unary_op(self, op: str, operand: Any) -> Any:
        kind = type_name(operand)
        if op == '-' and kind in NUMERIC:
            return -operand
        if op == '!' and kind == 'bool':
            return not operand
        raise TypeMismatchError(f'invalid unary operation {op} on {kind}')

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        left, right = type_name(a), type_name(b)
        if left == 'int' and right == 'int':
            return self.int_op(op, a, b)
        if left in NUMERIC and right in NUMERIC:
            return self.float_op(op, float(a), float(b))
        if left == 'string':
            if op == '+' and right in ('string', 'int', 'float'):
                return a + self.concat_text(b)
        elif left == 'bool' and right == 'bool':
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
        raise TypeMismatchError(f'unsupported operation {op} between {left} and {right}')

    def concat_text(self, value: Any) -> str:
        if isinstance(value, float):
            return format_float(value)
        return str(value)

    def int_op(self, op: str, a: int, b: int) -> Any:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0:
                raise DivisionByZeroError('integer division by zero')
            # truncate toward zero
            quotient = abs(a) // abs(b)
            return quotient if (a < 0) == (b < 0) else -quotient
        return self.compare(op, a, b, 'int')

    def float_op(self, op: str, a: float, b: float) -> Any:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0.0:
                # IEEE-754 results
                if a == 0.0 or math.isnan(a):
                    return math.nan
                return math.copysign(math.inf, a) * math.copysign(1.0, b)
            return a / b
        return self.compare(op, a, b, 'float')

    def compare(self, op: str, a: Any, b: Any, kind: str) -> bool:
        if op == '<':
            return a < b
        if op == '<=':
            return a <= b
        if op == '>':
            return a > b
        if op == '>=':
            return a >= b
        if op == '==':
            return a == b
        if op == '!=':
            return a != b
        raise TypeMismatchError(f'unsupported operation {op} between {kind} operands')

    def import_file(self, filename: str, env: Environment):
        file_path = self.find_import(filename)
        resolved = file_path.resolve()
        if resolved in self.script_stack:
            raise ImportFailure(f'circular import of {filename}')
        if self.debug_level >= 1:
            self.debug(f"import {file_path}")
        try:
            source = read_source(file_path)
        except UnicodeDecodeError:
            raise ImportFailure(f'cannot decode {filename}: not valid UTF-8') from None
        except OSError as e:
            raise ImportFailure(f'cannot read {filename}: {e.strerror}') from None
        self.script_stack.append(resolved)
        try:
            # Spliced into the importing scope, not a module namespace
            self.run_nodes(parse_program(source), env)
        finally:
            self.script_stack.pop()

    def find_import(self, filename: str) -> pathlib.Path:
        file_path = pathlib.Path(filename)
        if file_path.exists() or file_path.is_absolute():
            return file_path
        if self.script_stack:
            alt = self.script_stack[-1].parent / filename
            if alt.exists():
                return alt
        raise ImportFailure(f'file {filename} not found')


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to run a gos program from a source string."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run(parse_program(source))
    finally:
        interpreter.close()


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run a gos file and return the interpreter, whose global scope holds its bindings."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run_file(file_path)
    finally:
        interpreter.close()
    return interpreter

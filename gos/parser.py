"""Parser for the gos language.

The parser is an operator-precedence (Pratt) parser. Every token kind that
can start an expression has a prefix parselet and every token kind that can
continue one has an infix parselet with a binding precedence. An expression
keeps folding infix operators into its left-hand side for as long as the
next token binds strictly tighter than the current precedence, which gives
left associativity for operators of equal precedence.

Tokens are pulled from the scanner one at a time and top-level nodes are
yielded one at a time, so a script is parsed only as far as it is
evaluated.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .ast import (
    Node, Literal, Ident, UnaryOp, BinaryOp, Block, IfExpr, ForIn, RangeExpr,
    PrintStmt, Index, ArrayLit, MapLit, FuncLit, Call, ReturnStmt, Assign,
    SwapStmt, ImportStmt, InputExpr, LenExpr,
)
from .errors import ParseError
from .scanner import Token, scan


LOWEST = 1
LOGICAL = 2       # or, and
EQUALS = 3        # =, ==, !=
LESS_GREATER = 4  # <, <=, >, >=
SUM = 5           # +, -
PRODUCT = 6       # *, /
PREFIX = 7        # -x, !x
CALL = 8          # f(x)
INDEX = 9         # a[i]
RANGE = 10        # a..b

PRECEDENCES: Dict[str, int] = {
    'OR': LOGICAL,
    'AND': LOGICAL,
    '=': EQUALS,
    '==': EQUALS,
    '!=': EQUALS,
    '<': LESS_GREATER,
    '<=': LESS_GREATER,
    '>': LESS_GREATER,
    '>=': LESS_GREATER,
    '+': SUM,
    '-': SUM,
    '*': PRODUCT,
    '/': PRODUCT,
    '(': CALL,
    '[': INDEX,
    '..': RANGE,
}

# Expressions ending in a block do not take infix continuations.
BLOCK_ENDED = (IfExpr, ForIn, FuncLit)


def describe(token: Token) -> str:
    if token.kind == 'EOF':
        return 'end of input'
    if token.kind == 'STRING':
        return f'string "{token.text}"'
    return f"'{token.text}'"


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens = iter(tokens)
        self.current: Token = next(self.tokens)
        self.prefix_parselets: Dict[str, Callable[[], Node]] = {
            'INT': self.parse_int,
            'FLOAT': self.parse_float,
            'STRING': self.parse_string,
            'TRUE': self.parse_bool,
            'FALSE': self.parse_bool,
            'IDENT': self.parse_identifier,
            '-': self.parse_unary,
            '!': self.parse_unary,
            '(': self.parse_grouped,
            'IF': self.parse_if,
            'FN': self.parse_function,
            'PRINT': self.parse_print,
            'PRINTLN': self.parse_print,
            '[': self.parse_array,
            '{': self.parse_map,
            'FOR': self.parse_for,
            'RETURN': self.parse_return,
            'SWAP': self.parse_swap,
            'INPUT': self.parse_input,
            'LEN': self.parse_len,
            'IMPORT': self.parse_import,
        }
        self.infix_parselets: Dict[str, Callable[[Node], Node]] = {
            kind: self.parse_binary
            for kind in ('OR', 'AND', '==', '!=', '<', '<=', '>', '>=', '+', '-', '*', '/')
        }
        self.infix_parselets['='] = self.parse_assign
        self.infix_parselets['('] = self.parse_call
        self.infix_parselets['['] = self.parse_index
        self.infix_parselets['..'] = self.parse_range

    # Token stream helpers

    def advance(self) -> Token:
        token = self.current
        if token.kind != 'EOF':
            self.current = next(self.tokens)
        return token

    def match(self, kind: str) -> bool:
        return self.current.kind == kind

    def consume(self, kind: str) -> Token:
        if not self.match(kind):
            expected = 'identifier' if kind == 'IDENT' else f"'{kind}'"
            raise self.error(f"expected {expected}, got {describe(self.current)}")
        return self.advance()

    def error(self, message: str) -> ParseError:
        token = self.current
        return ParseError(message, token.line, token.column, at_eof=token.kind == 'EOF')

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.current.kind, LOWEST)

    # Entry points

    def parse(self) -> Iterator[Node]:
        """Yield top-level nodes until the end of the token stream."""
        while not self.match('EOF'):
            if self.match(';'):
                self.advance()
                continue
            yield self.parse_expression(LOWEST)

    def parse_expression(self, precedence: int) -> Node:
        prefix = self.prefix_parselets.get(self.current.kind)
        if prefix is None:
            raise self.error(f"unexpected {describe(self.current)}")
        left = prefix()
        if isinstance(left, BLOCK_ENDED):
            return left
        while precedence < self.peek_precedence():
            infix = self.infix_parselets[self.current.kind]
            left = infix(left)
        return left

    # Prefix parselets

    def parse_int(self) -> Node:
        return Literal(int(self.advance().text), 'int')

    def parse_float(self) -> Node:
        return Literal(float(self.advance().text), 'float')

    def parse_string(self) -> Node:
        return Literal(self.advance().text, 'string')

    def parse_bool(self) -> Node:
        return Literal(self.advance().kind == 'TRUE', 'bool')

    def parse_identifier(self) -> Node:
        return Ident(self.advance().text)

    def parse_unary(self) -> Node:
        op = self.advance()
        return UnaryOp(op.text, self.parse_expression(PREFIX))

    def parse_grouped(self) -> Node:
        self.consume('(')
        expr = self.parse_expression(LOWEST)
        self.consume(')')
        return expr

    def parse_if(self) -> Node:
        self.consume('IF')
        condition = self.parse_expression(LOWEST)
        then_block = self.parse_block()
        else_block: Optional[Block] = None
        if self.match('ELSE'):
            self.advance()
            if self.match('IF'):
                else_block = Block((self.parse_if(),))
            else:
                else_block = self.parse_block()
        return IfExpr(condition, then_block, else_block)

    def parse_function(self) -> Node:
        self.consume('FN')
        name = self.advance().text if self.match('IDENT') else None
        self.consume('(')
        params = self.parse_params()
        body = self.parse_block()
        return FuncLit(name, params, body)

    def parse_print(self) -> Node:
        newline = self.advance().kind == 'PRINTLN'
        self.consume('(')
        return PrintStmt(self.parse_list(')'), newline)

    def parse_array(self) -> Node:
        self.consume('[')
        return ArrayLit(self.parse_list(']'))

    def parse_map(self) -> Node:
        self.consume('{')
        entries: List[Tuple[Node, Node]] = []
        while not self.match('}'):
            if entries:
                self.consume(',')
            key = self.parse_expression(LOWEST)
            self.consume(':')
            entries.append((key, self.parse_expression(LOWEST)))
        self.consume('}')
        return MapLit(tuple(entries))

    def parse_for(self) -> Node:
        self.consume('FOR')
        key = self.consume('IDENT').text
        value: Optional[str] = None
        if self.match(','):
            self.advance()
            value = self.consume('IDENT').text
        # `in` is contextual; the older `for k for items` spelling is also accepted
        if (self.match('IDENT') and self.current.text == 'in') or self.match('FOR'):
            self.advance()
        else:
            raise self.error(f"expected 'in', got {describe(self.current)}")
        target = self.parse_expression(LOWEST)
        body = self.parse_block()
        return ForIn(key, value, target, body)

    def parse_return(self) -> Node:
        self.consume('RETURN')
        if self.match('}') or self.match('EOF') or self.match(';'):
            return ReturnStmt(None)
        return ReturnStmt(self.parse_expression(LOWEST))

    def parse_swap(self) -> Node:
        self.consume('SWAP')
        self.consume('(')
        left = self.parse_expression(LOWEST)
        self.consume(',')
        right = self.parse_expression(LOWEST)
        self.consume(')')
        return SwapStmt(left, right)

    def parse_input(self) -> Node:
        self.consume('INPUT')
        self.consume('(')
        prompt = None if self.match(')') else self.parse_expression(LOWEST)
        self.consume(')')
        return InputExpr(prompt)

    def parse_len(self) -> Node:
        self.consume('LEN')
        self.consume('(')
        target = self.parse_expression(LOWEST)
        self.consume(')')
        return LenExpr(target)

    def parse_import(self) -> Node:
        self.consume('IMPORT')
        self.consume('(')
        source = self.parse_expression(LOWEST)
        self.consume(')')
        return ImportStmt(source)

    # Infix parselets

    def parse_binary(self, left: Node) -> Node:
        op = self.advance()
        right = self.parse_expression(PRECEDENCES[op.kind])
        return BinaryOp(op.text, left, right)

    def parse_assign(self, left: Node) -> Node:
        self.consume('=')
        return Assign(left, self.parse_expression(LOWEST))

    def parse_call(self, left: Node) -> Node:
        self.consume('(')
        return Call(left, self.parse_list(')'))

    def parse_index(self, left: Node) -> Node:
        self.consume('[')
        index = self.parse_expression(LOWEST)
        self.consume(']')
        return Index(left, index)

    def parse_range(self, left: Node) -> Node:
        self.consume('..')
        # bounds take arithmetic but stop at comparisons, so `0..n-1` works
        stop = self.parse_expression(LESS_GREATER)
        step = None
        if self.match(':'):
            self.advance()
            step = self.parse_expression(LESS_GREATER)
        return RangeExpr(left, stop, step)

    # Terminator-driven lists

    def parse_block(self) -> Block:
        self.consume('{')
        statements: List[Node] = []
        while not self.match('}'):
            if self.match('EOF'):
                raise self.error("unterminated block, expected '}'")
            if self.match(';'):
                self.advance()
                continue
            statements.append(self.parse_expression(LOWEST))
        self.consume('}')
        return Block(tuple(statements))

    def parse_list(self, end: str) -> Tuple[Node, ...]:
        items: List[Node] = []
        while not self.match(end):
            if items:
                self.consume(',')
            items.append(self.parse_expression(LOWEST))
        self.consume(end)
        return tuple(items)

    def parse_params(self) -> Tuple[str, ...]:
        params: List[str] = []
        while not self.match(')'):
            if params:
                self.consume(',')
            params.append(self.consume('IDENT').text)
        self.consume(')')
        return tuple(params)


def parse_program(source: str) -> Iterator[Node]:
    """Lazily parse gos source into its top-level AST nodes."""
    yield from Parser(scan(source)).parse()

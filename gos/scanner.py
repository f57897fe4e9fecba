"""Scanner for the gos language.

The terminal set is declared as a lark grammar and tokenized with lark's
basic lexer in lexer-only mode. Lark tokens are converted into `Token`
records whose `kind` is one of:

* `INT`, `FLOAT`, `STRING`, `IDENT` for literals and names;
* the upper-cased word for reserved words (`FN`, `IF`, `PRINTLN`, ...);
* the operator text itself for operators and punctuation (`==`, `..`, `{`);
* `EOF` exactly once, at the end of the stream.

Tokens are produced lazily so that the parser can pull them one at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int = 0
    column: int = 0


KEYWORDS: Dict[str, str] = {
    'fn': 'FN',
    'print': 'PRINT',
    'println': 'PRINTLN',
    'return': 'RETURN',
    'true': 'TRUE',
    'false': 'FALSE',
    'if': 'IF',
    'else': 'ELSE',
    'for': 'FOR',
    'swap': 'SWAP',
    'input': 'INPUT',
    'len': 'LEN',
    'import': 'IMPORT',
    'or': 'OR',
    'and': 'AND',
}


GOS_TERMINALS = r"""
    // A float needs a single dot that does not start a range operator.
    FLOAT.3: /\d+\.(?!\.)\d*/
    INT.2: /\d+/
    NAME: /[^\W\d]\w*/
    STRING: /"(?:[^"\\]|\\.)*"/s

    EQEQ: "=="
    NOTEQ: "!="
    GREATEREQ: ">="
    LESSEQ: "<="
    DOTDOT: ".."
    ASSIGN: "="
    GREATER: ">"
    LESS: "<"
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    // `/` is division only when it does not open a comment.
    SLASH: /\/(?![\/*])/
    BANG: "!"
    LPAREN: "("
    RPAREN: ")"
    LBRACE: "{"
    RBRACE: "}"
    LBRACKET: "["
    RBRACKET: "]"
    COMMA: ","
    COLON: ":"
    SEMICOLON: ";"

    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    WS: /\s+/

    %ignore WS
    %ignore LINE_COMMENT
    %ignore BLOCK_COMMENT
"""

GOS_LEXER = Lark(GOS_TERMINALS, parser=None, lexer='basic')

OPERATORS: Dict[str, str] = {
    'EQEQ': '==',
    'NOTEQ': '!=',
    'GREATEREQ': '>=',
    'LESSEQ': '<=',
    'DOTDOT': '..',
    'ASSIGN': '=',
    'GREATER': '>',
    'LESS': '<',
    'PLUS': '+',
    'MINUS': '-',
    'STAR': '*',
    'SLASH': '/',
    'BANG': '!',
    'LPAREN': '(',
    'RPAREN': ')',
    'LBRACE': '{',
    'RBRACE': '}',
    'LBRACKET': '[',
    'RBRACKET': ']',
    'COMMA': ',',
    'COLON': ':',
    'SEMICOLON': ';',
}

ESCAPES: Dict[str, str] = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '"': '"',
    '\\': '\\',
}


def unescape(body: str) -> str:
    """Resolve backslash escapes inside a string literal body.

    Unknown escapes are kept verbatim, backslash included.
    """
    out = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == '\\' and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(ESCAPES.get(nxt, '\\' + nxt))
            i += 2
            continue
        out.append(c)
        i += 1
    return ''.join(out)


def _lex_error(source: str, exc: UnexpectedCharacters) -> LexError:
    pos = exc.pos_in_stream
    if exc.char == '"':
        return LexError('unterminated string literal', exc.line, exc.column)
    if source.startswith('/*', pos):
        return LexError('unterminated block comment', exc.line, exc.column)
    if exc.char == '.' and pos > 0 and source[pos - 1].isdigit():
        return LexError('unexpected second "." in number', exc.line, exc.column)
    return LexError(f'unexpected character {exc.char!r}', exc.line, exc.column)


def scan(source: str) -> Iterator[Token]:
    """Yield the tokens of `source`, ending with a single EOF token."""
    line, column = 1, 1
    try:
        for tok in GOS_LEXER.lex(source):
            line, column = tok.end_line, tok.end_column
            if tok.type == 'NAME':
                text = str(tok)
                yield Token(KEYWORDS.get(text, 'IDENT'), text, tok.line, tok.column)
            elif tok.type == 'STRING':
                yield Token('STRING', unescape(tok[1:-1]), tok.line, tok.column)
            elif tok.type in ('INT', 'FLOAT'):
                yield Token(tok.type, str(tok), tok.line, tok.column)
            else:
                yield Token(OPERATORS[tok.type], str(tok), tok.line, tok.column)
    except UnexpectedCharacters as exc:
        raise _lex_error(source, exc) from None
    yield Token('EOF', '', line, column)


def tokenize(source: str) -> list:
    """Scan the whole source eagerly. Mostly useful for tests and tooling."""
    return list(scan(source))

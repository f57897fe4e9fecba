from typing import Optional


class GosError(Exception):
    """Base exception for every failure raised while running a gos script.

    `kind` is the user-facing error class shown by the CLI and the REPL.
    """
    kind = 'Error'

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.kind}: {self.message} at {self.line}:{self.column}"
        return f"{self.kind}: {self.message}"


class LexError(GosError):
    kind = 'LexicalError'


class ParseError(GosError):
    """Raised by the parser. `at_eof` is set when the input ended too early."""
    kind = 'SyntaxError'

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None,
                 at_eof: bool = False):
        super().__init__(message, line, column)
        self.at_eof = at_eof


class EvalError(GosError):
    kind = 'RuntimeError'


class TypeMismatchError(EvalError):
    kind = 'TypeError'


class UndefinedError(EvalError):
    kind = 'ReferenceError'


class DivisionByZeroError(EvalError):
    kind = 'ArithmeticError'


class ImportFailure(EvalError):
    kind = 'ImportError'

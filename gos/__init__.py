# gos language package
# This package provides a scanner, a Pratt parser and a tree-walking interpreter for the gos language.
from .errors import GosError
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'GosError',
]

"""CLI entry point for the gos interpreter.

Usage:
    python -m gos [-v|-vv|-vvv] [<program_file>]
    python -m gos [-v...] --emit-ast <program_file>
    python -m gos [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .gos file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive shell is started. Debug information
is written to `debug.txt` in the current directory when verbosity is
greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .ast_json import program_to_obj, program_from_obj
from .errors import GosError
from .interpreter import Interpreter, read_source
from .parser import parse_program
from .shell import Shell, report_error

RECURSION_LIMIT = 10000


def fail(error: GosError) -> None:
    report_error(error)
    sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog='gos', description="gos language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='GOS_FILE', help='emit AST JSON for the given .gos file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='gos program file (.gos) to execute; starts a shell if omitted')
    args = parser.parse_args(argv)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        if not program_file.exists():
            fail(GosError(f"file {program_file} not found"))
        try:
            source = read_source(program_file)
        except UnicodeDecodeError:
            fail(GosError(f"cannot decode {program_file}: not valid UTF-8"))
        try:
            obj = program_to_obj(parse_program(source))
        except GosError as e:
            fail(e)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            fail(GosError(f"file {ast_path} not found"))
        try:
            with open(ast_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            nodes = program_from_obj(data)
        except (ValueError, TypeError, KeyError) as e:
            fail(GosError(f"invalid AST file {ast_path}: {e}"))
        interpreter = Interpreter(debug_level=args.v)
        try:
            interpreter.run(nodes)
        except GosError as e:
            fail(e)
        finally:
            interpreter.close()
        return

    # No program: interactive mode
    if not args.program:
        interpreter = Interpreter(debug_level=args.v)
        try:
            Shell(interpreter).cmdloop()
        finally:
            interpreter.close()
        return

    # Default: execute source file
    program_file = Path(args.program)
    if not program_file.exists():
        fail(GosError(f"file {program_file} not found"))
    interpreter = Interpreter(debug_level=args.v)
    try:
        interpreter.run_file(str(program_file))
    except GosError as e:
        fail(e)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()

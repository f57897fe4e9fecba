"""Handles interactive/command-line mode for the gos interpreter. Uses cmd as backend."""

import cmd
import sys

from termcolor import colored

from .errors import GosError, ParseError
from .interpreter import Interpreter
from .parser import parse_program
from .values import to_string


def report_error(error: GosError):
    """Prints a gos error to stderr in red."""
    print(colored(str(error), "red", attrs=["bold"]), file=sys.stderr)


class Shell(cmd.Cmd):
    """gos interpreter shell."""
    intro = "gos interpreter :: Python backend\nType 'exit' or press Ctrl-D to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, interpreter=None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # one root scope for the whole session
        self.interpreter = interpreter if interpreter is not None else Interpreter()
        self._tmp_line = ""

    def default(self, line):
        """Executes an arbitrary gos statement."""
        source = self._tmp_line + line + "\n"
        try:
            nodes = list(parse_program(source))
        except ParseError as e:
            if e.at_eof:
                # input ended inside a construct: wait for more lines
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return
            self._reset()
            report_error(e)
            return
        except GosError as e:
            self._reset()
            report_error(e)
            return

        self._reset()
        try:
            result = self.interpreter.run(nodes)
        except GosError as e:
            report_error(e)
            return
        if result is not None:
            print(to_string(result))

    def _reset(self):
        self._tmp_line = ""
        self.prompt = self._tmp_prompt

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg or self._tmp_line:
            # `help` used as a gos name, e.g. `help(3)` or `help = 1`
            return self.default("help " + arg)
        print("Welcome to the gos interpreter!\n\n"
              "Type statements to evaluate them; the value of an expression is echoed\n"
              "unless it is nil. Definitions persist for the whole session. A line that\n"
              "leaves a block or call open continues on the next line ('. ' prompt).\n\n"
              "Try 'fn sq(x) { x * x }' followed by 'sq(7)'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        self._reset()
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg or self._tmp_line:
            return self.default("exit " + arg)
        return True

"""Line-oriented interactive shell around ``evaluate``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Final, TextIO

from .config import LOG_LEVEL
from .errors import ExpressionError
from .evaluator import Evaluator
from .functions import default_registry
from .values import Scalar, Value, format_value

PROMPT: Final[str] = ">> "

HELP_TEXT: Final[str] = """\
Enter an expression to evaluate it; separate statements with ';'.

  numbers      42, 3.14, .5, 1e-3, 2.5E+10
  operators    + - * / % ^ (right-associative) and postfix !
  implicit *   2PI, 3(4+5), 2x
  variables    x = 5, x = y = 2; the last result is kept in 'ans'
  constants    PI, E
  arrays       [1, 2, 3], matrices [[1, 2], [3, 4]]
  matrices     transpose det matmul trace rank mean(M, axis) inv solve

Commands: help (?), vars, clear, exit (quit, q)"""


class Shell:
    """Reads lines from ``stdin``; results and errors go to ``stdout``.

    The variable context lives for the whole session and ``ans`` always
    holds the last successful result.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None, evaluator: Evaluator | None = None) -> None:
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout
        self.evaluator = Evaluator() if evaluator is None else evaluator
        self.context: dict[str, Value] = {"ans": Scalar(0.0)}

    def _write(self, text: str) -> None:
        self.stdout.write(text + "\n")

    def handle(self, line: str) -> bool:
        """Process one input line; return ``False`` when the session should end."""
        text = line.strip()
        if not text:
            return True

        command = text.lower()
        if command in {"exit", "quit", "q"}:
            return False
        if command in {"help", "?"}:
            self._write(HELP_TEXT)
            return True
        if command == "vars":
            self._show_vars()
            return True
        if command == "clear":
            ans = self.context.get("ans", Scalar(0.0))
            self.context.clear()
            self.context["ans"] = ans
            self._write("Variables cleared")
            return True

        try:
            value = self.evaluator.evaluate(text, self.context)
        except ExpressionError as exc:
            self._write(f"Error: {exc}")
            return True
        self.context["ans"] = value
        self._write(format_value(value))
        return True

    def _show_vars(self) -> None:
        if not self.context:
            self._write("(no variables)")
            return
        for name in sorted(self.context):
            self._write(f"{name} = {format_value(self.context[name])}")

    def run(self) -> None:
        interactive = self.stdin.isatty()
        if interactive:
            self._write("Matrix expression calculator. Type 'help' for usage, 'exit' to quit.")
        while True:
            if interactive:
                self.stdout.write(PROMPT)
                self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                break
            if not self.handle(line):
                break


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="matexpr", description="Evaluate scalar, array and matrix expressions.")
    parser.add_argument("-e", "--eval", dest="expression", help="evaluate one expression, print it and exit")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).debug("%d functions registered", len(default_registry().names()))

    if args.expression is not None:
        try:
            value = Evaluator().evaluate(args.expression, {})
        except ExpressionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print(format_value(value))
        return 0

    Shell().run()
    return 0

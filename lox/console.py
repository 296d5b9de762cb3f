"""Console input/output used by the interpreter and the error reporter.

Anything with `print_line`, `print_error_line` and `read_line` methods can
stand in for `ConsoleIO`; the interpreter never writes to stdout directly.
"""

import builtins
import sys
from typing import Optional


class ConsoleIO:
    """Writes program output to stdout and diagnostics to stderr."""

    def print_line(self, message: str) -> None:
        print(message)

    def print_error_line(self, message: str) -> None:
        print(message, file=sys.stderr)

    def read_line(self, prompt: str = '> ') -> Optional[str]:
        try:
            return builtins.input(prompt)
        except EOFError:
            return None

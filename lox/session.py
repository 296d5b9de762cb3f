"""Drives source text through scanner, parser, resolver and interpreter.

A `Session` owns one error reporter and one interpreter, so global
definitions persist from one `run` call to the next; the interactive
prompt relies on that.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Sequence

from .ast import Stmt
from .console import ConsoleIO
from .interpreter import Interpreter
from .parser import parse
from .reporter import ErrorReporter
from .resolver import Resolver
from .scanner import scan

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

QUIT_COMMAND = 'quit'

# Every Lox call costs several Python frames; this allows Lox call depths
# of a few thousand.
RECURSION_LIMIT = 25000


class Session:
    def __init__(self, io=None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.io = io if io is not None else ConsoleIO()
        self.reporter = ErrorReporter(self.io)
        self.interpreter = Interpreter(self.io, self.reporter, debug_level=debug_level, debug_file=debug_file)

    def parse_source(self, source: str) -> List[Stmt]:
        tokens = scan(source, self.reporter)
        self.interpreter.debug(f"scanned {len(tokens)} tokens")
        statements = parse(tokens, self.reporter)
        self.interpreter.debug(f"parsed {len(statements)} statements")
        return statements

    def run(self, source: str) -> None:
        statements = self.parse_source(source)
        if self.reporter.had_error:
            return
        self.run_statements(statements)

    def run_statements(self, statements: Sequence[Stmt]) -> None:
        """Resolve and execute already parsed statements."""
        try:
            Resolver(self.interpreter, self.reporter).resolve(statements)
        except RecursionError:
            self.reporter.error_without_line('Too much nesting.')
        self.interpreter.debug(f"resolved {len(self.interpreter.locals)} local references")
        if self.reporter.had_error:
            return
        try:
            self.interpreter.interpret(statements)
        except RecursionError:
            # Only expression nesting gets here; call overflow is a runtime error.
            self.reporter.error_without_line('Too much nesting.')
        self.interpreter.debug('interpret finished')

    def exit_code(self) -> int:
        if self.reporter.had_error:
            return EXIT_STATIC_ERROR
        if self.reporter.had_runtime_error:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK

    def run_file(self, path: str) -> int:
        program_file = Path(path)
        try:
            source = program_file.read_text(encoding='utf-8')
        except OSError as e:
            self.io.print_error_line(f'Unable to read file "{program_file}": {e.strerror}')
            return EXIT_FAILURE
        self.run(source)
        return self.exit_code()

    def run_prompt(self) -> int:
        self.io.print_line('Running Lox in interactive mode.')
        self.io.print_line(f'Type "{QUIT_COMMAND}" to exit.')
        while True:
            line = self.io.read_line('> ')
            if line is None or line.strip().lower() == QUIT_COMMAND:
                break
            self.run(line)
            # A mistake on one line should not poison the next.
            self.reporter.reset()
        return EXIT_OK

    def close(self) -> None:
        self.interpreter.close()


def run_program(source: str, io=None, debug_level: int = 0) -> ErrorReporter:
    """Convenience function to scan, parse, resolve and run a Lox program.

    Returns the reporter so callers can inspect the error flags.
    """
    session = Session(io=io, debug_level=debug_level)
    try:
        session.run(source)
    finally:
        session.close()
    return session.reporter

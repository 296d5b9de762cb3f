"""Error reporting shared by every pipeline stage.

The scanner, parser and resolver report problems as they find them and
keep going; the interpreter reports the single runtime error that stopped
it. The front end reads `had_error` and `had_runtime_error` to pick an exit
status.
"""

from typing import Union

from lox.errors import LoxRuntimeError, UnexpectedError
from lox.tokens import Token, TokenType


class ErrorReporter:
    def __init__(self, io):
        self.io = io
        self.had_error = False
        self.had_runtime_error = False

    def error(self, line: int, message: str) -> None:
        self.report(line, '', message)

    def token_error(self, token: Token, message: str) -> None:
        if token.type == TokenType.EOF:
            self.report(token.line, ' at end', message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def error_without_line(self, message: str) -> None:
        self.io.print_error_line(f"Error: {message}")
        self.had_error = True

    def runtime_error(self, error: Union[LoxRuntimeError, UnexpectedError]) -> None:
        if error.token is None:
            self.io.print_error_line(error.message)
        else:
            self.io.print_error_line(f"{error.message}\n[line {error.token.line}]")
        self.had_runtime_error = True

    def report(self, line: int, where: str, message: str) -> None:
        self.io.print_error_line(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def reset(self) -> None:
        self.had_error = False
        self.had_runtime_error = False

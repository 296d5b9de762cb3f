from typing import Any, Optional

from lox.tokens import Token


class LoxError(Exception):
    """Base class for every error raised by the Lox toolchain."""


class ParseError(LoxError):
    """Internal exception used by the parser to unwind to a statement boundary."""


class AstReadError(LoxError):
    """Raised when printed AST text cannot be turned back into nodes."""


class LoxRuntimeError(LoxError):
    """Exception type used to propagate Lox runtime errors.

    Carries the token where the error happened so the reporter can print
    the offending line.
    """
    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ArgumentCountError(LoxRuntimeError):
    pass


class NotCallableError(LoxRuntimeError):
    pass


class NotClassError(LoxRuntimeError):
    pass


class NotInstanceError(LoxRuntimeError):
    pass


class OperandTypeError(LoxRuntimeError):
    pass


class StackOverflowError(LoxRuntimeError):
    pass


class UndefinedPropertyError(LoxRuntimeError):
    pass


class UndefinedVariableError(LoxRuntimeError):
    pass


class UnexpectedError(LoxError):
    """An internal invariant was violated; points at an interpreter bug."""
    def __init__(self, message: str):
        super().__init__(message)
        self.token: Optional[Token] = None
        self.message = message


class ReturnSignal:
    """Result of executing a `return` statement.

    Statement execution hands this back up the call stack instead of
    raising, until the enclosing function call consumes it.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"

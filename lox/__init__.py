# Lox language package
# This package provides a scanner, parser, resolver and tree-walking
# interpreter for the Lox language.
from .errors import LoxError, LoxRuntimeError
from .interpreter import Interpreter
from .parser import parse
from .reporter import ErrorReporter
from .resolver import Resolver
from .scanner import scan
from .session import Session, run_program

__all__ = [
    'scan',
    'parse',
    'Resolver',
    'Interpreter',
    'ErrorReporter',
    'Session',
    'run_program',
    'LoxError',
    'LoxRuntimeError',
]

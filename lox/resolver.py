"""Static scope resolution for Lox programs.

The resolver walks the statements once, before anything runs, and works
out for every local variable reference how many scopes lie between the
use and the declaration. The interpreter receives those distances through
its `resolve` callback and uses them for fixed-hop lookups, which keeps
closures bound to the variables visible where they were written.

Names not found in any local scope are left unresolved; the interpreter
looks those up in the global environment at run time.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, List, Sequence, Union

from .ast import (
    Expr, Stmt, Assign, Binary, Call, Get, Grouping, Literal, Logical, Set,
    Super, This, Unary, Variable, Block, Class, Expression, Function, If,
    Print, Return, Var, While,
)
from .errors import UnexpectedError
from .tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    def __init__(self, interpreter, reporter):
        self.interpreter = interpreter
        self.reporter = reporter
        # name -> True once the initializer has been resolved
        self.scopes: List[Dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements: Sequence[Stmt]) -> None:
        for stmt in statements:
            self.resolve_stmt(stmt)

    def resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()
            return
        if isinstance(stmt, Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)
            return
        if isinstance(stmt, Function):
            # Defined before the body so the function can recurse.
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)
            return
        if isinstance(stmt, Class):
            self.resolve_class(stmt)
            return
        if isinstance(stmt, Expression):
            self.resolve_expr(stmt.expression)
            return
        if isinstance(stmt, If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)
            return
        if isinstance(stmt, Print):
            self.resolve_expr(stmt.expression)
            return
        if isinstance(stmt, Return):
            if self.current_function == FunctionType.NONE:
                self.reporter.token_error(stmt.keyword, "Can't return from top-level code.")
            if stmt.value is not None:
                if self.current_function == FunctionType.INITIALIZER:
                    self.reporter.token_error(stmt.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(stmt.value)
            return
        if isinstance(stmt, While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)
            return
        raise UnexpectedError(f"resolve: unexpected statement type {type(stmt).__name__}")

    def resolve_class(self, stmt: Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.reporter.token_error(stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(stmt.superclass)
            self.begin_scope()
            self.scopes[-1]['super'] = True

        self.begin_scope()
        self.scopes[-1]['this'] = True
        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == 'init' else FunctionType.METHOD
            self.resolve_function(method, kind)
        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, function: Function, kind: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.reporter.token_error(expr.name, "Can't read local variable in its own initializer.")
            self.resolve_local(expr, expr.name)
            return
        if isinstance(expr, Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)
            return
        if isinstance(expr, (Binary, Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)
            return
        if isinstance(expr, Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)
            return
        if isinstance(expr, Get):
            # Property names are looked up dynamically; only the object resolves.
            self.resolve_expr(expr.object)
            return
        if isinstance(expr, Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.object)
            return
        if isinstance(expr, Grouping):
            self.resolve_expr(expr.expression)
            return
        if isinstance(expr, Literal):
            return
        if isinstance(expr, Unary):
            self.resolve_expr(expr.right)
            return
        if isinstance(expr, This):
            if self.current_class == ClassType.NONE:
                self.reporter.token_error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword)
            return
        if isinstance(expr, Super):
            if self.current_class == ClassType.NONE:
                self.reporter.token_error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != ClassType.SUBCLASS:
                self.reporter.token_error(expr.keyword, "Can't use 'super' in a class with no superclass.")
            self.resolve_local(expr, expr.keyword)
            return
        raise UnexpectedError(f"resolve: unexpected expression type {type(expr).__name__}")

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(name, 'Already a variable with this name in this scope.')
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Union[Variable, Assign, This, Super], name: Token) -> None:
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return
        # Not found: assume it is global.

"""Canonical text form of Lox syntax trees.

Every node prints as a parenthesised prefix form, for example
``1 + 2 * 3`` becomes ``(+ 1 (* 2 3))`` and ``-1 * 2`` becomes
``(* (- 1) 2)``. Statements use a keyword head (``print``, ``var``,
``block``, ``fun``, ...). The form is unambiguous, so `lox.ast_reader`
can turn it back into nodes; printing those again gives identical text.
"""

from __future__ import annotations

from typing import List, Sequence

from .ast import (
    Expr, Stmt, Assign, Binary, Call, Get, Grouping, Literal, Logical, Set,
    Super, This, Unary, Variable, Block, Class, Expression, Function, If,
    Print, Return, Var, While,
)
from .errors import UnexpectedError

INDENT = '  '


def format_number(value: float) -> str:
    # repr round-trips exactly; integral values drop the ".0".
    text = repr(value)
    if text.endswith('.0'):
        text = text[:-2]
    return text


class AstPrinter:
    def print_expr(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return self.literal(expr.value)
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, This):
            return 'this'
        if isinstance(expr, Assign):
            return self.parenthesize('=', expr.name.lexeme, self.print_expr(expr.value))
        if isinstance(expr, (Binary, Logical)):
            return self.parenthesize(expr.operator.lexeme, self.print_expr(expr.left), self.print_expr(expr.right))
        if isinstance(expr, Unary):
            return self.parenthesize(expr.operator.lexeme, self.print_expr(expr.right))
        if isinstance(expr, Grouping):
            return self.parenthesize('group', self.print_expr(expr.expression))
        if isinstance(expr, Call):
            return self.parenthesize('call', self.print_expr(expr.callee), *map(self.print_expr, expr.arguments))
        if isinstance(expr, Get):
            return self.parenthesize('get', self.print_expr(expr.object), expr.name.lexeme)
        if isinstance(expr, Set):
            return self.parenthesize('set', self.print_expr(expr.object), expr.name.lexeme,
                                     self.print_expr(expr.value))
        if isinstance(expr, Super):
            return self.parenthesize('super', expr.method.lexeme)
        raise UnexpectedError(f"print: unexpected expression type {type(expr).__name__}")

    def print_stmt(self, stmt: Stmt, depth: int = 0) -> str:
        if isinstance(stmt, Expression):
            return self.parenthesize('expr', self.print_expr(stmt.expression))
        if isinstance(stmt, Print):
            return self.parenthesize('print', self.print_expr(stmt.expression))
        if isinstance(stmt, Var):
            if stmt.initializer is None:
                return self.parenthesize('var', stmt.name.lexeme)
            return self.parenthesize('var', stmt.name.lexeme, self.print_expr(stmt.initializer))
        if isinstance(stmt, Return):
            if stmt.value is None:
                return '(return)'
            return self.parenthesize('return', self.print_expr(stmt.value))
        if isinstance(stmt, Block):
            return self.nested('(block', stmt.statements, depth)
        if isinstance(stmt, If):
            parts = [self.print_expr(stmt.condition), self.print_stmt(stmt.then_branch, depth)]
            if stmt.else_branch is not None:
                parts.append(self.print_stmt(stmt.else_branch, depth))
            return self.parenthesize('if', *parts)
        if isinstance(stmt, While):
            return self.parenthesize('while', self.print_expr(stmt.condition), self.print_stmt(stmt.body, depth))
        if isinstance(stmt, Function):
            params = '(' + ' '.join(param.lexeme for param in stmt.params) + ')'
            return self.nested(f"(fun {stmt.name.lexeme} {params}", stmt.body, depth)
        if isinstance(stmt, Class):
            head = f"(class {stmt.name.lexeme}"
            if stmt.superclass is not None:
                head += f" {stmt.superclass.name.lexeme}"
            return self.nested(head, stmt.methods, depth)
        raise UnexpectedError(f"print: unexpected statement type {type(stmt).__name__}")

    def nested(self, head: str, statements: Sequence[Stmt], depth: int) -> str:
        """Print `head` followed by one indented line per statement."""
        if not statements:
            return head + ')'
        pad = INDENT * (depth + 1)
        body = ''.join(f"\n{pad}{self.print_stmt(stmt, depth + 1)}" for stmt in statements)
        return f"{head}{body})"

    @staticmethod
    def literal(value) -> str:
        if value is None:
            return 'nil'
        if value is True:
            return 'true'
        if value is False:
            return 'false'
        if isinstance(value, float):
            return format_number(value)
        return f'"{value}"'

    @staticmethod
    def parenthesize(name: str, *parts: str) -> str:
        return '(' + ' '.join((name,) + parts) + ')'


def print_program(statements: Sequence[Stmt]) -> str:
    printer = AstPrinter()
    lines: List[str] = [printer.print_stmt(stmt) for stmt in statements]
    return '\n'.join(lines) + ('\n' if lines else '')

"""Abstract Syntax Tree (AST) definitions for the Lox language.

The parser builds these nodes once and nothing mutates them afterwards.
Nodes compare and hash by identity (`eq=False`): the resolver keys its
scope-distance table on the node object itself, and two syntactically
identical expressions at different places must stay distinct.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .tokens import Token


@dataclass(frozen=True, eq=False)
class Expr:
    """Base class for expression nodes."""
    pass


@dataclass(frozen=True, eq=False)
class Stmt:
    """Base class for statement nodes."""
    pass


# Expressions

@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, for error lines
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: Any  # None, bool, float or str


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token


# Statements

@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: Tuple[Function, ...]


@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt

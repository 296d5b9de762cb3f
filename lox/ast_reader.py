"""Reader for the canonical AST text written by `lox.ast_printer`.

This module implements a two-stage pipeline:

1. **Parsing**: a small Lark grammar reads the text as generic
   s-expressions (nested lists of numbers, strings and symbols) and a
   transformer turns the parse tree into plain Python lists and `Atom`s.

2. **Building**: the nested lists are matched by their head symbol and
   rebuilt into `lox.ast` nodes. Tokens are recreated from the symbols;
   their line numbers are the lines of the AST text, so runtime errors
   point into the file being executed.

The `read_program` function is the public entry point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .ast import (
    Expr, Stmt, Assign, Binary, Call, Get, Grouping, Literal, Logical, Set,
    Super, This, Unary, Variable, Block, Class, Expression, Function, If,
    Print, Return, Var, While,
)
from .errors import AstReadError
from .tokens import KEYWORDS, OPERATORS, Token, TokenType

AST_GRAMMAR = r"""
    start: form*
    ?form: sexpr
         | NUMBER -> number
         | STRING -> string
         | SYMBOL -> symbol
    sexpr: "(" form* ")"

    SYMBOL: /[A-Za-z_][A-Za-z0-9_]*/ | /[!=<>]=?/ | /[-+*\/]/
    NUMBER: /\d+(\.\d+)?([eE][-+]?\d+)?/
    STRING: /"[^"]*"/

    // Comments
    COMMENT: /;[^\n]*/
    %ignore COMMENT

    %import common.WS
    %ignore WS
"""

AST_PARSER = Lark(
    AST_GRAMMAR,
    parser='lalr',
    lexer='contextual',
    maybe_placeholders=False,
)

UNARY_OPERATORS = ('-', '!')


@dataclass(frozen=True)
class Atom:
    kind: str  # 'number', 'string' or 'symbol'
    value: Any
    line: int


class SexprTransformer(Transformer):
    """Transforms the raw parse tree into nested lists of atoms."""

    def start(self, items):
        return list(items)

    def sexpr(self, items):
        return list(items)

    def number(self, items):
        token = items[0]
        return Atom('number', float(token), token.line)

    def string(self, items):
        token = items[0]
        return Atom('string', str(token)[1:-1], token.line)

    def symbol(self, items):
        token = items[0]
        return Atom('symbol', str(token), token.line)


def form_line(form) -> Optional[int]:
    if isinstance(form, Atom):
        return form.line
    for item in form:
        line = form_line(item)
        if line is not None:
            return line
    return None


def fail(form, message: str) -> AstReadError:
    line = form_line(form)
    where = f"line {line}: " if line is not None else ''
    return AstReadError(f"{where}{message}")


def split_head(form) -> tuple:
    if not isinstance(form, list) or not form:
        raise fail(form, 'expected a parenthesised form')
    head = form[0]
    if not isinstance(head, Atom) or head.kind != 'symbol':
        raise fail(form, 'form must start with a symbol')
    return head, form[1:]


def expect_count(form, args: list, low: int, high: int) -> None:
    if not low <= len(args) <= high:
        raise fail(form, f"'{form[0].value}' takes {low}..{high} operands, got {len(args)}")


def identifier(form) -> Token:
    if not isinstance(form, Atom) or form.kind != 'symbol':
        raise fail(form, 'expected an identifier')
    if not (form.value[0].isalpha() or form.value[0] == '_') or form.value in KEYWORDS:
        raise fail(form, f"'{form.value}' is not an identifier")
    return Token(TokenType.IDENTIFIER, form.value, None, form.line)


def keyword(name: str, line: int) -> Token:
    return Token(KEYWORDS[name], name, None, line)


class AstBuilder:
    def build_program(self, forms: list) -> List[Stmt]:
        return [self.build_stmt(form) for form in forms]

    def build_stmt(self, form) -> Stmt:
        head, args = split_head(form)
        name = head.value
        if name == 'expr':
            expect_count(form, args, 1, 1)
            return Expression(self.build_expr(args[0]))
        if name == 'print':
            expect_count(form, args, 1, 1)
            return Print(self.build_expr(args[0]))
        if name == 'var':
            expect_count(form, args, 1, 2)
            initializer = self.build_expr(args[1]) if len(args) == 2 else None
            return Var(identifier(args[0]), initializer)
        if name == 'return':
            expect_count(form, args, 0, 1)
            value = self.build_expr(args[0]) if args else None
            return Return(keyword('return', head.line), value)
        if name == 'block':
            return Block(tuple(self.build_stmt(stmt) for stmt in args))
        if name == 'if':
            expect_count(form, args, 2, 3)
            else_branch = self.build_stmt(args[2]) if len(args) == 3 else None
            return If(self.build_expr(args[0]), self.build_stmt(args[1]), else_branch)
        if name == 'while':
            expect_count(form, args, 2, 2)
            return While(self.build_expr(args[0]), self.build_stmt(args[1]))
        if name == 'fun':
            return self.build_function(form, args)
        if name == 'class':
            if not args:
                raise fail(form, "'class' needs a name")
            class_name = identifier(args[0])
            rest = args[1:]
            superclass = None
            if rest and isinstance(rest[0], Atom):
                superclass = Variable(identifier(rest[0]))
                rest = rest[1:]
            methods = []
            for method in rest:
                method_head, method_args = split_head(method)
                if method_head.value != 'fun':
                    raise fail(method, 'class bodies may only hold methods')
                methods.append(self.build_function(method, method_args))
            return Class(class_name, superclass, tuple(methods))
        raise fail(form, f"unknown statement '{name}'")

    def build_function(self, form, args: list) -> Function:
        if len(args) < 2 or not isinstance(args[1], list):
            raise fail(form, "'fun' needs a name and a parameter list")
        params = tuple(identifier(param) for param in args[1])
        body = tuple(self.build_stmt(stmt) for stmt in args[2:])
        return Function(identifier(args[0]), params, body)

    def build_expr(self, form) -> Expr:
        if isinstance(form, Atom):
            return self.build_atom(form)
        head, args = split_head(form)
        name = head.value
        if name == '=':
            expect_count(form, args, 2, 2)
            return Assign(identifier(args[0]), self.build_expr(args[1]))
        if name == 'group':
            expect_count(form, args, 1, 1)
            return Grouping(self.build_expr(args[0]))
        if name == 'call':
            if not args:
                raise fail(form, "'call' needs a callee")
            paren = Token(TokenType.RIGHT_PAREN, ')', None, head.line)
            return Call(self.build_expr(args[0]), paren, tuple(self.build_expr(arg) for arg in args[1:]))
        if name == 'get':
            expect_count(form, args, 2, 2)
            return Get(self.build_expr(args[0]), identifier(args[1]))
        if name == 'set':
            expect_count(form, args, 3, 3)
            return Set(self.build_expr(args[0]), identifier(args[1]), self.build_expr(args[2]))
        if name == 'super':
            expect_count(form, args, 1, 1)
            return Super(keyword('super', head.line), identifier(args[0]))
        if name in OPERATORS and name != '=':
            operator = Token(OPERATORS[name], name, None, head.line)
            if len(args) == 1 and name in UNARY_OPERATORS:
                return Unary(operator, self.build_expr(args[0]))
            if name == '!':
                raise fail(form, "'!' takes exactly one operand")
            expect_count(form, args, 2, 2)
            left, right = self.build_expr(args[0]), self.build_expr(args[1])
            if name in ('and', 'or'):
                return Logical(left, operator, right)
            return Binary(left, operator, right)
        raise fail(form, f"unknown expression '{name}'")

    def build_atom(self, atom: Atom) -> Expr:
        if atom.kind in ('number', 'string'):
            return Literal(atom.value)
        if atom.value == 'nil':
            return Literal(None)
        if atom.value == 'true':
            return Literal(True)
        if atom.value == 'false':
            return Literal(False)
        if atom.value == 'this':
            return This(keyword('this', atom.line))
        return Variable(identifier(atom))


def read_program(text: str) -> List[Stmt]:
    """Parse canonical AST text back into a list of statements.

    Raises `AstReadError` when the text is not well formed.
    """
    try:
        tree = AST_PARSER.parse(text)
    except LarkError as e:
        raise AstReadError(str(e)) from e
    try:
        forms = SexprTransformer().transform(tree)
        return AstBuilder().build_program(forms)
    except (RecursionError, LarkError):
        # lark wraps errors raised inside transformer callbacks in VisitError.
        raise AstReadError('forms nest too deeply') from None

"""Recursive-descent parser for the Lox language.

Grammar, lowest precedence first::

    program     -> declaration* EOF
    declaration -> classDecl | funDecl | varDecl | statement
    classDecl   -> "class" IDENT ( "<" IDENT )? "{" function* "}"
    funDecl     -> "fun" function
    function    -> IDENT "(" parameters? ")" block
    varDecl     -> "var" IDENT ( "=" expression )? ";"
    statement   -> exprStmt | forStmt | ifStmt | printStmt
                 | returnStmt | whileStmt | block
    expression  -> assignment
    assignment  -> ( call "." )? IDENT "=" assignment | logic_or
    logic_or    -> logic_and ( "or" logic_and )*
    logic_and   -> equality ( "and" equality )*
    equality    -> comparison ( ( "!=" | "==" ) comparison )*
    comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        -> factor ( ( "-" | "+" ) factor )*
    factor      -> unary ( ( "/" | "*" ) unary )*
    unary       -> ( "!" | "-" ) unary | call
    call        -> primary ( "(" arguments? ")" | "." IDENT )*
    primary     -> "true" | "false" | "nil" | "this" | NUMBER | STRING
                 | IDENT | "(" expression ")" | "super" "." IDENT

A syntax error is reported, then the parser skips ahead to the next
statement boundary and keeps going, so one run can surface several
independent mistakes. The returned statement list only holds what parsed
cleanly; check the reporter before running it.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .ast import (
    Expr, Stmt, Assign, Binary, Call, Get, Grouping, Literal, Logical, Set,
    Super, This, Unary, Variable, Block, Class, Expression, Function, If,
    Print, Return, Var, While,
)
from .errors import ParseError
from .tokens import Token, TokenType

MAX_ARGUMENTS = 255

T = TokenType

# Tokens that begin a new declaration or statement; synchronization stops
# in front of them.
STATEMENT_STARTS = {T.CLASS, T.FUN, T.VAR, T.FOR, T.IF, T.WHILE, T.PRINT, T.RETURN}


class Parser:
    def __init__(self, tokens: List[Token], reporter):
        self.tokens = tokens
        self.reporter = reporter
        self.current = 0

    def parse(self) -> List[Stmt]:
        statements: List[Stmt] = []
        try:
            while not self.at_end():
                stmt = self.declaration()
                if stmt is not None:
                    statements.append(stmt)
        except RecursionError:
            # Nesting deeper than the Python stack allows; nothing after it is parsed.
            self.error(self.peek(), 'Too much nesting.')
        return statements

    # Declarations

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(T.CLASS):
                return self.class_declaration()
            if self.match(T.FUN):
                return self.function('function')
            if self.match(T.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self) -> Class:
        name = self.consume(T.IDENTIFIER, 'Expect class name.')

        superclass = None
        if self.match(T.LESS):
            superclass = Variable(self.consume(T.IDENTIFIER, 'Expect superclass name.'))

        self.consume(T.LEFT_BRACE, "Expect '{' before class body.")
        methods = []
        while not self.check(T.RIGHT_BRACE) and not self.at_end():
            methods.append(self.function('method'))
        self.consume(T.RIGHT_BRACE, "Expect '}' after class body.")
        return Class(name, superclass, tuple(methods))

    def function(self, kind: str) -> Function:
        name = self.consume(T.IDENTIFIER, f"Expect {kind} name.")
        self.consume(T.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: List[Token] = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    # Reported but not raised: the rest of the list still parses.
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(T.IDENTIFIER, 'Expect parameter name.'))
                if not self.match(T.COMMA):
                    break
        self.consume(T.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(T.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return Function(name, tuple(params), tuple(self.block()))

    def var_declaration(self) -> Var:
        name = self.consume(T.IDENTIFIER, 'Expect variable name.')
        initializer = None
        if self.match(T.EQUAL):
            initializer = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # Statements

    def statement(self) -> Stmt:
        if self.match(T.FOR):
            return self.for_statement()
        if self.match(T.IF):
            return self.if_statement()
        if self.match(T.PRINT):
            return self.print_statement()
        if self.match(T.RETURN):
            return self.return_statement()
        if self.match(T.WHILE):
            return self.while_statement()
        if self.match(T.LEFT_BRACE):
            return Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """Desugar `for (init; cond; incr) body` into a while loop."""
        self.consume(T.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(T.SEMICOLON):
            initializer = None
        elif self.match(T.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(T.SEMICOLON):
            condition = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(T.RIGHT_PAREN):
            increment = self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()
        if increment is not None:
            body = Block((body, Expression(increment)))
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block((initializer, body))
        return body

    def if_statement(self) -> If:
        self.consume(T.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.statement()
        else_branch = None
        # Binds to the nearest if, which settles the dangling else.
        if self.match(T.ELSE):
            else_branch = self.statement()
        return If(condition, then_branch, else_branch)

    def print_statement(self) -> Print:
        value = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def return_statement(self) -> Return:
        keyword = self.previous()
        value = None
        if not self.check(T.SEMICOLON):
            value = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def while_statement(self) -> While:
        self.consume(T.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after condition.")
        return While(condition, self.statement())

    def block(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check(T.RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(T.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self) -> Expression:
        expr = self.expression()
        self.consume(T.SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    # Expressions

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logic_or()

        if self.match(T.EQUAL):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            # No need to synchronize: the parser is not confused.
            self.error(equals, 'Invalid assignment target.')

        return expr

    def logic_or(self) -> Expr:
        expr = self.logic_and()
        while self.match(T.OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self) -> Expr:
        expr = self.equality()
        while self.match(T.AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.equality())
        return expr

    def binary(self, operand: Callable[[], Expr], *operators: TokenType) -> Expr:
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            expr = Binary(expr, operator, operand())
        return expr

    def equality(self) -> Expr:
        return self.binary(self.comparison, T.BANG_EQUAL, T.EQUAL_EQUAL)

    def comparison(self) -> Expr:
        return self.binary(self.term, T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL)

    def term(self) -> Expr:
        return self.binary(self.factor, T.MINUS, T.PLUS)

    def factor(self) -> Expr:
        return self.binary(self.unary, T.SLASH, T.STAR)

    def unary(self) -> Expr:
        if self.match(T.BANG, T.MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match(T.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(T.DOT):
                name = self.consume(T.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
                if not self.match(T.COMMA):
                    break
        paren = self.consume(T.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def primary(self) -> Expr:
        if self.match(T.FALSE):
            return Literal(False)
        if self.match(T.TRUE):
            return Literal(True)
        if self.match(T.NIL):
            return Literal(None)
        if self.match(T.NUMBER, T.STRING):
            return Literal(self.previous().literal)
        if self.match(T.SUPER):
            keyword = self.previous()
            self.consume(T.DOT, "Expect '.' after 'super'.")
            method = self.consume(T.IDENTIFIER, 'Expect superclass method name.')
            return Super(keyword, method)
        if self.match(T.THIS):
            return This(self.previous())
        if self.match(T.IDENTIFIER):
            return Variable(self.previous())
        if self.match(T.LEFT_PAREN):
            expr = self.expression()
            self.consume(T.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)
        raise self.error(self.peek(), 'Expect expression.')

    # Helpers

    def synchronize(self) -> None:
        """Discard tokens until the start of the next statement."""
        self.advance()
        while not self.at_end():
            if self.previous().type == T.SEMICOLON:
                return
            if self.peek().type in STATEMENT_STARTS:
                return
            self.advance()

    def consume(self, token_type: TokenType, message: str) -> Token:
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def match(self, *token_types: TokenType) -> bool:
        for token_type in token_types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type: TokenType) -> bool:
        if self.at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1
        return self.previous()

    def at_end(self) -> bool:
        return self.peek().type == T.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def error(self, token: Token, message: str) -> ParseError:
        self.reporter.token_error(token, message)
        return ParseError(message)


def parse(tokens: List[Token], reporter) -> List[Stmt]:
    """Parse a token list into statements; possibly partial after errors."""
    return Parser(tokens, reporter).parse()

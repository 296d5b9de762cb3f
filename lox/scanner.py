"""Tokenizer for the Lox language.

The scanner makes one left-to-right pass over the source. Lexical errors
(unexpected characters, unterminated strings) are reported and scanning
carries on, so every lexical problem in a file surfaces in a single run.
"""

from __future__ import annotations

from typing import Any, List

from lox.tokens import KEYWORDS, Token, TokenType


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_alpha(c: str) -> bool:
    return 'a' <= c <= 'z' or 'A' <= c <= 'Z' or c == '_'


def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


class Scanner:
    SINGLE_CHAR = {
        '(': TokenType.LEFT_PAREN,
        ')': TokenType.RIGHT_PAREN,
        '{': TokenType.LEFT_BRACE,
        '}': TokenType.RIGHT_BRACE,
        ',': TokenType.COMMA,
        '.': TokenType.DOT,
        '-': TokenType.MINUS,
        '+': TokenType.PLUS,
        ';': TokenType.SEMICOLON,
        '*': TokenType.STAR,
    }

    # c -> (token when followed by '=', token otherwise)
    WITH_EQUAL = {
        '!': (TokenType.BANG_EQUAL, TokenType.BANG),
        '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        '<': (TokenType.LESS_EQUAL, TokenType.LESS),
        '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }

    def __init__(self, source: str, reporter):
        self.source = source
        self.reporter = reporter
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        while not self.at_end():
            self.start = self.current
            self.scan_token()
        self.tokens.append(Token(TokenType.EOF, '', None, self.line))
        return self.tokens

    def scan_token(self) -> None:
        c = self.advance()
        if c in self.SINGLE_CHAR:
            self.add_token(self.SINGLE_CHAR[c])
        elif c in self.WITH_EQUAL:
            matched, single = self.WITH_EQUAL[c]
            self.add_token(matched if self.match('=') else single)
        elif c == '/':
            if self.match('/'):
                # A comment goes until the end of the line.
                while self.peek() != '\n' and not self.at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.line += 1
        elif c == '"':
            self.string()
        elif is_digit(c):
            self.number()
        elif is_alpha(c):
            self.identifier()
        else:
            self.reporter.error(self.line, 'Unexpected character.')

    def string(self) -> None:
        start_line = self.line
        while self.peek() != '"' and not self.at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.at_end():
            self.reporter.error(start_line, 'Unterminated string.')
            return

        self.advance()  # closing "
        value = self.source[self.start + 1:self.current - 1]
        self.add_token(TokenType.STRING, value, start_line)

    def number(self) -> None:
        while is_digit(self.peek()):
            self.advance()

        # A fractional part needs at least one digit after the dot.
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self) -> None:
        while is_alphanumeric(self.peek()):
            self.advance()
        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def add_token(self, token_type: TokenType, literal: Any = None, line: int = None) -> None:
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line if line is None else line))

    def match(self, expected: str) -> bool:
        if self.at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        if self.at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def at_end(self) -> bool:
        return self.current >= len(self.source)


def scan(source: str, reporter) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return Scanner(source, reporter).scan_tokens()

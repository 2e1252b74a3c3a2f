"""Monkey Lexer — on-demand tokenizer with line/column tracking.

Tokens are produced one at a time from an immutable source string. Once the
end of input is reached the lexer keeps handing out EOF. A lexer cannot be
rewound; build a new one to scan the same text again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator, Optional

from monkey.errors import SourceLocation

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class TokenType(Enum):
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literals
    IDENT = auto()
    INT = auto()
    BOOL = auto()

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    BANG = auto()
    ASTERISK = auto()
    SLASH = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    LESS_THAN = auto()
    LESS_THAN_EQUAL = auto()
    GREATER_THAN = auto()
    GREATER_THAN_EQUAL = auto()

    # Delimiters
    COMMA = auto()
    SEMICOLON = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Keywords
    FUNCTION = auto()
    LET = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()

    @property
    def display_name(self) -> str:
        """CamelCase name used in diagnostics: NOT_EQUAL -> NotEqual."""
        return "".join(part.capitalize() for part in self.name.split("_"))


KEYWORDS: dict[str, tuple[TokenType, Any]] = {
    "fn": (TokenType.FUNCTION, None),
    "let": (TokenType.LET, None),
    "if": (TokenType.IF, None),
    "else": (TokenType.ELSE, None),
    "return": (TokenType.RETURN, None),
    "true": (TokenType.BOOL, True),
    "false": (TokenType.BOOL, False),
}

_SINGLE_CHAR: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}

# first char -> (single-char type, type when followed by '=')
_WITH_EQUALS: dict[str, tuple[TokenType, TokenType]] = {
    "=": (TokenType.ASSIGN, TokenType.EQUAL),
    "!": (TokenType.BANG, TokenType.NOT_EQUAL),
    "<": (TokenType.LESS_THAN, TokenType.LESS_THAN_EQUAL),
    ">": (TokenType.GREATER_THAN, TokenType.GREATER_THAN_EQUAL),
}


@dataclass
class Token:
    type: TokenType
    literal: Any = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def describe(self) -> str:
        """Debug rendering used in parse error messages, e.g. ``Int(5)``."""
        name = self.type.display_name
        if self.type == TokenType.INT:
            return f"{name}({self.literal})"
        if self.type == TokenType.BOOL:
            return f"{name}({'true' if self.literal else 'false'})"
        if self.type in (TokenType.IDENT, TokenType.ILLEGAL):
            return f'{name}("{self.literal}")'
        return name

    def __str__(self) -> str:
        return self.describe()


def _is_letter(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Tokenizer for Monkey source code."""

    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _loc(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in (" ", "\t", "\r", "\n"):
            self._advance()

    def _read_while(self, predicate) -> str:
        start = self.pos
        while self.pos < len(self.source) and predicate(self.source[self.pos]):
            self._advance()
        return self.source[start:self.pos]

    def _read_number(self, loc: SourceLocation) -> Token:
        digits = self._read_while(_is_digit)
        value = int(digits)
        if value > INT64_MAX:
            return Token(TokenType.ILLEGAL, digits, loc)
        return Token(TokenType.INT, value, loc)

    def _read_identifier(self, loc: SourceLocation) -> Token:
        word = self._read_while(lambda c: c.isalnum() or c == "_")
        if word in KEYWORDS:
            token_type, literal = KEYWORDS[word]
            return Token(token_type, literal, loc)
        return Token(TokenType.IDENT, word, loc)

    def next_token(self) -> Token:
        self._skip_whitespace()
        loc = self._loc()

        ch = self._peek()
        if ch is None:
            return Token(TokenType.EOF, None, loc)

        if _is_digit(ch):
            tok = self._read_number(loc)
        elif _is_letter(ch):
            tok = self._read_identifier(loc)
        elif ch in _WITH_EQUALS:
            self._advance()
            single, double = _WITH_EQUALS[ch]
            if self._peek() == "=":
                self._advance()
                tok = Token(double, None, loc)
            else:
                tok = Token(single, None, loc)
        elif ch in _SINGLE_CHAR:
            self._advance()
            tok = Token(_SINGLE_CHAR[ch], None, loc)
        else:
            self._advance()
            tok = Token(TokenType.ILLEGAL, ch, loc)

        if tok.type == TokenType.ILLEGAL:
            logger.debug("illegal token %s at %s", tok.describe(), loc)
        return tok

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TokenType.EOF:
                return


def tokenize(source: str, filename: str = "<stdin>") -> list[Token]:
    """Convenience function: every token of ``source`` up to and including EOF."""
    return list(Lexer(source, filename))

"""Monkey Parser — Pratt (precedence-climbing) parser.

Pulls tokens from a Lexer with one token of lookahead (``current`` and
``peek``) and builds a Program. Parsing never raises: every failed
expected-token check records a ParseError and aborts only the construct being
parsed, after which the statement loop carries on with the next token.
Input nested deeper than the interpreter stack allows ends the parse with a
single NESTING_TOO_DEEP error.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Optional

from monkey.ast_nodes import (
    Program, Statement, LetStmt, ReturnStmt, ExprStmt,
    Expr, Identifier, IntLiteral, BoolLiteral, PrefixExpr, InfixExpr,
    IfExpr, FunctionLiteral, CallExpr,
)
from monkey.errors import ParseError, nesting_too_deep, unexpected_token
from monkey.lexer import Lexer, Token, TokenType

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2
    LESS_GREATER = 3
    SUM = 4
    PRODUCT = 5
    PREFIX = 6
    CALL = 7


PRECEDENCES: dict[TokenType, Precedence] = {
    TokenType.EQUAL: Precedence.EQUALS,
    TokenType.NOT_EQUAL: Precedence.EQUALS,
    TokenType.LESS_THAN: Precedence.LESS_GREATER,
    TokenType.LESS_THAN_EQUAL: Precedence.LESS_GREATER,
    TokenType.GREATER_THAN: Precedence.LESS_GREATER,
    TokenType.GREATER_THAN_EQUAL: Precedence.LESS_GREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
}

INFIX_OPERATORS: dict[TokenType, str] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.ASTERISK: "*",
    TokenType.SLASH: "/",
    TokenType.EQUAL: "==",
    TokenType.NOT_EQUAL: "!=",
    TokenType.LESS_THAN: "<",
    TokenType.LESS_THAN_EQUAL: "<=",
    TokenType.GREATER_THAN: ">",
    TokenType.GREATER_THAN_EQUAL: ">=",
}

PREFIX_OPERATORS: dict[TokenType, str] = {
    TokenType.BANG: "!",
    TokenType.MINUS: "-",
}


def precedence_of(token: Token) -> Precedence:
    return PRECEDENCES.get(token.type, Precedence.LOWEST)


class Parser:
    """Pratt parser for Monkey."""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.errors: list[ParseError] = []
        # Both start as EOF placeholders and are filled by two advances.
        self.current = Token(TokenType.EOF)
        self.peek = Token(TokenType.EOF)
        self._next_token()
        self._next_token()

        self._prefix_fns: dict[TokenType, Callable[[], Optional[Expr]]] = {
            TokenType.IDENT: self._parse_identifier,
            TokenType.INT: self._parse_int_literal,
            TokenType.BOOL: self._parse_bool_literal,
            TokenType.BANG: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.IF: self._parse_if_expression,
            TokenType.FUNCTION: self._parse_function_literal,
        }

    # -------------------------------------------------------------------
    # Token handling
    # -------------------------------------------------------------------

    def _next_token(self) -> None:
        self.current = self.peek
        self.peek = self.lexer.next_token()

    def _current_is(self, tt: TokenType) -> bool:
        return self.current.type == tt

    def _peek_is(self, tt: TokenType) -> bool:
        return self.peek.type == tt

    def _expect_peek(self, tt: TokenType) -> bool:
        """Advance if ``peek`` is ``tt``; otherwise record an error."""
        if self._peek_is(tt):
            self._next_token()
            return True
        self._peek_error(tt)
        return False

    def _peek_error(self, tt: TokenType) -> None:
        error = unexpected_token(
            tt.display_name,
            self.peek.describe(),
            self.peek.location,
        )
        logger.debug("parse error: %s", error)
        self.errors.append(error)

    # -------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------

    def parse_program(self) -> Program:
        statements: list[Statement] = []
        try:
            while not self._current_is(TokenType.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self._next_token()
        except RecursionError:
            # The rest of the input is abandoned; the lexer is mid-construct.
            self.errors.append(nesting_too_deep(self.current.location))
        return Program(statements=statements, filename=self.lexer.filename)

    def parse_statement(self) -> Optional[Statement]:
        if self._current_is(TokenType.LET):
            return self._parse_let_statement()
        if self._current_is(TokenType.RETURN):
            return self._parse_return_statement()
        return self._parse_expression_statement()

    def _parse_let_statement(self) -> Optional[LetStmt]:
        loc = self.current.location
        if not self._expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.current.literal, location=self.current.location)

        if not self._expect_peek(TokenType.ASSIGN):
            return None
        self._next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_is(TokenType.SEMICOLON):
            self._next_token()
        return LetStmt(name, value, location=loc)

    def _parse_return_statement(self) -> Optional[ReturnStmt]:
        loc = self.current.location
        self._next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        if self._peek_is(TokenType.SEMICOLON):
            self._next_token()
        return ReturnStmt(value, location=loc)

    def _parse_expression_statement(self) -> Optional[ExprStmt]:
        loc = self.current.location
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        if self._peek_is(TokenType.SEMICOLON):
            self._next_token()
        return ExprStmt(expr, location=loc)

    def _parse_block(self) -> list[Statement]:
        """Statements up to the closing ``}``; an unterminated block ends at EOF."""
        self._next_token()
        block: list[Statement] = []
        while not self._current_is(TokenType.RBRACE) and not self._current_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                block.append(stmt)
            self._next_token()
        return block

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[Expr]:
        prefix = self._prefix_fns.get(self.current.type)
        if prefix is None:
            return None
        left = prefix()

        # Strict '<' keeps equal-precedence operators left-associative: the
        # right operand stops before the next operator of the same strength.
        while (
            left is not None
            and not self._peek_is(TokenType.SEMICOLON)
            and precedence < precedence_of(self.peek)
        ):
            if self.peek.type in INFIX_OPERATORS:
                self._next_token()
                left = self._parse_infix_expression(left)
            elif self._peek_is(TokenType.LPAREN):
                self._next_token()
                left = self._parse_call_expression(left)
            else:
                break
        return left

    def _parse_identifier(self) -> Identifier:
        return Identifier(self.current.literal, location=self.current.location)

    def _parse_int_literal(self) -> IntLiteral:
        return IntLiteral(self.current.literal, location=self.current.location)

    def _parse_bool_literal(self) -> BoolLiteral:
        return BoolLiteral(self.current.literal, location=self.current.location)

    def _parse_prefix_expression(self) -> Optional[PrefixExpr]:
        loc = self.current.location
        op = PREFIX_OPERATORS[self.current.type]
        self._next_token()

        operand = self.parse_expression(Precedence.PREFIX)
        if operand is None:
            return None
        return PrefixExpr(op, operand, location=loc)

    def _parse_infix_expression(self, left: Expr) -> Optional[InfixExpr]:
        loc = self.current.location
        op = INFIX_OPERATORS[self.current.type]
        precedence = precedence_of(self.current)
        self._next_token()

        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpr(op, left, right, location=loc)

    def _parse_grouped_expression(self) -> Optional[Expr]:
        self._next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        if not self._expect_peek(TokenType.RPAREN):
            return None
        return expr

    def _parse_if_expression(self) -> Optional[IfExpr]:
        loc = self.current.location
        if not self._expect_peek(TokenType.LPAREN):
            return None
        self._next_token()

        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self._expect_peek(TokenType.RPAREN):
            return None
        if not self._expect_peek(TokenType.LBRACE):
            return None
        consequence = self._parse_block()

        alternative: Optional[list[Statement]] = None
        if self._peek_is(TokenType.ELSE):
            self._next_token()
            if not self._expect_peek(TokenType.LBRACE):
                return None
            alternative = self._parse_block()

        return IfExpr(condition, consequence, alternative, location=loc)

    def _parse_function_literal(self) -> Optional[FunctionLiteral]:
        loc = self.current.location
        if not self._expect_peek(TokenType.LPAREN):
            return None

        params = self._parse_function_params()
        if params is None:
            return None
        if not self._expect_peek(TokenType.LBRACE):
            return None

        body = self._parse_block()
        return FunctionLiteral(params, body, location=loc)

    def _parse_function_params(self) -> Optional[list[Identifier]]:
        params: list[Identifier] = []
        if self._peek_is(TokenType.RPAREN):
            self._next_token()
            return params

        if not self._expect_peek(TokenType.IDENT):
            return None
        params.append(self._parse_identifier())

        while self._peek_is(TokenType.COMMA):
            self._next_token()
            if not self._expect_peek(TokenType.IDENT):
                return None
            params.append(self._parse_identifier())

        if not self._expect_peek(TokenType.RPAREN):
            return None
        return params

    def _parse_call_expression(self, callee: Expr) -> Optional[CallExpr]:
        loc = self.current.location
        args = self._parse_expression_list(TokenType.RPAREN)
        if args is None:
            return None
        return CallExpr(callee, args, location=loc)

    def _parse_expression_list(self, end: TokenType) -> Optional[list[Expr]]:
        items: list[Expr] = []
        if self._peek_is(end):
            self._next_token()
            return items

        self._next_token()
        expr = self.parse_expression(Precedence.LOWEST)
        if expr is None:
            return None
        items.append(expr)

        while self._peek_is(TokenType.COMMA):
            self._next_token()
            self._next_token()
            expr = self.parse_expression(Precedence.LOWEST)
            if expr is None:
                return None
            items.append(expr)

        if not self._expect_peek(end):
            return None
        return items


def parse(source: str, filename: str = "<stdin>") -> tuple[Program, list[ParseError]]:
    """Convenience function: parse ``source`` into a Program plus its errors."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    return program, parser.errors

"""Recursive-descent parser for calculator expressions.

Precedence, lowest first::

    program     := statement (';' statement)* ';'?
    statement   := IDENT '=' statement | addExpr
    addExpr     := term (('+'|'-') term)*
    term        := unary (('*'|'/'|'%') unary)*
    unary       := ('+'|'-') unary | power
    power       := implicitMul ('^' power)?
    implicitMul := postfix (postfix)*
    postfix     := factor ('!')*
    factor      := NUMBER | CONST | FUNC_CALL | VAR | '(' statement ')' | '[' list? ']'

Implicit multiplication only starts at an identifier or ``(``, so two
adjacent number literals are a syntax error rather than a product.
"""

from __future__ import annotations

import logging
import math
from typing import Final, NoReturn

from .ast import ArrayLiteral, Assign, BinaryOp, Expr, Factorial, FunctionCall, Number, StatementList, UnaryOp, Variable
from .errors import ErrorCode, raise_error
from .lexer import Lexer, Token, TokenKind

logger = logging.getLogger(__name__)

CONSTANTS: Final[dict[str, float]] = {
    "PI": math.pi,
    "E": math.e,
}

_TOKEN_NAMES: Final[dict[TokenKind, str]] = {
    TokenKind.NUMBER: "NUMBER",
    TokenKind.IDENTIFIER: "IDENTIFIER",
    TokenKind.PLUS: "'+'",
    TokenKind.MINUS: "'-'",
    TokenKind.MULTIPLY: "'*'",
    TokenKind.DIVIDE: "'/'",
    TokenKind.MODULO: "'%'",
    TokenKind.POWER: "'^'",
    TokenKind.FACTORIAL: "'!'",
    TokenKind.ASSIGN: "'='",
    TokenKind.COMMA: "','",
    TokenKind.SEMICOLON: "';'",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.LBRACKET: "'['",
    TokenKind.RBRACKET: "']'",
    TokenKind.EOF: "END_OF_EXPRESSION",
}

_ADDITIVE_OPS = {TokenKind.PLUS, TokenKind.MINUS}
_MULTIPLICATIVE_OPS = {TokenKind.MULTIPLY, TokenKind.DIVIDE, TokenKind.MODULO}
_IMPLICIT_MUL_START = {TokenKind.IDENTIFIER, TokenKind.LPAREN}


def token_name(kind: TokenKind) -> str:
    return _TOKEN_NAMES.get(kind, "UNKNOWN_TYPE")


class Parser:
    """Builds an ``Expr`` tree from a ``Lexer`` token stream."""

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.current: Token = lexer.next_token()

    def parse(self) -> Expr:
        if self.current.kind == TokenKind.EOF:
            raise_error(ErrorCode.EMPTY_EXPRESSION, position=self.current.pos)

        statements: list[Expr] = [self._parse_statement()]
        while self.current.kind == TokenKind.SEMICOLON:
            self._advance()
            # A single trailing ';' is allowed.
            if self.current.kind != TokenKind.EOF:
                statements.append(self._parse_statement())

        if self.current.kind != TokenKind.EOF:
            raise_error(ErrorCode.EXTRA_CONTENT, self.current.pos, self.current.text, position=self.current.pos)

        logger.debug("parsed %d statement(s) from %r", len(statements), self.lexer.source)
        if len(statements) == 1:
            return statements[0]
        return StatementList(statements=tuple(statements))

    def _advance(self) -> Token:
        tok = self.current
        self.current = self.lexer.next_token()
        return tok

    def _expect(self, kind: TokenKind) -> Token:
        if self.current.kind != kind:
            self._error(kind)
        return self._advance()

    def _error(self, expected: TokenKind) -> NoReturn:
        tok = self.current
        raise_error(
            ErrorCode.SYNTAX_ERROR,
            tok.pos,
            token_name(expected),
            token_name(tok.kind),
            tok.text,
            position=tok.pos,
        )

    def _parse_statement(self) -> Expr:
        if self.current.kind == TokenKind.IDENTIFIER and self.lexer.peek_token().kind == TokenKind.ASSIGN:
            name = self._advance().text
            self._advance()
            # Right-associative: x = y = 5
            return Assign(name=name, value=self._parse_statement())
        return self._parse_additive()

    def _parse_additive(self) -> Expr:
        node = self._parse_term()
        while self.current.kind in _ADDITIVE_OPS:
            op = self._advance().text
            node = BinaryOp(op=op, left=node, right=self._parse_term())
        return node

    def _parse_term(self) -> Expr:
        node = self._parse_unary()
        while self.current.kind in _MULTIPLICATIVE_OPS:
            op = self._advance().text
            node = BinaryOp(op=op, left=node, right=self._parse_unary())
        return node

    def _parse_unary(self) -> Expr:
        if self.current.kind in _ADDITIVE_OPS:
            op = self._advance().text
            return UnaryOp(op=op, operand=self._parse_unary())
        return self._parse_power()

    def _parse_power(self) -> Expr:
        left = self._parse_implicit_mul()
        if self.current.kind == TokenKind.POWER:
            op = self._advance().text
            return BinaryOp(op=op, left=left, right=self._parse_power())
        return left

    def _parse_implicit_mul(self) -> Expr:
        node = self._parse_postfix()
        while self.current.kind in _IMPLICIT_MUL_START:
            node = BinaryOp(op="*", left=node, right=self._parse_postfix())
        return node

    def _parse_postfix(self) -> Expr:
        node = self._parse_factor()
        while self.current.kind == TokenKind.FACTORIAL:
            self._advance()
            node = Factorial(operand=node)
        return node

    def _parse_factor(self) -> Expr:
        tok = self.current

        if tok.kind == TokenKind.NUMBER:
            self._advance()
            return Number(value=float(tok.text))

        if tok.kind == TokenKind.IDENTIFIER:
            self._advance()
            constant = CONSTANTS.get(tok.text.upper())
            if constant is not None:
                return Number(value=constant)
            if self.current.kind == TokenKind.LPAREN:
                return FunctionCall(name=tok.text.lower(), args=self._parse_list(TokenKind.LPAREN, TokenKind.RPAREN))
            return Variable(name=tok.text)

        if tok.kind == TokenKind.LPAREN:
            self._advance()
            node = self._parse_statement()
            self._expect(TokenKind.RPAREN)
            return node

        if tok.kind == TokenKind.LBRACKET:
            return ArrayLiteral(items=self._parse_list(TokenKind.LBRACKET, TokenKind.RBRACKET))

        raise_error(ErrorCode.UNEXPECTED_TOKEN, tok.pos, token_name(tok.kind), tok.text, position=tok.pos)

    def _parse_list(self, open_kind: TokenKind, close_kind: TokenKind) -> tuple[Expr, ...]:
        self._expect(open_kind)
        items: list[Expr] = []
        if self.current.kind != close_kind:
            items.append(self._parse_statement())
            while self.current.kind == TokenKind.COMMA:
                self._advance()
                items.append(self._parse_statement())
        self._expect(close_kind)
        return tuple(items)


def parse(source: str) -> Expr:
    return Parser(Lexer(source)).parse()

"""Tokenization for calculator expressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ErrorCode, raise_error


class TokenKind(str, Enum):
    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"
    PLUS = "PLUS"
    MINUS = "MINUS"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    MODULO = "MODULO"
    POWER = "POWER"
    FACTORIAL = "FACTORIAL"
    ASSIGN = "ASSIGN"
    COMMA = "COMMA"
    SEMICOLON = "SEMICOLON"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MULTIPLY,
    "/": TokenKind.DIVIDE,
    "%": TokenKind.MODULO,
    "^": TokenKind.POWER,
    "!": TokenKind.FACTORIAL,
    "=": TokenKind.ASSIGN,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}

_DIGITS = frozenset("0123456789")


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _scan_digits(source: str, start: int) -> int:
    i = start
    while i < len(source) and source[i] in _DIGITS:
        i += 1
    return i


class Lexer:
    """Single-pass scanner with one token of lookahead.

    ``peek_token`` caches the next token so repeated peeks are free and
    side-effect free; ``next_token`` hands out the cached token first. Once
    the input is exhausted every call yields the same ``EOF`` token.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.index = 0
        self._peeked: Token | None = None

    def peek_token(self) -> Token:
        if self._peeked is None:
            self._peeked = self._scan_token()
        return self._peeked

    def next_token(self) -> Token:
        if self._peeked is not None:
            tok = self._peeked
            self._peeked = None
            return tok
        return self._scan_token()

    def _starts_number(self, i: int) -> bool:
        ch = self.source[i]
        if ch in _DIGITS:
            return True
        return ch == "." and i + 1 < len(self.source) and self.source[i + 1] in _DIGITS

    def _scan_number(self, start: int) -> int:
        source = self.source
        i = _scan_digits(source, start)
        if i < len(source) and source[i] == ".":
            i = _scan_digits(source, i + 1)
        if i < len(source) and source[i] in {"e", "E"}:
            i += 1
            if i < len(source) and source[i] in {"+", "-"}:
                i += 1
            exp_start = i
            i = _scan_digits(source, i)
            if i == exp_start:
                raise_error(ErrorCode.INVALID_SCIENTIFIC_NOTATION, exp_start, position=exp_start)
        return i

    def _scan_token(self) -> Token:
        source = self.source
        i = self.index

        while i < len(source) and source[i].isspace():
            i += 1

        if i >= len(source):
            self.index = i
            return Token(TokenKind.EOF, "", i, i)

        ch = source[i]

        if _is_ident_start(ch):
            start = i
            i += 1
            while i < len(source) and _is_ident_continue(source[i]):
                i += 1
            self.index = i
            return Token(TokenKind.IDENTIFIER, source[start:i], start, i)

        if self._starts_number(i):
            end = self._scan_number(i)
            self.index = end
            return Token(TokenKind.NUMBER, source[i:end], i, end)

        kind = _SINGLE_TOKENS.get(ch)
        if kind is not None:
            self.index = i + 1
            return Token(kind, ch, i, i + 1)

        raise_error(ErrorCode.ILLEGAL_CHARACTER, ch, i, position=i)


def tokenize(source: str) -> list[Token]:
    """Scan the whole source, ending with the ``EOF`` token."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.kind == TokenKind.EOF:
            return tokens

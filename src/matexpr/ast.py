"""AST nodes for calculator expressions and statement lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Assign:
    name: str
    value: "Expr"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Expr"


@dataclass(frozen=True)
class Factorial:
    operand: "Expr"


@dataclass(frozen=True)
class ArrayLiteral:
    items: tuple["Expr", ...]


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple["Expr", ...]


@dataclass(frozen=True)
class StatementList:
    statements: tuple["Expr", ...]


Expr = Union[Number, Variable, Assign, BinaryOp, UnaryOp, Factorial, ArrayLiteral, FunctionCall, StatementList]

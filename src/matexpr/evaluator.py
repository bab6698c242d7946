"""Tree-walking evaluator over scalar/array values."""

from __future__ import annotations

import logging
import math
from collections.abc import MutableMapping
from dataclasses import dataclass

from .ast import ArrayLiteral, Assign, BinaryOp, Expr, Factorial, FunctionCall, Number, StatementList, UnaryOp, Variable
from .config import MAX_FACTORIAL
from .errors import ErrorCode, ExpressionError, raise_error
from .functions import FunctionRegistry, default_registry
from .parser import parse
from .scalar_math import ieee_fmod, ieee_pow
from .values import Array, Scalar, Value, flatten, format_scalar, normalize_scalar, to_value

logger = logging.getLogger(__name__)

Context = MutableMapping[str, Value]


def _binary(op: str, left: float, right: float) -> float:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise_error(ErrorCode.DIVISION_BY_ZERO)
        return left / right
    if op == "%":
        if right == 0:
            raise_error(ErrorCode.MODULO_BY_ZERO)
        return ieee_fmod(left, right)
    if op == "^":
        return ieee_pow(left, right)
    raise_error(ErrorCode.UNKNOWN_OPERATOR, op)


def _factorial(value: float) -> float:
    if math.isnan(value) or value < 0 or (math.isfinite(value) and value != math.floor(value)):
        raise_error(ErrorCode.FACTORIAL_NEGATIVE, format_scalar(value))
    if value > MAX_FACTORIAL:
        raise_error(ErrorCode.FACTORIAL_TOO_LARGE)
    result = 1.0
    for i in range(2, int(value) + 1):
        result *= i
    return result


class Evaluator:
    """Evaluates AST nodes against a caller-owned variable context.

    Function calls resolve against ``registry``: the matrix table first, with
    arguments passed as values, then the scalar table, with every argument
    flattened into one list of floats.
    """

    def __init__(self, registry: FunctionRegistry | None = None) -> None:
        self.registry = default_registry() if registry is None else registry

    def evaluate_node(self, expr: Expr, context: Context) -> Value:
        if isinstance(expr, Number):
            return Scalar(expr.value)

        if isinstance(expr, Variable):
            if expr.name not in context:
                raise_error(ErrorCode.UNDEFINED_VARIABLE, expr.name)
            try:
                return to_value(context[expr.name])
            except TypeError:
                raise_error(ErrorCode.INVALID_VARIABLE_TYPE, expr.name)

        if isinstance(expr, Assign):
            value = self.evaluate_node(expr.value, context)
            context[expr.name] = value
            return value

        if isinstance(expr, BinaryOp):
            left = self.evaluate_node(expr.left, context)
            right = self.evaluate_node(expr.right, context)
            if not isinstance(left, Scalar):
                raise_error(ErrorCode.ARRAY_NOT_SUPPORTED_LEFT, expr.op)
            if not isinstance(right, Scalar):
                raise_error(ErrorCode.ARRAY_NOT_SUPPORTED_RIGHT, expr.op)
            return Scalar(normalize_scalar(_binary(expr.op, left.value, right.value)))

        if isinstance(expr, UnaryOp):
            operand = self.evaluate_node(expr.operand, context)
            if not isinstance(operand, Scalar):
                raise_error(ErrorCode.ARRAY_NOT_SUPPORTED_UNARY, expr.op)
            if expr.op == "+":
                return operand
            if expr.op == "-":
                return Scalar(-operand.value)
            raise_error(ErrorCode.UNKNOWN_UNARY_OPERATOR, expr.op)

        if isinstance(expr, Factorial):
            operand = self.evaluate_node(expr.operand, context)
            if not isinstance(operand, Scalar):
                raise_error(ErrorCode.ARRAY_NOT_SUPPORTED_FACTORIAL)
            return Scalar(_factorial(operand.value))

        if isinstance(expr, ArrayLiteral):
            return Array(items=tuple(self.evaluate_node(item, context) for item in expr.items))

        if isinstance(expr, FunctionCall):
            args = tuple(self.evaluate_node(arg, context) for arg in expr.args)
            matrix_fn = self.registry.matrix(expr.name)
            if matrix_fn is not None:
                return matrix_fn(args)
            scalar_fn = self.registry.scalar(expr.name)
            if scalar_fn is not None:
                values: list[float] = []
                for arg in args:
                    values.extend(flatten(arg))
                return Scalar(normalize_scalar(float(scalar_fn(tuple(values)))))
            raise_error(ErrorCode.UNKNOWN_FUNCTION, expr.name)

        if isinstance(expr, StatementList):
            result: Value = Scalar(0.0)
            for statement in expr.statements:
                result = self.evaluate_node(statement, context)
            return result

        raise TypeError(f"Unsupported expression node: {type(expr)!r}")

    def evaluate(self, source: str, context: Context | None = None) -> Value:
        ctx: Context = {} if context is None else context
        tree = parse(source)
        value = self.evaluate_node(tree, ctx)
        logger.debug("evaluated %r", source)
        return value


@dataclass(frozen=True)
class EvalResult:
    """Outcome of ``evaluate_result``: exactly one of ``value``/``error`` is set."""

    value: Value | None = None
    error: ExpressionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Value:
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


def evaluate(source: str, context: Context | None = None, *, registry: FunctionRegistry | None = None) -> Value:
    """Parse and evaluate ``source``; assignments are written into ``context``.

    Statements separated by ``;`` run in order and the last value is
    returned. Earlier assignments stay in ``context`` when a later statement
    fails.
    """
    return Evaluator(registry).evaluate(source, context)


def evaluate_result(
    source: str, context: Context | None = None, *, registry: FunctionRegistry | None = None
) -> EvalResult:
    try:
        return EvalResult(value=evaluate(source, context, registry=registry))
    except ExpressionError as exc:
        logger.debug("evaluation of %r failed: %s", source, exc)
        return EvalResult(error=exc)

"""matexpr public API."""

from .errors import (
    ErrorCode,
    ErrorFamily,
    ExpressionArithmeticError,
    ExpressionError,
    ExpressionFunctionError,
    ExpressionMatrixError,
    ExpressionOperatorError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    RegistryError,
)
from .evaluator import EvalResult, Evaluator, evaluate, evaluate_result
from .functions import FunctionRegistry, build_default_registry, default_registry
from .lexer import Lexer, Token, TokenKind, tokenize
from .parser import Parser, parse
from .values import (
    Array,
    Scalar,
    Value,
    ValueInfo,
    ValueKind,
    depth_of,
    flatten,
    format_value,
    shape_of,
    to_python,
    to_value,
    value_info,
)

__all__ = [
    "parse",
    "tokenize",
    "evaluate",
    "evaluate_result",
    "EvalResult",
    "Evaluator",
    "FunctionRegistry",
    "build_default_registry",
    "default_registry",
    "Lexer",
    "Token",
    "TokenKind",
    "Parser",
    "Scalar",
    "Array",
    "Value",
    "ValueInfo",
    "ValueKind",
    "flatten",
    "to_value",
    "to_python",
    "shape_of",
    "depth_of",
    "value_info",
    "format_value",
    "ErrorCode",
    "ErrorFamily",
    "ExpressionError",
    "ExpressionArithmeticError",
    "ExpressionSyntaxError",
    "ExpressionTypeError",
    "ExpressionFunctionError",
    "ExpressionMatrixError",
    "ExpressionOperatorError",
    "RegistryError",
]

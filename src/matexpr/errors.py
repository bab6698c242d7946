"""Structured error taxonomy for lexing, parsing and evaluation."""

from __future__ import annotations

from enum import Enum
from typing import NoReturn


class ErrorFamily(str, Enum):
    ARITHMETIC = "arithmetic"
    SYNTAX = "syntax"
    TYPE = "type"
    FUNCTION = "function"
    MATRIX = "matrix"
    OPERATOR = "operator"


class ErrorCode(Enum):
    """Stable machine code plus message template for every user-facing failure."""

    # arithmetic (A-series)
    DIVISION_BY_ZERO = (ErrorFamily.ARITHMETIC, "A001", "Division by zero")
    MODULO_BY_ZERO = (ErrorFamily.ARITHMETIC, "A002", "Modulo by zero")
    FACTORIAL_NEGATIVE = (ErrorFamily.ARITHMETIC, "A003", "Factorial requires a non-negative integer, but got {0}")
    FACTORIAL_TOO_LARGE = (ErrorFamily.ARITHMETIC, "A004", "Factorial parameter too large (maximum supported is 170!)")
    INTEGER_REQUIRED = (ErrorFamily.ARITHMETIC, "A005", "{0} requires integer arguments")
    PARAM_MUST_BE_POSITIVE = (ErrorFamily.ARITHMETIC, "A006", "{0} parameter must be greater than 0")
    SQRT_NEGATIVE = (ErrorFamily.ARITHMETIC, "A008", "sqrt parameter cannot be negative")
    STD_DEV_ZERO = (ErrorFamily.ARITHMETIC, "A009", "Standard deviation is 0, cannot calculate correlation coefficient")

    # syntax (S-series)
    SYNTAX_ERROR = (ErrorFamily.SYNTAX, "S001", "Syntax error at position {0}: expected {1}, but got {2} '{3}'")
    EMPTY_EXPRESSION = (ErrorFamily.SYNTAX, "S002", "Expression cannot be empty")
    UNEXPECTED_TOKEN = (
        ErrorFamily.SYNTAX,
        "S003",
        "Syntax error at position {0}: expected number, identifier, left parenthesis or left bracket, but got {1} '{2}'",
    )
    EXTRA_CONTENT = (ErrorFamily.SYNTAX, "S004", "Syntax error at position {0}: extra content after expression '{1}'")
    ILLEGAL_CHARACTER = (ErrorFamily.SYNTAX, "S005", "Illegal character '{0}' at position {1}")
    INVALID_SCIENTIFIC_NOTATION = (
        ErrorFamily.SYNTAX,
        "S006",
        "Invalid scientific notation format at position {0}: expected digit",
    )

    # type (T-series)
    ARRAY_NOT_SUPPORTED_LEFT = (ErrorFamily.TYPE, "T001", "Operator '{0}' does not support array as left operand")
    ARRAY_NOT_SUPPORTED_RIGHT = (ErrorFamily.TYPE, "T002", "Operator '{0}' does not support array as right operand")
    ARRAY_NOT_SUPPORTED_UNARY = (ErrorFamily.TYPE, "T003", "Unary operator '{0}' does not support array operands")
    ARRAY_NOT_SUPPORTED_FACTORIAL = (ErrorFamily.TYPE, "T004", "Factorial operator '!' does not support array operands")
    SCALAR_REQUIRED = (ErrorFamily.TYPE, "T005", "{0} axis parameter must be a scalar")
    UNDEFINED_VARIABLE = (ErrorFamily.TYPE, "T007", "Undefined variable: {0}")
    INVALID_VARIABLE_TYPE = (ErrorFamily.TYPE, "T008", "Variable {0} has incorrect value type")

    # function (F-series)
    UNKNOWN_FUNCTION = (ErrorFamily.FUNCTION, "F001", "Unknown function: {0}")
    INVALID_ARG_COUNT = (ErrorFamily.FUNCTION, "F002", "Function {0} requires {1} argument(s), but got {2}")
    INVALID_MIN_ARG_COUNT = (ErrorFamily.FUNCTION, "F003", "Function {0} requires at least {1} argument(s), but got {2}")
    LOG_INVALID_ARGS = (ErrorFamily.FUNCTION, "F004", "Function log requires 1 or 2 arguments, but got {0}")
    PERCENTILE_RANGE = (ErrorFamily.FUNCTION, "F005", "Percentile must be between 0 and 100")
    COV_EVEN_ARGS = (
        ErrorFamily.FUNCTION,
        "F006",
        "Covariance requires an even number of arguments (first half is X, second half is Y)",
    )
    COV_MIN_PAIRS = (ErrorFamily.FUNCTION, "F007", "Covariance calculation requires at least {0} data pairs")
    CORR_EVEN_ARGS = (
        ErrorFamily.FUNCTION,
        "F008",
        "Correlation requires an even number of arguments (first half is X, second half is Y)",
    )
    CORR_MIN_PAIRS = (ErrorFamily.FUNCTION, "F009", "Correlation calculation requires at least 2 data pairs")
    DOT_EVEN_ARGS = (
        ErrorFamily.FUNCTION,
        "F010",
        "Dot product requires an even number of arguments (first half is vector X, second half is vector Y)",
    )
    DIST_EVEN_ARGS = (
        ErrorFamily.FUNCTION,
        "F011",
        "Distance calculation requires an even number of arguments (first half is point X, second half is point Y)",
    )
    MANHATTAN_EVEN_ARGS = (
        ErrorFamily.FUNCTION,
        "F012",
        "Manhattan distance requires an even number of arguments (first half is point X, second half is point Y)",
    )
    LOG_BASE_INVALID = (ErrorFamily.FUNCTION, "F019", "log base must be greater than 0 and not equal to 1")
    LOG_PARAM_INVALID = (ErrorFamily.FUNCTION, "F020", "log parameter must be greater than 0")
    GEOMEAN_POSITIVE = (ErrorFamily.FUNCTION, "F021", "geomean parameters must be greater than 0")

    # matrix (M-series)
    MATRIX_REQUIRED = (ErrorFamily.MATRIX, "M001", "{0} requires a vector or matrix as parameter")
    MATRIX_EMPTY = (ErrorFamily.MATRIX, "M002", "{0} parameter cannot be empty")
    MATRIX_NOT_VECTOR = (ErrorFamily.MATRIX, "M003", "{0} requires a matrix, not a vector")
    MATRIX_ROW_NOT_ARRAY = (ErrorFamily.MATRIX, "M004", "{0}: row {1} is not an array")
    MATRIX_INCONSISTENT_COLS = (
        ErrorFamily.MATRIX,
        "M005",
        "{0}: all rows of the matrix must have the same number of columns",
    )
    MATRIX_SQUARE_REQUIRED = (
        ErrorFamily.MATRIX,
        "M006",
        "{0} requires a square matrix (number of rows must equal number of columns)",
    )
    MATRIX_ELEMENT_NOT_SCALAR = (ErrorFamily.MATRIX, "M007", "{0}: matrix elements must be scalars")
    MATRIX_DIMENSION_MISMATCH = (
        ErrorFamily.MATRIX,
        "M008",
        "matmul: matrix dimension mismatch, left matrix column count ({0}) must equal right matrix row count ({1})",
    )
    MATRIX_SINGULAR = (ErrorFamily.MATRIX, "M009", "Matrix is not invertible (singular matrix)")
    MATRIX_INVALID_AXIS = (ErrorFamily.MATRIX, "M010", "mean axis can only be 0 or 1")
    SOLVE_VECTOR_FORMAT = (
        ErrorFamily.MATRIX,
        "M011",
        "solve: right-hand side vector b must be a column vector (e.g., [[1],[2]]), not a row vector (e.g., [1,2])",
    )
    SOLVE_DIMENSION_MISMATCH = (
        ErrorFamily.MATRIX,
        "M012",
        "solve: row count of right-hand side vector b ({0}) must equal the order of coefficient matrix A ({1})",
    )
    COMB_NON_NEGATIVE = (ErrorFamily.MATRIX, "M014", "C(n,k) parameters must be non-negative")
    PERM_NON_NEGATIVE = (ErrorFamily.MATRIX, "M015", "P(n,k) parameters must be non-negative")

    # operator (O-series)
    UNKNOWN_OPERATOR = (ErrorFamily.OPERATOR, "O001", "Unknown operator: {0}")
    UNKNOWN_UNARY_OPERATOR = (ErrorFamily.OPERATOR, "O002", "Unknown unary operator: {0}")

    def __init__(self, family: ErrorFamily, code: str, template: str) -> None:
        self.family = family
        self.code = code
        self.template = template

    def format_message(self, *args: object) -> str:
        return self.template.format(*args)

    def format(self, *args: object) -> str:
        return f"[{self.code}] {self.format_message(*args)}"


class ExpressionError(Exception):
    """Base class for every user-facing expression failure."""

    def __init__(self, code: ErrorCode, *params: object) -> None:
        self.code = code
        self.params = params
        self.message = code.format_message(*params)
        super().__init__(code.format(*params))

    @property
    def family(self) -> ErrorFamily:
        return self.code.family


class ExpressionArithmeticError(ExpressionError):
    """Division/modulo by zero, factorial domain, integer and sign requirements."""


class ExpressionSyntaxError(ExpressionError):
    """Lexing or parsing failure; carries the offending source position."""

    def __init__(self, code: ErrorCode, *params: object, position: int | None = None) -> None:
        super().__init__(code, *params)
        self.position = position


class ExpressionTypeError(ExpressionError):
    """Scalar/array kind mismatch or unresolved variable."""


class ExpressionFunctionError(ExpressionError):
    """Unknown function, wrong argument count or function-specific domain failure."""


class ExpressionMatrixError(ExpressionError):
    """Matrix shape, squareness, singularity or axis failure."""


class ExpressionOperatorError(ExpressionError):
    """Operator symbol the evaluator does not know."""


class RegistryError(LookupError):
    """Function table misconfiguration detected while building a registry."""


_FAMILY_CLASSES: dict[ErrorFamily, type[ExpressionError]] = {
    ErrorFamily.ARITHMETIC: ExpressionArithmeticError,
    ErrorFamily.SYNTAX: ExpressionSyntaxError,
    ErrorFamily.TYPE: ExpressionTypeError,
    ErrorFamily.FUNCTION: ExpressionFunctionError,
    ErrorFamily.MATRIX: ExpressionMatrixError,
    ErrorFamily.OPERATOR: ExpressionOperatorError,
}


def make_error(code: ErrorCode, *params: object, position: int | None = None) -> ExpressionError:
    cls = _FAMILY_CLASSES[code.family]
    if cls is ExpressionSyntaxError:
        return ExpressionSyntaxError(code, *params, position=position)
    return cls(code, *params)


def raise_error(code: ErrorCode, *params: object, position: int | None = None) -> NoReturn:
    raise make_error(code, *params, position=position)

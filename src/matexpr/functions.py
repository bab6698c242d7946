"""Function registries: scalar functions over flattened floats, matrix functions over values."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Callable, Final

from . import matrix_math, scalar_math
from .errors import ErrorCode, RegistryError, raise_error
from .values import Array, Scalar, Value, flatten, normalize_scalar

logger = logging.getLogger(__name__)

ScalarFunction = Callable[[tuple[float, ...]], float]
MatrixFunction = Callable[[tuple[Value, ...]], Value]


def check_arg_count(name: str, args: tuple, expected: int) -> None:
    if len(args) != expected:
        raise_error(ErrorCode.INVALID_ARG_COUNT, name, expected, len(args))


def check_min_args(name: str, args: tuple, minimum: int) -> None:
    if len(args) < minimum:
        raise_error(ErrorCode.INVALID_MIN_ARG_COUNT, name, minimum, len(args))


def require(condition: bool, code: ErrorCode, *params: object) -> None:
    if not condition:
        raise_error(code, *params)


class FunctionRegistry:
    """Case-insensitive name tables for scalar and matrix functions.

    Aliases bind the alias name to the *same* callable object as the target;
    aliasing a name that is not registered is a configuration bug and raises
    ``RegistryError`` immediately.
    """

    def __init__(self) -> None:
        self.scalar_functions: dict[str, ScalarFunction] = {}
        self.matrix_functions: dict[str, MatrixFunction] = {}

    def register(self, name: str, fn: ScalarFunction) -> ScalarFunction:
        self.scalar_functions[name.lower()] = fn
        return fn

    def register_unary(self, name: str, fn: Callable[[float], float]) -> ScalarFunction:
        def apply(args: tuple[float, ...]) -> float:
            check_arg_count(name, args, 1)
            return fn(args[0])

        apply.__name__ = name
        return self.register(name, apply)

    def register_binary(self, name: str, fn: Callable[[float, float], float]) -> ScalarFunction:
        def apply(args: tuple[float, ...]) -> float:
            check_arg_count(name, args, 2)
            return fn(args[0], args[1])

        apply.__name__ = name
        return self.register(name, apply)

    def register_matrix(self, name: str, fn: MatrixFunction) -> MatrixFunction:
        self.matrix_functions[name.lower()] = fn
        return fn

    def alias(self, alias: str, target: str) -> None:
        fn = self.scalar_functions.get(target.lower())
        if fn is None:
            raise RegistryError(f"Cannot create alias {alias!r} for non-existent function {target!r}")
        self.scalar_functions[alias.lower()] = fn

    def matrix_alias(self, alias: str, target: str) -> None:
        fn = self.matrix_functions.get(target.lower())
        if fn is None:
            raise RegistryError(f"Cannot create alias {alias!r} for non-existent matrix function {target!r}")
        self.matrix_functions[alias.lower()] = fn

    def scalar(self, name: str) -> ScalarFunction | None:
        return self.scalar_functions.get(name.lower())

    def matrix(self, name: str) -> MatrixFunction | None:
        return self.matrix_functions.get(name.lower())

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return key in self.scalar_functions or key in self.matrix_functions

    def names(self) -> list[str]:
        return sorted(set(self.scalar_functions) | set(self.matrix_functions))


# -- unary helpers -----------------------------------------------------------


def _ieee(fn: Callable[[float], float], *, odd: bool = False) -> Callable[[float], float]:
    """Map Python math exceptions to the nan/inf results of IEEE doubles."""

    def apply(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.copysign(math.inf, x) if odd else math.inf
        except ValueError:
            return math.nan

    return apply


def _ln(x: float) -> float:
    require(x > 0, ErrorCode.PARAM_MUST_BE_POSITIVE, "ln")
    return math.log(x)


def _log10(x: float) -> float:
    require(x > 0, ErrorCode.PARAM_MUST_BE_POSITIVE, "log10")
    return math.log10(x)


def _sqrt(x: float) -> float:
    require(x >= 0, ErrorCode.SQRT_NEGATIVE)
    return math.sqrt(x)


def _finite_only(fn: Callable[[float], float]) -> Callable[[float], float]:
    def apply(x: float) -> float:
        if not math.isfinite(x):
            return x
        return float(fn(x))

    return apply


def _round_half_up(x: float) -> float:
    return math.floor(x + 0.5)


def _signum(x: float) -> float:
    if x == 0 or math.isnan(x):
        return x
    return math.copysign(1.0, x)


# -- variadic helpers --------------------------------------------------------


def _max(args: tuple[float, ...]) -> float:
    check_min_args("max", args, 2)
    if any(math.isnan(x) for x in args):
        return math.nan
    return max(args)


def _min(args: tuple[float, ...]) -> float:
    check_min_args("min", args, 2)
    if any(math.isnan(x) for x in args):
        return math.nan
    return min(args)


def _gcd(args: tuple[float, ...]) -> float:
    check_min_args("gcd", args, 2)
    result = scalar_math.require_integer(args[0], "gcd")
    for x in args[1:]:
        result = scalar_math.gcd(result, scalar_math.require_integer(x, "gcd"))
    return float(result)


def _lcm(args: tuple[float, ...]) -> float:
    check_min_args("lcm", args, 2)
    result = scalar_math.require_integer(args[0], "lcm")
    for x in args[1:]:
        result = scalar_math.lcm(result, scalar_math.require_integer(x, "lcm"))
    return float(result)


def _sum(args: tuple[float, ...]) -> float:
    check_min_args("sum", args, 1)
    return math.fsum(args) if all(math.isfinite(x) for x in args) else sum(args)


def _average(name: str, args: tuple[float, ...]) -> float:
    check_min_args(name, args, 1)
    return scalar_math.mean(args)


def _avg(args: tuple[float, ...]) -> float:
    return _average("avg", args)


def _prod(args: tuple[float, ...]) -> float:
    check_min_args("prod", args, 1)
    return math.prod(args)


def _count(args: tuple[float, ...]) -> float:
    return float(len(args))


def _median(args: tuple[float, ...]) -> float:
    check_min_args("median", args, 1)
    return scalar_math.median(args)


def _range(args: tuple[float, ...]) -> float:
    check_min_args("range", args, 1)
    return max(args) - min(args)


def _sumabs(args: tuple[float, ...]) -> float:
    check_min_args("sumabs", args, 1)
    return sum(abs(x) for x in args)


def _norm2(args: tuple[float, ...]) -> float:
    check_min_args("norm2", args, 1)
    return math.sqrt(scalar_math.sum_of_squares(args))


def _rms(args: tuple[float, ...]) -> float:
    check_min_args("rms", args, 1)
    return math.sqrt(scalar_math.sum_of_squares(args) / len(args))


def _geomean(args: tuple[float, ...]) -> float:
    check_min_args("geomean", args, 1)
    product = 1.0
    for x in args:
        require(x > 0, ErrorCode.GEOMEAN_POSITIVE)
        product *= x
    return scalar_math.ieee_pow(product, 1.0 / len(args))


def _var(args: tuple[float, ...]) -> float:
    check_min_args("var", args, 2)
    return scalar_math.variance(args, sample=True)


def _std(args: tuple[float, ...]) -> float:
    check_min_args("std", args, 2)
    return math.sqrt(scalar_math.variance(args, sample=True))


def _varp(args: tuple[float, ...]) -> float:
    check_min_args("varp", args, 1)
    return scalar_math.variance(args, sample=False)


def _stdp(args: tuple[float, ...]) -> float:
    check_min_args("stdp", args, 1)
    return math.sqrt(scalar_math.variance(args, sample=False))


def _percentile(args: tuple[float, ...]) -> float:
    check_min_args("percentile", args, 2)
    p = args[0]
    require(0 <= p <= 100, ErrorCode.PERCENTILE_RANGE)
    return scalar_math.percentile(p, args[1:])


def _paired(name: str, args: tuple[float, ...], even_code: ErrorCode) -> tuple[list[float], list[float]]:
    check_min_args(name, args, 2)
    require(len(args) % 2 == 0, even_code)
    return scalar_math.split_pairs(args)


def _cov(args: tuple[float, ...]) -> float:
    x, y = _paired("cov", args, ErrorCode.COV_EVEN_ARGS)
    require(len(x) >= 2, ErrorCode.COV_MIN_PAIRS, 2)
    return scalar_math.covariance(x, y, sample=True)


def _covp(args: tuple[float, ...]) -> float:
    x, y = _paired("covp", args, ErrorCode.COV_EVEN_ARGS)
    require(len(x) >= 1, ErrorCode.COV_MIN_PAIRS, 1)
    return scalar_math.covariance(x, y, sample=False)


def _corr(args: tuple[float, ...]) -> float:
    x, y = _paired("corr", args, ErrorCode.CORR_EVEN_ARGS)
    require(len(x) >= 2, ErrorCode.CORR_MIN_PAIRS)
    return scalar_math.correlation(x, y)


def _dot(args: tuple[float, ...]) -> float:
    x, y = _paired("dot", args, ErrorCode.DOT_EVEN_ARGS)
    return sum(a * b for a, b in zip(x, y))


def _dist(args: tuple[float, ...]) -> float:
    x, y = _paired("dist", args, ErrorCode.DIST_EVEN_ARGS)
    return math.sqrt(sum((a - b) * (a - b) for a, b in zip(x, y)))


def _manhattan(args: tuple[float, ...]) -> float:
    x, y = _paired("manhattan", args, ErrorCode.MANHATTAN_EVEN_ARGS)
    return sum(abs(a - b) for a, b in zip(x, y))


def _log(args: tuple[float, ...]) -> float:
    if len(args) == 1:
        require(args[0] > 0, ErrorCode.LOG_PARAM_INVALID)
        return math.log10(args[0])
    if len(args) == 2:
        base, x = args
        require(base > 0 and base != 1, ErrorCode.LOG_BASE_INVALID)
        require(x > 0, ErrorCode.LOG_PARAM_INVALID)
        return math.log(x) / math.log(base)
    raise_error(ErrorCode.LOG_INVALID_ARGS, len(args))


def _counting_args(name: str, args: tuple[float, ...], sign_code: ErrorCode) -> tuple[int, int]:
    """Truncate ``n, k`` toward zero; both must be finite and non-negative."""
    check_arg_count(name, args, 2)
    if not all(math.isfinite(x) for x in args):
        raise_error(ErrorCode.INTEGER_REQUIRED, name)
    n, k = int(args[0]), int(args[1])
    require(n >= 0 and k >= 0, sign_code)
    return n, k


def _comb(args: tuple[float, ...]) -> float:
    n, k = _counting_args("C", args, ErrorCode.COMB_NON_NEGATIVE)
    if k > n:
        return 0.0
    k = min(k, n - k)
    result = 1.0
    for i in range(1, k + 1):
        result = result * (n - k + i) / i
    return result


def _perm(args: tuple[float, ...]) -> float:
    n, k = _counting_args("P", args, ErrorCode.PERM_NON_NEGATIVE)
    if k > n:
        return 0.0
    result = 1.0
    for i in range(k):
        result *= n - i
    return result


# -- matrix functions --------------------------------------------------------


def _transpose(args: tuple[Value, ...]) -> Value:
    check_arg_count("transpose", args, 1)
    return matrix_math.transpose(args[0])


def _det(args: tuple[Value, ...]) -> Value:
    check_arg_count("det", args, 1)
    return Scalar(matrix_math.determinant(args[0]))


def _matmul(args: tuple[Value, ...]) -> Value:
    check_arg_count("matmul", args, 2)
    return matrix_math.matmul(args[0], args[1])


def _trace(args: tuple[Value, ...]) -> Value:
    check_arg_count("trace", args, 1)
    return Scalar(matrix_math.trace(args[0]))


def _rank(args: tuple[Value, ...]) -> Value:
    check_arg_count("rank", args, 1)
    return Scalar(float(matrix_math.rank(args[0])))


def _inv(args: tuple[Value, ...]) -> Value:
    check_arg_count("inv", args, 1)
    return matrix_math.inverse(args[0])


def _solve(args: tuple[Value, ...]) -> Value:
    check_arg_count("solve", args, 2)
    return matrix_math.solve(args[0], args[1])


def _mean(args: tuple[Value, ...]) -> Value:
    # mean(array, axis) is the matrix form; everything else averages the flattened arguments.
    if len(args) == 2 and isinstance(args[0], Array):
        if not isinstance(args[1], Scalar):
            raise_error(ErrorCode.SCALAR_REQUIRED, "mean")
        axis = args[1].value
        if not math.isfinite(axis):
            raise_error(ErrorCode.MATRIX_INVALID_AXIS)
        return matrix_math.mean(args[0], int(axis))
    values: list[float] = []
    for arg in args:
        values.extend(flatten(arg))
    return Scalar(normalize_scalar(_average("mean", tuple(values))))


_UNARY: Final[dict[str, Callable[[float], float]]] = {
    "sin": _ieee(math.sin),
    "cos": _ieee(math.cos),
    "tan": _ieee(math.tan),
    "asin": _ieee(math.asin),
    "acos": _ieee(math.acos),
    "atan": math.atan,
    "sinh": _ieee(math.sinh, odd=True),
    "cosh": _ieee(math.cosh),
    "tanh": math.tanh,
    "exp": _ieee(math.exp),
    "ln": _ln,
    "log10": _log10,
    "sqrt": _sqrt,
    "cbrt": math.cbrt,
    "abs": abs,
    "ceil": _finite_only(math.ceil),
    "floor": _finite_only(math.floor),
    "round": _finite_only(_round_half_up),
    "signum": _signum,
    "degrees": math.degrees,
    "radians": math.radians,
}

_BINARY: Final[dict[str, Callable[[float, float], float]]] = {
    "pow": scalar_math.ieee_pow,
    "hypot": math.hypot,
    "atan2": math.atan2,
}

_VARIADIC: Final[dict[str, ScalarFunction]] = {
    "max": _max,
    "min": _min,
    "gcd": _gcd,
    "lcm": _lcm,
    "sum": _sum,
    "avg": _avg,
    "prod": _prod,
    "count": _count,
    "median": _median,
    "range": _range,
    "sumabs": _sumabs,
    "norm2": _norm2,
    "rms": _rms,
    "geomean": _geomean,
    "var": _var,
    "std": _std,
    "varp": _varp,
    "stdp": _stdp,
    "percentile": _percentile,
    "cov": _cov,
    "covp": _covp,
    "corr": _corr,
    "dot": _dot,
    "dist": _dist,
    "manhattan": _manhattan,
    "log": _log,
    "c": _comb,
    "p": _perm,
}

_ALIASES: Final[dict[str, str]] = {
    "sign": "signum",
    "product": "prod",
    "mean": "avg",
    "norm1": "sumabs",
    "variance": "var",
    "stddev": "std",
    "variancep": "varp",
    "stddevp": "stdp",
    "pctl": "percentile",
    "covariance": "cov",
    "covariancep": "covp",
    "correlation": "corr",
    "dotprod": "dot",
    "distance": "dist",
    "euclidean": "dist",
    "taxicab": "manhattan",
    "comb": "c",
    "perm": "p",
}

_MATRIX: Final[dict[str, MatrixFunction]] = {
    "transpose": _transpose,
    "det": _det,
    "matmul": _matmul,
    "trace": _trace,
    "rank": _rank,
    "mean": _mean,
    "inv": _inv,
    "solve": _solve,
}

_MATRIX_ALIASES: Final[dict[str, str]] = {
    "t": "transpose",
    "determinant": "det",
    "inverse": "inv",
}


def build_default_registry() -> FunctionRegistry:
    """Build a fresh registry holding every built-in function and alias."""
    registry = FunctionRegistry()
    for name, fn in _UNARY.items():
        registry.register_unary(name, fn)
    for name, fn in _BINARY.items():
        registry.register_binary(name, fn)
    for name, fn in _VARIADIC.items():
        registry.register(name, fn)
    for alias, target in _ALIASES.items():
        registry.alias(alias, target)
    for name, fn in _MATRIX.items():
        registry.register_matrix(name, fn)
    for alias, target in _MATRIX_ALIASES.items():
        registry.matrix_alias(alias, target)
    logger.debug(
        "built function registry: %d scalar, %d matrix entries",
        len(registry.scalar_functions),
        len(registry.matrix_functions),
    )
    return registry


@lru_cache(maxsize=1)
def default_registry() -> FunctionRegistry:
    """Process-wide registry shared by evaluators that are not given one."""
    return build_default_registry()

from __future__ import annotations

import math
import unittest


def _run(source: str) -> str:
    from matexpr import evaluate, format_value

    return format_value(evaluate(source))


def _value(source: str) -> float:
    from matexpr import evaluate

    return evaluate(source).value


class _ErrorMixin:
    def _error(self, source: str):
        from matexpr import ExpressionError, evaluate

        with self.assertRaises(ExpressionError) as ctx:  # type: ignore[attr-defined]
            evaluate(source)
        return ctx.exception


class UnaryFunctionTests(_ErrorMixin, unittest.TestCase):
    def test_roots_and_logs(self) -> None:
        self.assertEqual(_run("sqrt(16)"), "4")
        self.assertEqual(_run("cbrt(27)"), "3")
        self.assertEqual(_run("cbrt(-8)"), "-2")
        self.assertEqual(_run("ln(E)"), "1")
        self.assertEqual(_run("log10(1000)"), "3")
        self.assertEqual(_run("exp(0)"), "1")

    def test_domain_errors(self) -> None:
        from matexpr import ErrorCode, ExpressionArithmeticError

        err = self._error("sqrt(-1)")
        self.assertIsInstance(err, ExpressionArithmeticError)
        self.assertIs(err.code, ErrorCode.SQRT_NEGATIVE)
        self.assertEqual(str(self._error("ln(0)")), "[A006] ln parameter must be greater than 0")
        self.assertEqual(str(self._error("log10(-5)")), "[A006] log10 parameter must be greater than 0")

    def test_rounding(self) -> None:
        self.assertEqual(_run("round(2.5)"), "3")
        self.assertEqual(_run("round(-2.5)"), "-2")
        self.assertEqual(_run("round(2.4)"), "2")
        self.assertEqual(_run("ceil(1.2)"), "2")
        self.assertEqual(_run("floor(-1.2)"), "-2")
        self.assertEqual(_run("abs(-3)"), "3")
        self.assertEqual(_run("floor(10^400)"), "Infinity")

    def test_sign_and_angles(self) -> None:
        self.assertEqual(_run("signum(-4)"), "-1")
        self.assertEqual(_run("sign(0)"), "0")
        self.assertEqual(_run("sign(2.5)"), "1")
        self.assertEqual(_run("degrees(PI)"), "180")
        self.assertAlmostEqual(_value("radians(180)"), math.pi, places=12)
        self.assertAlmostEqual(_value("atan2(1, 1)"), math.pi / 4, places=12)
        self.assertEqual(_run("sin(PI/2)"), "1")
        self.assertEqual(_run("tanh(0)"), "0")

    def test_ieee_results(self) -> None:
        self.assertEqual(_run("asin(2)"), "NaN")
        self.assertEqual(_run("exp(1000)"), "Infinity")
        self.assertEqual(_run("sinh(-1000)"), "-Infinity")
        self.assertEqual(_run("cosh(1000)"), "Infinity")

    def test_binary_functions(self) -> None:
        self.assertEqual(_run("pow(2, 10)"), "1024")
        self.assertEqual(_run("hypot(3, 4)"), "5")

    def test_fixed_arity(self) -> None:
        from matexpr import ErrorCode

        err = self._error("sin(1, 2)")
        self.assertIs(err.code, ErrorCode.INVALID_ARG_COUNT)
        self.assertEqual(str(err), "[F002] Function sin requires 1 argument(s), but got 2")
        self.assertIs(self._error("pow(2)").code, ErrorCode.INVALID_ARG_COUNT)

    def test_array_arguments_are_flattened(self) -> None:
        self.assertEqual(_run("sqrt([9])"), "3")
        self.assertEqual(_run("hypot([3, 4])"), "5")


class VariadicFunctionTests(_ErrorMixin, unittest.TestCase):
    def test_min_max(self) -> None:
        from matexpr import ErrorCode

        self.assertEqual(_run("max(3, 7, 2)"), "7")
        self.assertEqual(_run("min([4, 1, 9])"), "1")
        err = self._error("max(1)")
        self.assertIs(err.code, ErrorCode.INVALID_MIN_ARG_COUNT)
        self.assertEqual(str(err), "[F003] Function max requires at least 2 argument(s), but got 1")

    def test_min_max_propagate_nan_in_any_position(self) -> None:
        self.assertEqual(_run("max(1, (-8)^(1/3))"), "NaN")
        self.assertEqual(_run("max((-8)^(1/3), 1)"), "NaN")
        self.assertEqual(_run("min(1, (-8)^(1/3))"), "NaN")
        self.assertEqual(_run("min((-8)^(1/3), 1)"), "NaN")
        self.assertEqual(_run("max(2, 1, (-8)^(1/3), 3)"), "NaN")

    def test_mean_arity_error_names_mean(self) -> None:
        self.assertEqual(str(self._error("mean()")), "[F003] Function mean requires at least 1 argument(s), but got 0")
        self.assertEqual(str(self._error("avg()")), "[F003] Function avg requires at least 1 argument(s), but got 0")

    def test_aggregates(self) -> None:
        self.assertEqual(_run("sum(1, 2, 3)"), "6")
        self.assertEqual(_run("sum([[1, 2], [3, 4]])"), "10")
        self.assertEqual(_run("avg(1, 2, 3, 4)"), "2.5")
        self.assertEqual(_run("mean(1, 2, 3)"), "2")
        self.assertEqual(_run("prod(2, 3, 4)"), "24")
        self.assertEqual(_run("product(2, 3, 4)"), "24")
        self.assertEqual(_run("count()"), "0")
        self.assertEqual(_run("count([1, 2], [3])"), "3")
        self.assertEqual(_run("median(3, 1, 2)"), "2")
        self.assertEqual(_run("median(4, 1, 3, 2)"), "2.5")
        self.assertEqual(_run("range(3, 9, 1)"), "8")
        self.assertEqual(_run("sumabs(-1, 2, -3)"), "6")
        self.assertEqual(_run("norm1(-1, 2, -3)"), "6")
        self.assertEqual(_run("norm2(3, 4)"), "5")
        self.assertAlmostEqual(_value("rms(3, 4)"), math.sqrt(12.5), places=12)
        self.assertEqual(_run("geomean(2, 8)"), "4")

    def test_aggregate_errors(self) -> None:
        from matexpr import ErrorCode

        self.assertIs(self._error("sum()").code, ErrorCode.INVALID_MIN_ARG_COUNT)
        self.assertIs(self._error("geomean(1, -1)").code, ErrorCode.GEOMEAN_POSITIVE)

    def test_gcd_lcm(self) -> None:
        self.assertEqual(_run("gcd(12, 18)"), "6")
        self.assertEqual(_run("gcd(12, 18, 8)"), "2")
        self.assertEqual(_run("gcd(0, 5)"), "5")
        self.assertEqual(_run("lcm(4, 6)"), "12")
        self.assertEqual(_run("lcm(0, 5)"), "0")
        self.assertEqual(str(self._error("gcd(12, 2.5)")), "[A005] gcd requires integer arguments")

    def test_variance_family(self) -> None:
        from matexpr import ErrorCode

        data = "2, 4, 4, 4, 5, 5, 7, 9"
        self.assertAlmostEqual(_value(f"var({data})"), 32 / 7, places=12)
        self.assertAlmostEqual(_value(f"variance({data})"), 32 / 7, places=12)
        self.assertAlmostEqual(_value(f"std({data})"), math.sqrt(32 / 7), places=12)
        self.assertEqual(_run(f"varp({data})"), "4")
        self.assertEqual(_run(f"stdp({data})"), "2")
        self.assertEqual(_run(f"stddevp({data})"), "2")
        self.assertIs(self._error("std(1)").code, ErrorCode.INVALID_MIN_ARG_COUNT)
        self.assertEqual(_run("varp(5)"), "0")

    def test_percentile(self) -> None:
        from matexpr import ErrorCode

        self.assertEqual(_run("percentile(50, 1, 2, 3, 4)"), "2.5")
        self.assertEqual(_run("pctl(0, 5, 1)"), "1")
        self.assertEqual(_run("percentile(100, 5, 1, 3)"), "5")
        self.assertEqual(_run("percentile(25, 7)"), "7")
        self.assertEqual(str(self._error("percentile(101, 1)")), "[F005] Percentile must be between 0 and 100")
        self.assertIs(self._error("percentile(50)").code, ErrorCode.INVALID_MIN_ARG_COUNT)

    def test_covariance_and_correlation(self) -> None:
        from matexpr import ErrorCode

        self.assertEqual(_run("cov(1, 2, 3, 2, 4, 6)"), "2")
        self.assertAlmostEqual(_value("covp(1, 2, 3, 2, 4, 6)"), 4 / 3, places=12)
        self.assertEqual(_run("covp(1, 2)"), "0")
        self.assertEqual(_run("corr(1, 2, 3, 2, 4, 6)"), "1")
        self.assertEqual(_run("correlation(1, 2, 3, 6, 4, 2)"), "-1")
        self.assertIs(self._error("cov(1, 2, 3)").code, ErrorCode.COV_EVEN_ARGS)
        self.assertEqual(
            str(self._error("cov(1, 2)")),
            "[F007] Covariance calculation requires at least 2 data pairs",
        )
        self.assertIs(self._error("corr(1, 2)").code, ErrorCode.CORR_MIN_PAIRS)
        self.assertIs(self._error("corr(1, 2, 3)").code, ErrorCode.CORR_EVEN_ARGS)
        self.assertIs(self._error("corr(1, 1, 1, 2, 3, 4)").code, ErrorCode.STD_DEV_ZERO)

    def test_vector_pairs(self) -> None:
        from matexpr import ErrorCode

        self.assertEqual(_run("dot(1, 2, 3, 4, 5, 6)"), "32")
        self.assertEqual(_run("dotprod([1, 2, 3], [4, 5, 6])"), "32")
        self.assertEqual(_run("dist(0, 0, 3, 4)"), "5")
        self.assertEqual(_run("euclidean(0, 0, 3, 4)"), "5")
        self.assertEqual(_run("manhattan(1, 2, 4, 6)"), "7")
        self.assertEqual(_run("taxicab(1, 2, 4, 6)"), "7")
        self.assertIs(self._error("dot(1, 2, 3)").code, ErrorCode.DOT_EVEN_ARGS)
        self.assertIs(self._error("dist(1, 2, 3)").code, ErrorCode.DIST_EVEN_ARGS)
        self.assertIs(self._error("manhattan(1, 2, 3)").code, ErrorCode.MANHATTAN_EVEN_ARGS)

    def test_log_overloads(self) -> None:
        from matexpr import ErrorCode

        self.assertEqual(_run("log(100)"), "2")
        self.assertEqual(_run("log(2, 8)"), "3")
        self.assertIs(self._error("log(1, 5)").code, ErrorCode.LOG_BASE_INVALID)
        self.assertIs(self._error("log(2, -1)").code, ErrorCode.LOG_PARAM_INVALID)
        self.assertIs(self._error("log(0)").code, ErrorCode.LOG_PARAM_INVALID)
        self.assertEqual(str(self._error("log(1, 2, 3)")), "[F004] Function log requires 1 or 2 arguments, but got 3")
        self.assertIs(self._error("log()").code, ErrorCode.LOG_INVALID_ARGS)

    def test_combinatorics(self) -> None:
        from matexpr import ErrorCode, ExpressionMatrixError

        self.assertEqual(_run("C(5, 2)"), "10")
        self.assertEqual(_run("comb(52, 5)"), "2598960")
        self.assertEqual(_run("c(5, 0)"), "1")
        self.assertEqual(_run("P(5, 2)"), "20")
        self.assertEqual(_run("perm(4, 4)"), "24")
        self.assertEqual(_run("C(2, 5)"), "0")
        self.assertEqual(_run("P(2, 5)"), "0")
        err = self._error("C(-1, 2)")
        self.assertIsInstance(err, ExpressionMatrixError)
        self.assertEqual(str(err), "[M014] C(n,k) parameters must be non-negative")
        self.assertIs(self._error("P(3, -1)").code, ErrorCode.PERM_NON_NEGATIVE)
        self.assertEqual(str(self._error("C(1)")), "[F002] Function C requires 2 argument(s), but got 1")

    def test_combinatorics_reject_non_finite_arguments(self) -> None:
        from matexpr import ErrorCode, ExpressionArithmeticError, evaluate_result

        for source in ("C(10^400, 2)", "P((-8)^(1/3), 1)", "C(5, 10^400)", "P(10^400, 10^400)"):
            with self.subTest(source=source):
                err = self._error(source)
                self.assertIsInstance(err, ExpressionArithmeticError)
                self.assertIs(err.code, ErrorCode.INTEGER_REQUIRED)
        self.assertEqual(str(self._error("C(10^400, 2)")), "[A005] C requires integer arguments")
        result = evaluate_result("C(10^400, 2)")
        self.assertFalse(result.ok)
        self.assertIs(result.error.code, ErrorCode.INTEGER_REQUIRED)


class RegistryTests(unittest.TestCase):
    def test_aliases_share_the_function_object(self) -> None:
        from matexpr import default_registry

        registry = default_registry()
        for alias, target in (("mean", "avg"), ("stddev", "std"), ("variance", "var"), ("sign", "signum"), ("comb", "c")):
            with self.subTest(alias=alias):
                self.assertIs(registry.scalar(alias), registry.scalar(target))
        self.assertIs(registry.matrix("t"), registry.matrix("transpose"))
        self.assertIs(registry.matrix("inverse"), registry.matrix("inv"))
        self.assertIs(registry.matrix("determinant"), registry.matrix("det"))

    def test_lookup_is_case_insensitive(self) -> None:
        from matexpr import default_registry

        registry = default_registry()
        self.assertIs(registry.scalar("SIN"), registry.scalar("sin"))
        self.assertIn("Transpose", registry)
        self.assertNotIn("nope", registry)

    def test_alias_to_missing_function_is_a_registry_error(self) -> None:
        from matexpr import FunctionRegistry, RegistryError

        registry = FunctionRegistry()
        with self.assertRaises(RegistryError):
            registry.alias("x", "missing")
        with self.assertRaises(RegistryError):
            registry.matrix_alias("y", "missing")

    def test_default_registry_is_shared_and_builds_are_fresh(self) -> None:
        from matexpr import build_default_registry, default_registry

        self.assertIs(default_registry(), default_registry())
        fresh = build_default_registry()
        self.assertIsNot(fresh, default_registry())
        self.assertEqual(fresh.names(), default_registry().names())

    def test_registered_names(self) -> None:
        from matexpr import default_registry

        names = set(default_registry().names())
        for name in ("sin", "percentile", "manhattan", "transpose", "solve", "mean", "taxicab", "p"):
            self.assertIn(name, names)


if __name__ == "__main__":
    unittest.main()

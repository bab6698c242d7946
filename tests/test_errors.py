from __future__ import annotations

import unittest

from matexpr.errors import (
    ErrorCode,
    ErrorFamily,
    ExpressionArithmeticError,
    ExpressionError,
    ExpressionFunctionError,
    ExpressionMatrixError,
    ExpressionOperatorError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    make_error,
)


class ErrorCodeTests(unittest.TestCase):
    def test_codes_are_unique_and_match_family_prefix(self) -> None:
        prefixes = {
            ErrorFamily.ARITHMETIC: "A",
            ErrorFamily.SYNTAX: "S",
            ErrorFamily.TYPE: "T",
            ErrorFamily.FUNCTION: "F",
            ErrorFamily.OPERATOR: "O",
        }
        codes = [member.code for member in ErrorCode]
        self.assertEqual(len(codes), len(set(codes)))
        for member in ErrorCode:
            with self.subTest(member=member.name):
                expected = prefixes.get(member.family)
                if expected is not None:
                    self.assertTrue(member.code.startswith(expected))

    def test_format(self) -> None:
        self.assertEqual(ErrorCode.DIVISION_BY_ZERO.format(), "[A001] Division by zero")
        self.assertEqual(
            ErrorCode.INVALID_ARG_COUNT.format("sin", 1, 2),
            "[F002] Function sin requires 1 argument(s), but got 2",
        )
        self.assertEqual(ErrorCode.UNDEFINED_VARIABLE.format_message("z"), "Undefined variable: z")


class ExceptionFamilyTests(unittest.TestCase):
    def test_make_error_picks_family_class(self) -> None:
        cases = (
            (ErrorCode.MODULO_BY_ZERO, ExpressionArithmeticError),
            (ErrorCode.EMPTY_EXPRESSION, ExpressionSyntaxError),
            (ErrorCode.UNDEFINED_VARIABLE, ExpressionTypeError),
            (ErrorCode.UNKNOWN_FUNCTION, ExpressionFunctionError),
            (ErrorCode.MATRIX_SINGULAR, ExpressionMatrixError),
            (ErrorCode.UNKNOWN_OPERATOR, ExpressionOperatorError),
        )
        for code, cls in cases:
            with self.subTest(code=code.name):
                err = make_error(code, "x")
                self.assertIsInstance(err, cls)
                self.assertIsInstance(err, ExpressionError)
                self.assertIs(err.family, code.family)

    def test_error_fields(self) -> None:
        err = make_error(ErrorCode.ILLEGAL_CHARACTER, "#", 4, position=4)
        self.assertIsInstance(err, ExpressionSyntaxError)
        self.assertEqual(err.position, 4)
        self.assertEqual(err.params, ("#", 4))
        self.assertEqual(err.message, "Illegal character '#' at position 4")
        self.assertEqual(str(err), "[S005] Illegal character '#' at position 4")


if __name__ == "__main__":
    unittest.main()

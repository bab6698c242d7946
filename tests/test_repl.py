from __future__ import annotations

import contextlib
import io
import unittest


class ShellTests(unittest.TestCase):
    def _session(self, text: str) -> list[str]:
        from matexpr.repl import Shell

        out = io.StringIO()
        Shell(stdin=io.StringIO(text), stdout=out).run()
        return out.getvalue().splitlines()

    def test_results_update_ans(self) -> None:
        self.assertEqual(self._session("x = 3\nx * 2\nans + 1\n"), ["3", "6", "7"])

    def test_vars_and_clear_keep_ans(self) -> None:
        lines = self._session("x = 3\ny = [1, 2]\nvars\nclear\nvars\n")
        self.assertEqual(
            lines,
            [
                "3",
                "[1, 2]",
                "ans = [1, 2]",
                "x = 3",
                "y = [1, 2]",
                "Variables cleared",
                "ans = [1, 2]",
            ],
        )

    def test_errors_do_not_end_the_session(self) -> None:
        lines = self._session("1/0\nfoo(\n2 + 2\n")
        self.assertEqual(lines[0], "Error: [A001] Division by zero")
        self.assertTrue(lines[1].startswith("Error: [S003]"))
        self.assertEqual(lines[2], "4")

    def test_exit_commands_are_case_insensitive(self) -> None:
        for command in ("exit", "QUIT", "q"):
            with self.subTest(command=command):
                self.assertEqual(self._session(f"1\n{command}\n2\n"), ["1"])

    def test_help_and_blank_lines(self) -> None:
        from matexpr.repl import HELP_TEXT

        lines = self._session("\n   \nhelp\n?\n")
        self.assertEqual(lines, HELP_TEXT.splitlines() * 2)

    def test_initial_ans_is_zero(self) -> None:
        self.assertEqual(self._session("ans\n"), ["0"])


class MainTests(unittest.TestCase):
    def test_eval_flag_prints_result(self) -> None:
        from matexpr.repl import main

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            status = main(["-e", "2^3^2"])
        self.assertEqual(status, 0)
        self.assertEqual(out.getvalue(), "512\n")

    def test_eval_flag_reports_errors(self) -> None:
        from matexpr.repl import main

        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            status = main(["-e", "det([1, 2])"])
        self.assertEqual(status, 1)
        self.assertEqual(err.getvalue(), "Error: [M003] det requires a matrix, not a vector\n")


if __name__ == "__main__":
    unittest.main()
